"""Keybinding definitions for the minish shell."""

from dataclasses import dataclass
from enum import Enum

from prompt_toolkit.keys import Keys


class Action(str, Enum):
    """Shell actions that can be bound to keys."""

    # Loop control
    SUBMIT = "submit"
    EXIT = "exit"
    CLEAR_SCREEN = "clear_screen"

    # Completion and history
    COMPLETE = "complete"
    HISTORY_PREV = "history_prev"
    HISTORY_NEXT = "history_next"

    # Editing
    BACKSPACE = "backspace"
    DELETE = "delete"
    TOGGLE_OVERTYPE = "toggle_overtype"

    # Navigation
    HOME = "home"
    END = "end"
    LEFT = "left"
    RIGHT = "right"
    PREV_TOKEN = "prev_token"
    NEXT_TOKEN = "next_token"


@dataclass
class KeyBinding:
    """A single key binding."""

    keys: tuple[str, ...]
    action: Action
    description: str


# Default key bindings
DEFAULT_BINDINGS: list[KeyBinding] = [
    KeyBinding(keys=("enter",), action=Action.SUBMIT, description="Run the command line"),
    KeyBinding(keys=("c-d",), action=Action.EXIT, description="Exit the shell"),
    KeyBinding(keys=("c-l",), action=Action.CLEAR_SCREEN, description="Clear screen"),
    KeyBinding(
        keys=("tab",),
        action=Action.COMPLETE,
        description="Complete file or command name (press again to cycle)",
    ),
    KeyBinding(keys=("up",), action=Action.HISTORY_PREV, description="Previous history item"),
    KeyBinding(keys=("down",), action=Action.HISTORY_NEXT, description="Next history item"),
    KeyBinding(
        keys=("backspace",),
        action=Action.BACKSPACE,
        description="Delete character before cursor",
    ),
    KeyBinding(keys=("delete",), action=Action.DELETE, description="Delete character at cursor"),
    KeyBinding(
        keys=("insert",),
        action=Action.TOGGLE_OVERTYPE,
        description="Toggle insert / overtype mode",
    ),
    KeyBinding(keys=("home",), action=Action.HOME, description="Move to line start"),
    KeyBinding(keys=("end",), action=Action.END, description="Move to line end"),
    KeyBinding(keys=("left",), action=Action.LEFT, description="Move one character left"),
    KeyBinding(keys=("right",), action=Action.RIGHT, description="Move one character right"),
    KeyBinding(keys=("c-left",), action=Action.PREV_TOKEN, description="Move to previous word"),
    KeyBinding(keys=("c-right",), action=Action.NEXT_TOKEN, description="Move to next word"),
]


class KeymapManager:
    """Maps key names reported by prompt_toolkit to shell actions."""

    def __init__(self, bindings: list[KeyBinding] | None = None) -> None:
        self.bindings = list(bindings if bindings is not None else DEFAULT_BINDINGS)
        self._lookup: dict[str, Action] = {}
        for binding in self.bindings:
            # Only single-key chords; the shell reads one key at a time.
            if len(binding.keys) == 1:
                self._lookup.setdefault(self._convert_key(binding.keys[0]), binding.action)

    def resolve(self, key: str) -> Action | None:
        """Get the action bound to a prompt_toolkit key name."""
        return self._lookup.get(key)

    def get_shortcut_display(self, action: Action) -> str:
        """Get human-readable shortcut for an action."""
        for binding in self.bindings:
            if binding.action == action:
                return self._format_keys(binding.keys)
        return ""

    def _format_keys(self, keys: tuple[str, ...]) -> str:
        """Format keys for display."""
        result = []
        for key in keys:
            if key.startswith("c-"):
                result.append(f"Ctrl+{key[2:].capitalize()}")
            elif key.startswith("s-"):
                result.append(f"Shift+{key[2:].capitalize()}")
            else:
                result.append(key.capitalize())
        return " ".join(result)

    def get_help_text(self) -> list[tuple[str, str]]:
        """Get list of (shortcut, description) for help display."""
        seen_actions = set()
        result = []
        for binding in self.bindings:
            if binding.action not in seen_actions:
                seen_actions.add(binding.action)
                result.append((self._format_keys(binding.keys), binding.description))
        return result

    def _convert_key(self, key: str) -> str:
        """Convert our key name to the name prompt_toolkit reports."""
        if key == "enter":
            return Keys.Enter.value
        if key == "tab":
            return Keys.Tab.value
        if key == "backspace":
            return Keys.Backspace.value
        if key == "escape":
            return Keys.Escape.value
        # Raises ValueError for names prompt_toolkit does not know.
        return Keys(key).value
