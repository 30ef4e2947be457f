"""The interactive shell loop.

Reads one key at a time, edits the command line in place, browses history,
cycles completions with a preview below the line and dispatches submitted
lines to an external handler, programs on the search path, the built-in
commands or, as a last resort, the system command interpreter.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from rich.console import Console

from minish.builtins import BuiltinCommands
from minish.completion import CompletionEngine
from minish.config import ShellConfig
from minish.exceptions import ProcessLaunchError, SettingsError, ShellError, ShellWarning
from minish.history import CommandHistory
from minish.keymap import Action, KeymapManager
from minish.keys import KeyEvent, KeyReader
from minish.line_editor import CommandLine, LineEditor
from minish.process import ProcessLauncher, system_interpreter
from minish.settings import JsonSettingsFile, SettingsStore
from minish.terminal import Terminal, Vt100Terminal
from minish.ui import MessageType, show_message

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# State
# ═══════════════════════════════════════════════════════════════════════════════


class ShellMode(str, Enum):
    """What the loop is doing right now."""

    IDLE = "idle"
    READING = "reading"
    EDITING = "editing"
    HISTORY_BROWSING = "history_browsing"
    COMPLETION_BROWSING = "completion_browsing"
    SCREEN_CLEARING = "screen_clearing"
    SUBMITTING = "submitting"
    EXITING = "exiting"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class DispatchResult:
    """Outcome of dispatching one submitted line."""

    handled: bool = False
    should_exit: bool = False


CommandHandler = Callable[[CommandLine], DispatchResult | None]


class KeySource(Protocol):
    """Blocking key input with terminal mode switching."""

    def raw_mode(self): ...

    def cooked_mode(self): ...

    def read_key(self) -> KeyEvent: ...


_EDIT_ACTIONS: dict[Action, Callable[[LineEditor], object]] = {
    Action.BACKSPACE: LineEditor.backspace,
    Action.DELETE: LineEditor.delete,
    Action.TOGGLE_OVERTYPE: LineEditor.toggle_overtype,
    Action.HOME: LineEditor.home,
    Action.END: LineEditor.end,
    Action.LEFT: LineEditor.left,
    Action.RIGHT: LineEditor.right,
    Action.PREV_TOKEN: LineEditor.prev_token,
    Action.NEXT_TOKEN: LineEditor.next_token,
}


# ═══════════════════════════════════════════════════════════════════════════════
# Shell
# ═══════════════════════════════════════════════════════════════════════════════


class CommandShell:
    """
    Interactive command shell.

    Provides:
    - In-place line editing with token-aware navigation
    - History browsing with an unsaved draft, persisted between sessions
    - Tab completion of paths and command names with a preview
    - Built-in commands and external program execution
    """

    def __init__(
        self,
        config: ShellConfig | None = None,
        *,
        terminal: Terminal | None = None,
        keys: KeySource | None = None,
        console: Console | None = None,
        settings: SettingsStore | None = None,
        launcher: ProcessLauncher | None = None,
        handler: CommandHandler | None = None,
        keymap: KeymapManager | None = None,
    ) -> None:
        self.config = config or ShellConfig()
        self.terminal = terminal or Vt100Terminal()
        self.keys = keys or KeyReader()
        self.console = console or Console(highlight=False)
        if settings is None:
            settings = JsonSettingsFile(self.config.settings_file)
        self.settings = settings
        self.launcher = launcher or ProcessLauncher()
        self.handler = handler
        self.keymap = keymap or KeymapManager()

        self.builtins = BuiltinCommands(self)
        self.line = LineEditor()
        self.history = CommandHistory(max_entries=self.config.history_max_entries)
        self.completion = CompletionEngine(
            self.terminal,
            commands=self.builtins.names,
            peek_max=self.config.peek_max,
            peek_style=self.config.peek_style,
        )
        self.mode = ShellMode.IDLE
        self._line_origin: tuple[int, int] = (0, 0)
        self._rendered_length = 0

    # ── Loop ─────────────────────────────────────────────────────────────

    def run(self) -> None:
        """Run until the exit key, the ``exit`` command, or end of input."""
        self.load_history()
        self.show(self.config.header, MessageType.INFO)
        try:
            with self.keys.raw_mode():
                self.prompt()
                while True:
                    self.mode = ShellMode.READING
                    try:
                        event = self.keys.read_key()
                    except EOFError:
                        logger.debug("Input closed, leaving the shell")
                        break
                    if not self.handle_key(event):
                        break
        finally:
            self.mode = ShellMode.TERMINATED

    def handle_key(self, event: KeyEvent) -> bool:
        """Process one key press. Returns False when the loop should stop."""
        action = self.keymap.resolve(event.key)

        if self.history.is_browsing and action not in (Action.HISTORY_PREV, Action.HISTORY_NEXT):
            self.history.reset()
        if self.completion.is_active and action is not Action.COMPLETE:
            self.completion.reset()

        if action is Action.CLEAR_SCREEN:
            self.mode = ShellMode.SCREEN_CLEARING
            self.terminal.clear()
            self.prompt()
        elif action is Action.COMPLETE:
            self.mode = ShellMode.COMPLETION_BROWSING
            self._complete()
        elif action in (Action.HISTORY_PREV, Action.HISTORY_NEXT):
            self.mode = ShellMode.HISTORY_BROWSING
            self._browse_history(action)
        elif action is Action.SUBMIT:
            return self._submit()
        elif action is Action.EXIT:
            self.mode = ShellMode.EXITING
            self._leave_line()
            return False
        else:
            self.mode = ShellMode.EDITING
            self._edit(action, event)
        return True

    def _complete(self) -> None:
        if self.completion.current_index < 0:
            include_commands = (
                self.line.is_on_first_token or self.line.command in self.config.page_commands
            )
            self.completion.match(self.line.current_token, include_commands)
        replacement = self.completion.next()
        if replacement is None:
            return
        self.line.set_current_token(replacement)
        self.render_line()
        if len(self.completion) > 1:
            self.completion.peek(start_row=self._position_of(len(self.line.text))[0] + 1)

    def _browse_history(self, action: Action) -> None:
        if action is Action.HISTORY_PREV:
            entry = self.history.prev(self.line.text)
        else:
            entry = self.history.next()
        if entry is None:
            return
        self.line.set_text(entry)
        self.line.end()
        self.render_line()

    def _edit(self, action: Action | None, event: KeyEvent) -> None:
        edit = _EDIT_ACTIONS.get(action) if action is not None else None
        if edit is not None:
            edit(self.line)
        elif event.text:
            self.line.insert(event.text)
        else:
            logger.debug("Ignoring unbound key %s", event.key)
            return
        self.render_line()

    def _submit(self) -> bool:
        self.mode = ShellMode.SUBMITTING
        self.history.add(self.line.text)
        self.save_history()
        command_line = self.line.to_command_line()
        self._leave_line()
        self.line.clear()

        with self.keys.cooked_mode():
            result = self.dispatch(command_line)
        if result.should_exit:
            self.mode = ShellMode.EXITING
            return False

        self.mode = ShellMode.IDLE
        self.prompt()
        return True

    # ── Rendering ────────────────────────────────────────────────────────

    def prompt(self) -> None:
        """Write the prompt and the current line after it."""
        with self.terminal.lock:
            self.terminal.write(self.config.format_prompt(os.getcwd()), self.config.prompt_style)
            self._line_origin = self.terminal.get_cursor()
            self._rendered_length = 0
            self.render_line()

    def render_line(self) -> None:
        """Redraw the line over its previous rendering and place the cursor."""
        with self.terminal.lock:
            text = self.line.text
            padding = max(0, self._rendered_length - len(text))
            self.terminal.set_cursor(*self._line_origin)
            self.terminal.write(text + " " * padding)
            self._rendered_length = len(text)
            self.terminal.set_cursor(*self._position_of(self.line.cursor))

    def _leave_line(self) -> None:
        """Move below the rendered line so output starts on a fresh row."""
        with self.terminal.lock:
            self.terminal.set_cursor(*self._position_of(len(self.line.text)))
            self.terminal.write("\n")

    def _position_of(self, offset: int) -> tuple[int, int]:
        width, _ = self.terminal.get_size()
        row, col = self._line_origin
        absolute = col + offset
        return row + absolute // width, absolute % width

    def show(self, message: str | None, kind: MessageType = MessageType.CONTENT) -> None:
        with self.terminal.lock:
            show_message(self.console, message, kind)

    # ── Dispatch ─────────────────────────────────────────────────────────

    def dispatch(self, command_line: CommandLine) -> DispatchResult:
        """Run a submitted line. Errors are shown, never raised."""
        if self.handler is not None:
            try:
                result = self.handler(command_line)
            except Exception as e:
                logger.debug("Handler failed on %r", command_line.raw, exc_info=True)
                self.show(f"{command_line.command}: {e}", MessageType.ERROR)
                return DispatchResult(handled=True)
            if result is not None and (result.handled or result.should_exit):
                logger.debug("Command %r taken by handler", command_line.command)
                return result
        if command_line.is_empty:
            return DispatchResult(handled=True)

        try:
            return self._dispatch(command_line)
        except ShellWarning as e:
            self.show(str(e), MessageType.WARNING)
        except ProcessLaunchError as e:
            self.show(e.message, MessageType.ERROR)
        except ShellError as e:
            self.show(str(e), MessageType.ERROR)
        except OSError as e:
            logger.debug("Command %r failed", command_line.raw, exc_info=True)
            self.show(f"{command_line.command}: {e.strerror or e}", MessageType.ERROR)
        return DispatchResult(handled=True)

    def _dispatch(self, command_line: CommandLine) -> DispatchResult:
        name = command_line.command

        # A child process cannot change the shell's own state.
        if self.builtins.holds_shell_state(name):
            result = self._run_builtin(command_line)
            if result is not None:
                return result

        executable = self.launcher.which(name)
        if executable is not None:
            self.execute(
                executable, command_line.arguments.raw, redirect=self.config.redirect_output
            )
            return DispatchResult(handled=True)

        result = self._run_builtin(command_line)
        if result is not None:
            return result

        argv = system_interpreter(command_line.raw, self.config.interpreter)
        logger.debug("Passing %r to %s", command_line.raw, argv[0])
        self.execute(argv[0], argv[1:], redirect=False)
        return DispatchResult(handled=True)

    def _run_builtin(self, command_line: CommandLine) -> DispatchResult | None:
        name = command_line.command
        if name in self.builtins.pages and command_line.arguments.switches["?|help"]:
            self.builtins.man(name)
            return DispatchResult(handled=True)
        if name in self.builtins:
            should_exit = self.builtins.run(command_line)
            return DispatchResult(handled=True, should_exit=should_exit)
        return None

    def execute(self, executable: str, args: Sequence[str] = (), redirect: bool = False) -> int:
        """Run a program to completion and return its exit code."""
        handle = self.launcher.spawn(
            executable,
            args,
            redirect=redirect,
            on_stdout=self._on_stdout,
            on_stderr=self._on_stderr,
        )
        while True:
            try:
                code = handle.wait()
                break
            except KeyboardInterrupt:
                # Ctrl+C reached the child too; keep waiting for it to exit.
                logger.debug("Interrupt while waiting for %s", executable)
        logger.debug("%s exited with %s", executable, code)
        return code

    def _on_stdout(self, line: str) -> None:
        self.show(line, MessageType.CONTENT)

    def _on_stderr(self, line: str) -> None:
        self.show(line, MessageType.ERROR)

    # ── History persistence ──────────────────────────────────────────────

    def load_history(self) -> None:
        self.history = CommandHistory.from_base64(
            self.settings.get(self.config.history_key),
            max_entries=self.config.history_max_entries,
        )

    def save_history(self) -> None:
        self._store(self.history.to_base64())

    def clear_history(self) -> None:
        self.history.clear()
        self._store(None)

    def _store(self, value: str | None) -> None:
        self.settings.set(self.config.history_key, value)
        try:
            self.settings.write()
        except SettingsError as e:
            logger.warning("Could not persist history: %s", e)
            self.show(e.message, MessageType.ERROR)

    # ── Extension ────────────────────────────────────────────────────────

    def register_pages(self, pages: Mapping[str, Sequence[str]]) -> list[str]:
        """Add manual pages for commands served by the handler.

        Their names also become completion candidates. Existing pages are
        kept; the names actually added are returned.
        """
        added = self.builtins.add_pages(pages)
        self.completion.add_commands(added)
        return added
