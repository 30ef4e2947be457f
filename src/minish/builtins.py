"""Built-in shell commands and their micro-manual pages."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from minish.arguments import CommandArguments
from minish.exceptions import ShellWarning
from minish.keymap import Action
from minish.ui import CAT_BANNER, MessageType, render_listing, show_lines

if TYPE_CHECKING:
    from minish.line_editor import CommandLine
    from minish.shell import CommandShell

logger = logging.getLogger(__name__)

MAN_PAGES: dict[str, list[str]] = {
    "cat": [
        "Usage: cat [FILE]",
        "Concatenates a file to this shell output.",
    ],
    "cd": [
        "Usage: cd [DIRECTORY]",
        "Changes current directory or shows current directory when used without a parameter.",
    ],
    "cls": [
        "Usage: cls",
        "Clears the console window. Press {clear_screen} instead.",
    ],
    "exit": [
        "Usage: exit",
        "Exits this shell session. Press {exit} instead.",
    ],
    "history": [
        "Usage: history [-c|-clear]",
        "Shows current command history or clears it if '-clear' switch is used.",
    ],
    "ls": [
        "Usage: ls [DIRECTORY]",
        "Lists the detailed content of the current or specified directory.",
    ],
    "man": [
        "Usage: man [PAGE]",
        "Shows a micro-manual for the specified command of this shell.",
        "Shows list of available internal commands and key bindings",
        "when used without [PAGE] parameter.",
    ],
    "pwd": [
        "Usage: pwd",
        "Shows the path to the current working directory.",
    ],
    "touch": [
        "Usage: touch FILE",
        "Creates a new empty file, or sets the last write time of the existing one to current.",
    ],
}

# Built-ins that change the shell itself and so run before the search path.
SHELL_STATE_COMMANDS = frozenset({"cd", "cls", "exit", "history", "man"})


def _name_key(name: str) -> tuple[str, str]:
    return name.casefold(), name


class BuiltinCommands:
    """Commands handled inside the shell instead of by an external program."""

    def __init__(self, shell: "CommandShell") -> None:
        self.shell = shell
        shortcuts = {action.value: shell.keymap.get_shortcut_display(action) for action in Action}
        self.pages: dict[str, list[str]] = {
            name: [line.format(**shortcuts) for line in lines] for name, lines in MAN_PAGES.items()
        }
        self._commands: dict[str, Callable[[CommandArguments], bool | None]] = {
            "cat": self.cat,
            "cd": self.cd,
            "cls": self.cls,
            "exit": self.exit,
            "history": self.history,
            "ls": self.ls,
            "man": self.man,
            "pwd": self.pwd,
            "touch": self.touch,
        }

    @property
    def names(self) -> list[str]:
        return list(self._commands)

    def __contains__(self, name: object) -> bool:
        return name in self._commands

    def holds_shell_state(self, name: str) -> bool:
        return name in SHELL_STATE_COMMANDS and name in self._commands

    def add_pages(self, pages: Mapping[str, Sequence[str]]) -> list[str]:
        """Add manual pages. Existing pages are never replaced."""
        added = []
        for name, lines in pages.items():
            if name not in self.pages:
                self.pages[name] = list(lines)
                added.append(name)
        return added

    def run(self, command_line: "CommandLine") -> bool:
        """Run a built-in. Returns True when the shell should exit."""
        command = self._commands[command_line.command]
        logger.debug("Running built-in %s", command_line.command)
        return bool(command(command_line.arguments))

    # ── Commands ─────────────────────────────────────────────────────────

    def cat(self, args: CommandArguments) -> None:
        file_name = args.positional[0]
        if file_name is None:
            self.shell.show(CAT_BANNER, MessageType.SPECIAL)
            return
        path = Path(file_name).expanduser()
        if not path.is_file():
            raise ShellWarning("No such file.", path=file_name)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            self.shell.show(f"Could not read: {e.strerror or e}", MessageType.ERROR)
            return
        self.shell.show(content.rstrip("\n"))

    def cd(self, args: CommandArguments) -> None:
        directory = args.positional[0]
        if directory is None:
            self.shell.show(os.getcwd())
            return
        path = Path(directory).expanduser()
        if not path.is_dir():
            raise ShellWarning(f"No such directory: {directory}.", path=directory)
        os.chdir(path)

    def cls(self, args: CommandArguments) -> None:
        self.shell.terminal.clear()

    def exit(self, args: CommandArguments) -> bool:
        return True

    def history(self, args: CommandArguments) -> None:
        if args.switches["c|clear"]:
            self.shell.clear_history()
            return
        # The newest entry is this very command.
        self.shell.show(self.shell.history.format(skip_last=1) or "The list is empty.")

    def ls(self, args: CommandArguments) -> None:
        directory = args.positional[0] or "."
        path = Path(directory).expanduser()
        if not path.is_dir():
            raise ShellWarning(f"No such directory: {directory}.", path=directory)
        dirs: list[tuple[str, int | None, float]] = []
        files: list[tuple[str, int | None, float]] = []
        with os.scandir(path) as entries:
            for entry in entries:
                try:
                    stat = entry.stat()
                except OSError:
                    stat = entry.stat(follow_symlinks=False)
                if entry.is_dir():
                    dirs.append((entry.name, None, stat.st_mtime))
                else:
                    files.append((entry.name, stat.st_size, stat.st_mtime))
        dirs.sort(key=lambda e: _name_key(e[0]))
        files.sort(key=lambda e: _name_key(e[0]))
        with self.shell.terminal.lock:
            self.shell.console.print(render_listing(dirs + files))

    def man(self, args: CommandArguments | str | None) -> None:
        page = args.positional[0] if isinstance(args, CommandArguments) else args
        if page is None:
            self.shell.show(
                "Please specify micro-manual page from the following:\n"
                "[ " + ", ".join(self.pages) + " ]"
            )
            keys = self.shell.keymap.get_help_text()
            width = max((len(shortcut) for shortcut, _ in keys), default=0)
            with self.shell.terminal.lock:
                show_lines(
                    self.shell.console,
                    [f"  {shortcut.ljust(width)}  {text}" for shortcut, text in keys],
                    MessageType.NOTICE,
                )
        elif page in self.pages:
            self.shell.show("\n".join(self.pages[page]))
        else:
            self.shell.show(f'There\'s no manual page on "{page}".', MessageType.WARNING)

    def pwd(self, args: CommandArguments) -> None:
        self.shell.show(os.getcwd())

    def touch(self, args: CommandArguments) -> None:
        file_name = args.positional[0]
        if file_name is None:
            raise ShellWarning("Usage: touch FILE")
        path = Path(file_name).expanduser()
        try:
            if path.exists():
                os.utime(path, None)
            else:
                path.touch()
        except OSError as e:
            self.shell.show(f"Can't touch {file_name}: {e.strerror or e}", MessageType.ERROR)
