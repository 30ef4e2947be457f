"""Message rendering for the shell: coloured lines and listings."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table
from rich.text import Text

CAT_BANNER = "\n".join(
    [
        r"      |\__/,|   (`\  ",
        r"    _.|o o  |_   ) ) ",
        r"---(((---(((---------",
    ]
)


class MessageType(str, Enum):
    """Kinds of shell output, each with its own colour."""

    CONTENT = "content"
    INFO = "info"
    SPECIAL = "special"
    NOTICE = "notice"
    WARNING = "warning"
    ERROR = "error"


class Theme:
    """Colour theme for shell messages."""

    HEADER = "cyan"
    CONTENT = "bright_black"
    SPECIAL = "green"
    NOTICE = "bright_cyan"
    WARNING = "yellow"
    ERROR = "red"
    DIR = "bold blue"


_STYLES = {
    MessageType.CONTENT: Theme.CONTENT,
    MessageType.INFO: Theme.HEADER,
    MessageType.SPECIAL: Theme.SPECIAL,
    MessageType.NOTICE: Theme.NOTICE,
    MessageType.WARNING: Theme.WARNING,
    MessageType.ERROR: Theme.ERROR,
}


def show_message(
    console: Console,
    message: str | None,
    kind: MessageType = MessageType.CONTENT,
) -> None:
    """Print a message in the colour of its kind."""
    if message is None:
        return
    console.print(Text(message, style=_STYLES[kind]), soft_wrap=True)


def show_lines(
    console: Console,
    lines: Iterable[str] | None,
    kind: MessageType = MessageType.CONTENT,
) -> None:
    """Print a block of lines, nothing for an empty block."""
    items = list(lines or [])
    if items:
        show_message(console, "\n".join(items), kind)


def _format_time(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


def render_listing(entries: Iterable[tuple[str, int | None, float]]) -> Table:
    """Build the ``ls`` table from ``(name, size or None for dirs, mtime)``."""
    table = Table(box=SIMPLE, show_edge=False, pad_edge=False, header_style="bold")
    table.add_column("Modified", style=Theme.CONTENT, no_wrap=True)
    table.add_column("Size", justify="right", no_wrap=True)
    table.add_column("Name")
    for name, size, mtime in entries:
        if size is None:
            table.add_row(_format_time(mtime), "<DIR>", Text(name, style=Theme.DIR))
        else:
            table.add_row(_format_time(mtime), str(size), name)
    return table
