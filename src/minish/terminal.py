"""Terminal capability interface used by the shell renderer.

The line editor and the completion preview only need to write text at a
position, read and move the cursor, and know the screen size. Everything
else about the terminal stays behind :class:`Terminal`.
"""

from __future__ import annotations

import threading
from typing import Protocol, runtime_checkable

from prompt_toolkit.output import ColorDepth, Output, create_output
from prompt_toolkit.styles import Style


@runtime_checkable
class Terminal(Protocol):
    """Minimal terminal surface shared by the loop and process output threads."""

    lock: threading.RLock

    def write(self, text: str, style: str | None = None) -> None: ...

    def write_at(self, row: int, col: int, text: str, style: str | None = None) -> None: ...

    def get_cursor(self) -> tuple[int, int]: ...

    def set_cursor(self, row: int, col: int) -> None: ...

    def get_size(self) -> tuple[int, int]: ...

    def clear(self) -> None: ...

    def flush(self) -> None: ...


class Vt100Terminal:
    """
    Terminal on top of a prompt_toolkit output.

    VT100 terminals cannot report the cursor synchronously, so the cursor is
    tracked here. Rows are relative to where tracking started and all moves
    are relative, which keeps positions valid when the screen scrolls.
    Moving down is done with line feeds so that the screen scrolls instead
    of the cursor sticking to the bottom row.
    """

    def __init__(self, output: Output | None = None) -> None:
        self.output = output or create_output()
        self.lock = threading.RLock()
        self._row = 0
        self._col = 0
        self._pending_wrap = False
        self._style = Style([])
        self._color_depth: ColorDepth = self.output.get_default_color_depth()

    def get_size(self) -> tuple[int, int]:
        size = self.output.get_size()
        return max(1, size.columns), max(1, size.rows)

    def get_cursor(self) -> tuple[int, int]:
        with self.lock:
            width = self.get_size()[0]
            return self._row, min(self._col, width - 1)

    def set_cursor(self, row: int, col: int) -> None:
        with self.lock:
            current_row, current_col = self.get_cursor()
            col = max(0, min(col, self.get_size()[0] - 1))
            if row > current_row:
                self.output.write_raw("\n" * (row - current_row))
                current_col = 0
            elif row < current_row:
                self.output.cursor_up(current_row - row)
            if col > current_col:
                self.output.cursor_forward(col - current_col)
            elif col < current_col:
                self.output.cursor_backward(current_col - col)
            self._row, self._col = row, col
            self._pending_wrap = False
            self.output.flush()

    def write(self, text: str, style: str | None = None) -> None:
        """Write at the cursor, advancing the tracked position."""
        with self.lock:
            if style:
                attrs = self._style.get_attrs_for_style_str(style)
                self.output.set_attributes(attrs, self._color_depth)
            self.output.write(text)
            if style:
                self.output.reset_attributes()
            self._advance(text)
            self.output.flush()

    def write_at(self, row: int, col: int, text: str, style: str | None = None) -> None:
        with self.lock:
            self.set_cursor(row, col)
            self.write(text, style)

    def clear(self) -> None:
        with self.lock:
            self.output.erase_screen()
            self.output.cursor_goto(0, 0)
            self._row = self._col = 0
            self._pending_wrap = False
            self.output.flush()

    def flush(self) -> None:
        with self.lock:
            self.output.flush()

    def _advance(self, text: str) -> None:
        width = self.get_size()[0]
        for ch in text:
            if ch == "\n":
                self._row += 1
                self._col = 0
                self._pending_wrap = False
            elif ch == "\r":
                self._col = 0
                self._pending_wrap = False
            else:
                if self._pending_wrap:
                    self._row += 1
                    self._col = 0
                    self._pending_wrap = False
                self._col += 1
                if self._col >= width:
                    self._col = width
                    self._pending_wrap = True
