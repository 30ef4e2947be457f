"""Blocking key input on top of prompt_toolkit's terminal input."""

from __future__ import annotations

import select
from collections import deque
from contextlib import AbstractContextManager
from dataclasses import dataclass

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding import KeyPress
from prompt_toolkit.keys import Keys

# How long a lone Escape may wait for the rest of a sequence.
ESCAPE_TIMEOUT = 0.05


@dataclass(frozen=True)
class KeyEvent:
    """One key press: prompt_toolkit key name plus the characters it produced."""

    key: str
    data: str = ""

    @classmethod
    def from_key_press(cls, press: KeyPress) -> "KeyEvent":
        key = press.key.value if isinstance(press.key, Keys) else str(press.key)
        return cls(key=key, data=press.data)

    @classmethod
    def char(cls, ch: str) -> "KeyEvent":
        return cls(key=ch, data=ch)

    @property
    def text(self) -> str:
        """Characters to type for this key, empty for control keys."""
        if self.key == Keys.BracketedPaste.value:
            return self.data.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
        if len(self.key) == 1 and self.key.isprintable():
            return self.key
        return ""


class KeyReader:
    """Reads one key event at a time, blocking until it arrives."""

    def __init__(self, input: Input | None = None, escape_timeout: float = ESCAPE_TIMEOUT) -> None:
        self.input = input or create_input()
        self.escape_timeout = escape_timeout
        self._pending: deque[KeyEvent] = deque()

    def raw_mode(self) -> AbstractContextManager[None]:
        return self.input.raw_mode()

    def cooked_mode(self) -> AbstractContextManager[None]:
        return self.input.cooked_mode()

    def read_key(self) -> KeyEvent:
        """Wait for the next key. Raises EOFError once input is closed."""
        while not self._pending:
            if self.input.closed:
                raise EOFError("input closed")
            self._wait(None)
            self._collect(self.input.read_keys())
            if not self._pending and not self._wait(self.escape_timeout):
                self._collect(self.input.flush_keys())
        return self._pending.popleft()

    def _wait(self, timeout: float | None) -> bool:
        ready, _, _ = select.select([self.input.fileno()], [], [], timeout)
        return bool(ready)

    def _collect(self, presses: list[KeyPress]) -> None:
        self._pending.extend(KeyEvent.from_key_press(p) for p in presses)
