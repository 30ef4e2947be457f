"""Filesystem and command name completion with an on-screen preview."""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Iterator
from pathlib import Path

from minish.terminal import Terminal

logger = logging.getLogger(__name__)

ELLIPSIS = "..."
DEFAULT_PEEK_MAX = 255
DEFAULT_PEEK_STYLE = "ansigreen"


def _sort_key(name: str) -> tuple[str, str]:
    return name.casefold(), name


def _separator_index(prefix: str) -> int:
    separators = {"/", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    return max(prefix.rfind(sep) for sep in separators)


class CompletionEngine:
    """
    Cycles through completions for the word under the cursor.

    Provides:
    - Matching against directory entries and known command names
    - Cyclic browsing of the candidates
    - A preview of the candidates below the input line that can be erased
      without touching the line itself
    """

    def __init__(
        self,
        terminal: Terminal,
        commands: Iterable[str] = (),
        peek_max: int = DEFAULT_PEEK_MAX,
        peek_style: str | None = DEFAULT_PEEK_STYLE,
        cwd: str | Path | None = None,
    ) -> None:
        self.terminal = terminal
        self.peek_max = peek_max
        self.peek_style = peek_style
        self.cwd = Path(cwd) if cwd is not None else None
        self._commands: list[str] = []
        self._candidates: list[str] = []
        self._index = -1
        self._path_prefix: str | None = None
        # Preview bookkeeping: rows used and the cursor to restore.
        self._region: tuple[int, int] | None = None
        self._origin: tuple[int, int] | None = None
        self.add_commands(commands)

    @property
    def commands(self) -> list[str]:
        return list(self._commands)

    @property
    def candidates(self) -> list[str]:
        return list(self._candidates)

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def path_prefix(self) -> str | None:
        return self._path_prefix

    @property
    def is_active(self) -> bool:
        return self._index >= 0 or self._region is not None

    @property
    def is_peeking(self) -> bool:
        return self._region is not None

    def add_commands(self, commands: Iterable[str]) -> None:
        """Register command names, ignoring case-insensitive duplicates."""
        known = {c.casefold() for c in self._commands}
        for command in commands:
            if command.casefold() not in known:
                known.add(command.casefold())
                self._commands.append(command)

    # ── Matching ─────────────────────────────────────────────────────────

    def match(self, prefix: str | None, include_commands: bool = False) -> int:
        """Collect candidates starting with ``prefix``.

        Returns the offset in ``prefix`` where the completed part starts, or
        -1 when nothing matches.
        """
        self._path_prefix = None
        self._index = -1
        if not prefix or not prefix.strip():
            self._candidates = self._list(".", include_commands)
            return 0

        separator = _separator_index(prefix)
        if separator >= 0:
            directory, stem = prefix[: separator + 1], prefix[separator + 1 :]
            self._path_prefix = directory
            entries = self._list(directory, include_commands=False)
            self._candidates = self._filter(entries, stem)
            return separator + 1

        self._candidates = self._filter(self._list(".", include_commands), prefix)
        return 0 if self._candidates else -1

    def _filter(self, names: list[str], stem: str) -> list[str]:
        if not stem:
            return names
        folded = stem.casefold()
        return [n for n in names if n.casefold().startswith(folded)]

    def _list(self, directory: str, include_commands: bool) -> list[str]:
        base = self.cwd if self.cwd is not None else Path.cwd()
        path = base / Path(directory).expanduser()
        names: list[str] = []
        try:
            with os.scandir(path) as entries:
                names = [entry.name for entry in entries]
        except OSError as e:
            logger.debug("Cannot list %s for completion: %s", path, e)
        if include_commands:
            seen = {n.casefold() for n in names}
            names.extend(c for c in self._commands if c.casefold() not in seen)
        return sorted(names, key=_sort_key)

    def next(self) -> str | None:
        """Get the next candidate, wrapping around after the last one."""
        if not self._candidates:
            return None
        if self._index < 0 or self._index >= len(self._candidates):
            self._index = 0
        candidate = self._candidates[self._index]
        self._index += 1
        if self._path_prefix is not None:
            return self._path_prefix + candidate
        return candidate

    def __len__(self) -> int:
        return len(self._candidates)

    def __iter__(self) -> Iterator[str]:
        return iter(self._candidates)

    # ── Preview ──────────────────────────────────────────────────────────

    def layout(self, width: int) -> list[str]:
        """Lay the candidates out in fixed-width columns for ``width``."""
        items = self._candidates[: self.peek_max]
        if len(self._candidates) > self.peek_max:
            items.append(ELLIPSIS)
        if not items:
            return []
        item_width = min(max(len(i) for i in items) + 2, width)
        while width % item_width:
            item_width += 1
        per_row = width // item_width
        rows = []
        for start in range(0, len(items), per_row):
            cells = items[start : start + per_row]
            rows.append("".join(c[:item_width].ljust(item_width) for c in cells).rstrip())
        return rows

    def peek(self, start_row: int | None = None) -> None:
        """Show the candidates below the line, leaving the cursor where it was."""
        if not self._candidates:
            return
        with self.terminal.lock:
            origin = self.terminal.get_cursor()
            if self._region is not None:
                self._erase_region()
            width, _ = self.terminal.get_size()
            first = origin[0] + 1 if start_row is None else start_row
            rows = self.layout(width)
            for offset, text in enumerate(rows):
                self.terminal.write_at(first + offset, 0, text, self.peek_style)
            self._origin = origin
            self._region = (first, first + len(rows) - 1)
            self.terminal.set_cursor(*origin)

    def _erase_region(self) -> None:
        if self._region is None or self._origin is None:
            return
        width, _ = self.terminal.get_size()
        first, last = self._region
        for row in range(first, last + 1):
            self.terminal.write_at(row, 0, " " * width)
        self._region = None

    def reset(self) -> None:
        """Erase the preview if shown and forget the candidates."""
        with self.terminal.lock:
            if self._region is not None and self._origin is not None:
                self._erase_region()
                self.terminal.set_cursor(*self._origin)
        self._origin = None
        self._candidates = []
        self._index = -1
        self._path_prefix = None
