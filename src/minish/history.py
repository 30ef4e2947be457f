"""Command history with browsing and compressed persistence."""

from __future__ import annotations

import base64
import binascii
import logging
import zlib
from collections.abc import Iterable, Iterator

from minish.exceptions import HistoryFormatError

logger = logging.getLogger(__name__)

# Raw DEFLATE stream, no zlib header.
_WBITS = -15


class CommandHistory:
    """
    Ordered history of submitted command lines.

    Provides:
    - Adjacent deduplication
    - Bidirectional browsing with an unsaved draft
    - Compressed serialization for the settings store
    - Maximum size limits
    """

    def __init__(
        self,
        entries: Iterable[str] | None = None,
        max_entries: int = 1000,
    ) -> None:
        self.max_entries = max_entries
        self._entries: list[str] = list(entries or [])[-max_entries:]
        self._position: int = -1  # Levels back from the newest entry, -1 = not browsing

    @property
    def browse_cursor(self) -> int:
        return self._position

    @property
    def is_browsing(self) -> bool:
        return self._position >= 0

    def add(self, line: str) -> None:
        """Add a line unless it is blank or repeats the newest entry."""
        if not line or not line.strip():
            return
        line = line.strip()
        if self._entries and self._entries[-1] == line:
            return
        self._entries.append(line)
        if len(self._entries) > self.max_entries:
            self._entries = self._entries[-self.max_entries :]

    def peek(self, level: int = 0) -> str | None:
        """Get the entry ``level`` positions back from the newest."""
        if 0 <= level < len(self._entries):
            return self._entries[len(self._entries) - 1 - level]
        return None

    def prev(self, draft: str | None = None) -> str | None:
        """Get the previous (older) entry (up arrow).

        On the first call a non-empty draft is stored first, so browsing
        back down returns to it.
        """
        if not self._entries:
            return None
        if self._position < 0 and draft and draft.strip():
            self.add(draft)
            self._position += 1
        self._position = max(-1, min(self._position, len(self._entries) - 2))
        self._position += 1
        return self.peek(self._position)

    def next(self) -> str | None:
        """Get the next (newer) entry (down arrow)."""
        if not self._entries or self._position < 0:
            return None
        self._position = max(1, min(self._position, len(self._entries)))
        self._position -= 1
        return self.peek(self._position)

    def reset(self) -> None:
        """Stop browsing."""
        self._position = -1

    def clear(self) -> None:
        """Clear all history."""
        self._entries = []
        self._position = -1

    def format(self, skip_last: int = 0) -> str | None:
        """Render the history as lines, leaving out the newest ``skip_last``."""
        if len(self._entries) <= skip_last:
            return None
        return "\n".join(self._entries[: len(self._entries) - skip_last])

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __getitem__(self, level: int) -> str | None:
        return self.peek(level)

    # ── Serialization ────────────────────────────────────────────────────

    def serialize(self) -> bytes:
        """Compress the newline-joined history. Empty history gives ``b""``."""
        if not self._entries:
            return b""
        compressor = zlib.compressobj(zlib.Z_BEST_SPEED, zlib.DEFLATED, _WBITS)
        data = "\n".join(self._entries).encode("utf-8")
        return compressor.compress(data) + compressor.flush()

    @classmethod
    def deserialize(
        cls,
        data: bytes | None,
        max_entries: int = 1000,
        strict: bool = False,
    ) -> "CommandHistory":
        """Restore history from :meth:`serialize` output.

        Corrupt data yields an empty history unless ``strict`` is set, in
        which case :class:`HistoryFormatError` is raised.
        """
        if not data:
            return cls(max_entries=max_entries)
        try:
            text = zlib.decompress(data, _WBITS).decode("utf-8")
        except (zlib.error, UnicodeDecodeError) as e:
            if strict:
                raise HistoryFormatError(
                    "Serialized history is corrupt", {"error": str(e)}
                ) from e
            logger.warning("Discarding corrupt serialized history: %s", e)
            return cls(max_entries=max_entries)
        return cls(text.split("\n"), max_entries=max_entries)

    def to_base64(self) -> str | None:
        """Encode for a text settings store. Empty history gives ``None``."""
        data = self.serialize()
        return base64.b64encode(data).decode("ascii") if data else None

    @classmethod
    def from_base64(
        cls,
        text: str | None,
        max_entries: int = 1000,
        strict: bool = False,
    ) -> "CommandHistory":
        if not text:
            return cls(max_entries=max_entries)
        try:
            data = base64.b64decode(text, validate=True)
        except (binascii.Error, ValueError) as e:
            if strict:
                raise HistoryFormatError(
                    "Stored history is not valid base64", {"error": str(e)}
                ) from e
            logger.warning("Discarding undecodable stored history: %s", e)
            return cls(max_entries=max_entries)
        return cls.deserialize(data, max_entries=max_entries, strict=strict)
