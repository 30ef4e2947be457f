"""Line editor state for the interactive shell.

The editor owns the raw input text, the cursor offset, and a per-character
token map so that completion can read and replace the word under the cursor
without re-parsing the whole line by hand.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from minish.arguments import CommandArguments
from minish.tokens import NO_TOKEN, Token, quote, scan, token_map


@dataclass(frozen=True)
class CommandLine:
    """A submitted line, parsed into a command name and its arguments."""

    raw: str
    command: str
    arguments: CommandArguments
    tokens: tuple[Token, ...] = field(default_factory=tuple)

    @classmethod
    def parse(cls, text: str, options: str | None = None) -> "CommandLine":
        tokens = scan(text)
        command = tokens[0].value if tokens else ""
        arguments = CommandArguments([t.value for t in tokens[1:]], options=options)
        return cls(raw=text, command=command, arguments=arguments, tokens=tuple(tokens))

    @property
    def is_empty(self) -> bool:
        return not self.tokens


class LineEditor:
    """Editable command line whose cursor always knows the token it is on."""

    def __init__(self, text: str = "", options: str | None = None) -> None:
        self.options = options
        self.overtype = False
        self._text = ""
        self._tokens: list[Token] = []
        self._map: list[int] = []
        self._cursor = 0
        self.current_token_index = 0
        self.current_token_offset = 0
        self.current_token_length = 0
        self.set_text(text)

    @classmethod
    def from_text(cls, text: str, options: str | None = None) -> "LineEditor":
        """Create an editor holding ``text`` with the cursor at the end."""
        editor = cls(text, options=options)
        editor.end()
        return editor

    # ── State ────────────────────────────────────────────────────────────

    @property
    def text(self) -> str:
        return self._text

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def tokens(self) -> list[Token]:
        return list(self._tokens)

    @property
    def token_map(self) -> list[int]:
        return list(self._map)

    def __len__(self) -> int:
        return len(self._text)

    def set_text(self, text: str) -> None:
        """Replace the whole line and rebuild the token map."""
        self._text = text
        self._tokens = scan(text)
        self._map = token_map(text, self._tokens)
        self.set_cursor(self._cursor)

    def clear(self) -> None:
        self._cursor = 0
        self.set_text("")

    def set_cursor(self, pos: int) -> None:
        """Move the cursor, clamped to the line, and locate the current token."""
        self._cursor = max(0, min(pos, len(self._text)))
        token = self._token_at(self._cursor)
        if token is not None:
            self.current_token_index = token.index
            self.current_token_offset = token.start
            self.current_token_length = token.length
            return
        # Whitespace or an empty line: an empty token at the cursor.
        self.current_token_index = sum(1 for t in self._tokens if t.end <= self._cursor)
        self.current_token_offset = self._cursor
        self.current_token_length = 0

    def _token_at(self, pos: int) -> Token | None:
        index = self._map[pos] if pos < len(self._map) else NO_TOKEN
        if index == NO_TOKEN and pos > 0:
            index = self._map[pos - 1]
        return self._tokens[index] if index != NO_TOKEN else None

    # ── Current token ────────────────────────────────────────────────────

    @property
    def current_token(self) -> str:
        """The unquoted text of the token under the cursor."""
        if self.current_token_length == 0:
            return ""
        return self._tokens[self.current_token_index].value

    def set_current_token(self, value: str) -> None:
        """Replace the token under the cursor, quoting ``value`` as needed."""
        quoted = quote(value)
        offset = self.current_token_offset
        end = offset + self.current_token_length
        self.set_text(self._text[:offset] + quoted + self._text[end:])
        self.set_cursor(offset + len(quoted))

    @property
    def is_on_first_token(self) -> bool:
        return self.current_token_index == 0

    # ── Parsed view ──────────────────────────────────────────────────────

    @property
    def command(self) -> str:
        return self._tokens[0].value if self._tokens else ""

    @property
    def arguments(self) -> CommandArguments:
        return CommandArguments([t.value for t in self._tokens[1:]], options=self.options)

    def to_command_line(self) -> CommandLine:
        return CommandLine.parse(self._text, options=self.options)

    # ── Navigation ───────────────────────────────────────────────────────

    def home(self) -> None:
        self.set_cursor(0)

    def end(self) -> None:
        self.set_cursor(len(self._text))

    def left(self) -> None:
        if self._cursor > 0:
            self.set_cursor(self._cursor - 1)

    def right(self) -> None:
        if self._cursor < len(self._text):
            self.set_cursor(self._cursor + 1)

    def prev_token(self) -> None:
        """Jump to the start of the current token, or of the previous one."""
        starts = [t.start for t in self._tokens if t.start < self._cursor]
        self.set_cursor(starts[-1] if starts else 0)

    def next_token(self) -> None:
        """Jump to the start of the next token, or the end of the line."""
        starts = [t.start for t in self._tokens if t.start > self._cursor]
        self.set_cursor(starts[0] if starts else len(self._text))

    # ── Editing ──────────────────────────────────────────────────────────

    def insert(self, chars: str) -> None:
        """Type ``chars`` at the cursor, replacing characters in overtype mode."""
        if not chars:
            return
        pos = self._cursor
        tail = self._text[pos + len(chars):] if self.overtype else self._text[pos:]
        self.set_text(self._text[:pos] + chars + tail)
        self.set_cursor(pos + len(chars))

    def backspace(self) -> None:
        if self._cursor > 0:
            pos = self._cursor - 1
            self.set_text(self._text[:pos] + self._text[pos + 1:])
            self.set_cursor(pos)

    def delete(self) -> None:
        if self._cursor < len(self._text):
            pos = self._cursor
            self.set_text(self._text[:pos] + self._text[pos + 1:])

    def toggle_overtype(self) -> bool:
        self.overtype = not self.overtype
        return self.overtype
