"""Quote-aware tokenizer for shell command lines.

A command line is split on whitespace, except where the whitespace is inside
single or double quotes. Inside a quoted run the active quote character
doubled (``""`` or ``''``) stands for one literal quote. The grammar is
lenient: an unterminated quote simply absorbs the rest of the line.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

QUOTE_CHARS = ("'", '"')

# Token map value for whitespace between tokens.
NO_TOKEN = -1


@dataclass(frozen=True)
class Token:
    """A single word of a command line."""

    index: int
    start: int
    end: int
    quoted: str
    value: str

    @property
    def length(self) -> int:
        return self.end - self.start


def _scan(text: str, split_on_space: bool = True) -> list[Token]:
    tokens: list[Token] = []
    quote: str | None = None
    start: int | None = None
    value: list[str] = []

    def close(end: int) -> None:
        nonlocal start, value
        if start is None:
            return
        tokens.append(Token(len(tokens), start, end, text[start:end], "".join(value)))
        start = None
        value = []

    i, n = 0, len(text)
    while i < n:
        c = text[i]
        if quote is None and split_on_space and c.isspace():
            close(i)
            i += 1
            continue
        if start is None:
            start = i
        if quote is not None:
            if c == quote:
                if i + 1 < n and text[i + 1] == quote:
                    value.append(c)
                    i += 2
                    continue
                quote = None
            else:
                value.append(c)
        elif c in QUOTE_CHARS:
            quote = c
        else:
            value.append(c)
        i += 1
    close(n)
    return tokens


def scan(text: str) -> list[Token]:
    """Split ``text`` into tokens, keeping their positions."""
    return _scan(text)


def token_map(text: str, tokens: Iterable[Token] | None = None) -> list[int]:
    """Build the per-character token index map for ``text``."""
    mapping = [NO_TOKEN] * len(text)
    for token in scan(text) if tokens is None else tokens:
        for i in range(token.start, token.end):
            mapping[i] = token.index
    return mapping


def split(text: str, keep_quotes: bool = False) -> list[str]:
    """Split a command line into its parts, shell style."""
    return [t.quoted if keep_quotes else t.value for t in scan(text)]


def quote(part: str) -> str:
    """Quote the part if it contains whitespace or quotes and isn't already quoted."""
    if not part:
        return '""'
    if _is_quoted(part):
        return part
    if any(c.isspace() or c in QUOTE_CHARS for c in part):
        return _double_quote(part)
    return part


def _double_quote(part: str) -> str:
    return '"' + part.replace('"', '""') + '"'


def _is_quoted(part: str) -> bool:
    # Exactly one token that is the canonical double-quoted form of its value.
    if len(part) < 2 or part[0] != '"' or part[-1] != '"':
        return False
    tokens = scan(part)
    return len(tokens) == 1 and _double_quote(tokens[0].value) == part


def unquote(part: str) -> str:
    """Strip quoting from a single part, including incomplete quoting."""
    tokens = _scan(part, split_on_space=False)
    return tokens[0].value if tokens else ""


def join(parts: Iterable[str]) -> str:
    """Join parts into a command line, quoting where needed."""
    return " ".join(quote(p) for p in parts)
