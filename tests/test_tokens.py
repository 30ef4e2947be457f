"""Tests for the quote-aware tokenizer."""

from __future__ import annotations

import pytest

from minish.tokens import NO_TOKEN, join, quote, scan, split, token_map, unquote


def _runs(text: str) -> list[str]:
    """Maximal runs of equal, non-negative token indexes."""
    mapping = token_map(text)
    runs: list[str] = []
    current = NO_TOKEN
    for ch, index in zip(text, mapping):
        if index == NO_TOKEN:
            current = NO_TOKEN
            continue
        if index != current:
            runs.append("")
            current = index
        runs[-1] += ch
    return runs


class TestScan:
    """Tests for splitting command lines into tokens."""

    def test_plain_words(self):
        """Whitespace separates words."""
        assert split("ls -l  /tmp") == ["ls", "-l", "/tmp"]

    def test_double_quotes_group_words(self):
        """Quoted whitespace stays inside the token and quotes are stripped."""
        tokens = scan('ls "My Folder"')
        assert [t.value for t in tokens] == ["ls", "My Folder"]
        assert tokens[1].quoted == '"My Folder"'
        assert (tokens[1].start, tokens[1].end) == (3, 14)

    def test_single_quotes_group_words(self):
        assert split("echo 'a b' c") == ["echo", "a b", "c"]

    def test_doubled_quote_is_literal(self):
        """The active quote doubled inside quotes stands for one quote."""
        assert split('say "He said ""hi"""') == ["say", 'He said "hi"']
        assert split("say 'it''s'") == ["say", "it's"]

    def test_quotes_inside_word(self):
        """Quotes may open in the middle of a word."""
        assert split('a"b c"d') == ["ab cd"]

    def test_unterminated_quote_absorbs_rest(self):
        """An unterminated quote never raises."""
        tokens = scan('cat "unfinished file')
        assert [t.value for t in tokens] == ["cat", "unfinished file"]
        assert tokens[1].end == len('cat "unfinished file')

    def test_other_quote_inside_open_quote_is_literal(self):
        """A single quote inside an open double quote is a plain character."""
        assert split("echo \"it's open") == ["echo", "it's open"]

    def test_empty_quotes_make_a_token(self):
        assert split('touch ""') == ["touch", ""]

    def test_keep_quotes(self):
        assert split('ls "My Folder"', keep_quotes=True) == ["ls", '"My Folder"']

    def test_empty_and_blank(self):
        assert scan("") == []
        assert scan("   ") == []


class TestTokenMap:
    """Tests for the per-character token map."""

    @pytest.mark.parametrize(
        "text",
        ["", "ls", "  ls  -a ", 'ls "My Folder" x', "a'b c'd  e", 'x "open quote'],
    )
    def test_map_covers_text(self, text):
        """The map has one entry per character."""
        assert len(token_map(text)) == len(text)

    @pytest.mark.parametrize(
        "text",
        ["ls -l /tmp", 'ls "My Folder"', "echo 'a b' c", '  cd   "x y"  ', 'say "x ""y"""'],
    )
    def test_runs_match_split(self, text):
        """Runs of equal indexes are the quoted words, in order."""
        assert _runs(text) == split(text, keep_quotes=True)

    def test_whitespace_is_unmapped(self):
        assert token_map("a  b") == [0, NO_TOKEN, NO_TOKEN, 1]


class TestQuoting:
    """Tests for quote, unquote and join."""

    def test_quote_plain_word_unchanged(self):
        assert quote("file.txt") == "file.txt"

    def test_quote_wraps_whitespace(self):
        assert quote("My Folder") == '"My Folder"'

    def test_quote_doubles_inner_quotes(self):
        assert quote('say "hi"') == '"say ""hi"""'

    def test_quote_keeps_quoted_value(self):
        assert quote('"already quoted"') == '"already quoted"'

    @pytest.mark.parametrize("value", ['"a" "b"', '"a"b"', '"x""'])
    def test_quote_wraps_values_that_only_look_quoted(self, value):
        """A value framed by quotes but not one quoted token stays one token."""
        quoted = quote(value)
        assert quoted != value
        assert split(quoted) == [value]

    def test_quote_empty(self):
        assert quote("") == '""'

    def test_unquote(self):
        assert unquote('"My Folder"') == "My Folder"
        assert unquote('"half') == "half"
        assert unquote("plain") == "plain"
        assert unquote("") == ""

    def test_join_then_split(self):
        parts = ["cp", "My File.txt", "dest"]
        assert join(parts) == 'cp "My File.txt" dest'
        assert split(join(parts)) == parts
