"""Tests for the line editor."""

from __future__ import annotations

import pytest

from minish.line_editor import CommandLine, LineEditor


class TestCommandLine:
    """Tests for parsed command lines."""

    def test_quoted_argument(self):
        """Quotes are stripped from a quoted argument."""
        line = CommandLine.parse('ls "My Folder"')
        assert line.command == "ls"
        assert list(line.arguments.positional) == ["My Folder"]
        assert line.raw == 'ls "My Folder"'

    def test_empty(self):
        line = CommandLine.parse("   ")
        assert line.is_empty
        assert line.command == ""
        assert line.arguments.is_empty


class TestNavigation:
    """Tests for cursor movement."""

    def test_home_and_end(self):
        editor = LineEditor.from_text('ls "My Folder"')
        editor.home()
        assert editor.cursor == 0
        editor.end()
        assert editor.cursor == len('ls "My Folder"') == 14

    def test_token_jumps_treat_quotes_as_one_token(self):
        """The quoted folder name is a single stop for token jumps."""
        editor = LineEditor.from_text('ls "My Folder"')
        editor.home()
        editor.next_token()
        assert editor.cursor == 3
        editor.next_token()
        assert editor.cursor == 14
        editor.prev_token()
        assert editor.cursor == 3
        editor.prev_token()
        assert editor.cursor == 0

    def test_prev_token_from_middle_goes_to_token_start(self):
        editor = LineEditor.from_text("cat file.txt")
        editor.set_cursor(8)
        editor.prev_token()
        assert editor.cursor == 4

    def test_left_right_clamped(self):
        editor = LineEditor("ab")
        editor.left()
        assert editor.cursor == 0
        editor.end()
        editor.right()
        assert editor.cursor == 2

    def test_set_cursor_clamped(self):
        editor = LineEditor("abc")
        editor.set_cursor(99)
        assert editor.cursor == 3
        editor.set_cursor(-5)
        assert editor.cursor == 0


class TestCurrentToken:
    """Tests for reading and replacing the token under the cursor."""

    def test_cursor_inside_token(self):
        editor = LineEditor.from_text("cat file.txt")
        editor.set_cursor(6)
        assert editor.current_token == "file.txt"
        assert editor.current_token_index == 1
        assert editor.current_token_offset == 4
        assert editor.current_token_length == 8

    def test_cursor_right_after_token(self):
        """The cursor just past a word still belongs to that word."""
        editor = LineEditor.from_text("cat file.txt")
        assert editor.current_token == "file.txt"
        editor.set_cursor(3)
        assert editor.current_token == "cat"
        assert editor.is_on_first_token

    def test_cursor_after_space_is_a_new_token(self):
        editor = LineEditor.from_text("cat ")
        assert editor.current_token == ""
        assert editor.current_token_index == 1
        assert not editor.is_on_first_token

    def test_empty_line_is_first_token(self):
        editor = LineEditor()
        assert editor.current_token == ""
        assert editor.is_on_first_token

    def test_quoted_token_value(self):
        editor = LineEditor.from_text('cd "My Folder"')
        assert editor.current_token == "My Folder"

    @pytest.mark.parametrize("value", ["readme.md", "src", "a.b-c"])
    def test_set_then_get_is_idempotent(self, value):
        """Values that need no quoting read back unchanged."""
        editor = LineEditor.from_text("cat rea")
        editor.set_current_token(value)
        assert editor.current_token == value
        text = editor.text
        editor.set_current_token(editor.current_token)
        assert editor.text == text
        assert editor.text == f"cat {value}"

    def test_set_quotes_when_needed(self):
        editor = LineEditor.from_text("cd My")
        editor.set_current_token("My Folder")
        assert editor.text == 'cd "My Folder"'
        assert editor.cursor == len(editor.text)
        assert editor.current_token == "My Folder"

    def test_set_in_the_middle_keeps_rest(self):
        editor = LineEditor.from_text("cp a dest")
        editor.set_cursor(4)
        editor.set_current_token("alpha.txt")
        assert editor.text == "cp alpha.txt dest"
        assert editor.cursor == 12

    def test_set_inserts_new_word_after_space(self):
        editor = LineEditor.from_text("cat ")
        editor.set_current_token("b.txt")
        assert editor.text == "cat b.txt"


class TestEditing:
    """Tests for insert, overtype and deletion."""

    def test_insert(self):
        editor = LineEditor.from_text("ac")
        editor.set_cursor(1)
        editor.insert("b")
        assert editor.text == "abc"
        assert editor.cursor == 2

    def test_overtype(self):
        editor = LineEditor.from_text("abc")
        editor.home()
        assert editor.toggle_overtype() is True
        editor.insert("X")
        assert editor.text == "Xbc"
        editor.end()
        editor.insert("d")
        assert editor.text == "Xbcd"

    def test_backspace_and_delete(self):
        editor = LineEditor.from_text("abcd")
        editor.backspace()
        assert editor.text == "abc"
        editor.home()
        editor.delete()
        assert editor.text == "bc"
        assert editor.cursor == 0
        editor.backspace()
        assert editor.text == "bc"

    def test_tokens_follow_edits(self):
        editor = LineEditor()
        for ch in "ls x":
            editor.insert(ch)
        assert editor.command == "ls"
        assert list(editor.arguments.positional) == ["x"]
        assert len(editor.token_map) == len(editor.text)

    def test_clear(self):
        editor = LineEditor.from_text("abc")
        editor.clear()
        assert editor.text == ""
        assert editor.cursor == 0
