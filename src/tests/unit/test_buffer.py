"""Tests for the headless editor buffer."""

from fednotes.editor.buffer import CursorInfo, EditorBuffer


class TestEditorBuffer:
    """Tests for content, cursor and change notification."""

    def test_set_value_does_not_notify(self):
        changes = []
        buffer = EditorBuffer()
        buffer.on_change(changes.append)

        buffer.set_value("loaded")

        assert buffer.content == "loaded"
        assert changes == []

    def test_replace_notifies(self):
        changes = []
        buffer = EditorBuffer()
        buffer.on_change(changes.append)

        buffer.replace("typed")

        assert changes == ["typed"]

    def test_disabled_buffer_ignores_edits(self):
        buffer = EditorBuffer("keep")
        buffer.enabled = False

        buffer.replace("lost")
        buffer.insert("x")

        assert buffer.content == "keep"

    def test_insert_replaces_selection(self):
        buffer = EditorBuffer("hello world")
        buffer.select(6, 11)

        buffer.insert("there")

        assert buffer.content == "hello there"
        assert buffer.cursor == 11
        assert buffer.selection().text == ""

    def test_selection_backwards(self):
        buffer = EditorBuffer("abcdef")
        buffer.select(4, 1)

        selection = buffer.selection()

        assert (selection.start, selection.end, selection.text) == (1, 4, "bcd")

    def test_cursor_clamped(self):
        buffer = EditorBuffer("abc", cursor=99)

        assert buffer.cursor == 3

    def test_cursor_info(self):
        buffer = EditorBuffer("one\ntwo\nthree")
        buffer.move_cursor(9)

        assert buffer.cursor_info() == CursorInfo(line=3, col=2)

    def test_line_offset(self):
        buffer = EditorBuffer("one\ntwo\nthree")

        assert buffer.line_offset(1) == 0
        assert buffer.line_offset(3) == 8
        assert buffer.line_offset(10) == len("one\ntwo\nthree")

    def test_total_lines(self):
        assert EditorBuffer("a\nb\n").total_lines == 3
        assert EditorBuffer("").total_lines == 1
