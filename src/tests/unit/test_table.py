"""Tests for markdown table editing."""

from fednotes.editor import (
    add_column,
    add_row,
    delete_column,
    delete_row,
    find_table_at_position,
    generate_markdown_table,
    parse_markdown_table,
    replace_table,
    swap_columns,
    swap_rows,
)


class TestParseMarkdownTable:
    """Tests for parse_markdown_table."""

    def test_simple_table(self):
        markdown = "| Name | Age |\n| --- | --- |\n| Alice | 30 |\n| Bob | 25 |"

        assert parse_markdown_table(markdown) == [
            ["Name", "Age"],
            ["Alice", "30"],
            ["Bob", "25"],
        ]

    def test_extra_whitespace(self):
        markdown = "|  Name  |  Age  |\n|--------|-------|\n|  Alice |  30   |"

        assert parse_markdown_table(markdown) == [["Name", "Age"], ["Alice", "30"]]

    def test_skips_empty_lines(self):
        markdown = "| Header |\n\n| --- |\n\n| Value |"

        assert parse_markdown_table(markdown) == [["Header"], ["Value"]]

    def test_list_input(self):
        lines = ["| A | B |", "| --- | --- |", "| 1 | 2 |"]

        assert parse_markdown_table(lines) == [["A", "B"], ["1", "2"]]

    def test_alignment_separator(self):
        markdown = "| Left | Center | Right |\n|:-----|:------:|------:|\n| L | C | R |"

        assert parse_markdown_table(markdown) == [
            ["Left", "Center", "Right"],
            ["L", "C", "R"],
        ]

    def test_empty_input(self):
        assert parse_markdown_table("") == []
        assert parse_markdown_table([]) == []

    def test_inline_markup_kept(self):
        markdown = "| Code | Description |\n| --- | --- |\n| `foo` | A *bold* statement |"

        assert parse_markdown_table(markdown)[1] == ["`foo`", "A *bold* statement"]


class TestGenerateMarkdownTable:
    """Tests for generate_markdown_table."""

    def test_formats_table(self):
        table = [["Name", "Age"], ["Alice", "30"], ["Bob", "25"]]

        assert generate_markdown_table(table) == (
            "| Name  | Age |\n"
            "| ----- | --- |\n"
            "| Alice | 30  |\n"
            "| Bob   | 25  |"
        )

    def test_lines_have_equal_length(self):
        lines = generate_markdown_table([["A", "LongerHeader"], ["Short", "X"]]).split(
            "\n"
        )

        assert len({len(line) for line in lines}) == 1

    def test_empty_cells_padded(self):
        result = generate_markdown_table([["A", "B", "C"], ["1", "", "3"]])

        assert "|     |" in result

    def test_empty_table(self):
        assert generate_markdown_table([]) == ""
        assert generate_markdown_table(None) == ""

    def test_uneven_rows_normalized(self):
        lines = generate_markdown_table([["A", "B", "C"], ["1", "2"]]).split("\n")

        assert len(lines[2].split("|")) == 5

    def test_minimum_column_width(self):
        assert "| --- | --- |" in generate_markdown_table([["A", "B"], ["1", "2"]])

    def test_parse_restores_generated_table(self):
        table = [
            ["Product", "Price", "Quantity"],
            ["Apple", "$1.50", "10"],
            ["Banana", "$0.75", "25"],
        ]

        assert parse_markdown_table(generate_markdown_table(table)) == table


class TestTableEdits:
    """Tests for row and column operations."""

    def test_swap_columns(self):
        table = [["A", "B", "C"], ["1", "2", "3"]]

        assert swap_columns(table, 0, 2) == [["C", "B", "A"], ["3", "2", "1"]]
        assert table == [["A", "B", "C"], ["1", "2", "3"]]

    def test_swap_rows(self):
        table = [["Header"], ["Row1"], ["Row2"]]

        assert swap_rows(table, 1, 2) == [["Header"], ["Row2"], ["Row1"]]
        assert table[1] == ["Row1"]

    def test_delete_column(self):
        table = [["A", "B", "C"], ["1", "2", "3"]]

        assert delete_column(table, 1) == [["A", "C"], ["1", "3"]]

    def test_delete_row(self):
        assert delete_row([["Header"], ["Row1"], ["Row2"]], 1) == [
            ["Header"],
            ["Row2"],
        ]

    def test_add_column(self):
        table = [["A", "B"], ["1", "2"]]

        assert add_column(table, "New") == [["A", "B", "New"], ["1", "2", ""]]
        assert add_column([["A"]]) == [["A", "Header"]]

    def test_add_row(self):
        table = [["A", "B", "C"], ["1", "2", "3"]]

        assert add_row(table) == [["A", "B", "C"], ["1", "2", "3"], ["", "", ""]]
        assert add_row([]) == [[]]


class TestFindTableAtPosition:
    """Tests for locating the table under the cursor."""

    DOC = "Intro\n\n| A | B |\n| --- | --- |\n| 1 | 2 |\n\nOutro"

    def test_cursor_inside_table(self):
        offset = self.DOC.index("| 1")

        location = find_table_at_position(self.DOC, offset)

        assert location.lines == ["| A | B |", "| --- | --- |", "| 1 | 2 |"]
        assert self.DOC[location.start : location.end] == "\n".join(location.lines)

    def test_cursor_outside_table(self):
        assert find_table_at_position(self.DOC, 0) is None
        assert find_table_at_position(self.DOC, len(self.DOC)) is None

    def test_pipe_lines_without_separator(self):
        assert find_table_at_position("| not | a table |", 2) is None

    def test_replace_table(self):
        location = find_table_at_position(self.DOC, self.DOC.index("| A"))
        table = add_row(parse_markdown_table(location.lines))

        result = replace_table(self.DOC, location, table)

        assert result == (
            "Intro\n\n"
            "| A   | B   |\n"
            "| --- | --- |\n"
            "| 1   | 2   |\n"
            "|     |     |\n"
            "\nOutro"
        )
