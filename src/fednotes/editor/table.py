"""Markdown table editing: parse a table into cells, edit it, write it back."""

import re
from dataclasses import dataclass

MIN_COLUMN_WIDTH = 3

_SEPARATOR_ROW = re.compile(r"^\|[\s\-:]+\|$|^\|(\s*:?-+:?\s*\|)+$")

Table = list[list[str]]


@dataclass(frozen=True)
class TableLocation:
    """A table found in a document; ``end`` is exclusive."""

    lines: list[str]
    start: int
    end: int


def parse_markdown_table(lines: str | list[str]) -> Table:
    """
    Parse markdown table rows into a list of cell lists.

    Blank lines and the header separator row (``|---|:--:|``) are skipped.
    """
    line_list = lines if isinstance(lines, list) else lines.split("\n")

    rows = []
    for line in line_list:
        stripped = line.strip()
        if not stripped or _SEPARATOR_ROW.match(stripped):
            continue
        cells = [cell.strip() for cell in stripped.split("|")[1:-1]]
        if cells:
            rows.append(cells)
    return rows


def generate_markdown_table(table: Table | None) -> str:
    """Format rows as an aligned markdown table; the first row is the header."""
    if not table:
        return ""

    column_count = max(len(row) for row in table)
    rows = [row + [""] * (column_count - len(row)) for row in table]
    widths = [
        max(MIN_COLUMN_WIDTH, *(len(row[col]) for row in rows))
        for col in range(column_count)
    ]

    def format_row(cells: list[str]) -> str:
        return "| " + " | ".join(c.ljust(w) for c, w in zip(cells, widths)) + " |"

    lines = [format_row(rows[0]), format_row(["-" * w for w in widths])]
    lines.extend(format_row(row) for row in rows[1:])
    return "\n".join(lines)


def swap_columns(table: Table, col_a: int, col_b: int) -> Table:
    result = []
    for row in table:
        row = list(row)
        row[col_a], row[col_b] = row[col_b], row[col_a]
        result.append(row)
    return result


def swap_rows(table: Table, row_a: int, row_b: int) -> Table:
    result = list(table)
    result[row_a], result[row_b] = result[row_b], result[row_a]
    return result


def delete_column(table: Table, index: int) -> Table:
    return [row[:index] + row[index + 1 :] for row in table]


def delete_row(table: Table, index: int) -> Table:
    return table[:index] + table[index + 1 :]


def add_column(table: Table, header: str = "Header") -> Table:
    return [row + [header if i == 0 else ""] for i, row in enumerate(table)]


def add_row(table: Table) -> Table:
    column_count = len(table[0]) if table else 0
    return [list(row) for row in table] + [[""] * column_count]


def find_table_at_position(text: str, offset: int) -> TableLocation | None:
    """
    The block of consecutive ``|``-prefixed lines around a cursor offset.

    Returns None unless the block has a header separator row.
    """
    if not text:
        return None

    lines = text.split("\n")
    offset = max(0, min(offset, len(text)))
    cursor_line = text.count("\n", 0, offset)

    def is_table_line(index: int) -> bool:
        return lines[index].strip().startswith("|")

    if not is_table_line(cursor_line):
        return None

    first = cursor_line
    while first > 0 and is_table_line(first - 1):
        first -= 1
    last = cursor_line
    while last < len(lines) - 1 and is_table_line(last + 1):
        last += 1

    block = lines[first : last + 1]
    if not any(_SEPARATOR_ROW.match(line.strip()) for line in block):
        return None

    start = sum(len(line) + 1 for line in lines[:first])
    end = start + len("\n".join(block))
    return TableLocation(lines=block, start=start, end=end)


def replace_table(text: str, location: TableLocation, table: Table) -> str:
    """Write an edited table back over its original location."""
    return text[: location.start] + generate_markdown_table(table) + text[location.end :]
