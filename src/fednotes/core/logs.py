"""Reading back the server log for the in-app log viewer."""

import os
from pathlib import Path

DEFAULT_TAIL_LINES = 100
MAX_TAIL_LINES = 500
_CHUNK_SIZE = 8192


def clamp_tail_lines(lines: int) -> int:
    if lines <= 0 or lines > MAX_TAIL_LINES:
        return DEFAULT_TAIL_LINES
    return lines


def tail_file(path: Path, num_lines: int) -> list[str]:
    """
    Last ``num_lines`` lines of a file, reading backwards in chunks.

    A trailing newline does not count as an extra empty line.
    """
    if num_lines <= 0:
        return []

    with open(path, "rb") as f:
        f.seek(0, os.SEEK_END)
        pos = f.tell()
        if pos == 0:
            return []

        buffer = b""
        # One extra newline accounts for the line cut at the chunk boundary
        while pos > 0 and buffer.count(b"\n") <= num_lines:
            read_size = min(_CHUNK_SIZE, pos)
            pos -= read_size
            f.seek(pos)
            buffer = f.read(read_size) + buffer

    text = buffer.decode("utf-8", errors="replace")
    if text.endswith("\n"):
        text = text[:-1]
    lines = text.split("\n")
    if pos > 0:
        # First entry may be a partial line
        lines = lines[1:]
    return lines[-num_lines:]
