"""Headless text surface used by the editor state machines."""

from collections.abc import Callable
from dataclasses import dataclass

ChangeListener = Callable[[str], None]


@dataclass(frozen=True)
class CursorInfo:
    """1-based cursor line and column."""

    line: int
    col: int


@dataclass(frozen=True)
class Selection:
    start: int
    end: int
    text: str


class EditorBuffer:
    """
    In-memory editor content with a cursor, selection and scroll ratio.

    Front ends mirror their editing widget into this buffer; the autosave
    coordinator and scroll synchronizer read from it.
    """

    def __init__(self, content: str = "", cursor: int = 0):
        self._content = content
        self._cursor = 0
        self._anchor: int | None = None
        self.scroll_ratio = 0.0
        self.enabled = True
        self._listeners: list[ChangeListener] = []
        self.move_cursor(cursor)

    @property
    def content(self) -> str:
        return self._content

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def total_lines(self) -> int:
        return self._content.count("\n") + 1

    def on_change(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def set_value(self, content: str) -> None:
        """Replace content without notifying listeners (file load)."""
        self._content = content or ""
        self._anchor = None
        self.move_cursor(self._cursor)

    def replace(self, content: str) -> None:
        """Replace content as a user edit."""
        if not self.enabled:
            return
        self.set_value(content)
        self._notify()

    def insert(self, text: str) -> None:
        """Insert text at the cursor, replacing any selection."""
        if not self.enabled:
            return
        start, end = self._selection_bounds()
        self._content = self._content[:start] + text + self._content[end:]
        self._anchor = None
        self._cursor = start + len(text)
        self._notify()

    def move_cursor(self, offset: int) -> None:
        self._cursor = max(0, min(offset, len(self._content)))

    def select(self, start: int, end: int) -> None:
        length = len(self._content)
        self._anchor = max(0, min(start, length))
        self._cursor = max(0, min(end, length))

    def selection(self) -> Selection:
        start, end = self._selection_bounds()
        return Selection(start, end, self._content[start:end])

    def cursor_info(self) -> CursorInfo:
        before = self._content[: self._cursor]
        line = before.count("\n") + 1
        col = self._cursor - (before.rfind("\n") + 1) + 1
        return CursorInfo(line, col)

    def line_offset(self, line: int) -> int:
        """Character offset where a 1-based line starts."""
        offset = 0
        for _ in range(max(line, 1) - 1):
            next_break = self._content.find("\n", offset)
            if next_break == -1:
                return len(self._content)
            offset = next_break + 1
        return offset

    def _selection_bounds(self) -> tuple[int, int]:
        if self._anchor is None:
            return self._cursor, self._cursor
        return min(self._anchor, self._cursor), max(self._anchor, self._cursor)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._content)
