"""Markdown preview rendering with source-line anchors.

Every top-level block in the rendered HTML carries ``data-md-line-start`` and
``data-md-line-end`` attributes (0-based, end exclusive) pointing back at the
editor lines it came from. The scroll synchronizer uses these anchors to keep
editor and preview aligned.
"""

from bisect import bisect_right
from dataclasses import dataclass, field

from markdown_it import MarkdownIt

from fednotes.core.frontmatter import split_frontmatter

# Block tokens that render as a single element without an _open/_close pair
_LEAF_BLOCKS = frozenset({"fence", "code_block", "hr"})


@dataclass(frozen=True)
class Anchor:
    """Source range of one rendered top-level block."""

    line_start: int
    line_end: int
    tag: str


@dataclass(frozen=True)
class RenderedPreview:
    """Result of rendering a note for the preview panel."""

    html: str
    total_lines: int
    anchors: list[Anchor] = field(default_factory=list)

    def anchor_for_line(self, line: int) -> int | None:
        """
        Index of the block containing a 0-based source line.

        Lines between blocks map to the nearest preceding block; lines before
        the first block map to the first one.
        """
        if not self.anchors:
            return None
        starts = [anchor.line_start for anchor in self.anchors]
        return max(bisect_right(starts, line) - 1, 0)


class PreviewRenderer:
    """Converts markdown to HTML, tagging blocks with their source lines."""

    def __init__(self) -> None:
        self._md = (
            MarkdownIt("commonmark", {"html": True, "typographer": True})
            .enable("table")
            .enable("strikethrough")
        )

    def render(self, content: str | None) -> RenderedPreview:
        """
        Render markdown, skipping any YAML/TOML frontmatter.

        Args:
            content: Full note content as typed in the editor

        Returns:
            RenderedPreview whose anchors use editor (original) line numbers
        """
        content = content or ""
        split = split_frontmatter(content)
        offset = split.body_line_offset

        env: dict = {}
        tokens = self._md.parse(split.body, env)

        anchors: list[Anchor] = []
        for token in tokens:
            if token.level != 0 or not token.map or len(token.map) != 2:
                continue
            if token.nesting != 1 and token.type not in _LEAF_BLOCKS:
                continue

            start, end = token.map[0] + offset, token.map[1] + offset
            token.attrSet("data-md-line-start", str(start))
            token.attrSet("data-md-line-end", str(end))
            anchors.append(Anchor(start, end, token.tag or token.type))

        html = self._md.renderer.render(tokens, self._md.options, env)
        total_lines = content.count("\n") + 1 if content else 0
        return RenderedPreview(html=html, total_lines=total_lines, anchors=anchors)
