"""Scroll synchronization between the editor and the preview panel.

The front end reports layout (scroll height, viewport height, the top offset
of each rendered block) through ``PreviewViewport``; this module decides
where the preview should scroll to and suppresses the echo events that a
programmatic scroll causes on the other side.
"""

import asyncio
import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from fednotes.core.preview import PreviewRenderer, RenderedPreview

logger = logging.getLogger(__name__)

ZOOM_LEVELS = (50, 75, 90, 100, 110, 125, 150, 175, 200)
DEFAULT_ZOOM = 100

# Pixels; smaller target changes are ignored to avoid jitter
SCROLL_THRESHOLD = 10
# Space kept above the target block in line mode
BLOCK_TOP_PADDING = 50
# Ratios this close to an edge snap to the exact top or bottom
EDGE_SNAP = 0.01

SCROLL_SOURCE_TIMEOUT = 0.4
CONTENT_UPDATE_WINDOW = 0.1

SOURCE_EDITOR = "editor"
SOURCE_PREVIEW = "preview"


@dataclass
class PreviewViewport:
    """Layout of the preview panel as reported by the front end."""

    scroll_height: float = 0.0
    client_height: float = 0.0
    scroll_top: float = 0.0
    padding_bottom: float = 0.0
    block_tops: list[float] = field(default_factory=list)

    @property
    def max_scroll(self) -> float:
        return self.scroll_height - self.client_height

    def scroll_ratio(self) -> float:
        if self.max_scroll <= 0:
            return 0.0
        return self.scroll_top / self.max_scroll


def line_ratio(current_line: int, total_lines: int) -> float:
    return (current_line - 1) / max(total_lines - 1, 1)


def ratio_target(
    scroll_ratio: float, scroll_height: float, client_height: float
) -> float | None:
    """
    Preview scroll position for an editor scroll ratio.

    Returns:
        Target scrollTop, or None when the preview cannot scroll
    """
    max_scroll = scroll_height - client_height
    if max_scroll <= 0:
        return None
    if scroll_ratio <= EDGE_SNAP:
        return 0.0
    if scroll_ratio >= 1 - EDGE_SNAP:
        return float(max_scroll)
    return scroll_ratio * max_scroll


def line_target(
    current_line: int,
    total_lines: int,
    block_tops: list[float],
    scroll_height: float,
    client_height: float,
    block_index: int | None = None,
) -> float | None:
    """
    Preview scroll position that brings the cursor's block near the top.

    Args:
        current_line: 1-based cursor line
        total_lines: Lines in the editor
        block_tops: Top offset of each rendered block, in document order
        scroll_height: Full preview content height
        client_height: Visible preview height
        block_index: Block known to contain the line (from source anchors);
            estimated proportionally when omitted

    Returns:
        Target scrollTop, or None when there is nothing to sync
    """
    if total_lines <= 1:
        return None

    ratio = line_ratio(current_line, total_lines)
    if not block_tops:
        return max(0.0, ratio * (scroll_height - client_height))

    if block_index is None:
        block_index = math.floor(ratio * len(block_tops))
    block_index = max(0, min(block_index, len(block_tops) - 1))
    return max(0.0, block_tops[block_index] - BLOCK_TOP_PADDING)


def typewriter_target(
    current_line: int,
    total_lines: int,
    scroll_height: float,
    client_height: float,
    padding_bottom: float = 0.0,
) -> float | None:
    """Scroll position that centers the cursor line in the preview."""
    if total_lines <= 1:
        return None
    content_position = line_ratio(current_line, total_lines) * (
        scroll_height - padding_bottom
    )
    return max(0.0, content_position - client_height * 0.5)


class ScrollSynchronizer:
    """
    Keeps the preview panel in step with the editor.

    Must be used from a running event loop: the scroll-source and
    content-update flags are cleared by ``loop.call_later`` timers.
    """

    def __init__(
        self,
        viewport: PreviewViewport | None = None,
        renderer: PreviewRenderer | None = None,
        on_preview_scroll: Callable[[dict[str, Any]], None] | None = None,
        typewriter_mode: bool = False,
        zoom: int = DEFAULT_ZOOM,
    ):
        self.viewport = viewport or PreviewViewport()
        self.renderer = renderer or PreviewRenderer()
        self.on_preview_scroll = on_preview_scroll
        self.typewriter_mode = typewriter_mode
        self.zoom = zoom if zoom in ZOOM_LEVELS else DEFAULT_ZOOM
        self.sync_enabled = True
        self.visible = True

        self.preview: RenderedPreview | None = None
        self.last_scroll_target: float | None = None
        self.scroll_source: str | None = None
        self.is_updating_content = False

        self._last_rendered_content: str | None = None
        self._last_synced_line: int | None = None
        self._last_synced_total: int | None = None
        self._source_timer: asyncio.TimerHandle | None = None
        self._content_timer: asyncio.TimerHandle | None = None

    # --- Visibility and zoom ---

    def show(self) -> None:
        if self.visible:
            return
        self.visible = True
        self._last_rendered_content = None

    def hide(self) -> None:
        self.visible = False

    def toggle(self) -> bool:
        if self.visible:
            self.hide()
        else:
            self.show()
        return self.visible

    def zoom_in(self) -> int:
        index = ZOOM_LEVELS.index(self.zoom)
        if index < len(ZOOM_LEVELS) - 1:
            self.zoom = ZOOM_LEVELS[index + 1]
        return self.zoom

    def zoom_out(self) -> int:
        index = ZOOM_LEVELS.index(self.zoom)
        if index > 0:
            self.zoom = ZOOM_LEVELS[index - 1]
        return self.zoom

    # --- Rendering ---

    def render(self, content: str | None) -> RenderedPreview | None:
        """Render content and open the content-update window."""
        if not self.visible:
            return None
        self.preview = self.renderer.render(content)
        self._last_rendered_content = content
        self.is_updating_content = True
        self._content_timer = self._restart_timer(
            self._content_timer, CONTENT_UPDATE_WINDOW, self._end_content_update
        )
        return self.preview

    def update(
        self, content: str, current_line: int, total_lines: int
    ) -> float | None:
        """
        Re-render when the content changed, then follow the cursor.

        Returns:
            The new preview scroll target, or None if the preview did not move
        """
        if not self.visible:
            return None

        rendered = False
        if content != self._last_rendered_content:
            self.render(content)
            rendered = True

        if self.typewriter_mode:
            return self.sync_to_typewriter(current_line, total_lines)

        moved = (current_line, total_lines) != (
            self._last_synced_line,
            self._last_synced_total,
        )
        if not rendered and not moved:
            return None
        return self.sync_to_line(current_line, total_lines)

    # --- Editor -> preview ---

    def sync_scroll_ratio(self, scroll_ratio: float) -> float | None:
        if not self.sync_enabled or not self.visible:
            return None
        if self.scroll_source == SOURCE_PREVIEW:
            return None

        self.mark_scroll_from_editor()
        target = ratio_target(
            scroll_ratio, self.viewport.scroll_height, self.viewport.client_height
        )
        if target is not None:
            self.viewport.scroll_top = target
        return target

    def sync_to_line(self, current_line: int, total_lines: int) -> float | None:
        if not self.visible or total_lines <= 1:
            return None
        if self.scroll_source == SOURCE_PREVIEW:
            return None

        self._last_synced_line = current_line
        self._last_synced_total = total_lines

        block_index = None
        tops = self.viewport.block_tops
        if self.preview and tops and len(self.preview.anchors) == len(tops):
            block_index = self.preview.anchor_for_line(current_line - 1)

        target = line_target(
            current_line,
            total_lines,
            tops,
            self.viewport.scroll_height,
            self.viewport.client_height,
            block_index=block_index,
        )
        return self._scroll_to(target)

    def sync_to_typewriter(self, current_line: int, total_lines: int) -> float | None:
        if total_lines <= 1:
            return None
        self._last_synced_line = current_line
        self._last_synced_total = total_lines
        target = typewriter_target(
            current_line,
            total_lines,
            self.viewport.scroll_height,
            self.viewport.client_height,
            self.viewport.padding_bottom,
        )
        return self._scroll_to(target)

    # --- Preview -> editor ---

    def handle_preview_scroll(self) -> dict[str, Any] | None:
        """
        React to a scroll event from the preview panel.

        Returns:
            Scroll detail passed to ``on_preview_scroll``, or None when the
            event is an echo of our own scrolling or of a re-render
        """
        if not self.sync_enabled:
            return None
        if self.scroll_source == SOURCE_EDITOR or self.is_updating_content:
            return None

        self.mark_scroll_from_preview()
        detail = {
            "scroll_ratio": self.viewport.scroll_ratio(),
            "source_line": self._source_line_at_top(),
            "total_lines": self.preview.total_lines if self.preview else 0,
            "typewriter_mode": self.typewriter_mode,
        }
        if self.on_preview_scroll:
            self.on_preview_scroll(detail)
        return detail

    def mark_scroll_from_editor(self) -> None:
        self._mark_source(SOURCE_EDITOR)

    def mark_scroll_from_preview(self) -> None:
        self._mark_source(SOURCE_PREVIEW)

    def close(self) -> None:
        for timer in (self._source_timer, self._content_timer):
            if timer:
                timer.cancel()
        self._source_timer = self._content_timer = None
        self.scroll_source = None
        self.is_updating_content = False

    # --- Internals ---

    def _scroll_to(self, target: float | None) -> float | None:
        if target is None:
            return None
        if (
            self.last_scroll_target is not None
            and abs(target - self.last_scroll_target) <= SCROLL_THRESHOLD
        ):
            return None
        self.mark_scroll_from_editor()
        self.last_scroll_target = target
        self.viewport.scroll_top = target
        return target

    def _source_line_at_top(self) -> int | None:
        if not self.preview or not self.preview.anchors:
            return None
        tops = self.viewport.block_tops
        if len(tops) != len(self.preview.anchors):
            return None
        line = None
        for top, anchor in zip(tops, self.preview.anchors):
            if top > self.viewport.scroll_top:
                break
            line = anchor.line_start + 1
        return line

    def _mark_source(self, source: str) -> None:
        self.scroll_source = source
        self._source_timer = self._restart_timer(
            self._source_timer, SCROLL_SOURCE_TIMEOUT, self._clear_source
        )

    def _clear_source(self) -> None:
        self.scroll_source = None
        self._source_timer = None

    def _end_content_update(self) -> None:
        self.is_updating_content = False
        self._content_timer = None

    @staticmethod
    def _restart_timer(
        timer: asyncio.TimerHandle | None, delay: float, callback: Callable[[], None]
    ) -> asyncio.TimerHandle:
        if timer:
            timer.cancel()
        return asyncio.get_running_loop().call_later(delay, callback)
