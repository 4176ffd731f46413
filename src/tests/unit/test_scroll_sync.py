"""Tests for editor/preview scroll synchronization."""

import asyncio
from unittest.mock import MagicMock

import pytest

from fednotes.editor.scroll_sync import (
    BLOCK_TOP_PADDING,
    SOURCE_EDITOR,
    SOURCE_PREVIEW,
    PreviewViewport,
    ScrollSynchronizer,
    line_target,
    ratio_target,
    typewriter_target,
)

CONTENT = "# One\n\npara\n\n## Two\n\nmore\n\n## Three\n\nend"


def make_viewport(**kwargs):
    defaults = dict(scroll_height=2000, client_height=500, block_tops=[])
    defaults.update(kwargs)
    return PreviewViewport(**defaults)


class TestRatioTarget:
    """Tests for ratio-based scrolling."""

    def test_proportional(self):
        assert ratio_target(0.5, 2000, 500) == 750

    def test_snaps_to_top(self):
        assert ratio_target(0.005, 2000, 500) == 0

    def test_snaps_to_bottom(self):
        assert ratio_target(0.995, 2000, 500) == 1500

    def test_cannot_scroll(self):
        assert ratio_target(0.5, 400, 500) is None


class TestLineTarget:
    """Tests for line-based scrolling."""

    def test_single_line_document(self):
        assert line_target(1, 1, [0, 100], 2000, 500) is None

    def test_without_blocks_uses_ratio(self):
        assert line_target(6, 11, [], 2000, 500) == 750

    def test_estimates_block(self):
        tops = [0, 200, 400, 600, 800]

        # ratio 0.5 -> block 2
        assert line_target(6, 11, tops, 2000, 500) == 400 - BLOCK_TOP_PADDING

    def test_explicit_block_index(self):
        tops = [0, 200, 400]

        assert line_target(2, 11, tops, 2000, 500, block_index=2) == 350

    def test_never_negative(self):
        assert line_target(1, 10, [20, 200], 2000, 500) == 0

    def test_last_line_clamped(self):
        tops = [0, 200, 400]

        assert line_target(10, 10, tops, 2000, 500) == 350


class TestTypewriterTarget:
    def test_centers_line(self):
        # ratio 0.5 of 2000 content, minus half the viewport
        assert typewriter_target(6, 11, 2000, 500) == 750

    def test_padding_excluded(self):
        assert typewriter_target(11, 11, 2400, 500, padding_bottom=400) == 1750

    def test_single_line(self):
        assert typewriter_target(1, 1, 2000, 500) is None


class TestPreviewViewport:
    def test_scroll_ratio(self):
        viewport = make_viewport(scroll_top=750)

        assert viewport.scroll_ratio() == 0.5

    def test_scroll_ratio_when_not_scrollable(self):
        assert make_viewport(scroll_height=100).scroll_ratio() == 0


class TestScrollSynchronizer:
    """Tests for the stateful synchronizer."""

    @pytest.mark.asyncio
    async def test_sync_to_line_uses_anchors(self):
        """With matching block tops the block holding the cursor is targeted."""
        sync = ScrollSynchronizer(make_viewport(block_tops=[0, 100, 300, 500, 700, 900]))
        sync.render(CONTENT)

        # line 9 is "## Three", the fifth block
        target = sync.sync_to_line(9, 11)

        assert target == 700 - BLOCK_TOP_PADDING
        assert sync.viewport.scroll_top == target
        assert sync.scroll_source == SOURCE_EDITOR
        sync.close()

    @pytest.mark.asyncio
    async def test_small_moves_ignored(self):
        sync = ScrollSynchronizer(make_viewport())

        assert sync.sync_to_line(6, 11) == 750
        sync.scroll_source = None
        # Same target again is within the jitter threshold
        assert sync.sync_to_line(6, 11) is None
        sync.close()

    @pytest.mark.asyncio
    async def test_ratio_sync_blocked_while_preview_scrolls(self):
        sync = ScrollSynchronizer(make_viewport())
        sync.mark_scroll_from_preview()

        assert sync.sync_scroll_ratio(0.5) is None
        sync.close()

    @pytest.mark.asyncio
    async def test_scroll_source_clears_after_timeout(self):
        sync = ScrollSynchronizer(make_viewport())

        assert sync.sync_scroll_ratio(0.5) == 750
        assert sync.scroll_source == SOURCE_EDITOR
        await asyncio.sleep(0.45)

        assert sync.scroll_source is None

    @pytest.mark.asyncio
    async def test_preview_scroll_echo_ignored(self):
        """A preview scroll caused by the editor is not sent back."""
        callback = MagicMock()
        sync = ScrollSynchronizer(make_viewport(), on_preview_scroll=callback)
        sync.sync_scroll_ratio(0.5)

        assert sync.handle_preview_scroll() is None
        callback.assert_not_called()
        sync.close()

    @pytest.mark.asyncio
    async def test_preview_scroll_ignored_during_render(self):
        sync = ScrollSynchronizer(make_viewport())
        sync.render(CONTENT)

        assert sync.is_updating_content is True
        assert sync.handle_preview_scroll() is None

        await asyncio.sleep(0.15)
        assert sync.is_updating_content is False
        sync.close()

    @pytest.mark.asyncio
    async def test_preview_scroll_reports_position(self):
        callback = MagicMock()
        sync = ScrollSynchronizer(
            make_viewport(block_tops=[0, 100, 300, 500, 700, 900], scroll_top=750),
            on_preview_scroll=callback,
        )
        sync.render(CONTENT)
        await asyncio.sleep(0.15)

        detail = sync.handle_preview_scroll()

        assert detail == {
            "scroll_ratio": 0.5,
            "source_line": 9,
            "total_lines": 11,
            "typewriter_mode": False,
        }
        callback.assert_called_once_with(detail)
        assert sync.scroll_source == SOURCE_PREVIEW
        sync.close()

    @pytest.mark.asyncio
    async def test_update_skips_render_for_same_content(self):
        renderer = MagicMock()
        sync = ScrollSynchronizer(make_viewport(), renderer=renderer)

        sync.update(CONTENT, 1, 11)
        sync.update(CONTENT, 1, 11)

        renderer.render.assert_called_once_with(CONTENT)
        sync.close()

    @pytest.mark.asyncio
    async def test_show_forces_rerender(self):
        renderer = MagicMock()
        sync = ScrollSynchronizer(make_viewport(), renderer=renderer)
        sync.update(CONTENT, 1, 11)

        sync.hide()
        assert sync.update(CONTENT, 5, 11) is None
        sync.show()
        sync.update(CONTENT, 1, 11)

        assert renderer.render.call_count == 2
        sync.close()

    @pytest.mark.asyncio
    async def test_typewriter_mode(self):
        sync = ScrollSynchronizer(make_viewport(), typewriter_mode=True)

        assert sync.update(CONTENT, 6, 11) == 750
        sync.close()

    def test_zoom_steps(self):
        sync = ScrollSynchronizer(zoom=175)

        assert sync.zoom_in() == 200
        assert sync.zoom_in() == 200
        sync.zoom = 50
        assert sync.zoom_out() == 50
        assert ScrollSynchronizer(zoom=33).zoom == 100

    def test_toggle(self):
        sync = ScrollSynchronizer()

        assert sync.toggle() is False
        assert sync.toggle() is True
