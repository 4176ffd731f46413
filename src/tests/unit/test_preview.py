"""Tests for frontmatter handling and preview rendering."""

from fednotes.core.frontmatter import (
    parse_frontmatter,
    split_frontmatter,
    strip_frontmatter,
)
from fednotes.core.preview import Anchor, PreviewRenderer, RenderedPreview


class TestFrontmatter:
    """Tests for frontmatter splitting."""

    def test_yaml_block(self):
        split = split_frontmatter("---\ntitle: Hello\n---\n# Body\n")

        assert split.kind == "yaml"
        assert split.raw == "title: Hello"
        assert split.body == "# Body\n"
        assert split.body_line_offset == 3

    def test_toml_block(self):
        split = split_frontmatter('+++\ntitle = "x"\n+++\n\n\nText')

        assert split.kind == "toml"
        assert split.body == "Text"
        assert split.body_line_offset == 5

    def test_unclosed_block_is_body(self):
        content = "---\ntitle: Hello\nno end"

        assert split_frontmatter(content).kind is None
        assert strip_frontmatter(content) == content

    def test_frontmatter_only(self):
        split = split_frontmatter("---\na: 1\n---")

        assert split.body == ""
        assert split.body_line_offset == 3

    def test_parse_yaml(self):
        data, body = parse_frontmatter("---\ntags: [a, b]\n---\nText")

        assert data == {"tags": ["a", "b"]}
        assert body == "Text"

    def test_parse_invalid_yaml(self):
        data, body = parse_frontmatter("---\n: [unclosed\n---\nText")

        assert data is None
        assert body == "Text"

    def test_parse_non_mapping(self):
        data, _ = parse_frontmatter("---\n- a\n- b\n---\nText")

        assert data is None


class TestPreviewRenderer:
    """Tests for markdown rendering with source anchors."""

    def test_blocks_carry_line_ranges(self):
        rendered = PreviewRenderer().render("# Title\n\nParagraph one\nstill one\n\n- item")

        assert rendered.anchors == [
            Anchor(0, 1, "h1"),
            Anchor(2, 4, "p"),
            Anchor(5, 6, "ul"),
        ]
        assert '<h1 data-md-line-start="0" data-md-line-end="1">' in rendered.html
        assert rendered.total_lines == 6

    def test_frontmatter_offsets_anchors(self):
        """Anchors point at editor lines, not body lines."""
        rendered = PreviewRenderer().render("---\ntitle: x\n---\n# Heading")

        assert rendered.anchors == [Anchor(3, 4, "h1")]
        assert "title: x" not in rendered.html

    def test_fenced_code_anchor(self):
        rendered = PreviewRenderer().render("```python\nprint(1)\n```")

        assert rendered.anchors[0].line_start == 0
        assert rendered.anchors[0].line_end == 3
        assert 'data-md-line-start="0"' in rendered.html

    def test_nested_blocks_not_anchored(self):
        rendered = PreviewRenderer().render("> quote\n>\n> more")

        assert [a.tag for a in rendered.anchors] == ["blockquote"]

    def test_tables_enabled(self):
        rendered = PreviewRenderer().render("| a | b |\n|---|---|\n| 1 | 2 |")

        assert "<table" in rendered.html

    def test_empty(self):
        rendered = PreviewRenderer().render("")

        assert rendered.html == ""
        assert rendered.total_lines == 0
        assert rendered.anchors == []


class TestAnchorForLine:
    """Tests for mapping editor lines to blocks."""

    def setup_method(self):
        self.preview = RenderedPreview(
            html="",
            total_lines=10,
            anchors=[Anchor(1, 2, "h1"), Anchor(3, 5, "p"), Anchor(7, 8, "p")],
        )

    def test_line_inside_block(self):
        assert self.preview.anchor_for_line(4) == 1

    def test_line_between_blocks_uses_previous(self):
        assert self.preview.anchor_for_line(6) == 1

    def test_line_before_first_block(self):
        assert self.preview.anchor_for_line(0) == 0

    def test_no_anchors(self):
        assert RenderedPreview(html="", total_lines=0).anchor_for_line(3) is None
