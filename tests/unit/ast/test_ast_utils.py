#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for document tree utility functions."""

import pytest

from docodec.ast import (
    CodeBlock,
    Datatable,
    DatatableColumn,
    Emphasis,
    Heading,
    ImageObject,
    MediaObject,
    Paragraph,
    Strong,
    ThematicBreak,
)
from docodec.ast.utils import (
    collapse_title,
    extract_text,
    is_block,
    is_inline,
    is_primitive,
    is_whitespace_paragraph,
    node_type,
    normalize_inlines,
    split_paragraph,
    wrap_inline_runs,
)


@pytest.mark.unit
class TestNodeType:
    """Tests for node_type."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("hi", "Text"),
            (None, "Null"),
            (True, "Boolean"),
            (0, "Number"),
            (1.5, "Number"),
            ([1], "Array"),
            ({"a": 1}, "Object"),
            (Paragraph(), "Paragraph"),
        ],
    )
    def test_tags(self, value, expected):
        """Test the tag of each kind of value."""
        assert node_type(value) == expected

    def test_unknown_value(self):
        """Test that foreign objects are rejected."""
        with pytest.raises(TypeError):
            node_type(object())

    def test_primitive_and_block_predicates(self):
        """Test is_primitive, is_block and is_inline."""
        assert is_primitive(False)
        assert not is_primitive(Paragraph())
        assert is_block(ThematicBreak())
        assert not is_block("text")
        assert is_inline(42)
        assert is_inline(Emphasis(["x"]))


@pytest.mark.unit
class TestBlockCoercion:
    """Tests for wrap_inline_runs and split_paragraph."""

    def test_wrap_inline_runs_preserves_order(self):
        """Test that inline runs become paragraphs around blocks."""
        result = wrap_inline_runs(["a", Emphasis(["b"]), Heading(["c"]), "d"])
        assert result == [Paragraph(["a", Emphasis(["b"])]), Heading(["c"]), Paragraph(["d"])]

    def test_wrap_inline_runs_all_blocks(self):
        """Test that block-only content is unchanged."""
        blocks = [Paragraph(["x"]), ThematicBreak()]
        assert wrap_inline_runs(blocks) == blocks

    def test_split_paragraph_inline_only(self):
        """Test that inline-only content stays one paragraph."""
        assert split_paragraph(["a", 1]) == Paragraph(["a", 1])

    def test_split_paragraph_with_block(self):
        """Test that a block in a paragraph splits it."""
        code = CodeBlock(text="x")
        assert split_paragraph(["a", code, "b"]) == [Paragraph(["a"]), code, Paragraph(["b"])]

    @pytest.mark.parametrize(
        "node,expected",
        [
            (Paragraph([]), True),
            (Paragraph(["   "]), True),
            (Paragraph([" x "]), False),
            (Paragraph([" ", Emphasis(["x"])]), False),
            (Heading([" "]), False),
        ],
    )
    def test_is_whitespace_paragraph(self, node, expected):
        """Test detection of blank paragraphs."""
        assert is_whitespace_paragraph(node) is expected


@pytest.mark.unit
class TestExtractText:
    """Tests for extract_text."""

    def test_nested_formatting(self):
        """Test text from nested inline nodes."""
        assert extract_text(Paragraph(["Hello ", Strong([Emphasis(["world"])])])) == "Hello world"

    def test_primitives(self):
        """Test text of booleans, numbers and null."""
        assert extract_text([True, " ", 3, None]) == "true 3"

    def test_code_and_image_text(self):
        """Test leaf nodes with a text field."""
        assert extract_text(CodeBlock(text="x = 1")) == "x = 1"
        assert extract_text(ImageObject(content_url="a.png", text="alt")) == "alt"
        assert extract_text(MediaObject(content_url="a.mp4")) == ""

    def test_datatable_values(self):
        """Test text from datatable values."""
        table = Datatable(columns=[DatatableColumn("a", [1, 2])])
        assert extract_text(table, joiner=",") == "1,2"


@pytest.mark.unit
class TestNormalizeInlines:
    """Tests for normalize_inlines and collapse_title."""

    def test_merges_and_trims(self):
        """Test merging adjacent strings and trimming the edges."""
        assert normalize_inlines([" a", "b ", Emphasis([]), "c "]) == ["ab c"]

    def test_without_trim(self):
        """Test that whitespace is kept without trimming."""
        assert normalize_inlines([" a", "", "b "], trim=False) == [" ab "]

    def test_keeps_non_empty_marks(self):
        """Test that formatting with content is kept."""
        assert normalize_inlines(["a ", Strong(["b"]), " "]) == ["a ", Strong(["b"])]

    def test_collapse_title(self):
        """Test collapsing single-string titles."""
        assert collapse_title(["Title"]) == "Title"
        assert collapse_title(["A ", Emphasis(["B"])]) == ["A ", Emphasis(["B"])]
