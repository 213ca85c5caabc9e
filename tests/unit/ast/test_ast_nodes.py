#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for document nodes, tree helpers and visitors."""

import pytest

from docodec.ast import (
    Article,
    Cite,
    CodeBlock,
    CodeChunk,
    Datatable,
    DatatableColumn,
    Emphasis,
    Figure,
    Heading,
    ImageObject,
    Link,
    List,
    ListItem,
    NodeVisitor,
    Paragraph,
    Strong,
    Table,
    TableCell,
    TableRow,
    get_node_children,
    replace_node_children,
)


@pytest.mark.unit
class TestNodeConstruction:
    """Tests for node dataclasses and their validation."""

    def test_type_is_class_name(self):
        """Test that the discriminant tag is the class name."""
        assert Paragraph().type == "Paragraph"
        assert Article().type == "Article"

    def test_heading_defaults(self):
        """Test heading default depth and id."""
        heading = Heading(["Intro"])
        assert heading.depth == 1
        assert heading.id is None

    def test_heading_depth_must_be_positive(self):
        """Test that a heading depth below 1 is rejected."""
        with pytest.raises(ValueError, match="at least 1"):
            Heading(["Bad"], depth=0)

    def test_heading_depth_is_not_capped(self):
        """Test that deep section nesting is kept."""
        assert Heading(["Deep"], depth=8).depth == 8

    def test_list_order_validated(self):
        """Test that unknown list orders are rejected."""
        with pytest.raises(ValueError, match="List order"):
            List(items=[], order="sideways")

    def test_datatable_columns_must_have_equal_lengths(self):
        """Test that ragged datatables are rejected."""
        with pytest.raises(ValueError, match="equal lengths"):
            Datatable(columns=[DatatableColumn("a", [1, 2]), DatatableColumn("b", [1])])

    def test_article_extra_defaults_to_empty_dict(self):
        """Test that each article gets its own extra mapping."""
        first, second = Article(), Article()
        first.extra["x"] = 1
        assert second.extra == {}

    def test_block_flags(self):
        """Test which nodes are blocks."""
        assert Paragraph.is_block
        assert Table.is_block
        assert not Emphasis.is_block
        assert not Link.is_block


@pytest.mark.unit
class TestNodeChildren:
    """Tests for get_node_children and replace_node_children."""

    def test_paragraph_children(self):
        """Test getting inline content of a paragraph."""
        para = Paragraph(["Hello ", Strong(["world"])])
        assert get_node_children(para) == ["Hello ", Strong(["world"])]

    def test_figure_children_include_caption(self):
        """Test that figure content and caption are both children."""
        image = ImageObject(content_url="a.png")
        caption = Paragraph(["Caption"])
        figure = Figure(content=[image], caption=[caption])
        assert get_node_children(figure) == [image, caption]

    def test_code_chunk_outputs_are_not_children(self):
        """Test that computed outputs are excluded from children."""
        chunk = CodeChunk(text="1 + 1", outputs=[2])
        assert get_node_children(chunk) == []

    def test_primitives_have_no_children(self):
        """Test primitives and leaf nodes."""
        assert get_node_children("text") == []
        assert get_node_children(42) == []
        assert get_node_children(CodeBlock(text="x")) == []

    def test_optional_cite_content(self):
        """Test that a cite without content has no children."""
        assert get_node_children(Cite(target="bib1")) == []

    def test_replace_children_returns_copy(self):
        """Test replacing children leaves the original untouched."""
        original = Emphasis(["a"])
        updated = replace_node_children(original, ["b"])
        assert updated.content == ["b"]
        assert original.content == ["a"]

    def test_replace_children_of_leaf_raises(self):
        """Test that leaves cannot have children replaced."""
        with pytest.raises(ValueError):
            replace_node_children(CodeBlock(text="x"), ["y"])


class _TextCollector(NodeVisitor):
    def __init__(self):
        self.texts = []
        self.numbers = []

    def visit_text(self, value):
        self.texts.append(value)

    def visit_number(self, value):
        self.numbers.append(value)

    def visit_table(self, node):
        for row in node.rows:
            self.visit(row)

    def visit_table_row(self, node):
        for cell in node.cells:
            self.visit(cell)

    def visit_list(self, node):
        for item in node.items:
            self.visit(item)


@pytest.mark.unit
class TestNodeVisitor:
    """Tests for visitor dispatch over nodes and primitives."""

    def test_generic_visit_walks_children(self):
        """Test that unhandled nodes have their children visited."""
        collector = _TextCollector()
        collector.visit(Article(content=[Paragraph(["a", Emphasis(["b"]), 3])]))
        assert collector.texts == ["a", "b"]
        assert collector.numbers == [3]

    def test_booleans_are_not_numbers(self):
        """Test that True is dispatched to visit_boolean, not visit_number."""
        collector = _TextCollector()
        collector.visit(Paragraph([True, 1]))
        assert collector.numbers == [1]

    def test_custom_container_visits(self):
        """Test visiting tables and lists through overridden methods."""
        table = Table(rows=[TableRow(cells=[TableCell(["x"]), TableCell([2.5])])])
        items = List(items=[ListItem([Paragraph(["y"])])])
        collector = _TextCollector()
        for node in (table, items):
            collector.visit(node)
        assert collector.texts == ["x", "y"]
        assert collector.numbers == [2.5]

    def test_unknown_value_raises(self):
        """Test that values outside the document model are rejected."""
        with pytest.raises(TypeError):
            NodeVisitor().visit(object())
