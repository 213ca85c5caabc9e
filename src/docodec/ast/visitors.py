#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/ast/visitors.py
"""Visitor pattern implementation for tree traversal.

Codec encoders are visitors: each ``visit_*`` method turns one node type
into the target representation. Because primitives are plain Python values
with no ``accept`` method, visitors start from :meth:`NodeVisitor.visit`,
which dispatches primitives to ``visit_text``, ``visit_null``,
``visit_boolean``, ``visit_number``, ``visit_array`` and ``visit_object``
and composite nodes through ``accept``.

Every ``visit_*`` method defaults to :meth:`NodeVisitor.generic_visit`, so
visitors only implement the node types they handle.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from docodec.ast.nodes import Node, get_node_children

if TYPE_CHECKING:
    from docodec.ast.nodes import (
        Article,
        Cite,
        CodeBlock,
        CodeChunk,
        CodeExpression,
        CodeFragment,
        Collection,
        CreativeWork,
        Datatable,
        DatatableColumn,
        Delete,
        Emphasis,
        Figure,
        Heading,
        ImageObject,
        Include,
        Link,
        List,
        ListItem,
        MathBlock,
        MathFragment,
        MediaObject,
        MonetaryGrant,
        Organization,
        Paragraph,
        Periodical,
        Person,
        PropertyValue,
        PublicationIssue,
        PublicationVolume,
        Quote,
        QuoteBlock,
        Strong,
        Subscript,
        Superscript,
        Table,
        TableCell,
        TableRow,
        ThematicBreak,
    )


class NodeVisitor:
    """Base class for document tree visitors.

    Examples
    --------
    Visitor that counts emphasis nodes:

        >>> class EmphasisCounter(NodeVisitor):
        ...     def __init__(self):
        ...         self.count = 0
        ...
        ...     def visit_emphasis(self, node):
        ...         self.count += 1
        ...         self.generic_visit(node)
        ...
        >>> counter = EmphasisCounter()
        >>> counter.visit(article)

    """

    def visit(self, value: Any) -> Any:
        """Dispatch any value, primitive or node, to its ``visit_*`` method.

        Parameters
        ----------
        value : Any
            Node or primitive to visit

        Returns
        -------
        Any
            Result of the matching ``visit_*`` method

        """
        if isinstance(value, Node):
            return value.accept(self)
        if value is None:
            return self.visit_null(value)
        if isinstance(value, bool):
            return self.visit_boolean(value)
        if isinstance(value, (int, float)):
            return self.visit_number(value)
        if isinstance(value, str):
            return self.visit_text(value)
        if isinstance(value, list):
            return self.visit_array(value)
        if isinstance(value, dict):
            return self.visit_object(value)
        raise TypeError(f"Cannot visit value of type {type(value).__name__}")

    def generic_visit(self, node: Any) -> Any:
        """Fallback for unhandled types: visit the children of a node.

        Returns
        -------
        list
            Results of visiting each child (empty for leaves and primitives)

        """
        if not isinstance(node, Node):
            return None
        return [self.visit(child) for child in get_node_children(node)]

    # Primitives

    def visit_text(self, value: str) -> Any:
        return self.generic_visit(value)

    def visit_null(self, value: None) -> Any:
        return self.generic_visit(value)

    def visit_boolean(self, value: bool) -> Any:
        return self.generic_visit(value)

    def visit_number(self, value: int | float) -> Any:
        return self.generic_visit(value)

    def visit_array(self, value: list) -> Any:
        return self.generic_visit(value)

    def visit_object(self, value: dict) -> Any:
        return self.generic_visit(value)

    # Nodes

    def visit_article(self, node: Article) -> Any:
        return self.generic_visit(node)

    def visit_paragraph(self, node: Paragraph) -> Any:
        return self.generic_visit(node)

    def visit_heading(self, node: Heading) -> Any:
        return self.generic_visit(node)

    def visit_list(self, node: List) -> Any:
        return self.generic_visit(node)

    def visit_list_item(self, node: ListItem) -> Any:
        return self.generic_visit(node)

    def visit_table(self, node: Table) -> Any:
        return self.generic_visit(node)

    def visit_table_row(self, node: TableRow) -> Any:
        return self.generic_visit(node)

    def visit_table_cell(self, node: TableCell) -> Any:
        return self.generic_visit(node)

    def visit_code_block(self, node: CodeBlock) -> Any:
        return self.generic_visit(node)

    def visit_code_chunk(self, node: CodeChunk) -> Any:
        return self.generic_visit(node)

    def visit_quote_block(self, node: QuoteBlock) -> Any:
        return self.generic_visit(node)

    def visit_figure(self, node: Figure) -> Any:
        return self.generic_visit(node)

    def visit_thematic_break(self, node: ThematicBreak) -> Any:
        return self.generic_visit(node)

    def visit_collection(self, node: Collection) -> Any:
        return self.generic_visit(node)

    def visit_include(self, node: Include) -> Any:
        return self.generic_visit(node)

    def visit_math_block(self, node: MathBlock) -> Any:
        return self.generic_visit(node)

    def visit_datatable(self, node: Datatable) -> Any:
        return self.generic_visit(node)

    def visit_datatable_column(self, node: DatatableColumn) -> Any:
        return self.generic_visit(node)

    def visit_emphasis(self, node: Emphasis) -> Any:
        return self.generic_visit(node)

    def visit_strong(self, node: Strong) -> Any:
        return self.generic_visit(node)

    def visit_delete(self, node: Delete) -> Any:
        return self.generic_visit(node)

    def visit_superscript(self, node: Superscript) -> Any:
        return self.generic_visit(node)

    def visit_subscript(self, node: Subscript) -> Any:
        return self.generic_visit(node)

    def visit_link(self, node: Link) -> Any:
        return self.generic_visit(node)

    def visit_cite(self, node: Cite) -> Any:
        return self.generic_visit(node)

    def visit_quote(self, node: Quote) -> Any:
        return self.generic_visit(node)

    def visit_code_fragment(self, node: CodeFragment) -> Any:
        return self.generic_visit(node)

    def visit_code_expression(self, node: CodeExpression) -> Any:
        return self.generic_visit(node)

    def visit_image_object(self, node: ImageObject) -> Any:
        return self.generic_visit(node)

    def visit_media_object(self, node: MediaObject) -> Any:
        return self.generic_visit(node)

    def visit_math_fragment(self, node: MathFragment) -> Any:
        return self.generic_visit(node)

    def visit_person(self, node: Person) -> Any:
        return self.generic_visit(node)

    def visit_organization(self, node: Organization) -> Any:
        return self.generic_visit(node)

    def visit_periodical(self, node: Periodical) -> Any:
        return self.generic_visit(node)

    def visit_publication_volume(self, node: PublicationVolume) -> Any:
        return self.generic_visit(node)

    def visit_publication_issue(self, node: PublicationIssue) -> Any:
        return self.generic_visit(node)

    def visit_property_value(self, node: PropertyValue) -> Any:
        return self.generic_visit(node)

    def visit_monetary_grant(self, node: MonetaryGrant) -> Any:
        return self.generic_visit(node)

    def visit_creative_work(self, node: CreativeWork) -> Any:
        return self.generic_visit(node)
