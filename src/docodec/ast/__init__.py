#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/ast/__init__.py
"""Canonical document tree shared by all codecs.

Examples
--------
    >>> from docodec.ast import Article, Paragraph, Emphasis
    >>> doc = Article(title="Title", content=[Paragraph(["Some ", Emphasis(["text"]), "."])])

"""

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
    Node,
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
    get_node_children,
    replace_node_children,
)
from docodec.ast.serialization import ast_to_dict, ast_to_json, dict_to_ast, json_to_ast
from docodec.ast.utils import extract_text, is_block, is_inline, node_type, wrap_inline_runs
from docodec.ast.visitors import NodeVisitor

__all__ = [
    "Article",
    "Cite",
    "CodeBlock",
    "CodeChunk",
    "CodeExpression",
    "CodeFragment",
    "Collection",
    "CreativeWork",
    "Datatable",
    "DatatableColumn",
    "Delete",
    "Emphasis",
    "Figure",
    "Heading",
    "ImageObject",
    "Include",
    "Link",
    "List",
    "ListItem",
    "MathBlock",
    "MathFragment",
    "MediaObject",
    "MonetaryGrant",
    "Node",
    "NodeVisitor",
    "Organization",
    "Paragraph",
    "Periodical",
    "Person",
    "PropertyValue",
    "PublicationIssue",
    "PublicationVolume",
    "Quote",
    "QuoteBlock",
    "Strong",
    "Subscript",
    "Superscript",
    "Table",
    "TableCell",
    "TableRow",
    "ThematicBreak",
    "ast_to_dict",
    "ast_to_json",
    "dict_to_ast",
    "extract_text",
    "get_node_children",
    "is_block",
    "is_inline",
    "json_to_ast",
    "node_type",
    "replace_node_children",
    "wrap_inline_runs",
]
