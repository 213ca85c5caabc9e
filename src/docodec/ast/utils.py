#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/ast/utils.py
"""Utility functions for working with document trees.

Functions
---------
node_type : Discriminant tag of any value, primitives included
is_primitive : Whether a value is a primitive (text, null, boolean, number, array, object)
is_block : Whether a value may only appear in block content
wrap_inline_runs : Coerce mixed content into block content
normalize_inlines : Merge adjacent strings, drop empty marks, optionally trim
collapse_title : Collapse a one-string title to that string
extract_text : Extract plain text from a node or list of nodes

Examples
--------
    >>> from docodec.ast import Emphasis, Heading, Paragraph
    >>> from docodec.ast.utils import extract_text, wrap_inline_runs
    >>> extract_text(Paragraph(["Hello ", Emphasis(["world"])]))
    'Hello world'
    >>> wrap_inline_runs(["a", Heading(["b"]), "c"])
    [Paragraph(content=['a']), Heading(content=['b'], depth=1, id=None), Paragraph(content=['c'])]

"""

from __future__ import annotations

from typing import Any, Iterable

from docodec.ast.nodes import (
    CodeBlock,
    CodeChunk,
    CodeExpression,
    CodeFragment,
    Datatable,
    Delete,
    Emphasis,
    ImageObject,
    MathBlock,
    MathFragment,
    MediaObject,
    Node,
    Paragraph,
    Quote,
    Strong,
    Subscript,
    Superscript,
    get_node_children,
)


def node_type(value: Any) -> str:
    """Return the discriminant tag of a value.

    Examples
    --------
    >>> node_type("hi"), node_type(None), node_type(True), node_type(1.5)
    ('Text', 'Null', 'Boolean', 'Number')
    >>> node_type(Paragraph())
    'Paragraph'

    """
    if value is None:
        return "Null"
    if isinstance(value, bool):
        return "Boolean"
    if isinstance(value, (int, float)):
        return "Number"
    if isinstance(value, str):
        return "Text"
    if isinstance(value, list):
        return "Array"
    if isinstance(value, dict):
        return "Object"
    if isinstance(value, Node):
        return value.type
    raise TypeError(f"Not a document value: {type(value).__name__}")


def is_primitive(value: Any) -> bool:
    """Whether ``value`` is a primitive rather than a ``Node``."""
    return value is None or isinstance(value, (bool, int, float, str, list, dict))


def is_block(value: Any) -> bool:
    """Whether ``value`` is a block node."""
    return isinstance(value, Node) and value.is_block


def is_inline(value: Any) -> bool:
    """Whether ``value`` may appear in inline content (primitives included)."""
    return not is_block(value)


def wrap_inline_runs(nodes: Iterable[Any]) -> list[Any]:
    """Coerce a mixed sequence into block content.

    Consecutive inline values are gathered into a synthesized ``Paragraph``;
    block nodes pass through in place, so document order is preserved.

    Parameters
    ----------
    nodes : iterable
        Mixed block and inline values

    Returns
    -------
    list
        Block content only

    """
    blocks: list[Any] = []
    run: list[Any] = []
    for node in nodes:
        if is_block(node):
            if run:
                blocks.append(Paragraph(run))
                run = []
            blocks.append(node)
        else:
            run.append(node)
    if run:
        blocks.append(Paragraph(run))
    return blocks


def split_paragraph(content: list[Any]) -> Any:
    """Decode-side paragraph splitting.

    When the decoded children of a paragraph are all inline, return a single
    ``Paragraph``. When block nodes are mixed in (an image figure or a block
    extension on its own line), return a list of blocks with the inline runs
    flushed into paragraphs before and after each block node.

    Returns
    -------
    Paragraph or list
        A paragraph, or a list of blocks when splitting was needed

    """
    if not any(is_block(node) for node in content):
        return Paragraph(content)
    return wrap_inline_runs(content)


def is_whitespace_paragraph(node: Any) -> bool:
    """Whether ``node`` is a paragraph with no content or only whitespace text."""
    if not isinstance(node, Paragraph):
        return False
    if not node.content:
        return True
    return len(node.content) == 1 and isinstance(node.content[0], str) and not node.content[0].strip()


_TEXT_FIELDS = {
    CodeBlock: "text",
    CodeChunk: "text",
    CodeFragment: "text",
    CodeExpression: "text",
    MathBlock: "text",
    MathFragment: "text",
    ImageObject: "text",
}


def extract_text(node_or_nodes: Any, joiner: str = "") -> str:
    r"""Extract plain text from a node, a primitive, or a list of them.

    Text is taken from strings, from the ``text`` of code, math and image
    nodes, and from the ``str()`` of other primitives (``True``, ``3.5``).
    ``None`` and media contribute nothing.

    Parameters
    ----------
    node_or_nodes : Any
        A single value or a list of values
    joiner : str, default = ""
        String placed between sibling parts

    Returns
    -------
    str
        Concatenated text content

    Examples
    --------
    >>> extract_text(["Hello ", Strong(["world"])])
    'Hello world'

    """
    if node_or_nodes is None or isinstance(node_or_nodes, (MediaObject,)):
        return ""
    if isinstance(node_or_nodes, str):
        return node_or_nodes
    if isinstance(node_or_nodes, bool):
        return "true" if node_or_nodes else "false"
    if isinstance(node_or_nodes, (int, float)):
        return str(node_or_nodes)
    if isinstance(node_or_nodes, list):
        return joiner.join(extract_text(item, joiner) for item in node_or_nodes)
    if isinstance(node_or_nodes, dict):
        return ""
    if isinstance(node_or_nodes, Datatable):
        return joiner.join(
            extract_text(value, joiner) for column in node_or_nodes.columns for value in column.values
        )

    text_field = _TEXT_FIELDS.get(type(node_or_nodes))
    if text_field:
        return getattr(node_or_nodes, text_field) or ""
    return joiner.join(extract_text(child, joiner) for child in get_node_children(node_or_nodes))


_FORMATTING_NODES = (Emphasis, Strong, Delete, Superscript, Subscript, Quote)


def normalize_inlines(nodes: Iterable[Any], trim: bool = True) -> list[Any]:
    """Merge adjacent strings and drop empty strings and empty formatting nodes.

    With ``trim``, leading whitespace of the first string and trailing
    whitespace of the last string are removed.

    Examples
    --------
    >>> normalize_inlines([" a", "b ", Emphasis([]), "c "])
    ['ab c']

    """
    merged: list[Any] = []
    for node in nodes:
        if isinstance(node, _FORMATTING_NODES) and not node.content:
            continue
        if isinstance(node, str):
            if not node:
                continue
            if merged and isinstance(merged[-1], str):
                merged[-1] = merged[-1] + node
                continue
        merged.append(node)

    if not trim:
        return merged
    if merged and isinstance(merged[0], str):
        merged[0] = merged[0].lstrip()
        if not merged[0]:
            merged.pop(0)
    if merged and isinstance(merged[-1], str):
        merged[-1] = merged[-1].rstrip()
        if not merged[-1]:
            merged.pop()
    return merged


def collapse_title(content: list[Any]) -> Any:
    """A title made of a single string collapses to that string."""
    if len(content) == 1 and isinstance(content[0], str):
        return content[0]
    return content
