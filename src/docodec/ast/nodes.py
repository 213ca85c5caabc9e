#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/ast/nodes.py
"""Node classes for the canonical document tree.

Every codec decodes into, and encodes from, the tree defined here. Composite
nodes are dataclasses deriving from ``Node``; primitive values are plain
Python values and are first-class inline content:

==========  ===========================
Node type   Python representation
==========  ===========================
Text        ``str``
Null        ``None``
Boolean     ``bool``
Number      ``int`` / ``float``
Array       ``list``
Object      ``dict``
==========  ===========================

Node Hierarchy
--------------
Block nodes:
    - Article, Paragraph, Heading, List, ListItem, Table, TableRow, TableCell
    - CodeBlock, CodeChunk, QuoteBlock, Figure, ThematicBreak, Collection
    - Include, MathBlock, Datatable, DatatableColumn

Inline nodes:
    - Emphasis, Strong, Delete, Superscript, Subscript
    - Link, Cite, Quote, CodeFragment, CodeExpression
    - ImageObject, MediaObject, MathFragment

Metadata nodes (article front matter and bibliographies):
    - Person, Organization, CreativeWork, Periodical, PublicationVolume
    - PublicationIssue, PropertyValue, MonetaryGrant

Trees hold no parent pointers; cross references (citations, ``#id`` link
targets) are by string id. Optional fields default to ``None`` and are
omitted when serialized.

"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, ClassVar, Optional, Union

LIST_ORDERS = ("ascending", "descending", "unordered")


class Node(ABC):
    """Base class for all composite document nodes.

    All nodes support the visitor pattern via ``accept``. Subclasses set
    ``is_block`` to True when they may only appear in block content.
    """

    is_block: ClassVar[bool] = False

    @property
    def type(self) -> str:
        """Discriminant tag of the node, its class name."""
        return type(self).__name__

    @abstractmethod
    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this node.

        Parameters
        ----------
        visitor : Any
            A visitor object with visit_* methods

        Returns
        -------
        Any
            Result from the visitor's processing

        """
        pass


# ============================================================================
# Metadata Nodes
# ============================================================================


@dataclass
class PropertyValue(Node):
    """A named identifier, e.g. a DOI or PMID.

    Parameters
    ----------
    value : str
        The identifier itself
    name : str, optional
        Identifier scheme (``doi``, ``pmid``, ``issn``...)
    property_id : str, optional
        URL of the scheme in a registry such as identifiers.org

    """

    value: str = ""
    name: Optional[str] = None
    property_id: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_property_value(self)


@dataclass
class Organization(Node):
    """An organization such as an author affiliation, funder or publisher."""

    name: Optional[str] = None
    address: Optional[str] = None
    url: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_organization(self)


@dataclass
class Person(Node):
    """A person, usually an author or editor.

    Parameters
    ----------
    given_names : list of str, optional
    family_names : list of str, optional
    honorific_prefix : str, optional
        e.g. ``Dr``
    honorific_suffix : str, optional
        e.g. ``Jr``
    name : str, optional
        Full name, used when the name is not split into parts
    emails : list of str, optional
    affiliations : list of Organization, optional

    """

    given_names: Optional[list[str]] = None
    family_names: Optional[list[str]] = None
    honorific_prefix: Optional[str] = None
    honorific_suffix: Optional[str] = None
    name: Optional[str] = None
    emails: Optional[list[str]] = None
    affiliations: Optional[list[Organization]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_person(self)


@dataclass
class Periodical(Node):
    """A journal or other serial publication."""

    title: Optional[str] = None
    issns: Optional[list[str]] = None
    identifiers: Optional[list[PropertyValue]] = None
    publisher: Optional[Organization] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_periodical(self)


@dataclass
class PublicationVolume(Node):
    """A volume of a periodical, or a book-like work a citation is part of."""

    volume_number: Optional[str] = None
    title: Optional[str] = None
    page_start: Optional[str] = None
    page_end: Optional[str] = None
    is_part_of: Optional[Node] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_publication_volume(self)


@dataclass
class PublicationIssue(Node):
    """An issue of a periodical volume."""

    issue_number: Optional[str] = None
    title: Optional[str] = None
    page_start: Optional[str] = None
    page_end: Optional[str] = None
    is_part_of: Optional[Node] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_publication_issue(self)


@dataclass
class MonetaryGrant(Node):
    """A funding grant with its award identifiers and funders."""

    identifiers: Optional[list[PropertyValue]] = None
    funders: Optional[list[Union[Organization, Person]]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_monetary_grant(self)


@dataclass
class CreativeWork(Node):
    """A generic creative work, e.g. a reference that is not an article."""

    title: Optional[Any] = None
    authors: Optional[list[Union[Person, Organization]]] = None
    date_published: Optional[str] = None
    url: Optional[str] = None
    id: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_creative_work(self)


# ============================================================================
# Block-level Nodes
# ============================================================================


@dataclass
class Article(Node):
    """Root node of a standalone document.

    Parameters
    ----------
    title : str or list, optional
        Title as a plain string, or inline content when it carries formatting
    authors, editors : list of Person or Organization, optional
    description : str or list, optional
        Abstract, as a string or block content
    date_published, date_received, date_accepted : str, optional
        ISO 8601 dates
    keywords : list of str, optional
    identifiers : list of PropertyValue, optional
    licenses : list, optional
        License URLs or CreativeWork nodes
    is_part_of : Node, optional
        Periodical, volume or issue the article is published in
    funded_by : list of MonetaryGrant, optional
    references : list, optional
        Bibliography entries (Article, CreativeWork or str)
    id : str, optional
    meta : dict, optional
        Metadata with no dedicated field (e.g. JATS author notes)
    content : list, optional
        Block content
    extra : dict
        Further top-level fields, such as unknown front matter keys. These
        are serialized at the top level alongside the named fields.

    """

    is_block: ClassVar[bool] = True

    title: Optional[Any] = None
    authors: Optional[list[Any]] = None
    editors: Optional[list[Any]] = None
    description: Optional[Any] = None
    date_published: Optional[str] = None
    date_received: Optional[str] = None
    date_accepted: Optional[str] = None
    keywords: Optional[list[str]] = None
    identifiers: Optional[list[PropertyValue]] = None
    licenses: Optional[list[Any]] = None
    is_part_of: Optional[Node] = None
    funded_by: Optional[list[MonetaryGrant]] = None
    references: Optional[list[Any]] = None
    id: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    content: Optional[list[Any]] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def accept(self, visitor: Any) -> Any:
        """Accept a visitor for processing this article.

        Returns
        -------
        Any
            Result from visitor.visit_article(self)

        """
        return visitor.visit_article(self)


@dataclass
class Paragraph(Node):
    """Paragraph node containing inline content."""

    is_block: ClassVar[bool] = True

    content: list[Any] = field(default_factory=list)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_paragraph(self)


@dataclass
class Heading(Node):
    """Heading node.

    Parameters
    ----------
    content : list, default = empty list
        Inline content of the heading
    depth : int, default = 1
        Nesting depth, 1 for the highest level. Not capped at 6: deeply
        nested JATS sections produce deeper headings.
    id : str, optional
        Identifier of the section the heading starts

    """

    is_block: ClassVar[bool] = True

    content: list[Any] = field(default_factory=list)
    depth: int = 1
    id: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate heading depth is at least 1."""
        if self.depth < 1:
            raise ValueError(f"Heading depth must be at least 1, got {self.depth}")

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_heading(self)


@dataclass
class ListItem(Node):
    """An item in a list; ``is_checked`` is set for task list items."""

    is_block: ClassVar[bool] = True

    content: list[Any] = field(default_factory=list)
    is_checked: Optional[bool] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_list_item(self)


@dataclass
class List(Node):
    """Ordered or unordered list.

    Parameters
    ----------
    items : list of ListItem
    order : {"ascending", "descending", "unordered"}, default "unordered"

    """

    is_block: ClassVar[bool] = True

    items: list[ListItem] = field(default_factory=list)
    order: str = "unordered"

    def __post_init__(self) -> None:
        """Validate list order."""
        if self.order not in LIST_ORDERS:
            raise ValueError(f"List order must be one of {LIST_ORDERS}, got {self.order!r}")

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_list(self)


@dataclass
class TableCell(Node):
    """Table cell with inline content.

    ``name`` (e.g. ``A1``) and ``position`` (``[column, row]``) are set by
    spreadsheet codecs.
    """

    content: list[Any] = field(default_factory=list)
    name: Optional[str] = None
    position: Optional[list[int]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_table_cell(self)


@dataclass
class TableRow(Node):
    """A row of table cells."""

    cells: list[TableCell] = field(default_factory=list)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_table_row(self)


@dataclass
class Table(Node):
    """Table node; when encoding, the first row is the header row."""

    is_block: ClassVar[bool] = True

    rows: list[TableRow] = field(default_factory=list)
    id: Optional[str] = None
    label: Optional[str] = None
    caption: Optional[list[Any]] = None
    title: Optional[Any] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_table(self)


@dataclass
class CodeBlock(Node):
    """Block of code with optional language and info-string metadata."""

    is_block: ClassVar[bool] = True

    text: str = ""
    programming_language: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_code_block(self)


@dataclass
class CodeChunk(Node):
    """Executable code with its outputs.

    Parameters
    ----------
    text : str
        Source code
    programming_language : str, optional
    meta : dict, optional
        Chunk options such as a label
    outputs : list, optional
        One entry per output. An entry is any node or primitive, or a list
        of block nodes when the output spans several blocks.

    """

    is_block: ClassVar[bool] = True

    text: str = ""
    programming_language: Optional[str] = None
    meta: Optional[dict[str, Any]] = None
    outputs: Optional[list[Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_code_chunk(self)


@dataclass
class QuoteBlock(Node):
    """Block quotation."""

    is_block: ClassVar[bool] = True

    content: list[Any] = field(default_factory=list)
    cite: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_quote_block(self)


@dataclass
class Figure(Node):
    """Figure with content (an image, table, chunk...) and caption blocks."""

    is_block: ClassVar[bool] = True

    content: list[Any] = field(default_factory=list)
    caption: Optional[list[Any]] = None
    label: Optional[str] = None
    id: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_figure(self)


@dataclass
class ThematicBreak(Node):
    """Thematic break (horizontal rule)."""

    is_block: ClassVar[bool] = True

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_thematic_break(self)


@dataclass
class Collection(Node):
    """Group of parts, such as the figures of a JATS ``<fig-group>``."""

    is_block: ClassVar[bool] = True

    parts: list[Any] = field(default_factory=list)
    meta: Optional[dict[str, Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_collection(self)


@dataclass
class Include(Node):
    """Inclusion of another document, with its decoded block content."""

    is_block: ClassVar[bool] = True

    source: str = ""
    content: Optional[list[Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_include(self)


@dataclass
class MathBlock(Node):
    """Display math, TeX by default."""

    is_block: ClassVar[bool] = True

    text: str = ""
    math_language: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_math_block(self)


@dataclass
class DatatableColumn(Node):
    """A named column of values."""

    name: str = ""
    values: list[Any] = field(default_factory=list)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_datatable_column(self)


@dataclass
class Datatable(Node):
    """Tabular data made of typed columns."""

    is_block: ClassVar[bool] = True

    name: Optional[str] = None
    columns: list[DatatableColumn] = field(default_factory=list)

    def __post_init__(self) -> None:
        """Validate that columns have equal lengths."""
        lengths = {len(column.values) for column in self.columns}
        if len(lengths) > 1:
            raise ValueError(f"Datatable columns must have equal lengths, got {sorted(lengths)}")

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_datatable(self)


# ============================================================================
# Inline Nodes
# ============================================================================


@dataclass
class Emphasis(Node):
    """Emphasized inline content."""

    content: list[Any] = field(default_factory=list)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_emphasis(self)


@dataclass
class Strong(Node):
    """Strongly emphasized inline content."""

    content: list[Any] = field(default_factory=list)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_strong(self)


@dataclass
class Delete(Node):
    """Struck-through inline content."""

    content: list[Any] = field(default_factory=list)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_delete(self)


@dataclass
class Superscript(Node):
    content: list[Any] = field(default_factory=list)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_superscript(self)


@dataclass
class Subscript(Node):
    content: list[Any] = field(default_factory=list)

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_subscript(self)


@dataclass
class Link(Node):
    """Hyperlink.

    Parameters
    ----------
    content : list
        Inline content of the link
    target : str
        URL or ``#id`` of the linked element
    title : str, optional
    relation : str, optional
        Kind of target, e.g. the JATS ``ref-type`` of a cross reference
    meta : dict, optional
        Attributes such as ``{target="_blank"}`` in Markdown

    """

    content: list[Any] = field(default_factory=list)
    target: str = ""
    title: Optional[str] = None
    relation: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_link(self)


@dataclass
class Cite(Node):
    """Citation of a reference by its id."""

    target: str = ""
    content: Optional[list[Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_cite(self)


@dataclass
class Quote(Node):
    """Inline quotation."""

    content: list[Any] = field(default_factory=list)
    cite: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_quote(self)


@dataclass
class CodeFragment(Node):
    """Inline code."""

    text: str = ""
    programming_language: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_code_fragment(self)


@dataclass
class CodeExpression(Node):
    """Inline executable expression and its last computed output."""

    text: str = ""
    programming_language: Optional[str] = None
    output: Optional[Any] = None
    meta: Optional[dict[str, Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_code_expression(self)


@dataclass
class ImageObject(Node):
    """Image; ``text`` holds the alternative text."""

    content_url: str = ""
    text: Optional[str] = None
    title: Optional[str] = None
    format: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_image_object(self)


@dataclass
class MediaObject(Node):
    """Audio, video or other non-image media."""

    content_url: str = ""
    format: Optional[str] = None
    meta: Optional[dict[str, Any]] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_media_object(self)


@dataclass
class MathFragment(Node):
    """Inline math, TeX by default."""

    text: str = ""
    math_language: Optional[str] = None

    def accept(self, visitor: Any) -> Any:
        return visitor.visit_math_fragment(self)


# ============================================================================
# Tree helpers
# ============================================================================

# Fields holding child content, per node class
_CHILD_FIELDS: dict[type, tuple[str, ...]] = {
    Article: ("content",),
    Paragraph: ("content",),
    Heading: ("content",),
    List: ("items",),
    ListItem: ("content",),
    Table: ("rows",),
    TableRow: ("cells",),
    TableCell: ("content",),
    QuoteBlock: ("content",),
    Figure: ("content", "caption"),
    Collection: ("parts",),
    Include: ("content",),
    Datatable: ("columns",),
    Emphasis: ("content",),
    Strong: ("content",),
    Delete: ("content",),
    Superscript: ("content",),
    Subscript: ("content",),
    Link: ("content",),
    Cite: ("content",),
    Quote: ("content",),
}


def get_node_children(node: Any) -> list[Any]:
    """Get the child content of a node.

    Primitives, leaf nodes and metadata nodes have no children. The outputs
    of a ``CodeChunk`` are not children: they are results, not content.

    Parameters
    ----------
    node : Any
        The node (or primitive) to get children from

    Returns
    -------
    list
        Child nodes and primitives, in document order

    Examples
    --------
    >>> para = Paragraph(["Hello ", Strong(["world"])])
    >>> len(get_node_children(para))
    2

    """
    children: list[Any] = []
    for field_name in _CHILD_FIELDS.get(type(node), ()):
        value = getattr(node, field_name)
        if value:
            children.extend(value)
    return children


def replace_node_children(node: Node, new_children: list[Any]) -> Node:
    """Create a copy of a node with replaced children.

    Raises
    ------
    ValueError
        If the node has no children, or has more than one child field
        (``Figure``), where the split would be ambiguous

    """
    field_names = _CHILD_FIELDS.get(type(node))
    if not field_names:
        raise ValueError(f"{type(node).__name__} nodes have no children")
    if len(field_names) > 1:
        raise ValueError(f"Cannot replace children of {type(node).__name__}: children span {field_names}")
    return replace(node, **{field_names[0]: list(new_children)})
