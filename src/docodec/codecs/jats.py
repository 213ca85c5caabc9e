#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/jats.py
"""JATS codec.

Decodes and encodes articles in the `Journal Article Tag Suite
<https://jats.nlm.nih.gov/>`_, the XML format journals deposit with
PubMed Central.

Decoding parses with ``defusedxml`` and walks the ``<article>`` element:
``<front>`` becomes the Article's metadata (title, authors, dates, journal,
licenses, keywords, identifiers, funding), ``<back>`` its references, and
``<body>`` its content. Section nesting drives heading depths; a
:class:`DecodeState` is passed down explicitly and copied on entering each
``<sec>``.

Encoding builds an ``xml.etree.ElementTree`` tree with a fresh
:class:`EncodeState`. Citations are filled in two phases: every
``<xref ref-type="bibr">`` is first rendered empty and recorded under its
``rid``, and once the whole article (references included) is rendered each
recorded element whose reference is known gets its citation text (for
example ``Smith et al., 1990``).

"""

from __future__ import annotations

import copy
import logging
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional

from docodec.ast.nodes import (
    Article,
    Cite,
    CodeBlock,
    CodeFragment,
    Collection,
    CreativeWork,
    Delete,
    Emphasis,
    Figure,
    Heading,
    ImageObject,
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
    QuoteBlock,
    Strong,
    Subscript,
    Superscript,
    Table,
    TableCell,
    TableRow,
    ThematicBreak,
    get_node_children,
)
from docodec.ast.utils import (
    collapse_title,
    extract_text,
    is_block,
    node_type,
    normalize_inlines,
    wrap_inline_runs,
)
from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.constants import (
    DEPS_JATS,
    IDENTIFIERS_REGISTRY_URL,
    JATS_DOCTYPE,
    JATS_FIG_CONTENT_ELEMENTS,
    MATHML_NAMESPACE,
    XLINK_NAMESPACE,
)
from docodec.exceptions import MalformedInputError, SecurityError
from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.vfile import VFile, dump, is_path

logger = logging.getLogger(__name__)

ET.register_namespace("xlink", XLINK_NAMESPACE)
ET.register_namespace("mml", MATHML_NAMESPACE)

_XLINK_HREF = f"{{{XLINK_NAMESPACE}}}href"
_XLINK_TYPE = f"{{{XLINK_NAMESPACE}}}type"

_SNIFF_PATTERN = re.compile(r"<!DOCTYPE\s+article\s+PUBLIC\s+[\"']-//NLM//DTD JATS \(Z39\.96\)")
_WHITESPACE = re.compile(r"\s+")

# Elements whose children are laid out one per line when encoding; the rest
# hold mixed content and are written as-is
_CONTAINER_ELEMENTS = frozenset(
    {
        "abstract",
        "aff",
        "alternatives",
        "article",
        "article-meta",
        "back",
        "body",
        "caption",
        "contrib",
        "contrib-group",
        "disp-quote",
        "element-citation",
        "fig",
        "fig-group",
        "front",
        "kwd-group",
        "list",
        "list-item",
        "name",
        "person-group",
        "pub-date",
        "ref",
        "ref-list",
        "sec",
        "table",
        "table-wrap",
        "tbody",
        "title-group",
        "tr",
    }
)

# Elements skipped when walking content; their information is read elsewhere
_SKIPPED_ELEMENTS = frozenset({"label", "object-id"})


# ============================================================================
# State
# ============================================================================


@dataclass
class DecodeState:
    """State passed down while decoding.

    Parameters
    ----------
    article : Element
        The ``<article>`` element, for looking up targets such as ``<aff id>``
    section_id : str
        Id of the enclosing ``<sec>``, given to its heading
    section_depth : int
        Nesting depth of the enclosing ``<sec>``, used as heading depth

    """

    article: Any
    section_id: str = ""
    section_depth: int = 0


@dataclass
class EncodeState:
    """State threaded through encoding.

    Parameters
    ----------
    tables : int
        Number of tables encoded so far, for ``Table N.`` labels
    citations : dict
        ``<xref ref-type="bibr">`` elements by ``rid``, filled in once the
        references are known
    references : dict
        Citation text by reference id, e.g. ``{"bib1": "Smith et al., 1990"}``

    """

    tables: int = 0
    citations: dict[str, list[ET.Element]] = field(default_factory=dict)
    references: dict[str, str] = field(default_factory=dict)


# ============================================================================
# Element helpers
# ============================================================================


def _local(tag: Any) -> str:
    """Local name of a tag; ``{ns}math`` and ``math`` both give ``math``."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _matches(elem: ET.Element, names: tuple[str, ...], attrs: Optional[dict[str, str]]) -> bool:
    if _local(elem.tag) not in names:
        return False
    return not attrs or all(elem.get(key) == value for key, value in attrs.items())


def _child(elem: Optional[ET.Element], *names: str, attrs: Optional[dict[str, str]] = None) -> Optional[ET.Element]:
    """First direct child with one of ``names``."""
    if elem is None:
        return None
    return next((child for child in elem if _matches(child, names, attrs)), None)


def _children(elem: Optional[ET.Element], *names: str) -> list[ET.Element]:
    if elem is None:
        return []
    return [child for child in elem if _matches(child, names, None)]


def _first(elem: Optional[ET.Element], *names: str, attrs: Optional[dict[str, str]] = None) -> Optional[ET.Element]:
    """First descendant with one of ``names``."""
    return next(iter(_all(elem, *names, attrs=attrs)), None)


def _all(elem: Optional[ET.Element], *names: str, attrs: Optional[dict[str, str]] = None) -> list[ET.Element]:
    """All descendants with one of ``names``, in document order."""
    if elem is None:
        return []
    return [node for node in elem.iter() if node is not elem and _matches(node, names, attrs)]


def _text(elem: Optional[ET.Element]) -> Optional[str]:
    """Whitespace-normalized text of an element, or None when empty."""
    if elem is None:
        return None
    text = _WHITESPACE.sub(" ", "".join(elem.itertext())).strip()
    return text or None


def _split_text(elem: Optional[ET.Element]) -> Optional[list[str]]:
    text = _text(elem)
    return text.split() if text else None


def decode_internal_id(value: Optional[str]) -> str:
    """Normalize an internal id so that it cannot be mistaken for a URL.

    Examples
    --------
    >>> decode_internal_id("pone.0012345.ref1")
    'pone-0012345-ref1'

    """
    if value is None:
        logger.warning("Internal id is missing")
        return ""
    return value.replace(".", "-")


def _identifier_type_uri(name: Optional[str]) -> Optional[str]:
    return f"{IDENTIFIERS_REGISTRY_URL}{name}" if name else None


def _media_type(elem: ET.Element) -> Optional[str]:
    mimetype = elem.get("mimetype") or ""
    subtype = elem.get("mime-subtype") or ""
    joiner = "/" if mimetype and subtype else ""
    return (mimetype + joiner + subtype) or None


def _append(parent: ET.Element, items: Iterable[Any]) -> ET.Element:
    """Append elements and strings (as text or tails) to ``parent``."""
    for item in items:
        if item is None:
            continue
        if isinstance(item, str):
            if len(parent):
                last = parent[-1]
                last.tail = (last.tail or "") + item
            else:
                parent.text = (parent.text or "") + item
        else:
            parent.append(item)
    return parent


def _elem(tag: str, attrs: Optional[dict[str, Any]] = None, *children: Any) -> ET.Element:
    element = ET.Element(tag, {key: str(value) for key, value in (attrs or {}).items() if value is not None})
    return _append(element, children)


def _indent(elem: ET.Element, level: int = 0, space: str = "    ") -> None:
    """Indent container elements in place, leaving mixed content untouched."""
    if _local(elem.tag) not in _CONTAINER_ELEMENTS or not len(elem):
        return
    indentation = "\n" + space * (level + 1)
    if not (elem.text or "").strip():
        elem.text = indentation
    for child in elem:
        _indent(child, level + 1, space)
        if not (child.tail or "").strip():
            child.tail = indentation
    last = elem[-1]
    if not (last.tail or "").strip():
        last.tail = "\n" + space * level


# ============================================================================
# Decoding
# ============================================================================


class JatsDecoder:
    """Decodes a JATS element tree to document nodes.

    Handlers take the element and the current :class:`DecodeState` and
    return a list of nodes, usually with a single item.
    """

    _ELEMENT_HANDLERS = {
        "sec": "_decode_section",
        "title": "_decode_heading",
        "p": "_decode_paragraph",
        "list": "_decode_list",
        "table-wrap": "_decode_table_wrap",
        "ext-link": "_decode_ext_link",
        "uri": "_decode_ext_link",
        "inline-graphic": "_decode_inline_graphic",
        "graphic": "_decode_graphic",
        "media": "_decode_media",
        "xref": "_decode_xref",
        "italic": "_decode_emphasis",
        "bold": "_decode_strong",
        "strike": "_decode_delete",
        "sup": "_decode_superscript",
        "sub": "_decode_subscript",
        "monospace": "_decode_monospace",
        "inline-formula": "_decode_math",
        "disp-formula": "_decode_math",
        "break": "_decode_break",
        "fig": "_decode_figure",
        "fig-group": "_decode_fig_group",
        "code": "_decode_code",
        "preformat": "_decode_code",
        "disp-quote": "_decode_disp_quote",
        "hr": "_decode_thematic_break",
    }

    def decode(self, text: str) -> Any:
        """Decode a JATS document.

        Returns
        -------
        Article or list
            The Article, or a list of blocks when there is no ``<article>``

        Raises
        ------
        MalformedInputError
            If the XML is not well-formed
        SecurityError
            If the XML uses forbidden constructs (entity declarations)

        """
        from defusedxml import DefusedXmlException
        from defusedxml import ElementTree as DefusedET

        try:
            root = DefusedET.fromstring(text)
        except ET.ParseError as e:
            raise MalformedInputError(f"Invalid JATS XML: {e}", snippet=text[:200], original_error=e) from e
        except DefusedXmlException as e:
            raise SecurityError(f"Unsafe XML rejected: {e}", original_error=e) from e

        article = root if _local(root.tag) == "article" else _first(root, "article")
        if article is not None:
            return self.decode_article(article)

        logger.warning("No <article> element in JATS document; decoding its content")
        state = DecodeState(article=root)
        return wrap_inline_runs(
            node for node in self._decode_element(root, state) if not (isinstance(node, str) and not node.strip())
        )

    def decode_article(self, elem: ET.Element) -> Article:
        """Decode an ``<article>`` element."""
        state = DecodeState(article=elem)
        article = Article()
        meta: dict[str, Any] = {}

        front = _child(elem, "front")
        if front is not None:
            self._decode_front(front, article, meta, state)

        back = _child(elem, "back")
        if back is not None:
            article.references = self._decode_references(_first(back, "ref-list"))

        body = _child(elem, "body")
        if body is not None:
            article.content = self._decode_blocks(body, state)

        article.meta = meta or None
        return article

    # ------------------------------------------------------------------
    # Content walking
    # ------------------------------------------------------------------

    def _decode_element(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        name = _local(elem.tag)
        if name in _SKIPPED_ELEMENTS:
            return []
        handler = self._ELEMENT_HANDLERS.get(name)
        if handler is not None:
            return getattr(self, handler)(elem, state)
        logger.warning(f"Using default decoding for JATS element: <{name}>")
        return self._decode_content(elem, state)

    def _decode_content(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        """Decode the text and children of ``elem`` in document order."""
        nodes: list[Any] = []
        if elem.text:
            nodes.append(_WHITESPACE.sub(" ", elem.text))
        for child in elem:
            nodes.extend(self._decode_element(child, state))
            if child.tail:
                nodes.append(_WHITESPACE.sub(" ", child.tail))
        return nodes

    def _decode_blocks(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        """Decode as block content; inline runs are flushed into paragraphs."""
        blocks: list[Any] = []
        run: list[Any] = []

        def flush() -> None:
            content = normalize_inlines(run)
            if content:
                blocks.append(Paragraph(content))
            run.clear()

        for node in self._decode_content(elem, state):
            if is_block(node):
                flush()
                blocks.append(node)
            else:
                run.append(node)
        flush()
        return blocks

    def _decode_inlines(self, elem: ET.Element, state: DecodeState, trim: bool = True) -> list[Any]:
        """Decode as inline content; block nodes are dropped."""
        content = []
        for node in self._decode_content(elem, state):
            if is_block(node):
                logger.debug(f"Dropping {node_type(node)} found in inline <{_local(elem.tag)}>")
                continue
            content.append(node)
        return normalize_inlines(content, trim=trim)

    # ------------------------------------------------------------------
    # Front matter
    # ------------------------------------------------------------------

    def _decode_front(self, front: ET.Element, article: Article, meta: dict[str, Any], state: DecodeState) -> None:
        article.authors = self._decode_contribs(front, "author", state)
        article.editors = self._decode_contribs(front, "editor", state)
        article.date_published = self._decode_date_published(front)

        history = _first(front, "history")
        received = _child(history, "date", attrs={"date-type": "received"})
        accepted = _child(history, "date", attrs={"date-type": "accepted"})
        article.date_received = self._decode_date(received) if received is not None else None
        article.date_accepted = self._decode_date(accepted) if accepted is not None else None

        article.title = self._decode_title(_first(front, "article-title"), state)
        abstract = _first(front, "abstract")
        if abstract is not None:
            article.description = [
                block for p in _all(abstract, "p") for block in self._decode_paragraph(p, state)
            ]
        article.is_part_of = self._decode_is_part_of(front)
        article.licenses = self._decode_licenses(front)
        article.keywords = [kwd for kwd in (_text(elem) for elem in _all(front, "kwd")) if kwd] or None
        article.identifiers = self._decode_identifiers(front) or None
        article.funded_by = self._decode_funding(front)

        notes = [note for note in (_text(fn) for fn in _all(_first(front, "author-notes"), "fn")) if note]
        if notes:
            meta["authorNotes"] = notes

    def _decode_title(self, elem: Optional[ET.Element], state: DecodeState) -> Any:
        if elem is None:
            return "Untitled"
        content = self._decode_inlines(elem, state)
        return collapse_title(content) if content else "Untitled"

    def _decode_contribs(self, front: ET.Element, contrib_type: str, state: DecodeState) -> Optional[list[Person]]:
        contribs = _all(front, "contrib", attrs={"contrib-type": contrib_type})
        return [self._decode_contrib(contrib, state) for contrib in contribs] or None

    def _decode_contrib(self, contrib: ET.Element, state: DecodeState) -> Person:
        name = _child(contrib, "name", "string-name")
        person = self._decode_name(name) if name is not None else Person()

        emails = [email for email in (_text(elem) for elem in _all(contrib, "email")) if email]
        if emails:
            person.emails = emails

        affiliations = [self._decode_aff(aff) for aff in _all(contrib, "aff")]
        for ref in _all(contrib, "xref", attrs={"ref-type": "aff"}):
            rid = ref.get("rid")
            aff = _first(state.article, "aff", attrs={"id": rid}) if rid else None
            if aff is None:
                logger.warning(f"Could not find <aff id={rid}>")
                continue
            affiliations.append(self._decode_aff(aff))
        if affiliations:
            person.affiliations = affiliations
        return person

    def _decode_name(self, name: ET.Element) -> Person:
        person = Person(
            given_names=_split_text(_child(name, "given-names")),
            family_names=_split_text(_child(name, "surname")),
            honorific_prefix=_text(_child(name, "prefix")),
            honorific_suffix=_text(_child(name, "suffix")),
        )
        if person.given_names is None and person.family_names is None:
            person.name = _text(name)
        return person

    def _decode_aff(self, aff: ET.Element) -> Organization:
        name = _text(_child(aff, "institution"))
        parts = _all(aff, "addr-line", "city", "state", "country", "postal-code")
        address = [text for text in (_text(elem) for elem in parts) if text]
        # Without an <institution>, the first address line is the name
        if name is None and address:
            name, address = address[0], address[1:]
        if name is None:
            name = _text(aff)
        return Organization(name=name, address=", ".join(address) or None, url=_text(_child(aff, "uri")))

    def _decode_date_published(self, front: ET.Element) -> Optional[str]:
        dates = _all(front, "pub-date")
        if not dates:
            return None
        for date in dates:
            if date.get("date-type") == "publication" or date.get("pub-type") == "epub":
                return self._decode_date(date)
        return self._decode_date(dates[0])

    def _decode_date(self, elem: ET.Element) -> Optional[str]:
        iso = elem.get("iso-8601-date")
        if iso:
            return iso
        year = _text(_child(elem, "year"))
        if year is None:
            return None
        value = year.zfill(4)
        month = _text(_child(elem, "month"))
        if month:
            value += f"-{month.zfill(2)}"
            day = _text(_child(elem, "day"))
            if day:
                value += f"-{day.zfill(2)}"
        return value

    def _decode_is_part_of(self, front: ET.Element) -> Optional[PublicationVolume]:
        journal = _first(front, "journal-meta")
        if journal is None:
            return None

        identifiers = []
        for elem in _all(journal, "journal-id"):
            value = _text(elem)
            if value:
                name = elem.get("journal-id-type")
                identifiers.append(PropertyValue(value=value, name=name, property_id=_identifier_type_uri(name)))
        publisher = _text(_first(journal, "publisher-name"))

        periodical = Periodical(
            title=_text(_first(journal, "journal-title")),
            issns=[issn for issn in (_text(elem) for elem in _all(journal, "issn")) if issn] or None,
            identifiers=identifiers or None,
            publisher=Organization(name=publisher) if publisher else None,
        )
        return PublicationVolume(volume_number=_text(_first(front, "volume")), is_part_of=periodical)

    def _decode_licenses(self, front: ET.Element) -> Optional[list[Any]]:
        licenses = _all(_first(front, "permissions"), "license")
        if not licenses:
            return None
        return [
            CreativeWork(url=license.get(_XLINK_HREF), title=_text(_first(license, "license-p")))
            for license in licenses
        ]

    def _decode_identifiers(self, front: ET.Element) -> list[PropertyValue]:
        identifiers = []
        for elem in _all(front, "article-id"):
            value = _text(elem)
            if value:
                name = elem.get("pub-id-type")
                identifiers.append(PropertyValue(value=value, name=name, property_id=_identifier_type_uri(name)))
        for elem in _all(front, "elocation-id"):
            value = _text(elem)
            if value:
                identifiers.append(
                    PropertyValue(value=value, name="elocation-id", property_id=_identifier_type_uri("elocation-id"))
                )
        return identifiers

    def _decode_funding(self, front: ET.Element) -> Optional[list[MonetaryGrant]]:
        awards = _all(_first(front, "funding-group"), "award-group")
        if not awards:
            return None

        grants = []
        for award in awards:
            identifiers = [PropertyValue(value=value) for value in (_text(e) for e in _all(award, "award-id")) if value]
            funders: list[Organization] = []
            for source in _all(award, "funding-source"):
                name = _text(_first(source, "institution")) or _text(source)
                if name and all(funder.name != name for funder in funders):
                    funders.append(Organization(name=name))
            grants.append(MonetaryGrant(identifiers=identifiers or None, funders=funders or None))
        return grants

    # ------------------------------------------------------------------
    # Back matter
    # ------------------------------------------------------------------

    def _decode_references(self, ref_list: Optional[ET.Element]) -> Optional[list[Any]]:
        if ref_list is None:
            return None
        references = []
        for ref in _all(ref_list, "ref"):
            citation = _child(ref, "element-citation", "mixed-citation")
            if citation is not None:
                references.append(self._decode_reference(citation, ref.get("id")))
        return references

    def _decode_reference(self, elem: ET.Element, ref_id: Optional[str]) -> Any:
        names = _all(elem, "name", "string-name")
        title = _text(_child(elem, "article-title"))
        if not names and title is None and _child(elem, "source") is None:
            # Unstructured citation text
            return _text(elem) or ""

        work = Article(authors=[self._decode_name(name) for name in names], title=title)

        year = _child(elem, "year")
        if year is not None:
            work.date_published = year.get("iso-8601-date") or _text(year)

        source = _child(elem, "source")
        if source is not None:
            page_start = _text(_child(elem, "fpage"))
            page_end = _text(_child(elem, "lpage"))
            volume = PublicationVolume(title=_text(source), volume_number=_text(_child(elem, "volume")))
            issue = _text(_child(elem, "issue"))
            if issue is not None:
                work.is_part_of = PublicationIssue(
                    issue_number=issue, page_start=page_start, page_end=page_end, is_part_of=volume
                )
            else:
                volume.page_start, volume.page_end = page_start, page_end
                work.is_part_of = volume

        if ref_id:
            work.id = decode_internal_id(ref_id)
        return work

    # ------------------------------------------------------------------
    # Body elements
    # ------------------------------------------------------------------

    def _decode_section(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        section_state = replace(state, section_id=elem.get("id") or "", section_depth=state.section_depth + 1)
        return self._decode_blocks(elem, section_state)

    def _decode_heading(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [
            Heading(
                content=self._decode_inlines(elem, state),
                depth=max(state.section_depth, 1),
                id=state.section_id or None,
            )
        ]

    def _decode_paragraph(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return self._decode_blocks(elem, state)

    def _decode_list(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        list_type = elem.get("list-type")
        order = "unordered" if list_type in ("bullet", "simple") else "ascending"
        items = [ListItem(content=self._decode_blocks(item, state)) for item in _children(elem, "list-item")]
        return [List(items=items, order=order)]

    def _decode_table_wrap(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        table = Table(id=elem.get("id"))
        caption = _child(elem, "caption")
        if caption is not None:
            title = _child(caption, "title")
            if title is not None:
                table.title = collapse_title(self._decode_inlines(title, state)) or None
            rest = [block for p in _children(caption, "p") for block in self._decode_paragraph(p, state)]
            table.caption = rest or None

        table.rows = [
            TableRow(cells=[TableCell(content=self._decode_inlines(cell, state)) for cell in _children(row, "td", "th")])
            for row in _all(elem, "tr")
        ]
        return [table]

    def _decode_ext_link(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        target = elem.get(_XLINK_HREF) or _text(elem) or ""
        return [Link(content=self._decode_inlines(elem, state, trim=False), target=target)]

    def _decode_xref(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        content = self._decode_inlines(elem, state, trim=False)
        rid = decode_internal_id(elem.get("rid"))
        if elem.get("ref-type") == "bibr":
            return [Cite(target=rid, content=content or None)]
        return [Link(content=content, target=f"#{rid}", relation=elem.get("ref-type"))]

    def _decode_emphasis(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [Emphasis(content=self._decode_inlines(elem, state, trim=False))]

    def _decode_strong(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [Strong(content=self._decode_inlines(elem, state, trim=False))]

    def _decode_delete(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [Delete(content=self._decode_inlines(elem, state, trim=False))]

    def _decode_superscript(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [Superscript(content=self._decode_inlines(elem, state, trim=False))]

    def _decode_subscript(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [Subscript(content=self._decode_inlines(elem, state, trim=False))]

    def _decode_monospace(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [CodeFragment(text="".join(elem.itertext()))]

    def _decode_math(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        inline = _local(elem.tag) == "inline-formula"
        math_class = MathFragment if inline else MathBlock

        math = _first(elem, "math")
        if math is not None:
            math = copy.copy(math)
            math.tail = None
            return [math_class(text=ET.tostring(math, encoding="unicode"), math_language="mathml")]

        tex = _first(elem, "tex-math")
        if tex is not None:
            return [math_class(text="".join(tex.itertext()).strip(), math_language="tex")]

        graphic = _first(elem, "graphic", "inline-graphic")
        if graphic is None:
            return []
        image = self._image(graphic, inline)
        return [image] if inline else [Paragraph([image])]

    def _decode_break(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [" "]

    def _image(self, elem: ET.Element, inline: bool) -> ImageObject:
        meta: dict[str, Any] = {"inline": inline}
        if elem.get(_XLINK_TYPE):
            meta["linkType"] = elem.get(_XLINK_TYPE)
        if elem.get("specific-use"):
            meta["usage"] = elem.get("specific-use")
        return ImageObject(content_url=elem.get(_XLINK_HREF) or "", format=_media_type(elem), meta=meta)

    def _decode_graphic(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [self._image(elem, inline=False)]

    def _decode_inline_graphic(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [self._image(elem, inline=True)]

    def _decode_media(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [MediaObject(content_url=elem.get(_XLINK_HREF) or "", format=_media_type(elem))]

    def _decode_figure(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        alternatives = _child(elem, "alternatives")
        if alternatives is not None:
            content = self._decode_content(alternatives, state)
        else:
            item = next(
                (child for name in JATS_FIG_CONTENT_ELEMENTS for child in _children(elem, name)),
                None,
            )
            content = self._decode_element(item, state) if item is not None else []
        content = [node for node in content if not (isinstance(node, str) and not node.strip())]

        caption = _child(elem, "caption")
        return [
            Figure(
                content=content,
                caption=self._decode_blocks(caption, state) if caption is not None and len(caption) else None,
                label=_text(_child(elem, "label")),
                id=elem.get("id"),
            )
        ]

    def _decode_fig_group(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        parts = [figure for fig in _children(elem, "fig") for figure in self._decode_figure(fig, state)]
        return [Collection(parts=parts, meta={"usage": "figGroup"})]

    def _decode_code(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [CodeBlock(text="".join(elem.itertext()).strip("\n"), programming_language=elem.get("language"))]

    def _decode_disp_quote(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [QuoteBlock(content=self._decode_blocks(elem, state))]

    def _decode_thematic_break(self, elem: ET.Element, state: DecodeState) -> list[Any]:
        return [ThematicBreak()]


# ============================================================================
# Encoding
# ============================================================================


def citation_text(work: Any) -> str:
    """Text used to cite a reference within the article.

    Examples
    --------
    >>> citation_text(Article(authors=[Person(family_names=["Smith"])], date_published="1990-05-01"))
    'Smith, 1990'

    """
    text = ""
    people = [author for author in getattr(work, "authors", None) or [] if isinstance(author, Person)]
    if people and people[0].family_names:
        text = " ".join(people[0].family_names)
        if len(people) == 2 and people[1].family_names:
            text += " and " + " ".join(people[1].family_names)
        elif len(people) > 2:
            text += " et al."

    date = getattr(work, "date_published", None)
    if date:
        text += f", {str(date).split('-')[0]}"
    return text


class JatsEncoder:
    """Encodes document nodes to a JATS element tree.

    Handlers take the node and the :class:`EncodeState` and return a list
    of elements and strings.
    """

    _NODE_HANDLERS = {
        "Heading": "_encode_heading",
        "Paragraph": "_encode_paragraph",
        "List": "_encode_list",
        "Table": "_encode_table",
        "CodeBlock": "_encode_code_block",
        "QuoteBlock": "_encode_quote_block",
        "ThematicBreak": "_encode_thematic_break",
        "Figure": "_encode_figure",
        "Collection": "_encode_collection",
        "MathFragment": "_encode_math",
        "MathBlock": "_encode_math",
        "Link": "_encode_link",
        "Emphasis": "_encode_emphasis",
        "Strong": "_encode_strong",
        "Delete": "_encode_delete",
        "Superscript": "_encode_superscript",
        "Subscript": "_encode_subscript",
        "CodeFragment": "_encode_code_fragment",
        "ImageObject": "_encode_image",
        "MediaObject": "_encode_media",
        "Cite": "_encode_cite",
        "Text": "_encode_text",
        "Boolean": "_encode_primitive",
        "Number": "_encode_primitive",
    }

    def encode(self, node: Any) -> str:
        """Encode a node as a JATS document string.

        Nodes other than an Article are wrapped into one.
        """
        if isinstance(node, Article):
            article = node
        else:
            article = Article(content=wrap_inline_runs(node if isinstance(node, list) else [node]))

        root = self.encode_article(article)
        _indent(root)
        xml = ET.tostring(root, encoding="unicode")
        return f'<?xml version="1.0" encoding="utf-8"?>\n{JATS_DOCTYPE}\n{xml}\n'

    def encode_article(self, article: Article) -> ET.Element:
        """Encode an Article as an ``<article>`` element."""
        state = EncodeState()

        article_meta = _elem(
            "article-meta",
            None,
            *self._encode_identifiers(article.identifiers),
            _elem("title-group", None, self._encode_title(article.title, state)),
            self._encode_authors(article.authors or []),
            self._encode_date_published(article.date_published),
            self._encode_abstract(article.description, state),
            self._encode_keywords(article.keywords),
        )
        front = _elem("front", None, article_meta)
        body = self._encode_body(article.content or [], state)
        back = _elem("back", None, *self._encode_references(article.references, state))

        # Second phase: now that every reference is known
        self._populate_citations(state)

        root = _elem("article", {"article-type": "research-article"}, front, body, back)
        if not any(_XLINK_HREF in elem.attrib or _XLINK_TYPE in elem.attrib for elem in root.iter()):
            # Always declared; ElementTree only adds the declaration when used
            root.set("xmlns:xlink", XLINK_NAMESPACE)
        return root

    # ------------------------------------------------------------------
    # Front matter
    # ------------------------------------------------------------------

    def _encode_title(self, title: Any, state: EncodeState) -> ET.Element:
        if title is None:
            title = "Untitled"
        if isinstance(title, str):
            return _elem("article-title", None, title)
        return _elem("article-title", None, *self._encode_nodes(title, state))

    def _encode_identifiers(self, identifiers: Optional[list[Any]]) -> list[ET.Element]:
        elements = []
        for identifier in identifiers or []:
            if not isinstance(identifier, PropertyValue) or identifier.name == "elocation-id":
                continue
            elements.append(_elem("article-id", {"pub-id-type": identifier.name}, identifier.value))
        return elements

    def _encode_authors(self, authors: list[Any]) -> ET.Element:
        contribs = []
        affs = []
        for author in authors:
            refs = []
            if isinstance(author, Person):
                name = self._encode_name(author)
                for org in author.affiliations or []:
                    aff_id = f"aff{len(affs) + 1}"
                    affs.append(
                        _elem(
                            "aff",
                            {"id": aff_id},
                            _elem("institution", None, org.name or ""),
                            _elem("addr-line", None, org.address) if org.address else None,
                            _elem("uri", None, org.url) if org.url else None,
                        )
                    )
                    refs.append(_elem("xref", {"ref-type": "aff", "rid": aff_id}))
                emails = [_elem("email", None, email) for email in author.emails or []]
            elif isinstance(author, Organization):
                name = _elem("string-name", None, author.name or "")
                emails = []
            else:
                name = _elem("string-name", None, extract_text(author))
                emails = []
            contribs.append(_elem("contrib", {"contrib-type": "author"}, name, *emails, *refs))
        return _elem("contrib-group", None, *contribs, *affs)

    def _encode_name(self, person: Person) -> ET.Element:
        if person.family_names or person.given_names:
            return _elem(
                "name",
                None,
                _elem("surname", None, " ".join(person.family_names)) if person.family_names else None,
                _elem("given-names", None, " ".join(person.given_names)) if person.given_names else None,
                _elem("prefix", None, person.honorific_prefix) if person.honorific_prefix else None,
                _elem("suffix", None, person.honorific_suffix) if person.honorific_suffix else None,
            )
        return _elem("string-name", None, person.name or "")

    def _encode_date_published(self, date: Optional[str]) -> Optional[ET.Element]:
        if not date:
            return None
        parts = str(date).split("T")[0].split("-")
        year, month, day = (parts + [None, None])[:3]
        return _elem(
            "pub-date",
            {"date-type": "publication", "iso-8601-date": date},
            _elem("day", None, day) if day else None,
            _elem("month", None, month) if month else None,
            _elem("year", None, year),
        )

    def _encode_abstract(self, description: Any, state: EncodeState) -> Optional[ET.Element]:
        if description is None:
            return None
        if isinstance(description, str):
            return _elem("abstract", None, _elem("p", None, description))
        blocks = wrap_inline_runs(description if isinstance(description, list) else [description])
        return _elem("abstract", None, *self._encode_nodes(blocks, state))

    def _encode_keywords(self, keywords: Optional[list[str]]) -> Optional[ET.Element]:
        if not keywords:
            return None
        return _elem("kwd-group", None, *(_elem("kwd", None, keyword) for keyword in keywords))

    # ------------------------------------------------------------------
    # Back matter
    # ------------------------------------------------------------------

    def _encode_references(self, references: Optional[list[Any]], state: EncodeState) -> list[ET.Element]:
        if references is None:
            return []
        return [
            _elem(
                "ref-list",
                None,
                _elem("title", None, "References"),
                *(self._encode_reference(reference, state) for reference in references),
            )
        ]

    def _encode_reference(self, work: Any, state: EncodeState) -> ET.Element:
        if isinstance(work, str):
            return _elem("ref", None, _elem("mixed-citation", None, work))

        rid = getattr(work, "id", None)
        children: list[Any] = []

        title = getattr(work, "title", None)
        if title:
            children.append(_elem("article-title", None, *self._encode_nodes(title, state)))

        authors = getattr(work, "authors", None) or []
        people = [author for author in authors if isinstance(author, Person)]
        if people:
            children.append(
                _elem("person-group", {"person-group-type": "author"}, *(self._encode_name(p) for p in people))
            )
        if rid and rid not in state.references:
            state.references[rid] = citation_text(work)

        date = getattr(work, "date_published", None)
        if date:
            children.append(_elem("year", {"iso-8601-date": date}, str(date).split("-")[0]))

        part_of = getattr(work, "is_part_of", None)
        if isinstance(part_of, PublicationIssue):
            volume = part_of.is_part_of if isinstance(part_of.is_part_of, PublicationVolume) else None
            if volume is not None and volume.title:
                children.append(_elem("source", None, volume.title))
            if volume is not None and volume.volume_number:
                children.append(_elem("volume", None, volume.volume_number))
            if part_of.issue_number:
                children.append(_elem("issue", None, part_of.issue_number))
            children.extend(self._encode_pages(part_of))
        elif isinstance(part_of, PublicationVolume):
            if part_of.title:
                children.append(_elem("source", None, part_of.title))
            if part_of.volume_number:
                children.append(_elem("volume", None, part_of.volume_number))
            children.extend(self._encode_pages(part_of))

        return _elem("ref", {"id": rid}, _elem("element-citation", None, *children))

    def _encode_pages(self, part: Any) -> list[ET.Element]:
        pages = []
        if part.page_start:
            pages.append(_elem("fpage", None, str(part.page_start)))
        if part.page_end:
            pages.append(_elem("lpage", None, str(part.page_end)))
        return pages

    def _populate_citations(self, state: EncodeState) -> None:
        """Give every recorded citation its reference's text, if known."""
        for rid, xrefs in state.citations.items():
            text = state.references.get(rid)
            if not text:
                continue
            for xref in xrefs:
                if not len(xref) and not xref.text:
                    xref.text = text

    # ------------------------------------------------------------------
    # Body
    # ------------------------------------------------------------------

    def _encode_body(self, nodes: list[Any], state: EncodeState) -> ET.Element:
        """Encode content, opening a ``<sec>`` at each heading.

        Sections nest by heading depth; content before the first heading goes
        directly in ``<body>``.
        """
        body = _elem("body")
        # (depth, element) of open sections, innermost last
        stack: list[tuple[int, ET.Element]] = []
        for node in wrap_inline_runs(nodes):
            if isinstance(node, Heading):
                while stack and stack[-1][0] >= node.depth:
                    stack.pop()
                section = _elem("sec", {"id": node.id})
                (stack[-1][1] if stack else body).append(section)
                stack.append((node.depth, section))
            _append(stack[-1][1] if stack else body, self._encode_node(node, state))
        return body

    def _encode_nodes(self, nodes: Any, state: EncodeState) -> list[Any]:
        if not isinstance(nodes, list):
            nodes = [nodes]
        return [item for node in nodes for item in self._encode_node(node, state)]

    def _encode_node(self, node: Any, state: EncodeState) -> list[Any]:
        handler = self._NODE_HANDLERS.get(node_type(node))
        if handler is not None:
            return getattr(self, handler)(node, state)
        logger.warning(f"Unhandled node type when encoding to JATS: {node_type(node)}")
        # Keep what content there is
        return self._encode_nodes(get_node_children(node), state)

    def _encode_blocks(self, nodes: list[Any], state: EncodeState) -> list[Any]:
        return self._encode_nodes(wrap_inline_runs(nodes), state)

    def _encode_heading(self, node: Heading, state: EncodeState) -> list[Any]:
        return [_elem("title", None, *self._encode_nodes(node.content, state))]

    def _encode_paragraph(self, node: Paragraph, state: EncodeState) -> list[Any]:
        if any(is_block(child) for child in node.content):
            return self._encode_blocks(node.content, state)
        return [_elem("p", None, *self._encode_nodes(node.content, state))]

    def _encode_list(self, node: List, state: EncodeState) -> list[Any]:
        items = [_elem("list-item", None, *self._encode_blocks(item.content, state)) for item in node.items]
        list_type = "bullet" if node.order == "unordered" else "order"
        return [_elem("list", {"list-type": list_type}, *items)]

    def _encode_table(self, node: Table, state: EncodeState) -> list[Any]:
        state.tables += 1
        caption = None
        if node.title or node.caption:
            title = node.title
            caption = _elem(
                "caption",
                None,
                _elem("title", None, *self._encode_nodes(title, state)) if title else None,
                *self._encode_blocks(node.caption or [], state),
            )
        rows = [
            _elem("tr", None, *(_elem("td", None, *self._encode_cell(cell, state)) for cell in row.cells))
            for row in node.rows
        ]
        return [
            _elem(
                "table-wrap",
                {"id": node.id},
                _elem("label", None, f"Table {state.tables}."),
                caption,
                _elem("table", None, _elem("tbody", None, *rows)),
            )
        ]

    def _encode_cell(self, cell: TableCell, state: EncodeState) -> list[Any]:
        content: list[Any] = []
        for child in cell.content:
            content.extend(child.content if isinstance(child, Paragraph) else [child])
        return self._encode_nodes(content, state)

    def _encode_code_block(self, node: CodeBlock, state: EncodeState) -> list[Any]:
        return [_elem("code", {"language": node.programming_language}, node.text)]

    def _encode_quote_block(self, node: QuoteBlock, state: EncodeState) -> list[Any]:
        return [_elem("disp-quote", None, *self._encode_blocks(node.content, state))]

    def _encode_thematic_break(self, node: ThematicBreak, state: EncodeState) -> list[Any]:
        return [_elem("hr")]

    def _encode_figure(self, node: Figure, state: EncodeState) -> list[Any]:
        children = self._encode_nodes(node.content, state)
        children = [child for child in children if not isinstance(child, str) or child.strip()]
        if not children:
            content = None
        elif len(children) == 1 and not isinstance(children[0], str):
            content = children[0]
        else:
            content = _elem("alternatives", None, *children)
        return [
            _elem(
                "fig",
                {"id": node.id},
                _elem("label", None, node.label) if node.label is not None else None,
                _elem("caption", None, *self._encode_blocks(node.caption, state)) if node.caption is not None else None,
                content,
            )
        ]

    def _encode_collection(self, node: Collection, state: EncodeState) -> list[Any]:
        if (node.meta or {}).get("usage") == "figGroup":
            figures = [part for part in node.parts if isinstance(part, Figure)]
            return [_elem("fig-group", None, *(self._encode_figure(figure, state)[0] for figure in figures))]
        logger.debug("Encoding Collection parts in sequence")
        parts: list[Any] = []
        for part in node.parts:
            parts.extend(part.content or [] if isinstance(part, Article) else [part])
        return self._encode_blocks(parts, state)

    def _encode_math(self, node: Any, state: EncodeState) -> list[Any]:
        wrapper = "inline-formula" if isinstance(node, MathFragment) else "disp-formula"
        language = (node.math_language or "tex").lower()
        if language == "mathml":
            from defusedxml import ElementTree as DefusedET

            try:
                math = DefusedET.fromstring(node.text)
            except ET.ParseError as e:
                logger.error(f"Error parsing MathML: {e}")
                return []
            return [_elem(wrapper, None, math)]
        if language not in ("tex", "latex"):
            logger.warning(f"Writing {node.math_language} math as TeX")
        return [_elem(wrapper, None, _elem("tex-math", None, node.text))]

    def _encode_link(self, node: Link, state: EncodeState) -> list[Any]:
        content = self._encode_nodes(node.content, state)
        if node.target.startswith("#"):
            return [_elem("xref", {"rid": node.target[1:], "ref-type": node.relation or "other"}, *content)]
        return [_elem("ext-link", {"ext-link-type": "uri", _XLINK_HREF: node.target}, *content)]

    def _encode_emphasis(self, node: Emphasis, state: EncodeState) -> list[Any]:
        return [_elem("italic", None, *self._encode_nodes(node.content, state))]

    def _encode_strong(self, node: Strong, state: EncodeState) -> list[Any]:
        return [_elem("bold", None, *self._encode_nodes(node.content, state))]

    def _encode_delete(self, node: Delete, state: EncodeState) -> list[Any]:
        return [_elem("strike", None, *self._encode_nodes(node.content, state))]

    def _encode_superscript(self, node: Superscript, state: EncodeState) -> list[Any]:
        return [_elem("sup", None, *self._encode_nodes(node.content, state))]

    def _encode_subscript(self, node: Subscript, state: EncodeState) -> list[Any]:
        return [_elem("sub", None, *self._encode_nodes(node.content, state))]

    def _encode_code_fragment(self, node: CodeFragment, state: EncodeState) -> list[Any]:
        return [_elem("monospace", None, node.text)]

    def _media_attrs(self, node: Any) -> dict[str, Any]:
        meta = node.meta or {}
        attrs: dict[str, Any] = {_XLINK_HREF: node.content_url}
        if meta.get("usage"):
            attrs["specific-use"] = meta["usage"]
        if meta.get("linkType"):
            attrs[_XLINK_TYPE] = meta["linkType"]
        if node.format:
            mimetype, _, subtype = node.format.partition("/")
            attrs["mimetype"] = mimetype or None
            attrs["mime-subtype"] = subtype or None
        return attrs

    def _encode_image(self, node: ImageObject, state: EncodeState) -> list[Any]:
        name = "inline-graphic" if (node.meta or {}).get("inline") else "graphic"
        return [_elem(name, self._media_attrs(node))]

    def _encode_media(self, node: MediaObject, state: EncodeState) -> list[Any]:
        return [_elem("media", self._media_attrs(node))]

    def _encode_cite(self, node: Cite, state: EncodeState) -> list[Any]:
        rid = node.target[1:] if node.target.startswith("#") else node.target
        xref = _elem("xref", {"rid": rid, "ref-type": "bibr"})
        state.citations.setdefault(rid, []).append(xref)
        return [xref]

    def _encode_text(self, node: str, state: EncodeState) -> list[Any]:
        return [node]

    def _encode_primitive(self, node: Any, state: EncodeState) -> list[Any]:
        logger.debug(f"Writing {node_type(node)} as text")
        return [extract_text(node)]


def decode_jats(text: str) -> Any:
    """Decode JATS XML to an Article (or a list of blocks)."""
    return JatsDecoder().decode(text)


def encode_jats(node: Any) -> str:
    """Encode a node as a JATS XML document."""
    return JatsEncoder().encode(node)


def _sniff_text(content: str) -> str:
    if is_path(content) and os.path.isfile(content):
        with open(content, encoding="utf-8", errors="replace") as handle:
            return handle.read(4096)
    return content


class JatsCodec(BaseCodec):
    """Codec for JATS XML articles."""

    name = "jats"

    def sniff(self, content: str) -> bool:
        """Check for a JATS DOCTYPE, reading the file if ``content`` is a path."""
        return _SNIFF_PATTERN.search(_sniff_text(content)) is not None

    @requires_dependencies("jats", DEPS_JATS)
    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        self._decode_options(options)
        with debug_timer(logger, "JATS decode"):
            return decode_jats(dump(file))

    @requires_dependencies("jats", DEPS_JATS)
    def encode(self, node: Any, options: Optional[BaseEncodeOptions] = None) -> VFile:
        self._encode_options(options)
        with debug_timer(logger, "JATS encode"):
            jats = encode_jats(node)
        return VFile(contents=jats, media_type="application/jats+xml")


CODEC_METADATA = CodecMetadata(
    name="jats",
    ext_names=["jats"],
    media_types=["application/jats+xml"],
    codec_class=JatsCodec,
    required_packages=DEPS_JATS,
    description="JATS XML journal articles",
)
