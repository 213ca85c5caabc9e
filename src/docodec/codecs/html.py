#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/html.py
"""HTML codec.

Decoding parses the document with BeautifulSoup and walks it with a table
of element handlers, flushing runs of inline content into paragraphs
wherever they sit beside block elements. The document ``<title>`` (or an
``<h1 itemprop="headline">``, or a leading ``<h1>``) becomes the Article
title and a JSON-LD ``<script>`` contributes the other Article fields.

Encoding is a visitor that appends HTML to an output buffer. Primitive
values are written as ``<data itemtype="…" value="…">`` elements so that
they decode back to the same Python values.

The Markdown codec uses :func:`decode_fragment` for raw HTML embedded in
Markdown.

"""

from __future__ import annotations

import json
import logging
import re
from html import escape
from typing import Any, Optional

from docodec.ast.nodes import (
    Article,
    Cite,
    CodeBlock,
    CodeChunk,
    CodeExpression,
    CodeFragment,
    Collection,
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
    Node,
    Paragraph,
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
from docodec.ast.serialization import ast_to_dict, dict_to_ast
from docodec.ast.utils import collapse_title, extract_text, is_block, node_type, normalize_inlines, wrap_inline_runs
from docodec.ast.visitors import NodeVisitor
from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.constants import DEPS_HTML
from docodec.options.base import BaseDecodeOptions
from docodec.options.html import HtmlEncodeOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)

PRIMITIVE_ITEMTYPE_BASE = "https://schema.org/"

_SNIFF_PATTERN = re.compile(r"^\s*<(!DOCTYPE\s+html|html[\s>])", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

_BLOCK_ELEMENTS = frozenset(
    {
        "address",
        "article",
        "aside",
        "blockquote",
        "body",
        "details",
        "div",
        "dl",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "header",
        "hr",
        "li",
        "main",
        "nav",
        "ol",
        "p",
        "pre",
        "section",
        "table",
        "ul",
    }
)

_SKIPPED_ELEMENTS = frozenset({"head", "script", "style", "template", "noscript", "input", "button"})


def _classes(element: Any) -> list[str]:
    value = element.get("class") or []
    return value.split() if isinstance(value, str) else list(value)


def _language(*elements: Any) -> Optional[str]:
    """Language from a ``language-x`` (or ``lang-x``) class on any of the elements."""
    for element in elements:
        if element is None:
            continue
        for css_class in _classes(element):
            for prefix in ("language-", "lang-"):
                if css_class.startswith(prefix) and len(css_class) > len(prefix):
                    return css_class[len(prefix) :]
    return None


def _attr(element: Any, name: str) -> Optional[str]:
    """String value of an attribute; multi-valued attributes are joined."""
    value = element.get(name)
    if value is None:
        return None
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


class HtmlDecoder:
    """Walks a BeautifulSoup tree and builds document nodes."""

    # Dispatch table mapping HTML element names to processing methods
    _ELEMENT_HANDLERS = {
        # Block elements
        "p": "_process_paragraph",
        "div": "_process_division",
        "h1": "_process_heading",
        "h2": "_process_heading",
        "h3": "_process_heading",
        "h4": "_process_heading",
        "h5": "_process_heading",
        "h6": "_process_heading",
        "ul": "_process_list",
        "ol": "_process_list",
        "li": "_process_list_item",
        "pre": "_process_code_block",
        "blockquote": "_process_blockquote",
        "figure": "_process_figure",
        "table": "_process_table",
        "hr": "_process_thematic_break",
        # Inline elements
        "em": "_process_emphasis",
        "i": "_process_emphasis",
        "strong": "_process_strong",
        "b": "_process_strong",
        "del": "_process_delete",
        "s": "_process_delete",
        "strike": "_process_delete",
        "sup": "_process_superscript",
        "sub": "_process_subscript",
        "a": "_process_link",
        "q": "_process_quote",
        "cite": "_process_cite",
        "code": "_process_code",
        "img": "_process_image",
        "audio": "_process_media",
        "video": "_process_media",
        "data": "_process_data",
        "span": "_process_span",
        "math": "_process_mathml",
        "br": "_process_break",
    }

    def decode_document(self, html: str) -> Article:
        """Decode a complete HTML document into an Article."""
        from bs4 import BeautifulSoup

        soup = BeautifulSoup(html, "lxml")
        article = Article()

        if soup.title is not None and soup.title.string and soup.title.string.strip():
            article.title = soup.title.string.strip()

        for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
            self._merge_json_ld(article, script.string or "")

        headline = soup.find("h1", attrs={"itemprop": "headline"})
        if headline is not None:
            if article.title is None:
                article.title = collapse_title(self._decode_inlines(headline))
            headline.decompose()

        body = soup.body or soup
        content = self._decode_blocks(body)

        if article.title is None and content and isinstance(content[0], Heading) and content[0].depth == 1:
            article.title = collapse_title(content.pop(0).content)

        article.content = content
        return article

    def decode_fragment(self, html: str) -> Any:
        """Decode an HTML fragment.

        Returns
        -------
        Node, list or str
            The single decoded node, a list when there are several, or
            ``""`` when the fragment has no semantic content

        """
        from bs4 import BeautifulSoup

        soup = BeautifulSoup(html, "lxml")
        nodes = self._decode_mixed(soup.body or soup)
        if not nodes:
            return ""
        if len(nodes) == 1:
            return nodes[0]
        return nodes

    def _merge_json_ld(self, article: Article, text: str) -> None:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring invalid JSON-LD block: {e}")
            return
        if not isinstance(data, dict):
            return

        data = {key: value for key, value in data.items() if key not in ("@context", "@type", "type", "content")}
        headline = data.pop("headline", None) or data.pop("name", None)
        if headline and "title" not in data:
            data["title"] = headline

        try:
            decoded = dict_to_ast({"type": "Article", **data})
        except (TypeError, ValueError) as e:
            logger.warning(f"Ignoring JSON-LD block that does not describe an article: {e}")
            return

        for name in vars(decoded):
            value = getattr(decoded, name)
            if name == "extra":
                for key, extra_value in value.items():
                    article.extra.setdefault(key, extra_value)
            elif value is not None and getattr(article, name) is None:
                setattr(article, name, value)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _is_block_element(self, node: Any) -> bool:
        name = getattr(node, "name", None)
        if not isinstance(name, str):
            return False
        if name == "math":
            return node.get("display") == "block"
        return name in _BLOCK_ELEMENTS

    def _process_node(self, node: Any) -> list[Any]:
        """Process a BeautifulSoup node.

        Handlers return a node or primitive, a list of nodes for containers,
        or None when the element contributes nothing. ``_process_data``
        always returns a one-item list so that Null and Array values survive.

        Returns
        -------
        list
            The decoded nodes and primitives, in document order

        """
        from bs4.element import Comment, Declaration, Doctype, NavigableString, ProcessingInstruction

        if isinstance(node, (Comment, Declaration, Doctype, ProcessingInstruction)):
            return []
        if isinstance(node, NavigableString):
            return [_WHITESPACE.sub(" ", str(node))]

        name = getattr(node, "name", None)
        if not name or name in _SKIPPED_ELEMENTS:
            return []

        handler_name = self._ELEMENT_HANDLERS.get(name)
        if handler_name:
            result = getattr(self, handler_name)(node)
        elif self._is_block_element(node):
            result = self._decode_blocks(node)
        else:
            result = self._decode_inlines(node, trim=False)

        if result is None:
            return []
        return result if isinstance(result, list) else [result]

    def _decode_blocks(self, node: Any) -> list[Any]:
        """Decode the children of a block container.

        Inline runs between block children are flushed into paragraphs.
        """
        blocks: list[Any] = []
        inline_buffer: list[Any] = []

        def flush() -> None:
            content = normalize_inlines(inline_buffer)
            if content:
                blocks.append(Paragraph(content))
            inline_buffer.clear()

        for child in node.children:
            for item in self._process_node(child):
                if is_block(item):
                    flush()
                    blocks.append(item)
                else:
                    inline_buffer.append(item)
        flush()
        return blocks

    def _decode_inlines(self, node: Any, trim: bool = True) -> list[Any]:
        """Decode the children of an element as inline content.

        Block elements met in an inline context contribute their text.
        """
        result: list[Any] = []
        for child in node.children:
            for item in self._process_node(child):
                if is_block(item):
                    logger.debug(f"Block {node_type(item)} found in inline context; keeping its text")
                    text = extract_text(item, " ")
                    if text:
                        result.append(f" {text} ")
                else:
                    result.append(item)
        return normalize_inlines(result, trim=trim)

    def _decode_mixed(self, node: Any) -> list[Any]:
        """Decode as blocks when any child is a block element, else as inlines."""
        if any(self._is_block_element(child) for child in node.children):
            return self._decode_blocks(node)
        return self._decode_inlines(node)

    # ------------------------------------------------------------------
    # Block elements
    # ------------------------------------------------------------------

    def _process_paragraph(self, node: Any) -> Optional[Paragraph]:
        content = self._decode_inlines(node)
        return Paragraph(content) if content else None

    def _process_division(self, node: Any) -> Any:
        classes = _classes(node)
        if "math" in classes:
            return self._process_math(node, block=True)
        if "code-chunk" in classes:
            return self._process_code_chunk(node)
        if "include" in classes:
            return Include(source=_attr(node, "data-source") or "", content=self._decode_blocks(node) or None)
        if "collection" in classes:
            meta = {"usage": node["data-usage"]} if node.get("data-usage") else None
            return Collection(parts=self._decode_blocks(node), meta=meta)
        return self._decode_blocks(node)

    def _process_heading(self, node: Any) -> Heading:
        depth = int(node.name[1])
        if node.get("data-depth", "").isdigit():
            depth = int(node["data-depth"])
        return Heading(content=self._decode_inlines(node), depth=depth, id=_attr(node, "id"))

    def _process_list(self, node: Any) -> List:
        if node.name == "ul":
            order = "unordered"
        else:
            order = "descending" if node.has_attr("reversed") else "ascending"
        items = [self._process_list_item(li) for li in node.find_all("li", recursive=False)]
        return List(items=items, order=order)

    def _process_list_item(self, node: Any) -> ListItem:
        is_checked = None
        checkbox = node.find("input", attrs={"type": "checkbox"}, recursive=False)
        if checkbox is None and node.p is not None:
            checkbox = node.p.find("input", attrs={"type": "checkbox"}, recursive=False)
        if checkbox is not None:
            is_checked = checkbox.has_attr("checked")
            checkbox.decompose()
        return ListItem(content=self._decode_blocks(node), is_checked=is_checked)

    def _process_code_block(self, node: Any) -> CodeBlock:
        code = node.find("code")
        text = (code or node).get_text()
        return CodeBlock(text=text, programming_language=_language(code, node))

    def _process_code_chunk(self, node: Any) -> CodeChunk:
        pre = node.find("pre")
        code = pre.find("code") if pre is not None else None
        text = (code or pre).get_text() if pre is not None else ""
        outputs = []
        for output in node.find_all("div", class_="output"):
            decoded = self._decode_mixed(output)
            if len(decoded) == 1:
                outputs.append(decoded[0])
            elif decoded:
                outputs.append(decoded)
        return CodeChunk(
            text=text,
            programming_language=_attr(node, "data-language") or _language(code, pre),
            outputs=outputs or None,
        )

    def _process_blockquote(self, node: Any) -> QuoteBlock:
        return QuoteBlock(content=self._decode_blocks(node), cite=_attr(node, "cite"))

    def _process_figure(self, node: Any) -> Figure:
        caption = None
        figcaption = node.find("figcaption", recursive=False)
        if figcaption is not None:
            caption = self._decode_blocks(figcaption) or None
            figcaption.extract()
        return Figure(
            content=self._decode_blocks(node),
            caption=caption,
            label=_attr(node, "data-label"),
            id=_attr(node, "id"),
        )

    def _table_rows(self, node: Any) -> list[Any]:
        return [tr for tr in node.find_all("tr") if tr.find_parent("table") is node]

    def _process_table(self, node: Any) -> Any:
        if "datatable" in _classes(node):
            return self._process_datatable(node)

        rows = []
        for tr in self._table_rows(node):
            cells = [TableCell(content=self._decode_inlines(cell)) for cell in tr.find_all(["td", "th"], recursive=False)]
            rows.append(TableRow(cells=cells))

        caption = None
        caption_element = node.find("caption", recursive=False)
        if caption_element is not None:
            caption = self._decode_blocks(caption_element) or None
        return Table(rows=rows, id=_attr(node, "id"), label=_attr(node, "data-label"), caption=caption)

    def _process_datatable(self, node: Any) -> Datatable:
        rows = self._table_rows(node)
        if not rows:
            return Datatable(name=_attr(node, "data-name"))
        names = [cell.get_text(strip=True) for cell in rows[0].find_all(["td", "th"], recursive=False)]
        columns = [DatatableColumn(name=name) for name in names]
        for tr in rows[1:]:
            cells = tr.find_all(["td", "th"], recursive=False)
            for index, column in enumerate(columns):
                content = self._decode_inlines(cells[index]) if index < len(cells) else []
                if not content:
                    column.values.append(None)
                elif len(content) == 1:
                    column.values.append(content[0])
                else:
                    column.values.append(extract_text(content))
        return Datatable(name=_attr(node, "data-name"), columns=columns)

    def _process_thematic_break(self, node: Any) -> ThematicBreak:
        return ThematicBreak()

    # ------------------------------------------------------------------
    # Inline elements
    # ------------------------------------------------------------------

    def _process_emphasis(self, node: Any) -> Emphasis:
        return Emphasis(self._decode_inlines(node, trim=False))

    def _process_strong(self, node: Any) -> Strong:
        return Strong(self._decode_inlines(node, trim=False))

    def _process_delete(self, node: Any) -> Delete:
        return Delete(self._decode_inlines(node, trim=False))

    def _process_superscript(self, node: Any) -> Superscript:
        return Superscript(self._decode_inlines(node, trim=False))

    def _process_subscript(self, node: Any) -> Subscript:
        return Subscript(self._decode_inlines(node, trim=False))

    def _process_link(self, node: Any) -> Link:
        meta = {
            key: _attr(node, key) for key in node.attrs if key not in ("href", "title", "rel", "class", "id")
        }
        return Link(
            content=self._decode_inlines(node),
            target=_attr(node, "href") or "",
            title=_attr(node, "title"),
            relation=_attr(node, "rel"),
            meta=meta or None,
        )

    def _process_quote(self, node: Any) -> Quote:
        return Quote(content=self._decode_inlines(node, trim=False), cite=_attr(node, "cite"))

    def _process_cite(self, node: Any) -> Any:
        anchor = node.find("a")
        href = _attr(anchor, "href") if anchor is not None else None
        if href and href.startswith("#"):
            content = self._decode_inlines(anchor)
            target = href[1:]
            return Cite(target=target, content=content if content and content != [target] else None)
        return self._decode_inlines(node, trim=False)

    def _process_code(self, node: Any) -> Any:
        text = node.get_text()
        language = _language(node)
        if node.get("data-type") == "expr":
            output = None
            if node.get("data-output") is not None:
                try:
                    output = json.loads(node["data-output"])
                except json.JSONDecodeError:
                    logger.warning(f"Ignoring invalid output of code expression {text!r}")
            return CodeExpression(text=text, programming_language=language, output=output)
        return CodeFragment(text=text, programming_language=language)

    def _process_image(self, node: Any) -> ImageObject:
        return ImageObject(
            content_url=_attr(node, "src") or "",
            text=_attr(node, "alt") or None,
            title=_attr(node, "title"),
        )

    def _process_media(self, node: Any) -> MediaObject:
        src = _attr(node, "src")
        media_format = _attr(node, "type")
        source = node.find("source")
        if not src and source is not None:
            src = _attr(source, "src")
            media_format = media_format or _attr(source, "type")
        return MediaObject(content_url=src or "", format=media_format)

    def _process_data(self, node: Any) -> list[Any]:
        itemtype = _attr(node, "itemtype")
        if not itemtype:
            return self._decode_inlines(node, trim=False)
        kind = itemtype.rstrip("/").rsplit("/", 1)[-1]
        value = node.get("value")
        if kind == "Null":
            return [None]
        if kind == "Text":
            return [value if value is not None else node.get_text()]
        try:
            decoded = json.loads(value if value is not None else node.get_text())
        except json.JSONDecodeError:
            logger.warning(f"Invalid value for <data itemtype={itemtype!r}>; keeping its text")
            return [node.get_text()]
        if kind == "Boolean":
            return [bool(decoded)]
        return [decoded]

    def _process_span(self, node: Any) -> Any:
        if "math" in _classes(node):
            return self._process_math(node, block=False)
        return self._decode_inlines(node, trim=False)

    def _process_math(self, node: Any, block: bool) -> Any:
        language = _attr(node, "data-math-language") or "tex"
        if language == "mathml":
            text = node.decode_contents().strip()
        else:
            text = node.get_text().strip()
        return MathBlock(text=text, math_language=language) if block else MathFragment(text=text, math_language=language)

    def _process_mathml(self, node: Any) -> Any:
        if node.get("display") == "block":
            return MathBlock(text=str(node), math_language="mathml")
        return MathFragment(text=str(node), math_language="mathml")

    def _process_break(self, node: Any) -> str:
        return " "


class HtmlEncoder(NodeVisitor):
    """Visitor that renders document nodes to HTML.

    Parameters
    ----------
    options : HtmlEncodeOptions, optional
        Encoding options

    """

    def __init__(self, options: Optional[HtmlEncodeOptions] = None):
        self.options = options or HtmlEncodeOptions()
        self._output: list[str] = []

    def encode(self, node: Any) -> str:
        """Render a node (or a list of nodes) to an HTML string."""
        self._output = []
        if isinstance(node, Article):
            body = self._render_blocks(node.content or [])
            if self.options.is_standalone:
                return self._wrap_in_document(node, body)
            return body

        if isinstance(node, list):
            body = self._render_blocks(node) if any(is_block(item) for item in node) else self._render_inline_content(node)
        elif is_block(node):
            body = self._render_blocks([node])
        else:
            body = self._render_inline_content([node])
        if self.options.is_standalone:
            return self._wrap_in_document(None, body)
        return body

    def _wrap_in_document(self, article: Optional[Article], content: str) -> str:
        title = self.options.title
        if title is None and article is not None and article.title is not None:
            title = extract_text(article.title)

        head = ['<meta charset="utf-8">']
        if title:
            head.append(f"<title>{escape(title, quote=False)}</title>")
        json_ld = self._json_ld(article) if article is not None else None
        if json_ld:
            head.append(f'<script type="application/ld+json">{json_ld}</script>')

        headline = ""
        if article is not None and article.title is not None:
            title_content = article.title if isinstance(article.title, list) else [article.title]
            headline = f'<h1 itemprop="headline">{self._render_inline_content(title_content)}</h1>\n'

        return (
            "<!DOCTYPE html>\n"
            f'<html lang="{escape(self.options.lang)}">\n'
            "<head>\n" + "\n".join(head) + "\n</head>\n"
            "<body>\n<article>\n" + headline + content + "</article>\n</body>\n</html>\n"
        )

    def _json_ld(self, article: Article) -> Optional[str]:
        data = ast_to_dict(article)
        for key in ("type", "content", "title"):
            data.pop(key, None)
        if not data:
            return None
        if isinstance(article.title, str):
            data = {"headline": article.title, **data}
        document = {"@context": "https://schema.org", "@type": "Article", **data}
        # "</" would close the script element early
        return json.dumps(document, ensure_ascii=False).replace("</", "<\\/")

    def _render_blocks(self, nodes: list[Any]) -> str:
        saved = self._output
        self._output = []
        for node in wrap_inline_runs(nodes):
            self.visit(node)
        result = "".join(self._output)
        self._output = saved
        return result

    def _render_inline_content(self, content: list[Any]) -> str:
        saved = self._output
        self._output = []
        for node in content:
            self.visit(node)
        result = "".join(self._output)
        self._output = saved
        return result

    def _attrs(self, **attrs: Any) -> str:
        """Render attributes, skipping None values; True renders a bare attribute."""
        parts = []
        for name, value in attrs.items():
            if value is None or value is False:
                continue
            name = name.rstrip("_").replace("_", "-")
            if value is True:
                parts.append(f" {name}")
            else:
                parts.append(f' {name}="{escape(str(value))}"')
        return "".join(parts)

    # Primitives

    def visit_text(self, value: str) -> None:
        self._output.append(escape(value, quote=False))

    def _visit_primitive(self, value: Any) -> None:
        serialized = json.dumps(value, ensure_ascii=False)
        itemtype = PRIMITIVE_ITEMTYPE_BASE + node_type(value)
        text = serialized if not isinstance(value, (list, dict)) else escape(serialized, quote=False)
        self._output.append(f'<data{self._attrs(itemtype=itemtype, value=serialized)}>{text}</data>')

    def visit_null(self, value: None) -> None:
        self._visit_primitive(value)

    def visit_boolean(self, value: bool) -> None:
        self._visit_primitive(value)

    def visit_number(self, value: int | float) -> None:
        self._visit_primitive(value)

    def visit_array(self, value: list) -> None:
        self._visit_primitive(value)

    def visit_object(self, value: dict) -> None:
        self._visit_primitive(value)

    # Blocks

    def visit_article(self, node: Article) -> None:
        self._output.append(self._render_blocks(node.content or []))

    def visit_paragraph(self, node: Paragraph) -> None:
        self._output.append(f"<p>{self._render_inline_content(node.content)}</p>\n")

    def visit_heading(self, node: Heading) -> None:
        level = min(6, node.depth)
        depth = node.depth if node.depth > 6 else None
        content = self._render_inline_content(node.content)
        self._output.append(f"<h{level}{self._attrs(id=node.id, data_depth=depth)}>{content}</h{level}>\n")

    def visit_list(self, node: List) -> None:
        tag = "ul" if node.order == "unordered" else "ol"
        self._output.append(f"<{tag}{self._attrs(reversed=node.order == 'descending')}>\n")
        for item in node.items:
            self.visit(item)
        self._output.append(f"</{tag}>\n")

    def visit_list_item(self, node: ListItem) -> None:
        checkbox = ""
        if node.is_checked is not None:
            checkbox = f'<input type="checkbox"{self._attrs(checked=node.is_checked)} disabled>'
        if len(node.content) == 1 and isinstance(node.content[0], Paragraph):
            content = self._render_inline_content(node.content[0].content)
        elif node.content and not any(is_block(child) for child in node.content):
            content = self._render_inline_content(node.content)
        else:
            content = "\n" + self._render_blocks(node.content)
        self._output.append(f"<li>{checkbox}{content}</li>\n")

    def visit_table(self, node: Table) -> None:
        self._output.append(f"<table{self._attrs(id=node.id, data_label=node.label)}>\n")
        if node.caption:
            self._output.append(f"<caption>{self._render_blocks(node.caption)}</caption>\n")
        for index, row in enumerate(node.rows):
            if index == 0:
                self._output.append("<thead>\n")
            elif index == 1:
                self._output.append("<tbody>\n")
            self._render_row(row, "th" if index == 0 else "td")
            if index == 0:
                self._output.append("</thead>\n")
        if len(node.rows) > 1:
            self._output.append("</tbody>\n")
        self._output.append("</table>\n")

    def _render_row(self, row: TableRow, cell_tag: str) -> None:
        self._output.append("<tr>")
        for cell in row.cells:
            self._output.append(f"<{cell_tag}>{self._render_inline_content(cell.content)}</{cell_tag}>")
        self._output.append("</tr>\n")

    def visit_table_row(self, node: TableRow) -> None:
        self._render_row(node, "td")

    def visit_table_cell(self, node: TableCell) -> None:
        self._output.append(f"<td>{self._render_inline_content(node.content)}</td>")

    def visit_code_block(self, node: CodeBlock) -> None:
        class_attr = self._attrs(class_=f"language-{node.programming_language}" if node.programming_language else None)
        self._output.append(f"<pre><code{class_attr}>{escape(node.text, quote=False)}</code></pre>\n")

    def visit_code_chunk(self, node: CodeChunk) -> None:
        language = node.programming_language
        class_attr = self._attrs(class_=f"language-{language}" if language else None)
        self._output.append(f'<div class="code-chunk"{self._attrs(data_language=language)}>\n')
        self._output.append(f"<pre><code{class_attr}>{escape(node.text, quote=False)}</code></pre>\n")
        if node.outputs:
            self._output.append('<div class="outputs">\n')
            for output in node.outputs:
                if isinstance(output, list) and any(is_block(item) for item in output):
                    rendered = self._render_blocks(output)
                elif is_block(output):
                    rendered = self._render_blocks([output])
                else:
                    rendered = self._render_inline_content([output])
                self._output.append(f'<div class="output">{rendered}</div>\n')
            self._output.append("</div>\n")
        self._output.append("</div>\n")

    def visit_quote_block(self, node: QuoteBlock) -> None:
        self._output.append(f"<blockquote{self._attrs(cite=node.cite)}>\n")
        self._output.append(self._render_blocks(node.content))
        self._output.append("</blockquote>\n")

    def visit_figure(self, node: Figure) -> None:
        self._output.append(f"<figure{self._attrs(id=node.id, data_label=node.label)}>\n")
        self._output.append(self._render_blocks(node.content))
        if node.caption:
            self._output.append(f"<figcaption>{self._render_blocks(node.caption)}</figcaption>\n")
        self._output.append("</figure>\n")

    def visit_thematic_break(self, node: ThematicBreak) -> None:
        self._output.append("<hr>\n")

    def visit_collection(self, node: Collection) -> None:
        usage = (node.meta or {}).get("usage")
        self._output.append(f'<div class="collection"{self._attrs(data_usage=usage)}>\n')
        self._output.append(self._render_blocks(node.parts))
        self._output.append("</div>\n")

    def visit_include(self, node: Include) -> None:
        self._output.append(f'<div class="include"{self._attrs(data_source=node.source)}>\n')
        self._output.append(self._render_blocks(node.content or []))
        self._output.append("</div>\n")

    def visit_math_block(self, node: MathBlock) -> None:
        self._output.append(f'<div class="math"{self._math_attrs(node.math_language)}>{self._math_text(node)}</div>\n')

    def visit_datatable(self, node: Datatable) -> None:
        self._output.append(f'<table class="datatable"{self._attrs(data_name=node.name)}>\n<thead>\n<tr>')
        for column in node.columns:
            self._output.append(f"<th>{escape(column.name, quote=False)}</th>")
        self._output.append("</tr>\n</thead>\n<tbody>\n")
        rows = len(node.columns[0].values) if node.columns else 0
        for index in range(rows):
            self._output.append("<tr>")
            for column in node.columns:
                self._output.append(f"<td>{self._render_inline_content([column.values[index]])}</td>")
            self._output.append("</tr>\n")
        self._output.append("</tbody>\n</table>\n")

    # Inlines

    def visit_emphasis(self, node: Emphasis) -> None:
        self._output.append(f"<em>{self._render_inline_content(node.content)}</em>")

    def visit_strong(self, node: Strong) -> None:
        self._output.append(f"<strong>{self._render_inline_content(node.content)}</strong>")

    def visit_delete(self, node: Delete) -> None:
        self._output.append(f"<del>{self._render_inline_content(node.content)}</del>")

    def visit_superscript(self, node: Superscript) -> None:
        self._output.append(f"<sup>{self._render_inline_content(node.content)}</sup>")

    def visit_subscript(self, node: Subscript) -> None:
        self._output.append(f"<sub>{self._render_inline_content(node.content)}</sub>")

    def visit_link(self, node: Link) -> None:
        extra = "".join(self._attrs(**{key: str(value)}) for key, value in (node.meta or {}).items())
        attrs = self._attrs(href=node.target, title=node.title, rel=node.relation)
        self._output.append(f"<a{attrs}{extra}>{self._render_inline_content(node.content)}</a>")

    def visit_cite(self, node: Cite) -> None:
        content = self._render_inline_content(node.content) if node.content else escape(node.target, quote=False)
        self._output.append(f'<cite><a href="#{escape(node.target)}">{content}</a></cite>')

    def visit_quote(self, node: Quote) -> None:
        self._output.append(f"<q{self._attrs(cite=node.cite)}>{self._render_inline_content(node.content)}</q>")

    def visit_code_fragment(self, node: CodeFragment) -> None:
        language = node.programming_language
        class_attr = self._attrs(class_=f"language-{language}" if language else None)
        self._output.append(f"<code{class_attr}>{escape(node.text, quote=False)}</code>")

    def visit_code_expression(self, node: CodeExpression) -> None:
        language = node.programming_language
        output = json.dumps(ast_to_dict(node.output), ensure_ascii=False) if node.output is not None else None
        attrs = self._attrs(class_=f"language-{language}" if language else None, data_type="expr", data_output=output)
        self._output.append(f"<code{attrs}>{escape(node.text, quote=False)}</code>")

    def visit_image_object(self, node: ImageObject) -> None:
        self._output.append(f"<img{self._attrs(src=node.content_url, alt=node.text, title=node.title)}>")

    def visit_media_object(self, node: MediaObject) -> None:
        tag = "audio" if (node.format or "").startswith("audio") else "video"
        self._output.append(f"<{tag}{self._attrs(src=node.content_url, type=node.format)} controls></{tag}>")

    def visit_math_fragment(self, node: MathFragment) -> None:
        self._output.append(f'<span class="math"{self._math_attrs(node.math_language)}>{self._math_text(node)}</span>')

    def _math_attrs(self, math_language: Optional[str]) -> str:
        language = math_language or "tex"
        return self._attrs(data_math_language=language) if language != "tex" else ""

    def _math_text(self, node: Any) -> str:
        if node.math_language == "mathml":
            return node.text
        return escape(node.text, quote=False)

    def generic_visit(self, node: Any) -> None:
        if isinstance(node, Node):
            logger.debug(f"No HTML for {node_type(node)} nodes; rendering its children")
        super().generic_visit(node)


def decode_fragment(html: str) -> Any:
    """Decode an HTML fragment to a node, a list of nodes, or ``""``.

    Examples
    --------
    >>> decode_fragment("<em>hi</em>")
    Emphasis(content=['hi'])
    >>> decode_fragment("<!-- nothing -->")
    ''

    """
    return HtmlDecoder().decode_fragment(html)


def encode_html(node: Any, options: Optional[HtmlEncodeOptions] = None) -> str:
    """Encode a node to an HTML string."""
    return HtmlEncoder(options).encode(node)


class HtmlCodec(BaseCodec):
    """Codec for HTML documents and fragments."""

    name = "html"
    encode_options_class = HtmlEncodeOptions

    def sniff(self, content: str) -> bool:
        return bool(_SNIFF_PATTERN.match(content))

    @requires_dependencies("html", DEPS_HTML)
    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        """Decode HTML.

        A standalone decode returns an Article; otherwise the content is
        decoded as a fragment (see :func:`decode_fragment`).
        """
        options = self._decode_options(options)
        html = dump(file)
        with debug_timer(logger, "HTML decode"):
            if options.is_standalone:
                return HtmlDecoder().decode_document(html)
            return HtmlDecoder().decode_fragment(html)

    @requires_dependencies("html", DEPS_HTML)
    def decode_fragment(self, html: str) -> Any:
        """Decode an HTML fragment; see :func:`decode_fragment`."""
        return HtmlDecoder().decode_fragment(html)

    def encode(self, node: Any, options: Optional[HtmlEncodeOptions] = None) -> VFile:
        options = self._encode_options(options)
        with debug_timer(logger, "HTML encode"):
            html = HtmlEncoder(options).encode(node)
        return VFile(contents=html, media_type="text/html")


CODEC_METADATA = CodecMetadata(
    name="html",
    ext_names=["html", "htm"],
    media_types=["text/html", "application/xhtml+xml"],
    codec_class=HtmlCodec,
    required_packages=DEPS_HTML,
    description="HTML documents and fragments",
)
