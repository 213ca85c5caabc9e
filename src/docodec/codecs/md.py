#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/md.py
"""Markdown codec.

Decoding parses Markdown into mistune tokens and maps them to document
nodes. Besides CommonMark and the GFM extras (tables, task lists,
strikethrough) the parser understands:

- YAML front matter, merged into the Article's fields
- ``$…$`` and ``$$…$$`` TeX math, ``^sup^`` and ``~sub~``
- ``{key=value flag}`` attributes after links, images and code spans, and at
  the end of heading lines
- generic extensions, the escape hatch for values Markdown has no syntax
  for::

      !name[content](argument){properties}

      name: argument
      :::
      content
      :::{properties}

Encoding turns nodes into mistune tokens, replaces extension tokens and
attribute-carrying tokens with raw text in two post passes
(:func:`stringify_extensions`, :func:`stringify_attrs`), then stringifies
the tokens with mistune's Markdown renderer.

Examples
--------
    >>> decode_markdown("# Title\\n\\nIt is !true", is_standalone=True).content
    [Paragraph(content=['It is ', True])]
    >>> encode_markdown(Paragraph(["Answer: ", 42]))
    'Answer: !number(42)\\n'

"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from html import escape
from typing import Any, Match, Optional

from docodec.ast.nodes import (
    Article,
    Cite,
    CodeBlock,
    CodeChunk,
    CodeExpression,
    CodeFragment,
    Collection,
    Datatable,
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
from docodec.ast.utils import (
    collapse_title,
    extract_text,
    is_block,
    is_whitespace_paragraph,
    node_type,
    normalize_inlines,
    split_paragraph,
    wrap_inline_runs,
)
from docodec.ast.visitors import NodeVisitor
from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.constants import DEFAULT_CODE_CHUNK_LANGUAGE, DEPS_MARKDOWN
from docodec.options.base import BaseDecodeOptions
from docodec.options.markdown import MarkdownEncodeOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.utils.math import to_tex
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)

MISTUNE_PLUGINS = [
    "strikethrough",
    "table",
    "task_lists",
    "math",
    "mistune.plugins.math.math_in_quote",
    "mistune.plugins.math.math_in_list",
    "superscript",
    "subscript",
]

INLINE_EXTENSION_PATTERN = (
    r"!(?P<inline_ext_name>[a-z][a-z0-9]*)"
    r"(?:\[(?P<inline_ext_content>[^\]\n]*)\])?"
    r'(?:\((?P<inline_ext_argument>(?:"(?:[^"\\\n]|\\.)*"|[^)"\n])*)\))?'
    r"(?:\{(?P<inline_ext_properties>[^}\n]*)\})?"
)
INLINE_ATTRIBUTES_PATTERN = r'\{(?:[^{}\n"]|"(?:[^"\\\n]|\\.)*")*\}'
BLOCK_EXTENSION_PATTERN = (
    r"^(?P<block_ext_name>[a-z][a-z0-9]*):[ \t]*(?P<block_ext_argument>[^\n]*)\n" r":::[ \t]*(?:\n|$)"
)

_EXTENSION_HEADER = re.compile(r"^[a-z][a-z0-9]*:")
_EXTENSION_CLOSE = re.compile(r"^:::(?:\{(?P<properties>[^}\n]*)\})?[ \t]*$")
_ATTRIBUTE = re.compile(r"""([^\s=]+)(?:=("(?:[^"\\]|\\.)*"|'[^']*'|\S*))?""")
_TRAILING_ATTRIBUTES = re.compile(r'\s*\{((?:[^{}\n"]|"(?:[^"\\\n]|\\.)*")*)\}\s*$')
_NEEDS_QUOTES = re.compile(r'[\s"{}\\]')
_NEWLINES = re.compile(r"[ \t]*\r?\n[ \t]*")
_NUMBER = re.compile(r"^\s*[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_OPENING_TAG = re.compile(r"^<([A-Za-z][A-Za-z0-9-]*)(?:\s[^>]*)?>$")
_EXTENSION_FOLLOWER = re.compile(r"^[\w(]")

_VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "param", "source", "track", "wbr"}
)


class ExtensionKind(str, Enum):
    """Where a generic extension appears."""

    INLINE = "inline"
    BLOCK = "block"


class ExtensionName(str, Enum):
    """Names of the generic extensions the codec handles."""

    NULL = "null"
    TRUE = "true"
    FALSE = "false"
    BOOLEAN = "boolean"
    NUMBER = "number"
    ARRAY = "array"
    OBJECT = "object"
    QUOTE = "quote"
    EXPR = "expr"
    CHUNK = "chunk"
    FIGURE = "figure"
    INCLUDE = "include"


@dataclass
class Extension:
    """A parsed (or to be stringified) generic extension.

    ``name`` is kept as written so that unknown names can be reported;
    :class:`ExtensionName` lists the ones that decode to nodes.
    """

    kind: ExtensionKind
    name: str
    content: Optional[str] = None
    argument: Optional[str] = None
    properties: Optional[dict[str, Any]] = None

    def stringify(self) -> str:
        """Return the Markdown text of the extension."""
        if self.kind is ExtensionKind.INLINE:
            text = f"!{self.name}"
            if self.content:
                text += f"[{self.content}]"
            if self.argument:
                text += f"({self.argument})"
        else:
            text = f"{self.name}:"
            if self.argument:
                text += f" {self.argument}"
            text += f"\n:::\n{self.content or ''}\n:::"
        if self.properties is not None:
            text += "{" + " ".join(f"{key}={json.dumps(value)}" for key, value in self.properties.items()) + "}"
        return text

    @property
    def is_bare(self) -> bool:
        return not (self.content or self.argument or self.properties is not None)


# ============================================================================
# Attributes
# ============================================================================


def parse_attributes(text: str) -> dict[str, str]:
    """Parse ``key=value key2="a b" flag`` into a dict.

    Flags (keys without a value) map to ``""``, except ``#name`` which is
    shorthand for ``id=name``. Double-quoted values may contain backslash
    escapes.

    Examples
    --------
    >>> parse_attributes('lang=py label="a b" echo')
    {'lang': 'py', 'label': 'a b', 'echo': ''}
    >>> parse_attributes("#intro")
    {'id': 'intro'}

    """
    attrs: dict[str, str] = {}
    for m in _ATTRIBUTE.finditer(text):
        key, value = m.group(1), m.group(2)
        if value is None and len(key) > 1 and key.startswith("#"):
            attrs["id"] = key[1:]
        elif value is None:
            attrs[key] = ""
        elif len(value) >= 2 and value[0] == '"' and value[-1] == '"':
            attrs[key] = re.sub(r"\\(.)", r"\1", value[1:-1])
        elif len(value) >= 2 and value[0] == "'" and value[-1] == "'":
            attrs[key] = value[1:-1]
        else:
            attrs[key] = value
    return attrs


def stringify_attributes(meta: dict[str, Any]) -> str:
    """Inverse of :func:`parse_attributes`. ``None`` values are skipped."""
    parts = []
    for key, value in meta.items():
        if value is None:
            continue
        if not isinstance(value, str):
            value = json.dumps(value)
        if value == "":
            parts.append(key)
        elif _NEEDS_QUOTES.search(value):
            parts.append(f'{key}="' + value.replace("\\", "\\\\").replace('"', '\\"') + '"')
        else:
            parts.append(f"{key}={value}")
    return " ".join(parts)


# ============================================================================
# mistune plugin
# ============================================================================


def _parse_inline_extension(inline: Any, m: Match[str], state: Any) -> Optional[int]:
    start = m.start()
    properties = m.group("inline_ext_properties")
    has_suffix = (
        m.group("inline_ext_content") is not None
        or m.group("inline_ext_argument") is not None
        or properties is not None
    )
    # "Hello!world" is text, "x!true{}" is an extension
    if start > 0 and state.src[start - 1].isalnum() and not has_suffix:
        return None
    extension = Extension(
        kind=ExtensionKind.INLINE,
        name=m.group("inline_ext_name"),
        content=m.group("inline_ext_content"),
        argument=m.group("inline_ext_argument"),
        properties=parse_attributes(properties) if properties is not None else None,
    )
    state.append_token({"type": "inline_extension", "extension": extension})
    return m.end()


def _parse_inline_attributes(inline: Any, m: Match[str], state: Any) -> Optional[int]:
    if not state.tokens:
        return None
    previous = state.tokens[-1]
    if previous.get("type") not in ("link", "image", "codespan") or "meta" in previous:
        return None
    previous["meta"] = parse_attributes(m.group(0)[1:-1])
    return m.end()


def _parse_block_extension(block: Any, m: Match[str], state: Any) -> Optional[int]:
    src = state.src
    content_start = pos = m.end()
    depth = 0
    previous = ""
    while pos < len(src):
        newline = src.find("\n", pos)
        line_end = len(src) if newline == -1 else newline
        line = src[pos:line_end]
        if line.rstrip() == ":::" and _EXTENSION_HEADER.match(previous):
            depth += 1
        else:
            close = _EXTENSION_CLOSE.match(line)
            if close and depth == 0:
                properties = close.group("properties")
                extension = Extension(
                    kind=ExtensionKind.BLOCK,
                    name=m.group("block_ext_name"),
                    content=src[content_start:pos].rstrip("\n"),
                    argument=m.group("block_ext_argument").strip() or None,
                    properties=parse_attributes(properties) if properties is not None else None,
                )
                state.append_token({"type": "block_extension", "extension": extension})
                return line_end if newline == -1 else line_end + 1
            if close:
                depth -= 1
        previous = line
        pos = line_end + 1
    # Unterminated; leave it to the paragraph rule
    return None


def extensions_plugin(md: Any) -> None:
    """mistune plugin adding generic extensions and attribute annotations."""
    md.inline.register("inline_extension", INLINE_EXTENSION_PATTERN, _parse_inline_extension, before="link")
    md.inline.register("inline_attributes", INLINE_ATTRIBUTES_PATTERN, _parse_inline_attributes, before="link")
    md.block.register("block_extension", BLOCK_EXTENSION_PATTERN, _parse_block_extension, before="list")
    md.block.insert_rule(md.block.block_quote_rules, "block_extension", before="list")
    md.block.insert_rule(md.block.list_rules, "block_extension", before="list")


# ============================================================================
# Decoding
# ============================================================================


def _token_text(tokens: list[dict[str, Any]]) -> str:
    parts = []
    for token in tokens:
        if "raw" in token:
            parts.append(token["raw"])
        elif "children" in token:
            parts.append(_token_text(token["children"]))
    return "".join(parts)


def _body(extension: Extension, default: Optional[str]) -> Optional[str]:
    if extension.argument is not None:
        return extension.argument
    if extension.content is not None:
        return extension.content
    return default


class MarkdownDecoder:
    """Maps mistune tokens to document nodes.

    Every ``_process_*`` and ``_handle_*`` method returns a list of values,
    so that ``None`` (the Null primitive) can be told apart from "nothing".
    """

    _BLOCK_HANDLERS = {
        "heading": "_process_heading",
        "paragraph": "_process_paragraph",
        "block_text": "_process_paragraph",
        "block_code": "_process_code_block",
        "block_quote": "_process_block_quote",
        "list": "_process_list",
        "table": "_process_table",
        "thematic_break": "_process_thematic_break",
        "block_html": "_process_html",
        "block_math": "_handle_block_math",
        "block_extension": "_handle_extension",
    }

    _INLINE_HANDLERS = {
        "text": "_handle_text",
        "softbreak": "_handle_break",
        "linebreak": "_handle_break",
        "emphasis": "_handle_emphasis",
        "strong": "_handle_strong",
        "strikethrough": "_handle_strikethrough",
        "superscript": "_handle_superscript",
        "subscript": "_handle_subscript",
        "codespan": "_handle_codespan",
        "link": "_handle_link",
        "image": "_handle_image",
        "inline_html": "_process_html",
        "inline_math": "_handle_inline_math",
        "block_math": "_handle_block_math",
        "inline_extension": "_handle_extension",
    }

    _EXTENSION_HANDLERS = {
        ExtensionName.NULL: "_decode_null",
        ExtensionName.TRUE: "_decode_boolean",
        ExtensionName.FALSE: "_decode_boolean",
        ExtensionName.BOOLEAN: "_decode_boolean",
        ExtensionName.NUMBER: "_decode_number",
        ExtensionName.ARRAY: "_decode_array",
        ExtensionName.OBJECT: "_decode_object",
        ExtensionName.QUOTE: "_decode_quote",
        ExtensionName.EXPR: "_decode_expr",
        ExtensionName.CHUNK: "_decode_chunk",
        ExtensionName.FIGURE: "_decode_figure",
        ExtensionName.INCLUDE: "_decode_include",
    }

    def __init__(self) -> None:
        import mistune

        self._markdown = mistune.create_markdown(renderer=None, plugins=[*MISTUNE_PLUGINS, extensions_plugin])

    def decode(self, text: str, is_standalone: bool = True) -> Any:
        """Decode Markdown text to an Article, or to a list of blocks."""
        if not is_standalone:
            tokens, _state = self._markdown.parse(text)
            return self._process_tokens(tokens)

        front_matter, text = self._split_front_matter(text)
        tokens, _state = self._markdown.parse(text)
        return self._decode_article(tokens, front_matter)

    def _split_front_matter(self, text: str) -> tuple[dict[str, Any], str]:
        """Split a leading ``---`` fenced YAML block off ``text``."""
        if not (text.startswith("---\n") or text.startswith("---\r\n")):
            return {}, text

        lines = text.splitlines(keepends=True)
        end_index = next((i for i in range(1, len(lines)) if lines[i].strip() in ("---", "...")), -1)
        if end_index <= 0:
            return {}, text

        import yaml

        remaining = "".join(lines[end_index + 1 :])
        try:
            data = yaml.safe_load("".join(lines[1:end_index]))
        except yaml.YAMLError as e:
            logger.warning(f"Ignoring invalid YAML front matter: {e}")
            return {}, remaining

        if data is None:
            return {}, remaining
        if not isinstance(data, dict):
            # A thematic break followed by more text, not front matter
            return {}, text
        return data, remaining

    def _decode_article(self, tokens: list[dict[str, Any]], front_matter: dict[str, Any]) -> Article:
        fields = {key: value for key, value in front_matter.items() if key not in ("type", "content")}
        article = dict_to_ast({**fields, "type": "Article"})

        title = None
        content: list[Any] = []
        for token in tokens:
            if (
                title is None
                and article.title is None
                and token["type"] == "heading"
                and token["attrs"]["level"] == 1
            ):
                title = collapse_title(self._process_inline_tokens(token.get("children", [])))
                continue
            content.extend(self._process_token(token))

        if title is not None:
            article.title = title
        article.content = self._as_blocks(content)
        return article

    def _as_blocks(self, nodes: list[Any]) -> list[Any]:
        return wrap_inline_runs(node for node in nodes if not (isinstance(node, str) and not node.strip()))

    def _process_tokens(self, tokens: list[dict[str, Any]]) -> list[Any]:
        """Process block tokens into block content."""
        nodes: list[Any] = []
        for token in tokens:
            nodes.extend(self._process_token(token))
        return self._as_blocks(nodes)

    def _process_token(self, token: dict[str, Any]) -> list[Any]:
        token_type = token.get("type", "")
        handler = self._BLOCK_HANDLERS.get(token_type)
        if handler is not None:
            return getattr(self, handler)(token)
        if token_type != "blank_line":
            logger.warning(f"No Markdown decoder for token type '{token_type}'")
        return []

    def _process_inline_tokens(self, tokens: list[dict[str, Any]]) -> list[Any]:
        """Process inline tokens, decoding runs of raw HTML as one fragment."""
        nodes: list[Any] = []
        index = 0
        while index < len(tokens):
            token = tokens[index]
            if token["type"] == "inline_html":
                end = self._find_closing_tag(tokens, index)
                if end is not None:
                    nodes.extend(self._decode_html(self._tokens_to_html(tokens[index : end + 1])))
                    index = end + 1
                    continue
            handler = self._INLINE_HANDLERS.get(token["type"])
            if handler is not None:
                nodes.extend(getattr(self, handler)(token))
            else:
                logger.warning(f"No Markdown decoder for inline token type '{token['type']}'")
            index += 1
        return normalize_inlines(nodes, trim=False)

    # Blocks

    def _process_heading(self, token: dict[str, Any]) -> list[Any]:
        content = self._process_inline_tokens(token.get("children", []))
        heading = Heading(content=content, depth=token["attrs"]["level"])
        if content and isinstance(content[-1], str):
            m = _TRAILING_ATTRIBUTES.search(content[-1])
            if m:
                attrs = parse_attributes(m.group(1))
                stripped = content[-1][: m.start()]
                content[-1:] = [stripped] if stripped else []
                heading.id = attrs.pop("id", None) or None
                if attrs:
                    logger.debug(f"Dropping heading attributes {sorted(attrs)}")
        return [heading]

    def _process_paragraph(self, token: dict[str, Any]) -> list[Any]:
        content = self._process_inline_tokens(token.get("children", []))
        if not content:
            return []
        result = split_paragraph(content)
        return result if isinstance(result, list) else [result]

    def _process_code_block(self, token: dict[str, Any]) -> list[Any]:
        raw = token.get("raw", "")
        info = ((token.get("attrs") or {}).get("info") or "").strip()
        language, _, rest = info.partition(" ")
        meta = parse_attributes(rest) if rest.strip() else None
        return [
            CodeBlock(
                text=raw[:-1] if raw.endswith("\n") else raw,
                programming_language=language or None,
                meta=meta or None,
            )
        ]

    def _process_block_quote(self, token: dict[str, Any]) -> list[Any]:
        return [QuoteBlock(content=self._process_tokens(token.get("children", [])))]

    def _process_list(self, token: dict[str, Any]) -> list[Any]:
        ordered = (token.get("attrs") or {}).get("ordered", False)
        items = [
            self._process_list_item(item)
            for item in token.get("children", [])
            if item["type"] in ("list_item", "task_list_item")
        ]
        return [List(items=items, order="ascending" if ordered else "unordered")]

    def _process_list_item(self, token: dict[str, Any]) -> ListItem:
        item = ListItem(content=self._process_tokens(token.get("children", [])))
        if token["type"] == "task_list_item":
            item.is_checked = bool((token.get("attrs") or {}).get("checked"))
        return item

    def _process_table(self, token: dict[str, Any]) -> list[Any]:
        rows: list[TableRow] = []
        for section in token.get("children", []):
            if section["type"] == "table_head":
                rows.append(self._process_table_row(section))
            elif section["type"] == "table_body":
                rows.extend(self._process_table_row(row) for row in section.get("children", []))
        return [Table(rows=rows)]

    def _process_table_row(self, token: dict[str, Any]) -> TableRow:
        return TableRow(
            cells=[
                TableCell(content=self._process_inline_tokens(cell.get("children", [])))
                for cell in token.get("children", [])
            ]
        )

    def _process_thematic_break(self, token: dict[str, Any]) -> list[Any]:
        return [ThematicBreak()]

    def _process_html(self, token: dict[str, Any]) -> list[Any]:
        return self._decode_html(token.get("raw", ""))

    # Raw HTML

    def _decode_html(self, html: str) -> list[Any]:
        from docodec.codecs.html import HtmlCodec

        node = HtmlCodec().decode_fragment(html)
        return node if isinstance(node, list) else [node]

    def _find_closing_tag(self, tokens: list[dict[str, Any]], index: int) -> Optional[int]:
        """Index of the token closing the HTML element opened at ``index``.

        Only runs made of text and HTML tokens are joined; None otherwise.
        """
        m = _OPENING_TAG.match(tokens[index].get("raw", "").strip())
        if not m or m.group(1).lower() in _VOID_ELEMENTS:
            return None
        tag = m.group(1).lower()
        depth = 0
        for j in range(index + 1, len(tokens)):
            token = tokens[j]
            if token["type"] in ("text", "softbreak", "linebreak"):
                continue
            if token["type"] != "inline_html":
                return None
            raw = token.get("raw", "").strip().lower()
            if raw == f"</{tag}>":
                if depth == 0:
                    return j
                depth -= 1
            elif re.match(rf"^<{re.escape(tag)}[\s>]", raw):
                depth += 1
        return None

    def _tokens_to_html(self, tokens: list[dict[str, Any]]) -> str:
        parts = []
        for token in tokens:
            if token["type"] == "text":
                parts.append(escape(token.get("raw", ""), quote=False))
            elif token["type"] == "linebreak":
                parts.append("<br>")
            elif token["type"] == "softbreak":
                parts.append("\n")
            else:
                parts.append(token.get("raw", ""))
        return "".join(parts)

    # Inlines

    def _handle_text(self, token: dict[str, Any]) -> list[Any]:
        return [_NEWLINES.sub(" ", token.get("raw", ""))]

    def _handle_break(self, token: dict[str, Any]) -> list[Any]:
        return [" "]

    def _handle_emphasis(self, token: dict[str, Any]) -> list[Any]:
        return [Emphasis(content=self._process_inline_tokens(token.get("children", [])))]

    def _handle_strong(self, token: dict[str, Any]) -> list[Any]:
        return [Strong(content=self._process_inline_tokens(token.get("children", [])))]

    def _handle_strikethrough(self, token: dict[str, Any]) -> list[Any]:
        return [Delete(content=self._process_inline_tokens(token.get("children", [])))]

    def _handle_superscript(self, token: dict[str, Any]) -> list[Any]:
        return [Superscript(content=self._process_inline_tokens(token.get("children", [])))]

    def _handle_subscript(self, token: dict[str, Any]) -> list[Any]:
        return [Subscript(content=self._process_inline_tokens(token.get("children", [])))]

    def _handle_codespan(self, token: dict[str, Any]) -> list[Any]:
        text = token.get("raw", "")
        attrs = dict(token.get("meta") or {})
        language = attrs.pop("lang", None) or None

        if attrs.get("type") != "expr":
            return [CodeFragment(text=text, programming_language=language, meta=attrs or None)]

        attrs.pop("type")
        expression = CodeExpression(text=text, programming_language=language)
        output = attrs.pop("output", None)
        if output is not None:
            try:
                expression.output = dict_to_ast(json.loads(output))
            except json.JSONDecodeError:
                logger.warning(f"Code expression output is not valid JSON; keeping it as text: {output!r}")
                expression.output = output
        expression.meta = attrs or None
        return [expression]

    def _handle_link(self, token: dict[str, Any]) -> list[Any]:
        attrs = token.get("attrs") or {}
        meta = dict(token.get("meta") or {})
        link = Link(
            content=self._process_inline_tokens(token.get("children", [])),
            target=attrs.get("url", ""),
            title=attrs.get("title") or None,
            relation=meta.pop("rel", None) or None,
        )
        link.meta = meta or None
        return [link]

    def _handle_image(self, token: dict[str, Any]) -> list[Any]:
        attrs = token.get("attrs") or {}
        return [
            ImageObject(
                content_url=attrs.get("url", ""),
                text=_token_text(token.get("children", [])) or None,
                title=attrs.get("title") or None,
                meta=token.get("meta") or None,
            )
        ]

    def _handle_inline_math(self, token: dict[str, Any]) -> list[Any]:
        return [MathFragment(text=token.get("raw", ""), math_language="tex")]

    def _handle_block_math(self, token: dict[str, Any]) -> list[Any]:
        return [MathBlock(text=token.get("raw", "").strip("\n"), math_language="tex")]

    # Extensions

    def _handle_extension(self, token: dict[str, Any]) -> list[Any]:
        return [self._decode_extension(token["extension"])]

    def _decode_extension(self, extension: Extension) -> Any:
        try:
            name = ExtensionName(extension.name)
        except ValueError:
            logger.warning(f"Unhandled generic extension '{extension.name}'")
            return ""
        return getattr(self, self._EXTENSION_HANDLERS[name])(extension)

    def _decode_null(self, extension: Extension) -> None:
        return None

    def _decode_boolean(self, extension: Extension) -> bool:
        if extension.name == ExtensionName.TRUE:
            return True
        if extension.name == ExtensionName.FALSE:
            return False
        value = (_body(extension, "true") or "").strip()
        return value in ("true", "1")

    def _decode_number(self, extension: Extension) -> int | float:
        text = _body(extension, "0") or ""
        m = _NUMBER.match(text)
        if not m:
            logger.warning(f"Invalid number extension '{text}'; decoding as 0")
            return 0
        literal = m.group(0).strip()
        try:
            return int(literal)
        except ValueError:
            return float(literal)

    def _decode_array(self, extension: Extension) -> list[Any]:
        import yaml

        body = _body(extension, "")
        try:
            value = yaml.safe_load(f"[{body}]")
        except yaml.YAMLError as e:
            logger.warning(f"Invalid array extension '{body}': {e}")
            return []
        return value if isinstance(value, list) else []

    def _decode_object(self, extension: Extension) -> dict[str, Any]:
        if extension.properties:
            return dict(extension.properties)

        import yaml

        body = _body(extension, "")
        try:
            value = yaml.safe_load(f"{{{body}}}")
        except yaml.YAMLError as e:
            logger.warning(f"Invalid object extension '{body}': {e}")
            return {}
        return value if isinstance(value, dict) else {}

    def _decode_quote(self, extension: Extension) -> Quote:
        return Quote(content=[extension.content] if extension.content else [], cite=extension.argument or None)

    def _decode_expr(self, extension: Extension) -> CodeExpression:
        return CodeExpression(text=extension.content or "", programming_language=extension.argument or None)

    def _decode_chunk(self, extension: Extension) -> CodeChunk:
        if not extension.content:
            logger.warning("Code chunk has no content")
            return CodeChunk(text="")

        nodes = decode_markdown(extension.content, is_standalone=False)
        first = nodes[0] if nodes else None
        if not isinstance(first, CodeBlock):
            logger.warning("Code chunk extension has no code")
            return CodeChunk(text="")

        outputs: list[Any] = []
        if len(nodes) > 1:
            group: list[Any] = []
            for node in nodes[1:]:
                if isinstance(node, ThematicBreak):
                    outputs.append(_unwrap_output(group))
                    group = []
                else:
                    group.append(node)
            outputs.append(_unwrap_output(group))

        return CodeChunk(
            text=first.text,
            programming_language=first.programming_language,
            meta=first.meta,
            outputs=outputs or None,
        )

    def _decode_figure(self, extension: Extension) -> Figure:
        if not extension.content:
            logger.warning("Figure has no content")
            return Figure(label=extension.argument or None)
        nodes = decode_markdown(extension.content, is_standalone=False)
        return Figure(content=nodes[:1], caption=nodes[1:] or None, label=extension.argument or None)

    def _decode_include(self, extension: Extension) -> Include:
        include = Include(source=extension.argument or "")
        if extension.content:
            include.content = [node for node in decode_markdown(extension.content, is_standalone=False) if is_block(node)]
        return include


def _unwrap_output(nodes: list[Any]) -> Any:
    """A lone one-child paragraph unwraps to its child (e.g. a number)."""
    if len(nodes) != 1:
        return list(nodes)
    node = nodes[0]
    if isinstance(node, Paragraph) and len(node.content) == 1:
        return node.content[0]
    return node


# ============================================================================
# Encoding
# ============================================================================


def _escape_script(text: str, marker: str) -> str:
    return text.replace("\\", "\\\\").replace(marker, "\\" + marker).replace(" ", "\\ ")


def _format_number(value: int | float) -> str:
    return str(value) if isinstance(value, int) else repr(value)


class MarkdownEncoder(NodeVisitor):
    """Visitor building mistune tokens from document nodes.

    ``visit_*`` methods return a token, a list of tokens, or None to emit
    nothing. Extension tokens carry an :class:`Extension` under the
    ``"extension"`` key; tokens with ``{…}`` attributes carry them under
    ``"meta"``. Both are resolved to raw text before stringifying.
    """

    def __init__(self, options: Optional[MarkdownEncodeOptions] = None):
        self.options = options or MarkdownEncodeOptions()

    def encode(self, node: Any) -> str:
        """Encode a node, or a list of block content, to Markdown."""
        from docodec.codecs._md_renderer import render_tokens

        front_matter = ""
        if isinstance(node, Article):
            if self.options.is_standalone and self.options.front_matter:
                front_matter = self._front_matter(node)
            blocks = node.content or []
        elif isinstance(node, list):
            blocks = node
        else:
            blocks = [node]

        tokens = self._block_tokens(blocks)
        tokens = stringify_extensions(tokens)
        tokens = stringify_attrs(tokens)
        body = render_tokens(tokens).strip("\n")
        text = front_matter + body
        return text + "\n" if text else ""

    def _front_matter(self, article: Article) -> str:
        import yaml

        data = ast_to_dict(article)
        data.pop("type", None)
        data.pop("content", None)
        if not data:
            return ""
        dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False).strip()
        return f"---\n{dumped}\n---\n\n"

    def _encode_nested(self, nodes: list[Any]) -> str:
        return MarkdownEncoder(self.options.create_updated(is_standalone=False)).encode(nodes).strip()

    def _block_tokens(self, nodes: Any) -> list[dict[str, Any]]:
        tokens: list[dict[str, Any]] = []
        for node in wrap_inline_runs(nodes):
            result = self.visit(node)
            if result is None:
                continue
            tokens.extend(result if isinstance(result, list) else [result])
        return tokens

    def _inline_tokens(self, nodes: list[Any]) -> list[dict[str, Any]]:
        tokens: list[dict[str, Any]] = []
        for node in nodes:
            if is_block(node):
                logger.debug(f"{node_type(node)} in inline content; writing its text")
                node = extract_text(node)
            result = self.visit(node)
            if result is None:
                continue
            tokens.extend(result if isinstance(result, list) else [result])
        return tokens

    def _extension(self, kind: ExtensionKind, name: ExtensionName, **kwargs: Any) -> dict[str, Any]:
        token_type = "inline_extension" if kind is ExtensionKind.INLINE else "block_extension"
        return {"type": token_type, "extension": Extension(kind=kind, name=name.value, **kwargs)}

    # Primitives

    def visit_text(self, value: str) -> dict[str, Any]:
        return {"type": "text", "raw": _NEWLINES.sub(" ", value)}

    def visit_null(self, value: None) -> dict[str, Any]:
        return self._extension(ExtensionKind.INLINE, ExtensionName.NULL)

    def visit_boolean(self, value: bool) -> dict[str, Any]:
        return self._extension(ExtensionKind.INLINE, ExtensionName.TRUE if value else ExtensionName.FALSE)

    def visit_number(self, value: int | float) -> dict[str, Any]:
        return self._extension(ExtensionKind.INLINE, ExtensionName.NUMBER, argument=_format_number(value))

    def visit_array(self, value: list) -> dict[str, Any]:
        argument = json.dumps(ast_to_dict(value), ensure_ascii=False)[1:-1]
        return self._extension(ExtensionKind.INLINE, ExtensionName.ARRAY, argument=argument)

    def visit_object(self, value: dict) -> dict[str, Any]:
        argument = json.dumps(ast_to_dict(value), ensure_ascii=False)[1:-1]
        return self._extension(ExtensionKind.INLINE, ExtensionName.OBJECT, argument=argument)

    # Blocks

    def visit_article(self, node: Article) -> list[dict[str, Any]]:
        return self._block_tokens(node.content or [])

    def visit_paragraph(self, node: Paragraph) -> Any:
        if is_whitespace_paragraph(node):
            return None
        if any(is_block(child) for child in node.content):
            return self._block_tokens(node.content)
        children = self._inline_tokens(node.content)
        return {"type": "paragraph", "children": children} if children else None

    def visit_heading(self, node: Heading) -> dict[str, Any]:
        token: dict[str, Any] = {
            "type": "heading",
            "attrs": {"level": min(max(node.depth, 1), 6)},
            "children": self._inline_tokens(node.content),
        }
        if node.id:
            token["meta"] = {"id": node.id}
        return token

    def visit_list(self, node: List) -> dict[str, Any]:
        ordered = node.order in ("ascending", "descending")
        tight = all(len(wrap_inline_runs(item.content)) <= 1 for item in node.items)
        return {
            "type": "list",
            "tight": tight,
            "bullet": "." if ordered else "-",
            "attrs": {"ordered": ordered, "start": 1, "depth": 0},
            "children": [self._list_item_token(item, tight) for item in node.items],
        }

    def _list_item_token(self, item: ListItem, tight: bool) -> dict[str, Any]:
        children = self._block_tokens(item.content)
        if tight:
            children = [{**child, "type": "block_text"} if child["type"] == "paragraph" else child for child in children]
        if item.is_checked is not None:
            checkbox = {"type": "inline_html", "raw": "[x] " if item.is_checked else "[ ] "}
            if children and children[0]["type"] in ("paragraph", "block_text"):
                children[0] = {**children[0], "children": [checkbox, *children[0]["children"]]}
            else:
                children.insert(0, {"type": "block_text" if tight else "paragraph", "children": [checkbox]})
        return {"type": "list_item", "children": children}

    def visit_list_item(self, node: ListItem) -> list[dict[str, Any]]:
        return self._block_tokens(node.content)

    def visit_table(self, node: Table) -> Optional[dict[str, Any]]:
        rows = [[self._cell_tokens(cell) for cell in row.cells] for row in node.rows]
        width = max((len(row) for row in rows), default=0)
        if width == 0:
            return None
        rows = [row + [[] for _ in range(width - len(row))] for row in rows]

        def cell(children: list[dict[str, Any]], head: bool) -> dict[str, Any]:
            return {"type": "table_cell", "attrs": {"align": None, "head": head}, "children": children}

        head = {"type": "table_head", "children": [cell(children, True) for children in rows[0]]}
        body = {
            "type": "table_body",
            "children": [
                {"type": "table_row", "children": [cell(children, False) for children in row]} for row in rows[1:]
            ],
        }
        return {"type": "table", "children": [head, body]}

    def _cell_tokens(self, cell: TableCell) -> list[dict[str, Any]]:
        content: list[Any] = []
        for child in cell.content:
            if isinstance(child, Paragraph):
                content.extend(child.content)
            elif is_block(child):
                content.append(extract_text(child))
            else:
                content.append(child)
        return self._inline_tokens(content)

    def visit_datatable(self, node: Datatable) -> Optional[dict[str, Any]]:
        height = max((len(column.values) for column in node.columns), default=0)
        rows = [TableRow(cells=[TableCell(content=[column.name]) for column in node.columns])]
        for index in range(height):
            rows.append(
                TableRow(
                    cells=[
                        TableCell(content=[column.values[index]] if index < len(column.values) else [])
                        for column in node.columns
                    ]
                )
            )
        return self.visit_table(Table(rows=rows))

    def visit_code_block(self, node: CodeBlock) -> dict[str, Any]:
        info = node.programming_language or ""
        if node.meta:
            info = f"{info} {stringify_attributes(node.meta)}".strip()
        return {"type": "block_code", "raw": node.text.rstrip(), "attrs": {"info": info}}

    def visit_code_chunk(self, node: CodeChunk) -> dict[str, Any]:
        nodes: list[Any] = [
            CodeBlock(
                text=node.text,
                programming_language=node.programming_language or DEFAULT_CODE_CHUNK_LANGUAGE,
                meta=node.meta,
            )
        ]
        for index, output in enumerate(node.outputs or []):
            if index:
                nodes.append(ThematicBreak())
            # A list of blocks is several output blocks, any other list is an Array value
            if isinstance(output, list) and output and all(is_block(item) for item in output):
                nodes.extend(output)
            else:
                nodes.append(output)
        return self._extension(ExtensionKind.BLOCK, ExtensionName.CHUNK, content=self._encode_nested(nodes))

    def visit_quote_block(self, node: QuoteBlock) -> dict[str, Any]:
        return {"type": "block_quote", "children": self._block_tokens(node.content)}

    def visit_figure(self, node: Figure) -> dict[str, Any]:
        content = self._encode_nested([*node.content, *(node.caption or [])])
        return self._extension(ExtensionKind.BLOCK, ExtensionName.FIGURE, content=content, argument=node.label)

    def visit_thematic_break(self, node: ThematicBreak) -> dict[str, Any]:
        return {"type": "thematic_break"}

    def visit_collection(self, node: Collection) -> list[dict[str, Any]]:
        tokens: list[dict[str, Any]] = []
        for part in node.parts:
            tokens.extend(self._block_tokens(part.content or [] if isinstance(part, Article) else [part]))
        return tokens

    def visit_include(self, node: Include) -> dict[str, Any]:
        content = self._encode_nested(node.content or [])
        return self._extension(ExtensionKind.BLOCK, ExtensionName.INCLUDE, content=content, argument=node.source)

    def visit_math_block(self, node: MathBlock) -> dict[str, Any]:
        tex = to_tex(node.text, node.math_language).strip()
        return {"type": "block_html", "raw": f"$$\n{tex}\n$$"}

    # Inlines

    def visit_emphasis(self, node: Emphasis) -> Optional[dict[str, Any]]:
        children = self._inline_tokens(node.content)
        return {"type": "emphasis", "children": children} if children else None

    def visit_strong(self, node: Strong) -> Optional[dict[str, Any]]:
        children = self._inline_tokens(node.content)
        return {"type": "strong", "children": children} if children else None

    def visit_delete(self, node: Delete) -> Optional[dict[str, Any]]:
        children = self._inline_tokens(node.content)
        return {"type": "strikethrough", "children": children} if children else None

    def visit_superscript(self, node: Superscript) -> Optional[dict[str, Any]]:
        text = extract_text(node)
        return {"type": "inline_html", "raw": f"^{_escape_script(text, '^')}^"} if text else None

    def visit_subscript(self, node: Subscript) -> Optional[dict[str, Any]]:
        text = extract_text(node)
        return {"type": "inline_html", "raw": f"~{_escape_script(text, '~')}~"} if text else None

    def visit_link(self, node: Link) -> dict[str, Any]:
        token: dict[str, Any] = {
            "type": "link",
            "children": self._inline_tokens(node.content),
            "attrs": {"url": node.target, "title": node.title},
        }
        meta = dict(node.meta or {})
        if node.relation:
            meta["rel"] = node.relation
        if meta:
            token["meta"] = meta
        return token

    def visit_cite(self, node: Cite) -> dict[str, Any]:
        return {"type": "inline_html", "raw": f"@{node.target}"}

    def visit_quote(self, node: Quote) -> dict[str, Any]:
        return self._extension(
            ExtensionKind.INLINE,
            ExtensionName.QUOTE,
            content=extract_text(node.content) or None,
            argument=node.cite,
        )

    def visit_code_fragment(self, node: CodeFragment) -> dict[str, Any]:
        meta: dict[str, Any] = {}
        if node.programming_language:
            meta["lang"] = node.programming_language
        meta.update(node.meta or {})
        token: dict[str, Any] = {"type": "codespan", "raw": node.text}
        if meta:
            token["meta"] = meta
        return token

    def visit_code_expression(self, node: CodeExpression) -> dict[str, Any]:
        meta: dict[str, Any] = {"type": "expr"}
        if node.programming_language:
            meta["lang"] = node.programming_language
        meta.update(node.meta or {})
        if node.output is not None:
            meta["output"] = json.dumps(ast_to_dict(node.output), ensure_ascii=False)
        return {"type": "codespan", "raw": node.text or "", "meta": meta}

    def visit_image_object(self, node: ImageObject) -> dict[str, Any]:
        token: dict[str, Any] = {
            "type": "image",
            "children": [{"type": "text", "raw": node.text}] if node.text else [],
            "attrs": {"url": node.content_url, "title": extract_text(node.title) if node.title else None},
        }
        if node.meta:
            token["meta"] = dict(node.meta)
        return token

    def visit_media_object(self, node: MediaObject) -> dict[str, Any]:
        logger.debug("Writing MediaObject as a Markdown image")
        token: dict[str, Any] = {"type": "image", "children": [], "attrs": {"url": node.content_url, "title": None}}
        if node.meta:
            token["meta"] = dict(node.meta)
        return token

    def visit_math_fragment(self, node: MathFragment) -> dict[str, Any]:
        tex = to_tex(node.text, node.math_language).strip()
        return {"type": "inline_html", "raw": f"${tex}$"}

    def generic_visit(self, node: Any) -> None:
        logger.warning(f"No Markdown encoder for {node_type(node)} nodes")
        return None


def stringify_extensions(tokens: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Replace extension tokens with raw text, recursively.

    A bare inline extension (``!true``) followed by a letter, digit, ``(``
    or a link gets an empty ``{}`` so that what follows is not read as part
    of it. So does one written directly after a letter or digit, which the
    parser otherwise reads as text (``x!true{}``).
    """
    result: list[dict[str, Any]] = []
    for index, token in enumerate(tokens):
        extension = token.get("extension")
        if extension is None:
            if "children" in token:
                token = {**token, "children": stringify_extensions(token["children"])}
            result.append(token)
            continue

        raw = extension.stringify()
        if extension.kind is ExtensionKind.INLINE:
            following = tokens[index + 1] if index + 1 < len(tokens) else None
            preceding = result[-1] if result else None
            if extension.is_bare and (
                (following is not None and _starts_extension_suffix(following))
                or (preceding is not None and _ends_with_word_character(preceding))
            ):
                raw += "{}"
            result.append({"type": "inline_html", "raw": raw})
        else:
            result.append({"type": "block_html", "raw": raw})
    return result


def _starts_extension_suffix(token: dict[str, Any]) -> bool:
    if token["type"] in ("link", "image"):
        return True
    if token["type"] in ("text", "inline_html"):
        return bool(_EXTENSION_FOLLOWER.match(token.get("raw", "")))
    return False


def _ends_with_word_character(token: dict[str, Any]) -> bool:
    if token["type"] in ("text", "inline_html"):
        raw = token.get("raw", "")
        return bool(raw) and raw[-1].isalnum()
    return False


def stringify_attrs(tokens: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Re-emit tokens carrying ``meta`` with a ``{…}`` attribute suffix."""
    from docodec.codecs._md_renderer import render_inline_token

    result: list[dict[str, Any]] = []
    for token in tokens:
        if "children" in token:
            token = {**token, "children": stringify_attrs(token["children"])}
        meta = token.get("meta")
        if not meta:
            result.append(token)
            continue

        token = {key: value for key, value in token.items() if key != "meta"}
        suffix = "{" + stringify_attributes(meta) + "}"
        if token["type"] == "heading":
            token["children"] = [*token["children"], {"type": "inline_html", "raw": " " + suffix}]
            result.append(token)
        else:
            result.append({"type": "inline_html", "raw": render_inline_token(token) + suffix})
    return result


def decode_markdown(text: str, is_standalone: bool = True) -> Any:
    """Decode Markdown to an Article, or to a list of block nodes.

    Parameters
    ----------
    text : str
        Markdown source
    is_standalone : bool, default True
        Decode front matter and a leading H1 into the Article's fields. When
        False, return the block content only.

    """
    return MarkdownDecoder().decode(text, is_standalone=is_standalone)


def encode_markdown(node: Any, options: Optional[MarkdownEncodeOptions] = None) -> str:
    """Encode a node (or a list of block content) to Markdown."""
    return MarkdownEncoder(options).encode(node)


class MarkdownCodec(BaseCodec):
    """Codec for Markdown with front matter, math and generic extensions."""

    name = "md"
    encode_options_class = MarkdownEncodeOptions

    @requires_dependencies("md", DEPS_MARKDOWN)
    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        options = self._decode_options(options)
        with debug_timer(logger, "Markdown decode"):
            return decode_markdown(dump(file), is_standalone=options.is_standalone)

    @requires_dependencies("md", DEPS_MARKDOWN)
    def encode(self, node: Any, options: Optional[MarkdownEncodeOptions] = None) -> VFile:
        options = self._encode_options(options)
        with debug_timer(logger, "Markdown encode"):
            markdown = encode_markdown(node, options)
        return VFile(contents=markdown, media_type="text/markdown")


CODEC_METADATA = CodecMetadata(
    name="md",
    ext_names=["md", "markdown", "mkd"],
    media_types=["text/markdown", "text/x-markdown"],
    codec_class=MarkdownCodec,
    required_packages=DEPS_MARKDOWN,
    description="Markdown with YAML front matter, math and generic extensions",
)
