#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/pdf.py
"""PDF codec.

Encode-only: the tree is rendered to reportlab flowables (paragraphs with
reportlab's HTML-like inline markup, lists, tables, preformatted code) and
laid out on A4 pages with 2.54 cm margins by default.

The reportlab backend (the modules and the paragraph style sheets built
from them) is process-wide. It is created lazily, under a lock, by the first
encode and reused by every later one; :func:`shutdown` releases it and is
called once by the command line interface on exit.
"""

from __future__ import annotations

import io
import logging
import os
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Optional

from docodec.ast.nodes import (
    Article,
    CodeBlock,
    CodeChunk,
    Collection,
    Datatable,
    Figure,
    Heading,
    ImageObject,
    Include,
    List,
    ListItem,
    MathBlock,
    Paragraph,
    Person,
    QuoteBlock,
    Strong,
    Table,
    ThematicBreak,
    get_node_children,
)
from docodec.ast.utils import extract_text, is_block, wrap_inline_runs
from docodec.ast.visitors import NodeVisitor
from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.constants import DEPS_PDF_RENDER
from docodec.exceptions import RenderingError, UnsupportedOperationError
from docodec.options.base import BaseDecodeOptions
from docodec.options.pdf import PdfEncodeOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.vfile import VFile

if TYPE_CHECKING:
    from reportlab.lib.styles import StyleSheet1

logger = logging.getLogger(__name__)

_FONT_BOLD = {
    "Times-Roman": "Times-Bold",
    "Helvetica": "Helvetica-Bold",
    "Courier": "Courier-Bold",
}
_CODE_FONT = "Courier"


@dataclass
class PdfBackend:
    """Shared reportlab state: page sizes and style sheets by base font."""

    page_sizes: dict[str, tuple[float, float]]
    styles: dict[tuple[str, int], StyleSheet1] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def get_styles(self, font_name: str, font_size: int) -> StyleSheet1:
        """Style sheet for a base font, built on first use."""
        with self.lock:
            key = (font_name, font_size)
            if key not in self.styles:
                self.styles[key] = _create_styles(font_name, font_size)
            return self.styles[key]


_backend: Optional[PdfBackend] = None
_backend_lock = threading.Lock()


def get_backend() -> PdfBackend:
    """Return the process-wide backend, creating it on first use."""
    global _backend
    with _backend_lock:
        if _backend is None:
            from reportlab.lib.pagesizes import A4, LEGAL, LETTER

            logger.debug("Initialising PDF rendering backend")
            _backend = PdfBackend(page_sizes={"a4": A4, "letter": LETTER, "legal": LEGAL})
        return _backend


def shutdown() -> None:
    """Release the rendering backend. Safe to call when it was never created."""
    global _backend
    with _backend_lock:
        if _backend is not None:
            logger.debug("Shutting down PDF rendering backend")
            _backend = None


def _create_styles(font_name: str, font_size: int) -> StyleSheet1:
    from reportlab.lib import colors
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet

    styles = getSampleStyleSheet()
    bold = _FONT_BOLD.get(font_name, font_name + "-Bold")

    styles["Normal"].fontName = font_name
    styles["Normal"].fontSize = font_size
    styles["Normal"].leading = font_size * 1.2
    styles["Title"].fontName = bold

    for level in range(1, 7):
        size = font_size + (7 - level) * 2
        style_name = f"Heading{level}"
        if style_name in styles:
            style = styles[style_name]
            style.fontName = bold
            style.fontSize = size
            style.leading = size * 1.2
        else:
            styles.add(
                ParagraphStyle(name=style_name, parent=styles["Normal"], fontName=bold, fontSize=size, leading=size * 1.2)
            )

    styles.add(
        ParagraphStyle(
            name="Authors",
            parent=styles["Normal"],
            alignment=1,
            spaceAfter=12,
        )
    )
    styles.add(
        ParagraphStyle(
            name="BlockQuote",
            parent=styles["Normal"],
            leftIndent=20,
            rightIndent=20,
            textColor=colors.HexColor("#666666"),
        )
    )
    styles.add(
        ParagraphStyle(
            name="Caption",
            parent=styles["Normal"],
            fontSize=font_size - 1,
            leading=(font_size - 1) * 1.2,
            textColor=colors.HexColor("#444444"),
        )
    )
    # The sample sheet already has a "Code" style; adjust rather than add
    code = styles["Code"]
    code.fontName = _CODE_FONT
    code.fontSize = font_size - 1
    code.leading = (font_size - 1) * 1.2
    code.backColor = colors.HexColor("#F5F5F5")
    return styles


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


class PdfFlowableEncoder(NodeVisitor):
    """Encodes a tree to a list of reportlab flowables.

    Block ``visit_*`` methods return lists of flowables; inline ones return
    reportlab paragraph markup.
    """

    def __init__(self, styles: StyleSheet1):
        from reportlab import platypus

        self.styles = styles
        self.platypus = platypus

    def encode(self, node: Any) -> list[Any]:
        """Flowables for a node or a list of block content."""
        if isinstance(node, list):
            return self._blocks(node)
        if is_block(node):
            return self.visit(node)
        return self._blocks([node])

    def _blocks(self, nodes: list[Any], style: str = "Normal") -> list[Any]:
        flowables: list[Any] = []
        for node in wrap_inline_runs(nodes):
            if isinstance(node, Paragraph):
                flowables.extend(self._paragraph(node.content, style))
            else:
                flowables.extend(self.visit(node))
        return flowables

    def _paragraph(self, content: list[Any], style: str) -> list[Any]:
        markup = self._inline(content)
        if not markup.strip():
            return []
        return [self.platypus.Paragraph(markup, self.styles[style])]

    def _inline(self, nodes: Any) -> str:
        if not isinstance(nodes, list):
            nodes = [nodes]
        return "".join(self.visit(node) for node in nodes)

    # Blocks

    def visit_article(self, node: Article) -> list[Any]:
        flowables: list[Any] = []
        if node.title:
            flowables.extend(self._paragraph(node.title if isinstance(node.title, list) else [node.title], "Title"))
        names = [self._person_name(author) for author in node.authors or []]
        if names:
            flowables.append(self.platypus.Paragraph(_escape(", ".join(names)), self.styles["Authors"]))
        if node.description:
            description = node.description if isinstance(node.description, list) else [node.description]
            flowables.extend(self._blocks(description, "BlockQuote"))
        flowables.extend(self._blocks(node.content or []))
        return flowables

    def _person_name(self, author: Any) -> str:
        if isinstance(author, Person):
            if author.name:
                return author.name
            return " ".join((author.given_names or []) + (author.family_names or []))
        return extract_text(getattr(author, "name", None) or "")

    def visit_paragraph(self, node: Paragraph) -> list[Any]:
        return self._blocks([node])

    def visit_heading(self, node: Heading) -> list[Any]:
        return self._paragraph(node.content, f"Heading{min(max(node.depth, 1), 6)}")

    def visit_list(self, node: List) -> list[Any]:
        items = [self.platypus.ListItem(self.visit_list_item(item) or [self.platypus.Spacer(1, 0)]) for item in node.items]
        if node.order == "unordered":
            return [self.platypus.ListFlowable(items, bulletType="bullet", start="•")]
        return [self.platypus.ListFlowable(items, bulletType="1")]

    def visit_list_item(self, node: ListItem) -> list[Any]:
        blocks = wrap_inline_runs(node.content)
        if node.is_checked is not None:
            box = "[x] " if node.is_checked else "[ ] "
            if blocks and isinstance(blocks[0], Paragraph):
                blocks[0] = Paragraph([box, *blocks[0].content])
            else:
                blocks.insert(0, Paragraph([box]))
        return self._blocks(blocks)

    def _grid(self, rows: list[list[str]], header: bool) -> list[Any]:
        from reportlab.lib import colors

        if not rows:
            return []
        data = [[self.platypus.Paragraph(cell, self.styles["Normal"]) for cell in row] for row in rows]
        table = self.platypus.Table(data, repeatRows=1 if header else 0)
        commands = [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ]
        if header:
            commands.append(("BACKGROUND", (0, 0), (-1, 0), colors.HexColor("#EEEEEE")))
        table.setStyle(self.platypus.TableStyle(commands))
        return [table]

    def visit_table(self, node: Table) -> list[Any]:
        flowables: list[Any] = []
        if node.title:
            flowables.extend(self._paragraph(node.title if isinstance(node.title, list) else [node.title], "Caption"))
        rows = [[self._cell_markup(cell.content) for cell in row.cells] for row in node.rows]
        width = max((len(row) for row in rows), default=0)
        flowables.extend(self._grid([row + [""] * (width - len(row)) for row in rows], header=False))
        if node.caption:
            flowables.extend(self._blocks(node.caption, "Caption"))
        return flowables

    def _cell_markup(self, content: list[Any]) -> str:
        parts = [self._inline(child.content) if isinstance(child, Paragraph) else self.visit(child) for child in content]
        return "<br/>".join(part for part in parts if isinstance(part, str))

    def visit_datatable(self, node: Datatable) -> list[Any]:
        height = max((len(column.values) for column in node.columns), default=0)
        rows = [[_escape(column.name) for column in node.columns]]
        for index in range(height):
            rows.append(
                [_escape(extract_text(column.values[index])) if index < len(column.values) else "" for column in node.columns]
            )
        return self._grid(rows, header=True)

    def visit_code_block(self, node: CodeBlock) -> list[Any]:
        return [self.platypus.Preformatted(node.text, self.styles["Code"])]

    def visit_code_chunk(self, node: CodeChunk) -> list[Any]:
        flowables = [self.platypus.Preformatted(node.text, self.styles["Code"])]
        for output in node.outputs or []:
            if is_block(output):
                flowables.extend(self.visit(output))
            else:
                flowables.append(self.platypus.Preformatted(extract_text(output), self.styles["Normal"]))
        return flowables

    def visit_math_block(self, node: MathBlock) -> list[Any]:
        return [self.platypus.Preformatted(node.text, self.styles["Code"])]

    def visit_quote_block(self, node: QuoteBlock) -> list[Any]:
        return self._blocks(node.content, "BlockQuote")

    def visit_figure(self, node: Figure) -> list[Any]:
        flowables: list[Any] = []
        for item in node.content:
            if isinstance(item, ImageObject):
                flowables.extend(self._image(item))
            elif is_block(item):
                flowables.extend(self.visit(item))
            else:
                flowables.extend(self._paragraph([item], "Normal"))
        if node.label:
            flowables.extend(self._paragraph([Strong([node.label])], "Caption"))
        if node.caption:
            flowables.extend(self._blocks(node.caption, "Caption"))
        return flowables

    def _image(self, node: ImageObject) -> list[Any]:
        """Images are embedded from local files; others show their alt text."""
        from reportlab.lib.units import cm

        if node.content_url and os.path.isfile(node.content_url):
            image = self.platypus.Image(node.content_url)
            # Scale down to fit the frame width, keeping the aspect ratio
            max_width = 15 * cm
            if image.drawWidth > max_width:
                ratio = max_width / image.drawWidth
                image.drawWidth *= ratio
                image.drawHeight *= ratio
            return [image]
        logger.debug(f"Not embedding image {node.content_url!r}")
        return self._paragraph([node], "Caption")

    def visit_thematic_break(self, node: ThematicBreak) -> list[Any]:
        from reportlab.lib import colors

        return [self.platypus.HRFlowable(width="100%", color=colors.grey)]

    def visit_collection(self, node: Collection) -> list[Any]:
        return self._blocks(node.parts)

    def visit_include(self, node: Include) -> list[Any]:
        return self._blocks(node.content or [])

    # Inlines

    def visit_text(self, value: str) -> str:
        return _escape(value)

    def visit_null(self, value: None) -> str:
        return "null"

    def visit_boolean(self, value: bool) -> str:
        return "true" if value else "false"

    def visit_number(self, value: Any) -> str:
        return str(value)

    def visit_array(self, value: list) -> str:
        return _escape(extract_text(value, " "))

    def visit_object(self, value: dict) -> str:
        return ""

    def visit_emphasis(self, node: Any) -> str:
        return f"<i>{self._inline(node.content)}</i>"

    def visit_strong(self, node: Any) -> str:
        return f"<b>{self._inline(node.content)}</b>"

    def visit_delete(self, node: Any) -> str:
        return f"<strike>{self._inline(node.content)}</strike>"

    def visit_superscript(self, node: Any) -> str:
        return f"<super>{self._inline(node.content)}</super>"

    def visit_subscript(self, node: Any) -> str:
        return f"<sub>{self._inline(node.content)}</sub>"

    def visit_link(self, node: Any) -> str:
        href = _escape(node.target).replace('"', "&quot;")
        return f'<link href="{href}" color="blue">{self._inline(node.content)}</link>'

    def visit_cite(self, node: Any) -> str:
        if node.content:
            return self._inline(node.content)
        return f"[{_escape(node.target)}]"

    def visit_quote(self, node: Any) -> str:
        return f"“{self._inline(node.content)}”"

    def visit_code_fragment(self, node: Any) -> str:
        return f'<font name="{_CODE_FONT}">{_escape(node.text)}</font>'

    def visit_code_expression(self, node: Any) -> str:
        if node.output is not None:
            return self._inline(node.output)
        return f'<font name="{_CODE_FONT}">{_escape(node.text)}</font>'

    def visit_math_fragment(self, node: Any) -> str:
        return f"<i>{_escape(node.text)}</i>"

    def visit_image_object(self, node: ImageObject) -> str:
        return _escape(node.text or node.title or "")

    def visit_media_object(self, node: Any) -> str:
        return ""

    def generic_visit(self, node: Any) -> Any:
        logger.warning(f"Unhandled node type when rendering PDF: {type(node).__name__}")
        if is_block(node):
            return self._blocks(get_node_children(node))
        return _escape(extract_text(node))


class PdfCodec(BaseCodec):
    """Codec rendering trees to PDF with reportlab."""

    name = "pdf"
    encode_options_class = PdfEncodeOptions

    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        raise UnsupportedOperationError(self.name, "decode", "Parsing of PDF files is not supported")

    @requires_dependencies("pdf", DEPS_PDF_RENDER)
    def encode(self, node: Any, options: Optional[PdfEncodeOptions] = None) -> VFile:
        """Render a node to PDF bytes.

        Raises
        ------
        RenderingError
            If reportlab fails to lay out the document

        """
        from reportlab.lib.units import cm

        options = self._encode_options(options)
        backend = get_backend()
        styles = backend.get_styles(options.font_name, options.font_size)

        with debug_timer(logger, "PDF encode"):
            buffer = io.BytesIO()
            try:
                encoder = PdfFlowableEncoder(styles)
                flowables = encoder.encode(node) or [encoder.platypus.Spacer(1, 0)]
                self._template(buffer, backend, options, cm, node).build(flowables)
            except Exception as e:
                raise RenderingError(f"Failed to render PDF: {e!r}", rendering_stage="rendering", original_error=e) from e
        return VFile(contents=buffer.getvalue(), media_type="application/pdf")

    def _template(self, buffer: Any, backend: PdfBackend, options: PdfEncodeOptions, cm: float, node: Any) -> Any:
        from reportlab.platypus import SimpleDocTemplate

        kwargs: dict[str, Any] = {
            "pagesize": backend.page_sizes[options.page_size],
            "topMargin": options.margin_top * cm,
            "bottomMargin": options.margin_bottom * cm,
            "leftMargin": options.margin_left * cm,
            "rightMargin": options.margin_right * cm,
        }
        if isinstance(node, Article) and node.title:
            kwargs["title"] = extract_text(node.title)
        return SimpleDocTemplate(buffer, **kwargs)


CODEC_METADATA = CodecMetadata(
    name="pdf",
    ext_names=["pdf"],
    media_types=["application/pdf"],
    codec_class=PdfCodec,
    required_packages=DEPS_PDF_RENDER,
    can_decode=False,
    description="PDF documents (rendered with reportlab)",
)
