#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/txt.py
"""Plain text codec.

Decoding returns the content as a single string. Encoding writes the text of
the tree: block nodes are separated by blank lines, list items and table rows
by newlines, and everything else contributes its plain text.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from docodec.ast.nodes import Article, Collection, Datatable, Heading, List, Table
from docodec.ast.utils import extract_text, is_block
from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)


def _block_text(node: Any) -> str:
    if isinstance(node, Article):
        parts = [extract_text(node.title)] if node.title else []
        parts.extend(_block_text(child) for child in node.content or [])
        return "\n\n".join(part for part in parts if part)
    if isinstance(node, Collection):
        return "\n\n".join(_block_text(part) for part in node.parts)
    if isinstance(node, List):
        return "\n".join(_block_text(item).replace("\n\n", "\n") for item in node.items)
    if isinstance(node, Table):
        return "\n".join("\t".join(extract_text(cell.content) for cell in row.cells) for row in node.rows)
    if isinstance(node, Datatable):
        lines = ["\t".join(column.name for column in node.columns)]
        height = max((len(column.values) for column in node.columns), default=0)
        for index in range(height):
            lines.append(
                "\t".join(
                    extract_text(column.values[index]) if index < len(column.values) else ""
                    for column in node.columns
                )
            )
        return "\n".join(lines)
    if isinstance(node, Heading):
        return extract_text(node.content)
    if isinstance(node, list):
        return "\n\n".join(_block_text(child) for child in node)
    content = getattr(node, "content", None)
    if isinstance(content, list) and any(is_block(child) for child in content):
        return "\n\n".join(_block_text(child) for child in content)
    return extract_text(node)


def encode_text(node: Any) -> str:
    """Return the plain text of a node or a list of nodes."""
    return _block_text(node)


class TxtCodec(BaseCodec):
    """Codec for plain text."""

    name = "txt"

    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        self._decode_options(options)
        return dump(file)

    def encode(self, node: Any, options: Optional[BaseEncodeOptions] = None) -> VFile:
        self._encode_options(options)
        return VFile(contents=encode_text(node), media_type="text/plain")


CODEC_METADATA = CodecMetadata(
    name="txt",
    ext_names=["txt", "text"],
    media_types=["text/plain"],
    codec_class=TxtCodec,
    description="Plain text",
)
