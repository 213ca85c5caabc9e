#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/json.py
"""JSON codec.

Reads and writes the node model's own JSON serialization: every node is an
object with a ``"type"`` key and camelCase properties (see
:mod:`docodec.ast.serialization`). Objects without a known ``"type"`` decode
to plain dicts, so any JSON value decodes to something.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from docodec.ast.serialization import ast_to_json, dict_to_ast
from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.exceptions import MalformedInputError
from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions
from docodec.utils.decorators import debug_timer
from docodec.vfile import VFile, dump, is_path

logger = logging.getLogger(__name__)


class JsonCodec(BaseCodec):
    """Codec for the JSON serialization of document trees."""

    name = "json"

    def sniff(self, content: str) -> bool:
        if is_path(content):
            return False
        stripped = content.lstrip()
        return stripped.startswith("{") or stripped.startswith("[")

    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        self._decode_options(options)
        text = dump(file)
        with debug_timer(logger, "JSON decode"):
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise MalformedInputError(f"Invalid JSON: {e}", snippet=text[:200], original_error=e) from e
            try:
                return dict_to_ast(data)
            except (TypeError, ValueError) as e:
                raise MalformedInputError(f"JSON does not describe a valid node: {e}", original_error=e) from e

    def encode(self, node: Any, options: Optional[BaseEncodeOptions] = None) -> VFile:
        self._encode_options(options)
        return VFile(contents=ast_to_json(node, indent=2), media_type="application/json")


CODEC_METADATA = CodecMetadata(
    name="json",
    ext_names=["json"],
    media_types=["application/json"],
    codec_class=JsonCodec,
    description="JSON serialization of document trees",
)
