#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/yaml.py
"""YAML codec.

The YAML rendition of the JSON serialization: the same ``"type"``-tagged
mappings with camelCase keys, loaded with ``yaml.safe_load`` and dumped
block-style with key order preserved.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from docodec.ast.serialization import ast_to_dict, dict_to_ast
from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.constants import DEPS_YAML
from docodec.exceptions import MalformedInputError
from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)


class YamlCodec(BaseCodec):
    """Codec for the YAML serialization of document trees."""

    name = "yaml"

    @requires_dependencies("yaml", DEPS_YAML)
    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        import yaml

        self._decode_options(options)
        with debug_timer(logger, "YAML decode"):
            try:
                data = yaml.safe_load(dump(file))
            except yaml.YAMLError as e:
                raise MalformedInputError(f"Invalid YAML: {e}", original_error=e) from e
            try:
                return dict_to_ast(data)
            except (TypeError, ValueError) as e:
                raise MalformedInputError(f"YAML does not describe a valid node: {e}", original_error=e) from e

    @requires_dependencies("yaml", DEPS_YAML)
    def encode(self, node: Any, options: Optional[BaseEncodeOptions] = None) -> VFile:
        import yaml

        self._encode_options(options)
        contents = yaml.safe_dump(ast_to_dict(node), default_flow_style=False, allow_unicode=True, sort_keys=False)
        return VFile(contents=contents, media_type="text/yaml")


CODEC_METADATA = CodecMetadata(
    name="yaml",
    ext_names=["yaml", "yml"],
    media_types=["text/yaml", "application/x-yaml", "text/x-yaml"],
    codec_class=YamlCodec,
    required_packages=DEPS_YAML,
    description="YAML serialization of document trees",
)
