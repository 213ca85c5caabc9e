#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/base.py
"""Base class for codecs.

A codec converts between one external format and the document tree:
``decode`` turns a ``VFile`` into a node and ``encode`` turns a node into a
``VFile``. Codecs that only work in one direction leave the other method
unimplemented, which raises ``UnsupportedOperationError``.

"""

from __future__ import annotations

import logging
from abc import ABC
from typing import Any, Optional

from docodec.exceptions import InvalidOptionsError, UnsupportedOperationError
from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions
from docodec.vfile import VFile

logger = logging.getLogger(__name__)


class BaseCodec(ABC):
    """Base class for all codecs.

    Attributes
    ----------
    name : str
        Codec name, as registered
    decode_options_class : type
        Options class accepted by ``decode``
    encode_options_class : type
        Options class accepted by ``encode``

    Examples
    --------
    A codec for a one-line format:

        >>> class ShoutCodec(BaseCodec):
        ...     name = "shout"
        ...
        ...     def decode(self, file, options=None):
        ...         return vfile.dump(file).lower()
        ...
        ...     def encode(self, node, options=None):
        ...         return vfile.load(extract_text(node).upper())

    """

    name: str = "base"
    decode_options_class: type = BaseDecodeOptions
    encode_options_class: type = BaseEncodeOptions

    def sniff(self, content: str) -> bool:
        """Whether ``content`` (raw content or a path) is in this codec's format.

        The default never claims content; codecs with a recognisable
        signature override it.
        """
        return False

    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        """Decode a virtual file to a node.

        Raises
        ------
        UnsupportedOperationError
            Unless overridden by the codec

        """
        raise UnsupportedOperationError(self.name, "decode")

    def encode(self, node: Any, options: Optional[BaseEncodeOptions] = None) -> VFile:
        """Encode a node to a virtual file.

        Raises
        ------
        UnsupportedOperationError
            Unless overridden by the codec

        """
        raise UnsupportedOperationError(self.name, "encode")

    def _decode_options(self, options: Optional[BaseDecodeOptions]) -> Any:
        """Validate decode options, returning defaults when None."""
        if options is None:
            return self.decode_options_class()
        if not isinstance(options, self.decode_options_class):
            raise InvalidOptionsError(
                codec_name=self.name, expected_type=self.decode_options_class, received_type=type(options)
            )
        return options

    def _encode_options(self, options: Optional[BaseEncodeOptions]) -> Any:
        """Validate encode options, returning defaults when None."""
        if options is None:
            return self.encode_options_class()
        if not isinstance(options, self.encode_options_class):
            raise InvalidOptionsError(
                codec_name=self.name, expected_type=self.encode_options_class, received_type=type(options)
            )
        return options

    def coerce_decode_options(self, options: Optional[BaseDecodeOptions]) -> Any:
        """Adapt options meant for another codec to this codec's options class.

        Used when one codec delegates to another (HTTP to HTML, IPYNB to
        Markdown). Shared fields such as ``is_standalone`` are carried over.
        """
        if options is None or isinstance(options, self.decode_options_class):
            return options
        return self.decode_options_class(is_standalone=options.is_standalone)

    def coerce_encode_options(self, options: Optional[BaseEncodeOptions]) -> Any:
        """Adapt generic encode options to this codec's options class."""
        if options is None or isinstance(options, self.encode_options_class):
            return options
        return self.encode_options_class(is_standalone=options.is_standalone)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
