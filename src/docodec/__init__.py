"""docodec - A Python library for converting documents through a common node model.

docodec decodes documents in many formats into one tree of document nodes
(articles, paragraphs, tables, figures, code chunks, math and so on) and
encodes that tree back out to any format with an encoder. Conversion between
two formats is a decode followed by an encode.

Supported formats:
- Markdown, with generic extension syntax for code chunks, figures and more
- JATS XML, including PLoS articles fetched by DOI
- HTML, plain text, JSON and YAML
- Jupyter notebooks and R Markdown style documents
- CSV and Excel spreadsheets
- PDF (encode only) and DOIs (decode only)

Examples
--------
Basic usage:

    >>> from docodec import convert, load, dump
    >>> article = load("# Title\\n\\nSome *text*.", "md")
    >>> article.title
    'Title'
    >>> jats = dump(article, "jats")

Convert files:

    >>> convert("article.md", "article.html")

"""

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/__init__.py
import sys

if sys.version_info < (3, 10):
    raise ImportError(
        "docodec requires Python 3.10 or later. "
        f"You are using Python {sys.version_info.major}.{sys.version_info.minor}."
    )

__version__ = "0.1.0"

from docodec.api import convert, decode, dump, encode, load, read, write
from docodec.codec_registry import handled, match, registry
from docodec.exceptions import (
    DependencyError,
    DocodecError,
    FormatError,
    MalformedInputError,
    NoCodecMatchError,
    ParsingError,
    UnsupportedOperationError,
    ValidationError,
)
from docodec.options import BaseDecodeOptions, BaseEncodeOptions
from docodec.vfile import VFile

__all__ = [
    "__version__",
    "convert",
    "decode",
    "dump",
    "encode",
    "load",
    "read",
    "write",
    "handled",
    "match",
    "registry",
    "VFile",
    "BaseDecodeOptions",
    "BaseEncodeOptions",
    "DocodecError",
    "DependencyError",
    "FormatError",
    "MalformedInputError",
    "NoCodecMatchError",
    "ParsingError",
    "UnsupportedOperationError",
    "ValidationError",
]
