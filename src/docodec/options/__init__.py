#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/options/__init__.py
"""Frozen dataclass options for decoding and encoding."""

from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions, CloneFrozenMixin
from docodec.options.csv import CsvEncodeOptions, CsvOptions
from docodec.options.html import HtmlEncodeOptions
from docodec.options.markdown import MarkdownEncodeOptions
from docodec.options.network import NetworkOptions, RemoteDecodeOptions
from docodec.options.pdf import PdfEncodeOptions

__all__ = [
    "BaseDecodeOptions",
    "BaseEncodeOptions",
    "CloneFrozenMixin",
    "CsvEncodeOptions",
    "CsvOptions",
    "HtmlEncodeOptions",
    "MarkdownEncodeOptions",
    "NetworkOptions",
    "PdfEncodeOptions",
    "RemoteDecodeOptions",
]
