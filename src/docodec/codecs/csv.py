#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/csv.py
"""CSV codec.

Delimited text is read with the standard library ``csv`` module into a grid
of typed values (see :func:`docodec.utils.spreadsheet.parse_cell_value`) and
mapped to a ``Datatable``, or to a ``Table`` of named cells when any cell is a
formula. Encoding writes the first ``Datatable`` or ``Table`` of the tree.
"""

from __future__ import annotations

import csv
import io
import logging
from typing import Any, Optional

from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.exceptions import MalformedInputError
from docodec.options.csv import CsvEncodeOptions, CsvOptions
from docodec.utils.decorators import debug_timer
from docodec.utils.spreadsheet import format_cell_value, grid_to_node, is_formula, node_to_grid, parse_cell_value
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)


def decode_csv(text: str, options: Optional[CsvOptions] = None) -> Any:
    """Decode delimited text to a ``Datatable`` or ``Table``."""
    options = options or CsvOptions()
    # Strip a byte order mark left by spreadsheet exports
    text = text.lstrip("\ufeff")
    try:
        reader = csv.reader(io.StringIO(text, newline=""), delimiter=options.delimiter)
        rows = [[value if is_formula(value) else parse_cell_value(value) for value in row] for row in reader]
    except csv.Error as e:
        raise MalformedInputError(f"Invalid CSV: {e}", snippet=text[:200], original_error=e) from e
    logger.debug(f"Read {len(rows)} CSV rows")
    return grid_to_node(rows, name=options.sheet_name)


def encode_csv(node: Any, options: Optional[CsvEncodeOptions] = None) -> str:
    """Encode the first ``Datatable`` or ``Table`` of ``node`` as delimited text."""
    options = options or CsvEncodeOptions()
    output = io.StringIO()
    writer = csv.writer(output, delimiter=options.delimiter, lineterminator="\n")
    for row in node_to_grid(node):
        writer.writerow([format_cell_value(value) for value in row])
    return output.getvalue()


class CsvCodec(BaseCodec):
    """Codec for comma (or otherwise) delimited values."""

    name = "csv"
    decode_options_class = CsvOptions
    encode_options_class = CsvEncodeOptions

    def decode(self, file: VFile, options: Optional[CsvOptions] = None) -> Any:
        options = self._decode_options(options)
        with debug_timer(logger, "CSV decode"):
            return decode_csv(dump(file), options)

    def encode(self, node: Any, options: Optional[CsvEncodeOptions] = None) -> VFile:
        options = self._encode_options(options)
        with debug_timer(logger, "CSV encode"):
            contents = encode_csv(node, options)
        return VFile(contents=contents, media_type="text/csv")


CODEC_METADATA = CodecMetadata(
    name="csv",
    ext_names=["csv"],
    media_types=["text/csv"],
    codec_class=CsvCodec,
    description="Comma separated values",
)
