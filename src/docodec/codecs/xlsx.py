#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/xlsx.py
"""XLSX codec.

Reads the first worksheet of an Excel workbook with ``openpyxl``, keeping
formulas (the workbook is not opened ``data_only``), and maps it like the
CSV codec does. Encoding writes the first ``Datatable`` or ``Table`` of the
tree into a single-sheet workbook.
"""

from __future__ import annotations

import io
import logging
from datetime import date, datetime, time
from typing import Any, Optional

from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.constants import DEFAULT_SHEET_NAME, DEPS_XLSX
from docodec.exceptions import MalformedFileError
from docodec.options.csv import CsvEncodeOptions, CsvOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.utils.spreadsheet import Grid, find_tabular, format_cell_value, grid_to_node, node_to_grid
from docodec.vfile import VFile

logger = logging.getLogger(__name__)

# Excel limits worksheet titles to 31 characters
_MAX_SHEET_TITLE = 31


def _cell_value(value: Any) -> Any:
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return value


def _sheet_rows(sheet: Any) -> Grid:
    return [[_cell_value(value) for value in row] for row in sheet.iter_rows(values_only=True)]


def _writable(value: Any) -> Any:
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return format_cell_value(value)


class XlsxCodec(BaseCodec):
    """Codec for Excel workbooks."""

    name = "xlsx"
    decode_options_class = CsvOptions
    encode_options_class = CsvEncodeOptions

    @requires_dependencies("xlsx", DEPS_XLSX)
    def decode(self, file: VFile, options: Optional[CsvOptions] = None) -> Any:
        """Decode the first worksheet of a workbook.

        Raises
        ------
        MalformedFileError
            If the contents are not a readable workbook

        """
        import openpyxl

        options = self._decode_options(options)
        with debug_timer(logger, "XLSX decode"):
            try:
                workbook = openpyxl.load_workbook(io.BytesIO(file.as_bytes()), data_only=False)
            except Exception as e:
                raise MalformedFileError(
                    f"Failed to read XLSX workbook: {e!r}", file_path=file.path, original_error=e
                ) from e
            try:
                sheet = workbook.worksheets[0]
                logger.debug(f"Reading worksheet {sheet.title!r}")
                rows = _sheet_rows(sheet)
            finally:
                workbook.close()
        name = sheet.title if options.sheet_name == DEFAULT_SHEET_NAME else options.sheet_name
        return grid_to_node(rows, name=name)

    @requires_dependencies("xlsx", DEPS_XLSX)
    def encode(self, node: Any, options: Optional[CsvEncodeOptions] = None) -> VFile:
        import openpyxl

        options = self._encode_options(options)
        with debug_timer(logger, "XLSX encode"):
            rows = node_to_grid(node)
            workbook = openpyxl.Workbook()
            sheet = workbook.active
            title = options.sheet_name or getattr(find_tabular(node), "name", None) or DEFAULT_SHEET_NAME
            sheet.title = str(title)[:_MAX_SHEET_TITLE]
            for row in rows:
                sheet.append([_writable(value) for value in row])
            buffer = io.BytesIO()
            workbook.save(buffer)
        return VFile(
            contents=buffer.getvalue(),
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )


CODEC_METADATA = CodecMetadata(
    name="xlsx",
    ext_names=["xlsx"],
    media_types=["application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"],
    codec_class=XlsxCodec,
    required_packages=DEPS_XLSX,
    description="Excel workbooks (first worksheet)",
)
