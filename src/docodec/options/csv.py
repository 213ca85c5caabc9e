#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/options/csv.py
"""Configuration options for the CSV and XLSX codecs."""

from __future__ import annotations

from dataclasses import dataclass, field

from docodec.constants import DEFAULT_CSV_DELIMITER, DEFAULT_SHEET_NAME
from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions


@dataclass(frozen=True)
class CsvOptions(BaseDecodeOptions):
    r"""Configuration options for decoding delimited and spreadsheet data.

    Parameters
    ----------
    delimiter : str, default ","
        Field delimiter (e.g., ',', '\\t', ';'). Used by the CSV codec only.
    sheet_name : str, default "Sheet1"
        Name given to the decoded ``Datatable``

    """

    delimiter: str = field(
        default=DEFAULT_CSV_DELIMITER,
        metadata={"help": "Field delimiter character", "importance": "core"},
    )
    sheet_name: str = field(
        default=DEFAULT_SHEET_NAME,
        metadata={"help": "Name of the decoded datatable", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate the delimiter.

        Raises
        ------
        ValueError
            If the delimiter is not a single character

        """
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")


@dataclass(frozen=True)
class CsvEncodeOptions(BaseEncodeOptions):
    r"""Configuration options for encoding delimited and spreadsheet data.

    Parameters
    ----------
    delimiter : str, default ","
        Field delimiter used by the CSV codec
    sheet_name : str, optional
        Worksheet title used by the XLSX codec; defaults to the Datatable name

    """

    delimiter: str = field(
        default=DEFAULT_CSV_DELIMITER,
        metadata={"help": "Field delimiter character", "importance": "core"},
    )
    sheet_name: str | None = field(
        default=None,
        metadata={"help": "Worksheet title for spreadsheet output", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate the delimiter.

        Raises
        ------
        ValueError
            If the delimiter is not a single character

        """
        if len(self.delimiter) != 1:
            raise ValueError(f"delimiter must be a single character, got {self.delimiter!r}")
