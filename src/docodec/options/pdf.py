#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/options/pdf.py
"""Options for the PDF codec."""

from __future__ import annotations

from dataclasses import dataclass, field

from docodec.constants import (
    DEFAULT_PDF_FONT_NAME,
    DEFAULT_PDF_FONT_SIZE,
    DEFAULT_PDF_MARGIN_CM,
    DEFAULT_PDF_PAGE_SIZE,
    PageSize,
)
from docodec.options.base import BaseEncodeOptions

_PAGE_SIZES = ("a4", "letter", "legal")


@dataclass(frozen=True)
class PdfEncodeOptions(BaseEncodeOptions):
    """Configuration options for rendering PDF with reportlab.

    Parameters
    ----------
    page_size : {"a4", "letter", "legal"}, default "a4"
        Page size
    margin_top, margin_bottom, margin_left, margin_right : float, default 2.54
        Page margins in centimetres
    font_name : str, default "Helvetica"
        Base font for body text
    font_size : int, default 11
        Base font size in points

    """

    page_size: PageSize = field(
        default=DEFAULT_PDF_PAGE_SIZE,
        metadata={"help": "Page size", "choices": list(_PAGE_SIZES), "importance": "core"},
    )
    margin_top: float = field(
        default=DEFAULT_PDF_MARGIN_CM, metadata={"help": "Top margin in cm", "type": float, "importance": "advanced"}
    )
    margin_bottom: float = field(
        default=DEFAULT_PDF_MARGIN_CM,
        metadata={"help": "Bottom margin in cm", "type": float, "importance": "advanced"},
    )
    margin_left: float = field(
        default=DEFAULT_PDF_MARGIN_CM, metadata={"help": "Left margin in cm", "type": float, "importance": "advanced"}
    )
    margin_right: float = field(
        default=DEFAULT_PDF_MARGIN_CM,
        metadata={"help": "Right margin in cm", "type": float, "importance": "advanced"},
    )
    font_name: str = field(
        default=DEFAULT_PDF_FONT_NAME, metadata={"help": "Base font name", "importance": "advanced"}
    )
    font_size: int = field(
        default=DEFAULT_PDF_FONT_SIZE,
        metadata={"help": "Base font size in points", "type": int, "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate page size, margins and font size.

        Raises
        ------
        ValueError
            If any field value is outside its valid range.

        """
        if self.page_size not in _PAGE_SIZES:
            raise ValueError(f"page_size must be one of {_PAGE_SIZES}, got {self.page_size!r}")
        for name in ("margin_top", "margin_bottom", "margin_left", "margin_right"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.font_size <= 0:
            raise ValueError(f"font_size must be positive, got {self.font_size}")
