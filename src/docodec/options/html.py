#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/options/html.py
"""Options for the HTML codec."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from docodec.options.base import BaseEncodeOptions


@dataclass(frozen=True)
class HtmlEncodeOptions(BaseEncodeOptions):
    """Configuration options for encoding HTML.

    Parameters
    ----------
    title : str, optional
        Document ``<title>``. Defaults to the Article title.
    lang : str, default "en"
        Value of the ``lang`` attribute on ``<html>``

    """

    title: Optional[str] = field(
        default=None,
        metadata={"help": "Override the document <title>", "importance": "advanced"},
    )
    lang: str = field(
        default="en",
        metadata={"help": "Language code for the <html> element", "importance": "advanced"},
    )

    def __post_init__(self) -> None:
        """Validate the language code.

        Raises
        ------
        ValueError
            If ``lang`` is empty or contains whitespace

        """
        if not self.lang or any(c.isspace() for c in self.lang):
            raise ValueError(f"lang must be a non-empty language code, got {self.lang!r}")
