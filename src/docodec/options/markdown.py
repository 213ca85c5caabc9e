#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/options/markdown.py
"""Options for the Markdown and XMarkdown codecs."""

from __future__ import annotations

from dataclasses import dataclass, field

from docodec.options.base import BaseEncodeOptions


@dataclass(frozen=True)
class MarkdownEncodeOptions(BaseEncodeOptions):
    """Configuration options for encoding Markdown.

    Parameters
    ----------
    front_matter : bool, default True
        Emit Article metadata as a YAML front matter block. Ignored when
        ``is_standalone`` is False.

    """

    front_matter: bool = field(
        default=True,
        metadata={"help": "Emit article metadata as YAML front matter", "importance": "core"},
    )
