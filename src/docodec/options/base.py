"""Base classes for decode and encode options.

This module defines the foundation classes for all codec-specific options
used throughout the docodec conversion pipeline.
"""

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/options/base.py

from __future__ import annotations

import sys
from dataclasses import dataclass, field, replace
from typing import Any

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self


@dataclass(frozen=True)
class CloneFrozenMixin:
    """Mixin providing frozen dataclass cloning capabilities."""

    def create_updated(self, **kwargs: Any) -> Self:
        """Create a new instance with updated field values.

        Parameters
        ----------
        **kwargs : Any
            Field names and their new values

        Returns
        -------
        Self
            New instance with specified fields updated

        """
        return replace(self, **kwargs)


@dataclass(frozen=True)
class BaseDecodeOptions(CloneFrozenMixin):
    """Base class for all decode options.

    Parameters
    ----------
    is_standalone : bool, default True
        Decode a whole document into an ``Article``. When False, codecs that
        support fragments return the decoded nodes without a wrapper.

    """

    is_standalone: bool = field(
        default=True,
        metadata={"help": "Decode a complete document rather than a fragment", "importance": "core"},
    )


@dataclass(frozen=True)
class BaseEncodeOptions(CloneFrozenMixin):
    """Base class for all encode options.

    Parameters
    ----------
    is_standalone : bool, default True
        Encode a complete document (front matter, ``<!DOCTYPE html>``
        wrapper and so on) rather than a fragment.

    """

    is_standalone: bool = field(
        default=True,
        metadata={
            "help": "Produce a complete document rather than a fragment",
            "cli_name": "standalone",
            "importance": "core",
        },
    )
