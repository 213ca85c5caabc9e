"""Codec metadata definitions for the docodec library.

This module defines the dataclass that describes a codec's matching keys,
requirements and registration information for the codec registry.
"""

#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codec_metadata.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union


@dataclass
class CodecMetadata:
    """Metadata describing a codec's matching keys and requirements.

    Parameters
    ----------
    name : str
        Unique codec name; also its module name under ``docodec.codecs`` for
        built-in codecs (e.g. ``"md"``, ``"jats"``)
    ext_names : list[str]
        Lower-case extension names without the dot (e.g. ``["md", "markdown"]``)
    media_types : list[str]
        Media types handled by the codec
    file_names : list[str]
        Exact file names handled by the codec (e.g. ``["README"]``)
    codec_class : str or type, optional
        Codec class, or its name in ``docodec.codecs.{name}``, or a fully
        qualified ``"package.module.Class"`` name
    required_packages : list[tuple[str, str, str]]
        Third-party packages as (install_name, import_name, version_spec) tuples
    can_decode, can_encode : bool
        Which directions the codec supports
    description : str
        Human-readable description of the codec
    priority : int
        Registered codecs with a positive priority are matched before the
        built-in codecs, highest first; others are matched after them

    """

    name: str
    ext_names: list[str] = field(default_factory=list)
    media_types: list[str] = field(default_factory=list)
    file_names: list[str] = field(default_factory=list)
    codec_class: Optional[Union[str, type]] = None
    required_packages: list[tuple[str, str, str]] = field(default_factory=list)
    can_decode: bool = True
    can_encode: bool = True
    description: str = ""
    priority: int = 0

    def matches(self, file_name: Optional[str], ext_name: Optional[str], media_type: Optional[str]) -> bool:
        """Whether any of the path-derived keys match this codec."""
        if file_name and file_name in self.file_names:
            return True
        if ext_name and ext_name in self.ext_names:
            return True
        return bool(media_type and media_type in self.media_types)

    def get_install_command(self) -> str:
        """Generate a pip install command for the required packages."""
        if not self.required_packages:
            return ""
        packages = [
            f'"{install_name}{version_spec}"' if version_spec else install_name
            for install_name, _import_name, version_spec in self.required_packages
        ]
        return "pip install " + " ".join(packages)

    def get_directions(self) -> str:
        """Return ``"decode/encode"``, ``"decode"`` or ``"encode"``."""
        directions = [d for d, ok in (("decode", self.can_decode), ("encode", self.can_encode)) if ok]
        return "/".join(directions) or "none"
