#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/utils/packages.py
"""Helpers for inspecting installed distributions."""

from __future__ import annotations

from importlib import metadata
from typing import Optional, Tuple

from packaging import version
from packaging.specifiers import InvalidSpecifier, SpecifierSet


def get_package_version(package_name: str) -> Optional[str]:
    """Return the installed version of a distribution, or None.

    Parameters
    ----------
    package_name : str
        Distribution name as used by pip (``beautifulsoup4``, not ``bs4``)

    Returns
    -------
    str or None
        Version string if the distribution is installed

    """
    try:
        return metadata.version(package_name)
    except metadata.PackageNotFoundError:
        return None


def check_version_requirement(package_name: str, version_spec: str) -> Tuple[bool, Optional[str]]:
    """Check whether an installed distribution satisfies a version specifier.

    Parameters
    ----------
    package_name : str
        Distribution name
    version_spec : str
        PEP 440 specifier such as ``">=3.0.0"``; an empty string matches any version

    Returns
    -------
    tuple
        (meets_requirement, installed_version)

    """
    installed_version = get_package_version(package_name)
    if not installed_version:
        return False, None
    if not version_spec:
        return True, installed_version

    try:
        spec = SpecifierSet(version_spec)
    except InvalidSpecifier:
        return False, installed_version
    return version.parse(installed_version) in spec, installed_version
