#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/cli/output.py
"""Utility functions for CLI output."""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from typing import Optional, TextIO

from docodec.codec_metadata import CodecMetadata
from docodec.utils.packages import check_version_requirement


@dataclass
class CodecStatus:
    """Availability of a codec for the ``formats`` listing."""

    metadata: CodecMetadata
    missing_packages: list[str]

    @property
    def available(self) -> bool:
        return not self.missing_packages


def get_codec_status(metadata: CodecMetadata) -> CodecStatus:
    """Check which of a codec's required packages are missing or too old."""
    missing = []
    for install_name, _import_name, version_spec in metadata.required_packages:
        ok, _installed = check_version_requirement(install_name, version_spec)
        if not ok:
            missing.append(f"{install_name}{version_spec}")
    return CodecStatus(metadata=metadata, missing_packages=missing)


def should_use_rich_output(args: argparse.Namespace, stream: Optional[TextIO] = None) -> bool:
    """Use Rich when ``--rich`` is given and the output stream is a terminal."""
    if not getattr(args, "rich", False):
        return False
    target = stream or sys.stdout
    isatty = getattr(target, "isatty", None)
    return bool(callable(isatty) and isatty())


def print_formats(statuses: list[CodecStatus], use_rich: bool = False) -> None:
    """Print the codec listing, as a Rich table or plain text."""
    if use_rich:
        from rich.console import Console
        from rich.table import Table

        table = Table(title="docodec formats")
        table.add_column("Codec", style="cyan", no_wrap=True)
        table.add_column("Extensions")
        table.add_column("Directions")
        table.add_column("Status")
        table.add_column("Description")
        for status in statuses:
            metadata = status.metadata
            if status.available:
                state = "[green]available[/green]"
            else:
                state = f"[red]missing {', '.join(status.missing_packages)}[/red]"
            table.add_row(
                metadata.name,
                ", ".join(metadata.ext_names) or "-",
                metadata.get_directions(),
                state,
                metadata.description,
            )
        Console().print(table)
        return

    for status in statuses:
        metadata = status.metadata
        state = "" if status.available else f"  (missing: {', '.join(status.missing_packages)})"
        extensions = ", ".join(metadata.ext_names) or "-"
        print(f"{metadata.name:<6} {metadata.get_directions():<14} {extensions:<20} {metadata.description}{state}")


def print_error(message: str, use_rich: bool = False) -> None:
    """Print an error message to standard error."""
    if use_rich:
        from rich.console import Console

        Console(stderr=True).print(f"[bold red]Error:[/bold red] {message}", highlight=False)
    else:
        print(f"Error: {message}", file=sys.stderr)
