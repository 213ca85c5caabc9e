#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/cli/builder.py
"""Argument parser construction and exit codes for the docodec CLI."""

from __future__ import annotations

import argparse

from docodec.cli.custom_actions import (
    DynamicVersionAction,
    TrackingBooleanOptionalAction,
    TrackingStoreAction,
    TrackingStoreTrueAction,
)
from docodec.exceptions import (
    DependencyError,
    FileError,
    FormatError,
    ParsingError,
    RenderingError,
    SecurityError,
    ValidationError,
)

EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_DEPENDENCY_ERROR = 2
EXIT_VALIDATION_ERROR = 3
EXIT_FILE_ERROR = 4
EXIT_FORMAT_ERROR = 5
EXIT_PARSING_ERROR = 6
EXIT_RENDERING_ERROR = 7
EXIT_SECURITY_ERROR = 8

_EPILOG = """\
examples:
  docodec convert article.md article.jats
  docodec convert article.jats --to html
  docodec convert 10.1371/journal.pone.0012345 paper.md
  docodec convert data.csv data.xlsx --no-standalone
  docodec formats --rich

Options can also be given as DOCODEC_<OPTION> environment variables
(e.g. DOCODEC_LOG_LEVEL=DEBUG) or in a .docodec.toml configuration file.
"""


def get_exit_code_for_exception(exception: Exception) -> int:
    """Map an exception to an appropriate CLI exit code.

    Parameters
    ----------
    exception : Exception
        The exception to map to an exit code

    Returns
    -------
    int
        The exit code for the exception type

    """
    if isinstance(exception, SecurityError):
        return EXIT_SECURITY_ERROR
    if isinstance(exception, (DependencyError, ImportError)):
        return EXIT_DEPENDENCY_ERROR
    if isinstance(exception, ValidationError):
        return EXIT_VALIDATION_ERROR
    if isinstance(exception, FileError):
        return EXIT_FILE_ERROR
    if isinstance(exception, FormatError):
        return EXIT_FORMAT_ERROR
    if isinstance(exception, ParsingError):
        return EXIT_PARSING_ERROR
    if isinstance(exception, RenderingError):
        return EXIT_RENDERING_ERROR
    return EXIT_ERROR


def _version() -> str:
    from docodec import __version__

    return f"docodec {__version__}"


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Logging and output arguments shared by every command."""
    group = parser.add_argument_group("logging and output")
    group.add_argument(
        "--log-level",
        dest="log_level",
        action=TrackingStoreAction,
        default="WARNING",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: WARNING)",
    )
    group.add_argument("--log-file", dest="log_file", action=TrackingStoreAction, help="Also write logs to this file")
    group.add_argument(
        "--verbose", "-v", dest="verbose", action=TrackingStoreTrueAction, help="Debug logging (same as DEBUG level)"
    )
    group.add_argument(
        "--trace", dest="trace", action=TrackingStoreTrueAction, help="Debug logging with timestamps and logger names"
    )
    group.add_argument("--rich", dest="rich", action=TrackingStoreTrueAction, help="Use Rich formatting on terminals")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with ``convert`` and ``formats`` commands."""
    parser = argparse.ArgumentParser(
        prog="docodec",
        description="Convert documents between formats via a common document model.",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", "-V", action=DynamicVersionAction, version_callback=_version)

    subparsers = parser.add_subparsers(dest="command", metavar="<command>")

    convert = subparsers.add_parser(
        "convert",
        help="Convert a document from one format to another",
        description="Decode INPUT and encode it to OUTPUT (or standard output).",
    )
    convert.add_argument("input", help="File path, URL, DOI, raw content, or - for standard input")
    convert.add_argument("output", nargs="?", default=None, help="Output file path, or - for standard output")
    convert.add_argument(
        "--to", dest="to", action=TrackingStoreAction, help="Format to convert to (extension name or media type)"
    )
    convert.add_argument(
        "--from", dest="from_", action=TrackingStoreAction, help="Format to convert from (extension name or media type)"
    )
    convert.add_argument(
        "--standalone",
        dest="standalone",
        action=TrackingBooleanOptionalAction,
        help="Decode and encode complete documents rather than fragments",
    )
    convert.add_argument("--config", dest="config", action=TrackingStoreAction, help="Configuration file to use")
    _add_common_arguments(convert)

    formats = subparsers.add_parser("formats", help="List available formats")
    _add_common_arguments(formats)

    return parser
