#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/cli/__init__.py
"""Command-line interface for docodec.

Environment Variable Support
----------------------------
Every option takes its default from a ``DOCODEC_<OPTION>`` environment
variable, with the option name upper-cased and hyphens replaced by
underscores. Command-line arguments always win over environment variables,
which win over configuration files.

Examples
--------
Convert Markdown to JATS::

    $ docodec convert article.md article.jats

Print HTML to standard output::

    $ docodec convert article.jats --to html

Decode a DOI::

    $ docodec convert 10.1371/journal.pone.0012345 paper.md

Use environment variables for defaults::

    $ export DOCODEC_LOG_LEVEL=INFO
    $ export DOCODEC_STANDALONE=false
    $ docodec convert notes.md notes.html

"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any

from docodec.cli.builder import (
    EXIT_SUCCESS,
    EXIT_VALIDATION_ERROR,
    create_parser,
    get_exit_code_for_exception,
)
from docodec.cli.config import load_config_with_priority
from docodec.cli.output import get_codec_status, print_error, print_formats, should_use_rich_output
from docodec.exceptions import DocodecError
from docodec.logging_utils import configure_logging

logger = logging.getLogger(__name__)

__all__ = ["main", "create_parser", "get_exit_code_for_exception"]


def _setup_logging_level(parsed_args: argparse.Namespace) -> None:
    """Set up logging from ``--trace``, ``--verbose`` and ``--log-level``, in that precedence."""
    if parsed_args.trace:
        log_level = logging.DEBUG
    elif parsed_args.verbose and parsed_args.log_level == "WARNING":
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, parsed_args.log_level.upper())

    configure_logging(log_level, log_file=parsed_args.log_file, trace_mode=parsed_args.trace)


def build_options(parsed_args: argparse.Namespace) -> dict[str, Any]:
    """Merge configuration file values with command-line arguments.

    Returns
    -------
    dict
        Option values passed to both the decode and encode steps

    Raises
    ------
    argparse.ArgumentTypeError
        If the configuration file cannot be loaded

    """
    options = load_config_with_priority(parsed_args.config)
    if parsed_args.standalone is not None:
        options["is_standalone"] = parsed_args.standalone
    return options


def _convert_command(parsed_args: argparse.Namespace) -> int:
    from docodec.api import convert

    options = build_options(parsed_args)
    logger.debug(f"Converting {parsed_args.input!r} with options {sorted(options)}")

    output = parsed_args.output
    to = parsed_args.to
    if output is None:
        # Without an output file the result goes to standard output
        output = "-"
        if to is None:
            to = "md"

    convert(parsed_args.input, output, to=to, from_=parsed_args.from_, options=options)
    return EXIT_SUCCESS


def _formats_command(parsed_args: argparse.Namespace) -> int:
    from docodec.codec_registry import registry

    statuses = []
    for name in registry.list_codecs():
        metadata = registry.get_metadata(name)
        if metadata is not None:
            statuses.append(get_codec_status(metadata))
    print_formats(statuses, use_rich=should_use_rich_output(parsed_args))
    return EXIT_SUCCESS


def main(args: list[str] | None = None) -> int:
    """Execute the CLI.

    Parameters
    ----------
    args : list of str, optional
        Arguments, defaults to ``sys.argv[1:]``

    Returns
    -------
    int
        Process exit code

    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    if parsed_args.command is None:
        parser.print_help(sys.stderr)
        return EXIT_VALIDATION_ERROR

    _setup_logging_level(parsed_args)
    use_rich = should_use_rich_output(parsed_args, stream=sys.stderr)

    try:
        if parsed_args.command == "formats":
            return _formats_command(parsed_args)
        return _convert_command(parsed_args)
    except argparse.ArgumentTypeError as e:
        print_error(str(e), use_rich)
        return EXIT_VALIDATION_ERROR
    except DocodecError as e:
        logger.debug("Conversion failed", exc_info=True)
        print_error(str(e), use_rich)
        return get_exit_code_for_exception(e)
    except Exception as e:
        logger.exception("Unexpected error")
        print_error(f"Unexpected error: {e}", use_rich)
        return get_exit_code_for_exception(e)
    finally:
        from docodec.codecs import pdf

        pdf.shutdown()


if __name__ == "__main__":
    sys.exit(main())
