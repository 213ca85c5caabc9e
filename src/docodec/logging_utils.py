#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/logging_utils.py
"""Centralized logging utilities for docodec entry points.

Library modules only create module loggers; handlers are installed here,
by the CLI, so that embedding applications keep control of logging.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional

PLAIN_FORMAT = "%(levelname)s: %(message)s"
TRACE_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
TRACE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def resolve_log_level(log_level: int | str) -> int:
    """Resolve a numeric level or level name to a numeric level.

    Unknown names fall back to ``logging.INFO``.
    """
    if isinstance(log_level, int):
        return log_level
    return getattr(logging, str(log_level).upper(), logging.INFO)


def _formatter(trace_mode: bool) -> logging.Formatter:
    if trace_mode:
        return logging.Formatter(TRACE_FORMAT, datefmt=TRACE_DATE_FORMAT)
    return logging.Formatter(PLAIN_FORMAT)


def configure_logging(
    log_level: int | str,
    log_file: Optional[str] = None,
    trace_mode: bool = False,
) -> logging.Logger:
    """Replace the root logger's handlers with a stderr handler and an optional file handler.

    Parameters
    ----------
    log_level : int | str
        Numeric logging level or level name (e.g., "INFO")
    log_file : str, optional
        Path of a file that receives the same records, appended to
    trace_mode : bool, default False
        Include timestamps and logger names in every record

    Returns
    -------
    logging.Logger
        The root logger

    """
    level = resolve_log_level(log_level)
    formatter = _formatter(trace_mode)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    file_error: Optional[OSError] = None
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file, mode="a", encoding="utf-8"))
        except OSError as e:
            file_error = e

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if file_error is not None:
        root.warning("Could not open log file %s: %s", log_file, file_error)
    elif log_file:
        root.info("Logging to file: %s", log_file)
    return root
