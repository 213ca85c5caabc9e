#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/utils/decorators.py
"""Decorators shared by codec implementations.

``requires_dependencies`` centralizes the import and version checks that
every codec with third-party collaborators needs, and ``debug_timer`` times
decode/encode calls when DEBUG logging is on.

"""

from __future__ import annotations

import importlib
import logging
import time
from contextlib import contextmanager
from functools import wraps
from typing import Any, Callable, Generator, List, Tuple

from docodec.exceptions import DependencyError
from docodec.utils.packages import check_version_requirement


def requires_dependencies(codec_name: str, packages: List[Tuple[str, str, str]]) -> Callable:
    """Check required dependencies and versions before a codec method runs.

    Parameters
    ----------
    codec_name : str
        Name of the codec (e.g., "md", "jats"). Appears in error messages.
    packages : list of tuple
        Required packages as (install_name, import_name, version_spec) tuples.

    Returns
    -------
    Callable
        Decorated method that checks dependencies before execution

    Raises
    ------
    DependencyError
        If any required package is missing or has an incompatible version.
        The original ImportError is chained for debugging.

    Examples
    --------
        >>> @requires_dependencies("md", [("mistune", "mistune", ">=3.0.0")])
        ... def decode(self, file, options=None):
        ...     import mistune

    """

    def decorator(method: Callable) -> Callable:
        @wraps(method)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            missing = []
            version_mismatches = []
            original_error = None

            for install_name, import_name, version_spec in packages:
                try:
                    # nosemgrep: python.lang.security.audit.non-literal-import.non-literal-import
                    importlib.import_module(import_name)
                except ImportError as e:
                    missing.append((install_name, version_spec))
                    if original_error is None:
                        original_error = e
                    continue

                if version_spec:
                    meets_requirement, installed_version = check_version_requirement(install_name, version_spec)
                    if not meets_requirement:
                        version_mismatches.append((install_name, version_spec, installed_version or "unknown"))

            if missing or version_mismatches:
                raise DependencyError(
                    codec_name=codec_name,
                    missing_packages=missing,
                    version_mismatches=version_mismatches,
                    original_import_error=original_error,
                ) from original_error

            return method(*args, **kwargs)

        return wrapper

    return decorator


@contextmanager
def debug_timer(logger: logging.Logger, operation: str) -> Generator[None, None, None]:
    """Time a block and log the elapsed time at DEBUG level.

    No timing is done when the logger is not enabled for DEBUG.

    Examples
    --------
        >>> with debug_timer(logger, "Decoding (md)"):
        ...     node = codec.decode(file)
        ... # Logs: "Decoding (md) completed in 0.01s"

    """
    if logger.isEnabledFor(logging.DEBUG):
        start_time = time.perf_counter()
        yield
        elapsed = time.perf_counter() - start_time
        logger.debug(f"{operation} completed in {elapsed:.2f}s")
    else:
        yield
