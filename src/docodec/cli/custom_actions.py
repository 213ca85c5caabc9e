#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/cli/custom_actions.py
"""Custom argparse actions for the docodec CLI.

Every action here takes its default from an environment variable named
``DOCODEC_<DEST>`` (upper case, hyphens and dots replaced by underscores)
when that variable is set, and records explicitly given arguments in
``namespace._provided_args`` so that config file values only fill in what
the user did not pass.
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import Any, Callable, Optional, Sequence, Union

from docodec.constants import ENV_PREFIX

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("true", "1", "yes", "on")

Values = Union[str, Sequence[Any], None]


def env_key_for(dest: str) -> str:
    """Environment variable that supplies the default for ``dest``.

    Examples
    --------
    >>> env_key_for("log-level")
    'DOCODEC_LOG_LEVEL'

    """
    return f"{ENV_PREFIX}{dest.upper().replace('-', '_').replace('.', '_').strip('_')}"


def env_default(dest: str, default: Any, convert: Callable[[str], Any]) -> Any:
    """Return ``convert`` of the environment value for ``dest``, else ``default``.

    A value that ``convert`` rejects is logged and ignored.
    """
    env_key = env_key_for(dest)
    raw = os.environ.get(env_key)
    if raw is None:
        return default
    try:
        return convert(raw)
    except (ValueError, TypeError) as e:
        logger.warning(f"Ignoring invalid environment variable {env_key}={raw!r}: {e}")
        return default


def _as_bool(raw: str) -> bool:
    return raw.strip().lower() in _TRUE_VALUES


def _mark_provided(namespace: argparse.Namespace, dest: str) -> None:
    provided = getattr(namespace, "_provided_args", None)
    if provided is None:
        provided = namespace._provided_args = set()
    provided.add(dest)


class TrackingStoreAction(argparse.Action):
    """Store a value, defaulting from the environment, and record that it was given."""

    def __init__(
        self,
        option_strings: Sequence[str],
        dest: str,
        default: Any = None,
        type: Optional[Callable[[str], Any]] = None,
        **kwargs: Any,
    ) -> None:
        default = env_default(dest, default, type or str)
        super().__init__(option_strings, dest, default=default, type=type, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Values,
        option_string: Optional[str] = None,
    ) -> None:
        setattr(namespace, self.dest, values)
        _mark_provided(namespace, self.dest)


class TrackingStoreTrueAction(argparse.Action):
    """Flag that sets True, defaulting from the environment, and records that it was given."""

    def __init__(self, option_strings: Sequence[str], dest: str, default: bool = False, **kwargs: Any) -> None:
        default = env_default(dest, default, _as_bool)
        super().__init__(option_strings, dest, nargs=0, const=True, default=default, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Values,
        option_string: Optional[str] = None,
    ) -> None:
        setattr(namespace, self.dest, True)
        _mark_provided(namespace, self.dest)


class TrackingBooleanOptionalAction(argparse.BooleanOptionalAction):
    """``--flag/--no-flag`` pair with an environment variable default.

    The default stays ``None`` unless the environment sets one, so callers
    can tell "not given" apart from an explicit ``--no-flag``.
    """

    def __init__(self, option_strings: Sequence[str], dest: str, default: Optional[bool] = None, **kwargs: Any) -> None:
        default = env_default(dest, default, _as_bool)
        super().__init__(option_strings, dest, default=default, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Values,
        option_string: Optional[str] = None,
    ) -> None:
        super().__call__(parser, namespace, values, option_string)
        _mark_provided(namespace, self.dest)


class DynamicVersionAction(argparse._VersionAction):
    """Version action whose text is computed only when ``--version`` is given."""

    def __init__(
        self, option_strings: Sequence[str], version_callback: Optional[Callable[[], str]] = None, **kwargs: Any
    ) -> None:
        self.version_callback = version_callback
        kwargs.setdefault("version", "unknown")
        super().__init__(option_strings, **kwargs)

    def __call__(
        self,
        parser: argparse.ArgumentParser,
        namespace: argparse.Namespace,
        values: Values,
        option_string: Optional[str] = None,
    ) -> None:
        text = self.version_callback() if self.version_callback else self.version
        parser.exit(message=f"{text}\n")
