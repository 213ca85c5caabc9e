#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/cli/config.py
"""Configuration file discovery and loading for the docodec CLI.

A configuration file holds default option values for conversions, for
example::

    # .docodec.toml
    is_standalone = false
    delimiter = ";"

    [network]
    timeout = 5

Tables are flattened, so ``[network] timeout`` and a top-level ``timeout``
are the same option. Files are looked up in this order:

1. The ``--config`` argument
2. The path in the ``DOCODEC_CONFIG`` environment variable
3. ``.docodec.toml``, ``.docodec.yaml``, ``.docodec.yml`` or
   ``.docodec.json``, or a ``pyproject.toml`` with a ``[tool.docodec]``
   table, in the working directory or any of its parents
4. The same dedicated file names in the user's home directory
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import yaml

from docodec.constants import ENV_CONFIG_PATH

logger = logging.getLogger(__name__)

CONFIG_FILENAMES = [".docodec.toml", ".docodec.yaml", ".docodec.yml", ".docodec.json"]


def _load_pyproject_section(pyproject_path: Path) -> Dict[str, Any]:
    """Load the ``[tool.docodec]`` table of a pyproject.toml, or ``{}``."""
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise argparse.ArgumentTypeError(f"Invalid TOML in {pyproject_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading {pyproject_path}: {e}") from e

    config = data.get("tool", {}).get("docodec", {})
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"[tool.docodec] section in {pyproject_path} must be a table, got {type(config).__name__}"
        )
    return config


def find_config_in_parents(start_dir: Optional[Path] = None) -> Optional[Path]:
    """Find the nearest configuration file from ``start_dir`` up to the root.

    Parameters
    ----------
    start_dir : Path, optional
        Directory to start from, defaults to the working directory

    Returns
    -------
    Path or None
        The first configuration file found

    """
    current = (start_dir or Path.cwd()).resolve()
    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        pyproject_path = current / "pyproject.toml"
        if pyproject_path.is_file():
            try:
                if _load_pyproject_section(pyproject_path):
                    return pyproject_path
            except argparse.ArgumentTypeError as e:
                logger.debug(f"Skipping unreadable {pyproject_path}: {e}")

        if current.parent == current:
            return None
        current = current.parent


def discover_config_file() -> Optional[Path]:
    """Discover a configuration file in the working directory tree or home directory."""
    found = find_config_in_parents()
    if found:
        return found

    home = Path.home()
    for filename in CONFIG_FILENAMES:
        config_path = home / filename
        if config_path.is_file():
            return config_path
    return None


def load_config_file(config_path: Path | str) -> Dict[str, Any]:
    """Load a JSON, TOML, YAML or pyproject.toml configuration file.

    Parameters
    ----------
    config_path : Path or str
        Path to the configuration file

    Returns
    -------
    dict
        The configuration mapping

    Raises
    ------
    argparse.ArgumentTypeError
        If the file is missing, unreadable, or not a mapping

    Examples
    --------
    >>> config = load_config_file(".docodec.toml")
    >>> config.get("is_standalone")
    False

    """
    config_path = Path(config_path)
    if not config_path.is_file():
        raise argparse.ArgumentTypeError(f"Configuration file does not exist: {config_path}")

    if config_path.name.lower() == "pyproject.toml":
        return _load_pyproject_section(config_path)

    ext = config_path.suffix.lower()
    try:
        if ext == ".toml":
            with open(config_path, "rb") as f:
                config = tomllib.load(f)
        elif ext in (".yaml", ".yml"):
            with open(config_path, "r", encoding="utf-8") as f:
                config = yaml.safe_load(f)
        elif ext == ".json":
            with open(config_path, "r", encoding="utf-8") as f:
                config = json.load(f)
        else:
            raise argparse.ArgumentTypeError(f"Unsupported config file format: {ext}. Use .json, .toml, or .yaml")
    except (tomllib.TOMLDecodeError, yaml.YAMLError, json.JSONDecodeError) as e:
        raise argparse.ArgumentTypeError(f"Invalid config file {config_path}: {e}") from e
    except OSError as e:
        raise argparse.ArgumentTypeError(f"Error reading config file {config_path}: {e}") from e

    if config is None:
        return {}
    if not isinstance(config, dict):
        raise argparse.ArgumentTypeError(
            f"Config file {config_path} must contain a mapping, got {type(config).__name__}"
        )
    return config


def flatten_config(config: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten nested tables into one mapping of option values.

    Later (deeper) keys win over earlier ones with the same name.

    Examples
    --------
    >>> flatten_config({"is_standalone": False, "network": {"timeout": 5}})
    {'is_standalone': False, 'timeout': 5}

    """
    flat: Dict[str, Any] = {}
    for key, value in config.items():
        if isinstance(value, dict):
            flat.update(flatten_config(value))
        else:
            flat[key.replace("-", "_")] = value
    return flat


def load_config_with_priority(explicit_path: Optional[str] = None) -> Dict[str, Any]:
    """Load the configuration that applies to this run, flattened.

    Parameters
    ----------
    explicit_path : str, optional
        Path given with ``--config``

    Returns
    -------
    dict
        Option values, empty if no configuration file applies

    """
    path: Optional[Path | str] = explicit_path or os.environ.get(ENV_CONFIG_PATH) or discover_config_file()
    if not path:
        return {}
    logger.debug(f"Loading configuration from {path}")
    return flatten_config(load_config_file(path))
