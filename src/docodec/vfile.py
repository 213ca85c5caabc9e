#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/vfile.py
"""Virtual files passed between the API and codecs.

A ``VFile`` is a path plus contents (text or bytes) plus an optional media
type. Codecs decode from a ``VFile`` and encode to one; only the helpers in
this module touch the file system or the standard streams.

"""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from docodec.exceptions import FileAccessError, FileNotFoundError, OutputWriteError

logger = logging.getLogger(__name__)

_DRIVE_PATTERN = re.compile(r"^[A-Za-z]:[\\/]")
_EXTENSION_PATTERN = re.compile(r"\.[A-Za-z][A-Za-z0-9]*$")
_EXPLICIT_PREFIXES = ("/", "./", "../", "~")


@dataclass
class VFile:
    """An in-memory file.

    Parameters
    ----------
    contents : str, bytes or None
        File contents. Binary formats (PDF, XLSX) use bytes.
    path : str, optional
        File system path the contents came from or will be written to
    media_type : str, optional
        Media type of the contents, when known

    """

    contents: Union[str, bytes, None] = None
    path: Optional[str] = None
    media_type: Optional[str] = None

    @property
    def is_binary(self) -> bool:
        """Whether the contents are held as bytes."""
        return isinstance(self.contents, bytes)

    def as_bytes(self) -> bytes:
        """Return the contents as bytes, encoding text as UTF-8."""
        if self.contents is None:
            return b""
        if isinstance(self.contents, bytes):
            return self.contents
        return self.contents.encode("utf-8")

    def __str__(self) -> str:
        return dump(self)


def is_path(content: str) -> bool:
    """Guess whether a string is a file path rather than raw content.

    A string is treated as a path if it starts with ``/``, ``./``, ``../``,
    ``~`` or a drive letter, if it names an existing file, or if it is a
    single word ending in a file extension (``article.md``).

    Parameters
    ----------
    content : str
        String to inspect

    Returns
    -------
    bool
        True if ``content`` looks like a path

    """
    if not content or "\n" in content or "://" in content:
        return False
    if content.startswith(_EXPLICIT_PREFIXES) or _DRIVE_PATTERN.match(content):
        return True
    if len(content) < 4096:
        try:
            if os.path.isfile(content):
                return True
        except (OSError, ValueError):
            return False
    return " " not in content and bool(_EXTENSION_PATTERN.search(content))


def create(contents: Union[str, bytes, None] = None, path: Optional[str] = None) -> VFile:
    """Create a virtual file."""
    return VFile(contents=contents, path=path)


def load(contents: Union[str, bytes]) -> VFile:
    """Create a virtual file holding raw contents."""
    return VFile(contents=contents)


def dump(file: VFile) -> str:
    """Return the contents of a virtual file as text.

    Bytes are decoded as UTF-8, replacing undecodable sequences.
    """
    if file.contents is None:
        return ""
    if isinstance(file.contents, bytes):
        return file.contents.decode("utf-8", errors="replace")
    return file.contents


def read(content: str) -> VFile:
    """Read a virtual file.

    Parameters
    ----------
    content : str
        A file path, ``-`` for standard input, or raw content. Raw content
        (anything :func:`is_path` rejects) is loaded as-is.

    Returns
    -------
    VFile
        File with the read contents; ``path`` is set when read from disk

    Raises
    ------
    FileNotFoundError
        If ``content`` is an explicit path (``/``, ``./``, ``~`` or a drive
        letter) and no such file exists. Bare names such as ``notes.md``
        that do not exist are loaded as raw content instead.
    FileAccessError
        If the file exists but cannot be read

    """
    if content == "-":
        return VFile(contents=sys.stdin.read())

    if not is_path(content):
        return load(content)

    path = Path(content).expanduser()
    if not path.exists():
        if content.startswith(_EXPLICIT_PREFIXES) or _DRIVE_PATTERN.match(content):
            raise FileNotFoundError(str(path))
        logger.debug(f"No file named {content!r}; treating it as raw content")
        return load(content)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise FileAccessError(str(path), original_error=e) from e
    logger.debug(f"Read {len(data)} bytes from {path}")
    return VFile(contents=data, path=str(path))


def write(file: VFile, file_path: str) -> None:
    """Write a virtual file to disk, or to standard output for ``-``.

    Raises
    ------
    OutputWriteError
        If the file cannot be written

    """
    if file_path == "-":
        if isinstance(file.contents, bytes):
            sys.stdout.buffer.write(file.contents)
            sys.stdout.buffer.flush()
        else:
            sys.stdout.write(dump(file))
            sys.stdout.flush()
        return

    path = Path(file_path).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(file.as_bytes())
    except OSError as e:
        raise OutputWriteError(str(path), original_error=e) from e
    logger.debug(f"Wrote {path}")
