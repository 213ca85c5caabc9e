#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codec_registry.py
"""Codec registry and matcher.

This module implements the registry that selects one codec from partial
hints: a file path, raw content, a format name or a media type. Built-in
codecs are listed in ``CODEC_MODULES`` and imported lazily, the first time a
match needs them; third-party codecs can be added with
``CodecRegistry.register``.
"""

from __future__ import annotations

import importlib
import logging
import mimetypes
import os
import re
import threading
from typing import Dict, Iterator, List, Optional

from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.constants import MEDIA_TYPES
from docodec.exceptions import DependencyError, FormatError, NoCodecMatchError
from docodec.vfile import is_path

logger = logging.getLogger(__name__)

# Built-in codec modules under ``docodec.codecs``. Order matters: the first
# codec that matches wins, so more generic formats go last.
CODEC_MODULES: List[str] = [
    # Remotes
    "http",
    "plos",
    "doi",
    # Tabular data, spreadsheets etc
    "csv",
    "xlsx",
    # Articles, textual documents etc
    "html",
    "ipynb",
    "jats",
    "md",
    "pdf",
    "txt",
    "xmd",
    # Data interchange formats
    "yaml",
    "json",
]

# Scanned, in order, for URI-like content when no format is given
CODEC_REGEXES: List[tuple[str, re.Pattern[str]]] = [("http", re.compile(r"^https?://"))]

_URI_PATTERN = re.compile(r"^[a-z]+://")


def _sanitize_for_log(value: str) -> str:
    """Replace newlines so that logged values cannot forge log entries."""
    return value.replace("\n", "\\n").replace("\r", "\\r")


def _preview(content: str, limit: int = 60) -> str:
    return _sanitize_for_log(content if len(content) <= limit else content[: limit - 3] + "...")


def media_type_for_extension(ext_name: str) -> Optional[str]:
    """Look up the media type of an extension name (without the dot)."""
    ext_name = ext_name.lower()
    if ext_name in MEDIA_TYPES:
        return MEDIA_TYPES[ext_name]
    media_type, _ = mimetypes.guess_type(f"file.{ext_name}", strict=False)
    return media_type


class CodecRegistry:
    """Registry for codecs, with content/format matching.

    Attributes
    ----------
    _instance : CodecRegistry or None
        Singleton instance of the registry
    _codecs : dict
        Registered codec metadata by name
    _instances : dict
        Instantiated codecs by name (codecs are stateless and shared)
    _unavailable : set
        Built-in modules that failed to import

    """

    _instance: Optional[CodecRegistry] = None
    _codecs: Dict[str, CodecMetadata]
    _instances: Dict[str, BaseCodec]
    _unavailable: set[str]
    _lock: threading.RLock

    def __new__(cls) -> CodecRegistry:
        """Create or return singleton instance."""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._codecs = {}
            cls._instance._instances = {}
            cls._instance._unavailable = set()
            cls._instance._lock = threading.RLock()
        return cls._instance

    def register(self, metadata: CodecMetadata) -> None:
        """Register a codec with its metadata.

        Registering under an existing name replaces the earlier codec.
        """
        with self._lock:
            if metadata.name in self._codecs:
                logger.debug(f"Replacing codec: {_sanitize_for_log(metadata.name)}")
            self._codecs[metadata.name] = metadata
            self._instances.pop(metadata.name, None)
            self._unavailable.discard(metadata.name)
        logger.debug(f"Registered codec: {_sanitize_for_log(metadata.name)} (priority={metadata.priority})")

    def unregister(self, name: str) -> bool:
        """Unregister a codec.

        Returns
        -------
        bool
            True if unregistered, False if not found

        """
        with self._lock:
            if name not in self._codecs:
                return False
            del self._codecs[name]
            self._instances.pop(name, None)
            if name in CODEC_MODULES:
                # Do not lazily re-import a built-in that was removed on purpose
                self._unavailable.add(name)
        logger.debug(f"Unregistered codec: {_sanitize_for_log(name)}")
        return True

    def _load_module(self, name: str) -> Optional[CodecMetadata]:
        """Import a built-in codec module and register its metadata.

        Returns None, after logging at debug level, when the module cannot be
        imported.
        """
        with self._lock:
            if name in self._codecs:
                return self._codecs[name]
            if name in self._unavailable or name not in CODEC_MODULES:
                return None
            try:
                # nosemgrep: python.lang.security.audit.non-literal-import.non-literal-import
                module = importlib.import_module(f"docodec.codecs.{name}")
            except (ImportError, DependencyError) as e:
                logger.debug(f"Could not load codec {name}: {e}")
                self._unavailable.add(name)
                return None
            metadata = getattr(module, "CODEC_METADATA", None)
            if not isinstance(metadata, CodecMetadata):
                logger.debug(f"Module docodec.codecs.{name} has no CODEC_METADATA")
                self._unavailable.add(name)
                return None
            self._codecs[name] = metadata
            logger.debug(f"Loaded codec module: {name}")
            return metadata

    def _resolve_class(self, metadata: CodecMetadata) -> type:
        spec = metadata.codec_class
        if isinstance(spec, type):
            return spec
        if not isinstance(spec, str):
            raise FormatError(f"Codec '{metadata.name}' has no codec class")
        module_path, _, class_name = spec.rpartition(".")
        module_path = module_path or f"docodec.codecs.{metadata.name}"
        # nosemgrep: python.lang.security.audit.non-literal-import.non-literal-import
        module = importlib.import_module(module_path)
        return getattr(module, class_name)

    def _instantiate(self, metadata: CodecMetadata) -> Optional[BaseCodec]:
        with self._lock:
            codec = self._instances.get(metadata.name)
            if codec is not None:
                return codec
            try:
                codec = self._resolve_class(metadata)()
            except (ImportError, AttributeError, DependencyError) as e:
                logger.debug(f"Could not instantiate codec {metadata.name}: {e}")
                return None
            self._instances[metadata.name] = codec
            return codec

    def _iter_metadata(self) -> Iterator[CodecMetadata]:
        """Yield codec metadata in matching order, loading built-ins on demand."""
        extras = sorted(
            (m for name, m in list(self._codecs.items()) if name not in CODEC_MODULES),
            key=lambda m: m.priority,
            reverse=True,
        )
        yield from (m for m in extras if m.priority > 0)
        for name in CODEC_MODULES:
            metadata = self._load_module(name)
            if metadata is not None:
                yield metadata
        yield from (m for m in extras if m.priority <= 0)

    def get_codec(self, name: str) -> BaseCodec:
        """Get the codec registered under ``name``.

        Raises
        ------
        FormatError
            If no codec is registered under ``name`` or it cannot be loaded

        """
        metadata = self._codecs.get(name) or self._load_module(name)
        if metadata is None:
            raise FormatError(format_type=name, supported_formats=self.list_codecs())
        codec = self._instantiate(metadata)
        if codec is None:
            raise FormatError(f"Codec '{name}' is registered but could not be loaded")
        return codec

    def get_metadata(self, name: str) -> Optional[CodecMetadata]:
        """Get the metadata of a codec, or None if unknown."""
        return self._codecs.get(name) or self._load_module(name)

    def list_codecs(self) -> List[str]:
        """List available codec names in matching order."""
        return [metadata.name for metadata in self._iter_metadata()]

    def match(self, content: Optional[str] = None, format: Optional[str] = None, is_output: bool = False) -> BaseCodec:
        """Match a codec from content, a path, a format or a media type.

        Parameters
        ----------
        content : str, optional
            A file path (``../folder/file.txt``), a URL, or raw content
        format : str, optional
            A media type (``text/plain``, containing a slash) or an
            extension name (``txt``). Always wins over the path.
        is_output : bool, default False
            Treat ``content`` as a path even if it does not look like one

        Returns
        -------
        BaseCodec
            The first matching codec

        Raises
        ------
        NoCodecMatchError
            If no codec matches

        Examples
        --------
        >>> registry.match("article.md").name
        'md'
        >>> registry.match("article.md", format="application/jats+xml").name
        'jats'

        """
        file_name: Optional[str] = None
        ext_name: Optional[str] = None
        media_type: Optional[str] = None

        if content and (is_output or is_path(content)):
            file_name = os.path.basename(content)
            ext_name = os.path.splitext(content)[1][1:].lower() or None
            media_type = media_type_for_extension(ext_name) if ext_name else None

        if format:
            # An explicit format overrides every key derived from the path
            file_name = None
            if "/" in format:
                ext_name = None
                media_type = format
            else:
                ext_name = format.lower()
                media_type = media_type_for_extension(ext_name)
        elif content and _URI_PATTERN.match(content):
            for codec_name, regex in CODEC_REGEXES:
                if regex.match(content):
                    ext_name = codec_name
                    break

        logger.debug(
            f"Matching codec for file_name={file_name!r} ext_name={ext_name!r} media_type={media_type!r}"
        )

        if ext_name:
            metadata = self._codecs.get(ext_name) or self._load_module(ext_name)
            if metadata is not None:
                codec = self._instantiate(metadata)
                if codec is not None:
                    return codec

        for metadata in self._iter_metadata():
            if metadata.matches(file_name, ext_name, media_type):
                codec = self._instantiate(metadata)
                if codec is not None:
                    return codec
                continue
            if content:
                codec = self._instantiate(metadata)
                if codec is not None and codec.sniff(content):
                    return codec

        raise NoCodecMatchError(content=_preview(content) if content else None, format=format)

    def handled(self, content: Optional[str] = None, format: Optional[str] = None) -> bool:
        """Whether a codec exists for the content or format."""
        try:
            self.match(content, format)
        except NoCodecMatchError:
            return False
        return True


# Global registry instance
registry = CodecRegistry()


def match(content: Optional[str] = None, format: Optional[str] = None, is_output: bool = False) -> BaseCodec:
    """Match a codec using the global registry. See :meth:`CodecRegistry.match`."""
    return registry.match(content, format, is_output)


def handled(content: Optional[str] = None, format: Optional[str] = None) -> bool:
    """Whether the global registry has a codec for the content or format."""
    return registry.handled(content, format)
