#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/ipynb.py
"""Jupyter Notebook codec.

Converts between notebooks (https://github.com/jupyter/nbformat) and
Articles:

- notebook metadata becomes Article metadata (``title`` and ``authors`` map
  to their fields, everything else is kept in ``meta``)
- markdown cells are decoded with the Markdown codec
- code cells become ``CodeChunk`` nodes in the notebook's language, with the
  text of ``stream``, ``execute_result`` and ``display_data`` outputs (and
  images, as data URLs) as chunk outputs

Both nbformat 4 (``cells``) and nbformat 3 (``worksheets[0].cells``) are
decoded; encoding writes nbformat 4.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from docodec.ast.nodes import Article, CodeBlock, CodeChunk, ImageObject, Person
from docodec.ast.utils import extract_text, wrap_inline_runs
from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.codecs.md import decode_markdown, encode_markdown
from docodec.constants import DEPS_MARKDOWN
from docodec.exceptions import MalformedInputError
from docodec.options.base import BaseDecodeOptions, BaseEncodeOptions
from docodec.options.markdown import MarkdownEncodeOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)

NBFORMAT = 4
NBFORMAT_MINOR = 4

# Rich output types tried in order before falling back to text/plain
IMAGE_MEDIA_TYPES = ("image/png", "image/jpeg", "image/gif", "image/svg+xml")


def _source(value: Any) -> str:
    if isinstance(value, list):
        return "".join(value)
    return str(value or "")


def _source_lines(text: str) -> list[str]:
    return text.splitlines(keepends=True)


def notebook_language(metadata: dict[str, Any]) -> Optional[str]:
    """Programming language of a notebook from its metadata.

    ``language_info.name`` is preferred, then ``kernelspec.language``, then
    the nbformat 3 ``kernel_info.language``.
    """
    for key, field_name in (("language_info", "name"), ("kernelspec", "language"), ("kernel_info", "language")):
        section = metadata.get(key)
        if isinstance(section, dict) and section.get(field_name):
            return section[field_name]
    return None


class NotebookDecoder:
    """Decodes notebook JSON to an Article."""

    def decode(self, text: str) -> Article:
        try:
            notebook = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedInputError(f"Notebook is not valid JSON: {e}", snippet=text[:200], original_error=e) from e
        if not isinstance(notebook, dict):
            raise MalformedInputError("Notebook JSON must be an object")

        metadata = notebook.get("metadata") or {}
        language = notebook_language(metadata)
        cells = self._cells(notebook)

        article = Article()
        meta = dict(metadata)
        title = meta.pop("title", None)
        if title:
            article.title = str(title)
        authors = meta.pop("authors", None)
        if isinstance(authors, list):
            article.authors = [self._decode_author(author) for author in authors]
        article.meta = meta or None

        content: list[Any] = []
        for index, cell in enumerate(cells):
            content.extend(self._decode_cell(cell, index, language))
        article.content = content
        return article

    def _cells(self, notebook: dict[str, Any]) -> list[dict[str, Any]]:
        if isinstance(notebook.get("cells"), list):
            return notebook["cells"]
        worksheets = notebook.get("worksheets")
        if isinstance(worksheets, list) and worksheets and isinstance(worksheets[0].get("cells"), list):
            return worksheets[0]["cells"]
        raise MalformedInputError("Invalid notebook: no 'cells' (nbformat 4) or 'worksheets' (nbformat 3)")

    def _decode_author(self, author: Any) -> Person:
        if isinstance(author, dict):
            return Person(name=author.get("name"))
        return Person(name=str(author))

    def _decode_cell(self, cell: dict[str, Any], index: int, language: Optional[str]) -> list[Any]:
        cell_type = cell.get("cell_type")
        # nbformat 3 keeps code cell source under ``input``
        source = _source(cell.get("source", cell.get("input", "")))

        if cell_type == "markdown":
            return decode_markdown(source, is_standalone=False)
        if cell_type == "code":
            outputs = [output for output in (self._decode_output(o) for o in cell.get("outputs") or []) if output]
            return [
                CodeChunk(
                    text=source[:-1] if source.endswith("\n") else source,
                    programming_language=cell.get("language") or language,
                    outputs=outputs or None,
                )
            ]
        if cell_type == "raw":
            return [CodeBlock(text=source)] if source else []
        if cell_type == "heading":
            # nbformat 3 heading cells
            return decode_markdown("#" * int(cell.get("level", 1)) + " " + source, is_standalone=False)
        logger.warning(f"Skipping notebook cell {index + 1} of unknown type: {cell_type!r}")
        return []

    def _decode_output(self, output: dict[str, Any]) -> Any:
        output_type = output.get("output_type")
        if output_type == "stream":
            return _source(output.get("text"))
        if output_type in ("execute_result", "display_data", "pyout"):
            data = output.get("data") or output
            for media_type in IMAGE_MEDIA_TYPES:
                if media_type in data:
                    return ImageObject(
                        content_url=f"data:{media_type};base64,{_source(data[media_type]).strip()}",
                        format=media_type,
                    )
            if "text/plain" in data:
                return _source(data["text/plain"])
            if "text" in data:
                return _source(data["text"])
        logger.debug(f"Skipping notebook output of type {output_type!r}")
        return None


class NotebookEncoder:
    """Encodes an Article to nbformat 4 JSON."""

    def encode(self, node: Any) -> str:
        article = node if isinstance(node, Article) else Article(content=node if isinstance(node, list) else [node])

        cells: list[dict[str, Any]] = []
        pending: list[Any] = []

        def flush() -> None:
            if pending:
                markdown = encode_markdown(list(pending), MarkdownEncodeOptions(is_standalone=False))
                if markdown.strip():
                    cells.append(
                        {"cell_type": "markdown", "metadata": {}, "source": _source_lines(markdown.strip("\n"))}
                    )
                pending.clear()

        language: Optional[str] = None
        for block in wrap_inline_runs(article.content or []):
            if isinstance(block, CodeChunk):
                flush()
                language = language or block.programming_language
                cells.append(self._encode_chunk(block))
            else:
                pending.append(block)
        flush()

        notebook = {
            "cells": cells,
            "metadata": self._encode_metadata(article, language),
            "nbformat": NBFORMAT,
            "nbformat_minor": NBFORMAT_MINOR,
        }
        return json.dumps(notebook, indent=1, ensure_ascii=False) + "\n"

    def _encode_metadata(self, article: Article, language: Optional[str]) -> dict[str, Any]:
        metadata = dict(article.meta or {})
        if article.title:
            metadata["title"] = extract_text(article.title)
        if article.authors:
            metadata["authors"] = [{"name": self._author_name(author)} for author in article.authors]
        if language and notebook_language(metadata) is None:
            metadata["language_info"] = {"name": language}
        return metadata

    def _author_name(self, author: Any) -> str:
        if isinstance(author, Person):
            if author.name:
                return author.name
            return " ".join((author.given_names or []) + (author.family_names or []))
        return extract_text(getattr(author, "name", None) or author)

    def _encode_chunk(self, chunk: CodeChunk) -> dict[str, Any]:
        return {
            "cell_type": "code",
            "execution_count": None,
            "metadata": {},
            "outputs": [self._encode_output(output) for output in chunk.outputs or []],
            "source": _source_lines(chunk.text),
        }

    def _encode_output(self, output: Any) -> dict[str, Any]:
        if isinstance(output, ImageObject) and output.content_url.startswith("data:"):
            header, _, data = output.content_url[len("data:") :].partition(",")
            media_type = header.split(";")[0] or output.format or "image/png"
            return {"output_type": "display_data", "data": {media_type: data}, "metadata": {}}
        return {
            "output_type": "execute_result",
            "execution_count": None,
            "data": {"text/plain": _source_lines(extract_text(output))},
            "metadata": {},
        }


class IpynbCodec(BaseCodec):
    """Codec for Jupyter notebooks."""

    name = "ipynb"

    @requires_dependencies("ipynb", DEPS_MARKDOWN)
    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        self._decode_options(options)
        with debug_timer(logger, "Notebook decode"):
            return NotebookDecoder().decode(dump(file))

    @requires_dependencies("ipynb", DEPS_MARKDOWN)
    def encode(self, node: Any, options: Optional[BaseEncodeOptions] = None) -> VFile:
        self._encode_options(options)
        with debug_timer(logger, "Notebook encode"):
            contents = NotebookEncoder().encode(node)
        return VFile(contents=contents, media_type="application/x-ipynb+json")


CODEC_METADATA = CodecMetadata(
    name="ipynb",
    ext_names=["ipynb"],
    media_types=["application/x-ipynb+json"],
    codec_class=IpynbCodec,
    required_packages=DEPS_MARKDOWN,
    description="Jupyter notebooks",
)
