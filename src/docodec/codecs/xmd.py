#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/xmd.py
"""XMarkdown (R Markdown) codec.

R Markdown is Markdown plus two kinds of executable code:

- chunks, fenced with the chunk options in braces::

      ```{r plot1, echo=FALSE}
      plot(x)
      ```

- inline expressions, a code span starting with the language: `` `r x + 1` ``

Decoding rewrites both into the Markdown codec's own syntax (``chunk:``
block extensions and ``{type=expr lang=r}`` code span attributes) and
decodes the result as Markdown. Encoding does the reverse on the Markdown
output; chunk outputs are not written, as R Markdown regenerates them.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Match, Optional

from docodec.codec_metadata import CodecMetadata
from docodec.codecs.base import BaseCodec
from docodec.codecs.md import decode_markdown, encode_markdown, parse_attributes, stringify_attributes
from docodec.constants import DEPS_MARKDOWN
from docodec.options.base import BaseDecodeOptions
from docodec.options.markdown import MarkdownEncodeOptions
from docodec.utils.decorators import debug_timer, requires_dependencies
from docodec.vfile import VFile, dump

logger = logging.getLogger(__name__)

# Engines whose inline code spans are expressions (`r x`)
INLINE_LANGUAGES = ("r", "py", "python")

_XMD_CHUNK = re.compile(r"^```\{([A-Za-z]\w*)([^}\n]*)\}[ \t]*\n(.*?)^```[ \t]*$", re.M | re.S)
_XMD_EXPRESSION = re.compile(r"(?<!`)`(" + "|".join(INLINE_LANGUAGES) + r")[ \t]+([^`\n]+)`(?![`{])")

_MD_CHUNK = re.compile(
    r"^chunk:[ \t]*\n:::[ \t]*\n```([A-Za-z]\w*)([^\n]*)\n(.*?)^```[ \t]*\n(?:.*?\n)??:::(?:\{[^}\n]*\})?[ \t]*$",
    re.M | re.S,
)
_MD_EXPRESSION = re.compile(r"(?<!`)`([^`\n]+)`\{type=expr lang=([A-Za-z]\w*)\}")


def parse_chunk_options(options: str) -> dict[str, str]:
    """Parse R Markdown chunk options (``plot1, echo=FALSE``).

    A first option without a value is the chunk label.

    Examples
    --------
    >>> parse_chunk_options(" plot1, echo=FALSE")
    {'label': 'plot1', 'echo': 'FALSE'}

    """
    meta: dict[str, str] = {}
    for index, option in enumerate(part.strip() for part in options.split(",")):
        if not option:
            continue
        key, sep, value = option.partition("=")
        if not sep and index == 0 and " " not in key:
            meta["label"] = key
        elif sep:
            meta[key.strip()] = value.strip()
        else:
            meta.update(parse_attributes(option))
    return meta


def stringify_chunk_options(meta: dict[str, str]) -> str:
    """Inverse of :func:`parse_chunk_options`."""
    meta = dict(meta)
    parts = []
    label = meta.pop("label", None)
    if label:
        parts.append(label)
    parts.extend(f"{key}={value}" if value != "" else key for key, value in meta.items())
    return ", ".join(parts)


def xmd_to_md(text: str) -> str:
    """Rewrite R Markdown chunks and inline expressions as Markdown extensions."""

    def chunk(m: Match[str]) -> str:
        language, options, code = m.group(1), m.group(2), m.group(3)
        meta = parse_chunk_options(options)
        info = language + (" " + stringify_attributes(meta) if meta else "")
        return f"chunk:\n:::\n```{info}\n{code}```\n:::"

    text = _XMD_CHUNK.sub(chunk, text)
    return _XMD_EXPRESSION.sub(lambda m: f"`{m.group(2)}`{{type=expr lang={m.group(1)}}}", text)


def md_to_xmd(text: str) -> str:
    """Rewrite chunk extensions and expressions back into R Markdown."""

    def chunk(m: Match[str]) -> str:
        language, rest, code = m.group(1), m.group(2).strip(), m.group(3)
        options = stringify_chunk_options(parse_attributes(rest)) if rest else ""
        return f"```{{{language}{' ' + options if options else ''}}}\n{code}```"

    text = _MD_CHUNK.sub(chunk, text)
    return _MD_EXPRESSION.sub(lambda m: f"`{m.group(2)} {m.group(1)}`", text)


class XmdCodec(BaseCodec):
    """Codec for R Markdown."""

    name = "xmd"
    encode_options_class = MarkdownEncodeOptions

    @requires_dependencies("xmd", DEPS_MARKDOWN)
    def decode(self, file: VFile, options: Optional[BaseDecodeOptions] = None) -> Any:
        options = self._decode_options(options)
        with debug_timer(logger, "XMarkdown decode"):
            return decode_markdown(xmd_to_md(dump(file)), is_standalone=options.is_standalone)

    @requires_dependencies("xmd", DEPS_MARKDOWN)
    def encode(self, node: Any, options: Optional[MarkdownEncodeOptions] = None) -> VFile:
        options = self._encode_options(options)
        with debug_timer(logger, "XMarkdown encode"):
            xmd = md_to_xmd(encode_markdown(node, options))
        return VFile(contents=xmd, media_type="text/x-rmarkdown")


CODEC_METADATA = CodecMetadata(
    name="xmd",
    ext_names=["xmd", "rmd"],
    media_types=["text/x-xmarkdown", "text/x-rmarkdown"],
    codec_class=XmdCodec,
    required_packages=DEPS_MARKDOWN,
    description="XMarkdown / R Markdown with code chunks and inline expressions",
)
