#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/codecs/_md_renderer.py
"""Markdown stringifier used by the Markdown codec.

Extends mistune's ``MarkdownRenderer`` with the token types the codec emits
that the base renderer does not stringify consistently across mistune
releases (tables, strikethrough), and with text escaping that keeps literal
characters from re-parsing as Markdown, math or extension syntax.

This module imports mistune at module level; the codec imports it lazily.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterable

from mistune.core import BlockState
from mistune.renderers.markdown import MarkdownRenderer

# Characters that always need a backslash in inline text
_ALWAYS_ESCAPE = set("\\`*{}[]<$~^")

_LEADING_BLOCK_MARKER = re.compile(r"^(#{1,6}|>|[-+]|\d{1,9}[.)])(?=\s|$)")


def escape_text(text: str) -> str:
    """Escape ``text`` so that it decodes back to the same string.

    Underscores inside words (``snake_case``) and ``!`` not followed by a
    letter are left alone; a ``!`` before a letter would open an inline
    extension.
    """
    out = []
    for i, char in enumerate(text):
        if char in _ALWAYS_ESCAPE:
            out.append("\\" + char)
        elif char == "_":
            prev_alnum = i > 0 and text[i - 1].isalnum()
            next_alnum = i < len(text) - 1 and text[i + 1].isalnum()
            out.append(char if prev_alnum and next_alnum else "\\_")
        elif char == "!" and i < len(text) - 1 and text[i + 1].isascii() and text[i + 1].isalpha():
            out.append("\\!")
        else:
            out.append(char)
    return "".join(out)


class DocodecMarkdownRenderer(MarkdownRenderer):
    """Markdown renderer for tokens produced by the Markdown encoder."""

    def text(self, token: Dict[str, Any], state: BlockState) -> str:
        return escape_text(token["raw"])

    def strikethrough(self, token: Dict[str, Any], state: BlockState) -> str:
        return "~~" + self.render_children(token, state) + "~~"

    def paragraph(self, token: Dict[str, Any], state: BlockState) -> str:
        return self._protect_start(self.render_children(token, state)) + "\n\n"

    def block_text(self, token: Dict[str, Any], state: BlockState) -> str:
        return self._protect_start(self.render_children(token, state)) + "\n"

    def table(self, token: Dict[str, Any], state: BlockState) -> str:
        children = token.get("children", [])
        if not children:
            return ""
        head = children[0]
        head_cells = head.get("children", [])
        lines = [
            self._table_row(head_cells, state),
            "| " + " | ".join(self._delimiter(cell) for cell in head_cells) + " |",
        ]
        for body in children[1:]:
            for row in body.get("children", []):
                lines.append(self._table_row(row.get("children", []), state))
        return "\n".join(lines) + "\n\n"

    def _table_row(self, cells: Iterable[Dict[str, Any]], state: BlockState) -> str:
        rendered = [self.render_children(cell, state).replace("\n", " ").replace("|", "\\|").strip() for cell in cells]
        return "| " + " | ".join(rendered) + " |"

    @staticmethod
    def _delimiter(cell: Dict[str, Any]) -> str:
        align = cell.get("attrs", {}).get("align")
        return {"left": ":---", "center": ":---:", "right": "---:"}.get(align, "---")

    @staticmethod
    def _protect_start(text: str) -> str:
        # A leading "#", ">", "-" or "1." would start another block
        return _LEADING_BLOCK_MARKER.sub(lambda m: m.group(1)[:-1] + "\\" + m.group(1)[-1], text, count=1)


def render_tokens(tokens: list[Dict[str, Any]]) -> str:
    """Stringify block tokens to Markdown."""
    renderer = DocodecMarkdownRenderer()
    return renderer(tokens, BlockState())


def render_inline_token(token: Dict[str, Any]) -> str:
    """Stringify a single inline token (a link, image or code span)."""
    renderer = DocodecMarkdownRenderer()
    return renderer.render_token(token, BlockState())
