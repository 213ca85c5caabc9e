#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the XMarkdown (R Markdown) codec."""

import pytest

from docodec import vfile
from docodec.ast import Article, CodeChunk, CodeExpression, Paragraph
from docodec.codecs.xmd import (
    XmdCodec,
    md_to_xmd,
    parse_chunk_options,
    stringify_chunk_options,
    xmd_to_md,
)
from docodec.options import MarkdownEncodeOptions

SOURCE = """# Analysis

The answer is `r x + 1`.

```{r plot1, echo=FALSE}
plot(x)
```
"""


@pytest.mark.unit
class TestChunkOptions:
    """Tests for R Markdown chunk options."""

    def test_label_and_options(self):
        """Test that a first bare option is the label."""
        assert parse_chunk_options(" plot1, echo=FALSE") == {"label": "plot1", "echo": "FALSE"}

    def test_options_only(self):
        """Test options without a label."""
        assert parse_chunk_options("echo=FALSE, fig.width=7") == {"echo": "FALSE", "fig.width": "7"}

    def test_empty(self):
        """Test chunks without options."""
        assert parse_chunk_options("") == {}

    def test_stringify(self):
        """Test writing options back."""
        assert stringify_chunk_options({"label": "plot1", "echo": "FALSE"}) == "plot1, echo=FALSE"
        assert stringify_chunk_options({"echo": "FALSE"}) == "echo=FALSE"


@pytest.mark.unit
class TestRewriting:
    """Tests for rewriting between R Markdown and Markdown."""

    def test_inline_expression(self):
        """Test that inline code in a known language is an expression."""
        assert xmd_to_md("The answer is `r x + 1`.") == "The answer is `x + 1`{type=expr lang=r}."

    def test_other_code_spans_untouched(self):
        """Test that ordinary code spans are left alone."""
        assert xmd_to_md("Use `print(x)` here.") == "Use `print(x)` here."

    def test_chunk(self):
        """Test that fenced chunks become chunk extensions."""
        md = xmd_to_md("```{r plot1, echo=FALSE}\nplot(x)\n```\n")
        assert md == "chunk:\n:::\n```r label=plot1 echo=FALSE\nplot(x)\n```\n:::\n"

    def test_plain_fences_untouched(self):
        """Test that ordinary code blocks are left alone."""
        text = "```python\nprint(1)\n```\n"
        assert xmd_to_md(text) == text

    def test_back_to_xmd(self):
        """Test the reverse rewriting."""
        md = "chunk:\n:::\n```r label=plot1 echo=FALSE\nplot(x)\n```\n:::\n\nSee `x`{type=expr lang=r}.\n"
        assert md_to_xmd(md) == "```{r plot1, echo=FALSE}\nplot(x)\n```\n\nSee `r x`.\n"


@pytest.mark.unit
class TestXmdCodec:
    """Tests for decoding and encoding R Markdown."""

    def test_decode(self):
        """Test chunks and expressions in a document."""
        article = XmdCodec().decode(vfile.load(SOURCE))
        assert article.title == "Analysis"
        assert article.content == [
            Paragraph(["The answer is ", CodeExpression(text="x + 1", programming_language="r"), "."]),
            CodeChunk(text="plot(x)", programming_language="r", meta={"label": "plot1", "echo": "FALSE"}),
        ]

    def test_encode(self):
        """Test that chunks and expressions are written in R Markdown syntax."""
        article = Article(
            content=[
                Paragraph(["Value ", CodeExpression(text="x", programming_language="r")]),
                CodeChunk(text="plot(x)", programming_language="r", meta={"label": "plot1"}),
            ]
        )
        xmd = vfile.dump(XmdCodec().encode(article, MarkdownEncodeOptions(is_standalone=False)))
        assert "Value `r x`" in xmd
        assert "```{r plot1}\nplot(x)\n```" in xmd
        assert "chunk:" not in xmd

    def test_round_trip(self):
        """Test decoding what was encoded."""
        codec = XmdCodec()
        article = codec.decode(vfile.load(SOURCE))
        file = codec.encode(article)
        assert file.media_type == "text/x-rmarkdown"
        again = codec.decode(file)
        assert again.title == article.title
        assert again.content == article.content
