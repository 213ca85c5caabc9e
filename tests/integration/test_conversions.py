#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# tests/integration/test_conversions.py
"""Integration tests converting documents across several codecs.

Each test chains decoding and encoding through more than one codec and
checks that the document structure survives the trip.
"""

import json

import pytest

from docodec import convert, dump, load, read, vfile, write
from docodec.ast import Article, CodeChunk, Datatable, Emphasis, Heading, Paragraph, Strong
from docodec.ast.utils import extract_text

MARKDOWN = """---
title: Round trips
---

## Methods

Some **strong** and *emphasised* text.

- one
- two

```python
print("hi")
```
"""


@pytest.mark.integration
class TestMarkdownConversions:
    """Tests for Markdown through the other document codecs."""

    @pytest.mark.parametrize("via", ["json", "yaml"])
    def test_lossless_round_trip(self, via):
        """Test that the serialization formats keep the tree exactly."""
        original = load(MARKDOWN, "md")
        assert load(dump(original, via), via) == original

    @pytest.mark.parametrize("via", ["jats", "html"])
    def test_round_trip_via(self, via):
        """Test that Markdown keeps its blocks and text through another format."""
        original = load(MARKDOWN, "md")
        again = load(dump(load(dump(original, via), via), "md"), "md")
        assert again.title == "Round trips"
        assert [type(block) for block in again.content] == [type(block) for block in original.content]
        assert [extract_text(block) for block in again.content] == [extract_text(block) for block in original.content]

    def test_notebook_round_trip(self):
        """Test that a notebook keeps prose and code cells apart."""
        article = Article(
            title="Notebook",
            content=[
                Heading(["Methods"], depth=2),
                Paragraph(["Some ", Strong(["strong"]), " and ", Emphasis(["emphasised"]), " text."]),
                CodeChunk(text='print("hi")', programming_language="python"),
            ],
        )
        notebook = dump(article, "ipynb")
        assert [cell["cell_type"] for cell in json.loads(notebook)["cells"]] == ["markdown", "code"]

        again = load(notebook, "ipynb")
        assert again.title == "Notebook"
        assert again.content == article.content

    def test_plain_text(self):
        """Test that plain text keeps the words in order."""
        text = convert(MARKDOWN, to="txt", from_="md")
        assert text.startswith("Round trips\n\nMethods\n\nSome strong and emphasised text.")


@pytest.mark.integration
class TestFileConversions:
    """Tests for converting between files on disk."""

    def test_csv_to_xlsx_to_csv(self, temp_dir):
        """Test tabular data through a workbook."""
        source = temp_dir / "data.csv"
        source.write_text("name,score\nann,1.5\nbob,2\n")
        workbook = temp_dir / "data.xlsx"

        assert convert(str(source), str(workbook)) == str(workbook)
        assert workbook.read_bytes()[:2] == b"PK"
        assert convert(str(workbook), to="csv") == "name,score\nann,1.5\nbob,2\n"

    def test_csv_to_markdown_table(self, temp_dir):
        """Test that a datatable decoded from CSV is written as a Markdown table."""
        source = temp_dir / "data.csv"
        source.write_text("a,b\n1,2\n")
        node = read(str(source))
        assert isinstance(node, Datatable)
        markdown = dump(node, "md")
        assert "| a | b |" in markdown

    def test_write_and_read(self, temp_dir):
        """Test writing an article to each text format and reading it back."""
        article = Article(title="Saved", content=[Paragraph(["Body ", Strong(["text"])])])
        for extension in ("md", "jats", "html", "json", "yaml"):
            path = temp_dir / f"saved.{extension}"
            write(article, str(path))
            again = read(str(path))
            assert again.title == "Saved", extension
            assert again.content == article.content, extension

    def test_markdown_to_pdf(self, temp_dir):
        """Test rendering a Markdown file to PDF."""
        source = temp_dir / "doc.md"
        source.write_text(MARKDOWN)
        target = temp_dir / "doc.pdf"
        assert convert(str(source), str(target)) == str(target)
        assert vfile.read(str(target)).as_bytes().startswith(b"%PDF")

    def test_rmarkdown_to_notebook(self, temp_dir):
        """Test that R Markdown chunks become notebook code cells."""
        source = temp_dir / "analysis.rmd"
        source.write_text("# Analysis\n\n```{r setup}\nx <- 1\n```\n")
        cells = json.loads(convert(str(source), to="ipynb"))["cells"]
        assert cells[-1]["cell_type"] == "code"
        assert cells[-1]["source"] == ["x <- 1"]
