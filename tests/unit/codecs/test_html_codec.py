#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the HTML codec."""

import pytest

from docodec import vfile
from docodec.ast import (
    Article,
    Cite,
    CodeBlock,
    Datatable,
    DatatableColumn,
    Heading,
    List,
    ListItem,
    MathFragment,
    Paragraph,
    Strong,
    Table,
    TableCell,
    TableRow,
)
from docodec.codecs.html import HtmlCodec, HtmlDecoder, decode_fragment, encode_html
from docodec.exceptions import InvalidOptionsError
from docodec.options import HtmlEncodeOptions
from docodec.options.base import BaseDecodeOptions

FRAGMENT = HtmlEncodeOptions(is_standalone=False)


@pytest.mark.unit
class TestDecodeDocument:
    """Tests for decoding complete HTML documents."""

    def test_title_and_blocks(self):
        """Test the <title> element and block content."""
        html = (
            "<!DOCTYPE html><html><head><title>My Doc</title></head><body>"
            '<h2 id="intro">Intro</h2><p>Some <strong>bold</strong> text.</p>'
            "</body></html>"
        )
        article = HtmlDecoder().decode_document(html)
        assert article.title == "My Doc"
        assert article.content == [
            Heading(["Intro"], depth=2, id="intro"),
            Paragraph(["Some ", Strong(["bold"]), " text."]),
        ]

    def test_headline_becomes_title(self):
        """Test that an itemprop headline is taken as the title."""
        html = '<html><body><h1 itemprop="headline">Headline</h1><p>Body</p></body></html>'
        article = HtmlDecoder().decode_document(html)
        assert article.title == "Headline"
        assert article.content == [Paragraph(["Body"])]

    def test_leading_h1_becomes_title(self):
        """Test that a leading level one heading is taken as the title."""
        article = HtmlDecoder().decode_document("<html><body><h1>First</h1><p>x</p></body></html>")
        assert article.title == "First"
        assert article.content == [Paragraph(["x"])]

    def test_json_ld_metadata(self):
        """Test that a JSON-LD block supplies article metadata."""
        html = (
            '<html><head><script type="application/ld+json">'
            '{"@context": "https://schema.org", "@type": "Article", '
            '"headline": "LD title", "datePublished": "2020-01-01"}'
            "</script></head><body><p>x</p></body></html>"
        )
        article = HtmlDecoder().decode_document(html)
        assert article.title == "LD title"
        assert article.date_published == "2020-01-01"

    def test_invalid_json_ld_ignored(self):
        """Test that broken JSON-LD does not stop decoding."""
        html = (
            '<html><head><title>T</title><script type="application/ld+json">{nope</script></head>'
            "<body><p>x</p></body></html>"
        )
        article = HtmlDecoder().decode_document(html)
        assert article.title == "T"
        assert article.content == [Paragraph(["x"])]

    def test_task_list(self):
        """Test list items with checkboxes."""
        html = '<html><body><ul><li>One</li><li><input type="checkbox" checked> Two</li></ul></body></html>'
        article = HtmlDecoder().decode_document(html)
        assert article.content == [
            List(
                items=[
                    ListItem([Paragraph(["One"])]),
                    ListItem([Paragraph(["Two"])], is_checked=True),
                ],
                order="unordered",
            )
        ]

    def test_reversed_ordered_list(self):
        """Test that a reversed <ol> is a descending list."""
        article = HtmlDecoder().decode_document("<html><body><ol reversed><li>a</li></ol></body></html>")
        assert article.content[0].order == "descending"

    def test_scripts_and_styles_skipped(self):
        """Test that non-content elements are dropped."""
        html = "<html><body><style>p {}</style><p>x</p><script>alert(1)</script></body></html>"
        assert HtmlDecoder().decode_document(html).content == [Paragraph(["x"])]


@pytest.mark.unit
class TestDecodeFragment:
    """Tests for decoding HTML fragments."""

    def test_single_paragraph(self):
        """Test that a single block is returned unwrapped."""
        assert decode_fragment("<p>Hello <strong>world</strong></p>") == Paragraph(["Hello ", Strong(["world"])])

    def test_several_blocks(self):
        """Test that several blocks are returned as a list."""
        assert decode_fragment("<p>a</p><p>b</p>") == [Paragraph(["a"]), Paragraph(["b"])]

    def test_empty_fragment(self):
        """Test that a fragment without content decodes to an empty string."""
        assert decode_fragment("<!-- nothing -->") == ""

    def test_code_block_language(self):
        """Test the language class of code blocks."""
        node = decode_fragment('<pre><code class="language-python">x = 1</code></pre>')
        assert node == CodeBlock(text="x = 1", programming_language="python")

    def test_primitives(self):
        """Test that <data> elements decode to Python values."""
        html = (
            "<p>"
            '<data itemtype="https://schema.org/Boolean" value="true">true</data>'
            '<data itemtype="https://schema.org/Number" value="42">42</data>'
            '<data itemtype="https://schema.org/Null" value="null">null</data>'
            "</p>"
        )
        assert decode_fragment(html) == Paragraph([True, 42, None])

    def test_cite(self):
        """Test that a cite linking to an anchor is a citation."""
        paragraph = decode_fragment('<p>See <cite><a href="#bib1">bib1</a></cite></p>')
        assert paragraph.content == ["See ", Cite(target="bib1")]


@pytest.mark.unit
class TestEncode:
    """Tests for encoding HTML."""

    def test_standalone_document(self):
        """Test the document wrapper."""
        html = encode_html(Article(title="Hello", content=[Paragraph(["World"])]))
        assert html.startswith("<!DOCTYPE html>\n")
        assert '<html lang="en">' in html
        assert "<title>Hello</title>" in html
        assert '<h1 itemprop="headline">Hello</h1>' in html
        assert "<p>World</p>" in html

    def test_fragment(self):
        """Test that fragments have no wrapper."""
        html = encode_html(Article(title="Hello", content=[Paragraph(["World"])]), FRAGMENT)
        assert html == "<p>World</p>\n"

    def test_options_override_title_and_lang(self):
        """Test the title and lang options."""
        html = encode_html(Article(title="Hello"), HtmlEncodeOptions(title="Other", lang="fr"))
        assert '<html lang="fr">' in html
        assert "<title>Other</title>" in html

    def test_json_ld_written(self):
        """Test that article metadata is written as JSON-LD."""
        html = encode_html(Article(title="T", date_published="2021-05-04"))
        assert '<script type="application/ld+json">' in html
        assert '"datePublished": "2021-05-04"' in html

    def test_text_escaped(self):
        """Test that text is escaped."""
        assert encode_html(Paragraph(["a < b & c"]), FRAGMENT) == "<p>a &lt; b &amp; c</p>\n"

    def test_primitive_as_data(self):
        """Test that primitives are written as <data> elements."""
        html = encode_html(Paragraph(["It is ", True]), FRAGMENT)
        assert html == '<p>It is <data itemtype="https://schema.org/Boolean" value="true">true</data></p>\n'

    def test_deep_heading(self):
        """Test that headings deeper than six keep their depth."""
        html = encode_html(Heading(["Deep"], depth=8), FRAGMENT)
        assert html == '<h6 data-depth="8">Deep</h6>\n'

    def test_table_head_and_body(self):
        """Test that the first row is the header."""
        table = Table(rows=[TableRow([TableCell(["A"])]), TableRow([TableCell(["1"])])])
        html = encode_html(table, FRAGMENT)
        assert "<thead>\n<tr><th>A</th></tr>\n</thead>" in html
        assert "<tbody>\n<tr><td>1</td></tr>\n</tbody>" in html

    def test_cite(self):
        """Test citations link to their target."""
        assert encode_html(Cite(target="bib1"), FRAGMENT) == '<cite><a href="#bib1">bib1</a></cite>'


@pytest.mark.unit
class TestRoundTrip:
    """Tests that encoding then decoding preserves content."""

    def test_article(self):
        """Test an article with several kinds of block."""
        table = Table(
            rows=[
                TableRow([TableCell(["A"]), TableCell(["B"])]),
                TableRow([TableCell(["1"]), TableCell(["2"])]),
            ]
        )
        article = Article(
            title="Hello",
            content=[
                Heading(["Section"], depth=2),
                Paragraph(["Some ", Strong(["strong"]), " text and ", MathFragment(text="x^2"), "."]),
                CodeBlock(text="print(1)\n", programming_language="python"),
                table,
            ],
        )
        decoded = HtmlDecoder().decode_document(encode_html(article))
        assert decoded.title == "Hello"
        assert decoded.content == [
            Heading(["Section"], depth=2),
            Paragraph(
                ["Some ", Strong(["strong"]), " text and ", MathFragment(text="x^2", math_language="tex"), "."]
            ),
            CodeBlock(text="print(1)\n", programming_language="python"),
            table,
        ]

    def test_datatable(self):
        """Test that datatable values survive as primitives."""
        datatable = Datatable(
            columns=[
                DatatableColumn(name="n", values=[1, 2.5]),
                DatatableColumn(name="ok", values=[True, False]),
            ]
        )
        assert decode_fragment(encode_html(datatable, FRAGMENT)) == datatable


@pytest.mark.unit
class TestHtmlCodec:
    """Tests for the codec class."""

    def test_sniff(self):
        """Test recognising HTML documents."""
        codec = HtmlCodec()
        assert codec.sniff("<!DOCTYPE html>\n<html>")
        assert codec.sniff("  <html lang='en'>")
        assert not codec.sniff("<p>Just a paragraph</p>")
        assert not codec.sniff("# Markdown")

    def test_decode_fragment_option(self):
        """Test that non-standalone decoding returns a fragment."""
        node = HtmlCodec().decode(vfile.load("<p>x</p>"), BaseDecodeOptions(is_standalone=False))
        assert node == Paragraph(["x"])

    def test_decode_standalone(self):
        """Test that standalone decoding returns an Article."""
        node = HtmlCodec().decode(vfile.load("<html><body><p>x</p></body></html>"))
        assert isinstance(node, Article)

    def test_encode_media_type(self):
        """Test the media type of encoded files."""
        file = HtmlCodec().encode(Paragraph(["x"]), FRAGMENT)
        assert file.media_type == "text/html"
        assert vfile.dump(file) == "<p>x</p>\n"

    def test_wrong_options_type(self):
        """Test that options for another codec are rejected."""
        with pytest.raises(InvalidOptionsError):
            HtmlCodec().encode(Paragraph(["x"]), BaseDecodeOptions())

    def test_invalid_lang(self):
        """Test option validation."""
        with pytest.raises(ValueError):
            HtmlEncodeOptions(lang="")
