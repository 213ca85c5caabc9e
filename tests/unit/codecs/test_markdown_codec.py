#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the Markdown codec."""

import pytest

from docodec import vfile
from docodec.ast import (
    Article,
    CodeBlock,
    CodeChunk,
    CodeExpression,
    CodeFragment,
    Delete,
    Emphasis,
    Figure,
    Heading,
    ImageObject,
    Include,
    Link,
    List,
    ListItem,
    MathBlock,
    MathFragment,
    Paragraph,
    Person,
    Quote,
    QuoteBlock,
    Strong,
    Table,
    TableCell,
    TableRow,
    ThematicBreak,
)
from docodec.codecs.md import MarkdownCodec, decode_markdown, encode_markdown, parse_attributes, stringify_attributes
from docodec.exceptions import InvalidOptionsError
from docodec.options import MarkdownEncodeOptions


@pytest.mark.unit
class TestAttributes:
    """Tests for the {key=value} attribute syntax."""

    def test_parse(self):
        """Test values, quoted values and flags."""
        assert parse_attributes('lang=py label="a b" echo') == {"lang": "py", "label": "a b", "echo": ""}

    def test_parse_id_shorthand(self):
        """Test the #id shorthand."""
        assert parse_attributes("#intro") == {"id": "intro"}

    def test_stringify_quotes_when_needed(self):
        """Test quoting of values with spaces."""
        assert stringify_attributes({"label": "a b", "echo": "", "skip": None, "n": 2}) == 'label="a b" echo n=2'


@pytest.mark.unit
class TestDecodeDocument:
    """Tests for decoding standalone Markdown documents."""

    def test_title_from_first_heading(self):
        """Test that a leading H1 becomes the title."""
        article = decode_markdown("# Title\n\nIt is !true")
        assert article.title == "Title"
        assert article.content == [Paragraph(["It is ", True])]

    def test_front_matter(self, sample_markdown):
        """Test that YAML front matter fills article fields."""
        article = decode_markdown(sample_markdown)
        assert article.title == "Sample Document"
        assert article.authors == ["Jane Smith"]
        # With a front matter title the H1 stays in the content
        assert article.content[0] == Heading(["Introduction"], depth=1)

    def test_front_matter_nodes(self):
        """Test that typed front matter values become nodes."""
        text = (
            "---\ntitle: T\nauthors:\n  - type: Person\n    givenNames: [Jane]\n"
            "    familyNames: [Smith]\n---\n\nBody\n"
        )
        article = decode_markdown(text)
        assert article.authors == [Person(given_names=["Jane"], family_names=["Smith"])]
        assert article.content == [Paragraph(["Body"])]

    def test_unknown_front_matter_kept_in_extra(self):
        """Test that unknown front matter keys are kept."""
        article = decode_markdown("---\ntitle: T\nbibliography: refs.bib\n---\n\nBody\n")
        assert article.extra == {"bibliography": "refs.bib"}

    def test_front_matter_dates_become_strings(self):
        """Test that unquoted YAML dates decode to ISO strings."""
        article = decode_markdown(
            "---\ntitle: T\ndatePublished: 2020-01-01\nupdated: 2021-02-03 04:05:06\n---\n\nBody\n"
        )
        assert article.date_published == "2020-01-01"
        assert article.extra == {"updated": "2021-02-03T04:05:06"}

    def test_sample_blocks(self, sample_markdown):
        """Test the block structure of the sample document."""
        content = decode_markdown(sample_markdown).content
        assert content[1] == Paragraph(
            [
                "This is a ",
                Strong(["sample document"]),
                " with ",
                Emphasis(["italic text"]),
                " and some ",
                CodeFragment(text="inline code"),
                ".",
            ]
        )
        assert content[2] == List(
            items=[ListItem([Paragraph(["Item 1"])]), ListItem([Paragraph(["Item 2"])])], order="unordered"
        )
        assert content[3].order == "ascending"
        assert content[4] == CodeBlock(
            text='def hello_world():\n    print("Hello, World!")', programming_language="python"
        )
        assert content[5] == Table(
            rows=[
                TableRow(cells=[TableCell(["Header 1"]), TableCell(["Header 2"])]),
                TableRow(cells=[TableCell(["Row 1"]), TableCell(["Data 1"])]),
            ]
        )

    def test_fragment(self):
        """Test that non-standalone decoding returns blocks."""
        assert decode_markdown("a\n\nb", is_standalone=False) == [Paragraph(["a"]), Paragraph(["b"])]


@pytest.mark.unit
class TestDecodeInlines:
    """Tests for inline Markdown and extensions."""

    def _inlines(self, text):
        (para,) = decode_markdown(text, is_standalone=False)
        return para.content

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("!null", None),
            ("!true", True),
            ("!false", False),
            ("!boolean(false)", False),
            ("!number(42)", 42),
            ("!number(1.5)", 1.5),
            ("!array(1, 2)", [1, 2]),
            ("!object(a: 1)", {"a": 1}),
        ],
    )
    def test_primitive_extensions(self, text, expected):
        """Test extensions that decode to primitives."""
        assert self._inlines(f"Value: {text}") == ["Value: ", expected]

    def test_exclamation_inside_word_is_text(self):
        """Test that '!' after a letter is not an extension."""
        assert self._inlines("Hello!world") == ["Hello!world"]

    def test_extension_after_word_with_suffix(self):
        """Test that an extension directly after a letter is read when it has a suffix."""
        assert self._inlines("x!true{} and y!number(2)") == ["x", True, " and y", 2]

    def test_array_argument_with_parenthesis_in_string(self):
        """Test that ')' inside a quoted string does not end the argument."""
        assert self._inlines('!array("x)", 1)') == [["x)", 1]]

    def test_unknown_extension_warns(self, caplog):
        """Test that an unknown extension decodes to nothing and logs a warning."""
        with caplog.at_level("WARNING", logger="docodec.codecs.md"):
            content = self._inlines("See !foo[x] here")
        assert "".join(content) == "See  here"
        assert "Unhandled generic extension 'foo'" in caplog.text

    def test_quote_extension(self):
        """Test the inline quote extension."""
        assert self._inlines("!quote[to be](https://example.org)") == [
            Quote(["to be"], cite="https://example.org")
        ]

    def test_expression_extension(self):
        """Test the inline expression extension."""
        assert self._inlines("!expr[x * 2](r)") == [CodeExpression(text="x * 2", programming_language="r")]

    def test_code_expression_attributes(self):
        """Test code spans marked as expressions."""
        content = self._inlines("`x`{type=expr lang=r output=2}")
        assert content == [CodeExpression(text="x", programming_language="r", output=2)]

    def test_code_fragment_language(self):
        """Test the language attribute of code spans."""
        assert self._inlines("`print(1)`{lang=python}") == [
            CodeFragment(text="print(1)", programming_language="python")
        ]

    def test_link_and_image(self):
        """Test links with attributes and images."""
        content = self._inlines('[site](https://x.org "Title"){rel=next} ![alt](a.png)')
        assert content[0] == Link(content=["site"], target="https://x.org", title="Title", relation="next")
        assert content[2] == ImageObject(content_url="a.png", text="alt")

    def test_strikethrough_and_math(self):
        """Test strikethrough and inline math."""
        content = self._inlines("~~gone~~ and $x^2$")
        assert content == [Delete(["gone"]), " and ", MathFragment(text="x^2", math_language="tex")]

    def test_heading_id(self):
        """Test heading id attributes."""
        assert decode_markdown("## Methods {#methods}", is_standalone=False) == [
            Heading(["Methods"], depth=2, id="methods")
        ]

    def test_raw_html(self):
        """Test that inline HTML is decoded."""
        assert self._inlines("a <em>b</em>") == ["a ", Emphasis(["b"])]


@pytest.mark.unit
class TestDecodeBlockExtensions:
    """Tests for the chunk, figure and include block extensions."""

    def test_chunk_with_output(self):
        """Test a code chunk with one output."""
        text = "chunk:\n:::\n```python\nx = 1 + 1\n```\n\n!number(2)\n:::\n"
        (chunk,) = decode_markdown(text, is_standalone=False)
        assert chunk == CodeChunk(text="x = 1 + 1", programming_language="python", outputs=[2])

    def test_chunk_with_several_outputs(self):
        """Test that thematic breaks separate outputs."""
        text = "chunk:\n:::\n```r\nplot(x)\n```\n\nFirst\n\n---\n\nSecond\n:::\n"
        (chunk,) = decode_markdown(text, is_standalone=False)
        assert chunk.outputs == ["First", "Second"]

    def test_figure(self):
        """Test a figure with a label and caption."""
        text = "figure: Figure 1\n:::\n![](plot.png)\n\nA caption.\n:::\n"
        (figure,) = decode_markdown(text, is_standalone=False)
        assert figure == Figure(
            content=[Paragraph([ImageObject(content_url="plot.png")])],
            caption=[Paragraph(["A caption."])],
            label="Figure 1",
        )

    def test_include(self):
        """Test an include with decoded content."""
        text = "include: ./other.md\n:::\nIncluded text.\n:::\n"
        (include,) = decode_markdown(text, is_standalone=False)
        assert include == Include(source="./other.md", content=[Paragraph(["Included text."])])

    def test_block_math_and_quote(self):
        """Test display math and block quotes."""
        content = decode_markdown("$$\nE = mc^2\n$$\n\n> quoted\n", is_standalone=False)
        assert content == [
            MathBlock(text="E = mc^2", math_language="tex"),
            QuoteBlock(content=[Paragraph(["quoted"])]),
        ]


@pytest.mark.unit
class TestEncode:
    """Tests for encoding nodes to Markdown."""

    def test_number_extension(self):
        """Test that numbers are written as extensions."""
        assert encode_markdown(Paragraph(["Answer: ", 42])) == "Answer: !number(42)\n"

    def test_boolean_extension(self):
        """Test that booleans are written as extensions."""
        assert encode_markdown(Paragraph(["It is ", True])) == "It is !true\n"

    def test_heading(self):
        """Test heading output."""
        assert encode_markdown(Heading(["Intro"], depth=2)) == "## Intro\n"

    def test_deep_heading_capped(self):
        """Test that heading depth is capped at six."""
        assert encode_markdown(Heading(["Deep"], depth=9)) == "###### Deep\n"

    def test_whitespace_paragraph_dropped(self):
        """Test that blank paragraphs produce no output."""
        assert encode_markdown(Paragraph(["   "])) == ""

    def test_emphasis(self):
        """Test emphasis and strong output."""
        assert encode_markdown(Paragraph(["a ", Emphasis(["b"]), " ", Strong(["c"])])) == "a *b* **c**\n"

    def test_empty_marks_dropped(self):
        """Test that formatting without content is dropped."""
        assert encode_markdown(Paragraph(["a", Strong([])])) == "a\n"

    def test_front_matter(self):
        """Test front matter output for standalone articles."""
        article = Article(title="T", content=[Paragraph(["x"])])
        assert encode_markdown(article) == "---\ntitle: T\n---\n\nx\n"

    def test_front_matter_disabled(self):
        """Test that front matter can be turned off."""
        article = Article(title="T", content=[Paragraph(["x"])])
        assert encode_markdown(article, MarkdownEncodeOptions(front_matter=False)) == "x\n"
        assert encode_markdown(article, MarkdownEncodeOptions(is_standalone=False)) == "x\n"

    def test_text_escaped(self):
        """Test that literal Markdown characters are escaped."""
        markdown = encode_markdown(Paragraph(["*not emphasis* and !true"]))
        assert decode_markdown(markdown, is_standalone=False) == [Paragraph(["*not emphasis* and !true"])]

    def test_leading_block_marker_escaped(self):
        """Test that text starting with a block marker stays a paragraph."""
        markdown = encode_markdown(Paragraph(["# not a heading"]))
        assert decode_markdown(markdown, is_standalone=False) == [Paragraph(["# not a heading"])]

    def test_inline_runs_wrapped(self):
        """Test that bare inline content is written as a paragraph."""
        assert encode_markdown(["a", ThematicBreak(), "b"]) == "a\n\n***\n\nb\n"


@pytest.mark.unit
class TestRoundTrip:
    """Tests that decoding reverses encoding."""

    @pytest.mark.parametrize(
        "node",
        [
            Paragraph(["Value: ", None]),
            Paragraph(["Value: ", 1.5]),
            Paragraph(["Value: ", [1, 2]]),
            Paragraph(["Value: ", {"a": 1}]),
            Paragraph([False, " at start"]),
            Paragraph(["x", Delete(["y"])]),
            Paragraph(["x", True]),
            Paragraph(["It is ", False, "ly"]),
            Paragraph(["a ", ["x)", 1]]),
            Paragraph(["a ", {"k": "(x) y"}]),
            Heading(["Methods"], depth=2, id="methods"),
            CodeBlock(text="x = 1\ny = 2", programming_language="python"),
            CodeBlock(text="plot(x)", programming_language="r", meta={"label": "fig one"}),
            CodeChunk(text="x = 1 + 1", programming_language="python", outputs=[2]),
            QuoteBlock(content=[Paragraph(["quoted"])]),
            MathBlock(text="E = mc^2", math_language="tex"),
            List(items=[ListItem([Paragraph(["one"])]), ListItem([Paragraph(["two"])])], order="ascending"),
            Include(source="./other.md", content=[Paragraph(["Included."])]),
        ],
    )
    def test_block_round_trip(self, node):
        """Test that a block survives encoding and decoding."""
        assert decode_markdown(encode_markdown(node), is_standalone=False) == [node]

    def test_article_round_trip(self):
        """Test a whole article."""
        article = Article(
            title="A title",
            authors=[Person(given_names=["Jane"], family_names=["Smith"])],
            content=[
                Heading(["Intro"], depth=2),
                Paragraph(["Some ", Emphasis(["text"]), " with ", CodeFragment(text="code"), "."]),
                Table(
                    rows=[
                        TableRow(cells=[TableCell(["a"]), TableCell(["b"])]),
                        TableRow(cells=[TableCell(["1"]), TableCell(["2"])]),
                    ]
                ),
            ],
        )
        assert decode_markdown(encode_markdown(article)) == article


@pytest.mark.unit
class TestMarkdownCodec:
    """Tests for the codec wrapper."""

    def test_decode_vfile(self):
        """Test decoding a virtual file."""
        assert MarkdownCodec().decode(vfile.load("# Title")).title == "Title"

    def test_encode_media_type(self):
        """Test the media type of encoded output."""
        file = MarkdownCodec().encode(Paragraph(["x"]))
        assert file.contents == "x\n"
        assert file.media_type == "text/markdown"

    def test_wrong_options_type(self):
        """Test that another codec's options are rejected."""
        from docodec.options import HtmlEncodeOptions

        with pytest.raises(InvalidOptionsError):
            MarkdownCodec().encode(Paragraph(["x"]), HtmlEncodeOptions())
