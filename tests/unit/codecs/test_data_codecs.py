#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the plain text, JSON and YAML codecs."""

import json

import pytest

from docodec import vfile
from docodec.ast import (
    Article,
    Datatable,
    DatatableColumn,
    Emphasis,
    Heading,
    List,
    ListItem,
    Paragraph,
    Table,
    TableCell,
    TableRow,
)
from docodec.codecs.json import JsonCodec
from docodec.codecs.txt import TxtCodec, encode_text
from docodec.codecs.yaml import YamlCodec
from docodec.exceptions import MalformedInputError

ARTICLE = Article(
    title="Title",
    content=[Heading(["Section"], depth=2), Paragraph(["Some ", Emphasis(["text"]), "."])],
)


@pytest.mark.unit
class TestTxtCodec:
    """Tests for the plain text codec."""

    def test_decode_returns_string(self):
        """Test that decoding returns the text unchanged."""
        assert TxtCodec().decode(vfile.load("Hello\nworld")) == "Hello\nworld"

    def test_encode_article(self):
        """Test that blocks are separated by blank lines."""
        assert encode_text(ARTICLE) == "Title\n\nSection\n\nSome text."

    def test_encode_list(self):
        """Test one line per list item."""
        node = List(items=[ListItem([Paragraph(["a"])]), ListItem([Paragraph(["b"])])])
        assert encode_text(node) == "a\nb"

    def test_encode_table(self):
        """Test tab separated table rows."""
        table = Table(
            rows=[
                TableRow([TableCell(["A"]), TableCell(["B"])]),
                TableRow([TableCell(["1"]), TableCell(["2"])]),
            ]
        )
        assert encode_text(table) == "A\tB\n1\t2"

    def test_encode_datatable(self):
        """Test column names followed by values."""
        datatable = Datatable(columns=[DatatableColumn(name="a", values=["x", "y"])])
        assert encode_text(datatable) == "a\nx\ny"

    def test_encode_media_type(self):
        """Test the codec entry point."""
        file = TxtCodec().encode(Paragraph(["x"]))
        assert file.media_type == "text/plain"
        assert vfile.dump(file) == "x"


@pytest.mark.unit
class TestJsonCodec:
    """Tests for the JSON codec."""

    def test_sniff(self):
        """Test recognising JSON content."""
        codec = JsonCodec()
        assert codec.sniff('{"type": "Paragraph"}')
        assert codec.sniff("  [1, 2]")
        assert not codec.sniff("# Heading")

    def test_encode(self):
        """Test the node serialization."""
        file = JsonCodec().encode(Paragraph(["x"]))
        assert file.media_type == "application/json"
        assert json.loads(vfile.dump(file)) == {"type": "Paragraph", "content": ["x"]}

    def test_decode(self):
        """Test decoding typed objects to nodes."""
        node = JsonCodec().decode(vfile.load('{"type": "Emphasis", "content": ["hi"]}'))
        assert node == Emphasis(["hi"])

    def test_decode_plain_values(self):
        """Test that JSON without node types decodes to plain values."""
        assert JsonCodec().decode(vfile.load('{"a": [1, true, null]}')) == {"a": [1, True, None]}

    def test_round_trip(self):
        """Test decoding an encoded article."""
        codec = JsonCodec()
        assert codec.decode(codec.encode(ARTICLE)) == ARTICLE

    def test_invalid_json(self):
        """Test that invalid JSON raises."""
        with pytest.raises(MalformedInputError):
            JsonCodec().decode(vfile.load("{nope"))

    def test_invalid_node(self):
        """Test that JSON describing an invalid node raises."""
        with pytest.raises(MalformedInputError):
            JsonCodec().decode(vfile.load('{"type": "Heading", "content": ["x"], "depth": 0}'))


@pytest.mark.unit
class TestYamlCodec:
    """Tests for the YAML codec."""

    def test_encode(self):
        """Test block style output in field order."""
        text = vfile.dump(YamlCodec().encode(Paragraph(["x"])))
        assert text == "type: Paragraph\ncontent:\n- x\n"

    def test_round_trip(self):
        """Test decoding an encoded article."""
        codec = YamlCodec()
        file = codec.encode(ARTICLE)
        assert file.media_type == "text/yaml"
        assert codec.decode(file) == ARTICLE

    def test_unquoted_date_decodes_to_string(self):
        """Test that a bare YAML date survives re-encoding as JSON."""
        article = YamlCodec().decode(vfile.load("type: Article\ndatePublished: 2020-01-01\n"))
        assert article.date_published == "2020-01-01"
        assert json.loads(vfile.dump(JsonCodec().encode(article)))["datePublished"] == "2020-01-01"

    def test_invalid_yaml(self):
        """Test that invalid YAML raises."""
        with pytest.raises(MalformedInputError):
            YamlCodec().decode(vfile.load("a: [unclosed"))
