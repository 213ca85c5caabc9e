#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for document tree JSON serialization."""

import datetime
import json

import pytest

from docodec.ast import (
    Article,
    CodeBlock,
    Emphasis,
    Heading,
    Paragraph,
    Person,
    PropertyValue,
    ast_to_dict,
    ast_to_json,
    dict_to_ast,
    json_to_ast,
)


@pytest.mark.unit
class TestAstToDict:
    """Tests for converting nodes to plain data."""

    def test_camel_case_keys_and_type(self):
        """Test that snake_case fields become camelCase keys."""
        data = ast_to_dict(CodeBlock(text="x = 1", programming_language="python"))
        assert data == {"type": "CodeBlock", "text": "x = 1", "programmingLanguage": "python"}

    def test_none_fields_are_omitted(self):
        """Test that unset optional fields do not appear."""
        data = ast_to_dict(Heading(["Intro"], depth=2))
        assert "id" not in data
        assert data["depth"] == 2

    def test_property_id_key(self):
        """Test the irregular propertyID key."""
        data = ast_to_dict(PropertyValue(value="10.1/x", name="doi", property_id="https://doi.org"))
        assert data["propertyID"] == "https://doi.org"

    def test_primitives_pass_through(self):
        """Test primitives inside content."""
        data = ast_to_dict(Paragraph(["a", True, None, 1.5, [1, 2], {"k": "v"}]))
        assert data["content"] == ["a", True, None, 1.5, [1, 2], {"k": "v"}]

    def test_article_extra_at_top_level(self):
        """Test that extra article properties are flattened."""
        data = ast_to_dict(Article(title="T", extra={"customKey": [1, 2]}))
        assert data["customKey"] == [1, 2]
        assert "extra" not in data

    def test_extra_does_not_override_fields(self):
        """Test that a field wins over an extra entry with the same key."""
        data = ast_to_dict(Article(title="Real", extra={"title": "Fake"}))
        assert data["title"] == "Real"


@pytest.mark.unit
class TestDictToAst:
    """Tests for rebuilding nodes from plain data."""

    def test_known_type(self):
        """Test decoding a node dict."""
        assert dict_to_ast({"type": "Emphasis", "content": ["hi"]}) == Emphasis(["hi"])

    def test_unknown_type_stays_object(self):
        """Test that dicts with unknown types are plain objects."""
        data = {"type": "Spaceship", "name": "x"}
        assert dict_to_ast(data) == data

    def test_nested_nodes(self):
        """Test that nested dicts are decoded recursively."""
        article = dict_to_ast(
            {
                "type": "Article",
                "title": "T",
                "authors": [{"type": "Person", "givenNames": ["Jane"], "familyNames": ["Smith"]}],
                "content": [{"type": "Paragraph", "content": ["Hello"]}],
            }
        )
        assert article.authors == [Person(given_names=["Jane"], family_names=["Smith"])]
        assert article.content == [Paragraph(["Hello"])]

    def test_unknown_article_keys_go_to_extra(self):
        """Test that article properties outside the schema are kept."""
        article = dict_to_ast({"type": "Article", "title": "T", "customKey": 1})
        assert article.extra == {"customKey": 1}

    def test_dates_become_iso_strings(self):
        """Test that date and datetime values read from YAML become strings."""
        article = dict_to_ast(
            {
                "type": "Article",
                "datePublished": datetime.date(2020, 1, 1),
                "history": [datetime.datetime(2021, 2, 3, 4, 5, 6)],
            }
        )
        assert article.date_published == "2020-01-01"
        assert article.extra == {"history": ["2021-02-03T04:05:06"]}

    def test_unknown_node_keys_dropped_with_warning(self, caplog):
        """Test lenient handling of unknown properties."""
        node = dict_to_ast({"type": "Paragraph", "content": ["x"], "colour": "red"})
        assert node == Paragraph(["x"])
        assert "colour" in caplog.text

    def test_unknown_node_keys_strict(self):
        """Test strict handling of unknown properties."""
        with pytest.raises(ValueError, match="colour"):
            dict_to_ast({"type": "Paragraph", "content": ["x"], "colour": "red"}, strict_mode=True)

    def test_invalid_node_raises(self):
        """Test that node validation applies while decoding."""
        with pytest.raises(ValueError):
            dict_to_ast({"type": "Heading", "content": ["x"], "depth": 0})


@pytest.mark.unit
class TestJson:
    """Tests for JSON string conversion."""

    def test_json_round_trip(self):
        """Test that a tree survives JSON serialization."""
        article = Article(
            title="Title",
            authors=[Person(given_names=["Jane"], family_names=["Smith"])],
            content=[Heading(["Intro"], depth=2), Paragraph(["It is ", True])],
        )
        assert json_to_ast(ast_to_json(article, indent=2)) == article

    def test_unicode_not_escaped(self):
        """Test that non-ASCII characters are written as-is."""
        assert "é" in ast_to_json(Paragraph(["café"]))

    def test_invalid_json_raises(self):
        """Test that invalid JSON raises a ValueError subclass."""
        with pytest.raises(json.JSONDecodeError):
            json_to_ast("{not json")
