#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/ast/serialization.py
"""JSON serialization and deserialization for document trees.

Trees are converted to plain dicts with camelCase keys and a ``"type"`` key
on every node, e.g.::

    {"type": "CodeBlock", "text": "x = 1", "programmingLanguage": "python"}

``None`` fields are omitted, primitives pass through unchanged, and dicts
without a known ``"type"`` stay plain objects. ``Article.extra`` entries are
written at the top level of the article and read back into ``extra``.

Examples
--------
    >>> from docodec.ast import Article, Heading
    >>> from docodec.ast.serialization import ast_to_json, json_to_ast
    >>> json_str = ast_to_json(Article(title="Title", content=[Heading(["Intro"], depth=2)]), indent=2)
    >>> json_to_ast(json_str).content[0].depth
    2

"""

from __future__ import annotations

import datetime
import json
import logging
import re
from dataclasses import fields
from typing import Any

from docodec.ast import nodes
from docodec.ast.nodes import Article, Node

logger = logging.getLogger(__name__)

# Field names that do not follow the plain camelCase rule
_SPECIAL_KEYS = {"property_id": "propertyID"}
_SPECIAL_FIELDS = {value: key for key, value in _SPECIAL_KEYS.items()}

_NODE_CLASSES: dict[str, type[Node]] = {
    name: cls
    for name, cls in vars(nodes).items()
    if isinstance(cls, type) and issubclass(cls, Node) and cls is not Node
}


def _to_camel(name: str) -> str:
    if name in _SPECIAL_KEYS:
        return _SPECIAL_KEYS[name]
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _to_snake(name: str) -> str:
    if name in _SPECIAL_FIELDS:
        return _SPECIAL_FIELDS[name]
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def ast_to_dict(value: Any) -> Any:
    """Convert a node, primitive or list to plain JSON-compatible data.

    Parameters
    ----------
    value : Any
        Node or primitive

    Returns
    -------
    Any
        ``dict`` for nodes and objects, ``list`` for arrays, the value itself
        for other primitives

    """
    if isinstance(value, Node):
        result: dict[str, Any] = {"type": value.type}
        for f in fields(value):
            field_value = getattr(value, f.name)
            if f.name == "extra":
                for key, extra_value in field_value.items():
                    result.setdefault(key, ast_to_dict(extra_value))
                continue
            if field_value is None:
                continue
            result[_to_camel(f.name)] = ast_to_dict(field_value)
        return result
    if isinstance(value, list):
        return [ast_to_dict(item) for item in value]
    if isinstance(value, dict):
        return {key: ast_to_dict(item) for key, item in value.items()}
    return value


def dict_to_ast(data: Any, strict_mode: bool = False) -> Any:
    """Convert plain data back to nodes.

    Parameters
    ----------
    data : Any
        Output of :func:`ast_to_dict` or equivalent JSON/YAML data
    strict_mode : bool, default False
        If True, raise ValueError on unknown keys of non-Article nodes.
        If False, log a warning and drop them.

    Returns
    -------
    Any
        Node, primitive or list. ``date`` and ``datetime`` values, as YAML
        loads them, become ISO 8601 strings.

    Raises
    ------
    ValueError
        If ``strict_mode`` is set and a node has unknown keys, or a node's
        own validation fails

    Examples
    --------
    >>> dict_to_ast({"type": "Emphasis", "content": ["hi"]})
    Emphasis(content=['hi'])
    >>> dict_to_ast({"a": 1})
    {'a': 1}

    """
    if isinstance(data, datetime.date):
        # YAML loads bare timestamps as dates
        return data.isoformat()
    if isinstance(data, list):
        return [dict_to_ast(item, strict_mode) for item in data]
    if not isinstance(data, dict):
        return data

    cls = _NODE_CLASSES.get(data.get("type")) if isinstance(data.get("type"), str) else None
    if cls is None:
        return {key: dict_to_ast(value, strict_mode) for key, value in data.items()}

    field_names = {f.name for f in fields(cls)}
    kwargs: dict[str, Any] = {}
    extra: dict[str, Any] = {}
    for key, value in data.items():
        if key == "type":
            continue
        name = _to_snake(key)
        if name in field_names and name != "extra":
            kwargs[name] = dict_to_ast(value, strict_mode)
        elif cls is Article:
            extra[key] = dict_to_ast(value, strict_mode)
        elif strict_mode:
            raise ValueError(f"Unknown property '{key}' for node type {cls.__name__}")
        else:
            logger.warning(f"Dropping unknown property '{key}' of {cls.__name__} node")
    if extra:
        kwargs["extra"] = extra
    return cls(**kwargs)


def ast_to_json(value: Any, indent: int | None = None) -> str:
    """Serialize a node to a JSON string.

    Unicode characters are preserved without escape sequences.
    """
    return json.dumps(ast_to_dict(value), indent=indent, ensure_ascii=False)


def json_to_ast(json_str: str, strict_mode: bool = False) -> Any:
    """Deserialize a JSON string to a node.

    Raises
    ------
    ValueError
        If the JSON is invalid (``json.JSONDecodeError``) or describes an
        invalid node

    """
    return dict_to_ast(json.loads(json_str), strict_mode=strict_mode)
