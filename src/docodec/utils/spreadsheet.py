#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/docodec/utils/spreadsheet.py
"""Shared utilities for the spreadsheet codecs (CSV, XLSX).

Both codecs read a grid of cell values and map it the same way:

- a grid without formulas becomes a ``Datatable``; the first row names the
  columns and the remaining rows become typed column values
- a grid with at least one formula (a string starting with ``=``) becomes a
  ``Table`` whose cells are named (``A1``) and positioned (``[column, row]``),
  with each formula held in a ``CodeExpression`` of language ``excel``

Encoding goes back to a grid from the first ``Datatable`` or ``Table`` in a
tree.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Optional, Union

from docodec.ast.nodes import (
    Article,
    CodeExpression,
    Collection,
    Datatable,
    DatatableColumn,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    get_node_children,
)
from docodec.ast.utils import extract_text, is_primitive
from docodec.exceptions import RenderingError

logger = logging.getLogger(__name__)

Grid = list[list[Any]]

FORMULA_LANGUAGE = "excel"

_INT_PATTERN = re.compile(r"^[-+]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[-+]?(\d+\.\d*|\.\d+|\d+)([eE][-+]?\d+)?$")


def column_letter(index: int) -> str:
    """Spreadsheet column name of a zero-based column index.

    Examples
    --------
    >>> column_letter(0), column_letter(25), column_letter(26)
    ('A', 'Z', 'AA')

    """
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters


def cell_name(column: int, row: int) -> str:
    """Spreadsheet name (``B3``) of zero-based ``column`` and ``row`` indices."""
    return f"{column_letter(column)}{row + 1}"


def parse_cell_value(text: str) -> Any:
    """Parse a textual cell into a primitive.

    Empty cells are None, integers and decimals become numbers and
    ``true``/``false`` (any case) become booleans; anything else stays text.

    Examples
    --------
    >>> [parse_cell_value(v) for v in ["", "42", "1.5", "TRUE", "abc"]]
    [None, 42, 1.5, True, 'abc']

    """
    if text == "":
        return None
    stripped = text.strip()
    if _INT_PATTERN.match(stripped):
        return int(stripped)
    if _FLOAT_PATTERN.match(stripped):
        return float(stripped)
    lowered = stripped.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    return text


def is_formula(value: Any) -> bool:
    return isinstance(value, str) and len(value) > 1 and value.startswith("=")


def _trim_grid(rows: Grid) -> Grid:
    """Drop trailing empty rows and pad rows to a common width."""
    rows = [list(row) for row in rows]
    while rows and all(value is None or value == "" for value in rows[-1]):
        rows.pop()
    width = max((len(row) for row in rows), default=0)
    return [row + [None] * (width - len(row)) for row in rows]


def grid_to_node(rows: Grid, name: Optional[str] = None) -> Union[Datatable, Table]:
    """Map a grid of cell values to a ``Datatable`` or, with formulas, a ``Table``.

    Parameters
    ----------
    rows : list of list
        Cell values, row major. Strings starting with ``=`` are formulas.
    name : str, optional
        Name given to a ``Datatable``

    """
    rows = _trim_grid(rows)
    if any(is_formula(value) for row in rows for value in row):
        return _grid_to_table(rows)
    return _grid_to_datatable(rows, name)


def _grid_to_datatable(rows: Grid, name: Optional[str]) -> Datatable:
    if not rows:
        return Datatable(name=name)
    header, body = rows[0], rows[1:]
    columns = []
    for index, heading in enumerate(header):
        column_name = str(heading) if heading not in (None, "") else column_letter(index)
        columns.append(DatatableColumn(name=column_name, values=[row[index] for row in body]))
    return Datatable(name=name, columns=columns)


def _grid_to_table(rows: Grid) -> Table:
    table_rows = []
    for row_index, row in enumerate(rows):
        cells = []
        for column_index, value in enumerate(row):
            if is_formula(value):
                content: list[Any] = [CodeExpression(text=value[1:], programming_language=FORMULA_LANGUAGE)]
            elif value is None or value == "":
                content = []
            else:
                content = [value]
            cells.append(
                TableCell(
                    content=content,
                    name=cell_name(column_index, row_index),
                    position=[column_index, row_index],
                )
            )
        table_rows.append(TableRow(cells=cells))
    return Table(rows=table_rows)


def find_tabular(node: Any) -> Optional[Union[Datatable, Table]]:
    """Find the first ``Datatable`` or ``Table`` in a tree, depth first."""
    if isinstance(node, (Datatable, Table)):
        return node
    if isinstance(node, list):
        children = node
    elif isinstance(node, Article):
        children = node.content or []
    elif isinstance(node, Collection):
        children = node.parts
    else:
        children = get_node_children(node)
    for child in children:
        found = find_tabular(child)
        if found is not None:
            return found
    return None


def _cell_value(cell: TableCell) -> Any:
    content = cell.content
    if len(content) == 1 and isinstance(content[0], Paragraph):
        content = content[0].content
    if not content:
        return None
    if len(content) == 1:
        only = content[0]
        if isinstance(only, CodeExpression) and (only.programming_language or "").lower() == FORMULA_LANGUAGE:
            return f"={only.text}"
        if is_primitive(only) and not isinstance(only, (list, dict)):
            return only
    return extract_text(content)


def node_to_grid(node: Any) -> Grid:
    """Map the first ``Datatable`` or ``Table`` in ``node`` to a grid of values.

    Formulas are written back as ``=`` strings. Table cells with a
    ``position`` are placed there; others fill their row in order.

    Raises
    ------
    RenderingError
        If the tree holds no tabular node

    """
    tabular = find_tabular(node)
    if tabular is None:
        raise RenderingError("No Datatable or Table to encode as a spreadsheet", rendering_stage="spreadsheet")

    if isinstance(tabular, Datatable):
        height = max((len(column.values) for column in tabular.columns), default=0)
        rows: Grid = [[column.name for column in tabular.columns]]
        for index in range(height):
            rows.append([column.values[index] if index < len(column.values) else None for column in tabular.columns])
        return rows

    placed: dict[tuple[int, int], Any] = {}
    for row_index, row in enumerate(tabular.rows):
        for column_index, cell in enumerate(row.cells):
            if cell.position and len(cell.position) == 2:
                column_index, target_row = cell.position
            else:
                target_row = row_index
            placed[(target_row, column_index)] = _cell_value(cell)
    if not placed:
        return []
    height = max(row for row, _ in placed) + 1
    width = max(column for _, column in placed) + 1
    return [[placed.get((row, column)) for column in range(width)] for row in range(height)]


def format_cell_value(value: Any) -> str:
    """Text of a grid value for delimited output."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, dict)):
        return extract_text(value)
    return str(value)
