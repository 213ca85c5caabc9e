#  Copyright (c) 2025 Tom Villani, Ph.D.
"""Unit tests for the CSV and XLSX codecs and their shared grid mapping."""

import pytest

from docodec import encode, vfile
from docodec.ast import (
    Article,
    CodeExpression,
    Collection,
    Datatable,
    DatatableColumn,
    Paragraph,
    Table,
    TableCell,
    TableRow,
)
from docodec.codecs.csv import CsvCodec, decode_csv, encode_csv
from docodec.codecs.xlsx import XlsxCodec
from docodec.exceptions import MalformedFileError, RenderingError
from docodec.options import CsvEncodeOptions, CsvOptions
from docodec.utils.spreadsheet import (
    cell_name,
    column_letter,
    find_tabular,
    format_cell_value,
    grid_to_node,
    is_formula,
    node_to_grid,
    parse_cell_value,
)

DATATABLE = Datatable(
    name="Data",
    columns=[
        DatatableColumn(name="a", values=[1, 2.5]),
        DatatableColumn(name="b", values=["x", True]),
    ],
)


@pytest.mark.unit
class TestCellHelpers:
    """Tests for cell naming and value parsing."""

    @pytest.mark.parametrize("index,expected", [(0, "A"), (25, "Z"), (26, "AA"), (701, "ZZ"), (702, "AAA")])
    def test_column_letter(self, index, expected):
        """Test spreadsheet column names."""
        assert column_letter(index) == expected

    def test_cell_name(self):
        """Test cell names from zero-based indices."""
        assert cell_name(0, 0) == "A1"
        assert cell_name(1, 2) == "B3"

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("", None),
            ("42", 42),
            (" -3 ", -3),
            ("1.5", 1.5),
            ("1e3", 1000.0),
            ("TRUE", True),
            ("false", False),
            ("abc", "abc"),
            ("12 apples", "12 apples"),
        ],
    )
    def test_parse_cell_value(self, text, expected):
        """Test typing of textual cells."""
        assert parse_cell_value(text) == expected
        assert type(parse_cell_value(text)) is type(expected)

    def test_is_formula(self):
        """Test formula detection."""
        assert is_formula("=SUM(A1:A3)")
        assert not is_formula("=")
        assert not is_formula("a=b")
        assert not is_formula(5)

    def test_format_cell_value(self):
        """Test text for delimited output."""
        assert format_cell_value(None) == ""
        assert format_cell_value(True) == "true"
        assert format_cell_value(2.5) == "2.5"
        assert format_cell_value("x") == "x"


@pytest.mark.unit
class TestGridMapping:
    """Tests for mapping grids to and from nodes."""

    def test_datatable(self):
        """Test that a grid without formulas is a datatable."""
        node = grid_to_node([["a", "b"], [1, "x"], [2.5, True]], name="Data")
        assert node == DATATABLE

    def test_ragged_and_trailing_rows(self):
        """Test padding of short rows and dropping of empty trailing rows."""
        node = grid_to_node([["a", "b"], [1], [None, ""]])
        assert node == Datatable(
            columns=[DatatableColumn(name="a", values=[1]), DatatableColumn(name="b", values=[None])]
        )

    def test_unnamed_columns(self):
        """Test that empty headers fall back to column letters."""
        node = grid_to_node([["", "b"], [1, 2]])
        assert [column.name for column in node.columns] == ["A", "b"]

    def test_empty_grid(self):
        """Test that an empty grid is an empty datatable."""
        assert grid_to_node([], name="Empty") == Datatable(name="Empty")

    def test_formulas_make_a_table(self):
        """Test that any formula turns the grid into a table of named cells."""
        node = grid_to_node([["a", "b"], [1, "=A2*2"]])
        assert node == Table(
            rows=[
                TableRow(
                    [
                        TableCell(["a"], name="A1", position=[0, 0]),
                        TableCell(["b"], name="B1", position=[1, 0]),
                    ]
                ),
                TableRow(
                    [
                        TableCell([1], name="A2", position=[0, 1]),
                        TableCell(
                            [CodeExpression(text="A2*2", programming_language="excel")], name="B2", position=[1, 1]
                        ),
                    ]
                ),
            ]
        )

    def test_datatable_to_grid(self):
        """Test that the column names form the first row."""
        assert node_to_grid(DATATABLE) == [["a", "b"], [1, "x"], [2.5, True]]

    def test_table_to_grid(self):
        """Test table cells, formulas and paragraph-wrapped content."""
        table = Table(
            rows=[
                TableRow([TableCell([Paragraph(["a"])]), TableCell(["b ", "c"])]),
                TableRow([TableCell([3]), TableCell([CodeExpression(text="A2+1", programming_language="excel")])]),
            ]
        )
        assert node_to_grid(table) == [["a", "b c"], [3, "=A2+1"]]

    def test_positioned_cells(self):
        """Test that cell positions are respected."""
        table = Table(rows=[TableRow([TableCell(["x"], position=[2, 1])])])
        assert node_to_grid(table) == [[None, None, None], [None, None, "x"]]

    def test_find_tabular_nested(self):
        """Test finding a table inside an article."""
        article = Article(content=[Paragraph(["intro"]), Collection(parts=[DATATABLE])])
        assert find_tabular(article) is DATATABLE
        assert find_tabular(Paragraph(["none"])) is None

    def test_no_tabular(self):
        """Test that trees without tables cannot be written as grids."""
        with pytest.raises(RenderingError):
            node_to_grid(Article(content=[Paragraph(["x"])]))


@pytest.mark.unit
class TestCsvCodec:
    """Tests for the CSV codec."""

    def test_decode(self):
        """Test typed columns from delimited text."""
        node = decode_csv("a,b\n1,x\n2.5,TRUE\n")
        assert node == Datatable(
            name="Sheet1",
            columns=[DatatableColumn(name="a", values=[1, 2.5]), DatatableColumn(name="b", values=["x", True])],
        )

    def test_decode_options(self):
        """Test the delimiter and sheet name options."""
        node = decode_csv("a;b\n1;2\n", CsvOptions(delimiter=";", sheet_name="Results"))
        assert node.name == "Results"
        assert [column.values for column in node.columns] == [[1], [2]]

    def test_decode_byte_order_mark(self):
        """Test that a leading byte order mark is ignored."""
        assert decode_csv("\ufeffa\n1\n").columns[0].name == "a"

    def test_decode_quoted(self):
        """Test quoted fields with delimiters and newlines."""
        node = decode_csv('a,b\n"x, y","line 1\nline 2"\n')
        assert node.columns[0].values == ["x, y"]
        assert node.columns[1].values == ["line 1\nline 2"]

    def test_decode_formula(self):
        """Test that formulas are kept as expressions."""
        node = decode_csv("a,b\n1,=A2*2\n")
        assert isinstance(node, Table)
        assert node.rows[1].cells[1].content == [CodeExpression(text="A2*2", programming_language="excel")]

    def test_encode(self):
        """Test writing a datatable."""
        assert encode_csv(DATATABLE) == "a,b\n1,x\n2.5,true\n"

    def test_encode_delimiter(self):
        """Test writing with another delimiter."""
        assert encode_csv(DATATABLE, CsvEncodeOptions(delimiter="\t")) == "a\tb\n1\tx\n2.5\ttrue\n"

    def test_encode_formula_table(self):
        """Test that formulas round trip through CSV."""
        text = "a,b\n1,=A2*2\n"
        assert encode_csv(decode_csv(text)) == text

    def test_encode_without_table(self):
        """Test that encoding without a table raises."""
        with pytest.raises(RenderingError):
            encode_csv(Paragraph(["x"]))

    def test_invalid_delimiter(self):
        """Test option validation."""
        with pytest.raises(ValueError):
            CsvOptions(delimiter=";;")
        with pytest.raises(ValueError):
            CsvEncodeOptions(delimiter="")

    def test_codec(self):
        """Test the codec class."""
        codec = CsvCodec()
        node = codec.decode(vfile.load("a\n1\n"))
        file = codec.encode(node)
        assert file.media_type == "text/csv"
        assert vfile.dump(file) == "a\n1\n"


@pytest.mark.unit
class TestXlsxCodec:
    """Tests for the XLSX codec."""

    def test_round_trip(self):
        """Test that values and the sheet name survive a workbook."""
        file = XlsxCodec().encode(DATATABLE)
        assert file.is_binary
        assert file.as_bytes()[:2] == b"PK"
        assert XlsxCodec().decode(file) == DATATABLE

    def test_formula_round_trip(self):
        """Test that formulas are written and read back as formulas."""
        table = decode_csv("a,b\n1,=A2*2\n")
        decoded = XlsxCodec().decode(XlsxCodec().encode(table))
        assert isinstance(decoded, Table)
        assert decoded.rows[1].cells[1].content == [CodeExpression(text="A2*2", programming_language="excel")]

    def test_sheet_name_options(self):
        """Test the sheet name options for encoding and decoding."""
        file = XlsxCodec().encode(DATATABLE, CsvEncodeOptions(sheet_name="Custom"))
        assert XlsxCodec().decode(file).name == "Custom"
        assert XlsxCodec().decode(file, CsvOptions(sheet_name="Renamed")).name == "Renamed"

    def test_invalid_workbook(self):
        """Test that unreadable contents raise."""
        with pytest.raises(MalformedFileError):
            XlsxCodec().decode(vfile.load(b"not a workbook"))

    def test_encode_by_path(self):
        """Test choosing the codec from an output path."""
        file = encode(DATATABLE, file_path="data.xlsx")
        assert file.path == "data.xlsx"
        assert file.is_binary
