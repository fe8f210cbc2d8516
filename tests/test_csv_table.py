"""Tests for CSV report tables.

Covers: parse_csv row dropping rules, Number()-style cell coercion, mixed
numeric/string comparison, filter and sort of rows, compute_csv_view
pagination, and export.
"""

from __future__ import annotations

import math

from report_desk.csv_table import (
    CsvControls,
    CsvTable,
    compare_cells,
    compute_csv_view,
    export_filename,
    export_table_csv,
    filter_rows,
    parse_csv,
    reprocess_table,
    sort_rows,
    to_number,
)
from report_desk.pipeline import NEUTRAL_SORT, SortDirection, SortState

SALES_CSV = """\
Region, Revenue ,Units
North,1200,30
South,950,12
East,,4
West,abc,7
"""


def _make_table(rows: list[list[str]], headers: list[str] | None = None) -> CsvTable:
    return CsvTable(headers=headers or ["Name", "Score"], rows=rows)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class TestParseCsv:
    """parse_csv splits lines and cells and drops unusable rows."""

    def test_headers_and_rows_trimmed(self) -> None:
        table = parse_csv(SALES_CSV)
        assert table.headers == ["Region", "Revenue", "Units"]
        assert table.rows[0] == ["North", "1200", "30"]
        assert len(table.rows) == 4

    def test_short_and_long_rows_dropped(self) -> None:
        table = parse_csv("a,b\n1,2\n3\n4,5,6\n7,8")
        assert table.rows == [["1", "2"], ["7", "8"]]

    def test_all_empty_rows_dropped(self) -> None:
        table = parse_csv("a,b,c\n,,\n , , \n1,,")
        assert table.rows == [["1", "", ""]]

    def test_trailing_newline_ignored(self) -> None:
        assert parse_csv("a\nx\n").rows == [["x"]]

    def test_crlf_is_trimmed(self) -> None:
        table = parse_csv("a,b\r\n1,2\r\n")
        assert table.headers == ["a", "b"]
        assert table.rows == [["1", "2"]]

    def test_duplicate_headers_kept(self) -> None:
        assert parse_csv("x,x\n1,2").headers == ["x", "x"]

    def test_quotes_are_not_special(self) -> None:
        table = parse_csv('name,city\n"Smith, J",Paris')
        assert table.rows == []

    def test_header_only(self) -> None:
        table = parse_csv("only,headers")
        assert table.headers == ["only", "headers"]
        assert table.rows == []

    def test_rows_match_header_width(self) -> None:
        table = parse_csv(SALES_CSV + "extra\n1,2,3,4\n")
        assert all(len(row) == len(table.headers) for row in table.rows)


# ---------------------------------------------------------------------------
# Cell comparison
# ---------------------------------------------------------------------------


class TestToNumber:
    """to_number follows JavaScript Number() conversion."""

    def test_integers_and_decimals(self) -> None:
        assert to_number("42") == 42.0
        assert to_number("-3.5") == -3.5
        assert to_number(".5") == 0.5
        assert to_number("7.") == 7.0

    def test_exponent(self) -> None:
        assert to_number("1e3") == 1000.0
        assert to_number("2.5E-1") == 0.25

    def test_blank_is_zero(self) -> None:
        assert to_number("") == 0.0
        assert to_number("   ") == 0.0

    def test_surrounding_whitespace(self) -> None:
        assert to_number("  12 ") == 12.0

    def test_prefixed_literals(self) -> None:
        assert to_number("0x1A") == 26.0
        assert to_number("0b101") == 5.0
        assert to_number("0o17") == 15.0

    def test_infinity(self) -> None:
        assert to_number("Infinity") == math.inf
        assert to_number("-Infinity") == -math.inf

    def test_non_numeric(self) -> None:
        for text in ("abc", "12abc", ".", "1.2.3", "inf", "NaN", "-0x10"):
            assert to_number(text) is None, text


class TestCompareCells:
    """compare_cells picks numeric or string comparison per pair."""

    def test_numeric_pair_compares_numerically(self) -> None:
        assert compare_cells("10", "9") > 0
        assert compare_cells("9", "10") < 0
        assert compare_cells("1.0", "1") == 0

    def test_blank_compares_as_zero_against_numbers(self) -> None:
        assert compare_cells("", "5") < 0
        assert compare_cells("", "-5") > 0

    def test_mixed_pair_compares_as_strings(self) -> None:
        assert compare_cells("abc", "10") > 0

    def test_strings_case_insensitive(self) -> None:
        assert compare_cells("apple", "Banana") < 0


# ---------------------------------------------------------------------------
# Filter / sort
# ---------------------------------------------------------------------------


class TestFilterRows:
    """filter_rows keeps rows where any cell contains the text."""

    def test_empty_filter_keeps_all(self) -> None:
        rows = [["a", "1"], ["b", "2"]]
        assert filter_rows(rows, "") == rows

    def test_matches_any_cell_case_insensitive(self) -> None:
        rows = [["North", "x"], ["south", "NORTHERN"], ["East", "y"]]
        assert filter_rows(rows, "north") == [["North", "x"], ["south", "NORTHERN"]]

    def test_keeps_matching_rows_in_order(self) -> None:
        rows = [["abc", "1"], ["xyz", "2"], ["cab", "3"]]
        assert filter_rows(rows, "ab") == [["abc", "1"], ["cab", "3"]]

    def test_matches_numbers_as_text(self) -> None:
        rows = [["a", "1200"], ["b", "950"]]
        assert filter_rows(rows, "20") == [["a", "1200"]]


class TestSortRows:
    """sort_rows orders rows by one column, stable in both directions."""

    def test_numeric_column(self) -> None:
        rows = [["x", "10"], ["y", "9"], ["z", "100"]]
        result = sort_rows(rows, SortState(1, SortDirection.ASC))
        assert [r[1] for r in result] == ["9", "10", "100"]

    def test_numeric_column_descending(self) -> None:
        rows = [["x", "10"], ["y", "9"], ["z", "100"]]
        result = sort_rows(rows, SortState(1, SortDirection.DESC))
        assert [r[1] for r in result] == ["100", "10", "9"]

    def test_string_column(self) -> None:
        rows = [["banana"], ["Apple"], ["cherry"]]
        result = sort_rows(rows, SortState(0, SortDirection.ASC))
        assert result == [["Apple"], ["banana"], ["cherry"]]

    def test_stable_for_ties(self) -> None:
        rows = [["a", "1"], ["b", "2"], ["c", "1"], ["d", "2"]]
        asc = sort_rows(rows, SortState(1, SortDirection.ASC))
        desc = sort_rows(rows, SortState(1, SortDirection.DESC))
        assert [r[0] for r in asc] == ["a", "c", "b", "d"]
        assert [r[0] for r in desc] == ["b", "d", "a", "c"]

    def test_neutral_keeps_order(self) -> None:
        rows = [["b"], ["a"]]
        assert sort_rows(rows, NEUTRAL_SORT) == rows


class TestReprocessTable:
    """reprocess_table filters then sorts without touching the input."""

    def test_filter_and_sort(self) -> None:
        table = parse_csv(SALES_CSV)
        result = reprocess_table(table, "t", SortState(2, SortDirection.ASC))
        assert result.headers == table.headers
        assert [r[0] for r in result.rows] == ["East", "West", "South", "North"]

    def test_input_unchanged(self) -> None:
        table = parse_csv(SALES_CSV)
        before = [list(r) for r in table.rows]
        reprocess_table(table, "north", SortState(1, SortDirection.DESC))
        assert table.rows == before

    def test_result_rows_are_subset(self) -> None:
        table = parse_csv(SALES_CSV)
        result = reprocess_table(table, "o", SortState(0, SortDirection.DESC))
        assert all(row in table.rows for row in result.rows)
        assert len(result.rows) <= len(table.rows)


# ---------------------------------------------------------------------------
# View
# ---------------------------------------------------------------------------


class TestCsvControls:
    """CsvControls transitions."""

    def test_filter_resets_page(self) -> None:
        assert CsvControls(page=3).with_filter("x").page == 1

    def test_page_size_resets_page(self) -> None:
        assert CsvControls(page=3).with_page_size(None).page == 1

    def test_header_click_cycle(self) -> None:
        controls = CsvControls().sorted_by(2)
        assert controls.sort == SortState(2, SortDirection.ASC)
        controls = controls.sorted_by(2)
        assert controls.sort == SortState(2, SortDirection.DESC)
        assert controls.sorted_by(2).sort.is_neutral

    def test_sort_keeps_page(self) -> None:
        assert CsvControls(page=2).sorted_by(0).page == 2


class TestComputeCsvView:
    """compute_csv_view paginates the processed rows."""

    def test_five_rows_page_size_two(self) -> None:
        table = _make_table([[f"r{i}", str(i)] for i in range(5)])
        view = compute_csv_view(table, CsvControls(page_size=2, page=3))
        assert view.rows == [["r4", "4"]]
        assert view.page.total_pages == 3
        assert view.total_rows == 5

    def test_page_clamped_after_filter(self) -> None:
        table = _make_table([[f"r{i}", str(i)] for i in range(25)])
        view = compute_csv_view(table, CsvControls(filter_text="r2", page_size=10, page=3))
        assert view.page.page == 1
        assert [r[0] for r in view.rows] == ["r2", "r20", "r21", "r22", "r23", "r24"]

    def test_unbounded_page_size(self) -> None:
        table = _make_table([[f"r{i}", str(i)] for i in range(30)])
        view = compute_csv_view(table, CsvControls(page_size=None))
        assert len(view.rows) == 30
        assert view.page.total_pages == 1

    def test_empty_table(self) -> None:
        view = compute_csv_view(_make_table([]), CsvControls())
        assert view.rows == []
        assert view.page.total_pages == 1


class TestExport:
    """export_table_csv joins cells with bare commas."""

    def test_export_header_and_rows(self) -> None:
        table = _make_table([["A", "1"], ["B", "2"]])
        assert export_table_csv(table) == "Name,Score\nA,1\nB,2"

    def test_export_parses_back(self) -> None:
        table = parse_csv(SALES_CSV)
        assert parse_csv(export_table_csv(table)) == table

    def test_filename(self) -> None:
        assert export_filename("a1b2c3d4") == "report-a1b2c3d4.csv"
