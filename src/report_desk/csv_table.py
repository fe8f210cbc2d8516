"""CSV table — parse, filter, sort, paginate, and export report data.

The report viewer works on a :class:`CsvTable` parsed from the raw file text.
Parsing is deliberately simple: lines are split on ``\\n`` and cells on bare
commas, with no support for quoted fields. Export mirrors that, so a table
round-trips through the viewer unchanged.

Typical usage::

    from report_desk.csv_table import CsvControls, compute_csv_view, parse_csv

    table = parse_csv(raw_text)
    view = compute_csv_view(table, CsvControls(filter_text="north"))
"""

from __future__ import annotations

import functools
import math
import re
from dataclasses import dataclass, field, replace

from report_desk.pipeline import (
    DEFAULT_PAGE_SIZE,
    NEUTRAL_SORT,
    Page,
    SortDirection,
    SortState,
    clamp_page,
    collation_key,
    count_pages,
    cycle_sort,
    paginate,
)

# Decimal literal as accepted by JavaScript's Number(): "12", "-3.5", ".5", "1e3".
_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
# Prefixed integer literals (unsigned only, as in Number()).
_PREFIXED_RE = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_INFINITY = {"Infinity": math.inf, "+Infinity": math.inf, "-Infinity": -math.inf}


@dataclass
class CsvTable:
    """Header row plus data rows.

    Attributes:
        headers: Column names in file order (duplicates allowed).
        rows: Data rows; each has exactly ``len(headers)`` cells.
    """

    headers: list[str] = field(default_factory=list)
    rows: list[list[str]] = field(default_factory=list)


def parse_csv(text: str) -> CsvTable:
    """Parse raw CSV text into a :class:`CsvTable`.

    The first line is the header. Cells are split on every comma and
    whitespace-trimmed. Rows whose cell count differs from the header and
    rows where every cell is empty are dropped.

    Args:
        text: Raw file contents.

    Returns:
        Parsed table.
    """
    lines = text.split("\n")
    headers = [h.strip() for h in lines[0].split(",")]
    rows: list[list[str]] = []
    for line in lines[1:]:
        cells = [c.strip() for c in line.split(",")]
        if len(cells) == len(headers) and any(cells):
            rows.append(cells)
    return CsvTable(headers=headers, rows=rows)


def export_table_csv(table: CsvTable) -> str:
    """Serialize a table back to CSV text for download.

    Rows are joined with ``\\n`` and cells with a bare comma. Cells that
    themselves contain commas or newlines are not quoted.

    Args:
        table: Table to export (the loaded rows, not the filtered view).

    Returns:
        CSV text without a trailing newline.
    """
    return "\n".join(",".join(row) for row in [table.headers, *table.rows])


def export_filename(report_id: str) -> str:
    """Download filename for a report's CSV."""
    return f"report-{report_id}.csv"


def to_number(cell: str) -> float | None:
    """Convert a cell to a number the way JavaScript's ``Number()`` does.

    Surrounding whitespace is ignored and a blank cell is 0. Decimal,
    exponent, ``0x``/``0o``/``0b`` and ``Infinity`` forms are accepted.

    Args:
        cell: Cell text.

    Returns:
        The numeric value, or None if the cell is not numeric.
    """
    text = cell.strip()
    if not text:
        return 0.0
    if _DECIMAL_RE.match(text):
        return float(text)
    if _PREFIXED_RE.match(text):
        return float(int(text, 0))
    return _INFINITY.get(text)


def compare_cells(a: str, b: str) -> int:
    """Three-way comparison of two cells.

    Both numeric → numeric comparison; otherwise collated string
    comparison. The choice is made per pair, not per column.

    Args:
        a: Left cell.
        b: Right cell.

    Returns:
        Negative, zero, or positive like a classic ``cmp``.
    """
    num_a = to_number(a)
    num_b = to_number(b)
    if num_a is not None and num_b is not None:
        return (num_a > num_b) - (num_a < num_b)
    key_a = collation_key(a)
    key_b = collation_key(b)
    return (key_a > key_b) - (key_a < key_b)


def filter_rows(rows: list[list[str]], filter_text: str) -> list[list[str]]:
    """Keep rows where any cell contains ``filter_text`` (case-insensitive)."""
    if not filter_text:
        return list(rows)
    needle = filter_text.casefold()
    return [row for row in rows if any(needle in cell.casefold() for cell in row)]


def sort_rows(rows: list[list[str]], sort: SortState) -> list[list[str]]:
    """Stable sort of rows by the column in ``sort.key``.

    Args:
        rows: Rows to sort.
        sort: Sort state keyed by column index.

    Returns:
        New list; input order when the sort is neutral.
    """
    if sort.is_neutral:
        return list(rows)
    column = int(sort.key)  # type: ignore[arg-type]
    sign = -1 if sort.direction is SortDirection.DESC else 1

    def _cmp(left: list[str], right: list[str]) -> int:
        return sign * compare_cells(left[column], right[column])

    return sorted(rows, key=functools.cmp_to_key(_cmp))


def reprocess_table(table: CsvTable, filter_text: str, sort: SortState) -> CsvTable:
    """Apply the viewer's filter and sort to a table.

    Args:
        table: Table as parsed.
        filter_text: Row filter text.
        sort: Column sort state.

    Returns:
        New table with the same headers and the filtered, sorted rows.
    """
    rows = sort_rows(filter_rows(table.rows, filter_text), sort)
    return CsvTable(headers=list(table.headers), rows=rows)


@dataclass(frozen=True)
class CsvControls:
    """Viewer controls for one open report.

    Attributes:
        filter_text: Row filter.
        sort: Column sort, keyed by column index.
        page_size: Rows per page, None for all.
        page: Current page (1-based).
    """

    filter_text: str = ""
    sort: SortState = NEUTRAL_SORT
    page_size: int | None = DEFAULT_PAGE_SIZE
    page: int = 1

    def with_filter(self, filter_text: str | None) -> CsvControls:
        return replace(self, filter_text=filter_text or "", page=1)

    def sorted_by(self, column: int) -> CsvControls:
        """Apply a click on the header of ``column``."""
        return replace(self, sort=cycle_sort(self.sort, column))

    def with_page_size(self, page_size: int | None) -> CsvControls:
        return replace(self, page_size=page_size, page=1)

    def with_page(self, page: int) -> CsvControls:
        return replace(self, page=page)


@dataclass
class CsvView:
    """Output of :func:`compute_csv_view`.

    Attributes:
        headers: Column names.
        rows: Rows on the current page.
        page: Pagination metadata over the filtered rows.
        total_rows: Row count of the loaded table.
    """

    headers: list[str]
    rows: list[list[str]]
    page: Page[list[str]]
    total_rows: int


def compute_csv_view(table: CsvTable, controls: CsvControls) -> CsvView:
    """Filter, sort, and paginate a table for the viewer.

    Args:
        table: Parsed report table.
        controls: Viewer controls.

    Returns:
        The headers, visible rows, and pagination metadata.
    """
    processed = reprocess_table(table, controls.filter_text, controls.sort)
    total = count_pages(len(processed.rows), controls.page_size)
    page = paginate(processed.rows, controls.page_size, clamp_page(controls.page, total))
    return CsvView(
        headers=processed.headers,
        rows=page.items,
        page=page,
        total_rows=len(table.rows),
    )
