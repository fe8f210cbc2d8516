"""Tests for Rich terminal rendering.

Covers: folder tables, flat and grouped report views with their empty
states, and CSV pages with sort arrows and markup escaping.
"""

from __future__ import annotations

from collections.abc import Callable
from io import StringIO

from rich.console import Console

import report_desk.display as display_mod
from report_desk.csv_table import CsvControls, compute_csv_view, parse_csv
from report_desk.display import render_csv_view, render_folder_list, render_report_view
from report_desk.models import FolderSummary, Report
from report_desk.pipeline import (
    NEUTRAL_SORT,
    ControlState,
    SortDirection,
    SortState,
    compute_view,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _capture(render: Callable[[], None]) -> str:
    """Run a render function with the display console redirected.

    Args:
        render: Zero-argument callable that prints through display.console.

    Returns:
        Captured terminal output string.
    """
    buf = StringIO()
    test_console = Console(file=buf, force_terminal=False, width=120)

    original_console = display_mod.console
    display_mod.console = test_console
    try:
        render()
    finally:
        display_mod.console = original_console

    return buf.getvalue()


def _make_reports() -> list[Report]:
    return [
        Report(id="r1", name="Sales", is_active=True, tags=("q1",), date="2024-01-02"),
        Report(id="r2", name="Costs", is_active=False, date="2024-01-01"),
    ]


class TestRenderFolderList:
    """render_folder_list prints one row per folder."""

    def test_rows(self) -> None:
        out = _capture(
            lambda: render_folder_list([FolderSummary("finance", "Finance", 3)])
        )
        assert "finance" in out
        assert "Finance" in out
        assert "3" in out

    def test_empty(self) -> None:
        assert "No folders found" in _capture(lambda: render_folder_list([]))


class TestRenderReportView:
    """render_report_view prints flat tables, groups, and empty states."""

    def test_flat(self) -> None:
        view = compute_view(_make_reports(), ControlState())
        out = _capture(lambda: render_report_view(view))
        assert "Sales" in out
        assert "Inactive" in out
        assert "q1" in out
        assert "Page 1 of 1" in out

    def test_unbounded_footer(self) -> None:
        view = compute_view(_make_reports(), ControlState(page_size=None))
        out = _capture(lambda: render_report_view(view))
        assert "2 reports" in out
        assert "Page" not in out

    def test_grouped(self) -> None:
        view = compute_view(_make_reports(), ControlState(group_by_date=True))
        out = _capture(lambda: render_report_view(view))
        assert "2024-01-02" in out
        assert "(1 report)" in out

    def test_no_reports(self) -> None:
        view = compute_view([], ControlState())
        assert "No reports found" in _capture(lambda: render_report_view(view))

    def test_no_matches(self) -> None:
        view = compute_view(_make_reports(), ControlState(search="zzz"))
        assert "No reports match" in _capture(lambda: render_report_view(view))

    def test_markup_in_names_is_literal(self) -> None:
        reports = [Report(id="r", name="[bold]Raw[/bold]", date="2024-01-01")]
        view = compute_view(reports, ControlState())
        assert "[bold]Raw[/bold]" in _capture(lambda: render_report_view(view))


class TestRenderCsvView:
    """render_csv_view prints a report page."""

    def test_rows_and_footer(self) -> None:
        table = parse_csv("Region,Revenue\nNorth,10\nSouth,5")
        view = compute_csv_view(table, CsvControls())
        out = _capture(lambda: render_csv_view(view, title="Sales", sort=NEUTRAL_SORT))
        assert "Sales" in out
        assert "North" in out
        assert "1-2 of 2 rows" in out

    def test_sort_arrow(self) -> None:
        table = parse_csv("Region,Revenue\nNorth,10")
        sort = SortState(1, SortDirection.DESC)
        view = compute_csv_view(table, CsvControls(sort=sort))
        out = _capture(lambda: render_csv_view(view, title="t", sort=sort))
        assert "Revenue ▼" in out
        assert "Region ▲" not in out
