"""CSV viewer dialog — filterable, sortable, paginated report data.

Opens a modal over the dashboard showing one report's parsed CSV. Header
clicks cycle the column sort, the filter box narrows rows, and the download
button exports the loaded table (not the filtered view).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from report_desk.csv_table import CsvControls, CsvTable, compute_csv_view
from report_desk.models import Report
from report_desk.web.components.export import report_download
from report_desk.web.components.pagination import (
    format_range_text,
    render_page_size_select,
    render_pager,
)
from report_desk.web.components.report_table import header_text


def column_headers(table: CsvTable, controls: CsvControls) -> list[str]:
    """Header labels with a sort arrow on the sorted column."""
    return [
        header_text(header, controls.sort.direction_for(index))
        for index, header in enumerate(table.headers)
    ]


@dataclass
class _ViewerState:
    """Mutable holder for the dialog's current controls."""

    controls: CsvControls


def open_csv_viewer(report: Report, table: CsvTable, *, page_size: int | None) -> Any:
    """Open the viewer dialog for a report.

    Args:
        report: Report being viewed (for the title and download name).
        table: Parsed CSV contents.
        page_size: Initial rows per page.

    Returns:
        The opened dialog element; it deletes itself once hidden.
    """
    from nicegui import ui

    state = _ViewerState(controls=CsvControls(page_size=page_size))

    with ui.dialog().props("maximized") as dialog, ui.card().classes("w-full h-full"):
        with ui.row().classes("w-full items-center justify-between"):
            ui.label(report.name or "Report Data").classes("text-lg font-bold")
            ui.button("Close", on_click=dialog.close).props("flat dense")

        with ui.row().classes("w-full items-center gap-4"):
            ui.input(
                placeholder="Filter data...",
                on_change=lambda e: _update(state.controls.with_filter(e.value)),
            ).classes("w-64 text-sm").props("outlined dense clearable")
            render_page_size_select(
                page_size,
                lambda size: _update(state.controls.with_page_size(size)),
            )
            range_label = ui.label("").classes("text-sm text-gray-400 font-mono")

        body = ui.column().classes("w-full flex-1 overflow-auto")

        with ui.row().classes("w-full justify-end"):
            ui.button(
                "Download CSV",
                icon="download",
                on_click=lambda: ui.download(*report_download(report.id, table)),
            ).props("dense")

    def _update(controls: CsvControls) -> None:
        state.controls = controls
        _render_body()

    def _render_body() -> None:
        view = compute_csv_view(table, state.controls)
        state.controls = state.controls.with_page(view.page.page)
        range_label.text = format_range_text(view.page, "rows")
        body.clear()
        with body:
            with ui.grid(columns=max(len(view.headers), 1)).classes("w-full gap-0 text-sm"):
                for index, label in enumerate(column_headers(table, state.controls)):
                    ui.label(label).classes(
                        "px-3 py-2 font-semibold bg-gray-800 cursor-pointer select-none"
                    ).on("click", lambda i=index: _update(state.controls.sorted_by(i)))
                for row in view.rows:
                    for cell in row:
                        ui.label(cell).classes("px-3 py-2 border-b border-gray-700 font-mono")
            render_pager(view.page, lambda p: _update(state.controls.with_page(p)))

    dialog.on("hide", dialog.delete)
    _render_body()
    dialog.open()
    return dialog
