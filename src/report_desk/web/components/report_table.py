"""Report table — flat and date-grouped report lists.

Provides pure-Python formatting helpers plus NiceGUI rendering for report
rows: name, status switch, editable tag chips, date, and the "View CSV"
action. The grouped view renders one collapsible card per date.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import date as date_cls
from typing import Any

from report_desk.models import Report
from report_desk.pipeline import ReportGroup, SortDirection, SortField, SortState
from report_desk.web.colors import get_status_css, get_tag_css

# ---------------------------------------------------------------------------
# Pure-Python helpers (testable without NiceGUI)
# ---------------------------------------------------------------------------

_SORT_ARROWS: dict[SortDirection, str] = {
    SortDirection.ASC: "▲",
    SortDirection.DESC: "▼",
}

# (field, header label) for the flat table's sortable columns.
SORTABLE_COLUMNS: list[tuple[SortField, str]] = [
    (SortField.NAME, "Name"),
    (SortField.STATUS, "Status"),
    (SortField.DATE, "Date"),
]


def status_label(active: bool) -> str:
    """Human-readable report status."""
    return "Active" if active else "Inactive"


def format_date_label(value: str) -> str:
    """Format the date part of an ISO string for display.

    Args:
        value: ISO 8601 date or date-time.

    Returns:
        ``"Jan 2, 2024"``, or the raw date part if it does not parse.
    """
    date_part = value.split("T", 1)[0]
    try:
        parsed = date_cls.fromisoformat(date_part)
    except ValueError:
        return date_part
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


def format_group_count(count: int) -> str:
    """Badge text for a date group, e.g. ``"3 reports"``."""
    return f"{count} report" if count == 1 else f"{count} reports"


def header_text(label: str, direction: SortDirection | None) -> str:
    """Column header with an arrow for the active sort direction."""
    arrow = _SORT_ARROWS.get(direction) if direction else None
    return f"{label} {arrow}" if arrow else label


# ---------------------------------------------------------------------------
# NiceGUI rendering
# ---------------------------------------------------------------------------

Handler = Callable[..., Awaitable[None] | None]


@dataclass
class RowHandlers:
    """Callbacks invoked by report rows.

    Attributes:
        on_toggle: Called with the report whose status switch was flipped.
        on_view: Called with the report whose "View CSV" button was pressed.
        on_add_tag: Called with (report, tag) when a tag is entered.
        on_remove_tag: Called with (report, tag) when a chip's × is pressed.
    """

    on_toggle: Handler
    on_view: Handler
    on_add_tag: Handler
    on_remove_tag: Handler


def _render_tags(report: Report, handlers: RowHandlers) -> None:
    """Render tag chips with remove buttons and an inline add-tag input."""
    from nicegui import ui

    with ui.row().classes("items-center gap-1 flex-wrap"):
        for tag in report.tags:
            css = get_tag_css(tag)
            with ui.row().classes(
                f"items-center gap-0 px-2 rounded-full text-xs {css['bg']} {css['text']}"
            ):
                ui.label(tag)
                ui.button(
                    "×",
                    on_click=lambda t=tag: handlers.on_remove_tag(report, t),
                ).props("flat dense round size=xs").classes(css["text"])

        editor = ui.row().classes("items-center")

    def show_button() -> None:
        editor.clear()
        with editor:
            ui.button("+", on_click=show_input).props("flat dense round size=sm")

    def show_input() -> None:
        editor.clear()
        with editor:
            tag_input = ui.input(placeholder="New tag...").props("dense autofocus").classes(
                "w-24 text-xs"
            )

            def submit() -> Any:
                value = (tag_input.value or "").strip()
                if not value:
                    return None
                return handlers.on_add_tag(report, value)

            tag_input.on("keydown.enter", submit)
            tag_input.on("blur", show_button)

    show_button()


def _render_row(report: Report, handlers: RowHandlers, *, show_date: bool) -> None:
    """Render one report row."""
    from nicegui import ui

    status_css = get_status_css(report.is_active)
    with ui.row().classes("w-full items-center gap-4 px-4 py-2 border-b border-gray-700"):
        ui.label(report.name).classes("w-1/4 font-medium")
        with ui.row().classes("w-40 items-center gap-2"):
            ui.switch(
                value=report.is_active,
                on_change=lambda: handlers.on_toggle(report),
            ).props("dense")
            ui.label(status_label(report.is_active)).classes(
                f"text-xs px-2 rounded {status_css['text']} {status_css['bg']}"
            )
        with ui.element("div").classes("flex-1"):
            _render_tags(report, handlers)
        if show_date:
            ui.label(format_date_label(report.date)).classes("w-32 text-sm font-mono")
        view_btn = ui.button(
            "View CSV",
            on_click=lambda: handlers.on_view(report),
        ).props("flat dense no-caps")
        if not report.is_active:
            view_btn.classes("text-gray-500 cursor-not-allowed")


def render_report_table(
    reports: Sequence[Report],
    sort: SortState,
    handlers: RowHandlers,
    on_sort: Callable[[SortField], None],
) -> None:
    """Render the flat report table with sortable headers.

    Args:
        reports: Reports on the current page.
        sort: Active sort, for the header arrows.
        handlers: Row callbacks.
        on_sort: Called with the header field that was clicked.
    """
    from nicegui import ui

    with ui.row().classes(
        "w-full items-center gap-4 px-4 py-2 text-xs uppercase text-gray-400 bg-gray-800/50"
    ):
        widths = {SortField.NAME: "w-1/4", SortField.STATUS: "w-40", SortField.DATE: "w-32"}
        for sort_field, label in SORTABLE_COLUMNS:
            if sort_field is SortField.DATE:
                ui.label("Tags").classes("flex-1")
            ui.label(header_text(label, sort.direction_for(sort_field))).classes(
                f"{widths[sort_field]} cursor-pointer select-none"
            ).on("click", lambda f=sort_field: on_sort(f))
        ui.label("Actions")

    for report in reports:
        _render_row(report, handlers, show_date=True)


def render_report_groups(
    groups: Sequence[ReportGroup],
    handlers: RowHandlers,
    on_toggle_group: Callable[[str], None],
) -> None:
    """Render one collapsible card per date group.

    Collapsed groups show only the date header and the report count.

    Args:
        groups: Groups ordered most recent first.
        handlers: Row callbacks.
        on_toggle_group: Called with the date key of a clicked header.
    """
    from nicegui import ui

    for group in groups:
        with ui.card().classes("w-full p-0 gap-0"):
            with (
                ui.row()
                .classes("w-full items-center justify-between px-4 py-3 cursor-pointer")
                .on("click", lambda key=group.date_key: on_toggle_group(key))
            ):
                with ui.row().classes("items-center gap-2"):
                    ui.icon("expand_more" if group.expanded else "chevron_right").classes(
                        "text-gray-400"
                    )
                    ui.label(format_date_label(group.date_key)).classes("font-medium")
                ui.badge(format_group_count(group.count)).props("color=grey-8")

            if group.expanded:
                with ui.column().classes("w-full gap-0 border-t border-gray-700"):
                    for report in group.reports:
                        _render_row(report, handlers, show_date=False)
