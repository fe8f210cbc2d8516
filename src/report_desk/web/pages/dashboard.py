"""Report dashboard — folder tabs, report list, and CSV viewer.

Top: folder tabs. Below: search, tag and status filters, grouping controls,
and export buttons. Main area: either the flat paginated report table or the
date-grouped cards. "View CSV" opens the viewer dialog for active reports.

All list state lives in an immutable ``ControlState``; handlers replace it
and re-render through ``compute_view``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from nicegui import run, ui

from report_desk.config import Config
from report_desk.csv_table import parse_csv
from report_desk.exceptions import ReportDeskError, ReportNotFoundError
from report_desk.models import FolderSummary, Report
from report_desk.pipeline import (
    ControlState,
    SortField,
    collect_tags,
    compute_view,
    filter_reports,
    replace_report,
    sort_reports,
)
from report_desk.store import ReportStore
from report_desk.web.components.csv_viewer import open_csv_viewer
from report_desk.web.components.export import export_reports_csv, export_reports_json
from report_desk.web.components.pagination import (
    format_range_text,
    render_page_size_select,
    render_pager,
)
from report_desk.web.components.report_table import (
    RowHandlers,
    render_report_groups,
    render_report_table,
)

logger = logging.getLogger(__name__)

INACTIVE_NOTICE = "This report is inactive and cannot be viewed"

_ALL_TAGS = ""
_ALL_STATUS = ""


@dataclass
class _DashboardState:
    """Mutable state shared across dashboard callbacks."""

    folder_id: str | None = None
    reports: list[Report] = field(default_factory=list)
    controls: ControlState = field(default_factory=ControlState)


@dataclass
class _Toolbar:
    """References to the toolbar elements updated on every render."""

    tag_select: Any = None
    expand_row: Any = None
    group_btn: Any = None
    summary_label: Any = None


# ---------------------------------------------------------------------------
# Pure-Python helpers (testable without NiceGUI)
# ---------------------------------------------------------------------------


def resolve_folder(folders: list[FolderSummary], requested: str | None) -> str | None:
    """Pick the folder to show: the requested one, else the first."""
    if requested:
        return requested
    return folders[0].id if folders else None


def tag_options(reports: list[Report]) -> dict[str, str]:
    """Options for the tag filter select, "All Tags" first."""
    return {_ALL_TAGS: "All Tags", **{tag: tag for tag in collect_tags(reports)}}


def drop_missing_tag(controls: ControlState, reports: list[Report]) -> ControlState:
    """Clear the tag filter when no report in ``reports`` carries that tag."""
    if controls.tag is None or controls.tag in collect_tags(reports):
        return controls
    return controls.with_tag(None)


def status_options() -> dict[str, str]:
    """Options for the status filter select."""
    return {_ALL_STATUS: "All Status", "true": "Active", "false": "Inactive"}


def parse_status(value: str | None) -> bool | None:
    """Read the status select value."""
    if not value:
        return None
    return value == "true"


def group_button_text(grouped: bool) -> str:
    return "Disable Grouping" if grouped else "Enable Grouping"


def initial_controls(config: Config) -> ControlState:
    """Control state a fresh page starts with."""
    return ControlState(group_by_date=config.group_by_date, page_size=config.page_size)


def filtered_reports(ds: _DashboardState) -> list[Report]:
    """Reports matching the current filters and sort, across all pages."""
    c = ds.controls
    return sort_reports(filter_reports(ds.reports, c.search, c.tag, c.status), c.sort)


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------


def render(config: Config, folder_id: str | None = None) -> None:
    """Render the report dashboard page.

    Args:
        config: Loaded configuration (data directory and view defaults).
        folder_id: Folder from the ``?folder=`` query parameter, if any.
    """
    store = ReportStore(config.data_dir)
    folders = store.list_folders()
    ds = _DashboardState(controls=initial_controls(config))
    ds.folder_id = resolve_folder(folders, folder_id)
    if ds.folder_id:
        ds.reports = store.list_reports(ds.folder_id)

    toolbar = _Toolbar()

    with ui.column().classes("w-full max-w-[1400px] mx-auto p-6 gap-4"):
        ui.label("Report Dashboard").classes("text-2xl")

        if folders:
            with ui.tabs(value=ds.folder_id, on_change=lambda e: on_folder_change(e.value)):
                for folder in folders:
                    ui.tab(folder.id, label=folder.name)
        else:
            ui.label(f"No folders found in {config.data_dir}.").classes("text-gray-500 font-mono")

        with ui.row().classes("w-full items-center justify-between"):
            toolbar.expand_row = ui.row().classes("gap-2")
            with toolbar.expand_row:
                ui.button("Expand All", on_click=lambda: on_expand_all()).props("outline dense")
                ui.button("Collapse All", on_click=lambda: on_collapse_all()).props(
                    "outline dense"
                )
            toolbar.group_btn = ui.button(
                group_button_text(ds.controls.group_by_date),
                on_click=lambda: _set_controls(ds.controls.toggle_grouping()),
            ).props("outline dense")

        with ui.row().classes("w-full items-center gap-3"):
            ui.input(
                placeholder="Search reports...",
                on_change=lambda e: _set_controls(ds.controls.with_search(e.value)),
            ).classes("w-64 text-sm").props("outlined dense clearable")
            toolbar.tag_select = (
                ui.select(
                    tag_options(ds.reports),
                    value=_ALL_TAGS,
                    on_change=lambda e: _set_controls(ds.controls.with_tag(e.value)),
                )
                .classes("w-40 text-sm")
                .props("outlined dense")
            )
            ui.select(
                status_options(),
                value=_ALL_STATUS,
                on_change=lambda e: _set_controls(ds.controls.with_status(parse_status(e.value))),
            ).classes("w-40 text-sm").props("outlined dense")
            ui.button("JSON", icon="download", on_click=lambda: on_export_json()).props(
                "outline dense"
            )
            ui.button("CSV", icon="download", on_click=lambda: on_export_csv()).props(
                "outline dense"
            )
            toolbar.summary_label = ui.label("").classes("text-xs text-gray-500 font-mono")

        content = ui.column().classes("w-full gap-4")

    def _refresh() -> None:
        """Re-run the pipeline and redraw the list."""
        ds.controls = drop_missing_tag(ds.controls, ds.reports)
        view = compute_view(ds.reports, ds.controls)
        ds.controls = ds.controls.with_page(view.page.page)

        toolbar.summary_label.text = f"{view.matched} of {view.total_reports} reports"
        toolbar.expand_row.visible = ds.controls.group_by_date
        toolbar.group_btn.text = group_button_text(ds.controls.group_by_date)
        toolbar.tag_select.set_options(
            tag_options(ds.reports), value=ds.controls.tag or _ALL_TAGS
        )

        content.clear()
        with content:
            if not ds.reports:
                ui.label("No reports in this folder.").classes("text-gray-500 font-mono")
                return

            if ds.controls.group_by_date:
                if not view.groups:
                    ui.label("No reports match the current filters.").classes(
                        "text-gray-500 font-mono"
                    )
                render_report_groups(view.groups, handlers, on_toggle_group)
                return

            with ui.row().classes("w-full items-center justify-between"):
                render_page_size_select(
                    ds.controls.page_size,
                    lambda size: _set_controls(ds.controls.with_page_size(size)),
                )
                ui.label(format_range_text(view.page, "reports")).classes(
                    "text-sm text-gray-400 font-mono"
                )
            render_report_table(view.rows, ds.controls.sort, handlers, on_sort)
            render_pager(view.page, lambda p: _set_controls(ds.controls.with_page(p)))

    def _set_controls(controls: ControlState) -> None:
        ds.controls = controls
        _refresh()

    def on_sort(sort_field: SortField) -> None:
        _set_controls(ds.controls.sorted_by(sort_field))

    def on_toggle_group(date_key: str) -> None:
        _set_controls(ds.controls.toggle_group(date_key))

    def on_expand_all() -> None:
        view = compute_view(ds.reports, ds.controls)
        _set_controls(ds.controls.expand_all(g.date_key for g in view.groups))

    def on_collapse_all() -> None:
        _set_controls(ds.controls.collapse_all())

    async def on_folder_change(new_folder: str) -> None:
        """Load another folder's reports, keeping the filters."""
        if new_folder == ds.folder_id:
            return
        ds.folder_id = new_folder
        ds.reports = await run.io_bound(store.list_reports, new_folder)
        _set_controls(ds.controls.with_page(1))

    async def on_toggle(report: Report) -> None:
        """Persist the flipped status, then update the local record."""
        target = not report.is_active
        ok = await run.io_bound(store.set_active, report.id, target)
        if ok:
            ds.reports = replace_report(ds.reports, report.with_active(target))
        else:
            ui.notify(f"Could not update status of {report.name}.", type="negative")
        _refresh()

    async def on_add_tag(report: Report, tag: str) -> None:
        if tag in report.tags:
            _refresh()
            return
        ok = await run.io_bound(store.add_tag, report.id, tag)
        if ok:
            ds.reports = replace_report(ds.reports, report.with_tag(tag))
        else:
            ui.notify(f"Could not add tag '{tag}'.", type="negative")
        _refresh()

    async def on_remove_tag(report: Report, tag: str) -> None:
        ok = await run.io_bound(store.remove_tag, report.id, tag)
        if ok:
            ds.reports = replace_report(ds.reports, report.without_tag(tag))
            ds.controls = ds.controls.after_tag_removed(tag)
        else:
            ui.notify(f"Could not remove tag '{tag}'.", type="negative")
        _refresh()

    async def on_view(report: Report) -> None:
        """Open the CSV viewer; inactive reports are refused before fetching."""
        if not report.is_active:
            ui.notify(INACTIVE_NOTICE, type="warning")
            return
        try:
            text = await run.io_bound(store.get_raw_csv, report.id)
        except ReportNotFoundError:
            logger.exception("Error fetching CSV for report %s", report.id)
            ui.notify(f"CSV for {report.name} not found.", type="negative")
            return
        except ReportDeskError:
            logger.exception("Error fetching CSV for report %s", report.id)
            ui.notify(f"Could not read the CSV for {report.name}.", type="negative")
            return
        open_csv_viewer(report, parse_csv(text), page_size=config.csv_page_size)

    def on_export_json() -> None:
        """Download the filtered report list as JSON."""
        content_str = export_reports_json(filtered_reports(ds))
        ui.download(content_str.encode("utf-8"), "reports.json")

    def on_export_csv() -> None:
        """Download the filtered report list as CSV."""
        content_str = export_reports_csv(filtered_reports(ds))
        ui.download(content_str.encode("utf-8"), "reports.csv")

    handlers = RowHandlers(
        on_toggle=on_toggle,
        on_view=on_view,
        on_add_tag=on_add_tag,
        on_remove_tag=on_remove_tag,
    )

    # Initial render.
    _refresh()
