"""Terminal display — Rich-based rendering for the CLI.

Renders folder lists, report views (flat or grouped by date), and CSV report
pages as Rich tables.

Typical usage::

    from report_desk.display import render_report_view

    render_report_view(compute_view(reports, controls))
"""

from __future__ import annotations

from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from report_desk.csv_table import CsvView
from report_desk.models import FolderSummary, Report
from report_desk.pipeline import Page, ReportView, SortDirection, SortState

console = Console()

_ARROWS: dict[SortDirection, str] = {SortDirection.ASC: " ▲", SortDirection.DESC: " ▼"}


def _status_markup(active: bool) -> str:
    return "[blue]Active[/blue]" if active else "[dim]Inactive[/dim]"


def _page_footer(page: Page[Any], noun: str) -> str:
    """One-line pagination summary, e.g. ``"Page 2 of 3 · 11-20 of 25 reports"``."""
    if page.page_size is None:
        return f"{page.total_items} {noun}"
    return (
        f"Page {page.page} of {page.total_pages} · "
        f"{page.first_item}-{page.last_item} of {page.total_items} {noun}"
    )


def render_folder_list(folders: list[FolderSummary]) -> None:
    """Render folders as a Rich table.

    Args:
        folders: Folder summaries from ``ReportStore.list_folders()``.
    """
    if not folders:
        console.print("[dim]No folders found.[/dim]")
        return

    table = Table(show_header=True, padding=(0, 1))
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Reports", justify="right")

    for folder in folders:
        table.add_row(escape(folder.id), escape(folder.name), str(folder.report_count))

    console.print()
    console.print(table)
    console.print()


def _report_table(reports: list[Report], *, show_date: bool = True) -> Table:
    """Build a table of report rows."""
    table = Table(show_header=True, padding=(0, 1))
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Status")
    table.add_column("Tags", style="cyan")
    if show_date:
        table.add_column("Date")

    for r in reports:
        tags = ", ".join(escape(t) for t in r.tags) or "—"
        cells = [escape(r.id), escape(r.name), _status_markup(r.is_active), tags]
        if show_date:
            cells.append(r.date)
        table.add_row(*cells)
    return table


def render_report_view(view: ReportView) -> None:
    """Render the output of ``compute_view``.

    Flat views print one table plus a pagination footer. Grouped views print
    one table per date, most recent first.

    Args:
        view: Computed report view.
    """
    if view.total_reports == 0:
        console.print("[dim]No reports found.[/dim]")
        return
    if view.matched == 0:
        console.print("[dim]No reports match the current filters.[/dim]")
        return

    console.print()
    if view.groups:
        for group in view.groups:
            label = "report" if group.count == 1 else "reports"
            console.print(f"[bold]{group.date_key}[/bold] [dim]({group.count} {label})[/dim]")
            console.print(_report_table(group.reports, show_date=False))
    else:
        console.print(_report_table(view.rows))
        console.print(f"[dim]{_page_footer(view.page, 'reports')}[/dim]")
    console.print()


def render_csv_view(view: CsvView, *, title: str, sort: SortState) -> None:
    """Render one page of a report's CSV data.

    Args:
        view: Computed CSV view.
        title: Table title (report name).
        sort: Column sort, for the header arrow.
    """
    table = Table(title=title, show_header=True, padding=(0, 1))
    for index, header in enumerate(view.headers):
        direction = sort.direction_for(index)
        table.add_column(escape(header) + (_ARROWS[direction] if direction else ""))

    for row in view.rows:
        table.add_row(*(escape(cell) for cell in row))

    console.print()
    console.print(table)
    console.print(f"[dim]{_page_footer(view.page, 'rows')}[/dim]")
    console.print()
