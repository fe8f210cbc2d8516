"""CLI entry point for Report Desk.

Provides the ``report-desk`` command with subcommands for browsing folders
and reports, viewing report data, toggling status, editing tags, importing
CSV files, exporting reports, and serving the web dashboard.

Typical usage::

    report-desk folders
    report-desk list finance --search sales --sort date --desc
    report-desk show a1b2c3d4 --filter north --sort-column 2
    report-desk import q1.csv --folder finance --tag quarterly
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from report_desk import __version__
from report_desk.config import CONFIG_PATH, ensure_dirs, load_config, write_config
from report_desk.csv_table import CsvControls, compute_csv_view, export_table_csv, parse_csv
from report_desk.display import render_csv_view, render_folder_list, render_report_view
from report_desk.exceptions import ReportDeskError, ReportNotFoundError
from report_desk.pipeline import (
    ControlState,
    SortDirection,
    SortField,
    SortState,
    compute_view,
    format_page_size,
    parse_page_size,
)
from report_desk.store import ReportStore

console = Console(stderr=True)

_PAGE_SIZE_HELP = "Items per page: a positive integer or 'All'."


def _error(message: str) -> None:
    """Print an error line and exit 1."""
    console.print(f"[red bold]Error:[/red bold] {escape(message)}")
    sys.exit(1)


def _open_store() -> ReportStore:
    """Build the store for the configured data directory."""
    return ReportStore(load_config().data_dir)


def _page_size_option(value: str | None, default: int | None) -> int | None:
    """Parse a ``--page-size`` value or fall back to ``default``."""
    if value is None:
        return default
    try:
        return parse_page_size(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc), param_hint="--page-size") from exc


@click.group()
@click.version_option(version=__version__, prog_name="report-desk")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging.")
def main(verbose: bool) -> None:
    """Browse, tag, and view CSV-backed reports organized into folders."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@main.command()
def folders() -> None:
    """List report folders."""
    render_folder_list(_open_store().list_folders())


@main.command("list")
@click.argument("folder_id")
@click.option("--search", default="", help="Case-insensitive substring of the report name.")
@click.option("--tag", default=None, help="Only reports carrying this tag.")
@click.option(
    "--status",
    type=click.Choice(["active", "inactive"], case_sensitive=False),
    default=None,
    help="Only active or only inactive reports.",
)
@click.option(
    "--sort",
    "sort_field",
    type=click.Choice([f.value for f in SortField], case_sensitive=False),
    default=None,
    help="Sort field.",
)
@click.option("--desc", is_flag=True, default=False, help="Sort descending.")
@click.option("--group", is_flag=True, default=False, help="Group reports by date.")
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page number.")
@click.option("--page-size", default=None, help=_PAGE_SIZE_HELP)
def list_cmd(
    folder_id: str,
    search: str,
    tag: str | None,
    status: str | None,
    sort_field: str | None,
    desc: bool,
    group: bool,
    page: int,
    page_size: str | None,
) -> None:
    """List the reports in FOLDER_ID.

    Filters, sorting, grouping, and paging behave exactly as in the web
    dashboard. Out-of-range pages are clamped to the last page.

    Args:
        folder_id: Folder to list.
        search: Name search text.
        tag: Tag filter.
        status: "active" or "inactive".
        sort_field: Field to sort by.
        desc: Sort descending instead of ascending.
        group: Group by date (all groups expanded, no paging).
        page: Page number.
        page_size: Reports per page.
    """
    config = load_config()
    store = ReportStore(config.data_dir)
    reports = store.list_reports(folder_id)

    sort = SortState()
    if sort_field:
        sort = SortState(
            key=SortField(sort_field.lower()),
            direction=SortDirection.DESC if desc else SortDirection.ASC,
        )

    controls = ControlState(
        search=search,
        tag=tag,
        status=None if status is None else status.lower() == "active",
        sort=sort,
        group_by_date=group,
        expanded=frozenset(r.date_key for r in reports),
        page_size=_page_size_option(page_size, config.page_size),
        page=page,
    )
    render_report_view(compute_view(reports, controls))


@main.command()
@click.argument("report_id")
@click.option("--filter", "filter_text", default="", help="Keep rows containing this text.")
@click.option("--sort-column", default=None, type=click.IntRange(min=0), help="Column index.")
@click.option("--desc", is_flag=True, default=False, help="Sort descending.")
@click.option("--page", default=1, type=click.IntRange(min=1), help="Page number.")
@click.option("--page-size", default=None, help=_PAGE_SIZE_HELP)
def show(
    report_id: str,
    filter_text: str,
    sort_column: int | None,
    desc: bool,
    page: int,
    page_size: str | None,
) -> None:
    """Display the CSV data of REPORT_ID.

    Inactive reports cannot be viewed.

    Args:
        report_id: Report to display.
        filter_text: Row filter.
        sort_column: 0-based column to sort by.
        desc: Sort descending.
        page: Page number.
        page_size: Rows per page.
    """
    config = load_config()
    store = ReportStore(config.data_dir)

    try:
        report = store.get_report(report_id)
    except (ReportDeskError, OSError) as exc:
        _error(str(exc))
        return

    if not report.is_active:
        _error(f"Report '{report.name}' is inactive and cannot be viewed.")

    try:
        table = parse_csv(store.get_raw_csv(report_id))
    except ReportNotFoundError:
        _error(f"CSV file for report '{report_id}' not found.")
        return
    except ReportDeskError as exc:
        _error(str(exc))
        return

    sort = SortState()
    if sort_column is not None:
        if sort_column >= len(table.headers):
            _error(f"Column {sort_column} out of range (table has {len(table.headers)}).")
        sort = SortState(
            key=sort_column,
            direction=SortDirection.DESC if desc else SortDirection.ASC,
        )

    controls = CsvControls(
        filter_text=filter_text,
        sort=sort,
        page_size=_page_size_option(page_size, config.csv_page_size),
        page=page,
    )
    render_csv_view(compute_csv_view(table, controls), title=report.name, sort=sort)


def _set_status(report_id: str, active: bool) -> None:
    """Shared body of ``activate`` and ``deactivate``."""
    if not _open_store().set_active(report_id, active):
        _error(f"Could not update report '{report_id}'.")
    state = "active" if active else "inactive"
    console.print(f"[dim]Report {report_id} is now {state}.[/dim]")


@main.command()
@click.argument("report_id")
def activate(report_id: str) -> None:
    """Mark REPORT_ID as active."""
    _set_status(report_id, True)


@main.command()
@click.argument("report_id")
def deactivate(report_id: str) -> None:
    """Mark REPORT_ID as inactive."""
    _set_status(report_id, False)


@main.group()
def tag() -> None:
    """Add or remove report tags."""


@tag.command("add")
@click.argument("report_id")
@click.argument("tag_name")
def tag_add(report_id: str, tag_name: str) -> None:
    """Attach TAG_NAME to REPORT_ID."""
    if not tag_name.strip():
        raise click.BadParameter("Tag must not be blank.", param_hint="TAG_NAME")
    if not _open_store().add_tag(report_id, tag_name):
        _error(f"Could not tag report '{report_id}'.")
    console.print(f"[dim]Tagged {report_id} with '{tag_name.strip()}'.[/dim]")


@tag.command("remove")
@click.argument("report_id")
@click.argument("tag_name")
def tag_remove(report_id: str, tag_name: str) -> None:
    """Detach TAG_NAME from REPORT_ID."""
    if not _open_store().remove_tag(report_id, tag_name):
        _error(f"Could not update tags of report '{report_id}'.")
    console.print(f"[dim]Removed '{tag_name}' from {report_id}.[/dim]")


@main.command("import")
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.option("--folder", "folder_id", required=True, help="Target folder id.")
@click.option("--folder-name", default=None, help="Name for a newly created folder.")
@click.option("--name", default=None, help="Report name (default: file name).")
@click.option("--tag", "tags", multiple=True, help="Tag to attach; repeatable.")
@click.option("--date", "date", default=None, help="ISO 8601 report date (default: now).")
@click.option("--inactive", is_flag=True, default=False, help="Import as inactive.")
def import_cmd(
    csv_file: str,
    folder_id: str,
    folder_name: str | None,
    name: str | None,
    tags: tuple[str, ...],
    date: str | None,
    inactive: bool,
) -> None:
    """Register CSV_FILE as a new report in a folder.

    Args:
        csv_file: CSV file to import.
        folder_id: Folder to add the report to (created if missing).
        folder_name: Display name for a new folder.
        name: Report display name.
        tags: Initial tags.
        date: Report date.
        inactive: Import the report as inactive.
    """
    try:
        report = _open_store().import_report(
            folder_id,
            Path(csv_file),
            name=name,
            tags=tags,
            date=date,
            active=not inactive,
            folder_name=folder_name,
        )
    except (ReportDeskError, OSError) as exc:
        _error(str(exc))
        return
    click.echo(report.id)


@main.command()
@click.argument("report_id")
@click.option(
    "--file",
    "output_file",
    type=click.Path(dir_okay=False, writable=True),
    default=None,
    help="Write to FILE instead of stdout.",
)
def export(report_id: str, output_file: str | None) -> None:
    """Export the parsed CSV data of REPORT_ID.

    Output is the header and every well-formed row, comma-joined.
    """
    try:
        content = export_table_csv(parse_csv(_open_store().get_raw_csv(report_id)))
    except ReportDeskError as exc:
        _error(str(exc))
        return

    if output_file is None:
        click.echo(content)
        return

    resolved = Path(output_file).resolve()
    try:
        resolved.write_text(content, encoding="utf-8")
    except OSError as exc:
        _error(f"Cannot write to {resolved}: {exc}")
    console.print(f"[dim]Output written to {resolved}[/dim]")


@main.command()
@click.option("--port", default=None, type=int, help="Port to bind to.")
@click.option("--host", default=None, help="Host to bind to.")
@click.option("--no-open", is_flag=True, help="Don't open browser automatically.")
def serve(port: int | None, host: str | None, no_open: bool) -> None:
    """Start the web UI server."""
    from report_desk.web.app import create_app

    cfg = load_config()
    create_app(host=host or cfg.host, port=port or cfg.port, show=not no_open, config=cfg)


@main.group()
def config() -> None:
    """Manage configuration."""


@config.command()
def path() -> None:
    """Print the configuration file path."""
    click.echo(CONFIG_PATH)


@config.command("show")
def config_show() -> None:
    """Display effective configuration."""
    cfg = load_config()
    click.echo(f"data_dir      = {cfg.data_dir}")
    click.echo(f"page_size     = {format_page_size(cfg.page_size)}")
    click.echo(f"csv_page_size = {format_page_size(cfg.csv_page_size)}")
    click.echo(f"group_by_date = {str(cfg.group_by_date).lower()}")
    click.echo(f"host          = {cfg.host}")
    click.echo(f"port          = {cfg.port}")


@config.command("init")
@click.option("--data-dir", default=None, help="Directory for structure.json and reports/.")
def config_init(data_dir: str | None) -> None:
    """Write the effective configuration and create the data directories."""
    cfg = load_config()
    if data_dir:
        cfg.data_dir = Path(data_dir).expanduser().resolve()
    written = write_config(cfg)
    ensure_dirs(cfg)
    console.print(f"[dim]Configuration written to {written}[/dim]")


if __name__ == "__main__":
    main()
