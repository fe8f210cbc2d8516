"""Export -- JSON and CSV download of report data.

Provides pure-Python serialization for the dashboard's download buttons:
the metadata of the currently filtered report list (JSON or CSV), and the
loaded body of one report from the viewer.
"""

from __future__ import annotations

import csv
import io
import json
from collections.abc import Sequence

from report_desk.csv_table import CsvTable, export_filename, export_table_csv
from report_desk.models import Report

# CSV columns in display order.
_CSV_COLUMNS = ["id", "name", "status", "tags", "date"]


def export_reports_json(reports: Sequence[Report]) -> str:
    """Serialize report metadata to a JSON string.

    Args:
        reports: Reports to export, in display order.

    Returns:
        JSON string containing an array of report objects.
    """
    return json.dumps([r.to_dict() for r in reports], indent=2, ensure_ascii=False)


def export_reports_csv(reports: Sequence[Report]) -> str:
    """Serialize report metadata to a CSV string.

    One row per report with columns: id, name, status, tags, date. Tags are
    joined with ``;`` and fields are quoted where needed.

    Args:
        reports: Reports to export, in display order.

    Returns:
        CSV string with header row and one data row per report.
    """
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(_CSV_COLUMNS)
    for r in reports:
        writer.writerow(
            [r.id, r.name, "active" if r.is_active else "inactive", ";".join(r.tags), r.date]
        )
    return output.getvalue()


def report_download(report_id: str, table: CsvTable) -> tuple[bytes, str]:
    """Build the download payload for the report viewer.

    Args:
        report_id: Report being viewed.
        table: The loaded table (not the filtered view).

    Returns:
        Tuple of (UTF-8 content, filename).
    """
    return export_table_csv(table).encode("utf-8"), export_filename(report_id)
