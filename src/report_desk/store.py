"""Report store — JSON folder structure plus one CSV file per report.

Layout under the data directory::

    structure.json          {"folders": [{"id", "name", "reports": [...]}]}
    reports/{report_id}.csv raw report body

Every mutation is a plain read-modify-write of ``structure.json`` with no
locking; concurrent writers can lose updates (last writer wins). Read
failures while listing degrade to empty results and are logged.

Typical usage::

    from report_desk.store import ReportStore

    store = ReportStore(config.data_dir)
    reports = store.list_reports("finance")
    store.set_active(reports[0].id, False)
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from report_desk.exceptions import (
    MalformedRecordError,
    PersistenceError,
    ReportNotFoundError,
    ReportReadError,
)
from report_desk.models import Folder, FolderSummary, Report, new_report_id

logger = logging.getLogger(__name__)

STRUCTURE_FILE = "structure.json"
REPORTS_DIR = "reports"


class ReportStore:
    """File-backed store of folders, report metadata, and CSV bodies.

    Args:
        data_dir: Directory containing ``structure.json`` and ``reports/``.
    """

    def __init__(self, data_dir: Path) -> None:
        self.data_dir = Path(data_dir)

    @property
    def structure_path(self) -> Path:
        return self.data_dir / STRUCTURE_FILE

    @property
    def reports_dir(self) -> Path:
        return self.data_dir / REPORTS_DIR

    # -- raw structure I/O --------------------------------------------------

    def _read_structure(self) -> dict[str, Any]:
        """Read ``structure.json``; a missing file is an empty structure.

        Raises:
            MalformedRecordError: If the file is not UTF-8 JSON or has no
                ``folders`` list.
        """
        if not self.structure_path.exists():
            return {"folders": []}
        with open(self.structure_path, encoding="utf-8") as f:
            try:
                data = json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                raise MalformedRecordError(f"{self.structure_path} is not valid JSON: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("folders", []), list):
            raise MalformedRecordError(f"{self.structure_path} has no 'folders' list.")
        data.setdefault("folders", [])
        return data

    def _write_structure(self, data: dict[str, Any]) -> None:
        """Write ``structure.json``.

        Raises:
            PersistenceError: If the file cannot be written.
        """
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(self.structure_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as exc:
            raise PersistenceError(f"Cannot write {self.structure_path}: {exc}") from exc

    def _load_folders(self) -> list[Folder]:
        """Parse every folder, skipping malformed folder and report entries."""
        folders: list[Folder] = []
        for raw_folder in self._read_structure()["folders"]:
            if not isinstance(raw_folder, dict):
                logger.warning("Skipping malformed folder entry: %r", raw_folder)
                continue
            folder_id = raw_folder.get("id")
            if not isinstance(folder_id, str) or not folder_id:
                logger.warning("Skipping folder without an id: %r", raw_folder)
                continue
            folders.append(
                Folder(
                    id=folder_id,
                    name=str(raw_folder.get("name", folder_id)),
                    reports=list(_parse_reports(folder_id, raw_folder.get("reports", []))),
                )
            )
        return folders

    # -- queries --------------------------------------------------------------

    def list_folders(self) -> list[FolderSummary]:
        """List folders in stored order.

        Returns:
            Folder summaries, or an empty list if the structure cannot be read.
        """
        try:
            return [folder.summary() for folder in self._load_folders()]
        except (OSError, MalformedRecordError):
            logger.exception("Error fetching folders")
            return []

    def list_reports(self, folder_id: str) -> list[Report]:
        """List the reports of one folder.

        Args:
            folder_id: Folder to list.

        Returns:
            Reports in stored order; empty if the folder does not exist or
            the structure cannot be read.
        """
        try:
            folders = self._load_folders()
        except (OSError, MalformedRecordError):
            logger.exception("Error fetching reports for folder %s", folder_id)
            return []

        for folder in folders:
            if folder.id == folder_id:
                return folder.reports
        return []

    def get_report(self, report_id: str) -> Report:
        """Find a report by id in any folder.

        Raises:
            ReportNotFoundError: If no folder contains the id.
        """
        for folder in self._load_folders():
            for report in folder.reports:
                if report.id == report_id:
                    return report
        raise ReportNotFoundError(report_id)

    def csv_path(self, report_id: str) -> Path:
        """Path of a report's CSV file.

        Raises:
            ReportNotFoundError: If the id could escape the reports directory.
        """
        if not report_id or any(sep in report_id for sep in ("/", "\\")) or report_id in (".", ".."):
            raise ReportNotFoundError(report_id)
        return self.reports_dir / f"{report_id}.csv"

    def get_raw_csv(self, report_id: str) -> str:
        """Read a report's raw CSV text.

        Raises:
            ReportNotFoundError: If the CSV file does not exist.
            ReportReadError: If the file cannot be read or is not UTF-8.
        """
        path = self.csv_path(report_id)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            logger.error("Error fetching report CSV: %s not found", path)
            raise ReportNotFoundError(report_id) from exc
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("Error fetching report CSV %s: %s", path, exc)
            raise ReportReadError(f"Cannot read CSV for report '{report_id}': {exc}") from exc

    # -- mutations ------------------------------------------------------------

    def _update_report(self, report_id: str, update: Callable[[Report], Report]) -> bool:
        """Apply ``update`` to every entry for ``report_id`` and persist.

        Unknown keys on the stored entry are kept.

        Returns:
            True if at least one entry was updated and written.
        """
        try:
            data = self._read_structure()
            found = False
            for raw_folder in _folder_entries(data):
                entries = raw_folder.get("reports", [])
                if not isinstance(entries, list):
                    continue
                for index, entry in enumerate(entries):
                    if not isinstance(entry, dict) or entry.get("id") != report_id:
                        continue
                    updated = update(Report.from_dict(entry))
                    entries[index] = {**entry, **updated.to_dict()}
                    found = True
            if not found:
                logger.warning("Report %s not found; nothing updated", report_id)
                return False
            self._write_structure(data)
        except (OSError, MalformedRecordError):
            logger.exception("Error updating report %s", report_id)
            return False
        return True

    def set_active(self, report_id: str, active: bool) -> bool:
        """Set a report's active flag in every folder that lists it.

        Returns:
            True on success, False if the report is unknown or the write failed.
        """
        return self._update_report(report_id, lambda r: r.with_active(active))

    def add_tag(self, report_id: str, tag: str) -> bool:
        """Attach a tag to a report (no-op if already present)."""
        return self._update_report(report_id, lambda r: r.with_tag(tag))

    def remove_tag(self, report_id: str, tag: str) -> bool:
        """Detach a tag from a report."""
        return self._update_report(report_id, lambda r: r.without_tag(tag))

    def import_report(
        self,
        folder_id: str,
        source: Path,
        *,
        name: str | None = None,
        tags: Iterable[str] = (),
        date: str | None = None,
        active: bool = True,
        folder_name: str | None = None,
    ) -> Report:
        """Register a CSV file as a new report.

        Copies ``source`` into the reports directory under a fresh id and
        appends the record to ``folder_id``, creating the folder if needed.

        Args:
            folder_id: Target folder.
            source: CSV file to import.
            name: Display name. Defaults to the file stem.
            tags: Initial tags.
            date: ISO 8601 date. Defaults to now (UTC).
            active: Initial active flag.
            folder_name: Name for a newly created folder. Defaults to ``folder_id``.

        Returns:
            The new report record.

        Raises:
            ReportReadError: If ``source`` cannot be read as UTF-8 text.
            MalformedRecordError: If ``structure.json`` cannot be parsed.
            PersistenceError: If the CSV or the structure cannot be written.
        """
        try:
            text = Path(source).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ReportReadError(f"Cannot read {source} as UTF-8 text: {exc}") from exc
        data = self._read_structure()

        existing = {
            entry.get("id")
            for raw_folder in _folder_entries(data)
            if isinstance(raw_folder.get("reports", []), list)
            for entry in raw_folder.get("reports", [])
            if isinstance(entry, dict)
        }
        report_id = new_report_id()
        while report_id in existing:
            report_id = new_report_id()

        report = Report(
            id=report_id,
            name=name or Path(source).stem,
            is_active=active,
            tags=tuple(tags),
            date=date or datetime.now(UTC).isoformat(timespec="seconds"),
        )

        try:
            self.reports_dir.mkdir(parents=True, exist_ok=True)
            self.csv_path(report_id).write_text(text, encoding="utf-8")
        except OSError as exc:
            raise PersistenceError(f"Cannot write CSV for report {report_id}: {exc}") from exc

        for raw_folder in _folder_entries(data):
            if raw_folder.get("id") == folder_id:
                if not isinstance(raw_folder.get("reports"), list):
                    logger.warning("Folder %s has a non-list 'reports' field; replacing it", folder_id)
                    raw_folder["reports"] = []
                raw_folder["reports"].append(report.to_dict())
                break
        else:
            data["folders"].append(
                {"id": folder_id, "name": folder_name or folder_id, "reports": [report.to_dict()]}
            )

        self._write_structure(data)
        logger.info("Imported %s as report %s in folder %s", source, report_id, folder_id)
        return report


def _parse_reports(folder_id: str, entries: Any) -> Iterable[Report]:
    """Yield valid reports from a folder's raw entries, warning on bad ones."""
    if not isinstance(entries, list):
        logger.warning("Folder %s has a non-list 'reports' field; ignoring it", folder_id)
        return
    for entry in entries:
        try:
            yield Report.from_dict(entry)
        except MalformedRecordError as exc:
            logger.warning("Skipping report in folder %s: %s", folder_id, exc)


def _folder_entries(data: dict[str, Any]) -> Iterable[dict[str, Any]]:
    """Yield the raw folder objects of a structure, skipping anything else."""
    for raw_folder in data["folders"]:
        if isinstance(raw_folder, dict):
            yield raw_folder
