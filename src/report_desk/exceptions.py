"""Exception hierarchy for Report Desk.

Every error raised by the store derives from :class:`ReportDeskError` so the
CLI and the web handlers can catch a single type. Each subclass also inherits
the matching builtin so callers that only know ``LookupError`` or ``OSError``
still work.
"""

from __future__ import annotations


class ReportDeskError(Exception):
    """Base exception for all Report Desk errors."""


class ReportNotFoundError(ReportDeskError, LookupError):
    """Raised when a report id or its CSV file does not exist."""

    def __init__(self, report_id: str) -> None:
        super().__init__(f"No report found with id '{report_id}'.")
        self.report_id = report_id


class MalformedRecordError(ReportDeskError, ValueError):
    """Raised when a report metadata entry has missing or mistyped fields."""


class PersistenceError(ReportDeskError, OSError):
    """Raised when the backing store cannot be written."""


class ReportReadError(ReportDeskError, OSError):
    """Raised when a stored or imported CSV file cannot be read or decoded."""
