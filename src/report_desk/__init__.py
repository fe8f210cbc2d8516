"""Report Desk — folder-organized dashboard for CSV-backed reports."""

__version__ = "0.1.0"
