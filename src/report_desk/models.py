"""Data models for report metadata and folder structure.

Defines the records the store loads from ``structure.json`` and the pipeline
transforms for display. Reports are immutable values: every mutation (status
toggle, tag edit) returns a new instance so a snapshot handed to the pipeline
never changes underneath it.

Typical usage::

    from report_desk.models import Report

    report = Report.from_dict({"id": "r1", "name": "Sales", "isActive": True,
                               "tags": ["q1"], "date": "2024-01-02"})
    report = report.with_tag("finance")
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from typing import Any

from report_desk.exceptions import MalformedRecordError


def new_report_id() -> str:
    """Generate a fresh report id.

    Returns:
        First 8 hex characters of a UUID4, safe to use as a file stem.
    """
    return uuid.uuid4().hex[:8]


def _dedupe_tags(tags: list[str] | tuple[str, ...]) -> tuple[str, ...]:
    """Drop blank and repeated tags, keeping first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags:
        cleaned = tag.strip()
        if cleaned:
            seen.setdefault(cleaned, None)
    return tuple(seen)


@dataclass(frozen=True)
class Report:
    """Metadata for one CSV-backed report.

    Attributes:
        id: Stable identifier, unique within the store. Also the CSV file stem.
        name: Display name.
        is_active: Inactive reports are listed but cannot be viewed.
        tags: Ordered, duplicate-free tag names.
        date: ISO 8601 date or date-time string.
    """

    id: str
    name: str
    is_active: bool = True
    tags: tuple[str, ...] = ()
    date: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "tags", _dedupe_tags(self.tags))

    @property
    def date_key(self) -> str:
        """Date portion of ``date`` with any time-of-day component removed."""
        return self.date.split("T", 1)[0]

    def has_tag(self, tag: str) -> bool:
        """Check tag membership."""
        return tag in self.tags

    def with_active(self, active: bool) -> Report:
        """Return a copy with ``is_active`` set."""
        return replace(self, is_active=active)

    def with_tag(self, tag: str) -> Report:
        """Return a copy with ``tag`` appended.

        Blank tags and tags already present leave the record unchanged.
        """
        cleaned = tag.strip()
        if not cleaned or cleaned in self.tags:
            return self
        return replace(self, tags=(*self.tags, cleaned))

    def without_tag(self, tag: str) -> Report:
        """Return a copy with ``tag`` removed."""
        if tag not in self.tags:
            return self
        return replace(self, tags=tuple(t for t in self.tags if t != tag))

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the ``structure.json`` entry format.

        Returns:
            Dictionary with camelCase ``isActive`` and tags as a list.
        """
        return {
            "id": self.id,
            "name": self.name,
            "isActive": self.is_active,
            "tags": list(self.tags),
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Report:
        """Deserialize a ``structure.json`` entry.

        Args:
            data: Raw report entry.

        Returns:
            Report instance.

        Raises:
            MalformedRecordError: If a required field is missing or has the
                wrong type.
        """
        if not isinstance(data, dict):
            raise MalformedRecordError(f"Report entry must be an object, got {type(data).__name__}.")

        for key in ("id", "name", "date"):
            if not isinstance(data.get(key), str):
                raise MalformedRecordError(f"Report entry field '{key}' must be a string.")
        if not data["id"]:
            raise MalformedRecordError("Report entry field 'id' must not be empty.")

        is_active = data.get("isActive", True)
        if not isinstance(is_active, bool):
            raise MalformedRecordError(f"Report '{data['id']}' field 'isActive' must be a boolean.")

        tags = data.get("tags", [])
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise MalformedRecordError(f"Report '{data['id']}' field 'tags' must be a list of strings.")

        return cls(
            id=data["id"],
            name=data["name"],
            is_active=is_active,
            tags=tuple(tags),
            date=data["date"],
        )


@dataclass
class FolderSummary:
    """Folder entry shown in the tab navigation.

    Attributes:
        id: Folder identifier used in ``?folder=`` links.
        name: Display name.
        report_count: Number of report entries in the folder.
    """

    id: str
    name: str
    report_count: int = 0


@dataclass
class Folder:
    """A named group of reports as stored in ``structure.json``.

    Attributes:
        id: Folder identifier.
        name: Display name.
        reports: Report records in stored order.
    """

    id: str
    name: str
    reports: list[Report] = field(default_factory=list)

    def summary(self) -> FolderSummary:
        """Build the lightweight summary used for navigation."""
        return FolderSummary(id=self.id, name=self.name, report_count=len(self.reports))
