"""Tests for report and folder models.

Covers: tag normalization, immutable update helpers, date_key, and the
structure.json (de)serialization including validation errors.
"""

from __future__ import annotations

from typing import Any

import pytest

from report_desk.exceptions import MalformedRecordError, ReportDeskError
from report_desk.models import Folder, Report, new_report_id


def _make_entry(**overrides: Any) -> dict[str, Any]:
    """Build a structure.json report entry."""
    entry: dict[str, Any] = {
        "id": "r1",
        "name": "Quarterly Sales",
        "isActive": True,
        "tags": ["finance", "q1"],
        "date": "2024-01-02T09:30:00Z",
    }
    entry.update(overrides)
    return entry


class TestReport:
    """Report value semantics."""

    def test_tags_deduplicated_and_stripped(self) -> None:
        report = Report(id="r", name="n", tags=(" a ", "b", "a", "", "  "))
        assert report.tags == ("a", "b")

    def test_date_key_drops_time(self) -> None:
        assert Report(id="r", name="n", date="2024-01-02T09:30:00Z").date_key == "2024-01-02"
        assert Report(id="r", name="n", date="2024-01-02").date_key == "2024-01-02"

    def test_with_active_returns_copy(self) -> None:
        report = Report(id="r", name="n", is_active=True)
        flipped = report.with_active(False)
        assert flipped.is_active is False
        assert report.is_active is True

    def test_with_tag_appends(self) -> None:
        report = Report(id="r", name="n", tags=("a",))
        assert report.with_tag(" b ").tags == ("a", "b")

    def test_with_tag_duplicate_or_blank_is_noop(self) -> None:
        report = Report(id="r", name="n", tags=("a",))
        assert report.with_tag("a") is report
        assert report.with_tag("   ") is report

    def test_without_tag(self) -> None:
        report = Report(id="r", name="n", tags=("a", "b", "c"))
        assert report.without_tag("b").tags == ("a", "c")
        assert report.without_tag("zzz") is report

    def test_has_tag(self) -> None:
        report = Report(id="r", name="n", tags=("a",))
        assert report.has_tag("a")
        assert not report.has_tag("A")


class TestReportSerialization:
    """to_dict / from_dict against the structure.json entry format."""

    def test_from_dict(self) -> None:
        report = Report.from_dict(_make_entry())
        assert report.id == "r1"
        assert report.name == "Quarterly Sales"
        assert report.is_active is True
        assert report.tags == ("finance", "q1")

    def test_to_dict_uses_camel_case(self) -> None:
        data = Report.from_dict(_make_entry(isActive=False)).to_dict()
        assert data["isActive"] is False
        assert data["tags"] == ["finance", "q1"]
        assert "is_active" not in data

    def test_round_trip(self) -> None:
        entry = _make_entry()
        assert Report.from_dict(entry).to_dict() == entry

    def test_defaults_for_optional_fields(self) -> None:
        entry = _make_entry()
        del entry["isActive"]
        del entry["tags"]
        report = Report.from_dict(entry)
        assert report.is_active is True
        assert report.tags == ()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"id": 5},
            {"id": ""},
            {"name": None},
            {"date": 20240102},
            {"isActive": "yes"},
            {"tags": "finance"},
            {"tags": ["ok", 3]},
        ],
    )
    def test_invalid_entries_rejected(self, overrides: dict[str, Any]) -> None:
        with pytest.raises(MalformedRecordError):
            Report.from_dict(_make_entry(**overrides))

    def test_missing_field_rejected(self) -> None:
        entry = _make_entry()
        del entry["name"]
        with pytest.raises(MalformedRecordError):
            Report.from_dict(entry)

    def test_non_dict_rejected(self) -> None:
        with pytest.raises(MalformedRecordError):
            Report.from_dict(["r1"])  # type: ignore[arg-type]

    def test_malformed_is_report_desk_error(self) -> None:
        with pytest.raises(ReportDeskError):
            Report.from_dict(_make_entry(id=""))


class TestFolder:
    """Folder summary and id generation."""

    def test_summary_counts_reports(self) -> None:
        folder = Folder(
            id="finance",
            name="Finance",
            reports=[Report(id="a", name="A"), Report(id="b", name="B")],
        )
        summary = folder.summary()
        assert (summary.id, summary.name, summary.report_count) == ("finance", "Finance", 2)

    def test_new_report_id_shape(self) -> None:
        report_id = new_report_id()
        assert len(report_id) == 8
        int(report_id, 16)

    def test_new_report_ids_differ(self) -> None:
        assert len({new_report_id() for _ in range(50)}) == 50
