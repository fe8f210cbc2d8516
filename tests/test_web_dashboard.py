"""Tests for dashboard page helpers (no NiceGUI server started)."""

from __future__ import annotations

from pathlib import Path

from report_desk.config import Config
from report_desk.models import FolderSummary, Report
from report_desk.pipeline import ControlState, SortField


def _make_reports() -> list[Report]:
    return [
        Report(id="r1", name="Sales", is_active=True, tags=("q1", "fin"), date="2024-01-02"),
        Report(id="r2", name="Costs", is_active=False, tags=("fin",), date="2024-01-01"),
        Report(id="r3", name="Assets", is_active=True, date="2024-01-03"),
    ]


class TestResolveFolder:
    """resolve_folder picks the folder to display."""

    def test_requested_wins(self) -> None:
        """A ?folder= value is used as given."""
        from report_desk.web.pages.dashboard import resolve_folder

        folders = [FolderSummary("a", "A"), FolderSummary("b", "B")]
        assert resolve_folder(folders, "b") == "b"

    def test_defaults_to_first(self) -> None:
        """Without a request, the first folder is shown."""
        from report_desk.web.pages.dashboard import resolve_folder

        assert resolve_folder([FolderSummary("a", "A")], None) == "a"

    def test_no_folders(self) -> None:
        """No folders and no request gives None."""
        from report_desk.web.pages.dashboard import resolve_folder

        assert resolve_folder([], None) is None


class TestFilterOptions:
    """Select options for the tag and status filters."""

    def test_tag_options(self) -> None:
        """'All Tags' first, then sorted distinct tags."""
        from report_desk.web.pages.dashboard import tag_options

        assert tag_options(_make_reports()) == {"": "All Tags", "fin": "fin", "q1": "q1"}

    def test_status_round_trip(self) -> None:
        """Every status option parses to its filter value."""
        from report_desk.web.pages.dashboard import parse_status, status_options

        parsed = {parse_status(value) for value in status_options()}
        assert parsed == {None, True, False}

    def test_parse_status_none(self) -> None:
        """A cleared select means no status filter."""
        from report_desk.web.pages.dashboard import parse_status

        assert parse_status(None) is None

    def test_group_button_text(self) -> None:
        """Button text reflects the grouping state."""
        from report_desk.web.pages.dashboard import group_button_text

        assert group_button_text(True) == "Disable Grouping"
        assert group_button_text(False) == "Enable Grouping"


class TestInitialState:
    """initial_controls and filtered_reports."""

    def test_initial_controls_from_config(self, tmp_path: Path) -> None:
        """Grouping and page size come from the config."""
        from report_desk.web.pages.dashboard import initial_controls

        controls = initial_controls(Config(data_dir=tmp_path, page_size=50, group_by_date=False))
        assert controls.page_size == 50
        assert controls.group_by_date is False
        assert controls.page == 1

    def test_filtered_reports_ignores_paging(self) -> None:
        """Exports cover every matching report, not just the current page."""
        from report_desk.web.pages.dashboard import _DashboardState, filtered_reports

        controls = ControlState(tag="fin", page_size=5, page=1).sorted_by(SortField.NAME)
        ds = _DashboardState(folder_id="f", reports=_make_reports(), controls=controls)
        assert [r.id for r in filtered_reports(ds)] == ["r2", "r1"]


class TestDropMissingTag:
    """drop_missing_tag keeps the tag filter consistent with the loaded folder."""

    def test_tag_absent_from_new_folder_is_cleared(self) -> None:
        """Switching to a folder without the filtered tag clears the filter."""
        from report_desk.web.pages.dashboard import drop_missing_tag

        other_folder = [Report(id="x", name="Other", tags=("ops",), date="2024-02-01")]
        controls = ControlState(tag="q1", search="s", page=3)
        result = drop_missing_tag(controls, other_folder)
        assert result.tag is None
        assert result.search == "s"
        assert result.page == 1

    def test_tag_present_is_kept(self) -> None:
        """A tag that some report carries stays selected, page untouched."""
        from report_desk.web.pages.dashboard import drop_missing_tag

        controls = ControlState(tag="q1", page_size=1, page=2)
        assert drop_missing_tag(controls, _make_reports()) is controls

    def test_no_tag_filter_unchanged(self) -> None:
        """Without a tag filter the controls are returned as-is."""
        from report_desk.web.pages.dashboard import drop_missing_tag

        controls = ControlState()
        assert drop_missing_tag(controls, []) is controls

    def test_cleared_filter_shows_every_report(self) -> None:
        """After the switch the list is no longer emptied by the stale tag."""
        from report_desk.pipeline import compute_view
        from report_desk.web.pages.dashboard import drop_missing_tag

        other_folder = [Report(id=f"x{i}", name=f"R{i}", date="2024-02-01") for i in range(3)]
        controls = drop_missing_tag(ControlState(tag="q1", group_by_date=False), other_folder)
        assert compute_view(other_folder, controls).matched == 3
