"""View-model pipeline — filter, sort, group, and paginate report lists.

Turns the report records of one folder plus an immutable :class:`ControlState`
into exactly what the dashboard renders. Every function here is pure: inputs
are never mutated and no I/O happens, so the pipeline is re-run on every
control change.

Typical usage::

    from report_desk.pipeline import ControlState, SortField, compute_view

    controls = ControlState(search="sales").sorted_by(SortField.NAME)
    view = compute_view(reports, controls)
    for report in view.rows:
        ...
"""

from __future__ import annotations

import math
import unicodedata
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import StrEnum
from typing import Generic, TypeVar

from report_desk.models import Report

T = TypeVar("T")

# Page size choices offered by every pager. None means "All".
PAGE_SIZE_OPTIONS: tuple[int | None, ...] = (5, 10, 50, 100, None)
DEFAULT_PAGE_SIZE = 10
ALL_LABEL = "All"


class SortDirection(StrEnum):
    """Direction of an active sort."""

    ASC = "asc"
    DESC = "desc"


class SortField(StrEnum):
    """Sortable report columns."""

    NAME = "name"
    DATE = "date"
    STATUS = "status"


class PageAction(StrEnum):
    """Pager buttons."""

    FIRST = "first"
    PREVIOUS = "previous"
    NEXT = "next"
    LAST = "last"


# ---------------------------------------------------------------------------
# Sort state machine (shared with the CSV viewer)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SortState:
    """Which key is sorted and in which direction.

    ``key`` is a :class:`SortField` for report lists and a column index for
    CSV tables. Both unset is the neutral state (no sort applied).

    Attributes:
        key: Sorted field or column, or None.
        direction: Sort direction, or None.
    """

    key: str | int | None = None
    direction: SortDirection | None = None

    @property
    def is_neutral(self) -> bool:
        """True when no sort is applied."""
        return self.key is None or self.direction is None

    def direction_for(self, key: str | int) -> SortDirection | None:
        """Direction shown on the header for ``key``, or None if not sorted by it."""
        if self.is_neutral or self.key != key:
            return None
        return self.direction


NEUTRAL_SORT = SortState()


def cycle_sort(state: SortState, key: str | int) -> SortState:
    """Advance the sort state after a click on ``key``.

    Clicking the sorted key cycles ascending → descending → neutral →
    ascending. Clicking any other key starts it at ascending and drops the
    previous key, so only one key is sorted at a time.

    Args:
        state: Current sort state.
        key: Field or column index that was clicked.

    Returns:
        The next sort state.
    """
    if state.is_neutral or state.key != key:
        return SortState(key=key, direction=SortDirection.ASC)
    if state.direction is SortDirection.ASC:
        return SortState(key=key, direction=SortDirection.DESC)
    return NEUTRAL_SORT


def collation_key(text: str) -> tuple[str, str]:
    """Build a locale-style sort key for display strings.

    The primary key ignores case and accents; ties fall back to a
    lowercase-first, unaccented-first comparison so the order is total.

    Args:
        text: String to collate.

    Returns:
        Tuple usable as a sort key.
    """
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(c for c in decomposed if not unicodedata.combining(c)).casefold()
    return base, text.swapcase()


def parse_timestamp(value: str) -> float | None:
    """Parse an ISO 8601 date or date-time into a POSIX timestamp.

    Date-only and naive values are read as UTC.

    Args:
        value: ISO 8601 string.

    Returns:
        Seconds since the epoch, or None if the value does not parse.
    """
    try:
        parsed = datetime.fromisoformat(value.strip())
    except (ValueError, TypeError, AttributeError):
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.timestamp()


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def filter_reports(
    reports: Sequence[Report],
    search: str = "",
    tag: str | None = None,
    status: bool | None = None,
) -> list[Report]:
    """Keep reports matching the search text, tag, and status filters.

    Args:
        reports: Reports in display order.
        search: Case-insensitive substring of the report name. Empty matches all.
        tag: Required tag, or None/empty for any.
        status: Required ``is_active`` value, or None for any.

    Returns:
        New list of matching reports, input order preserved.
    """
    needle = search.casefold()
    result: list[Report] = []
    for report in reports:
        if needle and needle not in report.name.casefold():
            continue
        if tag and tag not in report.tags:
            continue
        if status is not None and report.is_active != status:
            continue
        result.append(report)
    return result


def sort_reports(reports: Sequence[Report], sort: SortState) -> list[Report]:
    """Sort reports by name, date, or status.

    The neutral state returns the input order. Sorting is stable, so reports
    with equal keys keep their relative order in both directions. Reports
    whose date does not parse are placed after all others when sorting by
    date.

    Args:
        reports: Reports to sort.
        sort: Sort state with a :class:`SortField` key.

    Returns:
        New sorted list.
    """
    if sort.is_neutral:
        return list(reports)

    descending = sort.direction is SortDirection.DESC

    if sort.key == SortField.NAME:
        return sorted(reports, key=lambda r: collation_key(r.name), reverse=descending)

    if sort.key == SortField.STATUS:
        return sorted(reports, key=lambda r: int(r.is_active), reverse=descending)

    if sort.key == SortField.DATE:
        dated: list[tuple[float, Report]] = []
        undated: list[Report] = []
        for report in reports:
            ts = parse_timestamp(report.date)
            if ts is None:
                undated.append(report)
            else:
                dated.append((ts, report))
        dated.sort(key=lambda pair: pair[0], reverse=descending)
        return [r for _, r in dated] + undated

    raise ValueError(f"Unknown sort field '{sort.key}'.")


@dataclass
class ReportGroup:
    """Reports sharing one calendar date.

    Attributes:
        date_key: ISO date (``YYYY-MM-DD``) shared by the group.
        reports: Members in pre-grouping order.
        expanded: Whether the group body is shown.
    """

    date_key: str
    reports: list[Report] = field(default_factory=list)
    expanded: bool = False

    @property
    def count(self) -> int:
        """Number of reports in the group."""
        return len(self.reports)


def group_by_date(
    reports: Sequence[Report],
    expanded: Iterable[str] = (),
) -> list[ReportGroup]:
    """Partition reports by the date part of their ``date`` field.

    Args:
        reports: Reports in the order they should appear inside groups.
        expanded: Date keys whose groups are expanded.

    Returns:
        Groups ordered most recent date first.
    """
    expanded_keys = set(expanded)
    groups: dict[str, list[Report]] = {}
    for report in reports:
        groups.setdefault(report.date_key, []).append(report)

    return [
        ReportGroup(date_key=key, reports=members, expanded=key in expanded_keys)
        for key, members in sorted(groups.items(), key=lambda item: item[0], reverse=True)
    ]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


@dataclass
class Page(Generic[T]):
    """One page of a sequence plus the metadata the pager displays.

    Attributes:
        items: Elements on this page.
        page: 1-based page number.
        page_size: Elements per page, None for unbounded.
        total_pages: Number of pages (at least 1).
        total_items: Length of the full sequence.
    """

    items: list[T]
    page: int
    page_size: int | None
    total_pages: int
    total_items: int

    @property
    def first_item(self) -> int:
        """1-based position of the first element shown (0 when empty)."""
        if self.page_size is None:
            return 1 if self.total_items else 0
        return min((self.page - 1) * self.page_size + 1, self.total_items)

    @property
    def last_item(self) -> int:
        """1-based position of the last element shown."""
        if self.page_size is None:
            return self.total_items
        return min(self.page * self.page_size, self.total_items)


def count_pages(total_items: int, page_size: int | None) -> int:
    """Number of pages for ``total_items`` elements.

    Args:
        total_items: Sequence length.
        page_size: Elements per page, None for unbounded.

    Returns:
        Page count, never less than 1.
    """
    if page_size is None:
        return 1
    if page_size < 1:
        raise ValueError(f"Page size must be positive, got {page_size}.")
    return max(1, math.ceil(total_items / page_size))


def clamp_page(page: int, total_pages: int) -> int:
    """Pull ``page`` back into ``[1, total_pages]``."""
    return min(max(page, 1), max(total_pages, 1))


def paginate(items: Sequence[T], page_size: int | None, page: int = 1) -> Page[T]:
    """Slice one page out of a sequence.

    Args:
        items: Full sequence.
        page_size: Elements per page, None to return everything on one page.
        page: 1-based page number.

    Returns:
        The requested page.

    Raises:
        ValueError: If ``page_size`` is not positive or ``page`` is outside
            ``[1, total_pages]``.
    """
    total = count_pages(len(items), page_size)
    if page < 1 or page > total:
        raise ValueError(f"Page {page} is out of range 1-{total}.")

    if page_size is None:
        visible = list(items)
    else:
        start = (page - 1) * page_size
        visible = list(items[start : start + page_size])

    return Page(
        items=visible,
        page=page,
        page_size=page_size,
        total_pages=total,
        total_items=len(items),
    )


def step_page(page: int, total_pages: int, action: PageAction) -> int:
    """Apply a pager button press.

    Buttons at a boundary are no-ops, so the result always stays in
    ``[1, total_pages]``.

    Args:
        page: Current page.
        total_pages: Page count.
        action: Button pressed.

    Returns:
        The new page number.
    """
    last = max(total_pages, 1)
    if action is PageAction.FIRST:
        target = 1
    elif action is PageAction.PREVIOUS:
        target = page - 1
    elif action is PageAction.NEXT:
        target = page + 1
    else:
        target = last
    return clamp_page(target, last)


def nav_state(page: int, total_pages: int) -> dict[PageAction, bool]:
    """Which pager buttons are enabled.

    Args:
        page: Current page.
        total_pages: Page count.

    Returns:
        Mapping of each :class:`PageAction` to its enabled flag.
    """
    at_start = page <= 1
    at_end = page >= total_pages
    return {
        PageAction.FIRST: not at_start,
        PageAction.PREVIOUS: not at_start,
        PageAction.NEXT: not at_end,
        PageAction.LAST: not at_end,
    }


def parse_page_size(value: str | int | None) -> int | None:
    """Read a page size choice from a select value or config entry.

    Args:
        value: ``"All"`` / None for unbounded, or a positive integer.

    Returns:
        Page size, or None for unbounded.

    Raises:
        ValueError: If the value is neither "All" nor a positive integer.
    """
    if value is None:
        return None
    if isinstance(value, str):
        if value.strip().lower() == ALL_LABEL.lower():
            return None
        value = int(value)
    if isinstance(value, bool) or value < 1:
        raise ValueError(f"Page size must be a positive integer or '{ALL_LABEL}', got {value!r}.")
    return value


def format_page_size(page_size: int | None) -> str:
    """Label for a page size option."""
    return ALL_LABEL if page_size is None else str(page_size)


# ---------------------------------------------------------------------------
# Control state and the combined view
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ControlState:
    """Everything the user has selected on the report list.

    Instances are immutable; each ``with_*`` method returns a new state.
    Changing a filter or the page size moves back to page 1.

    Attributes:
        search: Name search text.
        tag: Tag filter, or None for all tags.
        status: Status filter, or None for all.
        sort: Active sort.
        group_by_date: Show date groups instead of a flat table.
        expanded: Expanded group date keys.
        page_size: Reports per page, None for all.
        page: Current page (1-based).
    """

    search: str = ""
    tag: str | None = None
    status: bool | None = None
    sort: SortState = NEUTRAL_SORT
    group_by_date: bool = False
    expanded: frozenset[str] = frozenset()
    page_size: int | None = DEFAULT_PAGE_SIZE
    page: int = 1

    def with_search(self, search: str | None) -> ControlState:
        return replace(self, search=search or "", page=1)

    def with_tag(self, tag: str | None) -> ControlState:
        return replace(self, tag=tag or None, page=1)

    def with_status(self, status: bool | None) -> ControlState:
        return replace(self, status=status, page=1)

    def with_page_size(self, page_size: int | None) -> ControlState:
        return replace(self, page_size=page_size, page=1)

    def with_page(self, page: int) -> ControlState:
        return replace(self, page=page)

    def sorted_by(self, key: SortField) -> ControlState:
        """Apply a header click on ``key``."""
        return replace(self, sort=cycle_sort(self.sort, key))

    def toggle_grouping(self) -> ControlState:
        return replace(self, group_by_date=not self.group_by_date)

    def toggle_group(self, date_key: str) -> ControlState:
        """Expand a collapsed group or collapse an expanded one."""
        return replace(self, expanded=self.expanded ^ {date_key})

    def expand_all(self, date_keys: Iterable[str]) -> ControlState:
        return replace(self, expanded=frozenset(date_keys))

    def collapse_all(self) -> ControlState:
        return replace(self, expanded=frozenset())

    def after_tag_removed(self, tag: str) -> ControlState:
        """Clear the tag filter if it pointed at a tag that was just removed."""
        if self.tag == tag:
            return self.with_tag(None)
        return self


@dataclass
class ReportView:
    """Output of :func:`compute_view`.

    Exactly one of ``rows`` / ``groups`` is populated, depending on
    ``ControlState.group_by_date``.

    Attributes:
        rows: Reports on the current page (flat mode).
        groups: Date groups (grouped mode).
        page: Pagination metadata. In grouped mode everything is one page.
        total_reports: Number of reports before filtering.
    """

    rows: list[Report]
    groups: list[ReportGroup]
    page: Page[Report]
    total_reports: int

    @property
    def matched(self) -> int:
        """Number of reports that passed the filters."""
        return self.page.total_items


def compute_view(reports: Sequence[Report], controls: ControlState) -> ReportView:
    """Run filter → sort → group or paginate for the report list.

    The requested page is clamped into the valid range for the filtered
    count, so a shrinking result set never produces an empty out-of-range
    page.

    Args:
        reports: All reports of the selected folder.
        controls: Current control state.

    Returns:
        The rows or groups to render plus pagination metadata.
    """
    filtered = filter_reports(reports, controls.search, controls.tag, controls.status)
    ordered = sort_reports(filtered, controls.sort)

    if controls.group_by_date:
        return ReportView(
            rows=[],
            groups=group_by_date(ordered, controls.expanded),
            page=paginate(ordered, None),
            total_reports=len(reports),
        )

    total = count_pages(len(ordered), controls.page_size)
    page = paginate(ordered, controls.page_size, clamp_page(controls.page, total))
    return ReportView(
        rows=page.items,
        groups=[],
        page=page,
        total_reports=len(reports),
    )


def collect_tags(reports: Iterable[Report]) -> list[str]:
    """Sorted distinct tags across ``reports`` for the tag filter options."""
    tags: set[str] = set()
    for report in reports:
        tags.update(report.tags)
    return sorted(tags)


def replace_report(reports: Sequence[Report], updated: Report) -> list[Report]:
    """Return a new list with the report sharing ``updated.id`` swapped in."""
    return [updated if r.id == updated.id else r for r in reports]
