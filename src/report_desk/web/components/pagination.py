"""Pager component — page-size select, range text, and navigation buttons.

Provides pure-Python formatting helpers plus NiceGUI rendering for the pager
shared by the report table and the CSV viewer. Buttons disable themselves at
the first/last page, so the page number never leaves ``[1, total_pages]``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from report_desk.pipeline import (
    PAGE_SIZE_OPTIONS,
    Page,
    PageAction,
    format_page_size,
    nav_state,
    parse_page_size,
    step_page,
)

# ---------------------------------------------------------------------------
# Pure-Python helpers (testable without NiceGUI)
# ---------------------------------------------------------------------------

_BUTTON_LABELS: dict[PageAction, str] = {
    PageAction.FIRST: "First",
    PageAction.PREVIOUS: "Previous",
    PageAction.NEXT: "Next",
    PageAction.LAST: "Last",
}


def page_size_choices() -> list[str]:
    """Labels for the page-size select, in display order."""
    return [format_page_size(size) for size in PAGE_SIZE_OPTIONS]


def format_range_text(page: Page[Any], noun: str) -> str:
    """Describe which slice of the sequence is visible.

    Args:
        page: Current page.
        noun: Plural item name, e.g. "reports" or "rows".

    Returns:
        ``"Showing 11 - 20 of 42 reports"``, or ``"42 reports"`` when the
        page size is unbounded.
    """
    if page.page_size is None:
        return f"{page.total_items} {noun}"
    return f"Showing {page.first_item} - {page.last_item} of {page.total_items} {noun}"


def format_page_label(page: Page[Any]) -> str:
    """Text between the pager buttons, e.g. ``"Page 2 of 5"``."""
    return f"Page {page.page} of {page.total_pages}"


def pager_visible(page: Page[Any]) -> bool:
    """The pager is only shown when there is more than one page."""
    return page.page_size is not None and page.total_items > page.page_size


# ---------------------------------------------------------------------------
# NiceGUI rendering
# ---------------------------------------------------------------------------


def render_page_size_select(
    page_size: int | None,
    on_change: Callable[[int | None], None],
) -> Any:
    """Render the page-size select.

    Args:
        page_size: Current page size (None = All).
        on_change: Called with the newly selected page size.

    Returns:
        The select element.
    """
    from nicegui import ui

    def _changed(e: Any) -> None:
        on_change(parse_page_size(e.value))

    return (
        ui.select(
            page_size_choices(),
            value=format_page_size(page_size),
            label="Rows per page",
            on_change=_changed,
        )
        .classes("w-32 text-sm")
        .props("outlined dense")
    )


def render_pager(page: Page[Any], on_page: Callable[[int], None]) -> None:
    """Render First/Previous/Next/Last buttons around a page label.

    Renders nothing when everything fits on one page.

    Args:
        page: Current page metadata.
        on_page: Called with the target page number after a button press.
    """
    if not pager_visible(page):
        return

    from nicegui import ui

    enabled = nav_state(page.page, page.total_pages)

    def _button(action: PageAction) -> None:
        button = ui.button(
            _BUTTON_LABELS[action],
            on_click=lambda: on_page(step_page(page.page, page.total_pages, action)),
        ).props("outline dense no-caps")
        button.set_enabled(enabled[action])

    with ui.row().classes("w-full justify-center items-center gap-1 mt-4"):
        _button(PageAction.FIRST)
        _button(PageAction.PREVIOUS)
        ui.label(format_page_label(page)).classes("px-2 text-sm font-mono")
        _button(PageAction.NEXT)
        _button(PageAction.LAST)
