"""Shared layout components for the Report Desk web interface.

Provides the navigation shell (header + footer) used by all pages. Dark mode
is set globally via ui.run(dark=True) in app.py; the layout provides a
toggle for runtime switching.
"""

from __future__ import annotations

from nicegui import ui

from report_desk import __version__


def create_layout() -> None:
    """Create the shared navigation shell.

    Adds a header with the app title and dark mode toggle and a footer with
    the version string. Call this at the top of every @ui.page function.
    """
    dark = ui.dark_mode()

    with ui.header().classes("items-center justify-between px-4"):
        ui.link("Report Dashboard", "/").classes("text-lg font-bold text-white no-underline")
        with ui.row().classes("items-center gap-2"):
            ui.switch("Dark mode", value=True).bind_value(dark).classes("text-sm")

    with ui.footer().classes("bg-gray-900 text-gray-500 text-xs py-2 px-4"):
        ui.label(f"Report Desk v{__version__}")
