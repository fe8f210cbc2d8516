"""NiceGUI web application for Report Desk.

Defines page routing and server configuration. Started via the
``report-desk serve`` CLI command.
"""

from __future__ import annotations

from nicegui import ui

from report_desk.config import Config, load_config
from report_desk.web.layout import create_layout
from report_desk.web.pages import dashboard


def create_app(
    *,
    host: str = "127.0.0.1",
    port: int = 8080,
    show: bool = True,
    config: Config | None = None,
) -> None:
    """Configure and run the NiceGUI application.

    Registers page routes, applies the shared layout, and starts the
    NiceGUI server. This function blocks until the server is stopped.

    Args:
        host: Bind address. Defaults to localhost.
        port: Port number. Defaults to 8080.
        show: Open browser automatically. Defaults to True.
        config: Loaded configuration. Defaults to ``load_config()``.
    """
    cfg = config or load_config()

    @ui.page("/")
    def index(folder: str | None = None) -> None:
        create_layout()
        dashboard.render(cfg, folder_id=folder)

    ui.run(
        host=host,
        port=port,
        title="Report Desk",
        dark=True,
        show=show,
        reload=False,
    )
