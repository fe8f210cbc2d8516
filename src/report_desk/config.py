"""Configuration management for Report Desk.

Resolves where report data lives and the default view settings. Configuration
is loaded from a TOML file (~/.report-desk/config.toml) with environment
variable overrides.

Typical usage::

    from report_desk.config import load_config

    config = load_config()
    store = ReportStore(config.data_dir)
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from report_desk.pipeline import DEFAULT_PAGE_SIZE, format_page_size, parse_page_size

logger = logging.getLogger(__name__)

APP_DIR = Path.home() / ".report-desk"
CONFIG_PATH = APP_DIR / "config.toml"
DEFAULT_DATA_DIR = APP_DIR / "data"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8080

# Env var name → config attribute.
_ENV_DATA_DIR = "REPORT_DESK_DATA_DIR"
_ENV_PAGE_SIZE = "REPORT_DESK_PAGE_SIZE"


@dataclass
class Config:
    """Application configuration.

    Attributes:
        data_dir: Directory holding ``structure.json`` and ``reports/``.
        page_size: Default reports per page on the dashboard (None = All).
        csv_page_size: Default rows per page in the report viewer (None = All).
        group_by_date: Whether the dashboard opens in grouped mode.
        host: Default bind address for ``report-desk serve``.
        port: Default port for ``report-desk serve``.
    """

    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)
    page_size: int | None = DEFAULT_PAGE_SIZE
    csv_page_size: int | None = DEFAULT_PAGE_SIZE
    group_by_date: bool = True
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT

    @property
    def structure_path(self) -> Path:
        """Path of the folder/report metadata file."""
        return self.data_dir / "structure.json"

    @property
    def reports_dir(self) -> Path:
        """Directory of per-report CSV files."""
        return self.data_dir / "reports"


def _page_size_or_default(raw: Any, default: int | None, source: str) -> int | None:
    """Parse a page size setting, falling back to ``default`` when invalid.

    Args:
        raw: Raw value from TOML or the environment.
        default: Value to use if ``raw`` is invalid.
        source: Name of the setting, for the warning message.

    Returns:
        Parsed page size.
    """
    try:
        return parse_page_size(raw)
    except (TypeError, ValueError):
        logger.warning("Ignoring invalid page size %r from %s", raw, source)
        return default


def _apply_toml(config: Config, data: dict[str, Any]) -> None:
    """Apply parsed TOML data to a Config instance.

    Args:
        config: Config instance to populate.
        data: Parsed TOML dictionary.
    """
    # --- Storage ---
    storage: dict[str, Any] = data.get("storage", {})
    if storage.get("data_dir"):
        config.data_dir = Path(storage["data_dir"]).expanduser()

    # --- View ---
    view: dict[str, Any] = data.get("view", {})
    if "page_size" in view:
        config.page_size = _page_size_or_default(
            view["page_size"], config.page_size, "view.page_size"
        )
    if "csv_page_size" in view:
        config.csv_page_size = _page_size_or_default(
            view["csv_page_size"], config.csv_page_size, "view.csv_page_size"
        )
    if "group_by_date" in view:
        config.group_by_date = bool(view["group_by_date"])

    # --- Server ---
    server: dict[str, Any] = data.get("server", {})
    if server.get("host"):
        config.host = str(server["host"])
    if "port" in server:
        config.port = int(server["port"])


def _apply_env_overrides(config: Config) -> None:
    """Apply environment variable overrides.

    Args:
        config: Config instance to update.
    """
    data_dir = os.environ.get(_ENV_DATA_DIR, "")
    if data_dir:
        config.data_dir = Path(data_dir).expanduser()

    page_size = os.environ.get(_ENV_PAGE_SIZE, "")
    if page_size:
        config.page_size = _page_size_or_default(page_size, config.page_size, _ENV_PAGE_SIZE)


def load_config(path: Path | None = None) -> Config:
    """Load configuration from file and environment.

    Resolution order for each setting:
        1. Environment variable (``REPORT_DESK_DATA_DIR``, ``REPORT_DESK_PAGE_SIZE``)
        2. config.toml
        3. Built-in default

    Args:
        path: Config file to read. Defaults to CONFIG_PATH.

    Returns:
        Populated Config instance.
    """
    target = path or CONFIG_PATH
    config = Config()

    if target.exists():
        with open(target, "rb") as f:
            _apply_toml(config, tomllib.load(f))

    _apply_env_overrides(config)

    return config


def write_config(config: Config, path: Path | None = None) -> Path:
    """Serialize a Config to TOML and write to disk.

    If the file already exists, its permissions are preserved after write.

    Args:
        config: Config instance to serialize.
        path: File path to write. Defaults to CONFIG_PATH.

    Returns:
        The path written.
    """
    import tomlkit

    target = path or CONFIG_PATH

    existing_mode: int | None = None
    if target.exists():
        existing_mode = target.stat().st_mode & 0o777

    doc = tomlkit.document()

    storage_table = tomlkit.table()
    storage_table.add("data_dir", str(config.data_dir))
    doc.add("storage", storage_table)

    # Unbounded page sizes are written as "All"; TOML has no null.
    view_table = tomlkit.table()
    view_table.add(
        "page_size", config.page_size if config.page_size else format_page_size(None)
    )
    view_table.add(
        "csv_page_size",
        config.csv_page_size if config.csv_page_size else format_page_size(None),
    )
    view_table.add("group_by_date", config.group_by_date)
    doc.add("view", view_table)

    server_table = tomlkit.table()
    server_table.add("host", config.host)
    server_table.add("port", config.port)
    doc.add("server", server_table)

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(tomlkit.dumps(doc), encoding="utf-8")

    if existing_mode is not None:
        target.chmod(existing_mode)

    return target


def ensure_dirs(config: Config) -> None:
    """Create the data and reports directories if they don't exist."""
    config.data_dir.mkdir(parents=True, exist_ok=True)
    config.reports_dir.mkdir(parents=True, exist_ok=True)
