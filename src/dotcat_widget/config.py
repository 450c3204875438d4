# src/dotcat_widget/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object shared by the app-side writer and the widget-side readers.
- Nothing is required at import time; every field has a default.
- The snapshot key is configuration, not a constant buried in the writer/reader.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DOTCAT"

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Local data paths ----
    data_dir: Path
    store_db_path: Path

    # ---- Snapshot channel ----
    snapshot_key: str

    # ---- Refresh cadence ----
    refresh_interval_minutes: int
    publish_poll_seconds: float

    # ---- Renderer slots ----
    max_items_small: int
    max_items_medium: int

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "dotcat").strip() or "dotcat"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/dotcat"))
        store_db_path = _env_path(_k("STORE_DB_PATH"), data_dir / "widget.sqlite3")

        snapshot_key = _env(_k("SNAPSHOT_KEY"), "widget_snapshot").strip() or "widget_snapshot"

        # The host budget does not allow anything below 15 minutes.
        refresh_interval_minutes = max(15, _env_int(_k("REFRESH_INTERVAL_MINUTES"), 15))
        publish_poll_seconds = max(1.0, _env_float(_k("PUBLISH_POLL_SECONDS"), 60.0))

        max_items_small = max(0, _env_int(_k("MAX_ITEMS_SMALL"), 0))
        max_items_medium = max(0, _env_int(_k("MAX_ITEMS_MEDIUM"), 3))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            store_db_path=store_db_path,
            snapshot_key=snapshot_key,
            refresh_interval_minutes=refresh_interval_minutes,
            publish_poll_seconds=publish_poll_seconds,
            max_items_small=max_items_small,
            max_items_medium=max_items_medium,
        )


SETTINGS = Settings.from_env()


def get_settings() -> Settings:
    return SETTINGS
