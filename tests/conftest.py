# tests/conftest.py

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from types import SimpleNamespace

import pytest

from dotcat_widget.snapshot.snapshot_models import TaskCategory, WidgetTask
from dotcat_widget.snapshot.snapshot_store import SnapshotStore

from .fakes import FakeClock, FakeSnapshotStore


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="dotcat",
        log_level="INFO",
        data_dir=tmp_path / "data",
        store_db_path=tmp_path / "data" / "widget.sqlite3",
        snapshot_key="widget_snapshot",
        refresh_interval_minutes=15,
        publish_poll_seconds=60.0,
        max_items_small=0,
        max_items_medium=3,
    )


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 10, 17, 8, 0, 5, 250000))


@pytest.fixture()
def store(tmp_path: Path) -> SnapshotStore:
    """Real SQLite store: its correctness is part of what we want to test."""
    return SnapshotStore(tmp_path / "widget.sqlite3")


@pytest.fixture()
def fake_store() -> FakeSnapshotStore:
    return FakeSnapshotStore()


@pytest.fixture()
def today_tasks() -> list[WidgetTask]:
    """The feed/vaccine/brush day used across writer, reader and end-to-end tests."""
    return [
        WidgetTask(id="t1", title="Feed", category=TaskCategory.FOOD, time="08:00", completed=False),
        WidgetTask(id="t2", title="Vaccine", category=TaskCategory.VACCINE, time=None, completed=False),
        WidgetTask(id="t3", title="Brush", category=TaskCategory.GROOMING, time="18:00", completed=True),
    ]
