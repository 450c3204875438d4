# src/dotcat_widget/bootstrap.py

"""
Composition root.

- loads settings once (or takes injected ones),
- ensures local directories exist,
- wires store, writer, reader and refresh policy for one snapshot channel.

The app process uses channel.writer; each widget host uses channel.reader.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from .config import get_settings
from .core.ports import Clock
from .logging_setup import level_from_name, setup_logging
from .snapshot.refresh_scheduler import RefreshPolicy, RendererSize
from .snapshot.snapshot_api import channel_key
from .snapshot.snapshot_reader import SnapshotReader
from .snapshot.snapshot_store import SnapshotStore
from .snapshot.snapshot_writer import SnapshotWriter

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class WidgetChannel:
    key: str
    store: SnapshotStore
    writer: SnapshotWriter
    reader: SnapshotReader
    policy: RefreshPolicy
    max_items: dict[RendererSize, int]
    publish_poll_seconds: float = 60.0


def _ensure_local_dirs(settings) -> None:
    Path(settings.data_dir).mkdir(parents=True, exist_ok=True)
    Path(settings.store_db_path).parent.mkdir(parents=True, exist_ok=True)


def configure_logging(*, settings=None) -> Path | None:
    """Install console + file logging under settings.data_dir."""
    if settings is None:
        settings = get_settings()
    return setup_logging(
        log_dir=settings.data_dir,
        console_level=level_from_name(getattr(settings, "log_level", "INFO")),
    )


def create_widget_channel(
        *,
        settings=None,
        pet_id: str | None = None,
        clock: Clock | None = None,
        store: SnapshotStore | None = None,
) -> WidgetChannel:
    """
    Build the writer/reader pair for one channel.

    Keeping settings injectable avoids hidden global config reads in tests.
    If settings is None, falls back to get_settings(). A store may be passed
    to share one SQLite file between several channels.
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    key = channel_key(settings.snapshot_key, pet_id)
    store = store or SnapshotStore(settings.store_db_path)
    max_items = {
        RendererSize.SMALL: int(settings.max_items_small),
        RendererSize.MEDIUM: int(settings.max_items_medium),
    }

    channel = WidgetChannel(
        key=key,
        store=store,
        writer=SnapshotWriter(store, key, clock=clock),
        reader=SnapshotReader(store, key, size_overrides=max_items),
        policy=RefreshPolicy.from_minutes(settings.refresh_interval_minutes),
        max_items=max_items,
        publish_poll_seconds=float(getattr(settings, "publish_poll_seconds", 60.0)),
    )
    logger.info("Widget channel ready key=%s db=%s", key, store.db_path)
    return channel
