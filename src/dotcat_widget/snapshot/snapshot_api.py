# src/dotcat_widget/snapshot/snapshot_api.py

from __future__ import annotations

import logging
from collections.abc import Iterable

from .snapshot_models import TaskSnapshot, WidgetTask
from .snapshot_writer import SnapshotWriter

logger = logging.getLogger(__name__)


def channel_key(base_key: str, pet_id: str | None = None) -> str:
    """
    Store key for one snapshot channel.

    Without a pet id this is the shared default channel; per-pet channels
    get their own key so several widgets can follow different pets.
    """
    base = (base_key or "").strip()
    if not base:
        raise ValueError("base_key is required")
    pet = (pet_id or "").strip()
    return f"{base}:{pet}" if pet else base


def notify_tasks_changed(
    writer: SnapshotWriter,
    tasks: Iterable[WidgetTask],
    *,
    display_name: str | None = None,
) -> TaskSnapshot | None:
    """
    Publish after a task mutation has been committed by the app.

    Never raises: the app's commit must not depend on the widget publish.
    A failed publish is retried by the next trigger (see SnapshotWriter.needs_retry).
    """
    try:
        return writer.publish(tasks, display_name=display_name)
    except Exception:
        logger.exception("notify_tasks_changed failed key=%s", writer.key)
        return None
