# src/dotcat_widget/snapshot/snapshot_reader.py

from __future__ import annotations

"""
Snapshot reader.

Turns whatever the store holds into a bounded, display-ready RenderModel.

The reader trusts the writer's ordering (no re-sort) and never fails:
- absent, unreadable or corrupt data -> the EmptyState render model
- unknown categories -> the fallback style
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from ..core.ports import SnapshotRepo
from .category_styles import CategoryStyle, style_for
from .refresh_scheduler import RendererSize, max_items_for
from .snapshot_models import MalformedSnapshot, TaskCategory, TaskSnapshot, WidgetTask
from .snapshot_store import StoreUnavailable

logger = logging.getLogger(__name__)


class RenderState(StrEnum):
    EMPTY = "empty"  # no usable data (absent, unreadable, corrupt)
    NO_TASKS = "no_tasks"  # valid snapshot with zero tasks today
    TASKS = "tasks"


@dataclass(frozen=True, slots=True)
class RenderTask:
    id: str
    title: str
    display_text: str
    time: str | None
    completed: bool
    category: TaskCategory
    style: CategoryStyle


@dataclass(frozen=True, slots=True)
class RenderModel:
    state: RenderState
    visible: tuple[RenderTask, ...] = ()
    pending_count: int = 0
    overflow_count: int = 0
    generated_at: datetime | None = None
    updated_label: str = ""
    display_name: str | None = None

    @classmethod
    def empty(cls) -> RenderModel:
        return cls(state=RenderState.EMPTY)

    @property
    def is_empty_state(self) -> bool:
        return self.state == RenderState.EMPTY

    @property
    def no_tasks_today(self) -> bool:
        return self.state == RenderState.NO_TASKS

    @property
    def all_done(self) -> bool:
        return self.state == RenderState.TASKS and self.pending_count == 0

    @property
    def has_overflow(self) -> bool:
        return self.overflow_count > 0


def display_text(task: WidgetTask) -> str:
    return f"{task.time} - {task.title}" if task.time else task.title


def _to_render_task(task: WidgetTask) -> RenderTask:
    return RenderTask(
        id=task.id,
        title=task.title,
        display_text=display_text(task),
        time=task.time,
        completed=task.completed,
        category=task.category,
        style=style_for(task.category),
    )


def derive_render_model(
        raw: TaskSnapshot | str | bytes | None,
        max_items: int,
) -> RenderModel:
    """
    Derive the render model for a renderer with max_items task rows.

    raw is the stored payload (or an already decoded snapshot, or None).
    Pure and deterministic: the same input always yields an equal model.
    """
    if raw is None:
        logger.debug("No snapshot stored; rendering empty state")
        return RenderModel.empty()

    if isinstance(raw, TaskSnapshot):
        snapshot = raw
    else:
        try:
            snapshot = TaskSnapshot.from_json(raw)
        except MalformedSnapshot as exc:
            logger.warning("Malformed snapshot; rendering empty state: %s", exc)
            return RenderModel.empty()

    limit = max(0, int(max_items))
    total = len(snapshot.tasks)

    return RenderModel(
        state=RenderState.TASKS if total else RenderState.NO_TASKS,
        visible=tuple(_to_render_task(t) for t in snapshot.tasks[:limit]),
        pending_count=snapshot.pending_count,
        overflow_count=max(0, total - limit),
        generated_at=snapshot.generated_at,
        updated_label=snapshot.generated_at.strftime("%H:%M"),
        display_name=snapshot.display_name,
    )


class SnapshotReader:
    """Renderer-side loader for one snapshot channel. Reads are side-effect free."""

    def __init__(
            self,
            store: SnapshotRepo,
            key: str,
            *,
            size_overrides: dict[RendererSize, int] | None = None,
    ) -> None:
        if not key:
            raise ValueError("key is required")
        self._store = store
        self._key = key
        self._size_overrides = dict(size_overrides or {})

    @property
    def key(self) -> str:
        return self._key

    def load(self, max_items: int) -> RenderModel:
        try:
            raw = self._store.get_raw(self._key)
        except StoreUnavailable:
            logger.warning("Snapshot store unavailable key=%s; rendering empty state", self._key, exc_info=True)
            return RenderModel.empty()
        return derive_render_model(raw, max_items)

    def load_for(self, size: RendererSize | str) -> RenderModel:
        return self.load(max_items_for(size, self._size_overrides))
