# src/dotcat_widget/snapshot/snapshot_models.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

_TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Field names written by the first widget release.
_LEGACY_ALIASES = {
    "category": "type",
    "completed": "isCompleted",
}


class MalformedSnapshot(ValueError):
    """Stored payload does not decode into a valid TaskSnapshot."""


class TaskCategory(StrEnum):
    VACCINE = "vaccine"
    MEDICINE = "medicine"
    VET = "vet"
    FOOD = "food"
    GROOMING = "grooming"
    OTHER = "other"

    @classmethod
    def from_raw(cls, raw: str | None) -> TaskCategory:
        if not raw:
            return cls.OTHER
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            return cls.OTHER


@dataclass(frozen=True, slots=True)
class WidgetTask:
    id: str
    title: str
    category: TaskCategory = TaskCategory.OTHER
    time: str | None = None
    completed: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.category, TaskCategory):
            object.__setattr__(self, "category", TaskCategory.from_raw(self.category))
        if self.time is not None and not str(self.time).strip():
            object.__setattr__(self, "time", None)

    @property
    def has_time(self) -> bool:
        return self.time is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "category": self.category.value,
            "time": self.time,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: Any) -> WidgetTask:
        if not isinstance(data, dict):
            raise MalformedSnapshot(f"task entry must be an object, got {type(data).__name__}")

        task_id = data.get("id")
        title = data.get("title")
        if not isinstance(task_id, str) or not task_id:
            raise MalformedSnapshot("task entry has no string id")
        if not isinstance(title, str):
            raise MalformedSnapshot(f"task {task_id!r} has no string title")

        category = _get_aliased(data, "category")
        time_raw = data.get("time")
        completed = _get_aliased(data, "completed")

        if time_raw is not None and not isinstance(time_raw, str):
            raise MalformedSnapshot(f"task {task_id!r} has a non-string time")
        if completed is not None and not isinstance(completed, bool):
            raise MalformedSnapshot(f"task {task_id!r} has a non-boolean completed flag")

        return cls(
            id=task_id,
            title=title,
            category=TaskCategory.from_raw(category if isinstance(category, str) else None),
            time=time_raw.strip() if time_raw else None,
            completed=bool(completed),
        )


@dataclass(frozen=True, slots=True)
class TaskSnapshot:
    """
    The published unit read by every renderer.

    Notes:
    - tasks are already in display priority order (the writer sorts them)
    - pending_count covers the whole relevant set, not only what fits a renderer
    - generated_at has second precision and never regresses for a given key
    """

    tasks: tuple[WidgetTask, ...]
    pending_count: int
    generated_at: datetime
    display_name: str | None = None
    version: int = SNAPSHOT_VERSION
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "tasks", tuple(self.tasks))
        object.__setattr__(self, "generated_at", self.generated_at.replace(microsecond=0))
        if self.pending_count < 0:
            raise MalformedSnapshot("pending_count must be >= 0")
        incomplete = sum(1 for t in self.tasks if not t.completed)
        if self.pending_count < incomplete:
            raise MalformedSnapshot(
                f"pending_count={self.pending_count} is below the {incomplete} incomplete tasks present"
            )

    @property
    def generated_at_str(self) -> str:
        return format_timestamp(self.generated_at)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = dict(self.extra)
        out.update(
            {
                "version": self.version,
                "tasks": [t.to_dict() for t in self.tasks],
                "pending_count": self.pending_count,
                "display_name": self.display_name,
                "generated_at": self.generated_at_str,
            }
        )
        return out

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":"))

    @classmethod
    def from_dict(cls, data: Any) -> TaskSnapshot:
        if not isinstance(data, dict):
            raise MalformedSnapshot(f"snapshot must be an object, got {type(data).__name__}")

        version = data.get("version", SNAPSHOT_VERSION)
        if not isinstance(version, int) or isinstance(version, bool):
            raise MalformedSnapshot("version must be an integer")
        if version > SNAPSHOT_VERSION:
            raise MalformedSnapshot(f"unsupported snapshot version {version}")

        raw_tasks = data.get("tasks")
        if not isinstance(raw_tasks, list):
            raise MalformedSnapshot("tasks must be a list")

        pending = data.get("pending_count")
        if not isinstance(pending, int) or isinstance(pending, bool):
            raise MalformedSnapshot("pending_count must be an integer")

        display_name = data.get("display_name")
        if display_name is not None and not isinstance(display_name, str):
            raise MalformedSnapshot("display_name must be a string")

        generated_at = parse_timestamp(data.get("generated_at"))
        known = {"version", "tasks", "pending_count", "display_name", "generated_at"}

        return cls(
            tasks=tuple(WidgetTask.from_dict(t) for t in raw_tasks),
            pending_count=pending,
            generated_at=generated_at,
            display_name=display_name or None,
            version=version,
            extra={k: v for k, v in data.items() if k not in known},
        )

    @classmethod
    def from_json(cls, raw: str | bytes) -> TaskSnapshot:
        try:
            data = json.loads(raw)
        except (TypeError, ValueError, RecursionError) as exc:
            # UnicodeDecodeError and JSONDecodeError are ValueError; deep nesting overflows the decoder.
            raise MalformedSnapshot(f"snapshot is not valid JSON: {exc}") from exc
        return cls.from_dict(data)


def _get_aliased(data: dict[str, Any], name: str) -> Any:
    if name in data:
        return data[name]
    legacy = _LEGACY_ALIASES.get(name)
    return data.get(legacy) if legacy else None


def format_timestamp(ts: datetime) -> str:
    return ts.strftime(_TIMESTAMP_FORMAT)


def parse_timestamp(raw: Any) -> datetime:
    """
    Parse a stored generation timestamp.

    Accepts any ISO-8601 form datetime.fromisoformat understands; an offset,
    when present, is dropped after conversion to local time.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedSnapshot("generated_at is missing")
    try:
        ts = datetime.fromisoformat(raw.strip())
    except ValueError as exc:
        raise MalformedSnapshot(f"generated_at is not ISO-8601: {raw!r}") from exc
    if ts.tzinfo is not None:
        try:
            ts = ts.astimezone().replace(tzinfo=None)
        except (OverflowError, OSError) as exc:
            raise MalformedSnapshot(f"generated_at out of range: {raw!r}") from exc
    return ts.replace(microsecond=0)
