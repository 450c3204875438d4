# src/dotcat_widget/snapshot/snapshot_writer.py

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Iterable
from datetime import datetime, timedelta

from ..core.ports import Clock, SnapshotRepo
from .refresh_scheduler import RefreshPolicy
from .snapshot_models import MalformedSnapshot, TaskSnapshot, WidgetTask
from .snapshot_store import StoreUnavailable

logger = logging.getLogger(__name__)

_ONE_SECOND = timedelta(seconds=1)

# Sorts after every valid "HH:MM" (minutes in a day).
_UNPARSEABLE_TIME = 24 * 60

_TIME_RE = re.compile(r"(\d{1,2}):(\d{2})")


def _time_sort_key(raw: str | None) -> tuple[int, str]:
    if raw is None:
        return (_UNPARSEABLE_TIME, "")
    m = _TIME_RE.fullmatch(raw)
    if m is None:
        return (_UNPARSEABLE_TIME, raw)
    hours, minutes = int(m.group(1)), int(m.group(2))
    if not (0 <= hours < 24 and 0 <= minutes < 60):
        return (_UNPARSEABLE_TIME, raw)
    return (hours * 60 + minutes, raw)


def order_tasks(tasks: Iterable[WidgetTask]) -> list[WidgetTask]:
    """
    Display priority order.

    - incomplete before completed
    - timed before untimed (within each completion group)
    - earlier time of day first
    - ties by identifier, then input position
    """
    indexed = list(enumerate(tasks))
    indexed.sort(
        key=lambda it: (
            it[1].completed,
            not it[1].has_time,
            _time_sort_key(it[1].time),
            it[1].id,
            it[0],
        )
    )
    return [t for _, t in indexed]


def count_pending(tasks: Iterable[WidgetTask]) -> int:
    return sum(1 for t in tasks if not t.completed)


class SnapshotWriter:
    """
    App-side publisher for one snapshot channel.

    Thread-safety:
    - publishes are serialized by a lock (a task edit and a scheduled tick may race)
    - generated_at is strictly increasing per writer and, via the store, per key
    """

    def __init__(self, store: SnapshotRepo, key: str, *, clock: Clock | None = None) -> None:
        if not key:
            raise ValueError("key is required")
        self._store = store
        self._key = key
        self._clock: Clock = clock or datetime.now
        self._lock = threading.Lock()
        self._last_generated_at: datetime | None = None
        self._last_published: TaskSnapshot | None = None
        self._seeded = False
        self._needs_retry = False

    @property
    def key(self) -> str:
        return self._key

    @property
    def last_published(self) -> TaskSnapshot | None:
        return self._last_published

    @property
    def last_generated_at(self) -> datetime | None:
        return self._last_generated_at

    @property
    def needs_retry(self) -> bool:
        return self._needs_retry

    # ---- timestamp ----

    def _seed_from_store(self) -> None:
        """Pick up the stored timestamp once so monotonicity survives restarts."""
        if self._seeded:
            return
        try:
            stored = self._store.get(self._key)
        except StoreUnavailable:
            # Retry seeding on the next publish.
            return
        except MalformedSnapshot:
            logger.warning("Stored snapshot unreadable key=%s; not seeding timestamp", self._key)
            stored = None
        self._seeded = True
        if stored is not None and (
            self._last_generated_at is None or stored.generated_at > self._last_generated_at
        ):
            self._last_generated_at = stored.generated_at

    def _next_timestamp(self, now: datetime) -> datetime:
        ts = now.replace(microsecond=0)
        last = self._last_generated_at
        if last is None or ts > last:
            return ts
        if ts < last:
            logger.warning(
                "Clock regression key=%s now=%s last=%s; bumping generated_at",
                self._key,
                ts.isoformat(),
                last.isoformat(),
            )
        return last + _ONE_SECOND

    # ---- public API ----

    def build_snapshot(
            self,
            tasks: Iterable[WidgetTask],
            *,
            display_name: str | None = None,
            now: datetime | None = None,
    ) -> TaskSnapshot:
        """
        Recompute the snapshot from the relevant task set.

        Does not touch the store and does not advance the writer's timestamp.
        """
        items = list(tasks)
        return TaskSnapshot(
            tasks=tuple(order_tasks(items)),
            pending_count=count_pending(items),
            generated_at=self._next_timestamp(now or self._clock()),
            display_name=(display_name or "").strip() or None,
        )

    def publish(
            self,
            tasks: Iterable[WidgetTask],
            *,
            display_name: str | None = None,
    ) -> TaskSnapshot | None:
        """
        Recompute and publish.

        Returns the published snapshot, or None if the store was unavailable
        (needs_retry is set; the next trigger publishes again). Never raises for
        store failures.
        """
        items = list(tasks)
        with self._lock:
            self._seed_from_store()
            snapshot = self.build_snapshot(items, display_name=display_name)

            try:
                written = self._store.put(self._key, snapshot)
            except StoreUnavailable:
                logger.warning("Snapshot publish failed key=%s; will retry", self._key, exc_info=True)
                self._needs_retry = True
                return None

            # A rejected put means another writer already stored something newer.
            if not written:
                self._seeded = False
                self._needs_retry = True
                return None

            self._last_generated_at = snapshot.generated_at
            self._last_published = snapshot
            self._needs_retry = False

        logger.info(
            "Snapshot published key=%s tasks=%d pending=%d generated_at=%s",
            self._key,
            len(snapshot.tasks),
            snapshot.pending_count,
            snapshot.generated_at_str,
        )
        return snapshot

    def republish_if_due(
            self,
            tasks: Iterable[WidgetTask],
            *,
            policy: RefreshPolicy,
            now: datetime | None = None,
            display_name: str | None = None,
    ) -> TaskSnapshot | None:
        """Time-based trigger: publish on pending retry, day rollover, or elapsed interval."""
        now = now or self._clock()
        if not self._needs_retry and not policy.should_republish(self._last_generated_at, now):
            return None
        return self.publish(tasks, display_name=display_name)
