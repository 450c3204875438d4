# src/dotcat_widget/snapshot/refresh_scheduler.py

from __future__ import annotations

"""
Refresh scheduling.

RefreshPolicy only decides cadence; the host supplies the actual timer.

The two async loops below are small polling drivers for hosts that run the
core inside a Python process:
- run_widget_refresher re-derives a render model and hands it to a renderer,
- run_publish_ticker is the writer's periodic trigger (day rollover, retries).

To stop either loop, cancel the coroutine/task.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import StrEnum
from typing import TYPE_CHECKING

from ..core.ports import Clock, RenderSink, TaskSource

if TYPE_CHECKING:
    from .snapshot_reader import SnapshotReader
    from .snapshot_writer import SnapshotWriter

logger = logging.getLogger(__name__)

MIN_REFRESH_INTERVAL = timedelta(minutes=15)


class RendererSize(StrEnum):
    SMALL = "small"
    MEDIUM = "medium"


# Task rows each renderer size has room for. The small surface only shows the pending badge.
DEFAULT_MAX_ITEMS: dict[RendererSize, int] = {
    RendererSize.SMALL: 0,
    RendererSize.MEDIUM: 3,
}


@dataclass(frozen=True, slots=True)
class RefreshPolicy:
    """
    Cadence policy shared by renderers and the writer.

    interval is both the minimum gap between reader invocations (host refresh
    budget) and the maximum one, so "last updated" never lags more than one interval.
    """

    interval: timedelta = MIN_REFRESH_INTERVAL

    def __post_init__(self) -> None:
        if self.interval < MIN_REFRESH_INTERVAL:
            logger.debug("Refresh interval %s raised to %s", self.interval, MIN_REFRESH_INTERVAL)
            object.__setattr__(self, "interval", MIN_REFRESH_INTERVAL)

    @classmethod
    def from_minutes(cls, minutes: float) -> RefreshPolicy:
        return cls(interval=timedelta(minutes=float(minutes)))

    def next_refresh_after(self, last_refresh: datetime) -> datetime:
        return last_refresh + self.interval

    def is_due(self, last_refresh: datetime | None, now: datetime) -> bool:
        if last_refresh is None:
            return True
        return now >= self.next_refresh_after(last_refresh)

    def should_republish(self, last_generated_at: datetime | None, now: datetime) -> bool:
        """
        Time-based writer trigger.

        True when nothing was published yet, the day rolled over since the last
        publish ("today's tasks" changed meaning), or one interval elapsed.
        """
        if last_generated_at is None:
            return True
        # Only a forward day change; a clock falling back across midnight is not a rollover.
        if now.date() > last_generated_at.date():
            return True
        return self.is_due(last_generated_at, now)


def max_items_for(size: RendererSize | str, overrides: dict[RendererSize, int] | None = None) -> int:
    size = RendererSize(size)
    table = {**DEFAULT_MAX_ITEMS, **(overrides or {})}
    return max(0, int(table[size]))


async def run_widget_refresher(
        reader: SnapshotReader,
        render: RenderSink,
        *,
        max_items: int,
        policy: RefreshPolicy | None = None,
        clock: Clock = datetime.now,
        sleep_scale: float = 1.0,
) -> None:
    """
    Renderer-side loop.

    Every cycle:
    - derive the render model from the store (never raises; degrades to EmptyState)
    - hand it to render(...)
    - sleep until policy.next_refresh_after(now)

    sleep_scale shrinks the real sleep (tests run the loop in milliseconds).
    """
    from .snapshot_reader import RenderModel

    policy = policy or RefreshPolicy()

    while True:
        started = clock()
        try:
            model = reader.load(max_items)
        except Exception:
            logger.exception("snapshot load failed key=%s; rendering empty state", reader.key)
            model = RenderModel.empty()

        try:
            render(model)
        except Exception:
            logger.exception("render callback failed key=%s", reader.key)

        wait = (policy.next_refresh_after(started) - clock()).total_seconds()
        await asyncio.sleep(max(0.0, wait) * sleep_scale)


async def run_publish_ticker(
        writer: SnapshotWriter,
        task_source: TaskSource,
        *,
        policy: RefreshPolicy | None = None,
        poll_seconds: float = 60.0,
        display_name: str | None = None,
) -> None:
    """
    Writer-side periodic trigger.

    Every poll_seconds:
    - fetch the current relevant task set from task_source()
    - republish if a retry is pending, the day rolled over, or an interval elapsed

    Task mutations still publish immediately through notify_tasks_changed; this
    loop only covers the time-based triggers.
    """
    policy = policy or RefreshPolicy()
    sleep_s = max(0.001, float(poll_seconds))

    while True:
        try:
            tasks = list(task_source())
        except Exception:
            logger.exception("task_source failed key=%s", writer.key)
            tasks = None

        if tasks is not None:
            try:
                writer.republish_if_due(tasks, policy=policy, display_name=display_name)
            except Exception:
                logger.exception("republish failed key=%s", writer.key)

        await asyncio.sleep(sleep_s)
