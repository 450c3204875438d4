# tests/test_snapshot_reader.py

from __future__ import annotations

import json
from datetime import datetime

import pytest

from dotcat_widget.snapshot.category_styles import FALLBACK_STYLE, style_for
from dotcat_widget.snapshot.refresh_scheduler import RendererSize
from dotcat_widget.snapshot.snapshot_models import TaskCategory, TaskSnapshot, WidgetTask
from dotcat_widget.snapshot.snapshot_reader import (
    RenderModel,
    RenderState,
    SnapshotReader,
    derive_render_model,
)
from dotcat_widget.snapshot.snapshot_store import SnapshotStore
from dotcat_widget.snapshot.snapshot_writer import SnapshotWriter

from .fakes import FakeClock, FakeSnapshotStore

KEY = "widget_snapshot"
TS = datetime(2026, 10, 17, 8, 30, 12)


def _snapshot(n: int, *, pending: int | None = None) -> TaskSnapshot:
    tasks = tuple(WidgetTask(id=f"t{i}", title=f"Task {i}", time=f"{8 + i:02d}:00") for i in range(n))
    return TaskSnapshot(tasks=tasks, pending_count=n if pending is None else pending, generated_at=TS)


def test_truncation_law() -> None:
    model = derive_render_model(_snapshot(5).to_json(), 3)

    assert model.state == RenderState.TASKS
    assert len(model.visible) == 3
    assert model.overflow_count == 2
    assert model.has_overflow
    assert [t.id for t in model.visible] == ["t0", "t1", "t2"]
    assert model.pending_count == 5


def test_reader_does_not_resort() -> None:
    # Writer order is trusted even if it looks "wrong".
    snap = TaskSnapshot(
        tasks=(
            WidgetTask(id="late", title="Late", time="20:00"),
            WidgetTask(id="early", title="Early", time="06:00"),
        ),
        pending_count=2,
        generated_at=TS,
    )
    model = derive_render_model(snap, 5)
    assert [t.id for t in model.visible] == ["late", "early"]
    assert model.overflow_count == 0


@pytest.mark.parametrize(
    "raw",
    [None, "", "{", b"\x00\x01", "[]", json.dumps({"tasks": [], "generated_at": "2026-10-17T08:00:00"})],
)
def test_absent_or_corrupt_input_yields_empty_state(raw) -> None:
    model = derive_render_model(raw, 3)
    assert model == RenderModel.empty()
    assert model.is_empty_state
    assert not model.no_tasks_today
    assert model.visible == ()
    assert model.updated_label == ""


def test_zero_tasks_is_distinct_from_empty_state() -> None:
    model = derive_render_model(_snapshot(0), 3)
    assert model.state == RenderState.NO_TASKS
    assert model.no_tasks_today
    assert not model.is_empty_state
    assert model.overflow_count == 0
    assert model.updated_label == "08:30"


def test_all_done_flag() -> None:
    snap = TaskSnapshot(
        tasks=(WidgetTask(id="t1", title="Feed", completed=True),),
        pending_count=0,
        generated_at=TS,
    )
    model = derive_render_model(snap, 3)
    assert model.all_done
    assert not model.no_tasks_today


def test_pending_count_carried_through_beyond_visible() -> None:
    model = derive_render_model(_snapshot(2, pending=9), 1)
    assert model.pending_count == 9
    assert len(model.visible) == 1
    assert model.overflow_count == 1


def test_zero_and_negative_max_items() -> None:
    small = derive_render_model(_snapshot(4), 0)
    assert small.visible == ()
    assert small.overflow_count == 4

    negative = derive_render_model(_snapshot(4), -2)
    assert negative == small


def test_derivation_is_deterministic() -> None:
    raw = _snapshot(6, pending=4).to_json()
    assert derive_render_model(raw, 3) == derive_render_model(raw, 3)


def test_unknown_category_gets_fallback_style() -> None:
    raw = json.dumps(
        {
            "tasks": [
                {"id": "a", "title": "Nail trim", "category": "pedicure"},
                {"id": "b", "title": "Deworm", "category": "medicine"},
            ],
            "pending_count": 2,
            "generated_at": "2026-10-17T08:30:12",
        }
    )
    model = derive_render_model(raw, 3)

    assert model.visible[0].category == TaskCategory.OTHER
    assert model.visible[0].style == FALLBACK_STYLE
    assert model.visible[1].style == style_for(TaskCategory.MEDICINE)
    assert model.visible[1].style.icon == "pills.fill"
    assert style_for("something-new") == FALLBACK_STYLE


def test_end_to_end_feed_vaccine_brush(store: SnapshotStore, clock: FakeClock, today_tasks) -> None:
    writer = SnapshotWriter(store, KEY, clock=clock)
    reader = SnapshotReader(store, KEY)

    writer.publish(list(reversed(today_tasks)), display_name="Mochi")
    model = reader.load(3)

    assert model.state == RenderState.TASKS
    assert [t.display_text for t in model.visible] == ["08:00 - Feed", "Vaccine", "18:00 - Brush"]
    assert [t.completed for t in model.visible] == [False, False, True]
    assert model.pending_count == 2
    assert model.overflow_count == 0
    assert model.display_name == "Mochi"
    assert model.updated_label == "08:00"


def test_reader_store_unavailable_yields_empty_state(today_tasks, clock: FakeClock) -> None:
    fake = FakeSnapshotStore()
    SnapshotWriter(fake, KEY, clock=clock).publish(today_tasks)
    reader = SnapshotReader(fake, KEY)

    assert reader.load(3).state == RenderState.TASKS
    fake.online = False
    assert reader.load(3).is_empty_state


def test_reader_never_written_key_is_empty_state(store: SnapshotStore) -> None:
    assert SnapshotReader(store, "widget_snapshot:nobody").load(3).is_empty_state


def test_load_for_renderer_size(fake_store: FakeSnapshotStore, clock: FakeClock, today_tasks) -> None:
    SnapshotWriter(fake_store, KEY, clock=clock).publish(today_tasks)

    reader = SnapshotReader(fake_store, KEY)
    small = reader.load_for(RendererSize.SMALL)
    medium = reader.load_for("medium")
    assert small.visible == ()
    assert small.overflow_count == 3
    assert small.pending_count == 2
    assert len(medium.visible) == 3

    roomy = SnapshotReader(fake_store, KEY, size_overrides={RendererSize.MEDIUM: 2})
    assert len(roomy.load_for(RendererSize.MEDIUM).visible) == 2


def test_deeply_nested_payload_yields_empty_state(fake_store: FakeSnapshotStore) -> None:
    nested = "[" * 100000 + "]" * 100000
    truncated = '{"tasks":' + "[" * 100000

    assert derive_render_model(nested, 3).is_empty_state
    assert derive_render_model(truncated, 3).is_empty_state

    fake_store.payloads[KEY] = truncated
    assert SnapshotReader(fake_store, KEY).load(3).is_empty_state
