# tests/test_task_store.py

from __future__ import annotations

import itertools

from taskclock.tasks.task_models import TaskFilter
from taskclock.tasks.task_store import TaskStore


def test_create_validates_text_and_minutes(store: TaskStore) -> None:
    assert store.create("   ") is None
    assert len(store) == 0

    timed = store.create("  Write report  ", "25")
    assert timed is not None
    assert timed.text == "Write report"
    assert timed.minutes == 25
    assert timed.remaining_seconds == 1500
    assert not timed.is_running and not timed.completed and timed.end_time is None

    plain = store.create("Buy milk", "soon")
    assert plain is not None
    assert plain.minutes is None and plain.remaining_seconds is None
    assert not plain.has_timer


def test_ids_are_unique_even_when_factory_repeats(scheduler) -> None:
    store = TaskStore(scheduler=scheduler, id_factory=lambda: 42)
    a = store.create("a")
    b = store.create("b")
    c = store.create("c")
    assert a is not None and b is not None and c is not None
    assert len({a.id, b.id, c.id}) == 3


def test_every_mutation_notifies_once(scheduler) -> None:
    calls: list[str] = []
    store = TaskStore(scheduler=scheduler, on_change=lambda: calls.append("x"), id_factory=itertools.count(1).__next__)

    t = store.create("a", 5)
    assert t is not None
    store.update(t.id, text="b")
    store.toggle_completed(t.id)
    store.clear_completed()
    assert calls == ["x", "x", "x", "x"]

    # Rejected/no-op operations do not notify.
    store.create("")
    store.update(999, text="nope")
    store.delete(999)
    store.toggle_completed(999)
    assert len(calls) == 4


def test_update_rejects_empty_text(store: TaskStore) -> None:
    t = store.create("keep me", 5)
    assert t is not None
    assert store.update(t.id, text="   ", minutes=10) is False
    assert t.text == "keep me"
    assert t.minutes == 5


def test_update_same_minutes_keeps_countdown(store: TaskStore) -> None:
    t = store.create("a", 5)
    assert t is not None
    t.remaining_seconds = 120
    store.update(t.id, text="renamed", minutes="5")
    assert t.text == "renamed"
    assert t.remaining_seconds == 120


def test_update_can_remove_timer(store: TaskStore) -> None:
    t = store.create("a", 5)
    assert t is not None
    store.update(t.id, minutes=None)
    assert t.minutes is None
    assert t.remaining_seconds is None


def test_toggle_completed_leaves_timer_fields(store: TaskStore) -> None:
    t = store.create("a", 1)
    assert t is not None
    t.remaining_seconds = 17
    store.toggle_completed(t.id)
    assert t.completed is True
    assert t.remaining_seconds == 17
    store.toggle_completed(t.id)
    assert t.completed is False


def test_list_tasks_filters(store: TaskStore) -> None:
    a = store.create("a")
    b = store.create("b")
    assert a is not None and b is not None
    store.toggle_completed(b.id)

    assert [t.text for t in store.list_tasks()] == ["a", "b"]
    assert [t.text for t in store.list_tasks(TaskFilter.ACTIVE)] == ["a"]
    assert [t.text for t in store.list_tasks(TaskFilter.COMPLETED)] == ["b"]


def test_clear_completed(store: TaskStore) -> None:
    a = store.create("a")
    b = store.create("b")
    assert a is not None and b is not None
    store.toggle_completed(a.id)
    assert store.clear_completed() == 1
    assert a.id not in store
    assert b.id in store
    assert store.clear_completed() == 0
