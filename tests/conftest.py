# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from taskclock.cli.bootstrap import create_initial_state
from taskclock.core.state import AppState
from taskclock.tasks.task_store import TaskStore
from taskclock.tasks.timer_engine import TimerEngine
from taskclock.tasks.wakeup_scheduler import DeadlineScheduler

from .fakes import FakeClock, RecordingNotifier, RecordingRenderer, SpyRecordStore


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and core modules.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskclock-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        storage_backend="sqlite",
        db_path=tmp_path / "tasks.sqlite3",
        json_path=tmp_path / "tasks.json",
        storage_key="todo-tasks",
        tick_interval_seconds=1.0,
        auto_render=False,
    )


@pytest.fixture()
def scheduler(clock: FakeClock) -> DeadlineScheduler:
    return DeadlineScheduler(clock=clock, interval_seconds=1.0)


@pytest.fixture()
def store(scheduler: DeadlineScheduler, clock: FakeClock) -> TaskStore:
    return TaskStore(scheduler=scheduler, clock=clock)


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def engine(store: TaskStore, scheduler: DeadlineScheduler, clock: FakeClock, notifier) -> TimerEngine:
    return TimerEngine(store, scheduler, clock=clock, on_completed=notifier)


@pytest.fixture()
def renderer() -> RecordingRenderer:
    return RecordingRenderer()


@pytest.fixture()
def record_store(renderer: RecordingRenderer) -> SpyRecordStore:
    # Shares the renderer's call log so tests can assert save-then-render order.
    return SpyRecordStore(renderer.calls)


@pytest.fixture()
def state(settings, clock, record_store, renderer, notifier) -> AppState:
    """AppState wired with a fake clock, an in-memory record store and a recording renderer."""
    return create_initial_state(
        settings=settings,
        clock=clock,
        record_store=record_store,
        renderer=renderer,
        notify=notifier,
    )
