# src/taskclock/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the composition root:
- loads settings once,
- ensures local (gitignored) directories exist,
- picks the durable record store,
- wires TaskStore, TimerEngine, the wake-up scheduler and persistence into AppState,
- restores the last snapshot (with timer recovery).
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from ..config import get_settings
from ..connectors.console_connector import ConsoleRenderer, print_notification
from ..core.ports import Clock, RecordStore, Renderer
from ..core.state import AppState
from ..storage.record_store import JsonFileRecordStore, MemoryRecordStore, SQLiteRecordStore
from ..tasks.persistence import PersistenceAdapter
from ..tasks.task_models import Task, TaskCompleted
from ..tasks.task_store import TaskStore
from ..tasks.timer_engine import TimerEngine
from ..tasks.wakeup_scheduler import DeadlineScheduler

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.db_path.parent.mkdir(parents=True, exist_ok=True)
    settings.json_path.parent.mkdir(parents=True, exist_ok=True)


def build_record_store(settings) -> RecordStore:
    backend = str(getattr(settings, "storage_backend", "sqlite")).lower()
    if backend == "memory":
        logger.warning("Using in-memory storage: tasks will not survive a restart.")
        return MemoryRecordStore()
    if backend == "json":
        return JsonFileRecordStore(settings.json_path)
    return SQLiteRecordStore(settings.db_path)


def create_initial_state(
    *,
    settings=None,
    clock: Clock = time.time,
    record_store: RecordStore | None = None,
    renderer: Renderer | None = None,
    notify: Callable[[TaskCompleted], None] | None = None,
) -> AppState:
    """
    Create AppState from the provided settings.

    Everything is injectable so tests can swap the clock, the record store and
    the renderer. If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    if record_store is None:
        _ensure_local_dirs(settings)
        record_store = build_record_store(settings)

    scheduler = DeadlineScheduler(clock=clock, interval_seconds=settings.tick_interval_seconds)
    store = TaskStore(scheduler=scheduler, clock=clock)
    lock = threading.RLock()
    engine = TimerEngine(store, scheduler, clock=clock, lock=lock)
    persistence = PersistenceAdapter(record_store, key=settings.storage_key, clock=clock)

    if renderer is None:
        renderer = ConsoleRenderer(store.list_tasks, auto_render=settings.auto_render)

    state = AppState(
        settings=settings,
        task_store=store,
        timer_engine=engine,
        scheduler=scheduler,
        persistence=persistence,
        renderer=renderer,
        lock=lock,
    )

    store.on_change = state.on_tasks_changed
    engine.on_countdown = renderer.update_countdown
    engine.on_completed = notify or print_notification
    return state


def restore_tasks(state: AppState) -> list[Task]:
    """Load the persisted snapshot into the store; running timers resume from their deadlines."""
    with state.lock:
        tasks = state.persistence.restore(state.task_store, state.timer_engine)
    logger.info("Restored %d task(s)", len(tasks))
    return tasks


def shutdown(state: AppState) -> None:
    """Best-effort shutdown: release every wake-up, then write a final snapshot."""
    with state.lock:
        state.timer_engine.cancel_all()
        if not state.save_now():
            logger.error("Final snapshot could not be saved.")
