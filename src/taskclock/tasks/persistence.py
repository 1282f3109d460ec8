# src/taskclock/tasks/persistence.py

from __future__ import annotations

"""
Snapshot persistence with deadline-based recovery.

The whole task list is stored as one JSON array under a fixed key. A running
countdown is persisted with its absolute deadline (endTime, epoch ms), never
with "seconds left as of save time", so load() can reconcile it against the
current wall clock whether the process was down for a second or a week:

- deadline still ahead -> resume running, remaining recomputed from the deadline
- deadline passed      -> completed, remaining 0, no completion event
"""

import json
import logging
import math
import time
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ..core.ports import Clock, RecordStore
from .task_models import Task, seconds_until

if TYPE_CHECKING:
    from .task_store import TaskStore
    from .timer_engine import TimerEngine

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "todo-tasks"


def task_to_record(task: Task) -> dict[str, Any]:
    return {
        "id": task.id,
        "text": task.text,
        "minutes": task.minutes,
        "remainingSeconds": task.remaining_seconds,
        "endTime": task.end_time,
        "isRunning": task.is_running,
        "completed": bool(task.completed),
    }


def _opt_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if not math.isfinite(raw):
            raise ValueError(f"expected a finite number, got {raw}")
        return int(raw)
    raise ValueError(f"expected integer or null, got {type(raw).__name__}")


def record_to_task(rec: Any) -> Task:
    """Decode one snapshot record verbatim (no recovery). Raises ValueError if malformed."""
    if not isinstance(rec, dict):
        raise ValueError("record is not an object")

    task_id = _opt_int(rec.get("id"))
    if task_id is None:
        raise ValueError("record has no id")

    text = rec.get("text")
    if not isinstance(text, str) or not text.strip():
        raise ValueError("record has no text")

    minutes = _opt_int(rec.get("minutes"))
    if minutes is not None and minutes < 0:
        minutes = None

    remaining = _opt_int(rec.get("remainingSeconds"))
    if minutes is None:
        remaining = None
    elif remaining is None:
        remaining = minutes * 60
    else:
        remaining = max(0, remaining)

    return Task(
        id=task_id,
        text=text.strip(),
        minutes=minutes,
        remaining_seconds=remaining,
        end_time=_opt_int(rec.get("endTime")),
        is_running=bool(rec.get("isRunning")),
        completed=bool(rec.get("completed")),
    )


def recover_task(task: Task, now_ms: int) -> Task:
    """Reconcile a decoded record against the current wall clock (mutates and returns task)."""
    if task.is_running and task.end_time is not None and task.minutes is not None:
        if task.end_time > now_ms:
            task.remaining_seconds = seconds_until(task.end_time, now_ms)
            task.completed = False
        else:
            logger.info("Timer for task id=%s expired while offline", task.id)
            task.remaining_seconds = 0
            task.is_running = False
            task.end_time = None
            task.completed = True
        return task

    if task.is_running:
        logger.warning("Task id=%s was running without a deadline; restoring idle", task.id)
    task.is_running = False
    task.end_time = None
    return task


class PersistenceAdapter:
    def __init__(
        self,
        record_store: RecordStore,
        *,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Clock = time.time,
    ) -> None:
        self._records = record_store
        self._key = key
        self._clock = clock

    @property
    def key(self) -> str:
        return self._key

    def save(self, tasks: Iterable[Task]) -> bool:
        """Overwrite the snapshot. Never raises; returns False on failure."""
        try:
            payload = json.dumps([task_to_record(t) for t in tasks], ensure_ascii=False)
            self._records.set(self._key, payload)
        except Exception:
            logger.exception("Could not save tasks key=%s", self._key)
            return False
        logger.debug("Saved task snapshot key=%s bytes=%d", self._key, len(payload))
        return True

    def load(self) -> list[Task]:
        """Read the snapshot and apply recovery. Never raises; returns [] when unusable."""
        try:
            raw = self._records.get(self._key)
        except Exception:
            logger.exception("Could not read task snapshot key=%s", self._key)
            return []

        if not raw:
            return []

        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Task snapshot key=%s is not valid JSON; starting empty", self._key)
            return []

        if not isinstance(data, list):
            logger.warning("Task snapshot key=%s is not a list; starting empty", self._key)
            return []

        now_ms = int(round(self._clock() * 1000))
        out: list[Task] = []
        for i, rec in enumerate(data):
            try:
                task = record_to_task(rec)
            except ValueError as e:
                logger.warning("Skipping malformed task record #%d: %s", i, e)
                continue
            out.append(recover_task(task, now_ms))

        logger.info("Loaded %d task(s) from key=%s", len(out), self._key)
        return out

    def restore(self, store: TaskStore, engine: TimerEngine) -> list[Task]:
        """Load the snapshot into the store and re-arm wake-ups for still-running timers."""
        tasks = self.load()
        store.replace_all(tasks)
        resumed = 0
        for task in store.running_tasks():
            if engine.resume(task.id):
                resumed += 1
        if resumed:
            logger.info("Resumed %d running timer(s)", resumed)
        return store.list_tasks()
