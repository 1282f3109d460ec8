# src/taskclock/tasks/task_store.py

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from ..core.ports import WakeupScheduler
from .task_models import Task, TaskFilter, parse_minutes, seconds_until

logger = logging.getLogger(__name__)

_UNSET: Any = object()


def _epoch_ms_id() -> int:
    return int(time.time() * 1000)


class TaskStore:
    """
    In-memory task collection.

    The store owns every Task; insertion order is the display order.
    Wake-ups for a task are released here whenever its timer fields are reset
    or the task is removed, so no scheduled work outlives its task.

    Every public mutation calls on_change() once (the composition root wires
    it to "save snapshot, then request render").
    """

    def __init__(
        self,
        *,
        scheduler: WakeupScheduler | None = None,
        on_change: Callable[[], None] | None = None,
        id_factory: Callable[[], int] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._tasks: dict[int, Task] = {}
        self._scheduler = scheduler
        self._id_factory = id_factory or _epoch_ms_id
        self._clock = clock
        self.on_change = on_change

    # ---- read API ----

    def get(self, task_id: int) -> Task | None:
        return self._tasks.get(task_id)

    def list_tasks(self, task_filter: TaskFilter = TaskFilter.ALL) -> list[Task]:
        return [t for t in self._tasks.values() if task_filter.matches(t)]

    def count_tasks(self) -> int:
        return len(self._tasks)

    def running_tasks(self) -> list[Task]:
        return [t for t in self._tasks.values() if t.is_running]

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    # ---- mutations ----

    def create(self, text: str, minutes: Any = None) -> Task | None:
        clean = (text or "").strip()
        if not clean:
            logger.debug("Rejected task with empty text")
            return None

        mins = parse_minutes(minutes)
        task = Task(
            id=self._next_id(),
            text=clean,
            minutes=mins,
            remaining_seconds=mins * 60 if mins is not None else None,
        )
        self._tasks[task.id] = task
        logger.info("Task created id=%s minutes=%s", task.id, mins)
        self._changed()
        return task

    def update(self, task_id: int, text: str | None = None, minutes: Any = _UNSET) -> bool:
        """
        Edit text and/or minutes.

        A different minute value resets the timer: the wake-up is cancelled and
        the countdown goes back to the full new length, idle.
        Pass minutes=None to remove the timer; omit it to leave the timer alone.
        """
        task = self._tasks.get(task_id)
        if task is None:
            return False

        new_text: str | None = None
        if text is not None:
            new_text = text.strip()
            if not new_text:
                logger.debug("Rejected edit with empty text id=%s", task_id)
                return False

        if new_text is not None:
            task.text = new_text

        if minutes is not _UNSET:
            new_minutes = parse_minutes(minutes)
            if new_minutes != task.minutes:
                self._cancel_wakeup(task_id)
                task.minutes = new_minutes
                task.remaining_seconds = new_minutes * 60 if new_minutes is not None else None
                task.end_time = None
                task.is_running = False
                logger.info("Task timer reset id=%s minutes=%s", task_id, new_minutes)

        self._changed()
        return True

    def toggle_completed(self, task_id: int) -> bool:
        task = self._tasks.get(task_id)
        if task is None:
            return False

        if task.is_running:
            # A completed task never keeps a live countdown.
            self._cancel_wakeup(task_id)
            if task.end_time is not None:
                now_ms = int(round(self._clock() * 1000))
                task.remaining_seconds = max(0, seconds_until(task.end_time, now_ms))
            task.end_time = None
            task.is_running = False

        task.completed = not task.completed
        logger.info("Task id=%s completed=%s", task_id, task.completed)
        self._changed()
        return True

    def delete(self, task_id: int) -> bool:
        if task_id not in self._tasks:
            return False
        self._cancel_wakeup(task_id)
        del self._tasks[task_id]
        logger.info("Task deleted id=%s", task_id)
        self._changed()
        return True

    def clear_completed(self) -> int:
        doomed = [t.id for t in self._tasks.values() if t.completed]
        if not doomed:
            return 0
        for task_id in doomed:
            self._cancel_wakeup(task_id)
            del self._tasks[task_id]
        logger.info("Cleared %d completed task(s)", len(doomed))
        self._changed()
        return len(doomed)

    def replace_all(self, tasks: Iterable[Task]) -> None:
        """Install a loaded snapshot. Does not notify on_change."""
        if self._scheduler is not None:
            self._scheduler.cancel_all()
        self._tasks = {}
        for task in tasks:
            if task.id in self._tasks:
                logger.warning("Duplicate task id=%s in snapshot; keeping the first", task.id)
                continue
            self._tasks[task.id] = task

    def notify_changed(self) -> None:
        """Signal an external mutation of a stored Task (used by the timer engine)."""
        self._changed()

    # ---- internals ----

    def _next_id(self) -> int:
        candidate = int(self._id_factory())
        if self._tasks:
            candidate = max(candidate, max(self._tasks) + 1)
        while candidate in self._tasks:
            candidate += 1
        return candidate

    def _cancel_wakeup(self, task_id: int) -> None:
        if self._scheduler is not None:
            self._scheduler.cancel(task_id)

    def _changed(self) -> None:
        cb = self.on_change
        if cb is None:
            return
        try:
            cb()
        except Exception:
            logger.exception("on_change callback failed")
