# src/taskclock/tasks/timer_engine.py

from __future__ import annotations

"""
Per-task countdown state machine.

States:
- idle:    is_running=False, end_time=None
- running: is_running=True,  end_time=<epoch ms deadline>
- expired: reached zero; immediately becomes completed, idle, and the
           countdown is reset to the full length

Remaining time is always derived from the absolute deadline
(ceil((end_time - now) / 1000)), never by decrementing a counter, so late or
missed wake-ups cannot make the countdown drift. Recovery after a restart
uses the same formula (see persistence.py).
"""

import logging
import threading
import time
from collections.abc import Callable

from ..core.ports import Clock, WakeupScheduler
from .task_models import TaskCompleted, format_countdown, seconds_until
from .task_store import TaskStore

logger = logging.getLogger(__name__)

CountdownCallback = Callable[[int, str], None]
CompletedCallback = Callable[[TaskCompleted], None]


class TimerEngine:
    def __init__(
        self,
        store: TaskStore,
        scheduler: WakeupScheduler,
        *,
        clock: Clock = time.time,
        on_countdown: CountdownCallback | None = None,
        on_completed: CompletedCallback | None = None,
        lock: threading.RLock | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._clock = clock
        self.on_countdown = on_countdown
        self.on_completed = on_completed
        self._lock = lock

        scheduler.set_handler(self.dispatch_wakeup)

    def now_ms(self) -> int:
        return int(round(self._clock() * 1000))

    # ---- commands ----

    def start(self, task_id: int) -> bool:
        task = self._store.get(task_id)
        if task is None or task.minutes is None or task.is_running:
            return False

        if task.remaining_seconds is None or task.remaining_seconds <= 0:
            task.remaining_seconds = task.minutes * 60

        task.end_time = self.now_ms() + task.remaining_seconds * 1000
        task.is_running = True
        task.completed = False
        self._scheduler.schedule(task_id)

        logger.info(
            "Timer started id=%s remaining=%ss end_time=%s",
            task_id,
            task.remaining_seconds,
            task.end_time,
        )
        self._store.notify_changed()
        return True

    def stop(self, task_id: int) -> bool:
        task = self._store.get(task_id)
        if task is None or not task.is_running:
            return False

        self._scheduler.cancel(task_id)
        if task.end_time is not None:
            task.remaining_seconds = max(0, seconds_until(task.end_time, self.now_ms()))
        task.is_running = False
        task.end_time = None

        logger.info("Timer stopped id=%s remaining=%ss", task_id, task.remaining_seconds)
        self._store.notify_changed()
        return True

    def toggle(self, task_id: int) -> bool:
        task = self._store.get(task_id)
        if task is None:
            return False
        if task.is_running:
            return self.stop(task_id)
        return self.start(task_id)

    def resume(self, task_id: int) -> bool:
        """Re-arm the wake-up for a task restored as running; end_time is kept."""
        task = self._store.get(task_id)
        if task is None or not task.is_running or task.end_time is None:
            return False
        self._scheduler.schedule(task_id)
        logger.info("Timer resumed id=%s remaining=%ss", task_id, task.remaining_seconds)
        return True

    def tick(self, task_id: int) -> TaskCompleted | None:
        # A wake-up may fire after stop/delete already ran; re-check before touching anything.
        task = self._store.get(task_id)
        if task is None or not task.is_running:
            return None

        if task.end_time is None or task.minutes is None:
            logger.warning("Running task id=%s has no deadline; stopping", task_id)
            self._scheduler.cancel(task_id)
            task.is_running = False
            task.end_time = None
            self._store.notify_changed()
            return None

        remaining = seconds_until(task.end_time, self.now_ms())
        task.remaining_seconds = remaining
        self._push_countdown(task_id, remaining)

        if remaining > 0:
            return None

        self._scheduler.cancel(task_id)
        task.is_running = False
        task.end_time = None
        task.remaining_seconds = task.minutes * 60
        task.completed = True

        event = TaskCompleted(task_id=task.id, text=task.text)
        logger.info("Timer expired id=%s", task_id)
        self._emit_completed(event)
        self._store.notify_changed()
        return event

    def dispatch_wakeup(self, task_id: int) -> None:
        """Scheduler entry point; serializes ticks with user commands."""
        if self._lock is None:
            self.tick(task_id)
            return
        with self._lock:
            self.tick(task_id)

    def cancel(self, task_id: int) -> bool:
        return self._scheduler.cancel(task_id)

    def cancel_all(self) -> int:
        n = self._scheduler.cancel_all()
        if n:
            logger.info("Cancelled %d active wake-up(s)", n)
        return n

    # ---- queries ----

    def remaining_seconds(self, task_id: int) -> int | None:
        task = self._store.get(task_id)
        if task is None:
            return None
        if task.is_running and task.end_time is not None:
            return max(0, seconds_until(task.end_time, self.now_ms()))
        return task.remaining_seconds

    # ---- callbacks ----

    def _push_countdown(self, task_id: int, remaining: int) -> None:
        cb = self.on_countdown
        if cb is None:
            return
        try:
            cb(task_id, format_countdown(remaining))
        except Exception:
            logger.exception("on_countdown callback failed task_id=%s", task_id)

    def _emit_completed(self, event: TaskCompleted) -> None:
        cb = self.on_completed
        if cb is None:
            return
        try:
            cb(event)
        except Exception:
            logger.exception("on_completed callback failed task_id=%s", event.task_id)
