# src/taskclock/tasks/wakeup_scheduler.py

from __future__ import annotations

"""
Shared wake-up scheduler.

One scheduler serves every running countdown:
- a min-heap of (due_at, seq, task_id) ordered by the nearest wake-up,
- a dict task_id -> seq holding the live entries (heap entries whose seq
  no longer matches are stale and skipped),
- a single asyncio loop that sleeps until the nearest due_at, fires every due
  entry, re-arms it one interval later and goes back to sleep.

Dispatch is by task id through one handler (the timer engine), so cancelling
a wake-up is a dict removal.
"""

import asyncio
import contextlib
import heapq
import itertools
import logging
import threading
import time
from dataclasses import dataclass

from ..core.ports import Clock, WakeupHandler

logger = logging.getLogger(__name__)

MIN_INTERVAL_SECONDS = 0.05


class DeadlineScheduler:
    def __init__(self, *, clock: Clock = time.time, interval_seconds: float = 1.0) -> None:
        self._clock = clock
        self._interval = max(MIN_INTERVAL_SECONDS, float(interval_seconds))
        self._handler: WakeupHandler | None = None

        self._heap: list[tuple[float, int, int]] = []
        self._live: dict[int, int] = {}
        self._seq = itertools.count(1)
        self._lock = threading.RLock()

        # Set while run() is active, used to wake the loop after schedule/cancel.
        self._loop: asyncio.AbstractEventLoop | None = None
        self._changed: asyncio.Event | None = None

    @property
    def interval_seconds(self) -> float:
        return self._interval

    def set_handler(self, handler: WakeupHandler | None) -> None:
        self._handler = handler

    # ---- schedule / cancel ----

    def schedule(self, task_id: int) -> None:
        """(Re)arm a recurring wake-up for task_id, first firing one interval from now."""
        with self._lock:
            self._push(int(task_id), self._clock() + self._interval)
        logger.debug("Wake-up scheduled task_id=%s interval=%.2fs", task_id, self._interval)
        self._notify()

    def cancel(self, task_id: int) -> bool:
        with self._lock:
            removed = self._live.pop(int(task_id), None) is not None
        if removed:
            logger.debug("Wake-up cancelled task_id=%s", task_id)
            self._notify()
        return removed

    def cancel_all(self) -> int:
        with self._lock:
            n = len(self._live)
            self._live.clear()
            self._heap.clear()
        if n:
            logger.debug("All wake-ups cancelled (%d)", n)
            self._notify()
        return n

    def is_scheduled(self, task_id: int) -> bool:
        with self._lock:
            return int(task_id) in self._live

    def scheduled_ids(self) -> list[int]:
        with self._lock:
            return sorted(self._live)

    def next_deadline(self) -> float | None:
        with self._lock:
            self._drop_stale()
            return self._heap[0][0] if self._heap else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._live)

    # ---- dispatch ----

    def fire_due(self, now: float | None = None) -> list[int]:
        """
        Dispatch every wake-up due at `now`.

        Each due entry is re-armed at now + interval before its handler runs,
        so several missed wake-ups collapse into a single tick. The handler is
        called outside the internal lock and may cancel or reschedule freely.
        """
        if now is None:
            now = self._clock()

        due: list[int] = []
        with self._lock:
            while self._heap and self._heap[0][0] <= now:
                _, seq, task_id = heapq.heappop(self._heap)
                if self._live.get(task_id) != seq:
                    continue
                due.append(task_id)
                self._push(task_id, now + self._interval)

        fired: list[int] = []
        for task_id in due:
            if not self.is_scheduled(task_id):
                continue
            handler = self._handler
            if handler is None:
                continue
            try:
                handler(task_id)
            except Exception:
                logger.exception("Wake-up handler failed task_id=%s", task_id)
            fired.append(task_id)
        return fired

    async def run(self, stop_event: asyncio.Event) -> None:
        """
        Scheduler loop.

        Sleeps until the nearest wake-up (at most one interval when idle),
        or until schedule/cancel signals a change, then fires due entries.
        Exits when stop_event is set.
        """
        self._loop = asyncio.get_running_loop()
        self._changed = asyncio.Event()
        logger.info("Wake-up scheduler loop started (interval=%.2fs)", self._interval)

        try:
            while not stop_event.is_set():
                self.fire_due()

                deadline = self.next_deadline()
                if deadline is None:
                    timeout = self._interval
                else:
                    timeout = min(self._interval, max(0.0, deadline - self._clock()))

                self._changed.clear()
                stopper = asyncio.ensure_future(stop_event.wait())
                changer = asyncio.ensure_future(self._changed.wait())
                try:
                    await asyncio.wait({stopper, changer}, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
                finally:
                    for fut in (stopper, changer):
                        fut.cancel()
                        with contextlib.suppress(asyncio.CancelledError):
                            await fut
        finally:
            self._loop = None
            self._changed = None
            logger.info("Wake-up scheduler loop stopped.")

    # ---- internals ----

    def _push(self, task_id: int, due_at: float) -> None:
        seq = next(self._seq)
        self._live[task_id] = seq
        heapq.heappush(self._heap, (due_at, seq, task_id))

    def _drop_stale(self) -> None:
        while self._heap and self._live.get(self._heap[0][2]) != self._heap[0][1]:
            heapq.heappop(self._heap)

    def _notify(self) -> None:
        loop, changed = self._loop, self._changed
        if loop is None or changed is None:
            return
        try:
            loop.call_soon_threadsafe(changed.set)
        except RuntimeError:
            # Loop already closed during shutdown.
            pass


@dataclass(slots=True)
class SchedulerRunner:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop
    stop_event: asyncio.Event

    def stop(self) -> None:
        try:
            self.loop.call_soon_threadsafe(self.stop_event.set)
        except Exception:
            logger.debug("Failed to signal scheduler stop.", exc_info=True)

    def join(self, timeout: float | None = None) -> None:
        self.thread.join(timeout=timeout)


def start_scheduler_in_background(scheduler: DeadlineScheduler) -> SchedulerRunner | None:
    """
    Run the scheduler loop on its own event loop in a daemon thread.

    The console REPL blocks on input(), so wake-ups need a loop of their own.
    """
    ready = threading.Event()
    holder: dict[str, object] = {}

    def runner() -> None:
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        stop_event = asyncio.Event()

        holder["loop"] = loop
        holder["stop_event"] = stop_event
        ready.set()

        try:
            loop.run_until_complete(scheduler.run(stop_event))
        except Exception:
            logger.exception("Wake-up scheduler loop crashed.")
        finally:
            with contextlib.suppress(Exception):
                loop.stop()
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="taskclock-scheduler", daemon=True)
    t.start()

    ready.wait(timeout=5.0)
    loop = holder.get("loop")
    stop_event = holder.get("stop_event")

    if not isinstance(loop, asyncio.AbstractEventLoop) or not isinstance(stop_event, asyncio.Event):
        logger.error("Scheduler thread did not initialize properly.")
        return None

    logger.info("Scheduler background thread started.")
    return SchedulerRunner(thread=t, loop=loop, stop_event=stop_event)
