# src/taskclock/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The timer engine and the persistence adapter depend on Protocols instead of
concrete implementations. This keeps storage/rendering swappable and makes
testing easier (fake clock, in-memory record store, recording renderer).
"""

from collections.abc import Callable, Iterable
from typing import Protocol

Clock = Callable[[], float]
# Wall clock in epoch seconds (time.time-compatible).

WakeupHandler = Callable[[int], None]


class RecordStore(Protocol):
    """Durable key/value store holding serialized snapshots."""

    def get(self, key: str) -> str | None: ...
    def set(self, key: str, value: str) -> None: ...


class Renderer(Protocol):
    """
    Rendering collaborator.

    - request_render(): the task list changed, redraw it
    - update_countdown(): push one task's MM:SS string without a full redraw
    """

    def request_render(self) -> None: ...
    def update_countdown(self, task_id: int, text: str) -> None: ...


class WakeupScheduler(Protocol):
    """Recurring per-task wake-ups, dispatched by task id."""

    def set_handler(self, handler: WakeupHandler | None) -> None: ...
    def schedule(self, task_id: int) -> None: ...
    def cancel(self, task_id: int) -> bool: ...
    def cancel_all(self) -> int: ...
    def is_scheduled(self, task_id: int) -> bool: ...
    def scheduled_ids(self) -> Iterable[int]: ...
