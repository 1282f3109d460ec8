# src/taskclock/tasks/task_models.py

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class TaskFilter(StrEnum):
    """Task list view selection."""

    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, raw: str | None) -> TaskFilter:
        if not raw:
            return cls.ALL
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return cls.ALL

    def matches(self, task: Task) -> bool:
        if self is TaskFilter.ACTIVE:
            return not task.completed
        if self is TaskFilter.COMPLETED:
            return task.completed
        return True


@dataclass(slots=True)
class Task:
    """
    A tracked task with an optional countdown.

    Timer fields:
    - minutes: configured countdown length (None means the task has no timer)
    - remaining_seconds: last known countdown value (None iff minutes is None)
    - end_time: absolute deadline in epoch milliseconds, set only while running
    """

    id: int
    text: str
    minutes: int | None = None
    remaining_seconds: int | None = None
    end_time: int | None = None
    is_running: bool = False
    completed: bool = False

    @property
    def has_timer(self) -> bool:
        return self.minutes is not None

    @property
    def full_seconds(self) -> int | None:
        if self.minutes is None:
            return None
        return self.minutes * 60


@dataclass(slots=True, frozen=True)
class TaskCompleted:
    """Emitted once when a running countdown reaches zero."""

    task_id: int
    text: str

    @property
    def message(self) -> str:
        return f'Your time for "{self.text}" is up.'


def parse_minutes(raw: Any) -> int | None:
    """
    Parse a user-supplied minute count.

    Returns None (no timer) for empty, negative or unparsable input.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw if raw >= 0 else None
    if isinstance(raw, float):
        if not math.isfinite(raw) or raw < 0:
            return None
        return int(raw)
    try:
        value = int(str(raw).strip())
    except ValueError:
        return None
    return value if value >= 0 else None


def seconds_until(end_time_ms: int, now_ms: int) -> int:
    """Whole seconds left until a deadline, rounded up."""
    return math.ceil((end_time_ms - now_ms) / 1000)


def format_countdown(total_seconds: int | None) -> str:
    """Format seconds as MM:SS (negative values clamp to 00:00)."""
    if total_seconds is None or total_seconds < 0:
        total_seconds = 0
    minutes, seconds = divmod(int(total_seconds), 60)
    return f"{minutes:02d}:{seconds:02d}"
