# tests/fakes.py

from __future__ import annotations

from dataclasses import dataclass, field

from taskclock.tasks.task_models import TaskCompleted

T0 = 1_700_000_000.0


class FakeClock:
    """
    Settable wall clock (epoch seconds).

    Tests move time explicitly with advance()/set(); nothing ever sleeps.
    """

    def __init__(self, now: float = T0) -> None:
        self.now = float(now)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> float:
        self.now += seconds
        return self.now

    def now_ms(self) -> int:
        return int(round(self.now * 1000))


@dataclass(slots=True)
class RecordingRenderer:
    """Renderer that records calls in order, for side-effect assertions."""

    renders: int = 0
    countdowns: list[tuple[int, str]] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)

    def request_render(self) -> None:
        self.renders += 1
        self.calls.append("render")

    def update_countdown(self, task_id: int, text: str) -> None:
        self.countdowns.append((task_id, text))


@dataclass(slots=True)
class RecordingNotifier:
    events: list[TaskCompleted] = field(default_factory=list)

    def __call__(self, event: TaskCompleted) -> None:
        self.events.append(event)


class FailingRecordStore:
    """Record store whose writes always fail (quota exceeded, disk full, ...)."""

    def __init__(self, stored: str | None = None) -> None:
        self.stored = stored

    def get(self, key: str) -> str | None:
        return self.stored

    def set(self, key: str, value: str) -> None:
        raise OSError("quota exceeded")


class SpyRecordStore:
    """In-memory record store that logs writes into a shared call list."""

    def __init__(self, calls: list[str] | None = None) -> None:
        self.data: dict[str, str] = {}
        self.calls = calls if calls is not None else []

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.calls.append("save")
        self.data[key] = value
