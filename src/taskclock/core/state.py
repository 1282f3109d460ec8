# src/taskclock/core/state.py

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..tasks.persistence import PersistenceAdapter
    from ..tasks.task_store import TaskStore
    from ..tasks.timer_engine import TimerEngine
    from ..tasks.wakeup_scheduler import DeadlineScheduler
    from .ports import Renderer

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    """
    Wired application components.

    lock serializes every mutation: REPL commands take it explicitly, scheduler
    ticks take it through TimerEngine.dispatch_wakeup.
    """

    settings: Any
    task_store: TaskStore
    timer_engine: TimerEngine
    scheduler: DeadlineScheduler
    persistence: PersistenceAdapter
    renderer: Renderer

    lock: threading.RLock = field(default_factory=threading.RLock)

    def on_tasks_changed(self) -> None:
        """Mutation side effects, in order: save the snapshot, then request a render."""
        self.persistence.save(self.task_store.list_tasks())
        try:
            self.renderer.request_render()
        except Exception:
            logger.exception("request_render failed")

    def save_now(self) -> bool:
        return self.persistence.save(self.task_store.list_tasks())
