# src/taskclock/connectors/console_connector.py

from __future__ import annotations

import logging
import sys
import threading
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from ..tasks.task_models import Task, TaskCompleted, TaskFilter, format_countdown

if TYPE_CHECKING:
    from ..core.state import AppState

logger = logging.getLogger(__name__)

TaskSource = Callable[[TaskFilter], list[Task]]


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def format_task_line(position: int, task: Task, countdown: str | None = None) -> str:
    mark = "x" if task.completed else " "
    line = f"{position:>3}. [{mark}] {task.text}  (id {task.id})"
    if task.has_timer:
        shown = countdown if (task.is_running and countdown) else format_countdown(task.remaining_seconds)
        state = "running" if task.is_running else "stopped"
        line += f"  Time: {shown} [{state}]"
    if task.completed:
        line += "  Done"
    return line


def render_task_list(tasks: list[Task], countdowns: dict[int, str] | None = None) -> str:
    if not tasks:
        return "No tasks yet. Add one with /add <text> [| minutes]."
    countdowns = countdowns or {}
    return "\n".join(
        format_task_line(i, t, countdowns.get(t.id)) for i, t in enumerate(tasks, start=1)
    )


class ConsoleRenderer:
    """
    Console rendering surface.

    request_render() reprints the (filtered) task list when auto_render is on.
    update_countdown() only records the latest MM:SS per task; the next list
    render picks it up, so ticks never force a full redraw.
    """

    def __init__(
        self,
        source: TaskSource,
        *,
        auto_render: bool = True,
        out: Callable[[str], None] = _print_ts,
    ) -> None:
        self._source = source
        self.auto_render = auto_render
        self.task_filter = TaskFilter.ALL
        self._out = out
        self._countdowns: dict[int, str] = {}
        self._lock = threading.Lock()

    def countdown_for(self, task_id: int) -> str | None:
        with self._lock:
            return self._countdowns.get(task_id)

    def update_countdown(self, task_id: int, text: str) -> None:
        with self._lock:
            self._countdowns[task_id] = text
        logger.debug("Countdown id=%s %s", task_id, text)

    def render(self) -> str:
        tasks = self._source(self.task_filter)
        with self._lock:
            live = {t.id for t in tasks if t.is_running}
            self._countdowns = {k: v for k, v in self._countdowns.items() if k in live}
            countdowns = dict(self._countdowns)
        header = f"Tasks ({self.task_filter.value}, {len(tasks)}):"
        return header + "\n" + render_task_list(tasks, countdowns)

    def request_render(self) -> None:
        if not self.auto_render:
            return
        self._out(self.render())


def print_notification(event: TaskCompleted) -> None:
    # Terminal bell as the audible cue.
    sys.stdout.write("\a")
    _print_ts(f"[TIMER] {event.message}")


def run_console_loop(state: AppState) -> None:
    from ..cli.commands import registry as command_registry

    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Use /help for commands. Use /exit to quit.\n")

    renderer = state.renderer
    if isinstance(renderer, ConsoleRenderer):
        with state.lock:
            _print_ts(renderer.render())

    while True:
        try:
            user_input = input(">>> ").strip()
        except EOFError:
            logger.info("Console EOF received, exiting.")
            break
        except KeyboardInterrupt:
            logger.info("Console KeyboardInterrupt, exiting.")
            print()
            break

        if not user_input:
            continue

        if user_input.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            break

        if not user_input.startswith("/"):
            # Bare text is a shortcut for /add.
            user_input = "/add " + user_input

        try:
            with state.lock:
                cmd_response = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            cmd_response = "Internal error while handling a command."

        if cmd_response:
            _print_ts(cmd_response)

    logger.info("Console connector finished.")
