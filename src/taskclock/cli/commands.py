# src/taskclock/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable

from ..connectors.console_connector import ConsoleRenderer, render_task_list
from ..core.state import AppState
from ..tasks.task_models import Task, TaskFilter

CommandHandler = Callable[[AppState, list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/help, /add, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        return handler(state, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


def split_text_and_minutes(args: list[str]) -> tuple[str, str | None]:
    """'Write report | 25' -> ('Write report', '25'); no '|' -> (text, None)."""
    raw = " ".join(args)
    if "|" not in raw:
        return raw.strip(), None
    text, _, minutes = raw.rpartition("|")
    return text.strip(), minutes.strip()


def resolve_task(state: AppState, raw: str) -> Task | None:
    """Accept either a task id or a 1-based position in the full list."""
    try:
        n = int(raw.lstrip("#"))
    except ValueError:
        return None

    task = state.task_store.get(n)
    if task is not None:
        return task

    tasks = state.task_store.list_tasks()
    if 1 <= n <= len(tasks):
        return tasks[n - 1]
    return None


def _with_task(state: AppState, args: list[str], usage: str) -> Task | str:
    if not args:
        return usage
    task = resolve_task(state, args[0])
    if task is None:
        return f"No task {args[0]}."
    return task


def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


def cmd_add(state: AppState, args: list[str]) -> str:
    text, minutes = split_text_and_minutes(args)
    task = state.task_store.create(text, minutes)
    if task is None:
        return "Usage: /add <text> [| minutes]"
    if task.has_timer:
        return f"Added #{task.id}: {task.text} ({task.minutes} min)"
    return f"Added #{task.id}: {task.text}"


def cmd_list(state: AppState, args: list[str]) -> str:
    renderer = state.renderer
    if args and isinstance(renderer, ConsoleRenderer):
        renderer.task_filter = TaskFilter.parse(args[0])
    if isinstance(renderer, ConsoleRenderer):
        return renderer.render()
    flt = TaskFilter.parse(args[0] if args else None)
    return render_task_list(state.task_store.list_tasks(flt))


def cmd_start(state: AppState, args: list[str]) -> str:
    task = _with_task(state, args, "Usage: /start <id>")
    if isinstance(task, str):
        return task
    if not task.has_timer:
        return f"Task #{task.id} has no timer."
    if not state.timer_engine.start(task.id):
        return f"Timer for #{task.id} is already running."
    return ""


def cmd_stop(state: AppState, args: list[str]) -> str:
    task = _with_task(state, args, "Usage: /stop <id>")
    if isinstance(task, str):
        return task
    if not state.timer_engine.stop(task.id):
        return f"Timer for #{task.id} is not running."
    return ""


def cmd_timer(state: AppState, args: list[str]) -> str:
    task = _with_task(state, args, "Usage: /timer <id>")
    if isinstance(task, str):
        return task
    if not task.has_timer:
        return f"Task #{task.id} has no timer."
    state.timer_engine.toggle(task.id)
    return ""


def cmd_done(state: AppState, args: list[str]) -> str:
    task = _with_task(state, args, "Usage: /done <id>")
    if isinstance(task, str):
        return task
    state.task_store.toggle_completed(task.id)
    return ""


def cmd_edit(state: AppState, args: list[str]) -> str:
    """
    /edit <id> <text>             -> change text only
    /edit <id> <text> | <minutes> -> change text and timer (empty minutes removes the timer)
    """
    task = _with_task(state, args, "Usage: /edit <id> <text> [| minutes]")
    if isinstance(task, str):
        return task
    text, minutes = split_text_and_minutes(args[1:])
    if not text:
        return "Usage: /edit <id> <text> [| minutes]"
    if minutes is None:
        ok = state.task_store.update(task.id, text=text)
    else:
        ok = state.task_store.update(task.id, text=text, minutes=minutes or None)
    return "" if ok else f"Could not edit #{task.id}."


def cmd_delete(state: AppState, args: list[str]) -> str:
    task = _with_task(state, args, "Usage: /del <id>")
    if isinstance(task, str):
        return task
    state.task_store.delete(task.id)
    return f"Deleted #{task.id}."


def cmd_clear(state: AppState, args: list[str]) -> str:
    n = state.task_store.clear_completed()
    return f"Removed {n} completed task(s)."


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("add", cmd_add, help_text="Add a task: /add <text> [| minutes].", aliases=["a"])
registry.register(
    "list", cmd_list, help_text="Show tasks: /list [all|active|completed].", aliases=["ls", "l"]
)
registry.register("start", cmd_start, help_text="Start a task timer: /start <id>.")
registry.register("stop", cmd_stop, help_text="Stop a task timer: /stop <id>.")
registry.register("timer", cmd_timer, help_text="Start/stop a task timer: /timer <id>.", aliases=["t"])
registry.register("done", cmd_done, help_text="Toggle completed: /done <id>.", aliases=["x"])
registry.register("edit", cmd_edit, help_text="Edit a task: /edit <id> <text> [| minutes].", aliases=["e"])
registry.register("del", cmd_delete, help_text="Delete a task: /del <id>.", aliases=["rm"])
registry.register("clear", cmd_clear, help_text="Delete all completed tasks.")
