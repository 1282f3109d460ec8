# tests/test_commands.py

from __future__ import annotations

from taskclock.cli.commands import CommandRegistry, registry, split_text_and_minutes
from taskclock.connectors.console_connector import ConsoleRenderer, format_task_line
from taskclock.tasks.task_models import Task, TaskFilter


def test_command_registry_routes_name_and_aliases(state) -> None:
    reg = CommandRegistry()
    seen: list[list[str]] = []

    def handler(state, args):
        seen.append(args)
        return "ok"

    reg.register("add", handler, "add a task", aliases=["a"])

    assert reg.handle(state, "/ADD tea | 5") == "ok"
    assert reg.handle(state, "/a x") == "ok"
    assert seen == [["tea", "|", "5"], ["x"]]
    assert "/add - add a task" in reg.build_help()


def test_command_registry_unknown_and_non_command(state) -> None:
    reg = CommandRegistry()
    assert reg.handle(state, "hello") is None
    assert "Unknown command" in (reg.handle(state, "/nope") or "")


def test_split_text_and_minutes() -> None:
    assert split_text_and_minutes(["Write", "report", "|", "25"]) == ("Write report", "25")
    assert split_text_and_minutes(["Write", "report|25"]) == ("Write report", "25")
    assert split_text_and_minutes(["just", "text"]) == ("just text", None)


def test_add_start_stop_by_position(state, clock) -> None:
    reply = registry.handle(state, "/add Brew tea | 3")
    assert reply is not None and "3 min" in reply
    (task,) = state.task_store.list_tasks()

    registry.handle(state, "/start 1")
    assert task.is_running
    assert state.scheduler.is_scheduled(task.id)

    clock.advance(30)
    registry.handle(state, f"/stop {task.id}")
    assert not task.is_running
    assert task.remaining_seconds == 150


def test_unknown_ids_are_reported_not_raised(state) -> None:
    assert registry.handle(state, "/start 99") == "No task 99."
    assert registry.handle(state, "/del abc") == "No task abc."
    assert registry.handle(state, "/done") == "Usage: /done <id>"


def test_start_without_timer_is_refused(state) -> None:
    registry.handle(state, "/add plain")
    assert registry.handle(state, "/start 1") == "Task #{} has no timer.".format(
        state.task_store.list_tasks()[0].id
    )


def test_edit_changes_minutes_and_resets(state) -> None:
    registry.handle(state, "/add Focus | 10")
    (task,) = state.task_store.list_tasks()
    registry.handle(state, "/start 1")

    registry.handle(state, "/edit 1 Deep focus | 5")
    assert task.text == "Deep focus"
    assert task.minutes == 5
    assert task.remaining_seconds == 300
    assert not task.is_running

    registry.handle(state, "/edit 1 Shallow")
    assert task.text == "Shallow"
    assert task.minutes == 5


def test_done_del_and_clear(state) -> None:
    registry.handle(state, "/add a")
    registry.handle(state, "/add b")
    registry.handle(state, "/done 1")
    assert registry.handle(state, "/clear") == "Removed 1 completed task(s)."
    assert [t.text for t in state.task_store.list_tasks()] == ["b"]
    registry.handle(state, "/del 1")
    assert state.task_store.count_tasks() == 0


def test_format_task_line() -> None:
    idle = Task(id=7, text="Tea", minutes=3, remaining_seconds=95)
    assert format_task_line(1, idle) == "  1. [ ] Tea  (id 7)  Time: 01:35 [stopped]"

    running = Task(id=8, text="Run", minutes=1, remaining_seconds=60, end_time=1, is_running=True)
    assert "Time: 00:42 [running]" in format_task_line(2, running, "00:42")

    done = Task(id=9, text="Done", completed=True)
    assert format_task_line(3, done) == "  3. [x] Done  (id 9)  Done"


def test_console_renderer_filters_and_tracks_countdowns(store, engine) -> None:
    out: list[str] = []
    renderer = ConsoleRenderer(store.list_tasks, out=out.append)
    engine.on_countdown = renderer.update_countdown

    a = store.create("a", 1)
    b = store.create("b")
    assert a is not None and b is not None
    store.toggle_completed(b.id)
    engine.start(a.id)
    renderer.update_countdown(a.id, "00:30")

    renderer.request_render()
    assert "00:30 [running]" in out[-1]
    assert "Tasks (all, 2):" in out[-1]

    renderer.task_filter = TaskFilter.COMPLETED
    text = renderer.render()
    assert "Tasks (completed, 1):" in text
    assert " a " not in text

    renderer.auto_render = False
    renderer.request_render()
    assert len(out) == 1
