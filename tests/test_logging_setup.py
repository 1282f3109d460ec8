# tests/test_logging_setup.py

from __future__ import annotations

import logging

import pytest

from taskclock.logging_setup import _ConsoleNoiseFilter


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


@pytest.mark.parametrize(
    ("name", "level", "shown"),
    [
        ("taskclock.tasks.task_store", logging.INFO, True),
        ("taskclock.tasks.timer_engine", logging.INFO, False),
        ("taskclock.tasks.timer_engine", logging.WARNING, True),
        ("taskclock.tasks.wakeup_scheduler", logging.INFO, False),
        ("taskclock.tasks.wakeup_scheduler", logging.ERROR, True),
        ("py.warnings", logging.WARNING, False),
        ("asyncio", logging.WARNING, False),
        ("asyncio", logging.ERROR, True),
    ],
)
def test_console_filter_levels(name: str, level: int, shown: bool) -> None:
    assert _ConsoleNoiseFilter().filter(_record(name, level)) is shown
