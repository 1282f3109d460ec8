# src/taskclock/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, restores the last snapshot (resuming or
expiring timers that were running when the process exited), starts the
wake-up scheduler in a background thread and runs the console REPL.
"""

from __future__ import annotations

import logging

from ..cli.bootstrap import create_initial_state, restore_tasks, shutdown
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..logging_setup import setup_logging
from ..tasks.wakeup_scheduler import start_scheduler_in_background

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    restore_tasks(state)

    runner = start_scheduler_in_background(state.scheduler)
    if runner is None:
        logger.error("Timers will not tick: scheduler thread failed to start.")

    try:
        run_console_loop(state)
    finally:
        if runner is not None:
            runner.stop()
            runner.join(timeout=5.0)

        try:
            shutdown(state)
        except Exception:
            logger.exception("Shutdown failed.")
        logger.info("Bye.")


if __name__ == "__main__":
    main()
