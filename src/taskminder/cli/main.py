# src/taskminder/cli/main.py

"""
CLI entrypoint.

Initializes logging, builds AppState, loads saved tasks into the scheduler, then
runs the console REPL (or just waits for reminders when the console is disabled).
"""

from __future__ import annotations

import logging
import signal
import threading

from ..config import get_settings
from ..logging_setup import setup_logging
from ..tasks.task_api import load_saved_tasks
from .bootstrap import create_initial_state, shutdown_state
from .console import run_console_loop

logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logging.getLogger("nio").setLevel(max(console_level, logging.INFO))
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    logger.info("Starting %s...", settings.app_name)

    state = create_initial_state(settings=settings)
    load_saved_tasks(state)

    stop_main = threading.Event()

    def _handle_signal(signum, _frame) -> None:
        logger.info("Signal %s received, shutting down...", signum)
        stop_main.set()

    try:
        signal.signal(signal.SIGTERM, _handle_signal)
        if not settings.console_enabled:
            signal.signal(signal.SIGINT, _handle_signal)
    except (ValueError, OSError, AttributeError):
        # Not in the main thread, or the platform lacks SIGTERM.
        pass

    try:
        if settings.console_enabled:
            run_console_loop(state)
        else:
            logger.info("Console disabled. Waiting for reminders. Press Ctrl+C to stop.")
            stop_main.wait()
    finally:
        shutdown_state(state)
        logger.info("Bye.")


if __name__ == "__main__":
    main()
