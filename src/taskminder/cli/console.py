# src/taskminder/cli/console.py

from __future__ import annotations

import logging
from datetime import datetime

from ..core.state import AppState
from .commands import registry as command_registry

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


def run_console_loop(state: AppState) -> None:
    """
    Blocking REPL for slash commands.

    Reminders are printed from the reminder thread while this loop waits on input();
    that is expected.
    """
    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Manage tasks with slash commands. Use /help for commands. Use /exit to quit.\n")

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

        try:
            with state.lock:
                response = command_registry.handle(state, user_input)
        except Exception:
            logger.exception("Command handler crashed.")
            response = "Internal error while handling a command."

        if response is None:
            response = "Commands start with '/'. Use /help to list them."
        _print_ts(response)

    logger.info("Console connector finished.")
