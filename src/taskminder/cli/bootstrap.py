# src/taskminder/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the task store, notifiers and scheduler into AppState.
"""

from __future__ import annotations

import logging

from ..config import get_settings
from ..core.ports import ReminderNotifier
from ..core.state import AppState
from ..notifiers.console import ConsoleNotifier
from ..notifiers.fanout import FanoutNotifier
from ..tasks.reminder_scheduler import ReminderScheduler
from ..tasks.task_api import persist_all
from ..tasks.task_store import TaskStore

logger = logging.getLogger(__name__)


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.tasks_db_path.parent.mkdir(parents=True, exist_ok=True)


def build_notifier(settings) -> tuple[ReminderNotifier, list]:
    """Console notifier always; Matrix in addition when enabled. Returns (notifier, closers)."""
    notifiers: list[ReminderNotifier] = [ConsoleNotifier(enable_bell=bool(getattr(settings, "console_bell", False)))]
    closers: list = []

    if getattr(settings, "matrix_enabled", False):
        from ..notifiers.matrix import start_matrix_notifier

        matrix = start_matrix_notifier(settings)
        if matrix is not None:
            notifiers.append(matrix)
            closers.append(matrix.close)

    if len(notifiers) == 1:
        return notifiers[0], closers
    return FanoutNotifier(notifiers), closers


def create_initial_state(*, settings=None, notifier: ReminderNotifier | None = None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    closers: list = []
    if notifier is None:
        notifier, closers = build_notifier(settings)

    scheduler = ReminderScheduler(
        notifier,
        shutdown_grace_seconds=float(getattr(settings, "shutdown_grace_seconds", 60.0)),
    )

    state = AppState(
        settings=settings,
        task_store=TaskStore(settings.tasks_db_path),
        scheduler=scheduler,
        notifier=notifier,
        closers=closers,
    )
    logger.info("State ready (db=%s)", settings.tasks_db_path)
    return state


def shutdown_state(state: AppState) -> None:
    """Stop timers, persist live tasks and close notifiers, in that order."""
    state.scheduler.shutdown()

    try:
        saved = persist_all(state)
        logger.info("Persisted %d tasks on shutdown.", saved)
    except Exception:
        logger.exception("Failed to persist tasks on shutdown.")

    for close in state.closers:
        try:
            close()
        except Exception:
            logger.exception("Notifier close failed.")

    state.task_store.close()
