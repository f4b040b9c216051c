# src/taskminder/notifiers/console.py

from __future__ import annotations

import logging
import sys
import threading
from datetime import datetime
from typing import TextIO

from ..tasks.task_models import TaskRecord
from .rendering import render_reminder_text

logger = logging.getLogger(__name__)


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ConsoleNotifier:
    """Prints reminders to the terminal (optionally with a bell)."""

    def __init__(self, *, stream: TextIO | None = None, enable_bell: bool = False) -> None:
        self._stream = stream
        self._enable_bell = enable_bell
        self._lock = threading.Lock()

    def on_reminder(self, task: TaskRecord) -> None:
        line = f"[{_ts_local()}] [REMINDER] {render_reminder_text(task)} (id={task.id[:8]})"
        stream = self._stream or sys.stdout
        with self._lock:
            print(line, file=stream, flush=True)
            if self._enable_bell:
                print("\a", end="", file=stream, flush=True)
        logger.debug("Console reminder printed for task %s", task.id)
