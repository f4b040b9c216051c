# src/taskminder/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any

from ..tasks.reminder_scheduler import ReminderScheduler
from ..tasks.task_models import TaskRecord
from .ports import ReminderNotifier, TaskRepo


@dataclass
class AppState:
    """
    Everything a connector (console REPL) needs, wired once in cli/bootstrap.py.

    `tasks` holds the live TaskRecord objects by id. The scheduler's queue refers to
    the same objects, so a status written by the reminder thread is visible here.
    """

    settings: Any
    task_store: TaskRepo
    scheduler: ReminderScheduler
    notifier: ReminderNotifier

    tasks: dict[str, TaskRecord] = field(default_factory=dict)
    lock: threading.RLock = field(default_factory=threading.RLock)
    closers: list[Any] = field(default_factory=list)
