# src/taskminder/notifiers/fanout.py

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..core.ports import ReminderNotifier
from ..tasks.task_models import TaskRecord

logger = logging.getLogger(__name__)


class FanoutNotifier:
    """Delivers each reminder to several notifiers; one failing does not stop the rest."""

    def __init__(self, notifiers: Iterable[ReminderNotifier]) -> None:
        self._notifiers = list(notifiers)

    def __len__(self) -> int:
        return len(self._notifiers)

    def on_reminder(self, task: TaskRecord) -> None:
        for notifier in self._notifiers:
            try:
                notifier.on_reminder(task)
            except Exception:
                logger.exception("Notifier %s failed for task %s", type(notifier).__name__, task.id)
