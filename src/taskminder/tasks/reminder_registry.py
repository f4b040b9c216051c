# src/taskminder/tasks/reminder_registry.py

from __future__ import annotations

import logging

from .reminder_timer import ReminderHandle

logger = logging.getLogger(__name__)


class ReminderRegistry:
    """
    task id -> armed ReminderHandle, at most one per task.

    Not thread-safe by itself; ReminderScheduler guards it with the same lock as
    the task queue.
    """

    __slots__ = ("_handles",)

    def __init__(self) -> None:
        self._handles: dict[str, ReminderHandle] = {}

    def register(self, task_id: str, handle: ReminderHandle) -> None:
        previous = self._handles.get(task_id)
        if previous is not None and previous is not handle:
            previous.cancel()
            logger.debug("Replaced reminder for task %s", task_id)
        self._handles[task_id] = handle

    def get(self, task_id: str) -> ReminderHandle | None:
        return self._handles.get(task_id)

    def cancel(self, task_id: str) -> bool:
        """Remove and cancel; True if a pending timer was stopped."""
        handle = self._handles.pop(task_id, None)
        if handle is None:
            return False
        return handle.cancel()

    def consume(self, task_id: str, handle: ReminderHandle) -> bool:
        """Drop the entry for a fired timer, unless it was already replaced."""
        if self._handles.get(task_id) is handle:
            del self._handles[task_id]
            return True
        return False

    def cancel_all(self) -> int:
        cancelled = 0
        for handle in self._handles.values():
            if handle.cancel():
                cancelled += 1
        self._handles.clear()
        return cancelled

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._handles

    def __len__(self) -> int:
        return len(self._handles)
