# src/taskminder/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used around the scheduling core.

The scheduler and the CLI depend on Protocols instead of concrete implementations.
This keeps storage/notification backends swappable and makes testing easier.
"""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from ..tasks.task_models import TaskRecord


class ReminderNotifier(Protocol):
    """
    Receives fired reminders.

    Called on the scheduler's reminder thread (never the caller's thread), once per
    firing, and never for a task that is already COMPLETED. Implementations should
    return quickly or hand the work off to their own executor.
    """

    def on_reminder(self, task: TaskRecord) -> None: ...


class TaskRepo(Protocol):
    """
    Persistence collaborator.

    The scheduler never calls it; the application layer saves/updates around
    scheduler operations.
    """

    def load_all(self) -> list[TaskRecord]: ...
    def save(self, task: TaskRecord) -> None: ...
    def update(self, task: TaskRecord) -> None: ...
    def delete(self, task_id: str) -> bool: ...
    def get_by_id(self, task_id: str) -> TaskRecord | None: ...
    def count_tasks(self) -> int: ...
