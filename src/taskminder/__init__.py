"""Task tracking with priority ordering and one-shot reminders."""

from taskminder.errors import (
    EmptyQueueError,
    InvalidArgumentError,
    NotFoundError,
    RejectedSchedulingError,
    TaskminderError,
)
from taskminder.tasks.reminder_scheduler import ReminderScheduler
from taskminder.tasks.task_models import TaskPriority, TaskRecord, TaskStatus
from taskminder.tasks.task_queue import PriorityOrderedQueue

__all__ = [
    "EmptyQueueError",
    "InvalidArgumentError",
    "NotFoundError",
    "PriorityOrderedQueue",
    "RejectedSchedulingError",
    "ReminderScheduler",
    "TaskPriority",
    "TaskRecord",
    "TaskStatus",
    "TaskminderError",
]
