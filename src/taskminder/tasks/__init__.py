"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, TaskPriority, TaskStatus)
- task_queue.py: priority-ordered queue (indexed heap)
- reminder_timer.py: single-thread one-shot timers with cancellable handles
- reminder_registry.py: task id -> armed reminder handle
- reminder_scheduler.py: the orchestrator used by the rest of the app
- task_store.py: SQLite-backed storage
- task_api.py: high-level helpers that pair store writes with scheduler calls
"""

from .reminder_scheduler import ReminderScheduler
from .task_models import TaskPriority, TaskRecord, TaskStatus
from .task_queue import PriorityOrderedQueue

__all__ = ["PriorityOrderedQueue", "ReminderScheduler", "TaskPriority", "TaskRecord", "TaskStatus"]
