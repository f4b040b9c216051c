# src/taskminder/tasks/task_api.py

"""
High-level task operations used by connectors.

Each helper pairs a scheduler call with the matching store write. The scheduler
itself never touches the store.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from ..core.state import AppState
from ..errors import InvalidArgumentError, NotFoundError
from .task_models import TaskPriority, TaskRecord, TaskStatus

logger = logging.getLogger(__name__)


def add_task(
    state: AppState,
    *,
    title: str,
    due_time: datetime,
    priority: TaskPriority | str = TaskPriority.MEDIUM,
    description: str = "",
    reminder_time: datetime | None = None,
) -> TaskRecord:
    """
    Create, schedule and persist a task.

    Without an explicit reminder_time the reminder goes off
    settings.default_reminder_lead_minutes before the due time.
    """
    if reminder_time is None and isinstance(due_time, datetime):
        lead = int(getattr(state.settings, "default_reminder_lead_minutes", 15))
        reminder_time = due_time - timedelta(minutes=lead)

    task = TaskRecord(
        title=title,
        description=description,
        due_time=due_time,
        reminder_time=reminder_time,
        priority=priority,
    )

    state.scheduler.schedule_task(task)
    try:
        state.task_store.save(task)
    except Exception:
        state.scheduler.discard_task(task)
        raise

    state.tasks[task.id] = task
    logger.info("Task added id=%s title=%r", task.id, task.title)
    return task


def load_saved_tasks(state: AppState) -> int:
    """Seed the scheduler from the store. Completed tasks are kept but not queued."""
    scheduled = 0
    for task in state.task_store.load_all():
        state.tasks[task.id] = task
        if task.status == TaskStatus.COMPLETED:
            continue
        state.scheduler.schedule_task(task)
        scheduled += 1
    logger.info("Loaded %d tasks (%d scheduled)", len(state.tasks), scheduled)
    return scheduled


def find_task(state: AppState, ref: str) -> TaskRecord:
    """Look a live task up by full id or by a unique id prefix."""
    ref = (ref or "").strip().lower()
    if not ref:
        raise InvalidArgumentError("task id is required")

    task = state.tasks.get(ref)
    if task is not None:
        return task

    matches = [t for tid, t in state.tasks.items() if tid.startswith(ref)]
    if not matches:
        raise NotFoundError(f"no task with id {ref!r}")
    if len(matches) > 1:
        raise InvalidArgumentError(f"id prefix {ref!r} is ambiguous ({len(matches)} tasks)")
    return matches[0]


def start_task(state: AppState, task: TaskRecord) -> bool:
    changed = state.scheduler.start_task(task)
    if changed:
        state.task_store.update(task)
    return changed


def complete_task(state: AppState, task: TaskRecord) -> None:
    state.scheduler.complete_task(task)
    state.task_store.update(task)


def delete_task(state: AppState, task: TaskRecord) -> None:
    state.scheduler.discard_task(task)
    state.task_store.delete(task.id)
    state.tasks.pop(task.id, None)
    logger.info("Task deleted id=%s", task.id)


def change_priority(state: AppState, task: TaskRecord, priority: TaskPriority | str) -> None:
    priority = TaskPriority.coerce(priority)
    if not state.scheduler.update_priority(task, priority):
        # Not queued (completed): nothing to reorder.
        task.priority = priority
    state.task_store.update(task)


def reschedule_reminder(state: AppState, task: TaskRecord, reminder_time: datetime) -> bool:
    armed = state.scheduler.reschedule_task(task, reminder_time)
    state.task_store.update(task)
    return armed


def snooze_task(state: AppState, task: TaskRecord, minutes: int, *, now: datetime | None = None) -> bool:
    if minutes <= 0:
        raise InvalidArgumentError("snooze minutes must be positive")
    now = now or datetime.now()
    return reschedule_reminder(state, task, now + timedelta(minutes=minutes))


def persist_all(state: AppState) -> int:
    """
    Write every live task back to the store.

    Statuses set by the reminder thread (OVERDUE) are only persisted here.
    """
    saved = 0
    for task in list(state.tasks.values()):
        try:
            state.task_store.update(task)
            saved += 1
        except NotFoundError:
            logger.warning("Task %s vanished from the store; re-saving", task.id)
            state.task_store.save(task)
            saved += 1
    return saved
