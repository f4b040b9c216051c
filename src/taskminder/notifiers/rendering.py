# src/taskminder/notifiers/rendering.py

from __future__ import annotations

from datetime import datetime

from ..tasks.task_models import TaskRecord

TIME_FORMAT = "%Y-%m-%d %H:%M"


def render_reminder_text(task: TaskRecord, *, now: datetime | None = None) -> str:
    """
    One-line reminder text shared by all notifiers.

    e.g. "Reminder: 'Pay rent' [HIGH] is due 2026-10-20 09:00"
    """
    now = now or datetime.now()
    due = task.due_time.strftime(TIME_FORMAT)
    verb = "was due" if now > task.due_time else "is due"
    text = f"Reminder: {task.title!r} [{task.priority.value}] {verb} {due}"
    desc = (task.description or "").strip()
    if desc:
        text += f" - {desc}"
    return text
