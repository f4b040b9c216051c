# src/taskminder/tasks/reminder_scheduler.py

"""
Reminder scheduler.

Owns the priority queue and the reminder registry and serializes every access to
both through one lock:
- caller actions (schedule / reschedule / cancel / complete / ...) take the lock;
- timer callbacks take the same lock before touching the registry or a task status.

The notifier is called outside the lock, on the reminder thread, so it may call
back into the scheduler. It should return quickly: it shares the single reminder
thread with every other task.

Overdue status is only evaluated when a reminder fires. A task scheduled with a
reminder time that has already passed gets no timer and therefore never becomes
OVERDUE unless it is rescheduled.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from datetime import datetime
from functools import partial

from ..core.ports import ReminderNotifier
from ..errors import InvalidArgumentError, RejectedSchedulingError
from .reminder_registry import ReminderRegistry
from .reminder_timer import ReminderHandle, ReminderTimer
from .task_models import TaskPriority, TaskRecord, TaskStatus
from .task_queue import PriorityOrderedQueue

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_GRACE_SECONDS = 60.0

NotifyFn = Callable[[TaskRecord], None]


class ReminderScheduler:
    def __init__(
        self,
        notifier: ReminderNotifier | NotifyFn,
        *,
        clock: Callable[[], datetime] = datetime.now,
        shutdown_grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS,
        timer: ReminderTimer | None = None,
    ) -> None:
        on_reminder = getattr(notifier, "on_reminder", notifier)
        if not callable(on_reminder):
            raise InvalidArgumentError("notifier must be callable or provide on_reminder(task)")

        self._notify: NotifyFn = on_reminder
        self._clock = clock
        self._grace = max(0.0, float(shutdown_grace_seconds))

        self._lock = threading.RLock()
        self._queue = PriorityOrderedQueue()
        self._registry = ReminderRegistry()
        self._timer = timer if timer is not None else ReminderTimer()
        self._closed = False

    # ---- lifecycle operations ----

    def schedule_task(self, task: TaskRecord) -> bool:
        """
        Queue a task and arm its reminder.

        Returns True when a timer was armed, False when the reminder time has
        already passed (the task is still queued). A COMPLETED task is neither
        queued nor armed.
        """
        with self._lock:
            self._ensure_open()
            if task.status == TaskStatus.COMPLETED:
                logger.info("Task %s is completed; not scheduled", task.id)
                return False
            queued = task in self._queue
            self._queue.insert(task)
            try:
                armed = self._arm(task)
            except Exception:
                if not queued:
                    self._queue.remove(task)
                raise
        logger.info(
            "Task scheduled id=%s priority=%s reminder=%s armed=%s",
            task.id,
            task.priority.value,
            task.reminder_time.isoformat(timespec="seconds"),
            armed,
        )
        return armed

    def cancel_reminder(self, task: TaskRecord) -> bool:
        """Cancel the task's reminder if one is armed. Never raises for a missing one."""
        with self._lock:
            cancelled = self._registry.cancel(task.id)
        if cancelled:
            logger.info("Reminder cancelled id=%s", task.id)
        return cancelled

    def reschedule_task(self, task: TaskRecord, new_reminder_time: datetime) -> bool:
        """
        Move the task's reminder; the queue position does not change.

        A COMPLETED task keeps no reminder: nothing changes and False is returned.
        """
        if not isinstance(new_reminder_time, datetime):
            raise InvalidArgumentError("new_reminder_time must be a datetime")

        with self._lock:
            self._ensure_open()
            if task.status == TaskStatus.COMPLETED:
                logger.info("Task %s is completed; reminder not moved", task.id)
                return False
            # Validates (and normalises) the new time before the old timer goes.
            task.reminder_time = new_reminder_time
            self._registry.cancel(task.id)
            armed = self._arm(task)
        logger.info(
            "Task rescheduled id=%s reminder=%s armed=%s",
            task.id,
            task.reminder_time.isoformat(timespec="seconds"),
            armed,
        )
        return armed

    def complete_task(self, task: TaskRecord) -> None:
        with self._lock:
            if task.status != TaskStatus.COMPLETED:
                task.status = TaskStatus.COMPLETED
            self._registry.cancel(task.id)
            removed = self._queue.remove(task)
        logger.info("Task completed id=%s (was queued=%s)", task.id, removed)

    def get_next_pending_task(self) -> TaskRecord:
        with self._lock:
            return self._queue.peek_highest()

    def shutdown(self, timeout: float | None = None) -> bool:
        """
        Reject further scheduling, cancel every armed reminder and wait for an
        in-flight callback for up to `timeout` seconds (default: the grace period).

        Returns False if a callback was still running when the wait ran out.
        """
        with self._lock:
            if not self._closed:
                self._closed = True
                cancelled = self._registry.cancel_all()
                logger.info("Scheduler shutting down: %d reminders cancelled", cancelled)

        grace = self._grace if timeout is None else max(0.0, float(timeout))
        finished = self._timer.shutdown(timeout=grace)
        logger.info("Scheduler stopped (clean=%s).", finished)
        return finished

    # ---- queue maintenance used by edit/delete flows ----

    def update_priority(self, task: TaskRecord, new_priority: TaskPriority | str) -> bool:
        with self._lock:
            return self._queue.update_priority(task, new_priority)

    def discard_task(self, task: TaskRecord) -> bool:
        """Drop a task without completing it (e.g. deleted by the user)."""
        with self._lock:
            self._registry.cancel(task.id)
            removed = self._queue.remove(task)
        logger.info("Task discarded id=%s (was queued=%s)", task.id, removed)
        return removed

    def start_task(self, task: TaskRecord) -> bool:
        """NOT_STARTED -> IN_PROGRESS. Returns False for any other status."""
        with self._lock:
            if task.status != TaskStatus.NOT_STARTED:
                return False
            task.status = TaskStatus.IN_PROGRESS
            return True

    # ---- diagnostics ----

    @property
    def is_shut_down(self) -> bool:
        return self._closed

    def has_reminder(self, task: TaskRecord) -> bool:
        with self._lock:
            return task.id in self._registry

    def pending_tasks(self) -> list[TaskRecord]:
        """Queued tasks in pop order."""
        with self._lock:
            return self._queue.ordered()

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    # ---- internals ----

    def _ensure_open(self) -> None:
        if self._closed:
            raise RejectedSchedulingError("scheduler is shut down")

    def _arm(self, task: TaskRecord) -> bool:
        # Caller holds self._lock.
        delay = (task.reminder_time - self._clock()).total_seconds()
        if delay <= 0:
            logger.info("Reminder time already passed for task %s; no reminder armed", task.id)
            return False

        handle = self._timer.schedule(delay, partial(self._on_timer, task), key=task.id)
        self._registry.register(task.id, handle)
        logger.debug("Reminder armed id=%s in %.1fs", task.id, delay)
        return True

    def _on_timer(self, task: TaskRecord, handle: ReminderHandle) -> None:
        with self._lock:
            current = self._registry.consume(task.id, handle)
            if not current:
                logger.debug("Stale reminder for task %s ignored", task.id)
                return
            if task.status == TaskStatus.COMPLETED:
                logger.debug("Reminder for completed task %s suppressed", task.id)
                return

        logger.info("Reminder fired id=%s title=%r", task.id, task.title)
        try:
            self._notify(task)
        except Exception:
            logger.exception("Reminder notifier failed for task %s", task.id)

        with self._lock:
            if task.status in (TaskStatus.NOT_STARTED, TaskStatus.IN_PROGRESS) and self._clock() > task.due_time:
                task.status = TaskStatus.OVERDUE
                logger.info("Task %s is overdue", task.id)
