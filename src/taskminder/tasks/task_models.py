# src/taskminder/tasks/task_models.py

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from typing import Any

from ..errors import InvalidArgumentError


class TaskPriority(StrEnum):
    """
    Scheduling priority.

    Declaration order is the rank: HIGH sorts first.
    """

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"

    @property
    def rank(self) -> int:
        return _PRIORITY_RANK[self]

    @classmethod
    def coerce(cls, raw: Any) -> TaskPriority:
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            try:
                return cls(raw.strip().upper())
            except ValueError:
                pass
        raise InvalidArgumentError(f"unknown priority: {raw!r}")


_PRIORITY_RANK = {p: i for i, p in enumerate(TaskPriority)}


class TaskStatus(StrEnum):
    """
    Task lifecycle status.

    Notes:
    - IN_PROGRESS is only ever set by the caller.
    - OVERDUE is only set when a reminder fires after the due time.
    - COMPLETED is terminal.
    """

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    OVERDUE = "OVERDUE"

    @classmethod
    def coerce(cls, raw: Any) -> TaskStatus:
        if isinstance(raw, cls):
            return raw
        if isinstance(raw, str):
            try:
                return cls(raw.strip().upper())
            except ValueError:
                pass
        raise InvalidArgumentError(f"unknown status: {raw!r}")

    @classmethod
    def from_db(cls, raw: str | None) -> TaskStatus:
        if not raw:
            return cls.NOT_STARTED
        try:
            return cls(raw)
        except ValueError:
            return cls.NOT_STARTED


_IMMUTABLE_FIELDS = frozenset({"id", "created_time"})
_REQUIRED_FIELDS = ("title", "description", "due_time", "reminder_time", "priority")


def _new_task_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, eq=False)
class TaskRecord:
    """
    A task tracked by the reminder scheduler.

    `id` and `created_time` are fixed for the lifetime of the object. Assigning any
    other field refreshes `last_modified_time`.

    Records compare by identity: two records with identical contents are still two
    different queue entries.

    The scheduler may write `status` (and therefore `last_modified_time`) from its
    timer thread; holders should treat those two fields as changing asynchronously.
    """

    # None defaults let a missing field surface as InvalidArgumentError.
    title: str = None  # type: ignore[assignment]
    description: str = None  # type: ignore[assignment]
    due_time: datetime = None  # type: ignore[assignment]
    reminder_time: datetime = None  # type: ignore[assignment]
    priority: TaskPriority = None  # type: ignore[assignment]

    status: TaskStatus = TaskStatus.NOT_STARTED
    id: str = field(default_factory=_new_task_id)
    created_time: datetime = field(default_factory=datetime.now)
    last_modified_time: datetime | None = None

    _ready: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        missing = [name for name in _REQUIRED_FIELDS if getattr(self, name) is None]
        if missing:
            raise InvalidArgumentError(f"missing required task fields: {', '.join(missing)}")
        if not self.id:
            raise InvalidArgumentError("task id must not be empty")

        self.priority = TaskPriority.coerce(self.priority)
        self.status = TaskStatus.coerce(self.status)
        self.due_time = _check_time("due_time", self.due_time)
        self.reminder_time = _check_time("reminder_time", self.reminder_time)
        self.created_time = _check_time("created_time", self.created_time)

        if self.last_modified_time is None:
            self.last_modified_time = self.created_time

        object.__setattr__(self, "_ready", True)

    def __setattr__(self, name: str, value: Any) -> None:
        if not getattr(self, "_ready", False):
            object.__setattr__(self, name, value)
            return

        if name in _IMMUTABLE_FIELDS or name == "_ready":
            raise AttributeError(f"TaskRecord.{name} cannot be reassigned")

        if name == "last_modified_time":
            object.__setattr__(self, name, value)
            return

        if name in _REQUIRED_FIELDS and value is None:
            raise InvalidArgumentError(f"{name} cannot be None")
        if name == "priority":
            value = TaskPriority.coerce(value)
        elif name == "status":
            value = TaskStatus.coerce(value)
        elif name in ("due_time", "reminder_time"):
            value = _check_time(name, value)

        object.__setattr__(self, name, value)
        object.__setattr__(self, "last_modified_time", datetime.now())

    @property
    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def sort_key(self) -> tuple[int, datetime]:
        """(priority rank, created_time): the queue ordering key."""
        return (self.priority.rank, self.created_time)


def _check_time(name: str, value: Any) -> datetime:
    """Task times are naive local time; aware values are converted to it."""
    if not isinstance(value, datetime):
        raise InvalidArgumentError(f"{name} must be a datetime, got {type(value).__name__}")
    if value.tzinfo is not None and value.utcoffset() is not None:
        return value.astimezone().replace(tzinfo=None)
    return value.replace(tzinfo=None)
