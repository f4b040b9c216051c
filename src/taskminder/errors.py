# src/taskminder/errors.py

"""Error types raised by the scheduling core and its collaborators."""

from __future__ import annotations


class TaskminderError(Exception):
    """Base class for all taskminder errors."""


class InvalidArgumentError(TaskminderError, ValueError):
    """A required task field is missing or has an unusable value."""


class EmptyQueueError(TaskminderError, LookupError):
    """The task queue has no entries."""


class NotFoundError(TaskminderError, LookupError):
    """The target task is not present (in the queue or in the store)."""


class RejectedSchedulingError(TaskminderError, RuntimeError):
    """Scheduling was attempted after the scheduler was shut down."""
