# tests/fakes.py

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from taskminder.tasks.task_models import TaskRecord


@dataclass
class RecordingNotifier:
    """
    Notifier used by scheduler tests.

    - Captures every reminder (task + wall time of the call)
    - Lets tests block until N reminders arrived
    - Optional hook runs inside on_reminder (to simulate slow/failing/re-entrant notifiers)
    """

    calls: list[tuple[TaskRecord, float]] = field(default_factory=list)
    hook: Callable[[TaskRecord], None] | None = None
    _cond: threading.Condition = field(default_factory=threading.Condition)

    def on_reminder(self, task: TaskRecord) -> None:
        with self._cond:
            self.calls.append((task, time.monotonic()))
            self._cond.notify_all()
        if self.hook is not None:
            self.hook(task)

    @property
    def tasks(self) -> list[TaskRecord]:
        with self._cond:
            return [t for t, _ in self.calls]

    def wait_for(self, count: int = 1, timeout: float = 3.0) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: len(self.calls) >= count, timeout=timeout)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.current = start

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


def wait_until(predicate: Callable[[], bool], timeout: float = 3.0, interval: float = 0.01) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()
