# src/taskminder/tasks/reminder_timer.py

"""
One-shot reminder timers.

A single daemon thread waits on a heap of deadlines (time.monotonic) and runs due
callbacks one at a time. Each schedule() returns a ReminderHandle that can be
cancelled until its callback starts.

Shutdown model:
- shutdown() rejects new timers, cancels pending ones, wakes the thread and joins
  it for up to `timeout` seconds;
- a callback still running after that is abandoned (the thread is a daemon and
  dies with the process).
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable
from enum import StrEnum

from ..errors import RejectedSchedulingError

logger = logging.getLogger(__name__)


class HandleState(StrEnum):
    PENDING = "pending"
    RUNNING = "running"
    DONE = "done"
    CANCELLED = "cancelled"


class ReminderHandle:
    """Cancellable token for one armed timer."""

    __slots__ = ("key", "deadline", "_callback", "_state", "_lock")

    def __init__(self, key: str, deadline: float, callback: Callable[[ReminderHandle], None]) -> None:
        self.key = key
        self.deadline = deadline
        self._callback = callback
        self._state = HandleState.PENDING
        self._lock = threading.Lock()

    def __repr__(self) -> str:
        return f"ReminderHandle(key={self.key!r}, state={self._state.value})"

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def cancelled(self) -> bool:
        return self._state == HandleState.CANCELLED

    def cancel(self) -> bool:
        """
        Prevent the callback from running.

        Returns True only when the callback had not started yet. Cancelling a running
        or finished timer is a no-op.
        """
        with self._lock:
            if self._state != HandleState.PENDING:
                return False
            self._state = HandleState.CANCELLED
            return True

    def _claim(self) -> bool:
        with self._lock:
            if self._state != HandleState.PENDING:
                return False
            self._state = HandleState.RUNNING
            return True

    def _run(self) -> None:
        try:
            self._callback(self)
        except Exception:
            logger.exception("Reminder callback failed key=%s", self.key)
        finally:
            with self._lock:
                self._state = HandleState.DONE


class ReminderTimer:
    """Single-threaded timer dispatcher shared by all reminders of one scheduler."""

    def __init__(self, *, name: str = "taskminder-reminders") -> None:
        self._cond = threading.Condition()
        self._heap: list[tuple[float, int, ReminderHandle]] = []
        self._seq = itertools.count()
        self._closed = False
        self._thread = threading.Thread(target=self._loop, name=name, daemon=True)
        self._thread.start()

    @property
    def closed(self) -> bool:
        return self._closed

    def schedule(
        self,
        delay_seconds: float,
        callback: Callable[[ReminderHandle], None],
        *,
        key: str = "",
    ) -> ReminderHandle:
        """Run callback(handle) once, about delay_seconds from now."""
        deadline = time.monotonic() + max(0.0, float(delay_seconds))
        handle = ReminderHandle(key, deadline, callback)

        with self._cond:
            if self._closed:
                raise RejectedSchedulingError("reminder timer is shut down")
            heapq.heappush(self._heap, (deadline, next(self._seq), handle))
            self._cond.notify()

        logger.debug("Timer armed key=%s delay=%.3fs", key, delay_seconds)
        return handle

    def pending_count(self) -> int:
        with self._cond:
            return sum(1 for _, _, h in self._heap if h.state == HandleState.PENDING)

    def shutdown(self, timeout: float | None = 60.0) -> bool:
        """
        Stop the dispatcher.

        Returns True when the thread finished within `timeout`, False if a callback
        was still running and had to be abandoned.
        """
        with self._cond:
            if not self._closed:
                self._closed = True
                cancelled = 0
                for _, _, handle in self._heap:
                    if handle.cancel():
                        cancelled += 1
                self._heap.clear()
                self._cond.notify_all()
                logger.debug("Timer shutdown: %d pending timers cancelled", cancelled)

        if threading.current_thread() is self._thread:
            # Called from inside a callback: the loop exits once it returns.
            return True

        self._thread.join(timeout=timeout)
        if self._thread.is_alive():
            logger.warning(
                "Reminder thread still busy after %.1fs; abandoning in-flight callback.",
                timeout if timeout is not None else -1.0,
            )
            return False
        return True

    # ---- dispatcher thread ----

    def _next_due(self) -> ReminderHandle | None:
        """Block until a timer is due; None means shutdown."""
        with self._cond:
            while True:
                if self._closed:
                    return None
                if not self._heap:
                    self._cond.wait()
                    continue

                deadline, _, handle = self._heap[0]
                if handle.cancelled:
                    heapq.heappop(self._heap)
                    continue

                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    heapq.heappop(self._heap)
                    return handle
                self._cond.wait(remaining)

    def _loop(self) -> None:
        logger.debug("Reminder thread started.")
        while True:
            handle = self._next_due()
            if handle is None:
                break
            if not handle._claim():
                continue
            handle._run()
        logger.debug("Reminder thread stopped.")
