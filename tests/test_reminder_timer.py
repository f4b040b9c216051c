# tests/test_reminder_timer.py

from __future__ import annotations

import threading
import time

import pytest

from taskminder.errors import RejectedSchedulingError
from taskminder.tasks.reminder_timer import HandleState, ReminderTimer

from .fakes import wait_until


@pytest.fixture()
def timer():
    t = ReminderTimer(name="test-reminders")
    yield t
    t.shutdown(timeout=2.0)


def test_callbacks_run_in_deadline_order(timer: ReminderTimer) -> None:
    fired: list[str] = []
    timer.schedule(0.3, lambda h: fired.append("late"), key="late")
    timer.schedule(0.1, lambda h: fired.append("early"), key="early")

    assert wait_until(lambda: len(fired) == 2)
    assert fired == ["early", "late"]


def test_callback_receives_its_handle(timer: ReminderTimer) -> None:
    seen = []
    handle = timer.schedule(0.05, seen.append, key="k")
    assert wait_until(lambda: seen)
    assert seen[0] is handle
    assert wait_until(lambda: handle.state == HandleState.DONE)


def test_cancelled_handle_never_fires(timer: ReminderTimer) -> None:
    fired = []
    handle = timer.schedule(0.1, fired.append, key="k")
    assert handle.cancel() is True
    assert handle.cancel() is False
    time.sleep(0.3)
    assert fired == []
    assert timer.pending_count() == 0


def test_cancel_after_fire_is_noop(timer: ReminderTimer) -> None:
    handle = timer.schedule(0.0, lambda h: None, key="k")
    assert wait_until(lambda: handle.state == HandleState.DONE)
    assert handle.cancel() is False


def test_failing_callback_does_not_stop_the_thread(timer: ReminderTimer) -> None:
    fired = []

    def boom(h):
        raise RuntimeError("boom")

    timer.schedule(0.05, boom, key="bad")
    timer.schedule(0.1, fired.append, key="good")
    assert wait_until(lambda: fired)


def test_shutdown_cancels_pending_and_rejects_new() -> None:
    timer = ReminderTimer()
    fired = []
    handle = timer.schedule(5.0, fired.append, key="k")

    assert timer.shutdown(timeout=1.0) is True
    assert handle.cancelled
    assert timer.closed
    with pytest.raises(RejectedSchedulingError):
        timer.schedule(0.1, fired.append)
    # Idempotent.
    assert timer.shutdown(timeout=1.0) is True


def test_shutdown_abandons_a_stuck_callback() -> None:
    timer = ReminderTimer()
    started = threading.Event()
    release = threading.Event()

    def slow(h):
        started.set()
        release.wait(5.0)

    timer.schedule(0.0, slow, key="slow")
    assert started.wait(2.0)

    t0 = time.monotonic()
    assert timer.shutdown(timeout=0.2) is False
    assert time.monotonic() - t0 < 2.0
    release.set()


def test_shutdown_from_inside_a_callback_does_not_deadlock() -> None:
    timer = ReminderTimer()
    results = []
    timer.schedule(0.0, lambda h: results.append(timer.shutdown(timeout=1.0)), key="k")
    assert wait_until(lambda: results)
    assert results == [True]
    assert timer.closed


def test_handle_state_values_are_strings() -> None:
    assert HandleState.PENDING == "pending"
    assert str(HandleState.CANCELLED) == "cancelled"
