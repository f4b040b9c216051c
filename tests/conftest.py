# tests/conftest.py

from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timedelta
from pathlib import Path
from types import SimpleNamespace

import pytest

from taskminder.cli.bootstrap import create_initial_state
from taskminder.core.state import AppState
from taskminder.tasks.reminder_scheduler import ReminderScheduler
from taskminder.tasks.task_models import TaskPriority, TaskRecord
from taskminder.tasks.task_store import TaskStore

from .fakes import RecordingNotifier

BASE_TIME = datetime(2026, 1, 1, 9, 0, 0)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with bootstrap and task_api.

    We intentionally use a SimpleNamespace rather than reading the environment,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="taskminder-test",
        data_dir=tmp_path,
        tasks_db_path=tmp_path / "tasks.sqlite3",
        shutdown_grace_seconds=2.0,
        default_reminder_lead_minutes=15,
        console_bell=False,
        matrix_enabled=False,
    )


@pytest.fixture()
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture()
def scheduler(notifier: RecordingNotifier) -> Iterator[ReminderScheduler]:
    sched = ReminderScheduler(notifier, shutdown_grace_seconds=2.0)
    yield sched
    sched.shutdown(timeout=2.0)


@pytest.fixture()
def store(tmp_path: Path) -> TaskStore:
    return TaskStore(tmp_path / "tasks.sqlite3")


@pytest.fixture()
def state(settings: SimpleNamespace, notifier: RecordingNotifier) -> Iterator[AppState]:
    """
    AppState wired with the recording notifier.

    NOTE: We keep a real SQLite TaskStore here because its correctness is part of
    what we want to test.
    """
    app_state = create_initial_state(settings=settings, notifier=notifier)
    yield app_state
    app_state.scheduler.shutdown(timeout=2.0)


@pytest.fixture()
def make_task() -> Callable[..., TaskRecord]:
    """
    Build tasks with far-future reminders (no timer fires during a test) and
    strictly increasing created_time, unless told otherwise.
    """
    counter = {"n": 0}

    def _make(
        priority: TaskPriority | str = TaskPriority.MEDIUM,
        title: str | None = None,
        *,
        due_in: timedelta = timedelta(days=1),
        remind_in: timedelta = timedelta(hours=12),
        created_time: datetime | None = None,
    ) -> TaskRecord:
        counter["n"] += 1
        n = counter["n"]
        now = datetime.now()
        return TaskRecord(
            title=title or f"task {n}",
            description=f"description {n}",
            due_time=now + due_in,
            reminder_time=now + remind_in,
            priority=priority,
            created_time=created_time or BASE_TIME + timedelta(seconds=n),
        )

    return _make
