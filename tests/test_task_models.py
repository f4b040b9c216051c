# tests/test_task_models.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from taskminder.errors import InvalidArgumentError
from taskminder.tasks.task_models import TaskPriority, TaskRecord, TaskStatus


def _record(**overrides) -> TaskRecord:
    now = datetime.now()
    fields = dict(
        title="Write report",
        description="Q3 numbers",
        due_time=now + timedelta(hours=2),
        reminder_time=now + timedelta(hours=1),
        priority=TaskPriority.HIGH,
    )
    fields.update(overrides)
    return TaskRecord(**fields)


def test_new_record_defaults() -> None:
    task = _record()
    assert task.status == TaskStatus.NOT_STARTED
    assert task.id
    assert task.last_modified_time == task.created_time
    assert not task.is_completed


@pytest.mark.parametrize("missing", ["title", "description", "due_time", "reminder_time", "priority"])
def test_required_fields_rejected_when_none(missing: str) -> None:
    with pytest.raises(InvalidArgumentError):
        _record(**{missing: None})


def test_required_field_missing_entirely() -> None:
    now = datetime.now()
    with pytest.raises(InvalidArgumentError):
        TaskRecord(title="t", description="d", due_time=now, priority="LOW")


def test_ids_are_unique() -> None:
    assert _record().id != _record().id


def test_setters_refresh_last_modified_time() -> None:
    created = datetime(2020, 1, 1)
    task = _record(created_time=created)
    assert task.last_modified_time == created

    task.title = "Renamed"
    assert task.last_modified_time > created
    assert task.created_time == created


def test_identity_fields_are_immutable() -> None:
    task = _record()
    with pytest.raises(AttributeError):
        task.id = "other"
    with pytest.raises(AttributeError):
        task.created_time = datetime.now()


def test_priority_is_coerced_and_validated() -> None:
    task = _record(priority="low")
    assert task.priority is TaskPriority.LOW

    task.priority = "High"
    assert task.priority is TaskPriority.HIGH

    with pytest.raises(InvalidArgumentError):
        task.priority = "urgent"
    with pytest.raises(InvalidArgumentError):
        task.reminder_time = None


def test_priority_rank_orders_high_first() -> None:
    assert TaskPriority.HIGH.rank < TaskPriority.MEDIUM.rank < TaskPriority.LOW.rank


def test_reminder_may_follow_due_time() -> None:
    now = datetime.now()
    task = _record(due_time=now, reminder_time=now + timedelta(days=1))
    assert task.reminder_time > task.due_time


def test_records_compare_by_identity() -> None:
    a = _record(id="same", created_time=datetime(2020, 1, 1))
    b = _record(id="same", created_time=datetime(2020, 1, 1))
    assert a != b
    assert a == a
    assert len({a, b}) == 2


def test_status_from_db_falls_back_to_not_started() -> None:
    assert TaskStatus.from_db("OVERDUE") is TaskStatus.OVERDUE
    assert TaskStatus.from_db(None) is TaskStatus.NOT_STARTED
    assert TaskStatus.from_db("garbage") is TaskStatus.NOT_STARTED


def test_aware_times_become_local_naive() -> None:
    aware = datetime(2030, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
    task = _record(due_time=aware, reminder_time=aware - timedelta(hours=1))

    assert task.due_time.tzinfo is None
    assert task.due_time == aware.astimezone().replace(tzinfo=None)
    assert task.reminder_time == task.due_time - timedelta(hours=1)

    task.reminder_time = datetime.now(timezone.utc)
    assert task.reminder_time.tzinfo is None
    # Comparable with naive local "now" once normalised.
    assert abs((task.reminder_time - datetime.now()).total_seconds()) < 5
