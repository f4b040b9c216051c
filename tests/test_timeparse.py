# tests/test_timeparse.py

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from taskminder.cli.timeparse import parse_when
from taskminder.errors import InvalidArgumentError

NOW = datetime(2026, 10, 19, 8, 45, 30)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("+30m", NOW + timedelta(minutes=30)),
        ("+2h", NOW + timedelta(hours=2)),
        ("+1d", NOW + timedelta(days=1)),
        ("14:30", datetime(2026, 10, 19, 14, 30)),
        ("7:05", datetime(2026, 10, 19, 7, 5)),
        ("2026-10-20T09:00", datetime(2026, 10, 20, 9, 0)),
        ("2026-10-20", datetime(2026, 10, 20)),
    ],
)
def test_parse_when(raw: str, expected: datetime) -> None:
    assert parse_when(raw, now=NOW) == expected


@pytest.mark.parametrize("raw", ["", "   ", "soon", "+5w", "25:00", "+m"])
def test_parse_when_rejects(raw: str) -> None:
    with pytest.raises(InvalidArgumentError):
        parse_when(raw, now=NOW)
