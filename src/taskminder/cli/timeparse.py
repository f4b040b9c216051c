# src/taskminder/cli/timeparse.py

from __future__ import annotations

import re
from datetime import datetime, timedelta

from ..errors import InvalidArgumentError

_RELATIVE = re.compile(r"^\+(\d+)([mhd])$")
_UNITS = {"m": "minutes", "h": "hours", "d": "days"}


def parse_when(raw: str, *, now: datetime | None = None) -> datetime:
    """
    Parse a user-typed time.

    Accepted forms:
      +30m / +2h / +1d        relative to now
      14:30                   today at that time
      2026-10-20 09:00        ISO date + time (a "T" separator works too)
      2026-10-20              midnight of that day
    """
    now = now or datetime.now()
    text = (raw or "").strip()
    if not text:
        raise InvalidArgumentError("time is required")

    m = _RELATIVE.match(text)
    if m:
        amount, unit = int(m.group(1)), m.group(2)
        return now + timedelta(**{_UNITS[unit]: amount})

    if re.fullmatch(r"\d{1,2}:\d{2}", text):
        hour, minute = (int(p) for p in text.split(":"))
        try:
            return now.replace(hour=hour, minute=minute, second=0, microsecond=0)
        except ValueError as e:
            raise InvalidArgumentError(f"bad time {text!r}: {e}") from None

    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise InvalidArgumentError(
            f"cannot parse time {text!r} (use +30m, 14:30 or 2026-10-20T09:00)"
        ) from None
