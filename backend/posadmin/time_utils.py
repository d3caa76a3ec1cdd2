from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Optional


def server_now() -> datetime:
    """Server local clock, naive, whole seconds. Report windows use the same clock."""
    return datetime.now().replace(microsecond=0)


def parse_strict_date(value: Optional[str]) -> Optional[date]:
    """
    Parse a calendar date in exactly YYYY-MM-DD form.

    - None / "" -> None
    - anything else that is not a zero-padded Y-m-d date -> ValueError
    """
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError("date must be a string")
    s = value
    if not s:
        return None

    # strptime alone accepts unpadded fields like "2024-1-5" and non-ASCII digits
    if not s.isascii() or len(s) != 10 or s[4] != "-" or s[7] != "-":
        raise ValueError(f"{value!r} is not in YYYY-MM-DD format")

    return datetime.strptime(s, "%Y-%m-%d").date()


def day_window(start: date, end: date) -> tuple[datetime, datetime]:
    """
    Inclusive full-day window: start 00:00:00 through end 23:59:59.

    Timestamps are stored at whole-second resolution, so the last second
    of the end day is the closing bound.
    """
    start_dt = datetime.combine(start, time.min)
    end_dt = datetime.combine(end, time.min) + timedelta(days=1) - timedelta(seconds=1)
    return start_dt, end_dt


def to_iso(dt: Optional[datetime]) -> Optional[str]:
    """Serializes a naive server-clock datetime as YYYY-MM-DDTHH:MM:SS."""
    if dt is None:
        return None
    return dt.replace(microsecond=0).isoformat()
