"""
Clock helpers.

Every "now" used for timestamps, overdue and stuck flags comes from a clock
callable so that tests can pin time.
"""
from datetime import datetime, timedelta, timezone
from typing import Callable


Clock = Callable[[], datetime]

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes (SQLite drops tzinfo) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def whole_days_between(start: datetime, end: datetime) -> int:
    """Number of whole days from start to end (floor), negative if end < start."""
    delta = as_utc(end) - as_utc(start)
    return delta.days


def epoch_ms(value: datetime) -> int:
    return (as_utc(value) - EPOCH) // timedelta(milliseconds=1)
