from __future__ import annotations

from datetime import date, datetime, time
from typing import Union


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; a trailing 'Z' is accepted."""
    v = value.strip()
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    return datetime.fromisoformat(v)


def to_local_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive local time; naive values pass through.

    Stored timestamps (and MySQL DATETIME columns) are naive local time.
    """
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def parse_hhmm(value: str) -> time:
    return datetime.strptime(value.strip(), "%H:%M").time()


def to_day(value: Union[date, datetime]) -> date:
    """Normalize a date or datetime to the calendar day."""
    if isinstance(value, datetime):
        return value.date()
    return value


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()
