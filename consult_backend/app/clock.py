"""clock.py — UTC time helpers. Services take a clock callable so tests can move time."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """
    Returns `value` as an aware UTC datetime.

    SQLite hands back naive datetimes even for DateTime(timezone=True)
    columns; everything this app stores is UTC, so naive means UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
