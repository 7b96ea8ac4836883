"""Utility functions for working with dates and times."""

from __future__ import annotations

import time
from datetime import date, datetime, timedelta
from typing import Union

__all__ = [
    "as_calendar_date",
    "local_now",
    "local_today",
    "tomorrow",
    "local_event_id",
]

DateLike = Union[date, datetime]


def local_now() -> datetime:
    """Return the current naive local datetime.

    Event dates and times carry no zone, so every comparison happens in the
    local calendar of the machine running the assistant.
    """
    return datetime.now()


def local_today() -> date:
    return local_now().date()


def tomorrow(today: date) -> date:
    return today + timedelta(days=1)


def as_calendar_date(value: DateLike) -> date:
    """Drop the time of day from *value* (``datetime`` is a ``date`` subclass)."""
    if isinstance(value, datetime):
        return value.date()
    return value


def local_event_id() -> str:
    """Millisecond timestamp used as the id of events kept only in memory."""
    return str(int(time.time() * 1000))
