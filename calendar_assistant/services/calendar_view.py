"""Day filtering, derived ordering and month-grid arithmetic."""

from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.event import Event
from ..utils.datetime_utils import DateLike, as_calendar_date

WEEKDAY_HEADER: Tuple[str, ...] = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")


def sort_events(events: Iterable[Event]) -> List[Event]:
    """Return *events* ordered by date, then time (display order is never stored)."""
    return sorted(events, key=lambda event: event.sort_key())


def filter_events_for_day(events: Iterable[Event], selected: DateLike) -> List[Event]:
    """Return the events whose ``date`` is the calendar date of *selected*.

    Time of day is ignored on both sides and input order is preserved.
    """
    target = as_calendar_date(selected).isoformat()
    return [event for event in events if event.date == target]


def group_events_by_date(events: Iterable[Event]) -> Dict[str, List[Event]]:
    grouped: Dict[str, List[Event]] = defaultdict(list)
    for event in events:
        grouped[event.date].append(event)
    return dict(grouped)


def month_grid(year: int, month: int) -> List[Optional[int]]:
    """Return the day cells of a Sunday-first month view.

    Leading ``None`` cells pad the grid up to the weekday of the 1st.
    """
    first_weekday, days_in_month = calendar.monthrange(year, month)
    # calendar.monthrange is Monday-based (Monday=0)
    leading = (first_weekday + 1) % 7
    return [None] * leading + list(range(1, days_in_month + 1))


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move *delta* months forward (or back) from ``year``/``month``."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def render_month(
    year: int,
    month: int,
    events: Sequence[Event],
    *,
    selected: Optional[date] = None,
) -> str:
    """Render a plain-text month view; days with events are marked with ``*``.

    The *selected* day, if it falls in this month, is wrapped in brackets.
    """
    grouped = group_events_by_date(events)
    title = date(year, month, 1).strftime("%B %Y")

    lines = [title.center(7 * 5).rstrip(), " ".join(f"{name:>4}" for name in WEEKDAY_HEADER)]
    cells: List[str] = []
    for day in month_grid(year, month):
        if day is None:
            cells.append("    ")
            continue
        current = date(year, month, day)
        marker = "*" if current.isoformat() in grouped else " "
        if selected == current:
            cells.append(f"[{day:>2}]")
        else:
            cells.append(f"{day:>3}{marker}")

    for start in range(0, len(cells), 7):
        lines.append(" ".join(cells[start : start + 7]).rstrip())
    return "\n".join(lines)

__all__ = [
    "WEEKDAY_HEADER",
    "sort_events",
    "filter_events_for_day",
    "group_events_by_date",
    "month_grid",
    "shift_month",
    "render_month",
]
