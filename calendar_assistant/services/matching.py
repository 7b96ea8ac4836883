"""Location-based suggestions: find the next event matching where the user is."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from ..models.event import Event
from ..models.suggestion import LocationSuggestion

logger = logging.getLogger(__name__)


def find_next_event_for_location(
    events: Iterable[Event],
    label: str,
    now: datetime,
) -> Optional[Event]:
    """Return the soonest event tagged *label* that starts strictly after *now*.

    Tags are compared case-insensitively. Same-day events compare the time of
    day against *now*, so an event earlier today no longer matches.
    """
    wanted = (label or "").strip().lower()
    if not wanted:
        return None

    upcoming: List[Tuple[datetime, Event]] = []
    for event in events:
        if event.location_type.strip().lower() != wanted:
            continue
        try:
            starts_at = event.starts_at()
        except ValueError:
            logger.debug("Skipping event %s with unparseable date/time", event.id)
            continue
        if starts_at > now:
            upcoming.append((starts_at, event))

    if not upcoming:
        return None
    upcoming.sort(key=lambda pair: pair[0])
    return upcoming[0][1]


def build_location_suggestion(
    events: Iterable[Event],
    label: str,
    now: datetime,
) -> Optional[LocationSuggestion]:
    """Wrap the next matching event into a user-facing nudge, if there is one."""
    event = find_next_event_for_location(events, label, now)
    if event is None:
        return None

    weekday = event.calendar_date().strftime("%A")
    message = (
        f"Heads up! It looks like you're at a \"{label.strip()}\" type of place. "
        f"You have \"{event.title}\" scheduled for {weekday}. "
        "Would you like to consider doing it now?"
    )
    return LocationSuggestion(message=message, event=event)

__all__ = ["find_next_event_for_location", "build_location_suggestion"]
