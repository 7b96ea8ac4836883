"""Domain models used across the project."""

from .event import Event, EVENT_FIELDS, TIME_PATTERN, is_valid_time, normalise_iso_date, normalise_time  # noqa: F401
from .suggestion import (  # noqa: F401
    ApplyReport,
    ChangeOp,
    LocationSuggestion,
    Suggestion,
)

__all__ = [
    "Event",
    "EVENT_FIELDS",
    "TIME_PATTERN",
    "is_valid_time",
    "normalise_iso_date",
    "normalise_time",
    "ApplyReport",
    "ChangeOp",
    "LocationSuggestion",
    "Suggestion",
]
