"""Definition of the `Event` dataclass used throughout the project."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Tuple

from ..errors import ValidationError

# 24h clock, single-digit hours accepted on input
TIME_PATTERN: str = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"
_TIME_RE = re.compile(TIME_PATTERN)

# Document / wire field names, in display order
EVENT_FIELDS: Tuple[str, ...] = ("title", "date", "time", "description", "locationType")
REQUIRED_FIELDS: Tuple[str, ...] = ("title", "date", "time")


def is_valid_time(value: Any) -> bool:
    """Return ``True`` if *value* is an ``H:MM``/``HH:MM`` 24-hour string."""
    return isinstance(value, str) and _TIME_RE.match(value.strip()) is not None


def normalise_time(value: str) -> str:
    """Zero-pad a valid time string (``9:30`` -> ``09:30``)."""
    if not is_valid_time(value):
        raise ValidationError(f"Invalid time {value!r}; expected HH:MM (24-hour)")
    hour, minute = value.strip().split(":")
    return f"{int(hour):02d}:{minute}"


def normalise_iso_date(value: str) -> str:
    """Return *value* as a canonical ``YYYY-MM-DD`` string."""
    try:
        return date.fromisoformat(value.strip()).isoformat()
    except (AttributeError, ValueError) as exc:
        raise ValidationError(f"Invalid date {value!r}; expected YYYY-MM-DD") from exc


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


@dataclass(frozen=True, slots=True)
class Event:
    """A single calendar entry.

    ``id`` is assigned by the store (or generated locally when running
    without one); it is ``None`` for events that have not been saved yet.
    """

    title: str
    date: str
    time: str
    description: str = ""
    location_type: str = ""
    id: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any], *, event_id: Optional[str] = None) -> "Event":
        """Build an event from an LLM response, form or suggestion payload."""
        missing = [name for name in REQUIRED_FIELDS if not _text(data.get(name))]
        if missing:
            raise ValidationError(f"Missing required event field(s): {', '.join(missing)}")
        return cls(
            title=_text(data["title"]),
            date=normalise_iso_date(_text(data["date"])),
            time=normalise_time(_text(data["time"])),
            description=_text(data.get("description")),
            location_type=_text(data.get("locationType")),
            id=event_id,
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Event":
        """Build an event from a stored MongoDB document."""
        return cls(
            title=_text(doc.get("title")),
            date=_text(doc.get("date")),
            time=_text(doc.get("time")),
            description=_text(doc.get("description")),
            location_type=_text(doc.get("locationType")),
            id=str(doc["_id"]) if doc.get("_id") is not None else None,
        )

    def to_document(self) -> Dict[str, str]:
        """Return the persistable fields (the id is owned by the store)."""
        return {
            "title": self.title,
            "date": self.date,
            "time": self.time,
            "description": self.description,
            "locationType": self.location_type,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, **self.to_document()}

    def calendar_date(self) -> date:
        return date.fromisoformat(self.date)

    def starts_at(self) -> datetime:
        """Return the naive local datetime of this event.

        Raises :class:`ValueError` if ``date`` or ``time`` is malformed.
        """
        if not is_valid_time(self.time):
            raise ValueError(f"Invalid time {self.time!r}")
        hour, minute = (int(part) for part in self.time.split(":"))
        return datetime.combine(self.calendar_date(), datetime.min.time()).replace(
            hour=hour, minute=minute
        )

    def sort_key(self) -> Tuple[str, str]:
        # ISO dates and zero-padded times sort lexically
        return (self.date, self.time.zfill(5))


__all__ = [
    "Event",
    "EVENT_FIELDS",
    "REQUIRED_FIELDS",
    "TIME_PATTERN",
    "is_valid_time",
    "normalise_iso_date",
    "normalise_time",
]
