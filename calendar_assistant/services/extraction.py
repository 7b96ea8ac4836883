"""Natural-language event extraction via the LLM."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Any, Dict, Optional

from ..errors import ResponseShapeError, ValidationError
from ..models.event import Event, TIME_PATTERN, is_valid_time
from ..utils.datetime_utils import local_today, tomorrow
from .llm import generate_json

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------
EVENT_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "date": {"type": "string"},
        "time": {"type": "string", "pattern": TIME_PATTERN},
        "description": {"type": "string"},
        "locationType": {"type": "string"},
    },
    "required": ["title", "date", "time", "locationType"],
}

_MONTH_DAY = re.compile(r"^\d{2}-\d{2}$")
_SHORT_YEAR = re.compile(r"^\d{2}-\d{2}-\d{2}$")


def build_extraction_prompt(text: str, today: date) -> str:
    """Return the extraction prompt for the user's *text*."""
    current = today.isoformat()
    next_day = tomorrow(today).isoformat()
    return (
        "You are an intelligent calendar assistant. Your task is to extract event details"
        " from the user's natural language input.\n"
        "Identify the 'title', 'date', 'time', 'description' and 'locationType'.\n"
        "Requirements:\n"
        "1) 'date' is in 'YYYY-MM-DD' format. If a year is not specified, assume the current year."
        " Relative dates ('today', 'tomorrow', 'next Monday') are resolved from today's date.\n"
        "2) 'time' is in 'HH:MM' (24-hour) format. If no time is specified, use '09:00'.\n"
        "3) 'description' captures any relevant detail not covered by title, date or time.\n"
        "4) 'locationType' is a single lower-case word naming the kind of place the event implies"
        " (e.g. supermarket, doctor, office, gym, home, bank, restaurant), or \"\" if none is implied.\n"
        "5) For recurring events, extract the first occurrence and note the recurrence in the"
        " description.\n"
        f"Today's date is {current}. Tomorrow's date is {next_day}.\n\n"
        'Example input: "Team sync tomorrow morning"\n'
        f'Example output: {{"title": "Team Sync", "date": "{next_day}", "time": "09:00",'
        ' "description": "", "locationType": "office"}\n\n'
        'Example input: "Grocery shopping tomorrow evening, list: milk, eggs, bread"\n'
        f'Example output: {{"title": "Grocery Shopping", "date": "{next_day}", "time": "18:00",'
        ' "description": "List: milk, eggs, bread", "locationType": "supermarket"}\n\n'
        f'Now, parse the following event: "{text.strip()}"'
    )


def normalise_date(value: str, today: date) -> str:
    """Complete partial dates the model sometimes returns and validate the result.

    ``MM-DD`` gets the current year and ``YY-MM-DD`` becomes ``20YY-MM-DD``.
    """
    candidate = value.strip()
    if _MONTH_DAY.match(candidate):
        candidate = f"{today.year}-{candidate}"
    elif _SHORT_YEAR.match(candidate):
        candidate = f"20{candidate}"
    # Tolerate a full timestamp by keeping the calendar date only
    candidate = candidate.split("T", 1)[0]

    try:
        return date.fromisoformat(candidate).isoformat()
    except ValueError as exc:
        raise ResponseShapeError(f"LLM returned an invalid date {value!r}") from exc


def parse_extracted_event(data: Dict[str, Any], today: date) -> Event:
    """Turn the LLM response object into an unsaved :class:`Event`."""
    missing = [name for name in ("title", "date", "time") if not str(data.get(name) or "").strip()]
    if missing:
        logger.error("Incomplete LLM data: %s", data)
        raise ResponseShapeError(
            "LLM returned incomplete or invalid event data. Please try rephrasing."
        )
    if not is_valid_time(str(data["time"])):
        raise ResponseShapeError(f"LLM returned an invalid time {data['time']!r}")

    payload = dict(data)
    payload["date"] = normalise_date(str(data["date"]), today)
    return Event.from_payload(payload)


def extract_event(text: str, *, today: Optional[date] = None) -> Event:
    """Ask the LLM to structure *text* and return the resulting event."""
    if not text or not text.strip():
        raise ValidationError("Please enter an event description.")

    today = today or local_today()
    logger.info("Extracting event from input: %s", text.strip())

    data = generate_json(build_extraction_prompt(text, today), EVENT_SCHEMA, schema_name="event")
    event = parse_extracted_event(data, today)

    logger.info("Extracted event %r on %s at %s", event.title, event.date, event.time)
    return event

__all__ = [
    "EVENT_SCHEMA",
    "build_extraction_prompt",
    "normalise_date",
    "parse_extracted_event",
    "extract_event",
]
