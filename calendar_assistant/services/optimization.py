"""Schedule optimisation: ask the LLM for add/move/delete suggestions."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from ..errors import ResponseShapeError
from ..models.event import Event, TIME_PATTERN
from ..models.suggestion import ChangeOp, Suggestion
from ..utils.datetime_utils import local_today
from .calendar_view import sort_events
from .llm import generate_json

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Response schema
# ---------------------------------------------------------------------------
_EVENT_DETAILS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string"},
        "date": {"type": "string"},
        "time": {"type": "string", "pattern": TIME_PATTERN},
        "description": {"type": "string"},
        "locationType": {"type": "string"},
    },
}

SUGGESTIONS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "suggestions": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "description": {"type": "string"},
                    "changes": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {
                                "type": {"type": "string", "enum": ["add", "move", "delete"]},
                                "eventId": {"type": "string"},
                                "newTime": {"type": "string"},
                                "eventDetails": _EVENT_DETAILS_SCHEMA,
                            },
                            "required": ["type"],
                        },
                    },
                },
                "required": ["description", "changes"],
            },
        }
    },
    "required": ["suggestions"],
}


def _format_event_line(event: Event) -> str:
    line = f"- id={event.id} | {event.date} {event.time} | {event.title}"
    if event.location_type:
        line += f" | location: {event.location_type}"
    if event.description:
        line += f" | notes: {event.description}"
    return line


def build_optimization_prompt(events: Sequence[Event], today: date) -> str:
    """Return the optimisation prompt listing *events* with their ids."""
    listing = "\n".join(_format_event_line(event) for event in sort_events(events))
    return (
        "You are an intelligent calendar assistant that helps the user optimise their schedule.\n"
        f"Today's date is {today.isoformat()}. These are the user's events:\n"
        f"{listing}\n\n"
        "Suggest a few concrete improvements: resolve overlaps, group errands that share a"
        " location type, leave breaks between back-to-back events and drop obvious duplicates.\n"
        "Return an object with a 'suggestions' array. Each suggestion has a short 'description'"
        " and a 'changes' array applied in order. Each change has a 'type':\n"
        "  • 'add' with 'eventDetails' {title, date (YYYY-MM-DD), time (HH:MM), description,"
        " locationType};\n"
        "  • 'move' with the existing 'eventId' and a 'newTime' (HH:MM, 24-hour) on the same day;\n"
        "  • 'delete' with the existing 'eventId'.\n"
        "Only reference ids from the list above. Return an empty 'suggestions' array if the"
        " schedule needs no changes."
    )


def parse_suggestions(data: Dict[str, Any]) -> List[Suggestion]:
    """Build :class:`Suggestion` objects from the LLM response object."""
    raw = data.get("suggestions")
    if not isinstance(raw, list):
        logger.error("Malformed optimisation response: %s", data)
        raise ResponseShapeError("LLM response did not contain a 'suggestions' list")

    suggestions: List[Suggestion] = []
    for entry in raw:
        if not isinstance(entry, dict):
            logger.warning("Dropping malformed suggestion entry: %r", entry)
            continue
        changes_raw = entry.get("changes") or []
        if not isinstance(changes_raw, list):
            logger.warning("Dropping suggestion with non-list changes: %r", entry)
            continue
        changes = [ChangeOp.from_payload(change) for change in changes_raw if isinstance(change, dict)]
        suggestions.append(
            Suggestion(description=str(entry.get("description") or "").strip(), changes=changes)
        )
    return suggestions


def request_suggestions(events: Sequence[Event], *, today: Optional[date] = None) -> List[Suggestion]:
    """Ask the LLM how to improve the schedule made of *events*."""
    if not events:
        logger.info("No events to optimise – skipping LLM call")
        return []

    today = today or local_today()
    logger.info("Requesting schedule suggestions for %d events", len(events))

    data = generate_json(
        build_optimization_prompt(events, today), SUGGESTIONS_SCHEMA, schema_name="suggestions"
    )
    suggestions = parse_suggestions(data)

    logger.info("Received %d suggestions", len(suggestions))
    return suggestions

__all__ = [
    "SUGGESTIONS_SCHEMA",
    "build_optimization_prompt",
    "parse_suggestions",
    "request_suggestions",
]
