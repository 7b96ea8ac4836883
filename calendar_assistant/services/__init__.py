"""Service layer modules grouping business logic by concern.

This module provides convenience re-exports so that callers can simply do for
example `from calendar_assistant.services import extract_event` without having
to know which underlying module provides the symbol.
"""

from .retry import call_with_retry, post_json  # noqa: F401
from .llm import generate_json  # noqa: F401
from .extraction import extract_event  # noqa: F401
from .optimization import request_suggestions  # noqa: F401
from .matching import build_location_suggestion, find_next_event_for_location  # noqa: F401
from .calendar_view import (  # noqa: F401
    filter_events_for_day,
    group_events_by_date,
    month_grid,
    render_month,
    shift_month,
    sort_events,
)
from .applier import apply_changes  # noqa: F401
from .storage import EventStore, get_event_store  # noqa: F401
from .identity import ensure_user_id  # noqa: F401

__all__ = [
    "call_with_retry",
    "post_json",
    "generate_json",
    "extract_event",
    "request_suggestions",
    "build_location_suggestion",
    "find_next_event_for_location",
    "filter_events_for_day",
    "group_events_by_date",
    "month_grid",
    "render_month",
    "shift_month",
    "sort_events",
    "apply_changes",
    "EventStore",
    "get_event_store",
    "ensure_user_id",
]
