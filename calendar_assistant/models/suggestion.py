"""Transient records produced by the optimisation and location flows."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .event import Event

# Change operation kinds understood by the applier
CHANGE_ADD = "add"
CHANGE_MOVE = "move"
CHANGE_DELETE = "delete"


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@dataclass(slots=True)
class ChangeOp:
    """One add/move/delete operation proposed by the LLM.

    Parsing is lenient: unknown kinds and missing fields are kept as-is so
    the applier can skip them with a warning.
    """

    type: str
    event_id: Optional[str] = None
    new_time: Optional[str] = None
    event_details: Optional[Dict[str, Any]] = None

    @classmethod
    def from_payload(cls, data: Mapping[str, Any]) -> "ChangeOp":
        details = data.get("eventDetails")
        return cls(
            type=str(data.get("type") or "").strip().lower(),
            event_id=_optional_text(data.get("eventId")),
            new_time=_optional_text(data.get("newTime")),
            event_details=dict(details) if isinstance(details, Mapping) else None,
        )

    def describe(self) -> str:
        if self.type == CHANGE_ADD and self.event_details:
            return f"add {self.event_details.get('title', '?')!r}"
        if self.type == CHANGE_MOVE:
            return f"move {self.event_id} to {self.new_time}"
        if self.type == CHANGE_DELETE:
            return f"delete {self.event_id}"
        return f"{self.type or '<untyped>'} (unsupported)"


@dataclass(slots=True)
class Suggestion:
    """An LLM-proposed set of changes with a human-readable rationale."""

    description: str
    changes: List[ChangeOp] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class LocationSuggestion:
    """Nudge to do an upcoming event now, based on the current location type."""

    message: str
    event: Event


@dataclass(slots=True)
class ApplyReport:
    """Outcome of applying a list of change operations, in processing order."""

    applied: List[ChangeOp] = field(default_factory=list)
    skipped: List[ChangeOp] = field(default_factory=list)
    failed: List[ChangeOp] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed

    def summary(self) -> str:
        return (
            f"{len(self.applied)} applied, {len(self.skipped)} skipped, "
            f"{len(self.failed)} failed"
        )


__all__ = [
    "CHANGE_ADD",
    "CHANGE_MOVE",
    "CHANGE_DELETE",
    "ChangeOp",
    "Suggestion",
    "LocationSuggestion",
    "ApplyReport",
]
