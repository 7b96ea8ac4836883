"""Apply LLM-suggested change operations to the event store, one at a time."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Protocol

from ..errors import PersistenceError, ValidationError
from ..models.event import Event, is_valid_time, normalise_time
from ..models.suggestion import CHANGE_ADD, CHANGE_DELETE, CHANGE_MOVE, ApplyReport, ChangeOp

logger = logging.getLogger(__name__)


class EventWriter(Protocol):
    """The slice of :class:`~calendar_assistant.services.storage.EventStore` the applier needs."""

    def create(self, event: Event) -> str: ...

    def update(self, event_id: str, fields: Dict[str, Any]) -> None: ...

    def delete(self, event_id: str) -> None: ...


def _apply_one(change: ChangeOp, store: EventWriter) -> bool:
    """Apply *change*; return ``False`` when it is malformed and was skipped."""
    if change.type == CHANGE_ADD:
        if not change.event_details:
            logger.warning("Skipping 'add' without eventDetails")
            return False
        try:
            event = Event.from_payload(change.event_details)
        except ValidationError as exc:
            logger.warning("Skipping 'add' with invalid eventDetails: %s", exc)
            return False
        new_id = store.create(event)
        logger.info("Added event %r as %s", event.title, new_id)
        return True

    if change.type == CHANGE_MOVE:
        if not change.event_id or not change.new_time:
            logger.warning("Skipping 'move' without eventId/newTime: %s", change)
            return False
        if not is_valid_time(change.new_time):
            logger.warning("Skipping 'move' of %s with invalid newTime %r", change.event_id, change.new_time)
            return False
        store.update(change.event_id, {"time": normalise_time(change.new_time)})
        logger.info("Moved event %s to %s", change.event_id, change.new_time)
        return True

    if change.type == CHANGE_DELETE:
        if not change.event_id:
            logger.warning("Skipping 'delete' without eventId")
            return False
        store.delete(change.event_id)
        logger.info("Deleted event %s", change.event_id)
        return True

    logger.warning("Unknown or malformed change operation skipped: %s", change)
    return False


def apply_changes(changes: Iterable[ChangeOp], store: EventWriter) -> ApplyReport:
    """Apply *changes* sequentially against *store*.

    Malformed or unknown operations are skipped, and a store failure on one
    operation does not stop the rest. Nothing is rolled back.
    """
    report = ApplyReport()
    for change in changes:
        try:
            applied = _apply_one(change, store)
        except PersistenceError as exc:
            logger.error("Failed to apply %s: %s", change.describe(), exc)
            report.failed.append(change)
            continue
        (report.applied if applied else report.skipped).append(change)

    logger.info("Suggestion applied: %s", report.summary())
    return report

__all__ = ["EventWriter", "apply_changes"]
