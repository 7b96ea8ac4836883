"""Calendar assistant session: the flows a front end drives.

A session owns the current event list, a single replaceable error message
(``status``), an informational ``notice`` and a ``busy`` flag that stands in
for a disabled trigger control. Every user operation turns a failure into a
status message and never raises, so the front end stays usable after any
error.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable, List, Mapping, Optional, TypeVar

from ..clients.mongodb_client import get_database
from ..config import EVENTS_COLLECTION, USERS_COLLECTION, missing_storage_settings
from ..errors import (
    CalendarAssistantError,
    ConfigurationError,
    PersistenceError,
    ResponseShapeError,
    TransportError,
    ValidationError,
)
from ..models.event import Event
from ..models.suggestion import ApplyReport, LocationSuggestion, Suggestion
from ..services.applier import apply_changes
from ..services.calendar_view import filter_events_for_day, sort_events
from ..services.extraction import extract_event
from ..services.identity import ensure_user_id
from ..services.matching import build_location_suggestion
from ..services.optimization import request_suggestions
from ..services.storage import EventStore, EventSubscription
from ..utils.datetime_utils import DateLike, local_event_id, local_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CalendarAssistant:
    """One user's calendar session."""

    def __init__(
        self,
        store: Optional[EventStore] = None,
        *,
        clock: Callable[[], datetime] = local_now,
    ) -> None:
        self.store = store
        self.user_id: Optional[str] = store.user_id if store is not None else None
        self.events: List[Event] = []
        self.status: Optional[str] = None
        self.notice: Optional[str] = None
        self.busy: bool = False
        self.parsed_event: Optional[Event] = None
        self.suggestions: List[Suggestion] = []
        self.proactive_suggestion: Optional[LocationSuggestion] = None
        self._clock = clock
        self._subscription: Optional[EventSubscription] = None

    # ------------------------------------------------------------------
    # Connection & live state
    # ------------------------------------------------------------------

    @property
    def persistent(self) -> bool:
        return self.store is not None

    def connect(self, *, live: bool = True) -> bool:
        """Open the store (provisioning an identity) and start tracking events.

        Returns ``False`` and leaves the session in local-only mode when
        storage is not configured or unreachable.
        """
        if self.store is None:
            missing = missing_storage_settings()
            if missing:
                self._report(
                    f"Storage configuration missing: set {', '.join(missing)}. "
                    "Events will not be saved."
                )
                return False
            try:
                database = get_database()
                self.user_id = ensure_user_id(database[USERS_COLLECTION])
                self.store = EventStore(database[EVENTS_COLLECTION], self.user_id)
            except CalendarAssistantError as exc:
                self._report(f"Failed to initialize storage: {exc}")
                return False

        logger.info("Connected as user %s", self.user_id)
        if live:
            self._subscription = self.store.subscribe(self._on_events, self._on_subscription_error)
            return True
        return self.refresh()

    def refresh(self) -> bool:
        """Reload the event list once (used when no live subscription runs)."""
        if self.store is None:
            return False
        try:
            self._on_events(self.store.list_events())
        except PersistenceError as exc:
            self._report(f"Failed to load events: {exc}")
            return False
        return True

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None

    def _on_events(self, events: List[Event]) -> None:
        self.events = list(events)

    def _on_subscription_error(self, exc: PersistenceError) -> None:
        self._report(f"Failed to load events: {exc}")

    def _after_write(self) -> None:
        # Without a subscription nothing else refreshes the local copy
        if self._subscription is None:
            self.refresh()

    # ------------------------------------------------------------------
    # Error reporting
    # ------------------------------------------------------------------

    def _report(self, message: str) -> None:
        logger.error(message)
        self.status = message

    def _run(self, action: str, func: Callable[[], T]) -> Optional[T]:
        """Run one user operation, translating taxonomy errors into ``status``."""
        if self.busy:
            self.status = "Another operation is still in progress. Please wait."
            return None

        self.busy = True
        self.status = None
        self.notice = None
        try:
            return func()
        except ValidationError as exc:
            self._report(str(exc))
        except ConfigurationError as exc:
            self._report(f"Configuration missing: {exc}. Check your .env file.")
        except TransportError as exc:
            self._report(
                f"Failed to get a valid response from the LLM after {exc.attempts} attempts. "
                "Please check your API key and try again later."
            )
        except ResponseShapeError as exc:
            self._report(str(exc))
        except PersistenceError as exc:
            self._report(f"Failed to {action}: {exc}")
        finally:
            self.busy = False
        return None

    def _require_store(self, action: str) -> EventStore:
        if self.store is None:
            raise PersistenceError(f"storage is not initialized; cannot {action}")
        return self.store

    # ------------------------------------------------------------------
    # User operations
    # ------------------------------------------------------------------

    def parse_and_save(self, text: str) -> Optional[Event]:
        """Extract an event from *text* with the LLM and save it."""

        def _parse_and_save() -> Event:
            self.parsed_event = None
            event = extract_event(text, today=self._clock().date())
            self.parsed_event = event

            if self.store is None:
                saved = dataclasses.replace(event, id=local_event_id())
                self.events = sort_events([*self.events, saved])
                logger.warning("Storage not ready, event added to local state only (not persistent).")
                return saved

            saved = dataclasses.replace(event, id=self.store.create(event))
            self._after_write()
            return saved

        return self._run("save event", _parse_and_save)

    def update_event(self, event_id: str, fields: Mapping[str, Any]) -> bool:
        """Replace fields of an existing event (the edit form)."""

        def _update() -> bool:
            store = self._require_store("update event")
            store.update(event_id, dict(fields))
            self._after_write()
            return True

        return bool(self._run("update event", _update))

    def delete_event(self, event_id: str) -> bool:
        def _delete() -> bool:
            store = self._require_store("delete event")
            store.delete(event_id)
            self._after_write()
            return True

        return bool(self._run("delete event", _delete))

    def optimize(self) -> Optional[List[Suggestion]]:
        """Ask the LLM for schedule improvements to the current events."""

        def _optimize() -> List[Suggestion]:
            self.suggestions = request_suggestions(self.events, today=self._clock().date())
            if not self.suggestions:
                self.notice = "No optimization suggestions for your schedule right now."
            return self.suggestions

        return self._run("optimize schedule", _optimize)

    def apply_suggestion(self, suggestion: Suggestion) -> Optional[ApplyReport]:
        """Apply one suggestion's changes to the store, in order."""

        def _apply() -> ApplyReport:
            store = self._require_store("apply suggestion")
            report = apply_changes(suggestion.changes, store)
            if report.failed:
                self.status = f"Some changes could not be applied ({report.summary()})."
            self._after_write()
            return report

        return self._run("apply suggestion", _apply)

    # ------------------------------------------------------------------
    # Derived views
    # ------------------------------------------------------------------

    def events_for_day(self, selected: DateLike) -> List[Event]:
        return filter_events_for_day(self.events, selected)

    def find_event(self, event_id: str) -> Optional[Event]:
        return next((event for event in self.events if event.id == event_id), None)

    def location_suggestion(self, label: str, now: Optional[datetime] = None) -> Optional[LocationSuggestion]:
        """Recompute the proactive suggestion for the user's current location type."""
        self.proactive_suggestion = build_location_suggestion(self.events, label, now or self._clock())
        return self.proactive_suggestion

__all__ = ["CalendarAssistant"]
