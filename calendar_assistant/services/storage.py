"""Persistence layer: per-user event documents in MongoDB with live updates."""

from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Dict, List, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from ..clients.mongodb_client import get_database
from ..config import EVENTS_COLLECTION
from ..errors import PersistenceError, ValidationError
from ..models.event import EVENT_FIELDS, Event, normalise_iso_date, normalise_time
from .calendar_view import sort_events

logger = logging.getLogger(__name__)

EventsCallback = Callable[[List[Event]], None]
ErrorCallback = Callable[[PersistenceError], None]


def _object_id(event_id: str) -> ObjectId:
    try:
        return ObjectId(event_id)
    except (InvalidId, TypeError) as exc:
        raise PersistenceError(f"Invalid event id {event_id!r}") from exc


class EventStore:
    """Create/read/update/delete a single user's events.

    Every document carries ``user_id`` and every query is scoped by it, which
    gives each user their own event collection.
    """

    def __init__(self, collection: Collection, user_id: str) -> None:
        self.collection = collection
        self.user_id = user_id

    def _scope(self, event_id: Optional[str] = None) -> Dict[str, Any]:
        query: Dict[str, Any] = {"user_id": self.user_id}
        if event_id is not None:
            query["_id"] = _object_id(event_id)
        return query

    def create(self, event: Event) -> str:
        """Insert *event* and return the id assigned by the database."""
        document = {**event.to_document(), "user_id": self.user_id}
        try:
            result = self.collection.insert_one(document)
        except PyMongoError as exc:
            raise PersistenceError(f"Failed to save event: {exc}") from exc
        logger.info("Stored event %r with _id=%s", event.title, result.inserted_id)
        return str(result.inserted_id)

    def update(self, event_id: str, fields: Mapping[str, Any]) -> None:
        """Replace the given fields of an existing event."""
        unknown = sorted(set(fields) - set(EVENT_FIELDS))
        if unknown:
            raise ValidationError(f"Unknown event field(s): {', '.join(unknown)}")
        changes = {name: "" if value is None else str(value).strip() for name, value in fields.items()}
        if "time" in changes:
            changes["time"] = normalise_time(changes["time"])
        if changes.get("date"):
            changes["date"] = normalise_iso_date(changes["date"])
        for required in ("title", "date", "time"):
            if required in changes and not changes[required]:
                raise ValidationError("Title, Date, and Time are required for an event.")
        if not changes:
            return

        try:
            result = self.collection.update_one(self._scope(event_id), {"$set": changes})
        except PyMongoError as exc:
            raise PersistenceError(f"Failed to update event: {exc}") from exc
        if result.matched_count == 0:
            raise PersistenceError(f"No event with id {event_id}")
        logger.info("Event successfully updated: %s (%s)", event_id, ", ".join(sorted(changes)))

    def delete(self, event_id: str) -> None:
        try:
            result = self.collection.delete_one(self._scope(event_id))
        except PyMongoError as exc:
            raise PersistenceError(f"Failed to delete event: {exc}") from exc
        if result.deleted_count == 0:
            logger.info("Event %s was already gone", event_id)
        else:
            logger.info("Event successfully deleted: %s", event_id)

    def list_events(self) -> List[Event]:
        """Return all of the user's events, ordered by date then time."""
        try:
            documents = list(self.collection.find(self._scope()))
        except PyMongoError as exc:
            raise PersistenceError(f"Failed to load events: {exc}") from exc
        return sort_events(Event.from_document(doc) for doc in documents)

    def subscribe(
        self,
        callback: EventsCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> "EventSubscription":
        """Push the full event list to *callback* now and after every change."""
        return EventSubscription(self, callback, on_error).start()


class EventSubscription:
    """Standing change-stream listener running on a daemon thread.

    Each change triggers a full re-read so the callback always receives the
    database's latest state. Change streams require a replica set.
    """

    # How long the server waits for a change before try_next() returns None
    MAX_AWAIT_MS: int = 1000

    def __init__(
        self,
        store: EventStore,
        callback: EventsCallback,
        on_error: Optional[ErrorCallback] = None,
    ) -> None:
        self._store = store
        self._callback = callback
        self._on_error = on_error
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="event-subscription", daemon=True)

    @property
    def active(self) -> bool:
        return self._thread.is_alive() and not self._stop.is_set()

    def start(self) -> "EventSubscription":
        self._thread.start()
        return self

    def close(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _pipeline(self) -> List[Dict[str, Any]]:
        # Deletes carry no fullDocument, so they always trigger a re-read
        return [
            {
                "$match": {
                    "$or": [
                        {"fullDocument.user_id": self._store.user_id},
                        {"operationType": "delete"},
                    ]
                }
            }
        ]

    def _publish(self) -> None:
        events = self._store.list_events()
        logger.debug("Events updated: %d for user %s", len(events), self._store.user_id)
        self._callback(events)

    def _run(self) -> None:
        try:
            self._publish()
            with self._store.collection.watch(
                self._pipeline(),
                full_document="updateLookup",
                max_await_time_ms=self.MAX_AWAIT_MS,
            ) as stream:
                while not self._stop.is_set():
                    change = stream.try_next()
                    if change is None:
                        continue
                    logger.debug("Change stream event: %s", change.get("operationType"))
                    self._publish()
        except PersistenceError as exc:
            self._fail(exc)
        except PyMongoError as exc:
            self._fail(PersistenceError(f"Failed to load events: {exc}"))
        except Exception as exc:
            logger.exception("Event callback raised")
            self._fail(PersistenceError(f"Event listener failed: {exc}"))
        finally:
            self._stop.set()

    def _fail(self, exc: PersistenceError) -> None:
        logger.error("Event subscription stopped: %s", exc)
        if self._on_error is not None:
            self._on_error(exc)


def get_event_store(user_id: str) -> EventStore:
    """Return an :class:`EventStore` for *user_id* on the configured database."""
    return EventStore(get_database()[EVENTS_COLLECTION], user_id)

__all__ = ["EventStore", "EventSubscription", "get_event_store"]
