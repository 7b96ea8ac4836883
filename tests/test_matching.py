import unittest
from datetime import datetime
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from calendar_assistant.models import Event
from calendar_assistant.services.matching import (
    build_location_suggestion,
    find_next_event_for_location,
)


def _event(event_id, date, time, location_type="gym", title=None):
    return Event(
        title=title or f"Event {event_id}",
        date=date,
        time=time,
        location_type=location_type,
        id=event_id,
    )


class TestFindNextEventForLocation(unittest.TestCase):

    def test_same_day_later_time_matches(self):
        event = _event("a", "2026-10-20", "14:00")
        now = datetime(2026, 10, 20, 13, 0)
        self.assertEqual(find_next_event_for_location([event], "gym", now), event)

    def test_same_day_earlier_time_is_excluded(self):
        event = _event("a", "2026-10-20", "14:00")
        now = datetime(2026, 10, 20, 15, 0)
        self.assertIsNone(find_next_event_for_location([event], "gym", now))

    def test_event_exactly_now_is_excluded(self):
        event = _event("a", "2026-10-20", "14:00")
        now = datetime(2026, 10, 20, 14, 0)
        self.assertIsNone(find_next_event_for_location([event], "gym", now))

    def test_empty_label_yields_nothing(self):
        event = _event("a", "2026-10-21", "14:00", location_type="")
        now = datetime(2026, 10, 20, 9, 0)
        self.assertIsNone(find_next_event_for_location([event], "", now))
        self.assertIsNone(find_next_event_for_location([event], "   ", now))

    def test_label_is_case_insensitive(self):
        event = _event("a", "2026-10-21", "14:00", location_type="Supermarket")
        now = datetime(2026, 10, 20, 9, 0)
        self.assertEqual(find_next_event_for_location([event], "SUPERMARKET", now), event)

    def test_other_location_types_are_ignored(self):
        event = _event("a", "2026-10-21", "14:00", location_type="office")
        now = datetime(2026, 10, 20, 9, 0)
        self.assertIsNone(find_next_event_for_location([event], "gym", now))

    def test_picks_earliest_upcoming(self):
        now = datetime(2026, 10, 20, 12, 0)
        events = [
            _event("later", "2026-10-25", "08:00"),
            _event("past", "2026-10-19", "18:00"),
            _event("soonest", "2026-10-20", "18:00"),
            _event("middle", "2026-10-21", "07:00"),
        ]
        self.assertEqual(find_next_event_for_location(events, "gym", now).id, "soonest")

    def test_never_returns_event_at_or_before_now(self):
        now = datetime(2026, 10, 20, 12, 0)
        events = [
            _event(str(hour), "2026-10-20", f"{hour:02d}:00") for hour in range(0, 24)
        ]
        match = find_next_event_for_location(events, "gym", now)
        self.assertGreater(match.starts_at(), now)
        self.assertEqual(match.id, "13")

    def test_unparseable_events_are_skipped(self):
        now = datetime(2026, 10, 20, 12, 0)
        events = [
            _event("broken", "sometime", "10:00"),
            _event("ok", "2026-10-22", "10:00"),
        ]
        self.assertEqual(find_next_event_for_location(events, "gym", now).id, "ok")


class TestBuildLocationSuggestion(unittest.TestCase):

    def test_message(self):
        event = _event("a", "2026-10-20", "18:00", location_type="supermarket", title="Grocery Shopping")
        suggestion = build_location_suggestion([event], "supermarket", datetime(2026, 10, 20, 9, 0))

        self.assertIs(suggestion.event, event)
        self.assertEqual(
            suggestion.message,
            'Heads up! It looks like you\'re at a "supermarket" type of place. '
            'You have "Grocery Shopping" scheduled for Tuesday. '
            "Would you like to consider doing it now?",
        )

    def test_no_match(self):
        self.assertIsNone(build_location_suggestion([], "gym", datetime(2026, 10, 20, 9, 0)))


if __name__ == '__main__':
    unittest.main()
