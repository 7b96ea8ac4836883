import unittest
from datetime import datetime
import os
import sys

from bson import ObjectId

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from calendar_assistant.errors import ValidationError
from calendar_assistant.models import ChangeOp, Event, is_valid_time, normalise_time


class TestEvent(unittest.TestCase):

    def test_from_payload_requires_title_date_time(self):
        with self.assertRaises(ValidationError):
            Event.from_payload({"title": "Lunch", "date": "2026-10-20"})

    def test_from_payload_rejects_non_iso_date(self):
        with self.assertRaises(ValidationError):
            Event.from_payload({"title": "Lunch", "date": "20/10/2026", "time": "13:00"})
        with self.assertRaises(ValidationError):
            Event.from_payload({"title": "Lunch", "date": "next Tuesday", "time": "13:00"})

    def test_from_payload_defaults(self):
        event = Event.from_payload({"title": " Lunch ", "date": "2026-10-20", "time": "13:00"})
        self.assertEqual(event.title, "Lunch")
        self.assertEqual(event.description, "")
        self.assertEqual(event.location_type, "")
        self.assertIsNone(event.id)

    def test_document_round_trip_keeps_wire_names(self):
        oid = ObjectId()
        doc = {
            "_id": oid,
            "user_id": "u1",
            "title": "Gym",
            "date": "2026-10-21",
            "time": "07:00",
            "locationType": "gym",
        }
        event = Event.from_document(doc)
        self.assertEqual(event.id, str(oid))
        self.assertEqual(event.location_type, "gym")
        self.assertEqual(event.description, "")
        self.assertEqual(
            event.to_document(),
            {"title": "Gym", "date": "2026-10-21", "time": "07:00", "description": "", "locationType": "gym"},
        )

    def test_starts_at(self):
        event = Event(title="Gym", date="2026-10-21", time="07:05")
        self.assertEqual(event.starts_at(), datetime(2026, 10, 21, 7, 5))

    def test_starts_at_rejects_malformed_values(self):
        with self.assertRaises(ValueError):
            Event(title="Gym", date="someday", time="07:00").starts_at()
        with self.assertRaises(ValueError):
            Event(title="Gym", date="2026-10-21", time="7am").starts_at()

    def test_sort_key_orders_by_date_then_time(self):
        early = Event(title="a", date="2026-10-21", time="9:00")
        late = Event(title="b", date="2026-10-21", time="10:00")
        self.assertLess(early.sort_key(), late.sort_key())

    def test_time_helpers(self):
        self.assertTrue(is_valid_time("23:59"))
        self.assertTrue(is_valid_time("9:05"))
        self.assertFalse(is_valid_time("24:00"))
        self.assertFalse(is_valid_time("12:60"))
        self.assertEqual(normalise_time("9:05"), "09:05")
        with self.assertRaises(ValidationError):
            normalise_time("noon")


class TestChangeOp(unittest.TestCase):

    def test_from_payload(self):
        change = ChangeOp.from_payload({"type": " Move ", "eventId": 42, "newTime": "11:00"})
        self.assertEqual(change.type, "move")
        self.assertEqual(change.event_id, "42")
        self.assertEqual(change.new_time, "11:00")
        self.assertIsNone(change.event_details)

    def test_malformed_fields_are_kept_lenient(self):
        change = ChangeOp.from_payload({"eventDetails": "not a dict", "eventId": "  "})
        self.assertEqual(change.type, "")
        self.assertIsNone(change.event_id)
        self.assertIsNone(change.event_details)
        self.assertIn("unsupported", change.describe())


if __name__ == '__main__':
    unittest.main()
