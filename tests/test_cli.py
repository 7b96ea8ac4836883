import io
import unittest
from contextlib import redirect_stderr, redirect_stdout
from unittest.mock import patch, MagicMock
import os
import sys

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from calendar_assistant.cli import build_parser, format_event, main, run
from calendar_assistant.models import ApplyReport, ChangeOp, Event, Suggestion
from calendar_assistant.workflows.assistant import CalendarAssistant


class TestParser(unittest.TestCase):

    def test_add_joins_words(self):
        args = build_parser().parse_args(["add", "Lunch", "with", "Sarah"])
        self.assertEqual(args.command, "add")
        self.assertEqual(args.text, ["Lunch", "with", "Sarah"])

    def test_edit_options(self):
        args = build_parser().parse_args(["edit", "abc", "--time", "11:00", "--location-type", "gym"])
        self.assertEqual(args.event_id, "abc")
        self.assertEqual(args.time, "11:00")
        self.assertEqual(args.location_type, "gym")
        self.assertIsNone(args.title)

    def test_list_rejects_bad_date(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit):
                build_parser().parse_args(["list", "--date", "tomorrow"])


class TestRun(unittest.TestCase):

    def setUp(self):
        self.store = MagicMock()
        self.store.user_id = "user-1"
        self.events = [
            Event(title="Gym", date="2026-10-21", time="07:00", location_type="gym", id="g1"),
            Event(title="Dentist", date="2026-10-20", time="10:00", description="Bring X-rays", id="d1"),
        ]
        self.store.list_events.return_value = self.events
        self.assistant = CalendarAssistant(self.store)
        self.assistant.events = list(self.events)

    def _run(self, argv):
        output = io.StringIO()
        with redirect_stdout(output):
            run(build_parser().parse_args(argv), self.assistant)
        return output.getvalue()

    def test_list_for_day(self):
        output = self._run(["list", "--date", "2026-10-20"])
        self.assertIn("Dentist", output)
        self.assertNotIn("Gym", output)

    def test_list_all_sorted(self):
        output = self._run(["list"])
        self.assertLess(output.index("Dentist"), output.index("Gym"))

    def test_edit_passes_only_given_fields(self):
        self._run(["edit", "g1", "--time", "08:00"])
        self.store.update.assert_called_once_with("g1", {"time": "08:00"})

    def test_optimize_and_apply(self):
        suggestion = Suggestion(
            description="Sleep in", changes=[ChangeOp(type="move", event_id="g1", new_time="08:00")]
        )
        with patch.object(self.assistant, "optimize", return_value=[suggestion]), patch.object(
            self.assistant, "apply_suggestion", return_value=ApplyReport(applied=suggestion.changes)
        ) as mock_apply:
            output = self._run(["optimize", "--apply", "1"])

        self.assertIn("1. Sleep in", output)
        self.assertIn("move g1 to 08:00", output)
        self.assertIn("1 applied, 0 skipped, 0 failed", output)
        mock_apply.assert_called_once_with(suggestion)

    def test_optimize_apply_out_of_range(self):
        with patch.object(self.assistant, "optimize", return_value=[]):
            self._run(["optimize", "--apply", "2"])
        self.assertEqual(self.assistant.status, "No suggestion number 2.")

    def test_watch_requires_store(self):
        assistant = CalendarAssistant()
        run(build_parser().parse_args(["watch"]), assistant)
        self.assertIn("configured event store", assistant.status)

    def test_format_event(self):
        text = format_event(self.events[1])
        self.assertIn("2026-10-20 10:00  Dentist", text)
        self.assertIn("(id: d1)", text)
        self.assertIn("Bring X-rays", text)


class TestMain(unittest.TestCase):

    @patch('calendar_assistant.cli.CalendarAssistant')
    def test_add_success_exits_zero(self, mock_assistant_cls):
        assistant = mock_assistant_cls.return_value
        assistant.status = None
        assistant.notice = None
        assistant.parse_and_save.return_value = Event(
            title="Team Sync", date="2026-10-20", time="09:00", id="x1"
        )

        with redirect_stdout(io.StringIO()) as output:
            code = main(["add", "Team", "sync", "tomorrow"])

        self.assertEqual(code, 0)
        assistant.connect.assert_called_once_with(live=False)
        assistant.parse_and_save.assert_called_once_with("Team sync tomorrow")
        assistant.close.assert_called_once()
        self.assertIn("Team Sync", output.getvalue())

    @patch('calendar_assistant.workflows.assistant.request_suggestions', return_value=[])
    @patch('calendar_assistant.workflows.assistant.missing_storage_settings', return_value=["MONGODB_URI"])
    def test_optimize_without_suggestions_exits_zero(self, _mock_missing, mock_request_suggestions):
        with redirect_stdout(io.StringIO()) as output, redirect_stderr(io.StringIO()) as errors:
            code = main(["optimize"])

        self.assertEqual(code, 0)
        mock_request_suggestions.assert_called_once()
        self.assertIn("No optimization suggestions", output.getvalue())
        self.assertNotIn("No optimization suggestions", errors.getvalue())

    @patch('calendar_assistant.cli.CalendarAssistant')
    def test_failure_exits_one(self, mock_assistant_cls):
        assistant = mock_assistant_cls.return_value
        assistant.status = None
        assistant.notice = None

        def _fail(_text):
            assistant.status = "Failed to get a valid response from the LLM after 3 attempts."
            return None

        assistant.parse_and_save.side_effect = _fail

        with redirect_stdout(io.StringIO()), redirect_stderr(io.StringIO()) as errors:
            code = main(["add", "anything"])

        self.assertEqual(code, 1)
        self.assertIn("after 3 attempts", errors.getvalue())


if __name__ == '__main__':
    unittest.main()
