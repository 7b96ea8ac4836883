"""Command-line front end for the calendar assistant."""

from __future__ import annotations

import argparse
import sys
import time
from datetime import date
from typing import List, Optional, Sequence

from .logging_config import logging as _  # noqa: F401  # ensure config applied early
from .models.event import Event
from .models.suggestion import ApplyReport
from .services.calendar_view import render_month, sort_events
from .workflows.assistant import CalendarAssistant


def _iso_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid date {value!r}; expected YYYY-MM-DD") from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="calendar-assistant",
        description="Your smart assistant to effortlessly manage your schedule.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    add_parser = subparsers.add_parser("add", help="Parse a natural-language event and save it.")
    add_parser.add_argument("text", nargs="+", help="e.g. 'Doctor's appointment tomorrow at 3pm'")

    list_parser = subparsers.add_parser("list", help="List events (all, or for one day).")
    list_parser.add_argument("--date", type=_iso_date, help="Only events on this day (YYYY-MM-DD).")

    month_parser = subparsers.add_parser("month", help="Show a month grid; days with events are marked.")
    month_parser.add_argument("--year", type=int)
    month_parser.add_argument("--month", type=int, choices=range(1, 13), metavar="1-12")

    edit_parser = subparsers.add_parser("edit", help="Change fields of an existing event.")
    edit_parser.add_argument("event_id")
    edit_parser.add_argument("--title")
    edit_parser.add_argument("--date")
    edit_parser.add_argument("--time")
    edit_parser.add_argument("--description")
    edit_parser.add_argument("--location-type", dest="location_type")

    delete_parser = subparsers.add_parser("delete", help="Delete an event.")
    delete_parser.add_argument("event_id")

    nearby_parser = subparsers.add_parser("nearby", help="Suggest an upcoming event for where you are now.")
    nearby_parser.add_argument("location_type", help="e.g. supermarket, office, gym")

    optimize_parser = subparsers.add_parser("optimize", help="Ask the LLM for schedule improvements.")
    optimize_parser.add_argument(
        "--apply", type=int, metavar="N", help="Apply suggestion number N (1-based) right away."
    )

    subparsers.add_parser("watch", help="Print the event list every time it changes (Ctrl-C to stop).")
    return parser


def format_event(event: Event) -> str:
    line = f"{event.date} {event.time}  {event.title}"
    if event.location_type:
        line += f"  [{event.location_type}]"
    line += f"  (id: {event.id})"
    if event.description:
        line += f"\n    {event.description}"
    return line


def _print_events(events: Sequence[Event], empty: str) -> None:
    if not events:
        print(empty)
        return
    for event in events:
        print(format_event(event))


def _print_report(report: ApplyReport) -> None:
    print(f"Suggestion applied: {report.summary()}")
    for change in report.failed:
        print(f"  failed: {change.describe()}")
    for change in report.skipped:
        print(f"  skipped: {change.describe()}")


def _edit_fields(args: argparse.Namespace) -> dict:
    fields = {
        "title": args.title,
        "date": args.date,
        "time": args.time,
        "description": args.description,
        "locationType": args.location_type,
    }
    return {name: value for name, value in fields.items() if value is not None}


def _watch(assistant: CalendarAssistant) -> None:
    seen: Optional[List[Event]] = None
    try:
        while True:
            if assistant.events != seen:
                seen = list(assistant.events)
                print(f"--- {len(seen)} event(s) ---")
                _print_events(seen, "No events yet.")
            if assistant.status:
                break
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def run(args: argparse.Namespace, assistant: CalendarAssistant) -> None:
    """Dispatch one parsed command against *assistant*."""
    command = args.command

    if command == "add":
        event = assistant.parse_and_save(" ".join(args.text))
        if event is not None:
            print("Event added:")
            print(format_event(event))
    elif command == "list":
        if args.date:
            _print_events(assistant.events_for_day(args.date), f"No events scheduled for {args.date}.")
        else:
            _print_events(sort_events(assistant.events), "No events yet.")
    elif command == "month":
        today = date.today()
        print(render_month(args.year or today.year, args.month or today.month, assistant.events, selected=today))
    elif command == "edit":
        if assistant.update_event(args.event_id, _edit_fields(args)):
            updated = assistant.find_event(args.event_id)
            print("Event updated." if updated is None else format_event(updated))
    elif command == "delete":
        if assistant.delete_event(args.event_id):
            print(f"Event {args.event_id} deleted.")
    elif command == "nearby":
        suggestion = assistant.location_suggestion(args.location_type)
        if suggestion is None:
            print(f"No upcoming {args.location_type!r} events.")
        else:
            print(suggestion.message)
            if suggestion.event.description:
                print(f"    {suggestion.event.description}")
    elif command == "optimize":
        suggestions = assistant.optimize() or []
        for number, suggestion in enumerate(suggestions, start=1):
            print(f"{number}. {suggestion.description}")
            for change in suggestion.changes:
                print(f"     - {change.describe()}")
        if args.apply is not None:
            if not 1 <= args.apply <= len(suggestions):
                assistant.status = f"No suggestion number {args.apply}."
            else:
                report = assistant.apply_suggestion(suggestions[args.apply - 1])
                if report is not None:
                    _print_report(report)
    elif command == "watch":
        if not assistant.persistent:
            assistant.status = "Live updates need a configured event store."
            return
        _watch(assistant)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    assistant = CalendarAssistant()
    assistant.connect(live=args.command == "watch")
    try:
        # Configuration problems are reported once, then the command runs in local mode
        if assistant.status:
            print(assistant.status, file=sys.stderr)
            assistant.status = None
        run(args, assistant)
    finally:
        assistant.close()

    if assistant.notice:
        print(assistant.notice)
    if assistant.status:
        print(assistant.status, file=sys.stderr)
        return 1
    return 0

__all__ = ["build_parser", "format_event", "run", "main"]
