"""Top-level package for the calendar-assistant project.

This package exposes the session object so callers can do
`from calendar_assistant import CalendarAssistant`, and the CLI entry point
behind `python -m calendar_assistant`.
"""

from importlib import metadata as _metadata

try:
    __version__: str = _metadata.version("calendar-assistant")
except _metadata.PackageNotFoundError:  # pragma: no cover – running from source
    __version__ = "0.0.0"

from .workflows.assistant import CalendarAssistant  # convenience re-export

__all__ = ["CalendarAssistant", "__version__"]
