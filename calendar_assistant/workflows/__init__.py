"""User-facing flows composed from the service layer."""

from .assistant import CalendarAssistant  # noqa: F401

__all__ = ["CalendarAssistant"]
