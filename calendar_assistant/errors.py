"""Error taxonomy shared by every service.

The session layer catches these and turns them into a status message; none
of them is meant to end the process.
"""

from __future__ import annotations


class CalendarAssistantError(Exception):
    """Base class for all errors raised by calendar_assistant."""


class ConfigurationError(CalendarAssistantError, RuntimeError):
    """A required credential or setting is missing or invalid."""


class TransportError(CalendarAssistantError, RuntimeError):
    """A remote call failed at the network or HTTP-status level.

    ``attempts`` is set on the terminal error raised once retries run out.
    """

    def __init__(self, message: str, *, attempts: int = 0, status_code: int | None = None) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.status_code = status_code


class ResponseShapeError(CalendarAssistantError, ValueError):
    """A remote call succeeded but returned data we cannot use."""


class PersistenceError(CalendarAssistantError, RuntimeError):
    """The document store rejected or failed a read/write."""


class ValidationError(CalendarAssistantError, ValueError):
    """User-supplied input is incomplete or malformed."""


__all__ = [
    "CalendarAssistantError",
    "ConfigurationError",
    "TransportError",
    "ResponseShapeError",
    "PersistenceError",
    "ValidationError",
]
