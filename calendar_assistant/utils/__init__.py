"""Utility functions for the calendar assistant.

Re-exports the text-cleaning, parsing and datetime helpers so that imports
like `from ..utils import extract_structured_json` work as expected.
"""

from .text_cleaning import strip_code_fences, one_line  # noqa: F401
from .datetime_utils import as_calendar_date, local_now, local_today  # noqa: F401
from .llm_parsing import extract_structured_json  # noqa: F401

__all__ = [
    "strip_code_fences",
    "one_line",
    "as_calendar_date",
    "local_now",
    "local_today",
    "extract_structured_json",
]
