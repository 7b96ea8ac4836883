"""Centralised configuration for calendar_assistant.

Environment variables are loaded once and all related constants are
grouped by service for easier maintenance.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Load environment variables from `.env` (if present)
# ---------------------------------------------------------------------------
load_dotenv()


def _float_from_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# LLM provider settings
# accepted providers: "gemini", "openai"
# ---------------------------------------------------------------------------
LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "gemini").strip().lower()
GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY")
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash-preview-05-20")
GEMINI_API_BASE: str = os.getenv(
    "GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta"
)
OPENAI_API_KEY: str | None = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")

# Retry policy for every outbound LLM request
LLM_MAX_RETRIES: int = _int_from_env("LLM_MAX_RETRIES", 3)
LLM_BASE_DELAY: float = _float_from_env("LLM_BASE_DELAY", 1.0)
LLM_TIMEOUT: float = _float_from_env("LLM_TIMEOUT", 60.0)

# ---------------------------------------------------------------------------
# Persistence settings
# ---------------------------------------------------------------------------
MONGODB_URI: str | None = os.getenv("MONGODB_URI")
MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "calendar_assistant")
EVENTS_COLLECTION: str = "calendarEvents"
USERS_COLLECTION: str = "users"

# ---------------------------------------------------------------------------
# Identity / local state
# ---------------------------------------------------------------------------
CALENDAR_USER_ID: str | None = os.getenv("CALENDAR_USER_ID")
STATE_DIR: Path = Path(
    os.getenv("CALENDAR_ASSISTANT_HOME", str(Path.home() / ".calendar_assistant"))
)
IDENTITY_FILE: Path = STATE_DIR / "identity.json"

# ---------------------------------------------------------------------------
# Miscellaneous
# ---------------------------------------------------------------------------
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def missing_llm_settings() -> List[str]:
    """Return the environment variables the configured LLM provider still needs."""
    if LLM_PROVIDER == "openai":
        return [] if OPENAI_API_KEY else ["OPENAI_API_KEY"]
    if LLM_PROVIDER == "gemini":
        return [] if GEMINI_API_KEY else ["GEMINI_API_KEY"]
    return ["LLM_PROVIDER"]


def missing_storage_settings() -> List[str]:
    """Return the environment variables required by the document store."""
    return [] if MONGODB_URI else ["MONGODB_URI"]


# ---------------------------------------------------------------------------
# Re-exported names
# ---------------------------------------------------------------------------
__all__ = [
    # llm
    "LLM_PROVIDER",
    "GEMINI_API_KEY",
    "GEMINI_MODEL",
    "GEMINI_API_BASE",
    "OPENAI_API_KEY",
    "OPENAI_MODEL",
    "LLM_MAX_RETRIES",
    "LLM_BASE_DELAY",
    "LLM_TIMEOUT",
    # persistence
    "MONGODB_URI",
    "MONGODB_DATABASE",
    "EVENTS_COLLECTION",
    "USERS_COLLECTION",
    # identity
    "CALENDAR_USER_ID",
    "STATE_DIR",
    "IDENTITY_FILE",
    # misc
    "LOG_LEVEL",
    "missing_llm_settings",
    "missing_storage_settings",
]
