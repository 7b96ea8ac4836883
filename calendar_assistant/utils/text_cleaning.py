"""Shared helper utilities for cleaning LLM output."""

from __future__ import annotations

from typing import Final

# ---------------------------------------------------------------------------
# Public helpers
# ---------------------------------------------------------------------------

def strip_code_fences(text: str) -> str:
    """Remove a surrounding Markdown code fence (```json ... ```) if present.

    Some models wrap JSON in fences even when a JSON mime type was requested.
    Text without fences is returned stripped but otherwise unchanged.
    """
    if not text:
        return ""

    cleaned: str = text.strip()

    fence: Final[str] = "```"
    if cleaned.lower().startswith(fence + "json"):
        cleaned = cleaned[len(fence + "json") :].strip()
    if cleaned.startswith(fence):
        cleaned = cleaned[len(fence) :].strip()
    if cleaned.endswith(fence):
        cleaned = cleaned[: -len(fence)].strip()

    return cleaned


def one_line(text: str, limit: int = 200) -> str:
    """Collapse whitespace and truncate *text* for log messages."""
    collapsed = " ".join((text or "").split())
    if len(collapsed) <= limit:
        return collapsed
    return collapsed[: limit - 1] + "…"

__all__ = ["strip_code_fences", "one_line"]
