"""Utilities for parsing structured outputs returned by LLM calls.

Both providers are asked for JSON, but models still occasionally wrap it in
code fences or add a sentence before it. The extraction is shared between
the extraction and optimisation services so we keep it in one place.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict

from ..errors import ResponseShapeError
from .text_cleaning import strip_code_fences

__all__ = ["extract_structured_json"]


def _as_object(parsed: Any) -> Dict[str, Any]:
    if isinstance(parsed, dict):
        return parsed
    raise ResponseShapeError(
        f"Expected a JSON object from the LLM, got {type(parsed).__name__}"
    )


def extract_structured_json(response_text: str) -> Dict[str, Any]:
    """Robustly extract a JSON object from an LLM response.

    Parameters
    ----------
    response_text
        The raw text part returned by the model.

    Returns
    -------
    dict[str, Any]
        The parsed JSON object.

    Raises
    ------
    ResponseShapeError
        If no valid JSON object can be located in *response_text*, or the
        top-level JSON value is not an object.
    """

    cleaned: str = strip_code_fences(response_text or "")

    # 1. Try to parse the whole string first (fast path)
    try:
        return _as_object(json.loads(cleaned))
    except json.JSONDecodeError:
        pass

    # 2. Search for fenced JSON block, with or without explicit `json` label
    fenced = re.search(
        r"```(?:json)?\s*(\{.*?\})\s*```",
        cleaned,
        flags=re.DOTALL | re.IGNORECASE,
    )
    if fenced:
        snippet = fenced.group(1).strip()
        try:
            return _as_object(json.loads(snippet))
        except json.JSONDecodeError:
            cleaned = snippet  # Narrow search space.

    # 3. Progressive truncation from the first `{`
    start = cleaned.find("{")
    if start == -1:
        raise ResponseShapeError("Could not locate JSON in LLM response")

    candidate = cleaned[start:]
    for end in range(len(candidate), 0, -1):
        if candidate[end - 1] != "}":
            continue
        try:
            return _as_object(json.loads(candidate[:end]))
        except json.JSONDecodeError:
            continue

    raise ResponseShapeError("Could not locate JSON in LLM response")
