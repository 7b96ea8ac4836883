"""Structured-JSON generation through the configured LLM provider."""

from __future__ import annotations

import logging
from typing import Any, Dict

import openai

from ..clients.openai_client import get_openai
from ..config import (
    GEMINI_API_BASE,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    LLM_PROVIDER,
    OPENAI_MODEL,
)
from ..errors import ConfigurationError, ResponseShapeError, TransportError
from ..utils.llm_parsing import extract_structured_json
from .retry import call_with_retry, post_json

logger = logging.getLogger(__name__)

SYSTEM_PROMPT: str = (
    "You are an intelligent calendar assistant. Reply with EXACTLY one JSON"
    " object matching the provided schema: no markdown, no fences, no commentary."
)

# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

def _gemini_schema(schema: Any) -> Any:
    """Translate a JSON schema into Gemini's OpenAPI subset (upper-case types)."""
    if isinstance(schema, dict):
        converted: Dict[str, Any] = {}
        for key, value in schema.items():
            if key == "type" and isinstance(value, str):
                converted[key] = value.upper()
            elif key == "additionalProperties":
                continue
            else:
                converted[key] = _gemini_schema(value)
        return converted
    if isinstance(schema, list):
        return [_gemini_schema(item) for item in schema]
    return schema


def _gemini_text(result: Dict[str, Any]) -> str:
    try:
        text = result["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        logger.error("Malformed Gemini response: %s", result)
        raise ResponseShapeError("LLM response was empty or malformed") from exc
    if not isinstance(text, str) or not text.strip():
        raise ResponseShapeError("LLM response was empty or malformed")
    return text


def _generate_with_gemini(prompt: str, schema: Dict[str, Any]) -> str:
    if not GEMINI_API_KEY:
        raise ConfigurationError("GEMINI_API_KEY is not set")

    payload = {
        "contents": [{"role": "user", "parts": [{"text": prompt}]}],
        "generationConfig": {
            "responseMimeType": "application/json",
            "responseSchema": _gemini_schema(schema),
        },
    }
    url = f"{GEMINI_API_BASE.rstrip('/')}/models/{GEMINI_MODEL}:generateContent"
    result = post_json(
        url,
        payload,
        headers={"x-goog-api-key": GEMINI_API_KEY},
        description="Gemini generateContent",
    )
    return _gemini_text(result)


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

def _generate_with_openai(prompt: str, schema: Dict[str, Any], schema_name: str) -> str:
    client = get_openai()

    def _attempt() -> str:
        try:
            resp = client.chat.completions.create(
                model=OPENAI_MODEL,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
                response_format={
                    "type": "json_schema",
                    "json_schema": {"name": schema_name, "schema": schema},
                },
                temperature=0.2,
            )
        except openai.APIStatusError as exc:
            raise TransportError(
                f"OpenAI API error: {exc.status_code}", status_code=exc.status_code
            ) from exc
        except (openai.APIConnectionError, openai.APITimeoutError) as exc:
            raise TransportError(f"OpenAI connection error: {exc}") from exc

        if not resp.choices or not resp.choices[0].message.content:
            raise ResponseShapeError("LLM response was empty or malformed")
        return resp.choices[0].message.content

    return call_with_retry(_attempt, description="OpenAI chat completion")


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------

def generate_json(prompt: str, schema: Dict[str, Any], *, schema_name: str = "response") -> Dict[str, Any]:
    """Send *prompt* asking for *schema*-shaped JSON and return the parsed object."""
    logger.info("Calling %s LLM for %s", LLM_PROVIDER, schema_name)

    if LLM_PROVIDER == "gemini":
        text = _generate_with_gemini(prompt, schema)
    elif LLM_PROVIDER == "openai":
        text = _generate_with_openai(prompt, schema, schema_name)
    else:
        raise ConfigurationError(f"Unknown LLM_PROVIDER {LLM_PROVIDER!r}; use 'gemini' or 'openai'")

    logger.debug("Raw LLM response: %s", text)
    return extract_structured_json(text)

__all__ = ["generate_json", "SYSTEM_PROMPT"]
