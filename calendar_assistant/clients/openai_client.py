"""Singleton accessor for the OpenAI SDK client."""

from __future__ import annotations

from openai import OpenAI as _OpenAIClient

from ..config import LLM_TIMEOUT, OPENAI_API_KEY
from ..errors import ConfigurationError

_client: _OpenAIClient | None = None


def get_openai() -> _OpenAIClient:
    """Return a singleton instance of :class:`openai.OpenAI`.

    SDK-level retries are disabled; :mod:`..services.retry` owns the policy.
    """
    global _client
    if _client is None:
        if not OPENAI_API_KEY:
            raise ConfigurationError("OPENAI_API_KEY is not set")
        _client = _OpenAIClient(api_key=OPENAI_API_KEY, max_retries=0, timeout=LLM_TIMEOUT)
    return _client

__all__ = ["get_openai"]
