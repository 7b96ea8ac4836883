"""Remote calls with bounded exponential backoff.

Only :class:`~calendar_assistant.errors.TransportError` is retried. Shape and
validation errors surface on the first attempt, and when the attempts run
out a terminal ``TransportError`` is raised. There is no idempotency guard,
so callers must tolerate at-least-once delivery.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional, TypeVar

import requests

from ..clients.http_session import get_session
from ..config import LLM_BASE_DELAY, LLM_MAX_RETRIES, LLM_TIMEOUT
from ..errors import ResponseShapeError, TransportError
from ..utils.text_cleaning import one_line

logger = logging.getLogger(__name__)

T = TypeVar("T")


def backoff_delay(attempt: int, base_delay: float) -> float:
    """Delay to wait after failed *attempt* (1-based): ``base * 2**(attempt-1)``."""
    return base_delay * (2 ** (attempt - 1))


def call_with_retry(
    func: Callable[[], T],
    *,
    max_retries: int = LLM_MAX_RETRIES,
    base_delay: float = LLM_BASE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "remote call",
) -> T:
    """Call *func* until it succeeds or *max_retries* attempts have failed.

    *max_retries* is the total attempt count, so ``max_retries=3`` makes at
    most three calls with ``base_delay`` and ``2 * base_delay`` in between.
    """
    if max_retries < 1:
        raise ValueError("max_retries must be at least 1")

    last_error: Optional[TransportError] = None
    for attempt in range(1, max_retries + 1):
        try:
            return func()
        except TransportError as exc:
            last_error = exc
            logger.error("%s failed (attempt %d/%d): %s", description, attempt, max_retries, exc)
            if attempt == max_retries:
                break
            delay = backoff_delay(attempt, base_delay)
            logger.warning("Retrying %s in %.1f seconds...", description, delay)
            sleep(delay)

    raise TransportError(
        f"{description} failed after {max_retries} attempts: {last_error}",
        attempts=max_retries,
        status_code=last_error.status_code if last_error else None,
    ) from last_error


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return one_line(response.text)
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return str(body["error"].get("message") or "Unknown error")
    return one_line(str(body))


def post_json(
    url: str,
    payload: Mapping[str, Any],
    *,
    headers: Optional[Mapping[str, str]] = None,
    session: Optional[requests.Session] = None,
    timeout: float = LLM_TIMEOUT,
    max_retries: int = LLM_MAX_RETRIES,
    base_delay: float = LLM_BASE_DELAY,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "LLM request",
) -> Dict[str, Any]:
    """POST *payload* as JSON and return the decoded JSON body.

    Network errors and non-2xx statuses are retried; a 2xx body that is not
    a JSON object raises :class:`ResponseShapeError` immediately.
    """
    http = session or get_session()

    def _attempt() -> Dict[str, Any]:
        try:
            response = http.post(url, json=dict(payload), headers=dict(headers or {}), timeout=timeout)
        except requests.RequestException as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc

        if not response.ok:
            message = _error_message(response)
            logger.error("LLM API error response: %s - %s", response.status_code, message)
            raise TransportError(
                f"request failed with status: {response.status_code} - {message}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise ResponseShapeError("LLM API returned a non-JSON body") from exc
        if not isinstance(body, dict):
            raise ResponseShapeError("LLM API returned an unexpected JSON body")
        return body

    return call_with_retry(
        _attempt,
        max_retries=max_retries,
        base_delay=base_delay,
        sleep=sleep,
        description=description,
    )

__all__ = ["backoff_delay", "call_with_retry", "post_json"]
