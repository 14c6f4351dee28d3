"""Retry logic with backoff for HTTP fetches."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence

import httpx

logger = logging.getLogger(__name__)

RETRYABLE_HTTP_CODES = {429, 500, 502, 503, 504}
RETRYABLE_EXCEPTIONS = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    ConnectionError,
    TimeoutError,
)


def is_transient(exc: BaseException) -> bool:
    """True for failures that a later attempt might not hit."""
    if isinstance(exc, RETRYABLE_EXCEPTIONS):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        code = exc.response.status_code
        return code in RETRYABLE_HTTP_CODES or code >= 500
    return False


def _backoff(attempt: int, base_delay: float, max_delay: float,
             delays: Sequence[float] | None) -> float:
    if delays:
        return min(delays[min(attempt, len(delays) - 1)], max_delay)
    return min(base_delay * (2**attempt), max_delay)


async def retry_async(
    fn,
    *args,
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    delays: Sequence[float] | None = None,
    **kwargs,
):
    """Call an async function, retrying transient failures.

    Retries on:
    - httpx timeout/connection errors
    - HTTP 429 (rate limit, honouring Retry-After) and 5xx

    Other HTTP errors (401, 403, 404, ...) are raised immediately.
    Backoff is exponential from ``base_delay`` unless fixed ``delays``
    are given, in which case attempt ``n`` waits ``delays[n]``.
    """
    last_exc = None
    for attempt in range(max_retries + 1):
        try:
            return await fn(*args, **kwargs)
        except RETRYABLE_EXCEPTIONS as exc:
            last_exc = exc
            if attempt == max_retries:
                break
            delay = _backoff(attempt, base_delay, max_delay, delays)
            logger.warning(
                "Retry %d/%d after %s: %s (waiting %.1fs)",
                attempt + 1, max_retries, type(exc).__name__, exc, delay,
            )
            await asyncio.sleep(delay)
        except httpx.HTTPStatusError as exc:
            last_exc = exc
            if not is_transient(exc):
                raise
            if attempt == max_retries:
                break
            delay = _backoff(attempt, base_delay, max_delay, delays)
            # Use Retry-After header if present (rate limiting)
            retry_after = exc.response.headers.get("retry-after")
            if retry_after:
                try:
                    delay = min(float(retry_after), max_delay)
                except ValueError:
                    pass
            logger.warning(
                "Retry %d/%d after HTTP %d (waiting %.1fs)",
                attempt + 1, max_retries,
                exc.response.status_code, delay,
            )
            await asyncio.sleep(delay)

    raise last_exc  # type: ignore[misc]
