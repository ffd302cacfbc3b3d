from __future__ import annotations

import logging
import random
import time
from typing import Callable, TypeVar

import requests

T = TypeVar("T")
logger = logging.getLogger(__name__)

_TRANSIENT_STATUS: frozenset[int] = frozenset({408, 425, 429, 500, 502, 503, 504})


def is_transient_http_error(e: BaseException) -> bool:
    """Connection resets, timeouts, and retryable HTTP statuses."""
    if isinstance(e, (requests.ConnectionError, requests.Timeout)):
        return True
    if isinstance(e, requests.HTTPError):
        status = getattr(e.response, "status_code", None)
        return status in _TRANSIENT_STATUS
    return False


def with_http_retry(
    fn: Callable[[], T],
    *,
    max_attempts: int = 3,
    base_delay_s: float = 0.2,
    max_delay_s: float = 5.0,
    sleep: Callable[[float], None] | None = None,
) -> T:
    """
    Retry transient HTTP errors with exponential backoff + full jitter.

    Non-transient errors, and the last transient one, propagate unchanged.
    """
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as e:
            if (not is_transient_http_error(e)) or attempt >= (max_attempts - 1):
                raise

            sleep_s = min(max_delay_s, base_delay_s * (2**attempt))
            logger.info("http_retry iteration=%d sleep_s=%.3f error=%s", attempt + 1, float(sleep_s), type(e).__name__)
            (sleep or time.sleep)(float(random.random() * float(sleep_s)))
            attempt += 1


__all__ = ["is_transient_http_error", "with_http_retry"]
