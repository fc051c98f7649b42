"""
Resilience — retry decorator with exponential backoff.

Used for idempotent calls to flaky endpoints (fragment downloads, the
local LLM server). Search and speech calls are not retried: a failed
search is an expected outcome, and a failed synthesis is reported.

Usage:
    @retry_with_backoff(max_retries=3, base_delay=1.0, exceptions=(OSError,))
    def download(url): ...
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def backoff_delay(attempt: int, base_delay: float, max_delay: float) -> float:
    """Delay before retry number ``attempt`` (1-based)."""
    return min(base_delay * (2 ** (attempt - 1)), max_delay)


def retry_with_backoff(
    max_retries: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 30.0,
    exceptions: tuple[type[Exception], ...] = (Exception,),
    on_retry: Callable[[Exception, int], None] | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[F], F]:
    """Decorator: retry a function with exponential backoff.

    Args:
        max_retries: Total number of attempts.
        base_delay: Delay in seconds before the first retry.
        max_delay: Upper bound on any single delay.
        exceptions: Exception types that trigger a retry; others propagate.
        on_retry: Called with (exception, attempt) before each retry.
        sleep: Sleep function, replaceable in tests.
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            for attempt in range(1, max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if attempt == max_retries:
                        log.error("❌ %s failed after %d attempts: %s", func.__name__, attempt, e)
                        raise
                    delay = backoff_delay(attempt, base_delay, max_delay)
                    log.warning(
                        "⚠️  %s failed (attempt %d/%d): %s, retrying in %.1fs",
                        func.__name__,
                        attempt,
                        max_retries,
                        e,
                        delay,
                    )
                    if on_retry:
                        on_retry(e, attempt)
                    sleep(delay)
            raise RuntimeError(f"{func.__name__} called with max_retries={max_retries}")

        return wrapper  # type: ignore[return-value]

    return decorator
