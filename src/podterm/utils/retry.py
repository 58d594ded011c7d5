"""Retry policy for network calls, built on tenacity."""

from __future__ import annotations

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

# requests.RequestException subclasses OSError, so failed HTTP transfers
# are covered along with socket timeouts.
RETRYABLE = (TimeoutError, ConnectionError, OSError)


def retry_api(
    max_attempts: int = 3,
    *,
    min_wait: float = 1.0,
    max_wait: float = 30.0,
    retry_on: tuple[type[BaseException], ...] = RETRYABLE,
):
    """Retry a network call with exponential backoff, re-raising the last error.

    Only exceptions in ``retry_on`` are retried; SDKs with their own error
    hierarchy pass their transient error types here.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        reraise=True,
    )
