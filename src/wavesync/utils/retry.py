"""Retry decorators using tenacity."""

from __future__ import annotations

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from wavesync.errors import DecodeError
from wavesync.utils.progress import log_warning


def _announce_retry(state: RetryCallState) -> None:
    error = state.outcome.exception() if state.outcome else None
    log_warning(
        f"Decode attempt {state.attempt_number} failed ({error}). Retrying..."
    )


def retry_decode(max_attempts: int = 3, wait_seconds: float = 0.5):
    """Retry decorator for decoding a resource.

    Only DecodeError is retried; the final failure is re-raised so the caller
    can substitute placeholder data.
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=wait_seconds, max=wait_seconds * 8),
        retry=retry_if_exception_type(DecodeError),
        before_sleep=_announce_retry,
        reraise=True,
    )
