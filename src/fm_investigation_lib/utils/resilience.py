"""Retry policies for the investigation library's external collaborators.

Two collaborators can fail transiently: the Redis backend behind the
key-value port, and the document rendering service behind the HTTP exporter.
Both are wrapped with tenacity exponential backoff. Merge passes and store
mutations never retry; they perform no I/O.
"""

import logging
from typing import Callable, Tuple, Type, TypeVar

from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _log_before_sleep(retry_state: RetryCallState) -> None:
    """Log the failed attempt and the upcoming wait."""
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
    logger.warning(
        f"[Retry] {retry_state.fn.__name__} attempt {retry_state.attempt_number} failed "
        f"({exc!r}); retrying in {wait:.1f}s"
    )


def create_custom_retry(
    max_attempts: int = 3,
    min_wait: float = 0.5,
    max_wait: float = 4.0,
    multiplier: float = 0.5,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Create a retry decorator with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts, including the first
        min_wait: Minimum wait between attempts (seconds)
        max_wait: Maximum wait between attempts (seconds)
        multiplier: Exponential backoff multiplier
        retry_on: Exception types that trigger a retry; anything else propagates

    Returns:
        A retry decorator that re-raises the last exception when exhausted

    Example:
        ```python
        render_retry = create_custom_retry(max_attempts=4, retry_on=(httpx.TransportError,))

        @render_retry
        async def render(payload):
            ...
        ```
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_before_sleep,
        reraise=True,
    )


# Connection verification for the Redis backend
# - Waits 1s, 2s, 4s, 8s between attempts
# - Gives up after 5 attempts and re-raises
storage_connect_retry = retry(
    stop=stop_after_attempt(5),
    wait=wait_exponential(multiplier=1, min=1, max=8),
    before_sleep=_log_before_sleep,
    reraise=True,
)
