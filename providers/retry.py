"""
Module 07 - Providers
File: retry.py

Bounded retry with exponential backoff for collaborator calls.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """
    max_attempts counts the first call; delays grow from min_delay_s by
    `multiplier` and are capped at max_delay_s.
    """
    max_attempts: int = 5
    min_delay_s: float = 5.0
    multiplier: float = 1.5
    max_delay_s: float = 60.0

    def delay_for(self, attempt: int) -> float:
        """Delay after the given (1-based) failed attempt."""
        return min(self.min_delay_s * self.multiplier ** (attempt - 1), self.max_delay_s)


def _retryable_by_default(error: Exception) -> bool:
    return bool(getattr(error, "retryable", True))


def retry_call(
    fn: Callable[[], T],
    policy: RetryPolicy,
    *,
    should_retry: Callable[[Exception], bool] = _retryable_by_default,
    sleep: Callable[[float], None] = time.sleep,
    description: str = "call",
) -> T:
    """
    Call `fn` until it succeeds, the policy is exhausted, or `should_retry`
    rejects the error. The last error is re-raised unchanged.
    """
    last_error: Optional[Exception] = None
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return fn()
        except Exception as e:
            last_error = e
            if attempt >= policy.max_attempts or not should_retry(e):
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s; retrying in %.1fs",
                description, attempt, policy.max_attempts, e, delay,
            )
            sleep(delay)

    # max_attempts < 1
    raise RuntimeError(f"{description}: retry policy allows no attempts") from last_error
