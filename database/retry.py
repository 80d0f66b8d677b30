"""Capped exponential backoff for transient backend failures."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from database.exceptions import is_retryable

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 5.0

    @classmethod
    def from_config(cls, cfg) -> "RetryPolicy":
        return cls(
            max_retries=cfg.RETRY_MAX_RETRIES,
            base_delay=cfg.RETRY_BASE_DELAY,
            max_delay=cfg.RETRY_MAX_DELAY,
        )


NO_RETRY = RetryPolicy(max_retries=0)


def backoff_delay(attempt: int, policy: RetryPolicy) -> float:
    """Delay before retry number `attempt` (1-based): base * 2^(attempt-1), capped."""
    attempt = max(1, attempt)
    return min(policy.base_delay * (2 ** (attempt - 1)), policy.max_delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: Optional[RetryPolicy] = None,
    *,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run `operation`, retrying only classified transient errors.

    The last error is re-raised once retries are exhausted. Non-retryable
    errors propagate on the first failure.
    """
    policy = policy or RetryPolicy()
    attempt = 0
    while True:
        try:
            return await operation()
        except Exception as e:
            if attempt >= policy.max_retries or not is_retryable(e):
                raise
            attempt += 1
            delay = backoff_delay(attempt, policy)
            logger.warning(
                "Transient failure (%s), retry %d/%d in %.2fs",
                getattr(e, "code", type(e).__name__), attempt, policy.max_retries, delay,
            )
            await sleep(delay)
