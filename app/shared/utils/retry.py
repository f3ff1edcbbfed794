"""Bounded retry with exponential backoff for outbound calls.

Used around every index write, cache invalidation and queue publish.
Delay before attempt n+1 is base_delay * 2**(n-1); there is no jitter.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry budget: total attempts and base delay in seconds."""

    max_attempts: int = 3
    base_delay: float = 1.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.base_delay < 0:
            raise ValueError("base_delay must be >= 0")

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after the given failed attempt (1-based)."""
        return self.base_delay * (2 ** (attempt - 1))


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    operation_name: str = "operation",
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Run operation until it succeeds or the policy is exhausted.

    Args:
        operation: Zero-arg coroutine factory; called once per attempt.
        policy: Attempts and base delay (default 3 attempts, 1s base).
        retry_on: Exception types that trigger another attempt. Anything
            else propagates immediately.
        operation_name: Label used in log messages.
        sleep: Awaitable sleep, injectable for tests.

    Returns:
        The operation's result.

    Raises:
        The last exception raised by operation once attempts are exhausted.
    """
    policy = policy or RetryPolicy()
    attempt = 1
    while True:
        try:
            return await operation()
        except retry_on as exc:
            if attempt >= policy.max_attempts:
                logger.error(
                    "%s failed after %d attempt(s): %s",
                    operation_name,
                    attempt,
                    exc,
                )
                raise
            delay = policy.delay_for(attempt)
            logger.warning(
                "%s attempt %d/%d failed (%s); retrying in %.2fs",
                operation_name,
                attempt,
                policy.max_attempts,
                exc,
                delay,
            )
            await sleep(delay)
            attempt += 1
