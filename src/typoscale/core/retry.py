"""Bounded retry with exponential backoff for external calls."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from typoscale.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Maximum number of attempts, including the first.
        initial_delay: Delay in seconds before the first retry.
        max_delay: Upper bound on any single delay.
        jitter_max: Maximum random jitter added to each delay.
        retry_exceptions: Exception types that trigger another attempt.
    """

    max_attempts: int = 3
    initial_delay: float = 1.0
    max_delay: float = 30.0
    jitter_max: float = 1.0
    retry_exceptions: tuple[type[BaseException], ...] = (Exception,)

    def with_attempts(self, max_attempts: int) -> RetryConfig:
        return replace(self, max_attempts=max(1, max_attempts))


async def call_with_retry(
    func: Callable[[], Awaitable[T]],
    config: RetryConfig,
    *,
    operation: str,
) -> T:
    """Await ``func`` until it succeeds or attempts run out.

    Exceptions outside ``config.retry_exceptions`` propagate immediately; the
    last retryable exception is re-raised once attempts are exhausted.
    """
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(config.max_attempts),
        wait=wait_exponential_jitter(
            initial=config.initial_delay,
            max=config.max_delay,
            jitter=config.jitter_max,
        ),
        retry=retry_if_exception_type(config.retry_exceptions),
        reraise=True,
    ):
        with attempt:
            attempt_number = attempt.retry_state.attempt_number
            if attempt_number > 1:
                logger.warning(
                    "retry_attempt",
                    operation=operation,
                    attempt=attempt_number,
                    max_attempts=config.max_attempts,
                )
            return await func()

    raise RuntimeError("Retry loop exited unexpectedly")
