"""Retry-with-backoff policy shared by every provider call that retries."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Generic, TypeVar

from reelforge.common.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Backoff = Callable[[int], float]
"""Maps a 1-based attempt number to the delay (seconds) that follows it."""


def linear_backoff(step_seconds: float) -> Backoff:
    """Delay grows by ``step_seconds`` per attempt (2s, 4s, 6s...)."""
    return lambda attempt: step_seconds * attempt


def exponential_backoff(initial_seconds: float, base: float) -> Backoff:
    """Delay is ``base ** attempt * initial_seconds``."""
    return lambda attempt: (base**attempt) * initial_seconds


def always_retry(_error: BaseException) -> bool:
    return True


class RetryExhaustedError(Exception):
    """Raised when every attempt of a retry policy has failed."""

    def __init__(self, attempts: int, last_error: BaseException | None = None):
        self.attempts = attempts
        self.last_error = last_error
        detail = str(last_error) if last_error else "no usable result"
        super().__init__(f"Gave up after {attempts} attempts: {detail}")


@dataclass
class RetryPolicy(Generic[T]):
    """Bounded retry with a pluggable backoff and retryability predicate.

    ``operation`` receives the 1-based attempt number. Returning ``None``
    counts as a failed attempt just like a retryable exception does; a
    non-retryable exception propagates immediately.
    """

    max_attempts: int = 3
    backoff: Backoff = field(default_factory=lambda: linear_backoff(1.0))
    is_retryable: Callable[[BaseException], bool] = always_retry
    delay_after_final_attempt: bool = False
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    name: str = "operation"

    async def run(
        self,
        operation: Callable[[int], Awaitable[T | None]],
        on_failure: Callable[[int, BaseException | None], None] | None = None,
    ) -> T:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        last_error: BaseException | None = None

        for attempt in range(1, self.max_attempts + 1):
            try:
                result = await operation(attempt)
            except Exception as e:
                if not self.is_retryable(e):
                    logger.warning(
                        "retry_aborted_non_retryable",
                        operation=self.name,
                        attempt=attempt,
                        error_type=type(e).__name__,
                        error=str(e),
                    )
                    raise
                last_error = e
                logger.warning(
                    "retry_attempt_failed",
                    operation=self.name,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error_type=type(e).__name__,
                    error=str(e),
                )
                if on_failure is not None:
                    on_failure(attempt, e)
            else:
                if result is not None:
                    return result
                logger.warning(
                    "retry_attempt_empty",
                    operation=self.name,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                )
                if on_failure is not None:
                    on_failure(attempt, None)

            is_final = attempt == self.max_attempts
            if not is_final or self.delay_after_final_attempt:
                await self.sleep(self.backoff(attempt))

        logger.error(
            "retry_exhausted",
            operation=self.name,
            attempts=self.max_attempts,
            error=str(last_error) if last_error else None,
        )
        raise RetryExhaustedError(self.max_attempts, last_error)
