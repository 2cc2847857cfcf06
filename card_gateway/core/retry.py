"""Retry combinator shared by the submission workflow steps."""

import asyncio
from typing import Awaitable, Callable, Tuple, Type, TypeVar

import structlog

logger = structlog.get_logger(__name__)

T = TypeVar("T")

BackoffFn = Callable[[int], float]
SleepFn = Callable[[float], Awaitable[None]]


def linear_backoff(base_seconds: float = 1.0) -> BackoffFn:
    """
    Build a linear backoff schedule.

    The returned function maps the number of the attempt that just failed
    (1-based) to the delay before the next one: 1s, 2s, 3s... for the
    default base.
    """

    def backoff(attempt: int) -> float:
        return attempt * base_seconds

    return backoff


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    backoff: BackoffFn | None = None,
    retry_on: Tuple[Type[BaseException], ...] = (Exception,),
    description: str = "operation",
    sleep: SleepFn = asyncio.sleep,
    on_retry: Callable[[int, BaseException], None] | None = None,
) -> T:
    """
    Run ``operation`` until it succeeds or ``max_attempts`` is reached.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates on the first occurrence. There is no wait after the last
    attempt, and the last error is re-raised unchanged.

    Args:
        operation: Zero-argument coroutine factory, called once per attempt
        max_attempts: Total number of attempts (not retries)
        backoff: Maps the failed attempt number to a delay in seconds
        retry_on: Exception types that count as retryable
        description: Human-readable name used in log events
        sleep: Awaitable sleep, injectable for tests
        on_retry: Callback invoked before each retry with the failed
            attempt number and its error

    Returns:
        Whatever ``operation`` returns on its first successful attempt
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    backoff = backoff or linear_backoff()

    for attempt in range(1, max_attempts + 1):
        try:
            logger.debug(
                "retry_attempt_started",
                operation=description,
                attempt=attempt,
                max_attempts=max_attempts,
            )
            return await operation()
        except retry_on as e:
            logger.warning(
                "retry_attempt_failed",
                operation=description,
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(e),
            )

            if attempt == max_attempts:
                logger.error(
                    "retry_exhausted",
                    operation=description,
                    max_attempts=max_attempts,
                    error=str(e),
                )
                raise

            if on_retry is not None:
                on_retry(attempt, e)

            await sleep(backoff(attempt))

    # Unreachable: the loop either returns or raises
    raise RuntimeError(f"Retry loop for {description} exited without a result")
