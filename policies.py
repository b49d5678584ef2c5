"""Retry and timeout policies wrapped around async request operations."""

from __future__ import annotations

import asyncio
import functools
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Tuple, Type, TypeVar

from errors import RateLimitedError, RequestTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Operation = Callable[[], Awaitable[T]]
Sleep = Callable[[float], Awaitable[None]]
Exhausted = Callable[[int, Exception], Exception]


class RetryableError(Exception):
    """Raised by an operation to ask the retry policy for another attempt."""

    def __init__(self, message: str, cause: Exception | None = None):
        self.cause = cause
        super().__init__(message)


@dataclass
class RetryPolicy:
    """Bounded retry with exponential backoff.

    Only exceptions listed in ``retry_on`` are retried. Attempts are numbered
    from 1 and the wait after a failed attempt is ``base ** attempt`` seconds.
    When the last attempt fails with a retryable error, the exception built by
    ``exhausted(attempts, last_error)`` is raised; every other exception
    propagates on the first occurrence.
    """

    max_attempts: int = 3
    base: float = 2.0
    retry_on: Tuple[Type[BaseException], ...] = (RetryableError,)
    exhausted: Exhausted = RateLimitedError
    sleep: Sleep = field(default=asyncio.sleep, repr=False)

    def backoff(self, attempt: int) -> float:
        return self.base ** attempt

    async def run(self, operation: Operation[T]) -> T:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except self.retry_on as exc:
                if attempt == self.max_attempts:
                    logger.error("Retries exhausted", extra={"attempts": attempt})
                    raise self.exhausted(attempt, exc) from exc
                delay = self.backoff(attempt)
                logger.warning(
                    "Attempt failed, retrying",
                    extra={"attempt": attempt, "delay_s": delay},
                )
                await self.sleep(delay)
        raise AssertionError("unreachable")  # pragma: no cover

    def __call__(self, func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await self.run(lambda: func(*args, **kwargs))

        return wrapper


@dataclass
class TimeoutPolicy:
    """Cancels an operation that has not finished within ``timeout_s``."""

    timeout_s: float = 10.0

    async def run(self, operation: Operation[T]) -> T:
        try:
            return await asyncio.wait_for(operation(), timeout=self.timeout_s)
        except asyncio.TimeoutError as exc:
            logger.error("Request timed out", extra={"timeout_s": self.timeout_s})
            raise RequestTimeoutError(self.timeout_s, cause=exc) from exc

    def __call__(self, func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> T:
            return await self.run(lambda: func(*args, **kwargs))

        return wrapper
