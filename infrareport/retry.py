"""Retry/backoff controller for upstream calls.

Wraps one remote operation with bounded retries and pure exponential backoff
(no jitter). Only quota- and rate-limit-shaped failures are retried; every
other error propagates after a single attempt. The rate limiter is consulted
before each attempt and credited only when a dispatch actually succeeded.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, TypeVar

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from infrareport.exceptions import (
    NetworkError,
    QuotaExceededError,
    RateLimitError,
    UpstreamError,
)
from infrareport.ratelimit import RateLimiter

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy. Delays are in seconds."""

    max_retries: int = 3
    initial_delay: float = 2.0
    max_delay: float = 30.0
    backoff_factor: float = 2.0

    def __post_init__(self):
        """Validate retry values."""
        if self.max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if self.initial_delay < 0:
            raise ValueError("initial_delay must be >= 0")
        if self.max_delay < self.initial_delay:
            raise ValueError("max_delay must be >= initial_delay")
        if self.backoff_factor < 1:
            raise ValueError("backoff_factor must be >= 1")


@dataclass(frozen=True)
class RetryNotice:
    """Emitted before every backoff sleep."""

    attempt: int
    max_attempts: int
    delay: float
    error: BaseException


def is_retryable(error: BaseException) -> bool:
    """Decide whether an error indicates quota exhaustion or rate limiting.

    Args:
        error: The exception raised by an attempt.

    Returns:
        True if the attempt should be retried.
    """
    if isinstance(error, (RateLimitError, QuotaExceededError)):
        return True
    if isinstance(error, (UpstreamError, NetworkError)):
        return error.status_code == 429 or "quota" in str(error).lower()
    return False


class RetryController:
    """Executes remote operations under the retry policy and rate limiter."""

    def __init__(
        self,
        rate_limiter: RateLimiter,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        on_retry: Optional[Callable[[RetryNotice], None]] = None,
    ):
        """Initialize the controller.

        Args:
            rate_limiter: Shared limiter consulted before every attempt.
            config: Retry policy. Defaults to RetryConfig().
            sleep: Coroutine used for backoff waits (injectable for tests).
            on_retry: Optional callback invoked before each backoff sleep.
        """
        self.rate_limiter = rate_limiter
        self.config = config or RetryConfig()
        self._sleep = sleep
        self.on_retry = on_retry
        self.last_attempts = 0
        self.last_dispatches = 0

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run an operation with retries.

        Args:
            operation: Zero-argument coroutine function performing the call.

        Returns:
            The operation's result.

        Raises:
            RateLimitError: If the local window stayed full on the last attempt.
            Exception: The last retryable error once retries are exhausted, or
                the first non-retryable error.
        """
        self.last_attempts = 0
        self.last_dispatches = 0

        retrying = AsyncRetrying(
            sleep=self._sleep,
            stop=stop_after_attempt(self.config.max_retries),
            wait=wait_exponential(
                multiplier=self.config.initial_delay,
                exp_base=self.config.backoff_factor,
                max=self.config.max_delay,
            ),
            retry=retry_if_exception(is_retryable),
            before_sleep=self._before_sleep,
            reraise=True,
        )
        return await retrying(self._attempt, operation)

    async def _attempt(self, operation: Callable[[], Awaitable[T]]) -> T:
        self.last_attempts += 1

        if not self.rate_limiter.can_proceed():
            wait_seconds = self.rate_limiter.time_until_next_slot()
            raise RateLimitError(
                f"Rate limit reached. Please wait {math.ceil(wait_seconds)} seconds.",
                wait_seconds=wait_seconds,
            )

        self.last_dispatches += 1
        logger.debug("Dispatching upstream request (attempt %d)", self.last_attempts)
        result = await operation()
        self.rate_limiter.record()
        return result

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        delay = retry_state.next_action.sleep if retry_state.next_action else 0.0
        error = retry_state.outcome.exception()
        logger.info(
            "Attempt %d/%d failed (%s), retrying in %.1fs",
            retry_state.attempt_number,
            self.config.max_retries,
            error,
            delay,
        )
        if self.on_retry is not None:
            self.on_retry(
                RetryNotice(
                    attempt=retry_state.attempt_number,
                    max_attempts=self.config.max_retries,
                    delay=delay,
                    error=error,
                )
            )
