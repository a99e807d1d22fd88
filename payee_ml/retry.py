"""Retry policy for calls to the inference endpoint.

Two independent backoff tracks:

- generic: ``base_delay * 2**attempt`` scaled by a random jitter factor in
  ``[1 - jitter, 1 + jitter]``; a rate-limited attempt never waits less than
  ``rate_limit_floor``.
- rate limit: after the n-th consecutive 429 an extra
  ``min(rate_limit_base_delay * 2**(n - 1), rate_limit_max_delay)`` wait.
  The counter resets on any other outcome.

Usage:
    policy = RetryPolicy.from_settings(settings)
    job = await policy.run(lambda: client.retrieve_batch(job_id), operation="poll")
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

from payee_ml.exceptions import RateLimitError, UpstreamError, UpstreamTimeoutError

if TYPE_CHECKING:
    from payee_ml.config import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(error: BaseException) -> bool:
    """Default predicate: upstream errors flagged retryable."""
    return isinstance(error, UpstreamError) and error.retryable


@dataclass
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    jitter: float = 0.2
    rate_limit_floor: float = 10.0
    rate_limit_base_delay: float = 5.0
    rate_limit_max_delay: float = 60.0
    timeout: float | None = None
    retryable: Callable[[BaseException], bool] = is_retryable
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)
    rng: Callable[[], float] = field(default=random.random, repr=False)

    @classmethod
    def from_settings(
        cls, settings: Settings, timeout: float | None = None
    ) -> RetryPolicy:
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            jitter=settings.retry_jitter,
            rate_limit_floor=settings.rate_limit_floor,
            rate_limit_base_delay=settings.rate_limit_base_delay,
            rate_limit_max_delay=settings.rate_limit_max_delay,
            timeout=timeout,
        )

    def backoff_delay(self, attempt: int, rate_limited: bool = False) -> float:
        """Delay after failed ``attempt`` (0-based) on the generic track."""
        delay = self.base_delay * 2**attempt
        if rate_limited:
            delay = max(delay, self.rate_limit_floor)
        factor = 1 - self.jitter + 2 * self.jitter * self.rng()
        return delay * factor

    def rate_limit_delay(self, consecutive: int) -> float:
        """Extra wait after the ``consecutive``-th rate limit in a row."""
        if consecutive <= 0:
            return 0.0
        return min(
            self.rate_limit_base_delay * 2 ** (consecutive - 1),
            self.rate_limit_max_delay,
        )

    async def run(
        self, fn: Callable[[], Awaitable[T]], operation: str = "request"
    ) -> T:
        """Call ``fn`` until it succeeds, fails permanently, or attempts run out."""
        consecutive_rate_limits = 0
        for attempt in range(self.max_attempts):
            try:
                if self.timeout is None:
                    return await fn()
                try:
                    return await asyncio.wait_for(fn(), self.timeout)
                except asyncio.TimeoutError as e:
                    raise UpstreamTimeoutError(
                        f"{operation} timed out after {self.timeout:.1f}s"
                    ) from e
            except Exception as e:
                if not self.retryable(e):
                    raise
                last_attempt = attempt + 1 >= self.max_attempts
                rate_limited = isinstance(e, RateLimitError)
                consecutive_rate_limits = consecutive_rate_limits + 1 if rate_limited else 0

                if last_attempt:
                    logger.warning(
                        "%s failed after %d attempts: %s",
                        operation,
                        self.max_attempts,
                        e,
                    )
                    raise

                delay = self.backoff_delay(attempt, rate_limited)
                if rate_limited:
                    delay += self.rate_limit_delay(consecutive_rate_limits)
                    if e.retry_after is not None:
                        delay = max(delay, e.retry_after)

                logger.info(
                    "%s attempt %d/%d failed (%s), retrying in %.1fs",
                    operation,
                    attempt + 1,
                    self.max_attempts,
                    type(e).__name__,
                    delay,
                )
                await self.sleep(delay)

        raise RuntimeError("unreachable")  # pragma: no cover
