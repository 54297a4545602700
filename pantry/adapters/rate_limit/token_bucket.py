"""In-memory token-bucket rate limiter.

Notes:
- Per-process only: every client owns its own bucket.
- Thread-safe: a lock guards the token count and refill timestamp.
- FIFO: callers reserve the next permit under the lock and then sleep until
  their reserved admission time, so later arrivals are always admitted later.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Callable

from pantry.adapters.rate_limit.base import AbstractRateLimiter, Permit
from pantry.core.cancellation import CancellationToken
from pantry.core.errors import CancelledAppError, ValidationAppError

logger = logging.getLogger(__name__)


class TokenBucketRateLimiter(AbstractRateLimiter):
    """Blocking token bucket with a fixed refill rate and burst capacity.

    The bucket starts full. Each acquisition takes one token; tokens refill
    continuously at ``rate_per_second`` up to ``burst``. The token count may
    go negative: that debt is the queue of callers already promised a future
    admission time.

    Important:
        Refill is a passive clock computation. No timer thread is started.
    """

    def __init__(
        self,
        *,
        rate_per_second: float = 1.0,
        burst: int = 2,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] | None = None,
    ) -> None:
        """Initialize the token bucket.

        Args:
            rate_per_second: Permits refilled per second.
            burst: Maximum permits available back-to-back.
            clock: Monotonic time source in seconds.
            sleep: Optional sleep function. When provided it replaces the
                cancellable wait (used with fake clocks in tests); explicit
                cancellation is then checked after the sleep returns.

        Raises:
            ValidationAppError: If rate_per_second or burst are invalid.
        """
        if rate_per_second <= 0:
            raise ValidationAppError(
                code="invalid_rate_limit",
                message="rate_per_second must be > 0",
            )
        if burst < 1:
            raise ValidationAppError(
                code="invalid_rate_limit",
                message="burst must be >= 1",
            )

        self._rate = float(rate_per_second)
        self._burst = burst
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._tokens = float(burst)
        self._updated_at = clock()
        # Admission time of the most recent reservation.
        self._last_admission = self._updated_at

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"TokenBucketRateLimiter(rate_per_second={self._rate}, "
            f"burst={self._burst}, tokens={self._tokens:.2f})"
        )

    @property
    def rate_per_second(self) -> float:
        return self._rate

    @property
    def burst(self) -> int:
        return self._burst

    def _tokens_at_locked(self, now: float) -> float:
        """Token count at ``now`` after passive refill, capped at burst."""
        elapsed = max(0.0, now - self._updated_at)
        return min(float(self._burst), self._tokens + elapsed * self._rate)

    def _reserve(self, max_wait: float | None) -> tuple[float, float] | None:
        """Reserve the next permit.

        Args:
            max_wait: Longest acceptable wait, or None for unbounded.

        Returns:
            Tuple of (admitted_at, wait_seconds), or None when the wait would
            exceed max_wait (nothing is reserved in that case).
        """
        with self._lock:
            now = self._clock()
            tokens = self._tokens_at_locked(now) - 1.0
            wait = 0.0 if tokens >= 0 else -tokens / self._rate

            if max_wait is not None and wait > max_wait:
                return None

            self._tokens = tokens
            self._updated_at = max(self._updated_at, now)
            self._last_admission = max(self._last_admission, now + wait)
            return now + wait, wait

    def _release(self, admitted_at: float) -> None:
        """Give back a reserved permit that will not be used.

        Reservations made after this one keep their admission times, so only
        the part of the token they have not already been promised is restored.
        """
        with self._lock:
            now = self._clock()
            if admitted_at < now:
                return

            later = (self._last_admission - admitted_at) * self._rate
            restore = 1.0 - later
            if restore <= 0:
                return

            self._tokens = min(float(self._burst), self._tokens_at_locked(now) + restore)
            self._updated_at = max(self._updated_at, now)
            if admitted_at == self._last_admission:
                self._last_admission = max(now, admitted_at - 1.0 / self._rate)

    def _wait(self, seconds: float, cancel: CancellationToken | None) -> bool:
        """Sleep for ``seconds``; return True if cancelled meanwhile."""
        if self._sleep is not None:
            self._sleep(seconds)
            return cancel is not None and cancel.cancel_requested
        if cancel is None:
            time.sleep(seconds)
            return False
        return cancel.wait(seconds)

    def acquire(self, *, cancel: CancellationToken | None = None) -> Permit:
        """Block until a permit is granted or ``cancel`` fires.

        Args:
            cancel: Optional cancellation token.

        Returns:
            Permit with the admission time and the time spent waiting.

        Raises:
            CancelledAppError: If the token is already cancelled, its deadline
                would pass before the reserved admission time, or it is
                cancelled while waiting.
        """
        if cancel is not None and cancel.cancelled:
            raise CancelledAppError(
                code="cancelled",
                message="Cancelled before a rate limit permit was reserved",
            )

        max_wait = cancel.remaining() if cancel is not None else None
        reservation = self._reserve(max_wait)
        if reservation is None:
            logger.warning(
                "rate_limit.deadline_exceeded",
                extra={"deadline_remaining_s": max_wait},
            )
            raise CancelledAppError(
                code="deadline_exceeded",
                message="Rate limit wait would exceed the cancellation deadline",
                details={"timeout_seconds": max_wait or 0.0},
            )

        admitted_at, wait = reservation
        if wait > 0:
            logger.info(
                "rate_limit.wait",
                extra={
                    "wait_s": round(wait, 3),
                    "rate_per_s": self._rate,
                    "burst": self._burst,
                },
            )
            if self._wait(wait, cancel):
                self._release(admitted_at)
                logger.info("rate_limit.cancelled", extra={"wait_s": round(wait, 3)})
                raise CancelledAppError(
                    code="cancelled",
                    message="Cancelled while waiting for a rate limit permit",
                    details={"waited_seconds": wait},
                )

        return Permit(admitted_at=admitted_at, waited_seconds=wait)
