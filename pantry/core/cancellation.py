"""Cancellation tokens threaded through every client operation.

A token combines an explicit ``cancel()`` signal with an optional deadline.
Blocking waits (permit acquisition) wake up as soon as either fires; network
calls use the remaining deadline as their timeout.
"""

from __future__ import annotations

import threading
import time
from typing import Callable


class CancellationToken:
    """Thread-safe cancellation signal with an optional deadline.

    Attributes:
        deadline: Absolute time (in ``clock`` units) after which the token
            counts as cancelled, or None for no deadline.
    """

    def __init__(
        self,
        *,
        deadline: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._event = threading.Event()
        self._clock = clock
        self.deadline = deadline

    @classmethod
    def with_timeout(
        cls,
        timeout_seconds: float,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> CancellationToken:
        """Build a token that expires ``timeout_seconds`` from now.

        Raises:
            ValueError: If timeout_seconds is negative.
        """
        if timeout_seconds < 0:
            raise ValueError("timeout_seconds must be >= 0")
        return cls(deadline=clock() + timeout_seconds, clock=clock)

    def __repr__(self) -> str:  # pragma: no cover - representation only
        return (
            f"CancellationToken(cancel_requested={self._event.is_set()}, "
            f"deadline={self.deadline})"
        )

    def cancel(self) -> None:
        """Fire the token, waking up any waiter."""
        self._event.set()

    @property
    def cancel_requested(self) -> bool:
        """True once cancel() has been called."""
        return self._event.is_set()

    @property
    def expired(self) -> bool:
        """True once the deadline has passed."""
        return self.deadline is not None and self._clock() >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self.cancel_requested or self.expired

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is none."""
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - self._clock())

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds``, returning early if cancel() is called.

        The deadline is not consulted here; callers that sleep towards a
        known instant check it up front.

        Returns:
            True if cancel() was called before the full duration elapsed.
        """
        return self._event.wait(seconds)
