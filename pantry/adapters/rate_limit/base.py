"""Rate limiter interfaces.

The dispatcher depends on this abstraction (not the concrete implementation)
so the admission policy can be swapped (or faked in tests) without touching
the client adapters.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from pantry.core.cancellation import CancellationToken


@dataclass(frozen=True)
class Permit:
    """A single admission granted by a rate limiter.

    Attributes:
        admitted_at: Limiter clock time at which the caller was admitted.
        waited_seconds: Time the caller spent blocked before admission.
    """

    admitted_at: float
    waited_seconds: float


class AbstractRateLimiter(ABC):
    """Interface for blocking rate limiters."""

    @abstractmethod
    def acquire(self, *, cancel: CancellationToken | None = None) -> Permit:
        """Block until one permit is available.

        Args:
            cancel: Optional token; when it fires before admission the wait
                is abandoned.

        Returns:
            Permit describing the admission.

        Raises:
            CancelledAppError: If the token fires (or its deadline would pass)
                before a permit is granted.
        """
        raise NotImplementedError
