"""Rate limiting adapters.

This package provides a small abstraction layer so the dispatcher can start
with an in-process token bucket and later move to a shared store without
changing the client adapters.
"""

from pantry.adapters.rate_limit.base import AbstractRateLimiter, Permit
from pantry.adapters.rate_limit.token_bucket import TokenBucketRateLimiter

__all__ = [
    "AbstractRateLimiter",
    "Permit",
    "TokenBucketRateLimiter",
]
