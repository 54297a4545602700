"""HTTP dispatch layer - every Pantry request goes through a dispatcher."""

from pantry.adapters.transport.base import AbstractDispatcher
from pantry.adapters.transport.dispatcher import HttpDispatcher, RateLimitedDispatcher

__all__ = [
    "AbstractDispatcher",
    "HttpDispatcher",
    "RateLimitedDispatcher",
]
