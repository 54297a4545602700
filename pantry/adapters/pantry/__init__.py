"""Pantry client adapter layer."""

from pantry.adapters.pantry.base import AbstractPantryClient
from pantry.adapters.pantry.factory import (
    create_dispatcher,
    create_pantry_client,
    create_rate_limited_pantry_client,
)
from pantry.adapters.pantry.http_client import HttpPantryClient

__all__ = [
    "AbstractPantryClient",
    "HttpPantryClient",
    "create_dispatcher",
    "create_pantry_client",
    "create_rate_limited_pantry_client",
]
