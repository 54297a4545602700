"""Client library for the Pantry key-value storage service."""

from pantry.adapters.pantry import (
    AbstractPantryClient,
    HttpPantryClient,
    create_pantry_client,
    create_rate_limited_pantry_client,
)
from pantry.core.cancellation import CancellationToken
from pantry.core.errors import (
    AppError,
    CancelledAppError,
    DecodeAppError,
    PayloadTypeAppError,
    SerializationAppError,
    TransportAppError,
    ValidationAppError,
)
from pantry.schemas.pantry import BasketInfo, PantryInfo, UpdatedInfo

__all__ = [
    "AbstractPantryClient",
    "AppError",
    "BasketInfo",
    "CancellationToken",
    "CancelledAppError",
    "DecodeAppError",
    "HttpPantryClient",
    "PantryInfo",
    "PayloadTypeAppError",
    "SerializationAppError",
    "TransportAppError",
    "UpdatedInfo",
    "ValidationAppError",
    "create_pantry_client",
    "create_rate_limited_pantry_client",
]
