"""Library-level exception types.

This module defines the errors raised by the dispatcher and the client
adapters, enabling consistent handling by callers and structured logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and callers.

    Fields are optional; each error fills in what it knows.
    """

    code: str
    message: str
    hint: str
    operation: str
    method: str
    path: str
    http_status: int
    payload_type: str
    target_type: str
    waited_seconds: float
    timeout_seconds: float
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for client failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class PayloadTypeAppError(ValidationAppError):
    """Raised when a write operation receives a non-record payload."""


class SerializationAppError(AppError):
    """Raised when an outgoing payload cannot be encoded as JSON."""


class TransportAppError(AppError):
    """Raised when the HTTP transport fails (connect, read, timeout, DNS).

    The underlying ``httpx`` exception is chained as ``__cause__``.
    """


class CancelledAppError(AppError):
    """Raised when the caller's cancellation token fires before completion."""


class DecodeAppError(AppError):
    """Raised in strict decoding mode when a response body cannot be decoded."""
