"""Outgoing basket payload validation and JSON encoding.

Basket writes only accept record-like values: pydantic model instances or
dataclass instances. Scalars, sequences, and mappings are rejected before
any request is built.
"""

from __future__ import annotations

import dataclasses
from typing import Any

from pydantic import BaseModel, PydanticSchemaGenerationError, TypeAdapter
from pydantic_core import PydanticSerializationError

from pantry.core.errors import PayloadTypeAppError, SerializationAppError


def is_record(value: Any) -> bool:
    """Return True for pydantic model instances and dataclass instances."""
    if isinstance(value, BaseModel):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def ensure_record(value: Any, *, operation: str) -> None:
    """Reject payloads that are not record-like.

    Args:
        value: Candidate basket payload.
        operation: Client operation name, for error details.

    Raises:
        PayloadTypeAppError: If value is not a record.
    """
    if is_record(value):
        return

    type_name = type(value).__name__
    raise PayloadTypeAppError(
        code="payload_type_mismatch",
        message=f"data must be a record (pydantic model or dataclass instance) but got {type_name}",
        details={
            "operation": operation,
            "payload_type": type_name,
            "hint": "Wrap the data in a pydantic model or a dataclass",
        },
    )


def encode_record(value: Any) -> bytes:
    """Serialize a record to JSON bytes, using field aliases where defined.

    Raises:
        SerializationAppError: If a field value cannot be encoded.
    """
    try:
        if isinstance(value, BaseModel):
            return value.model_dump_json(by_alias=True).encode("utf-8")
        return TypeAdapter(type(value)).dump_json(value, by_alias=True)
    except (PydanticSerializationError, PydanticSchemaGenerationError) as exc:
        raise SerializationAppError(
            code="serialization_failure",
            message=f"Could not encode {type(value).__name__} as JSON: {exc}",
            details={"payload_type": type(value).__name__},
        ) from exc

