"""Response body decoding into caller-supplied destination shapes.

Two policies are supported:

- Lenient (default): a body that is not JSON, not a JSON object, or whose
  fields do not validate never raises. Each field that cannot be decoded
  keeps its default (the destination instance's current value, the field's
  declared default, or the zero value of its type).
- Strict: any of those conditions raises DecodeAppError.

Destination shapes are a record class (pydantic model or dataclass), a record
instance, or ``dict`` for an untyped JSON object.
"""

from __future__ import annotations

import dataclasses
import functools
import json
import logging
import types
import typing
from collections.abc import Mapping, Set
from enum import Enum
from typing import Annotated, Any, Literal, Union, get_args, get_origin

from pydantic import BaseModel, TypeAdapter, ValidationError

from pantry.core.errors import DecodeAppError, ValidationAppError

logger = logging.getLogger(__name__)

_MISSING = object()


@dataclasses.dataclass(frozen=True)
class Shape:
    """Normalized destination shape.

    Attributes:
        target: Record class, or ``dict`` for untyped objects.
        instance: Record instance whose values act as defaults, if any.
    """

    target: type
    instance: Any = None

    @property
    def name(self) -> str:
        return self.target.__name__


def _is_record_class(value: Any) -> bool:
    return isinstance(value, type) and (
        issubclass(value, BaseModel) or dataclasses.is_dataclass(value)
    )


def resolve_shape(shape: Any) -> Shape:
    """Normalize a caller-supplied destination shape.

    Raises:
        ValidationAppError: If the shape is not a record class, a record
            instance, or ``dict``.
    """
    if shape is dict:
        return Shape(target=dict)
    if _is_record_class(shape):
        return Shape(target=shape)
    if isinstance(shape, BaseModel) or (
        dataclasses.is_dataclass(shape) and not isinstance(shape, type)
    ):
        return Shape(target=type(shape), instance=shape)

    raise ValidationAppError(
        code="invalid_destination",
        message=(
            "destination must be a pydantic model or dataclass (class or instance) "
            f"or dict, got {shape!r}"
        ),
        details={"target_type": type(shape).__name__},
    )


def zero_value(annotation: Any) -> Any:
    """Return the zero value for a type annotation ("" for str, 0 for int, ...).

    Optional, Any, and unknown types map to None; nested records map to a
    record built entirely from defaults.
    """
    origin = get_origin(annotation)
    if origin is Annotated:
        return zero_value(get_args(annotation)[0])
    if annotation is Any or annotation is None or annotation is type(None):
        return None
    if origin is Union or origin is types.UnionType:
        args = get_args(annotation)
        if type(None) in args:
            return None
        return zero_value(args[0])
    if origin is Literal:
        return get_args(annotation)[0]

    container = origin or annotation
    if not isinstance(container, type):
        return None
    if issubclass(container, Enum):
        return None
    if _is_record_class(container):
        return _build_lenient(container, None, {})
    if issubclass(container, Mapping):
        return {}
    if issubclass(container, Set):
        return set()
    if container in (bool, int, float, complex, str, bytes, list, tuple, dict, set, frozenset):
        return container()
    if container.__module__ == "collections.abc":
        return []
    return None


def _nested_record_class(annotation: Any) -> type | None:
    """Record class behind a field annotation (bare, Annotated or Optional)."""
    origin = get_origin(annotation)
    if origin is Annotated:
        return _nested_record_class(get_args(annotation)[0])
    if origin is Union or origin is types.UnionType:
        args = [arg for arg in get_args(annotation) if arg is not type(None)]
        return _nested_record_class(args[0]) if len(args) == 1 else None
    if origin is None and _is_record_class(annotation):
        return annotation
    return None


@functools.lru_cache(maxsize=256)
def _cached_adapter(annotation: Any) -> TypeAdapter:
    return TypeAdapter(annotation)


def _adapter(annotation: Any) -> TypeAdapter:
    """TypeAdapter for ``annotation``, reused across decodes when hashable."""
    try:
        hash(annotation)
    except TypeError:
        return TypeAdapter(annotation)
    return _cached_adapter(annotation)


def _field_specs(target: type) -> list[tuple[str, str, Any, Any]]:
    """List (name, wire key, annotation, declared default) for a record class."""
    specs: list[tuple[str, str, Any, Any]] = []

    if issubclass(target, BaseModel):
        for name, field in target.model_fields.items():
            annotation = field.annotation
            if field.metadata:
                annotation = Annotated[(annotation, *field.metadata)]
            default = _MISSING
            if not field.is_required():
                default = field.get_default(call_default_factory=True)
            specs.append((name, field.alias or name, annotation, default))
        return specs

    hints = typing.get_type_hints(target, include_extras=True)
    for field in dataclasses.fields(target):
        if not field.init:
            continue
        default = _MISSING
        if field.default is not dataclasses.MISSING:
            default = field.default
        elif field.default_factory is not dataclasses.MISSING:
            default = field.default_factory()
        specs.append((field.name, field.name, hints.get(field.name, Any), default))
    return specs


def _build_lenient(target: type, instance: Any, data: Mapping[str, Any]) -> Any:
    """Build ``target`` field by field, keeping defaults for undecodable values."""
    values: dict[str, Any] = {}
    rejected: list[str] = []

    for name, key, annotation, default in _field_specs(target):
        if instance is not None:
            fallback = getattr(instance, name)
        elif default is not _MISSING:
            fallback = default
        else:
            fallback = zero_value(annotation)

        raw = data.get(key, data.get(name, _MISSING))
        if raw is _MISSING:
            values[name] = fallback
            continue

        nested = _nested_record_class(annotation)
        if nested is not None and isinstance(raw, Mapping):
            current = fallback if isinstance(fallback, nested) else None
            values[name] = _build_lenient(nested, current, raw)
            continue

        try:
            values[name] = _adapter(annotation).validate_python(raw)
        except ValidationError:
            rejected.append(key)
            values[name] = fallback

    if rejected:
        logger.debug(
            "pantry.decode_fallback",
            extra={"target_type": target.__name__, "rejected_fields": rejected},
        )

    if issubclass(target, BaseModel):
        return target.model_construct(**values)
    return target(**values)


def _parse_object(body: bytes, shape: Shape, *, strict: bool) -> dict[str, Any] | None:
    """Parse a JSON object body, or return None (lenient) / raise (strict)."""
    try:
        data = json.loads(body) if body else None
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        if strict:
            raise DecodeAppError(
                code="decode_failure",
                message=f"Response body is not valid JSON: {exc}",
                details={"target_type": shape.name},
            ) from exc
        logger.debug(
            "pantry.decode_fallback",
            extra={"target_type": shape.name, "reason": "invalid_json"},
        )
        return None

    if isinstance(data, dict):
        return data

    if strict:
        raise DecodeAppError(
            code="decode_failure",
            message=f"Response body is not a JSON object (got {type(data).__name__})",
            details={"target_type": shape.name},
        )
    logger.debug(
        "pantry.decode_fallback",
        extra={"target_type": shape.name, "reason": "not_an_object"},
    )
    return None


def _instance_values(instance: Any) -> dict[str, Any]:
    if isinstance(instance, BaseModel):
        return instance.model_dump(by_alias=True)
    return dataclasses.asdict(instance)


def decode_body(body: bytes, shape: Any, *, strict: bool = False) -> Any:
    """Decode a response body into the destination shape.

    Args:
        body: Raw response bytes.
        shape: Record class, record instance, ``dict``, or a resolved Shape.
        strict: Raise DecodeAppError instead of falling back to defaults.

    Returns:
        A new instance of the destination type (or a dict).

    Raises:
        DecodeAppError: In strict mode, when the body cannot be decoded.
    """
    resolved = shape if isinstance(shape, Shape) else resolve_shape(shape)
    data = _parse_object(body, resolved, strict=strict)

    if resolved.target is dict:
        return data if data is not None else {}

    if not strict:
        return _build_lenient(resolved.target, resolved.instance, data or {})

    merged = _instance_values(resolved.instance) if resolved.instance is not None else {}
    merged.update(data or {})
    try:
        return _adapter(resolved.target).validate_python(merged)
    except ValidationError as exc:
        raise DecodeAppError(
            code="decode_failure",
            message=f"Response body does not match {resolved.name}: {exc.error_count()} error(s)",
            details={
                "target_type": resolved.name,
                "context": {"errors": exc.errors(include_url=False)},
            },
        ) from exc
