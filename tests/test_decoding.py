"""Unit tests for response decoding (lenient and strict)."""

from dataclasses import dataclass, field
from typing import Optional

import pytest
from pydantic import BaseModel, Field

from pantry.core.errors import DecodeAppError, ValidationAppError
from pantry.schemas.pantry import BasketInfo, PantryInfo
from pantry.utils.decoding import _adapter, decode_body, resolve_shape, zero_value


class Address(BaseModel):
    city: str
    zip_code: str = Field(default="00000", alias="zipCode")


class Customer(BaseModel):
    name: str
    age: int = Field(ge=0)
    address: Address
    nickname: Optional[str] = None


class Shipment(BaseModel):
    reference: str = ""
    destination: Optional[Address] = None


@dataclass
class Counter:
    label: str
    count: int = 0
    history: list[int] = field(default_factory=list)


class TestLenientDecoding:
    """Default policy: never raise, keep defaults for what cannot be decoded."""

    def test_full_pantry_payload(self) -> None:
        body = (
            b'{"name": "p", "description": "d", "errors": ["e1"], "notifications": true,'
            b' "percentFull": 42, "baskets": [{"name": "a", "ttl": "10"}]}'
        )

        info = decode_body(body, PantryInfo)

        assert info.percent_full == 42
        assert info.errors == ["e1"]
        assert info.baskets == [BasketInfo(name="a", ttl="10")]

    @pytest.mark.parametrize("body", [b"", b"not json", b"[1, 2]", b'"text"', b"\xff\xfe"])
    def test_undecodable_bodies_yield_zero_values(self, body: bytes) -> None:
        assert decode_body(body, PantryInfo) == PantryInfo()

    def test_invalid_fields_fall_back_individually(self) -> None:
        body = b'{"name": "kept", "percentFull": "lots", "notifications": "maybe"}'

        info = decode_body(body, PantryInfo)

        assert info.name == "kept"
        assert info.percent_full == 0
        assert info.notifications is False

    def test_field_constraints_are_enforced(self) -> None:
        info = decode_body(b'{"percentFull": 150}', PantryInfo)

        assert info.percent_full == 0

    def test_required_fields_get_zero_values(self) -> None:
        customer = decode_body(b'{"age": -3}', Customer)

        assert customer.name == ""
        assert customer.age == 0
        assert customer.address.city == ""
        assert customer.address.zip_code == "00000"
        assert customer.nickname is None

    def test_nested_records_and_aliases(self) -> None:
        body = b'{"name": "ann", "age": 30, "address": {"city": "Oslo", "zipCode": "0150"}}'

        customer = decode_body(body, Customer)

        assert customer.address == Address(city="Oslo", zipCode="0150")

    def test_invalid_nested_field_keeps_valid_siblings(self) -> None:
        body = b'{"name": "ann", "address": {"city": "Oslo", "zip_code": 150}}'

        customer = decode_body(body, Customer)

        assert customer.name == "ann"
        assert customer.address.city == "Oslo"
        assert customer.address.zip_code == "00000"

    def test_optional_nested_record_is_decoded_field_by_field(self) -> None:
        body = b'{"reference": "r-1", "destination": {"city": 7, "zipCode": "0150"}}'

        shipment = decode_body(body, Shipment)

        assert shipment.reference == "r-1"
        assert shipment.destination == Address(city="", zipCode="0150")
        assert decode_body(b'{"destination": null}', Shipment).destination is None

    def test_nested_instance_values_survive_partial_update(self) -> None:
        current = Customer(name="ann", age=30, address=Address(city="Oslo", zipCode="0150"))

        decoded = decode_body(b'{"address": {"zipCode": "0151"}}', current)

        assert decoded.address == Address(city="Oslo", zipCode="0151")
        assert current.address.zip_code == "0150"

    def test_instance_values_are_kept_for_missing_fields(self) -> None:
        current = Counter(label="clicks", count=5, history=[1, 2])

        decoded = decode_body(b'{"count": 6}', current)

        assert decoded == Counter(label="clicks", count=6, history=[1, 2])
        assert current.count == 5

    def test_dataclass_class_shape(self) -> None:
        assert decode_body(b'{"label": "x", "count": "oops"}', Counter) == Counter(label="x")

    def test_dict_shape(self) -> None:
        assert decode_body(b'{"a": 1}', dict) == {"a": 1}
        assert decode_body(b"garbage", dict) == {}


class TestStrictDecoding:
    """Additive strict policy: decode failures raise DecodeAppError."""

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b""])
    def test_non_object_bodies_raise(self, body: bytes) -> None:
        with pytest.raises(DecodeAppError) as exc_info:
            decode_body(body, PantryInfo, strict=True)

        assert exc_info.value.code == "decode_failure"

    def test_validation_errors_raise(self) -> None:
        with pytest.raises(DecodeAppError) as exc_info:
            decode_body(b'{"percentFull": "lots"}', PantryInfo, strict=True)

        assert exc_info.value.details["target_type"] == "PantryInfo"

    def test_missing_required_fields_raise(self) -> None:
        with pytest.raises(DecodeAppError):
            decode_body(b'{"name": "ann"}', Customer, strict=True)

    def test_instance_shape_merges_before_validation(self) -> None:
        current = Counter(label="clicks", count=5)

        assert decode_body(b'{"count": 6}', current, strict=True) == Counter(label="clicks", count=6)

    def test_valid_payload_decodes(self) -> None:
        info = decode_body(b'{"name": "p", "percentFull": 3}', PantryInfo, strict=True)

        assert info.name == "p"
        assert info.percent_full == 3


class TestShapes:
    """Destination shape resolution and zero values."""

    @pytest.mark.parametrize("shape", ["text", 1, [], {"a": 1}, list, int])
    def test_invalid_shapes_rejected(self, shape) -> None:
        with pytest.raises(ValidationAppError):
            resolve_shape(shape)

    def test_instance_shape_records_instance(self) -> None:
        current = Counter(label="x")

        resolved = resolve_shape(current)

        assert resolved.target is Counter
        assert resolved.instance is current

    @pytest.mark.parametrize(
        ("annotation", "expected"),
        [
            (str, ""),
            (int, 0),
            (float, 0.0),
            (bool, False),
            (list[int], []),
            (dict[str, int], {}),
            (Optional[int], None),
            (int | None, None),
        ],
    )
    def test_zero_values(self, annotation, expected) -> None:
        assert zero_value(annotation) == expected

    def test_adapters_are_reused_per_annotation(self) -> None:
        assert _adapter(list[int]) is _adapter(list[int])
        assert _adapter(Address) is _adapter(Address)
