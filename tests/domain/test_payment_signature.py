"""Unit tests for gateway signing and callback decoding."""

import base64
import json
from decimal import Decimal

import pytest

from bookstore.domain.exceptions import SignatureMismatchError, ValidationError
from bookstore.domain.gateway.payment_gateway import GatewayStatus
from bookstore.domain.service.payment_signature import (
    build_message,
    decode_callback,
    encode_callback,
    sign,
    verify_signature,
)

SECRET = "8gBm/:&EnhH.1/q"


def _payload(**overrides) -> dict:
    fields = {
        "transaction_code": "000AWEO",
        "status": "COMPLETE",
        "total_amount": "1000.0",
        "transaction_uuid": "250610-162413",
        "product_code": "EPAYTEST",
        "signed_field_names": "transaction_code,status,total_amount,transaction_uuid,product_code,signed_field_names",
    }
    fields.update(overrides)
    names = fields["signed_field_names"].split(",")
    fields["signature"] = sign(build_message(fields, names), SECRET)
    return fields


class TestSign:

    def test_known_vector(self):
        message = "total_amount=100,transaction_uuid=11-201-13,product_code=EPAYTEST"
        assert sign(message, SECRET) == "5DZywcrTKD0gia/rsSMcrRHmJl+4Tbol6S+lWgdJ94E="

    def test_default_message_order(self):
        fields = {"product_code": "P", "total_amount": "10.00", "transaction_uuid": "ORD-1"}
        assert build_message(fields) == "total_amount=10.00,transaction_uuid=ORD-1,product_code=P"

    def test_missing_signed_field(self):
        with pytest.raises(ValidationError, match="Signed field missing"):
            build_message({"total_amount": "1"})


class TestDecodeAndVerify:

    def test_valid_callback(self):
        callback = decode_callback(encode_callback(_payload()))
        verify_signature(callback, SECRET)
        assert callback.total_amount == Decimal("1000.0")
        assert GatewayStatus.parse(callback.status) is GatewayStatus.COMPLETE

    def test_tampered_amount_fails_signature(self):
        fields = _payload()
        fields["total_amount"] = "1.0"
        callback = decode_callback(encode_callback(fields))
        with pytest.raises(SignatureMismatchError):
            verify_signature(callback, SECRET)

    def test_wrong_secret_fails(self):
        callback = decode_callback(encode_callback(_payload()))
        with pytest.raises(SignatureMismatchError):
            verify_signature(callback, "not-the-secret")

    def test_comma_amounts_are_accepted(self):
        callback = decode_callback(encode_callback(_payload(total_amount="1,000.0")))
        assert callback.total_amount == Decimal("1000.0")

    def test_not_base64(self):
        with pytest.raises(ValidationError, match="Malformed"):
            decode_callback("%%%not base64%%%")

    def test_not_an_object(self):
        encoded = base64.b64encode(json.dumps([1, 2]).encode()).decode()
        with pytest.raises(ValidationError, match="Malformed"):
            decode_callback(encoded)

    def test_signed_field_names_must_be_text(self):
        encoded = encode_callback({
            "status": "COMPLETE",
            "total_amount": "100",
            "transaction_uuid": "ORD-1",
            "signature": "x",
            "signed_field_names": ["total_amount", "transaction_uuid"],
        })
        with pytest.raises(ValidationError, match="Malformed"):
            decode_callback(encoded)

    def test_missing_fields(self):
        encoded = encode_callback({"status": "COMPLETE"})
        with pytest.raises(ValidationError, match="missing fields"):
            decode_callback(encoded)


class TestGatewayStatus:

    @pytest.mark.parametrize("raw, expected", [
        ("COMPLETE", GatewayStatus.COMPLETE),
        ("pending", GatewayStatus.PENDING),
        ("CANCELLED", GatewayStatus.CANCELED),
        ("CANCELED", GatewayStatus.CANCELED),
        ("FULL_REFUND", GatewayStatus.UNKNOWN),
        (None, GatewayStatus.UNKNOWN),
    ])
    def test_parse(self, raw, expected):
        assert GatewayStatus.parse(raw) is expected
