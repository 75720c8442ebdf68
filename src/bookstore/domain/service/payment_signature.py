"""eSewa-style request signing and callback decoding.

The gateway signs ``"k1=v1,k2=v2,..."`` built from the fields named in
``signed_field_names`` with HMAC-SHA256 and base64-encodes the digest.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import hmac
import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Mapping, Sequence

from bookstore.domain.exceptions import SignatureMismatchError, ValidationError

DEFAULT_SIGNED_FIELDS = ("total_amount", "transaction_uuid", "product_code")


@dataclass(frozen=True)
class GatewayCallback:
    """Decoded callback body posted back by the gateway."""

    status: str
    total_amount: Decimal
    transaction_uuid: str
    product_code: str
    signature: str
    signed_field_names: tuple[str, ...]
    fields: Mapping[str, str]
    transaction_code: str | None = None


def format_amount(amount: Decimal) -> str:
    return f"{amount:.2f}"


def parse_amount(raw: object) -> Decimal:
    try:
        return Decimal(str(raw).replace(",", "").strip())
    except InvalidOperation as exc:
        raise ValidationError(f"Invalid payment amount: {raw!r}") from exc


def build_message(fields: Mapping[str, object], field_names: Sequence[str] = DEFAULT_SIGNED_FIELDS) -> str:
    try:
        return ",".join(f"{name}={fields[name]}" for name in field_names)
    except KeyError as exc:
        raise ValidationError(f"Signed field missing from payload: {exc.args[0]}") from exc


def sign(message: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), message.encode("utf-8"), hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_signature(callback: GatewayCallback, secret: str) -> None:
    expected = sign(build_message(callback.fields, callback.signed_field_names), secret)
    if not hmac.compare_digest(expected.encode("ascii"), callback.signature.encode("ascii")):
        raise SignatureMismatchError("Payment signature verification failed")


def decode_callback(encoded: str) -> GatewayCallback:
    """Decode the base64 JSON blob the gateway hands back."""
    try:
        raw = json.loads(base64.b64decode(encoded.strip(), validate=True).decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ValidationError("Malformed payment callback payload") from exc
    if not isinstance(raw, dict):
        raise ValidationError("Malformed payment callback payload")

    missing = [k for k in ("status", "total_amount", "transaction_uuid", "signature") if k not in raw]
    if missing:
        raise ValidationError(f"Payment callback missing fields: {', '.join(missing)}")

    names = raw.get("signed_field_names")
    if names is not None and not isinstance(names, str):
        raise ValidationError("Malformed payment callback payload")
    field_names = tuple(n.strip() for n in names.split(",")) if names else DEFAULT_SIGNED_FIELDS

    return GatewayCallback(
        status=str(raw["status"]),
        total_amount=parse_amount(raw["total_amount"]),
        transaction_uuid=str(raw["transaction_uuid"]),
        product_code=str(raw.get("product_code", "")),
        signature=str(raw["signature"]),
        signed_field_names=field_names,
        fields={k: str(v) for k, v in raw.items()},
        transaction_code=raw.get("transaction_code"),
    )


def encode_callback(fields: Mapping[str, object]) -> str:
    """Inverse of ``decode_callback``; used by tooling that replays callbacks."""
    return base64.b64encode(json.dumps(dict(fields)).encode("utf-8")).decode("ascii")
