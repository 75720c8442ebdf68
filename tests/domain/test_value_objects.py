"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from bookstore.domain.exceptions import ValidationError
from bookstore.domain.model.value_objects import Money, Quantity, ShippingAddress


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "NPR"

    def test_of_factory_from_string(self):
        assert Money.of("25.99").amount == Decimal("25.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("ten")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_zero_price_allowed(self):
        assert Money.of("0").is_zero

    def test_addition(self):
        assert Money.of("10") + Money.of("5.50") == Money.of("15.50")

    def test_multiplication_by_int(self):
        assert Money.of("7.50") * 3 == Money.of("22.50")

    def test_multiplication_by_float_rejected(self):
        with pytest.raises(TypeError):
            Money.of("7.50") * 1.5

    def test_scaled_rounds_half_up(self):
        # 0.3125 * 0.08 = 0.025 -> 0.03
        assert Money.of("0.3125").scaled(Decimal("0.08")) == Money.of("0.03")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "NPR") + Money(Decimal("5"), "EUR")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "Rs. 15.00"
        assert str(Money.of("9.5")) == "Rs. 9.50"


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="at least 1"):
            Quantity(-3)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)


# ── ShippingAddress ──────────────────────────────────────────────────────────


def _address(**overrides) -> ShippingAddress:
    fields = dict(
        full_name="Sita Sharma",
        phone_number="9800000000",
        address="Lazimpat 12",
        city="Kathmandu",
        state="Bagmati",
        zip_code="44600",
    )
    fields.update(overrides)
    return ShippingAddress(**fields)


class TestShippingAddress:

    def test_country_defaults_to_usa(self):
        assert _address().country == "USA"

    def test_blank_field_rejected(self):
        with pytest.raises(ValidationError, match="city is required"):
            _address(city="  ")

    def test_dict_round_trip(self):
        addr = _address(country="Nepal")
        assert ShippingAddress.from_dict(addr.to_dict()) == addr

    def test_from_dict_missing_field(self):
        raw = _address().to_dict()
        del raw["zip_code"]
        with pytest.raises(ValidationError, match="zip code is required"):
            ShippingAddress.from_dict(raw)
