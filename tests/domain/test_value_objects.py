"""Unit tests for domain value objects."""

from decimal import Decimal

import pytest

from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.value_objects import (
    Actor,
    Address,
    BaseStock,
    Money,
    Quantity,
    Role,
    VariantStock,
)


# ── Money ────────────────────────────────────────────────────────────────────


class TestMoney:

    def test_creation(self):
        m = Money(Decimal("10.50"))
        assert m.amount == Decimal("10.50")
        assert m.currency == "USD"

    def test_of_factory_from_string(self):
        m = Money.of("25.99")
        assert m.amount == Decimal("25.99")

    def test_of_factory_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid money amount"):
            Money.of("twelve")

    def test_negative_amount_rejected(self):
        with pytest.raises(ValidationError, match="cannot be negative"):
            Money(Decimal("-1"))

    def test_float_amount_rejected(self):
        with pytest.raises(ValidationError, match="must be a Decimal"):
            Money(10.5)

    def test_addition(self):
        result = Money.of("10") + Money.of("5.50")
        assert result == Money.of("15.50")

    def test_subtraction_going_negative_rejected(self):
        with pytest.raises(ValidationError, match="negative amount"):
            Money.of("5") - Money.of("10")

    def test_multiplication_by_int(self):
        result = Money.of("7.50") * 3
        assert result == Money.of("22.50")

    def test_currency_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="Cannot combine"):
            Money(Decimal("10"), "USD") + Money(Decimal("5"), "EUR")

    def test_str_formatting(self):
        assert str(Money.of("15")) == "$15.00"
        assert str(Money.of("9.5")) == "$9.50"

    def test_rounding_is_half_up(self):
        assert Money.of("0.005").rounded() == Money.of("0.01")
        assert Money.of("2.345").rounded() == Money.of("2.35")
        assert Money.of("2.344").rounded() == Money.of("2.34")

    def test_in_cents(self):
        assert Money.of("65.00").in_cents() == 6500
        assert Money.of("19.995").in_cents() == 2000

    def test_comparison_operators(self):
        assert Money.of("5") < Money.of("10")
        assert Money.of("10") > Money.of("5")
        assert Money.of("10") >= Money.of("10")
        assert Money.of("10") <= Money.of("10")


# ── Quantity ─────────────────────────────────────────────────────────────────


class TestQuantity:

    def test_valid_quantity(self):
        assert Quantity(5).value == 5

    def test_zero_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(0)

    def test_negative_rejected(self):
        with pytest.raises(ValidationError, match="must be positive"):
            Quantity(-3)

    def test_bool_rejected(self):
        with pytest.raises(ValidationError, match="must be an integer"):
            Quantity(True)

    def test_str(self):
        assert str(Quantity(7)) == "7"


# ── Stock locations ──────────────────────────────────────────────────────────


class TestStockLocation:

    def test_locations_compare_by_value(self):
        assert BaseStock("P1") == BaseStock("P1")
        assert VariantStock("P1", "v1") != VariantStock("P1", "v2")

    def test_locations_are_hashable(self):
        counts = {BaseStock("P1"): 1, VariantStock("P1", "v1"): 2}
        assert counts[VariantStock("P1", "v1")] == 2

    def test_describe(self):
        assert VariantStock("P1", "v1").describe() == "product P1 variant v1"


# ── Actor / Address ──────────────────────────────────────────────────────────


class TestActor:

    def test_roles(self):
        assert Actor("u1", Role.ADMIN).is_admin
        assert Actor("v1", Role.VENDOR).is_vendor
        assert not Actor("c1", Role.CUSTOMER).is_vendor

    def test_blank_user_id_rejected(self):
        with pytest.raises(ValidationError, match="user id is required"):
            Actor("  ", Role.CUSTOMER)


class TestAddress:

    def test_missing_city_rejected(self):
        with pytest.raises(ValidationError, match="city is required"):
            Address(street="1 Main St", city="", state="IL", zip_code="62701", country="US")

    def test_phone_is_optional(self):
        address = Address("1 Main St", "Springfield", "IL", "62701", "US")
        assert address.phone is None
