"""Integration tests for the coupon administration and validation use cases."""

from datetime import datetime, timedelta, timezone

import pytest

from bazaar.application.create_coupon import CreateCouponHandler
from bazaar.application.create_order import CreateOrderHandler
from bazaar.application.delete_coupon import DeleteCouponHandler
from bazaar.application.dto import OrderItemSpec, PricingSpec
from bazaar.application.show_coupon import ShowCouponHandler
from bazaar.application.update_coupon import UpdateCouponHandler
from bazaar.application.validate_coupon import ValidateCouponHandler
from bazaar.domain.exceptions import (
    CouponInvalidError,
    EntityNotFoundError,
    UnauthorizedError,
    ValidationError,
)
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Actor, Address, Money, Role
from tests.fakes import FakeCouponRepository, FakeOrderRepository, FakeProductRepository

ADMIN = Actor("root", Role.ADMIN)
CUSTOMER = Actor("alice", Role.CUSTOMER)
NOW = datetime.now(timezone.utc)


def _create(repo, **overrides):
    fields = dict(
        code="welcome",
        discount_type="percentage",
        discount_value="10",
        start_date=NOW - timedelta(days=1),
        end_date=NOW + timedelta(days=7),
    )
    fields.update(overrides)
    return CreateCouponHandler(repo).handle(ADMIN, **fields)


class TestCreateCoupon:

    def test_admin_creates_coupon(self):
        repo = FakeCouponRepository()
        dto = _create(repo, max_discount_amount="15", usage_limit=100)
        assert dto.code == "WELCOME"
        assert dto.max_discount_amount == "15.00"
        assert dto.usage_limit == 100
        assert repo.get_by_code("Welcome") is not None

    def test_only_admin(self):
        with pytest.raises(UnauthorizedError):
            CreateCouponHandler(FakeCouponRepository()).handle(
                CUSTOMER, "X", "fixed", "5", NOW, NOW + timedelta(days=1)
            )

    def test_duplicate_code_rejected(self):
        repo = FakeCouponRepository()
        _create(repo)
        with pytest.raises(ValidationError, match="'WELCOME' already exists"):
            _create(repo, code="Welcome")

    def test_unknown_discount_type(self):
        with pytest.raises(ValidationError, match="Invalid discount type"):
            _create(FakeCouponRepository(), discount_type="bogo")


class TestValidateCoupon:

    def test_quote(self):
        repo = FakeCouponRepository()
        _create(repo)
        quote = ValidateCouponHandler(repo).handle(CUSTOMER, "welcome", "80.00")
        assert quote.discount_amount == "8.00"
        assert quote.final_total == "72.00"

    def test_fixed_coupon_bounded_by_total(self):
        repo = FakeCouponRepository()
        _create(repo, code="FLAT20", discount_type="fixed", discount_value="20")
        quote = ValidateCouponHandler(repo).handle(CUSTOMER, "FLAT20", "15")
        assert quote.discount_amount == "15.00"
        assert quote.final_total == "0.00"

    def test_unknown_code(self):
        with pytest.raises(CouponInvalidError, match="Invalid coupon code"):
            ValidateCouponHandler(FakeCouponRepository()).handle(CUSTOMER, "NOPE", "10")

    def test_expired(self):
        repo = FakeCouponRepository()
        _create(repo, start_date=NOW - timedelta(days=10), end_date=NOW - timedelta(days=1))
        with pytest.raises(CouponInvalidError, match="Coupon has expired"):
            ValidateCouponHandler(repo).handle(CUSTOMER, "WELCOME", "10")

    def test_validation_does_not_consume_usage(self):
        repo = FakeCouponRepository()
        _create(repo)
        ValidateCouponHandler(repo).handle(CUSTOMER, "WELCOME", "10")
        assert repo.get_by_code("WELCOME").used_count == 0

    def test_inactive_code_reads_as_invalid(self):
        repo = FakeCouponRepository()
        _create(repo)
        repo.update("WELCOME", lambda c: setattr(c, "is_active", False))
        with pytest.raises(CouponInvalidError, match="Invalid coupon code"):
            ValidateCouponHandler(repo).handle(CUSTOMER, "WELCOME", "10")


class TestUpdateCoupon:

    def test_deactivate(self):
        repo = FakeCouponRepository()
        _create(repo)
        dto = UpdateCouponHandler(repo).handle(ADMIN, "welcome", is_active=False)
        assert dto.is_active is False
        assert repo.get_by_code("WELCOME").is_active is False

    def test_deactivated_coupon_no_longer_applies_to_orders(self):
        coupons = FakeCouponRepository()
        _create(coupons)
        UpdateCouponHandler(coupons).handle(ADMIN, "WELCOME", is_active=False)
        placing = CreateOrderHandler(
            FakeOrderRepository(),
            FakeProductRepository([
                Product(id="P1", vendor_id="v1", name="Mug", price=Money.of("10.00"), stock=5),
            ]),
            coupons,
        )
        args = (
            CUSTOMER,
            [OrderItemSpec("P1", 1)],
            Address("1 Main St", "Springfield", "IL", "62701", "US"),
            PricingSpec("10.00", "0", "0", "10.00"),
            "WELCOME",
        )

        dto = placing.handle(*args)
        assert dto.coupon_code is None
        assert dto.total_price == "10.00"
        with pytest.raises(CouponInvalidError, match="Coupon is not active"):
            placing.handle(*args, require_coupon=True)

    def test_change_terms(self):
        repo = FakeCouponRepository()
        _create(repo)
        dto = UpdateCouponHandler(repo).handle(
            ADMIN, "WELCOME", discount_value="25", max_discount_amount="5", usage_limit=10
        )
        assert dto.discount_value == "25"
        assert dto.max_discount_amount == "5.00"
        assert dto.usage_limit == 10
        quote = ValidateCouponHandler(repo).handle(CUSTOMER, "WELCOME", "100")
        assert quote.discount_amount == "5.00"

    def test_usage_limit_cannot_drop_below_redemptions(self):
        repo = FakeCouponRepository()
        _create(repo, usage_limit=5)
        repo.claim_usage("WELCOME", "alice")
        repo.claim_usage("WELCOME", "bob")
        with pytest.raises(ValidationError, match="below the 2 redemption"):
            UpdateCouponHandler(repo).handle(ADMIN, "WELCOME", usage_limit=1)
        assert repo.get_by_code("WELCOME").usage_limit == 5

    def test_end_before_start_rejected(self):
        repo = FakeCouponRepository()
        _create(repo)
        with pytest.raises(ValidationError, match="end date must be after"):
            UpdateCouponHandler(repo).handle(ADMIN, "WELCOME", end_date=NOW - timedelta(days=2))

    def test_percentage_over_100_rejected(self):
        repo = FakeCouponRepository()
        _create(repo)
        with pytest.raises(ValidationError, match="cannot exceed 100"):
            UpdateCouponHandler(repo).handle(ADMIN, "WELCOME", discount_value="120")

    def test_nothing_to_update(self):
        repo = FakeCouponRepository()
        _create(repo)
        with pytest.raises(ValidationError, match="Nothing to update"):
            UpdateCouponHandler(repo).handle(ADMIN, "WELCOME")

    def test_only_admin(self):
        repo = FakeCouponRepository()
        _create(repo)
        with pytest.raises(UnauthorizedError):
            UpdateCouponHandler(repo).handle(CUSTOMER, "WELCOME", is_active=False)

    def test_unknown_code(self):
        with pytest.raises(EntityNotFoundError):
            UpdateCouponHandler(FakeCouponRepository()).handle(ADMIN, "NOPE", is_active=False)


class TestListCoupons:

    def _seed(self):
        repo = FakeCouponRepository()
        _create(repo, code="LIVE")
        _create(repo, code="OFF")
        _create(repo, code="OLD", start_date=NOW - timedelta(days=10), end_date=NOW - timedelta(days=1))
        _create(repo, code="SOON", start_date=NOW + timedelta(days=2), end_date=NOW + timedelta(days=9))
        _create(repo, code="GONE", usage_limit=1)
        repo.claim_usage("GONE", "alice")
        UpdateCouponHandler(repo).handle(ADMIN, "OFF", is_active=False)
        return repo

    def test_admin_lists_all(self):
        codes = {c.code for c in ShowCouponHandler(self._seed()).list_all(ADMIN)}
        assert codes == {"LIVE", "OFF", "OLD", "SOON", "GONE"}

    def test_admin_filters_by_active_flag(self):
        handler = ShowCouponHandler(self._seed())
        assert [c.code for c in handler.list_all(ADMIN, is_active=False)] == ["OFF"]
        assert "OFF" not in {c.code for c in handler.list_all(ADMIN, is_active=True)}

    def test_active_list_only_has_redeemable_coupons(self):
        assert [c.code for c in ShowCouponHandler(self._seed()).list_active()] == ["LIVE"]

    def test_list_all_is_admin_only(self):
        with pytest.raises(UnauthorizedError):
            ShowCouponHandler(FakeCouponRepository()).list_all(CUSTOMER)

    def test_show_one(self):
        repo = FakeCouponRepository()
        _create(repo)
        assert ShowCouponHandler(repo).handle(ADMIN, "welcome").code == "WELCOME"
        with pytest.raises(EntityNotFoundError, match="Coupon not found"):
            ShowCouponHandler(repo).handle(ADMIN, "NOPE")


class TestDeleteCoupon:

    def test_admin_deletes(self):
        repo = FakeCouponRepository()
        _create(repo)
        DeleteCouponHandler(repo).handle(ADMIN, "welcome")
        assert repo.get_by_code("WELCOME") is None

    def test_code_is_free_again_after_delete(self):
        repo = FakeCouponRepository()
        _create(repo)
        DeleteCouponHandler(repo).handle(ADMIN, "WELCOME")
        assert _create(repo).code == "WELCOME"

    def test_unknown_code(self):
        with pytest.raises(EntityNotFoundError):
            DeleteCouponHandler(FakeCouponRepository()).handle(ADMIN, "NOPE")

    def test_only_admin(self):
        repo = FakeCouponRepository()
        _create(repo)
        with pytest.raises(UnauthorizedError):
            DeleteCouponHandler(repo).handle(CUSTOMER, "WELCOME")
        assert repo.get_by_code("WELCOME") is not None
