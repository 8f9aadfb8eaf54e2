"""Integration tests for the CreateOrder use case.

Uses in-memory fake repositories, no file I/O.
"""

import threading
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from bazaar.application.create_order import CreateOrderHandler
from bazaar.application.dto import OrderItemSpec, PricingSpec
from bazaar.application.side_effects import SideEffects
from bazaar.domain.exceptions import (
    ConflictError,
    CouponInvalidError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from bazaar.domain.model.coupon import Coupon, DiscountType
from bazaar.domain.model.product import Product, Variant
from bazaar.domain.model.value_objects import Actor, Address, Money, Role
from bazaar.domain.repository.order_repository import OrderNumberTakenError
from tests.fakes import (
    ExplodingNotifier,
    FakeCouponRepository,
    FakeOrderRepository,
    FakeProductRepository,
    RecordingCache,
    RecordingMailer,
    RecordingNotifier,
)

ALICE = Actor("alice", Role.CUSTOMER)
BOB = Actor("bob", Role.CUSTOMER)
ADDRESS = Address("1 Main St", "Springfield", "IL", "62701", "US")


def _products() -> list[Product]:
    return [
        Product(id="P1", vendor_id="v1", name="Mug", price=Money.of("12.50"), stock=10),
        Product(
            id="P2",
            vendor_id="v2",
            name="Tee",
            price=Money.of("20.00"),
            variants=[
                Variant(id="P2-v1", name="Small", price=Money.of("18.00"), stock=3, sku="TEE-S", size="S"),
                Variant(id="P2-v2", name="Large", price=Money.of("22.00"), stock=1, sku="TEE-L", size="L"),
            ],
        ),
    ]


def _coupon(**overrides) -> Coupon:
    now = datetime.now(timezone.utc)
    fields = dict(
        code="SAVE10",
        discount_type=DiscountType.PERCENTAGE,
        discount_value=Decimal("10"),
        start_date=now - timedelta(days=1),
        end_date=now + timedelta(days=1),
    )
    fields.update(overrides)
    return Coupon.create(**fields)


def _pricing(items: str, tax: str = "0.00", shipping: str = "5.00") -> PricingSpec:
    total = Money.of(items) + Money.of(tax) + Money.of(shipping)
    return PricingSpec(items, tax, shipping, f"{total.amount:.2f}")


def _setup(products=None, coupons=None, notifier=None):
    """Build handler with fake repos and recording ports."""
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository(_products() if products is None else products)
    coupon_repo = FakeCouponRepository(coupons or [])
    notifier = notifier or RecordingNotifier()
    mailer = RecordingMailer()
    cache = RecordingCache()
    handler = CreateOrderHandler(
        order_repo, product_repo, coupon_repo, SideEffects(notifier, mailer, cache)
    )
    return handler, order_repo, product_repo, coupon_repo, notifier, mailer, cache


class TestCreateOrderHappyPath:

    def test_creates_pending_order(self):
        handler, order_repo, *_ = _setup()
        dto = handler.handle(ALICE, [OrderItemSpec("P1", 2)], ADDRESS, _pricing("25.00"))

        assert dto.status == "pending"
        assert dto.user_id == "alice"
        assert dto.items_price == "25.00"
        assert dto.total_price == "30.00"
        assert dto.discount_amount == "0.00"
        assert dto.order_number.startswith("ORD-")
        assert order_repo.get_by_id(dto.id) is not None

    def test_decrements_stock_and_counts_sales(self):
        handler, _, product_repo, *_ = _setup()
        handler.handle(
            ALICE,
            [OrderItemSpec("P1", 2), OrderItemSpec("P2", 2, "P2-v1")],
            ADDRESS,
            _pricing("61.00"),
        )

        mug = product_repo.get_by_id("P1")
        tee = product_repo.get_by_id("P2")
        assert mug.stock == 8
        assert mug.sales == 2
        assert tee.find_variant("P2-v1").stock == 1
        assert tee.find_variant("P2-v2").stock == 1
        assert tee.sales == 2

    def test_snapshots_variant_details(self):
        handler, *_ = _setup()
        dto = handler.handle(ALICE, [OrderItemSpec("P2", 1, "P2-v2")], ADDRESS, _pricing("22.00"))
        item = dto.items[0]
        assert item.variant_id == "P2-v2"
        assert item.sku == "TEE-L"
        assert item.unit_price == "22.00"
        assert item.vendor_id == "v2"

    def test_price_snapshot_survives_price_change(self):
        handler, order_repo, product_repo, *_ = _setup()
        dto = handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"))

        product_repo.update("P1", lambda p: p.update_price(Money.of("99.99")))

        saved = order_repo.get_by_id(dto.id)
        assert saved.items[0].unit_price == Money.of("12.50")

    def test_side_effects_fire(self):
        handler, _, _, _, notifier, mailer, cache = _setup()
        handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"))

        assert "order_created" in notifier.names()
        assert "inventory_updated" in notifier.names()
        assert set(cache.patterns) == {"products:*", "orders:*"}
        assert mailer.sent[0][0] == "alice"

    def test_low_stock_reported_in_inventory_event(self):
        handler, _, _, _, notifier, *_ = _setup()
        handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"))
        payload = dict(notifier.events)["inventory_updated"]
        assert payload == {"product_id": "P1", "stock": 9, "low_stock": True}

    def test_failing_notifier_does_not_fail_the_order(self):
        handler, order_repo, *_ = _setup(notifier=ExplodingNotifier())
        dto = handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"))
        assert order_repo.get_by_id(dto.id) is not None


class TestCreateOrderValidation:

    def test_no_items(self):
        handler, *_ = _setup()
        with pytest.raises(ValidationError, match="No order items"):
            handler.handle(ALICE, [], ADDRESS, _pricing("0.00"))

    def test_unknown_product(self):
        handler, *_ = _setup()
        with pytest.raises(EntityNotFoundError, match="Product not found"):
            handler.handle(ALICE, [OrderItemSpec("P9", 1)], ADDRESS, _pricing("1.00"))

    def test_items_price_must_match_catalog(self):
        handler, *_ = _setup()
        with pytest.raises(ValidationError, match="does not match the catalog total"):
            handler.handle(ALICE, [OrderItemSpec("P1", 2)], ADDRESS, _pricing("20.00"))

    def test_total_must_balance(self):
        handler, *_ = _setup()
        with pytest.raises(ValidationError, match="Total price"):
            handler.handle(
                ALICE, [OrderItemSpec("P1", 1)], ADDRESS, PricingSpec("12.50", "0", "5", "99.00")
            )


class TestCreateOrderAtomicity:

    def test_insufficient_stock_changes_nothing(self):
        handler, order_repo, product_repo, *_ = _setup()
        with pytest.raises(InsufficientStockError, match=r"Tee \(L\)"):
            handler.handle(
                ALICE,
                [OrderItemSpec("P1", 2), OrderItemSpec("P2", 2, "P2-v2")],
                ADDRESS,
                _pricing("69.00"),
            )

        assert product_repo.get_by_id("P1").stock == 10
        assert product_repo.get_by_id("P1").sales == 0
        assert order_repo.list_all() == []

    def test_persist_failure_releases_stock_and_coupon(self):
        handler, order_repo, product_repo, coupon_repo, *_ = _setup(coupons=[_coupon()])

        def broken_save(order):
            raise RuntimeError("disk full")

        order_repo.save = broken_save
        with pytest.raises(RuntimeError):
            handler.handle(ALICE, [OrderItemSpec("P1", 2)], ADDRESS, _pricing("25.00"), "SAVE10")

        assert product_repo.get_by_id("P1").stock == 10
        assert product_repo.get_by_id("P1").sales == 0
        assert coupon_repo.get_by_code("SAVE10").used_count == 0

    def test_order_number_collision_is_retried(self):
        handler, order_repo, *_ = _setup()
        real_save = order_repo.save
        attempts = []

        def flaky_save(order):
            attempts.append(order.order_number)
            if len(attempts) == 1:
                raise OrderNumberTakenError("taken")
            real_save(order)

        order_repo.save = flaky_save
        dto = handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"))
        assert len(attempts) == 2
        assert dto.id is not None

    def test_gives_up_after_repeated_collisions(self):
        handler, order_repo, product_repo, *_ = _setup()

        def always_taken(order):
            raise OrderNumberTakenError("taken")

        order_repo.save = always_taken
        with pytest.raises(ConflictError, match="unique order number"):
            handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"))
        assert product_repo.get_by_id("P1").stock == 10


class TestCreateOrderCoupons:

    def test_valid_coupon_applies_discount(self):
        handler, order_repo, _, coupon_repo, *_ = _setup(coupons=[_coupon()])
        dto = handler.handle(ALICE, [OrderItemSpec("P1", 2)], ADDRESS, _pricing("25.00"), "save10")

        assert dto.discount_amount == "2.50"
        assert dto.total_price == "27.50"
        assert dto.coupon_code == "SAVE10"
        coupon = coupon_repo.get_by_code("SAVE10")
        assert coupon.used_count == 1
        assert coupon.usage_for("alice") == 1

    def test_discount_capped_at_max(self):
        coupon = _coupon(max_discount_amount=Money.of("2.00"))
        handler, *_ = _setup(coupons=[coupon])
        dto = handler.handle(ALICE, [OrderItemSpec("P1", 2)], ADDRESS, _pricing("25.00"), "SAVE10")
        assert dto.discount_amount == "2.00"

    def test_rejected_coupon_is_dropped_by_default(self):
        coupon = _coupon(min_purchase_amount=Money.of("100"))
        handler, _, _, coupon_repo, *_ = _setup(coupons=[coupon])
        dto = handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"), "SAVE10")

        assert dto.coupon_code is None
        assert dto.discount_amount == "0.00"
        assert dto.total_price == "17.50"
        assert coupon_repo.get_by_code("SAVE10").used_count == 0

    def test_rejected_coupon_fails_when_required(self):
        coupon = _coupon(min_purchase_amount=Money.of("100"))
        handler, order_repo, product_repo, *_ = _setup(coupons=[coupon])
        with pytest.raises(CouponInvalidError, match="Minimum purchase amount of \\$100.00 required"):
            handler.handle(
                ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"), "SAVE10", require_coupon=True
            )
        assert product_repo.get_by_id("P1").stock == 10
        assert order_repo.list_all() == []

    def test_unknown_coupon_when_required(self):
        handler, *_ = _setup()
        with pytest.raises(CouponInvalidError, match="Invalid coupon code"):
            handler.handle(
                ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"), "NOPE", require_coupon=True
            )

    def test_second_use_by_same_user_is_dropped(self):
        handler, _, _, coupon_repo, *_ = _setup(coupons=[_coupon()])
        handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"), "SAVE10")
        second = handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"), "SAVE10")

        assert second.coupon_code is None
        assert coupon_repo.get_by_code("SAVE10").used_count == 1

    def test_global_usage_limit_is_never_exceeded(self):
        handler, _, _, coupon_repo, *_ = _setup(coupons=[_coupon(usage_limit=1)])
        first = handler.handle(ALICE, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"), "SAVE10")
        second = handler.handle(BOB, [OrderItemSpec("P1", 1)], ADDRESS, _pricing("12.50"), "SAVE10")

        assert first.coupon_code == "SAVE10"
        assert second.coupon_code is None
        assert coupon_repo.get_by_code("SAVE10").used_count == 1


class TestCreateOrderConcurrency:

    def test_no_oversell_under_concurrent_orders(self):
        stock = 5
        products = [Product(id="P1", vendor_id="v1", name="Mug", price=Money.of("10.00"), stock=stock)]
        handler, order_repo, product_repo, *_ = _setup(products=products)
        successes, failures = [], []
        barrier = threading.Barrier(20)

        def place(n: int) -> None:
            barrier.wait()
            try:
                handler.handle(
                    Actor(f"user{n}", Role.CUSTOMER),
                    [OrderItemSpec("P1", 1)],
                    ADDRESS,
                    _pricing("10.00"),
                )
                successes.append(n)
            except (InsufficientStockError, ConflictError):
                failures.append(n)

        threads = [threading.Thread(target=place, args=(n,)) for n in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        mug = product_repo.get_by_id("P1")
        assert len(successes) <= stock
        assert len(successes) + len(failures) == 20
        assert mug.stock == stock - len(successes)
        assert mug.sales == len(successes)
        assert len(order_repo.list_all()) == len(successes)
