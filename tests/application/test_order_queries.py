"""Integration tests for the ShowOrder and ListOrders queries."""

import pytest

from bazaar.application.create_order import CreateOrderHandler
from bazaar.application.dto import OrderItemSpec, PricingSpec
from bazaar.application.list_orders import ListOrdersHandler
from bazaar.application.show_order import ShowOrderHandler
from bazaar.application.update_order_status import UpdateOrderStatusHandler
from bazaar.domain.exceptions import EntityNotFoundError, UnauthorizedError, ValidationError
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Actor, Address, Money, Role
from tests.fakes import FakeCouponRepository, FakeOrderRepository, FakeProductRepository

ADDRESS = Address("1 Main St", "Springfield", "IL", "62701", "US")
ALICE = Actor("alice", Role.CUSTOMER)
BOB = Actor("bob", Role.CUSTOMER)
V1 = Actor("v1", Role.VENDOR)
V2 = Actor("v2", Role.VENDOR)
ADMIN = Actor("root", Role.ADMIN)


def _setup():
    """Alice buys from v1 twice, Bob buys from v2 once."""
    orders = FakeOrderRepository()
    products = FakeProductRepository([
        Product(id="P1", vendor_id="v1", name="Mug", price=Money.of("10.00"), stock=50),
        Product(id="P2", vendor_id="v2", name="Lamp", price=Money.of("30.00"), stock=50),
    ])
    create = CreateOrderHandler(orders, products, FakeCouponRepository())
    ids = [
        create.handle(actor, [OrderItemSpec(pid, 1)], ADDRESS, PricingSpec(price, "0", "0", price)).id
        for actor, pid, price in ((ALICE, "P1", "10.00"), (ALICE, "P1", "10.00"), (BOB, "P2", "30.00"))
    ]
    return orders, products, ids


class TestShowOrder:

    def test_owner_sees_order(self):
        orders, _, ids = _setup()
        assert ShowOrderHandler(orders).handle(ALICE, ids[0]).id == ids[0]

    def test_other_customer_cannot(self):
        orders, _, ids = _setup()
        with pytest.raises(UnauthorizedError):
            ShowOrderHandler(orders).handle(BOB, ids[0])

    def test_involved_vendor_sees_order(self):
        orders, _, ids = _setup()
        assert ShowOrderHandler(orders).handle(V1, ids[0]).user_id == "alice"

    def test_uninvolved_vendor_cannot(self):
        orders, _, ids = _setup()
        with pytest.raises(UnauthorizedError):
            ShowOrderHandler(orders).handle(V2, ids[0])

    def test_missing(self):
        orders, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ShowOrderHandler(orders).handle(ADMIN, 404)


class TestListOrders:

    def test_customer_sees_own(self):
        orders, _, _ = _setup()
        page = ListOrdersHandler(orders).handle(ALICE)
        assert page.total == 2
        assert {o.user_id for o in page.orders} == {"alice"}

    def test_vendor_sees_orders_with_their_items(self):
        orders, _, ids = _setup()
        page = ListOrdersHandler(orders).handle(V2)
        assert [o.id for o in page.orders] == [ids[2]]

    def test_admin_sees_all_newest_first(self):
        orders, _, ids = _setup()
        page = ListOrdersHandler(orders).handle(ADMIN)
        assert page.total == 3
        assert [o.id for o in page.orders] == sorted(ids, reverse=True)

    def test_status_filter(self):
        orders, products, ids = _setup()
        UpdateOrderStatusHandler(orders, products).handle(ADMIN, ids[1], "shipped")
        page = ListOrdersHandler(orders).handle(ADMIN, status="shipped")
        assert [o.id for o in page.orders] == [ids[1]]

    def test_pagination(self):
        orders, _, _ = _setup()
        page = ListOrdersHandler(orders).handle(ADMIN, page=2, limit=2)
        assert len(page.orders) == 1
        assert page.total_pages == 2
        assert page.page == 2

    def test_bad_limit(self):
        orders, _, _ = _setup()
        with pytest.raises(ValidationError):
            ListOrdersHandler(orders).handle(ADMIN, limit=500)
