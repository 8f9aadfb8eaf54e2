"""Order aggregate, the core of the domain.

The Order is an aggregate root that owns its line items.
Status changes go through ``transition_to``, ``mark_paid`` and
``refund``; everything else about an order is fixed at creation.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum

from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.coupon import DiscountType
from bazaar.domain.model.value_objects import (
    Address,
    BaseStock,
    Money,
    Quantity,
    StockLocation,
    VariantStock,
)


class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PROCESSING = "processing"
    READY_FOR_DELIVERY = "ready_for_delivery"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# Forward-only fulfillment path; cancelled/refunded branch off before delivery.
LIFECYCLE = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PROCESSING,
    OrderStatus.READY_FOR_DELIVERY,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]
TERMINAL_STATUSES = frozenset(
    {OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED}
)
CLIENT_TARGET_STATUSES = frozenset(
    {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    }
)


@dataclass(frozen=True)
class VariantRef:
    variant_id: str
    sku: str | None = None
    size: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class OrderItem:
    """Snapshot of what was bought, taken at order-creation time.

    Immutable: later product edits (price, name, vendor) never reach it.
    """

    product_id: str
    name: str
    quantity: Quantity
    unit_price: Money  # locked at order-creation time
    vendor_id: str
    variant: VariantRef | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    @property
    def location(self) -> StockLocation:
        """The stock counter this line was drawn from."""
        if self.variant is not None:
            return VariantStock(self.product_id, self.variant.variant_id)
        return BaseStock(self.product_id)


@dataclass(frozen=True)
class Pricing:
    """Order price breakdown.

    ``total_price = items_price + tax_price + shipping_price - discount_amount``
    """

    items_price: Money
    tax_price: Money
    shipping_price: Money
    total_price: Money
    discount_amount: Money = field(default_factory=Money.zero)

    def __post_init__(self) -> None:
        gross = self.items_price + self.tax_price + self.shipping_price
        if self.discount_amount > self.items_price:
            raise ValidationError("Discount cannot exceed the items price")
        if gross.amount - self.discount_amount.amount != self.total_price.amount:
            raise ValidationError(
                f"Total price {self.total_price} does not match items + tax + "
                f"shipping - discount ({Money(gross.amount - self.discount_amount.amount)})"
            )

    def with_discount(self, discount: Money) -> Pricing:
        """Apply ``discount`` to an undiscounted breakdown."""
        return Pricing(
            items_price=self.items_price,
            tax_price=self.tax_price,
            shipping_price=self.shipping_price,
            discount_amount=discount,
            total_price=self.total_price - discount,
        )


@dataclass(frozen=True)
class CouponSnapshot:
    code: str
    discount_type: DiscountType
    discount_value: Decimal


@dataclass(frozen=True)
class PaymentResult:
    id: str
    status: str
    update_time: datetime


def generate_order_number(now: datetime | None = None, rng: random.Random | None = None) -> str:
    """``ORD-{year}{month}-{4 random digits}``; uniqueness is the repository's job."""
    now = now or datetime.now(timezone.utc)
    rng = rng or random
    return f"ORD-{now.year}{now.month:02d}-{rng.randrange(10000):04d}"


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders; it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    id: int | None
    order_number: str
    user_id: str
    items: list[OrderItem]
    shipping_address: Address
    pricing: Pricing
    payment_method: str = "stripe"
    coupon_applied: CouponSnapshot | None = None
    status: OrderStatus = OrderStatus.PENDING
    is_paid: bool = False
    paid_at: datetime | None = None
    payment_result: PaymentResult | None = None
    is_delivered: bool = False
    delivered_at: datetime | None = None
    cancel_reason: str | None = None
    cancelled_at: datetime | None = None
    cancelled_by: str | None = None
    refund_amount: Money | None = None
    refunded_at: datetime | None = None
    refund_reason: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    version: int = 0

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        user_id: str,
        items: list[OrderItem],
        shipping_address: Address,
        pricing: Pricing,
        coupon_applied: CouponSnapshot | None = None,
        payment_method: str = "stripe",
    ) -> Order:
        """Create a new pending order, enforcing all invariants."""
        if not user_id:
            raise ValidationError("Order must belong to a user")
        if not items:
            raise ValidationError("Order must contain at least one item")
        if pricing.discount_amount.amount > 0 and coupon_applied is None:
            raise ValidationError("A discount requires an applied coupon")

        return Order(
            id=None,
            order_number=generate_order_number(),
            user_id=user_id,
            items=list(items),
            shipping_address=shipping_address,
            pricing=pricing,
            payment_method=payment_method,
            coupon_applied=coupon_applied,
        )

    # --- State transitions ----------------------------------------------------

    def transition_to(
        self,
        target: OrderStatus,
        actor_id: str,
        cancel_reason: str | None = None,
        now: datetime | None = None,
    ) -> bool:
        """Move the order to ``target``.

        Returns False when the order already has that status (a no-op the
        caller must not attach side effects to).
        """
        if target == OrderStatus.CANCELLED and not (cancel_reason and cancel_reason.strip()):
            raise ValidationError("A cancel reason is required to cancel an order")
        if target == OrderStatus.REFUNDED:
            raise ValidationError("Use refund() to refund an order")
        if target == self.status:
            return False
        if self.status in TERMINAL_STATUSES:
            raise ValidationError(
                f"Cannot change order status from {self.status.value} to {target.value}"
            )

        now = now or datetime.now(timezone.utc)
        if target == OrderStatus.CANCELLED:
            self.status = OrderStatus.CANCELLED
            self.cancel_reason = cancel_reason.strip()
            self.cancelled_at = now
            self.cancelled_by = actor_id
            return True

        if LIFECYCLE.index(target) < LIFECYCLE.index(self.status):
            raise ValidationError(
                f"Cannot move order back from {self.status.value} to {target.value}"
            )
        self.status = target
        if target == OrderStatus.DELIVERED:
            self.is_delivered = True
            self.delivered_at = now
        return True

    def mark_paid(self, result: PaymentResult, now: datetime | None = None) -> bool:
        """Record a confirmed payment.

        Duplicate confirmations are ignored (returns False). Only a pending
        order is moved into processing; a payment arriving for an order in
        any other state is recorded without touching its status.
        """
        if self.is_paid:
            return False
        self.is_paid = True
        self.paid_at = now or datetime.now(timezone.utc)
        self.payment_result = result
        if self.status == OrderStatus.PENDING:
            self.status = OrderStatus.PROCESSING
        return True

    def refund(self, amount: Money, reason: str, now: datetime | None = None) -> None:
        if self.status in TERMINAL_STATUSES:
            raise ValidationError(f"Cannot refund order in {self.status.value} status")
        if not self.is_paid:
            raise ValidationError("Cannot refund an unpaid order")
        if not reason or not reason.strip():
            raise ValidationError("A refund reason is required")
        if amount.amount <= 0 or amount > self.pricing.total_price:
            raise ValidationError(
                f"Refund amount must be between $0.01 and {self.pricing.total_price}"
            )
        self.status = OrderStatus.REFUNDED
        self.refund_amount = amount
        self.refund_reason = reason.strip()
        self.refunded_at = now or datetime.now(timezone.utc)

    # --- Queries --------------------------------------------------------------

    @property
    def vendor_ids(self) -> set[str]:
        return {item.vendor_id for item in self.items}

    def involves_vendor(self, vendor_id: str) -> bool:
        return vendor_id in self.vendor_ids

    def contains_product(self, product_id: str) -> bool:
        return any(item.product_id == product_id for item in self.items)
