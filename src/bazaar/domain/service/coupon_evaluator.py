"""Domain service: Coupon evaluation.

Pure functions over a Coupon snapshot. ``validate`` answers whether the
coupon applies to a user's order, ``compute_discount`` how much it takes
off. Neither touches usage counters.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from bazaar.domain.model.coupon import Coupon, DiscountType
from bazaar.domain.model.value_objects import Money


@dataclass(frozen=True)
class CouponValidation:
    valid: bool
    reason: str | None = None


VALID = CouponValidation(valid=True)


def validate(
    coupon: Coupon,
    user_id: str | None,
    subtotal: Money,
    now: datetime | None = None,
) -> CouponValidation:
    """Run the checks in order and report the first failure verbatim."""
    now = now or datetime.now(timezone.utc)

    if not coupon.is_active:
        return CouponValidation(False, "Coupon is not active")
    if now < coupon.start_date:
        return CouponValidation(False, "Coupon is not yet valid")
    if now > coupon.end_date:
        return CouponValidation(False, "Coupon has expired")
    if coupon.limit_reached:
        return CouponValidation(False, "Coupon usage limit reached")
    if subtotal < coupon.min_purchase_amount:
        return CouponValidation(
            False,
            f"Minimum purchase amount of {coupon.min_purchase_amount} required",
        )
    if user_id and coupon.user_limit_reached(user_id):
        return CouponValidation(False, "You have already used this coupon")
    return VALID


def compute_discount(coupon: Coupon, subtotal: Money) -> Money:
    """Discount for ``subtotal``, rounded half-up to cents.

    Percentage discounts are capped at ``max_discount_amount``; fixed
    discounts never exceed the subtotal.
    """
    if coupon.discount_type == DiscountType.PERCENTAGE:
        discount = Money(subtotal.amount * coupon.discount_value / Decimal(100), subtotal.currency)
        if coupon.max_discount_amount is not None and discount > coupon.max_discount_amount:
            discount = coupon.max_discount_amount
    else:
        discount = Money(coupon.discount_value, subtotal.currency)
        if discount > subtotal:
            discount = subtotal
    return discount.rounded()
