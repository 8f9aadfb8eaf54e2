"""Application service: Validate Coupon use case (query).

Lets a shopper preview a coupon at checkout. Nothing is reserved: the
coupon is evaluated again when the order is placed.
"""

from __future__ import annotations

from bazaar.application.dto import CouponQuoteDTO, amount
from bazaar.domain.exceptions import CouponInvalidError
from bazaar.domain.model.value_objects import Actor, Money
from bazaar.domain.repository.coupon_repository import CouponRepository
from bazaar.domain.service import coupon_evaluator


class ValidateCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(self, actor: Actor, code: str, order_total: str) -> CouponQuoteDTO:
        subtotal = Money.of(order_total)
        coupon = self._coupon_repo.get_by_code(code) if code else None
        if coupon is None or not coupon.is_active:
            raise CouponInvalidError("Invalid coupon code")

        result = coupon_evaluator.validate(coupon, actor.user_id, subtotal)
        if not result.valid:
            raise CouponInvalidError(result.reason)

        discount = coupon_evaluator.compute_discount(coupon, subtotal)
        return CouponQuoteDTO(
            code=coupon.code,
            discount_type=coupon.discount_type.value,
            discount_value=str(coupon.discount_value),
            discount_amount=amount(discount),
            final_total=amount(subtotal - discount),
        )
