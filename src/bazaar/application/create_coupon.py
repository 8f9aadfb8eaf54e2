"""Application service: Create Coupon use case (admin only)."""

from __future__ import annotations

from datetime import datetime

import structlog

from bazaar.application.authorization import require_role
from bazaar.application.dto import CouponDTO, coupon_to_dto
from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.coupon import Coupon, DiscountType
from bazaar.domain.model.value_objects import Actor, Money, Role
from bazaar.domain.repository.coupon_repository import CouponRepository

logger = structlog.get_logger(__name__)


class CreateCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(
        self,
        actor: Actor,
        code: str,
        discount_type: str,
        discount_value: str,
        start_date: datetime,
        end_date: datetime,
        description: str = "",
        max_discount_amount: str | None = None,
        min_purchase_amount: str = "0",
        usage_limit: int | None = None,
        per_user_limit: int = 1,
    ) -> CouponDTO:
        require_role(actor, Role.ADMIN)
        try:
            kind = DiscountType(discount_type.strip().lower())
        except ValueError:
            raise ValidationError(f"Invalid discount type '{discount_type}'") from None

        coupon = Coupon.create(
            code=code,
            discount_type=kind,
            discount_value=Money.of(discount_value).amount,
            start_date=start_date,
            end_date=end_date,
            description=description,
            max_discount_amount=Money.of(max_discount_amount) if max_discount_amount else None,
            min_purchase_amount=Money.of(min_purchase_amount),
            usage_limit=usage_limit,
            per_user_limit=per_user_limit,
        )
        self._coupon_repo.add(coupon)
        logger.info("Coupon created", code=coupon.code, discount_type=kind.value, created_by=actor.user_id)
        return coupon_to_dto(coupon)
