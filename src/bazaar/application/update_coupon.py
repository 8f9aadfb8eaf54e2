"""Application service: Update Coupon use case (admin only).

Edits the terms of an existing coupon, including switching it off with
``is_active=False``. Orders already placed keep their coupon snapshot.
"""

from __future__ import annotations

from datetime import datetime

import structlog

from bazaar.application.authorization import require_role
from bazaar.application.dto import CouponDTO, coupon_to_dto
from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.coupon import Coupon
from bazaar.domain.model.value_objects import Actor, Money, Role
from bazaar.domain.repository.coupon_repository import CouponRepository

logger = structlog.get_logger(__name__)


class UpdateCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(
        self,
        actor: Actor,
        code: str,
        description: str | None = None,
        discount_value: str | None = None,
        max_discount_amount: str | None = None,
        min_purchase_amount: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        usage_limit: int | None = None,
        per_user_limit: int | None = None,
        is_active: bool | None = None,
    ) -> CouponDTO:
        """Apply every argument that is not None; the rest stays as is."""
        require_role(actor, Role.ADMIN)
        changes: dict = {
            "description": description,
            "discount_value": Money.of(discount_value).amount if discount_value is not None else None,
            "max_discount_amount": Money.of(max_discount_amount) if max_discount_amount is not None else None,
            "min_purchase_amount": Money.of(min_purchase_amount) if min_purchase_amount is not None else None,
            "start_date": start_date,
            "end_date": end_date,
            "usage_limit": usage_limit,
            "per_user_limit": per_user_limit,
            "is_active": is_active,
        }
        changes = {name: value for name, value in changes.items() if value is not None}
        if not changes:
            raise ValidationError("Nothing to update")

        def revise(coupon: Coupon) -> Coupon:
            coupon.revise(**changes)
            return coupon

        updated = self._coupon_repo.update(code, revise)
        logger.info(
            "Coupon updated",
            code=updated.code,
            fields=sorted(changes),
            is_active=updated.is_active,
            updated_by=actor.user_id,
        )
        return coupon_to_dto(updated)
