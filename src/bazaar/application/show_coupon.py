"""Application service: Show Coupon use cases (queries).

Admins see every coupon with its usage; shoppers only get the coupons
they could redeem right now.
"""

from __future__ import annotations

from datetime import datetime

from bazaar.application.authorization import require_role
from bazaar.application.dto import CouponDTO, coupon_to_dto
from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.value_objects import Actor, Role
from bazaar.domain.repository.coupon_repository import CouponRepository


class ShowCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(self, actor: Actor, code: str) -> CouponDTO:
        require_role(actor, Role.ADMIN)
        coupon = self._coupon_repo.get_by_code(code)
        if coupon is None:
            raise EntityNotFoundError("Coupon not found")
        return coupon_to_dto(coupon)

    def list_all(self, actor: Actor, is_active: bool | None = None) -> list[CouponDTO]:
        """Every coupon, latest start date first, optionally by active flag."""
        require_role(actor, Role.ADMIN)
        coupons = [
            c for c in self._coupon_repo.list_all()
            if is_active is None or c.is_active == is_active
        ]
        coupons.sort(key=lambda c: (c.start_date, c.code), reverse=True)
        return [coupon_to_dto(c) for c in coupons]

    def list_active(self, now: datetime | None = None) -> list[CouponDTO]:
        """Coupons that are active, within their window and not used up."""
        coupons = [c for c in self._coupon_repo.list_all() if c.is_available(now)]
        coupons.sort(key=lambda c: (c.end_date, c.code))
        return [coupon_to_dto(c) for c in coupons]
