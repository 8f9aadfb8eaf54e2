"""Application service: Delete Coupon use case (admin only)."""

from __future__ import annotations

import structlog

from bazaar.application.authorization import require_role
from bazaar.domain.model.value_objects import Actor, Role
from bazaar.domain.repository.coupon_repository import CouponRepository

logger = structlog.get_logger(__name__)


class DeleteCouponHandler:

    def __init__(self, coupon_repo: CouponRepository) -> None:
        self._coupon_repo = coupon_repo

    def handle(self, actor: Actor, code: str) -> None:
        """Remove the coupon. Orders that used it keep their snapshot."""
        require_role(actor, Role.ADMIN)
        self._coupon_repo.delete(code)
        logger.info("Coupon deleted", code=code.strip().upper(), deleted_by=actor.user_id)
