"""Application service: Confirm Payment use case.

Invoked once the payment provider reports success. Providers retry and
duplicate callbacks, so confirming an already-paid order is a silent
no-op and fires no notifications.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from bazaar.application.side_effects import ORDERS_CACHE, SideEffects
from bazaar.domain.exceptions import ConflictError, EntityNotFoundError
from bazaar.domain.model.order import PaymentResult
from bazaar.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class ConfirmPaymentHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._side_effects = side_effects or SideEffects()

    def handle(
        self,
        order_id: int,
        payment_reference: str,
        payment_status: str = "succeeded",
    ) -> bool:
        """Mark the order paid; returns False if it already was."""
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")

        now = datetime.now(timezone.utc)
        result = PaymentResult(id=payment_reference, status=payment_status, update_time=now)
        if not order.mark_paid(result, now):
            logger.info("Duplicate payment confirmation ignored", order_id=order_id, reference=payment_reference)
            return False

        try:
            self._order_repo.save(order)
        except ConflictError:
            # A concurrent duplicate callback may have won the race.
            current = self._order_repo.get_by_id(order_id)
            if current is not None and current.is_paid:
                logger.info("Payment confirmed concurrently", order_id=order_id, reference=payment_reference)
                return False
            raise

        logger.info(
            "Payment confirmed",
            order_id=order.id,
            order_number=order.order_number,
            reference=payment_reference,
            status=order.status.value,
        )
        effects = self._side_effects
        effects.invalidate(ORDERS_CACHE)
        effects.publish(
            "order_updated",
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "status": order.status.value,
                "is_paid": True,
            },
        )
        effects.email(
            order.user_id,
            f"Payment received for order {order.order_number}",
            f"We received your payment of {order.pricing.total_price}.",
        )
        return True
