"""Application service: Create Payment Intent use case."""

from __future__ import annotations

import structlog

from bazaar.application.authorization import ensure_can_view_order
from bazaar.application.dto import PaymentIntentDTO
from bazaar.application.ports import PaymentGateway
from bazaar.domain.exceptions import EntityNotFoundError, UnauthorizedError, ValidationError
from bazaar.domain.model.order import OrderStatus
from bazaar.domain.model.value_objects import Actor
from bazaar.domain.repository.order_repository import OrderRepository

logger = structlog.get_logger(__name__)


class CreatePaymentIntentHandler:

    def __init__(self, order_repo: OrderRepository, gateway: PaymentGateway) -> None:
        self._order_repo = order_repo
        self._gateway = gateway

    def handle(self, actor: Actor, order_id: int) -> PaymentIntentDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        ensure_can_view_order(actor, order)
        if actor.is_vendor:
            raise UnauthorizedError("Only the customer or an admin can pay for an order")
        if order.is_paid:
            raise ValidationError("Order is already paid")
        if order.status == OrderStatus.CANCELLED:
            raise ValidationError("Cannot pay for a cancelled order")

        total = order.pricing.total_price
        intent = self._gateway.create_payment_intent(
            amount=total.in_cents(),
            currency=total.currency.lower(),
            metadata={"orderId": str(order.id), "userId": order.user_id},
        )
        logger.info(
            "Payment intent created",
            order_id=order.id,
            payment_intent=intent.id,
            amount=intent.amount,
        )
        return PaymentIntentDTO(
            order_id=order.id,  # type: ignore[arg-type]
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
            amount=intent.amount,
            currency=intent.currency,
        )
