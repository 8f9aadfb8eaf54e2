"""Application service: Update Order Status use case.

Vendors and admins move an order along its fulfillment path or cancel
it. Cancelling puts every line's quantity back where it was taken from.
The cancelled order is saved *before* restocking: the version check in
the repository lets only one of two racing cancellations through, so
stock is returned exactly once.
"""

from __future__ import annotations

import structlog

from bazaar.application.authorization import ensure_can_update_order, require_role
from bazaar.application.dto import OrderDTO, order_to_dto
from bazaar.application.side_effects import ORDERS_CACHE, PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.order import CLIENT_TARGET_STATUSES, Order, OrderStatus
from bazaar.domain.model.value_objects import Actor, Role
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service.stock_reservation_service import StockReservationService

logger = structlog.get_logger(__name__)


def parse_client_status(raw: str) -> OrderStatus:
    try:
        status = OrderStatus(raw.strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid status '{raw}'") from None
    if status not in CLIENT_TARGET_STATUSES:
        raise ValidationError(f"Invalid status '{raw}'")
    return status


class UpdateOrderStatusHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._side_effects = side_effects or SideEffects()

    def handle(
        self,
        actor: Actor,
        order_id: int,
        new_status: str,
        cancel_reason: str | None = None,
    ) -> OrderDTO:
        require_role(actor, Role.VENDOR, Role.ADMIN)
        target = parse_client_status(new_status)

        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        ensure_can_update_order(actor, order)

        previous = order.status
        if not order.transition_to(target, actor.user_id, cancel_reason):
            logger.info("Order already has requested status", order_id=order_id, status=target.value)
            return order_to_dto(order)

        # Raises ConflictError if someone else changed the order meanwhile.
        self._order_repo.save(order)

        if target == OrderStatus.CANCELLED:
            StockReservationService(self._product_repo).release(order.items)

        logger.info(
            "Order status updated",
            order_id=order.id,
            from_status=previous.value,
            to_status=order.status.value,
            actor_id=actor.user_id,
            actor_role=actor.role.value,
        )
        self._after_update(order, previous)
        return order_to_dto(order)

    def _after_update(self, order: Order, previous: OrderStatus) -> None:
        effects = self._side_effects
        effects.invalidate(ORDERS_CACHE, PRODUCTS_CACHE)
        effects.publish(
            "order_updated",
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "previous_status": previous.value,
                "status": order.status.value,
            },
        )
        body = f"Your order {order.order_number} is now {order.status.value}."
        if order.status == OrderStatus.CANCELLED:
            body += f" Reason: {order.cancel_reason}"
        effects.email(order.user_id, f"Order {order.order_number} update", body)
