"""Application service: Show Order use case (query)."""

from __future__ import annotations

from bazaar.application.authorization import ensure_can_view_order
from bazaar.application.dto import OrderDTO, order_to_dto
from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.value_objects import Actor
from bazaar.domain.repository.order_repository import OrderRepository


class ShowOrderHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, actor: Actor, order_id: int) -> OrderDTO:
        order = self._order_repo.get_by_id(order_id)
        if order is None:
            raise EntityNotFoundError(f"Order #{order_id} not found")
        ensure_can_view_order(actor, order)
        return order_to_dto(order)
