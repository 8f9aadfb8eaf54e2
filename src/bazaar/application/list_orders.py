"""Application service: List Orders use case (query).

Customers see their own orders, vendors the orders that contain at
least one of their products, admins everything.
"""

from __future__ import annotations

from dataclasses import dataclass

from bazaar.application.dto import OrderDTO, order_to_dto
from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.order import OrderStatus
from bazaar.domain.model.value_objects import Actor, Role
from bazaar.domain.repository.order_repository import OrderRepository

MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class OrderPage:
    orders: list[OrderDTO]
    total: int
    page: int
    total_pages: int


class ListOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        actor: Actor,
        status: str | None = None,
        page: int = 1,
        limit: int = 10,
    ) -> OrderPage:
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Page must be >= 1 and limit within 1-{MAX_PAGE_SIZE}")
        try:
            wanted = OrderStatus(status) if status else None
        except ValueError:
            raise ValidationError(f"Invalid status '{status}'") from None

        if actor.role == Role.CUSTOMER:
            orders = self._order_repo.find(user_id=actor.user_id, status=wanted)
        elif actor.role == Role.VENDOR:
            orders = self._order_repo.find(vendor_id=actor.user_id, status=wanted)
        else:
            orders = self._order_repo.find(status=wanted)

        start = (page - 1) * limit
        return OrderPage(
            orders=[order_to_dto(o) for o in orders[start:start + limit]],
            total=len(orders),
            page=page,
            total_pages=-(-len(orders) // limit),
        )
