"""Abstract repository for Order aggregate."""

from __future__ import annotations

from abc import ABC, abstractmethod

from bazaar.domain.exceptions import ConflictError
from bazaar.domain.model.order import Order, OrderStatus


class OrderNumberTakenError(ConflictError):
    """Another order already uses this order number."""


class OrderRepository(ABC):
    """Orders are saved with optimistic concurrency.

    ``save`` inserts when ``order.id`` is None (assigning the id and
    enforcing a unique ``order_number``) and otherwise replaces the stored
    order only if its ``version`` still matches, bumping it. A stale
    version raises ConflictError.
    """

    @abstractmethod
    def next_id(self) -> int:
        """Generate the next unique order ID."""

    @abstractmethod
    def get_by_id(self, order_id: int) -> Order | None:
        """Return an order by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Order]:
        """Return every order."""

    @abstractmethod
    def save(self, order: Order) -> None:
        """Persist a new or updated order."""

    def find(
        self,
        user_id: str | None = None,
        vendor_id: str | None = None,
        status: OrderStatus | None = None,
    ) -> list[Order]:
        """Orders matching every given filter, newest first."""
        orders = [
            order
            for order in self.list_all()
            if (user_id is None or order.user_id == user_id)
            and (vendor_id is None or order.involves_vendor(vendor_id))
            and (status is None or order.status == status)
        ]
        return sorted(orders, key=lambda o: (o.created_at, o.id or 0), reverse=True)

    def has_paid_order(self, user_id: str, product_id: str) -> bool:
        return any(
            order.is_paid and order.contains_product(product_id)
            for order in self.find(user_id=user_id)
        )
