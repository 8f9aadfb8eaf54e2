"""Role and ownership checks shared by the use cases.

Identity and role come from the auth layer as an ``Actor``; these helpers
only decide what that actor may touch.
"""

from __future__ import annotations

from bazaar.domain.exceptions import UnauthorizedError
from bazaar.domain.model.order import Order
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Actor, Role


def require_role(actor: Actor, *roles: Role) -> None:
    if actor.role not in roles:
        allowed = ", ".join(r.value for r in roles)
        raise UnauthorizedError(f"This action requires one of: {allowed}")


def ensure_can_manage_product(actor: Actor, product: Product) -> None:
    """Admins manage any product, vendors only their own."""
    if actor.is_admin:
        return
    if actor.is_vendor and product.owned_by(actor.user_id):
        return
    raise UnauthorizedError("Not authorized to manage this product")


def ensure_can_view_order(actor: Actor, order: Order) -> None:
    if actor.is_admin:
        return
    if actor.is_vendor and order.involves_vendor(actor.user_id):
        return
    if actor.role == Role.CUSTOMER and order.user_id == actor.user_id:
        return
    raise UnauthorizedError("Not authorized to view this order")


def ensure_can_update_order(actor: Actor, order: Order) -> None:
    """Customers never change order status; vendors only with a stake in it."""
    require_role(actor, Role.VENDOR, Role.ADMIN)
    if actor.is_vendor and not order.involves_vendor(actor.user_id):
        raise UnauthorizedError("Not authorized to update this order")
