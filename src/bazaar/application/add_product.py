"""Application service: Add Product use case."""

from __future__ import annotations

import structlog

from bazaar.application.authorization import require_role
from bazaar.application.dto import ProductDTO, product_to_dto
from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.product import DEFAULT_LOW_STOCK_THRESHOLD, Product
from bazaar.domain.model.value_objects import Actor, Money, Role
from bazaar.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class AddProductHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._side_effects = side_effects or SideEffects()

    def handle(
        self,
        actor: Actor,
        name: str,
        price: str,
        stock: int = 0,
        compare_at_price: str | None = None,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        vendor_id: str | None = None,
    ) -> ProductDTO:
        """Add a new product to the catalog.

        Vendors always list under their own id; an admin may list on a
        vendor's behalf with ``vendor_id``.
        """
        require_role(actor, Role.VENDOR, Role.ADMIN)
        if not name or not name.strip():
            raise ValidationError("Product name is required")
        if low_stock_threshold < 0:
            raise ValidationError("Low stock threshold cannot be negative")

        owner = actor.user_id if actor.is_vendor else (vendor_id or actor.user_id)
        product = Product(
            id=self._product_repo.next_id(),
            vendor_id=owner,
            name=name.strip(),
            price=Money.of(price),
            stock=stock,
            compare_at_price=Money.of(compare_at_price) if compare_at_price else None,
            low_stock_threshold=low_stock_threshold,
        )
        if product.price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self._product_repo.save(product)

        logger.info("Product added", product_id=product.id, vendor_id=owner)
        self._side_effects.invalidate(PRODUCTS_CACHE)
        self._side_effects.publish("product_created", {"product_id": product.id, "vendor_id": owner})
        return product_to_dto(product)
