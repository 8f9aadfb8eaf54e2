"""Application service: Set Stock use case.

A vendor's inventory count overwrites the stock at one location. It goes
through the repository's atomic ``update`` so it never clobbers a
concurrent order's decrement of a different location.
"""

from __future__ import annotations

import structlog

from bazaar.application.authorization import ensure_can_manage_product
from bazaar.application.dto import ProductDTO, product_to_dto
from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Actor, BaseStock, VariantStock
from bazaar.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class SetStockHandler:

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
        product_id: str,
        quantity: int,
        variant_id: str | None = None,
    ) -> ProductDTO:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        ensure_can_manage_product(actor, product)

        location = VariantStock(product_id, variant_id) if variant_id else BaseStock(product_id)

        def apply(current: Product) -> Product:
            current.set_stock(location, quantity)
            return current

        updated = self._product_repo.update(product_id, apply)
        logger.info("Stock set", product_id=product_id, variant_id=variant_id, quantity=quantity)
        self._side_effects.invalidate(PRODUCTS_CACHE)
        self._side_effects.publish(
            "inventory_updated",
            {
                "product_id": product_id,
                "stock": updated.total_stock,
                "low_stock": updated.is_low_stock,
            },
        )
        return product_to_dto(updated)
