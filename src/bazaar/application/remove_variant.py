"""Application service: Remove Variant use case.

The variant is deleted outright. Orders keep their line snapshot, and
cancelling one of them later skips the restock of a variant that no
longer exists.
"""

from __future__ import annotations

import structlog

from bazaar.application.authorization import ensure_can_manage_product
from bazaar.application.dto import ProductDTO, product_to_dto
from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Actor
from bazaar.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


class RemoveVariantHandler:

    def __init__(
        self,
        product_repo: ProductRepository,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._product_repo = product_repo
        self._side_effects = side_effects or SideEffects()

    def handle(self, actor: Actor, product_id: str, variant_id: str) -> ProductDTO:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        ensure_can_manage_product(actor, product)

        def detach(current: Product) -> Product:
            removed = current.remove_variant(variant_id)
            logger.info(
                "Variant removed",
                product_id=product_id,
                variant_id=variant_id,
                stock_dropped=removed.stock,
            )
            return current

        updated = self._product_repo.update(product_id, detach)
        self._side_effects.invalidate(PRODUCTS_CACHE)
        self._side_effects.publish(
            "product_updated", {"product_id": product_id, "variant_id": variant_id}
        )
        return product_to_dto(updated)
