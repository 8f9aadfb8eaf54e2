"""Application service: Update Product use case."""

from __future__ import annotations

from bazaar.application.authorization import ensure_can_manage_product
from bazaar.application.dto import ProductDTO, product_to_dto
from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Actor, Money
from bazaar.domain.repository.product_repository import ProductRepository


class UpdateProductHandler:

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
        new_price: str | None = None,
        is_active: bool | None = None,
    ) -> ProductDTO:
        """Reprice a product or take it off / back onto the shelf.

        This does NOT affect any existing orders; they captured a
        price snapshot at creation time.
        """
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        ensure_can_manage_product(actor, product)

        def apply(current: Product) -> Product:
            if new_price is not None:
                current.update_price(Money.of(new_price))
            if is_active is not None:
                current.is_active = is_active
            return current

        updated = self._product_repo.update(product_id, apply)
        self._side_effects.invalidate(PRODUCTS_CACHE)
        self._side_effects.publish("product_updated", {"product_id": product_id})
        return product_to_dto(updated)
