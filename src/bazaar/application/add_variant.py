"""Application service: Add Variant use case."""

from __future__ import annotations

from bazaar.application.authorization import ensure_can_manage_product
from bazaar.application.dto import ProductDTO, product_to_dto
from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.product import Product, Variant
from bazaar.domain.model.value_objects import Actor, Money
from bazaar.domain.repository.product_repository import ProductRepository


class AddVariantHandler:

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
        name: str,
        price: str,
        stock: int = 0,
        sku: str | None = None,
        size: str | None = None,
        color: str | None = None,
        material: str | None = None,
    ) -> ProductDTO:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        ensure_can_manage_product(actor, product)
        if not name or not name.strip():
            raise ValidationError("Variant name is required")
        if sku and self._product_repo.sku_exists(sku):
            raise ValidationError(f"SKU '{sku}' already exists")

        variant = Variant(
            id=product.next_variant_id(),
            name=name.strip(),
            price=Money.of(price),
            stock=stock,
            sku=sku or None,
            size=size,
            color=color,
            material=material,
        )

        def attach(current: Product) -> Product:
            current.add_variant(variant)
            return current

        updated = self._product_repo.update(product_id, attach)
        self._side_effects.invalidate(PRODUCTS_CACHE)
        return product_to_dto(updated)
