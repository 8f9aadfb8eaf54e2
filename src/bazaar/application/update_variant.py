"""Application service: Update Variant use case."""

from __future__ import annotations

from bazaar.application.authorization import ensure_can_manage_product
from bazaar.application.dto import ProductDTO, product_to_dto
from bazaar.application.side_effects import PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Actor, Money
from bazaar.domain.repository.product_repository import ProductRepository


class UpdateVariantHandler:

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
        variant_id: str,
        name: str | None = None,
        price: str | None = None,
        sku: str | None = None,
        size: str | None = None,
        color: str | None = None,
        material: str | None = None,
        is_active: bool | None = None,
    ) -> ProductDTO:
        """Apply every argument that is not None to the variant.

        Stock is set through the stock use case, not here. Existing
        orders keep the variant price they captured.
        """
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product with ID '{product_id}' not found")
        ensure_can_manage_product(actor, product)

        changes: dict = {
            "name": name,
            "price": Money.of(price) if price is not None else None,
            "sku": sku,
            "size": size,
            "color": color,
            "material": material,
            "is_active": is_active,
        }
        changes = {field: value for field, value in changes.items() if value is not None}
        if not changes:
            raise ValidationError("Nothing to update")
        if sku and self._product_repo.sku_exists(sku, ignore_variant_id=variant_id):
            raise ValidationError(f"SKU '{sku}' already exists")

        def revise(current: Product) -> Product:
            current.revise_variant(variant_id, **changes)
            return current

        updated = self._product_repo.update(product_id, revise)
        self._side_effects.invalidate(PRODUCTS_CACHE)
        self._side_effects.publish(
            "product_updated", {"product_id": product_id, "variant_id": variant_id}
        )
        return product_to_dto(updated)
