"""Application service: List Products use cases (queries).

The storefront listing only shows products on the shelf; the low-stock
report is a back-office view for vendors and admins.
"""

from __future__ import annotations

from dataclasses import dataclass

from bazaar.application.authorization import require_role
from bazaar.application.dto import ProductDTO, product_to_dto
from bazaar.application.list_orders import MAX_PAGE_SIZE
from bazaar.domain.exceptions import ValidationError
from bazaar.domain.model.value_objects import Actor, Role
from bazaar.domain.repository.product_repository import ProductRepository


@dataclass(frozen=True)
class ProductPage:
    products: list[ProductDTO]
    total: int
    page: int
    total_pages: int


class ListProductsHandler:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def handle(
        self,
        vendor_id: str | None = None,
        page: int = 1,
        limit: int = 12,
    ) -> ProductPage:
        if page < 1 or not 1 <= limit <= MAX_PAGE_SIZE:
            raise ValidationError(f"Page must be >= 1 and limit within 1-{MAX_PAGE_SIZE}")
        products = [
            p for p in self._product_repo.list_all()
            if p.is_active and (vendor_id is None or p.vendor_id == vendor_id)
        ]
        products.sort(key=lambda p: p.name.lower())

        start = (page - 1) * limit
        return ProductPage(
            products=[product_to_dto(p) for p in products[start:start + limit]],
            total=len(products),
            page=page,
            total_pages=-(-len(products) // limit),
        )

    def low_stock(self, actor: Actor) -> list[ProductDTO]:
        """Active products at or under their threshold, sold-out ones included.

        Vendors only see their own products.
        """
        require_role(actor, Role.VENDOR, Role.ADMIN)
        products = [
            p for p in self._product_repo.list_all()
            if p.is_active
            and p.total_stock <= p.low_stock_threshold
            and (actor.is_admin or p.owned_by(actor.user_id))
        ]
        products.sort(key=lambda p: (p.total_stock, p.name.lower()))
        return [product_to_dto(p) for p in products]
