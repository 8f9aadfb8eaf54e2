"""Domain service: Stock Reservation.

This service coordinates the cross-aggregate operation of taking stock
for an order's lines and putting it back when the order is cancelled.

Two phases keep an order all-or-nothing:
  Phase 1: resolve and validate every line against a read of the
            catalog.  Fails fast before any mutation.
  Phase 2: one guarded decrement per line.  A decrement rejected by a
            concurrent order rolls back every earlier line of the same
            request before the error surfaces.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass

import structlog

from bazaar.domain.exceptions import (
    ConflictError,
    EntityNotFoundError,
    InsufficientStockError,
    ValidationError,
)
from bazaar.domain.model.order import OrderItem, VariantRef
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Quantity, StockLocation, VariantStock
from bazaar.domain.repository.product_repository import ProductRepository

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LineRequest:
    """One requested order line: product, optional variant, quantity."""

    product_id: str
    quantity: int
    variant_id: str | None = None


class StockReservationService:

    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    # --- Phase 1 --------------------------------------------------------------

    def resolve(self, requests: list[LineRequest]) -> list[OrderItem]:
        """Validate every request and snapshot it into an OrderItem.

        Lines drawing on the same stock location are checked against
        their combined quantity.
        """
        items: list[OrderItem] = []
        wanted: dict[StockLocation, int] = defaultdict(int)
        products: dict[str, Product] = {}

        for request in requests:
            quantity = Quantity(request.quantity)
            product = products.get(request.product_id) or self._load(request.product_id)
            products[product.id] = product
            if not product.is_active:
                raise ValidationError(f"Product is no longer available: {product.name}")

            location = product.locate(request.variant_id)
            if isinstance(location, VariantStock) and not product.find_variant(location.variant_id).is_active:
                raise ValidationError(
                    f"Variant is no longer available: {product.describe_location(location)}"
                )
            wanted[location] += quantity.value
            available = product.available_at(location)
            if wanted[location] > available:
                raise InsufficientStockError(
                    f"Insufficient stock for {product.describe_location(location)} "
                    f"(need {wanted[location]}, have {available})",
                    product_id=product.id,
                    variant_id=request.variant_id if isinstance(location, VariantStock) else None,
                )

            items.append(
                OrderItem(
                    product_id=product.id,
                    name=product.name,
                    quantity=quantity,
                    unit_price=product.unit_price_at(location),
                    vendor_id=product.vendor_id,
                    variant=self._variant_ref(product, location),
                )
            )
        return items

    # --- Phase 2 --------------------------------------------------------------

    def reserve(self, items: list[OrderItem]) -> None:
        """Decrement stock for every item, or for none of them."""
        taken: list[OrderItem] = []
        for item in items:
            if not self._product_repo.try_withdraw(item.location, item.quantity.value):
                logger.warning(
                    "Stock decrement rejected, rolling back earlier lines",
                    product_id=item.product_id,
                    location=item.location.describe(),
                    quantity=item.quantity.value,
                    rolled_back=len(taken),
                )
                self.release(taken)
                raise ConflictError(
                    f"Stock for {item.name} changed while placing the order "
                    f"(need {item.quantity.value}); please retry"
                )
            taken.append(item)

    def release(self, items: list[OrderItem]) -> None:
        """Return each item's quantity to the location it was taken from.

        Products that have since disappeared are skipped; there is
        nothing left to restock.
        """
        for item in items:
            try:
                self._product_repo.restock(item.location, item.quantity.value)
            except EntityNotFoundError:
                logger.warning(
                    "Skipping restock of missing stock location",
                    product_id=item.product_id,
                    location=item.location.describe(),
                    quantity=item.quantity.value,
                )

    # --- Internal helpers -----------------------------------------------------

    def _load(self, product_id: str) -> Product:
        product = self._product_repo.get_by_id(product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{product_id}'")
        return product

    @staticmethod
    def _variant_ref(product: Product, location: StockLocation) -> VariantRef | None:
        if not isinstance(location, VariantStock):
            return None
        variant = product.find_variant(location.variant_id)
        return VariantRef(
            variant_id=variant.id,
            sku=variant.sku,
            size=variant.size,
            color=variant.color,
        )
