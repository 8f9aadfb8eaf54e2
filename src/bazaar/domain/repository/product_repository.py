"""Abstract repository for Product aggregate.

Defined in the domain layer so the domain never depends on
infrastructure. Concrete implementations (JSON, in-memory) live in the
infrastructure layer and the test suite.

Stock and sales are contended between concurrent orders, so they are
only ever changed through ``update``: implementations must apply the
mutation to the *currently stored* product and persist it as one atomic
step (row lock, file lock, conditional update).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, TypeVar

from bazaar.domain.model.product import Product, Ratings
from bazaar.domain.model.value_objects import StockLocation

T = TypeVar("T")


class ProductRepository(ABC):

    @abstractmethod
    def next_id(self) -> str:
        """Generate the next unique product ID."""

    @abstractmethod
    def get_by_id(self, product_id: str) -> Product | None:
        """Return a product by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Product]:
        """Return every product in the catalog."""

    @abstractmethod
    def save(self, product: Product) -> None:
        """Persist a new product."""

    @abstractmethod
    def update(self, product_id: str, mutation: Callable[[Product], T]) -> T:
        """Atomically apply ``mutation`` to the stored product and persist it.

        Raises EntityNotFoundError if the product does not exist. If the
        mutation raises, nothing is persisted.
        """

    # --- Guarded stock movements ----------------------------------------------

    def try_withdraw(self, location: StockLocation, quantity: int) -> bool:
        """``stock -= quantity WHERE stock >= quantity``; False if rejected."""

        def take(product: Product) -> bool:
            if product.available_at(location) < quantity:
                return False
            product.withdraw(location, quantity)
            return True

        return self.update(location.product_id, take)

    def restock(self, location: StockLocation, quantity: int) -> None:
        self.update(location.product_id, lambda p: p.restock(location, quantity))

    def set_ratings(self, product_id: str, ratings: Ratings) -> None:
        def apply(product: Product) -> None:
            product.ratings = ratings

        self.update(product_id, apply)

    def sku_exists(self, sku: str, ignore_variant_id: str | None = None) -> bool:
        return any(
            variant.sku == sku and variant.id != ignore_variant_id
            for product in self.list_all()
            for variant in product.variants
        )
