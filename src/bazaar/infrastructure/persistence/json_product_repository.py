"""JSON-file-backed implementation of ProductRepository."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, TypeVar

from bazaar.domain.exceptions import EntityNotFoundError
from bazaar.domain.model.product import Product, Ratings, Variant
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.infrastructure.persistence.json_file import (
    JsonFileStore,
    money_from_raw,
    money_to_raw,
)

T = TypeVar("T")


class JsonProductRepository(ProductRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonFileStore(file_path)

    # --- ProductRepository interface ------------------------------------------

    def next_id(self) -> str:
        with self._store.lock:
            numbers = [
                int(raw["id"][1:])
                for raw in self._store.load_raw()
                if raw["id"].startswith("P") and raw["id"][1:].isdigit()
            ]
            return f"P{max(numbers, default=0) + 1:04d}"

    def get_by_id(self, product_id: str) -> Product | None:
        for raw in self._store.load_raw():
            if raw["id"] == product_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Product]:
        return [self._to_domain(raw) for raw in self._store.load_raw()]

    def save(self, product: Product) -> None:
        with self._store.lock:
            products = self._store.load_raw()

            # Upsert: replace if exists, otherwise append
            for i, raw in enumerate(products):
                if raw["id"] == product.id:
                    products[i] = self._to_raw(product)
                    break
            else:
                products.append(self._to_raw(product))

            self._store.persist_raw(products)

    def update(self, product_id: str, mutation: Callable[[Product], T]) -> T:
        with self._store.lock:
            products = self._store.load_raw()
            for i, raw in enumerate(products):
                if raw["id"] == product_id:
                    break
            else:
                raise EntityNotFoundError(f"Product not found: '{product_id}'")

            product = self._to_domain(raw)
            result = mutation(product)
            products[i] = self._to_raw(product)
            self._store.persist_raw(products)
            return result

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(product: Product) -> dict:
        return {
            "id": product.id,
            "vendor_id": product.vendor_id,
            "name": product.name,
            "price": money_to_raw(product.price),
            "compare_at_price": money_to_raw(product.compare_at_price),
            "stock": product.stock,
            "low_stock_threshold": product.low_stock_threshold,
            "sales": product.sales,
            "ratings": {"average": product.ratings.average, "count": product.ratings.count},
            "is_active": product.is_active,
            "variants": [
                {
                    "id": v.id,
                    "name": v.name,
                    "price": money_to_raw(v.price),
                    "stock": v.stock,
                    "sku": v.sku,
                    "size": v.size,
                    "color": v.color,
                    "material": v.material,
                    "is_active": v.is_active,
                }
                for v in product.variants
            ],
        }

    @staticmethod
    def _to_domain(raw: dict) -> Product:
        return Product(
            id=raw["id"],
            vendor_id=raw["vendor_id"],
            name=raw["name"],
            price=money_from_raw(raw["price"]),
            compare_at_price=money_from_raw(raw.get("compare_at_price")),
            stock=raw.get("stock", 0),
            low_stock_threshold=raw.get("low_stock_threshold", 10),
            sales=raw.get("sales", 0),
            ratings=Ratings(**raw.get("ratings", {})),
            is_active=raw.get("is_active", True),
            variants=[
                Variant(
                    id=v["id"],
                    name=v["name"],
                    price=money_from_raw(v["price"]),
                    stock=v.get("stock", 0),
                    sku=v.get("sku"),
                    size=v.get("size"),
                    color=v.get("color"),
                    material=v.get("material"),
                    is_active=v.get("is_active", True),
                )
                for v in raw.get("variants", [])
            ],
        )
