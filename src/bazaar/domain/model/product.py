"""Product aggregate.

Products live independently of orders. Vendors create them, prices change,
and they are soft-deleted through ``is_active``. Stock and sales are only
mutated by order placement and cancellation; ratings only by the rating
aggregator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

import structlog

from bazaar.domain.exceptions import (
    InsufficientStockError,
    ValidationError,
    VariantNotFoundError,
)
from bazaar.domain.model.value_objects import (
    BaseStock,
    Money,
    StockLocation,
    VariantStock,
)

logger = structlog.get_logger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 10
REVISABLE_VARIANT_FIELDS = {"name", "price", "sku", "size", "color", "material", "is_active"}


@dataclass
class Variant:
    """A purchasable variation of a product (size, color, material)."""

    id: str
    name: str
    price: Money
    stock: int = 0
    sku: str | None = None
    size: str | None = None
    color: str | None = None
    material: str | None = None
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError("Variant stock cannot be negative")

    @property
    def attributes(self) -> dict[str, str]:
        return {
            key: value
            for key, value in (
                ("size", self.size),
                ("color", self.color),
                ("material", self.material),
            )
            if value
        }

    def label(self) -> str:
        parts = [v for v in (self.size, self.color) if v]
        return ", ".join(parts) if parts else self.name


@dataclass
class Ratings:
    average: float = 0.0
    count: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.average <= 5:
            raise ValidationError(f"Rating average must be within 0-5, got {self.average}")
        if self.count < 0:
            raise ValidationError("Rating count cannot be negative")


@dataclass
class Product:
    """A product in the catalog.

    This is an aggregate root: variants only exist inside it, and every
    stock movement goes through ``withdraw`` / ``restock`` addressed by a
    ``StockLocation``.
    """

    id: str
    vendor_id: str
    name: str
    price: Money
    stock: int = 0
    variants: list[Variant] = field(default_factory=list)
    compare_at_price: Money | None = None
    low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD
    sales: int = 0
    ratings: Ratings = field(default_factory=Ratings)
    is_active: bool = True

    def __post_init__(self) -> None:
        if self.stock < 0:
            raise ValidationError("Product stock cannot be negative")

    # --- Stock ----------------------------------------------------------------

    @property
    def has_variants(self) -> bool:
        return len(self.variants) > 0

    @property
    def total_stock(self) -> int:
        if self.has_variants:
            return sum(v.stock for v in self.variants)
        return self.stock

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.total_stock <= self.low_stock_threshold

    @property
    def is_out_of_stock(self) -> bool:
        return self.total_stock == 0

    def find_variant(self, variant_id: str) -> Variant:
        for variant in self.variants:
            if variant.id == variant_id:
                return variant
        raise VariantNotFoundError(f"Variant not found for product: {self.name}")

    def locate(self, variant_id: str | None) -> StockLocation:
        """Resolve where an order line draws its stock from.

        Only products with variants honour a variant reference; for simple
        products the base counter is used even if one was supplied.
        """
        if self.has_variants and variant_id:
            self.find_variant(variant_id)
            return VariantStock(self.id, variant_id)
        return BaseStock(self.id)

    def available_at(self, location: StockLocation) -> int:
        if isinstance(location, VariantStock):
            return self.find_variant(location.variant_id).stock
        return self.stock

    def unit_price_at(self, location: StockLocation) -> Money:
        if isinstance(location, VariantStock):
            return self.find_variant(location.variant_id).price
        return self.price

    def withdraw(self, location: StockLocation, quantity: int) -> None:
        """Take ``quantity`` units out of stock and count them as sold."""
        if quantity <= 0:
            raise ValidationError("Withdraw quantity must be positive")
        available = self.available_at(location)
        if quantity > available:
            raise InsufficientStockError(
                f"Insufficient stock for {self.describe_location(location)} "
                f"(need {quantity}, have {available})",
                product_id=self.id,
                variant_id=getattr(location, "variant_id", None),
            )
        self._set_stock(location, available - quantity)
        self.sales += quantity

    def restock(self, location: StockLocation, quantity: int) -> None:
        """Exact inverse of ``withdraw``: stock back, sales down."""
        if quantity <= 0:
            raise ValidationError("Restock quantity must be positive")
        self._set_stock(location, self.available_at(location) + quantity)
        if quantity > self.sales:
            # More units came back than were ever sold: a line restocked twice.
            logger.warning(
                "Restock exceeds recorded sales",
                product_id=self.id,
                location=location.describe(),
                quantity=quantity,
                sales=self.sales,
            )
        self.sales = max(0, self.sales - quantity)

    def set_stock(self, location: StockLocation, quantity: int) -> None:
        """Overwrite the stock level (vendor inventory count)."""
        if quantity < 0:
            raise ValidationError("Stock cannot be negative")
        self._set_stock(location, quantity)

    # --- Catalog --------------------------------------------------------------

    def add_variant(self, variant: Variant) -> None:
        if any(v.id == variant.id for v in self.variants):
            raise ValidationError(f"Variant '{variant.id}' already exists")
        if variant.sku and any(v.sku == variant.sku for v in self.variants):
            raise ValidationError(f"SKU '{variant.sku}' already exists")
        self.variants.append(variant)

    def next_variant_id(self) -> str:
        """Ids keep counting past removed variants so none is ever reused."""
        prefix = f"{self.id}-v"
        used = [
            int(v.id[len(prefix):])
            for v in self.variants
            if v.id.startswith(prefix) and v.id[len(prefix):].isdigit()
        ]
        return f"{prefix}{max(used, default=0) + 1}"

    def revise_variant(self, variant_id: str, **changes) -> Variant:
        """Change a variant's descriptive fields, price or availability.

        Stock is not revised here; it moves through ``set_stock`` and orders.
        """
        variant = self.find_variant(variant_id)
        unknown = set(changes) - REVISABLE_VARIANT_FIELDS
        if unknown:
            raise ValidationError(f"Cannot change variant field(s): {', '.join(sorted(unknown))}")
        if "name" in changes and not (changes["name"] or "").strip():
            raise ValidationError("Variant name is required")
        if "price" in changes and changes["price"].amount <= 0:
            raise ValidationError("Variant price must be greater than zero")
        sku = changes.get("sku")
        if sku and any(v.sku == sku and v.id != variant_id for v in self.variants):
            raise ValidationError(f"SKU '{sku}' already exists")
        for name, value in changes.items():
            setattr(variant, name, value.strip() if name == "name" else value)
        return variant

    def remove_variant(self, variant_id: str) -> Variant:
        """Drop a variant. With none left the base counter is authoritative again."""
        variant = self.find_variant(variant_id)
        self.variants.remove(variant)
        return variant

    def update_price(self, new_price: Money) -> None:
        """Change the product price.

        This does NOT affect any existing orders because orders
        capture a price snapshot at creation time.
        """
        if new_price.amount <= 0:
            raise ValidationError("Product price must be greater than zero")
        self.price = new_price

    @property
    def discount_percentage(self) -> int:
        if self.compare_at_price is None or self.compare_at_price <= self.price:
            return 0
        off = (self.compare_at_price.amount - self.price.amount) / self.compare_at_price.amount
        return int((off * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def owned_by(self, vendor_id: str) -> bool:
        return self.vendor_id == vendor_id

    def describe_location(self, location: StockLocation) -> str:
        if isinstance(location, VariantStock):
            return f"{self.name} ({self.find_variant(location.variant_id).label()})"
        return self.name

    # --- Internal helpers -----------------------------------------------------

    def _set_stock(self, location: StockLocation, quantity: int) -> None:
        if isinstance(location, VariantStock):
            self.find_variant(location.variant_id).stock = quantity
        else:
            self.stock = quantity
