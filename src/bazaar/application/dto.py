"""Data Transfer Objects: plain containers that cross layer boundaries.

DTOs carry data between the CLI/HTTP adapters and the application layer
without exposing domain internals to the outside world. Amounts leave as
two-decimal strings ("15.00"), timestamps as ISO-8601 strings.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from bazaar.domain.model.coupon import Coupon
from bazaar.domain.model.order import Order, Pricing
from bazaar.domain.model.product import Product
from bazaar.domain.model.review import Review
from bazaar.domain.model.value_objects import Money


# --- Inputs -------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: what the customer asked for."""

    product_id: str
    quantity: int
    variant_id: str | None = None


@dataclass(frozen=True)
class PricingSpec:
    """Input: caller-computed price breakdown (before any coupon)."""

    items_price: str
    tax_price: str
    shipping_price: str
    total_price: str

    def to_pricing(self) -> Pricing:
        return Pricing(
            items_price=Money.of(self.items_price),
            tax_price=Money.of(self.tax_price),
            shipping_price=Money.of(self.shipping_price),
            total_price=Money.of(self.total_price),
        )


# --- Outputs ------------------------------------------------------------------


@dataclass(frozen=True)
class OrderItemDTO:
    product_id: str
    name: str
    quantity: int
    unit_price: str
    line_total: str
    vendor_id: str
    variant_id: str | None = None
    sku: str | None = None
    size: str | None = None
    color: str | None = None


@dataclass(frozen=True)
class OrderDTO:
    id: int
    order_number: str
    user_id: str
    status: str
    items: list[OrderItemDTO]
    items_price: str
    tax_price: str
    shipping_price: str
    discount_amount: str
    total_price: str
    coupon_code: str | None
    payment_method: str
    is_paid: bool
    paid_at: str | None
    is_delivered: bool
    delivered_at: str | None
    cancel_reason: str | None
    cancelled_at: str | None
    created_at: str


@dataclass(frozen=True)
class VariantDTO:
    id: str
    name: str
    price: str
    stock: int
    sku: str | None
    attributes: dict[str, str]


@dataclass(frozen=True)
class ProductDTO:
    id: str
    vendor_id: str
    name: str
    price: str
    compare_at_price: str | None
    discount_percentage: int
    stock: int
    total_stock: int
    is_low_stock: bool
    is_out_of_stock: bool
    sales: int
    rating_average: float
    rating_count: int
    is_active: bool
    variants: list[VariantDTO]


@dataclass(frozen=True)
class ReviewDTO:
    id: int
    product_id: str
    user_id: str
    rating: int
    comment: str
    is_verified: bool
    created_at: str


@dataclass(frozen=True)
class CouponDTO:
    code: str
    description: str
    discount_type: str
    discount_value: str
    max_discount_amount: str | None
    min_purchase_amount: str
    start_date: str
    end_date: str
    usage_limit: int | None
    used_count: int
    per_user_limit: int
    is_active: bool


@dataclass(frozen=True)
class CouponQuoteDTO:
    """Output of a coupon check: what the coupon would take off."""

    code: str
    discount_type: str
    discount_value: str
    discount_amount: str
    final_total: str


@dataclass(frozen=True)
class PaymentIntentDTO:
    order_id: int
    payment_intent_id: str
    client_secret: str
    amount: int
    currency: str


# --- Mapping ------------------------------------------------------------------


def amount(money: Money | None) -> str | None:
    return None if money is None else f"{money.amount:.2f}"


def timestamp(value: datetime | None) -> str | None:
    return None if value is None else value.isoformat()


def order_to_dto(order: Order) -> OrderDTO:
    return OrderDTO(
        id=order.id,  # type: ignore[arg-type]
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status.value,
        items=[
            OrderItemDTO(
                product_id=item.product_id,
                name=item.name,
                quantity=item.quantity.value,
                unit_price=amount(item.unit_price),
                line_total=amount(item.line_total),
                vendor_id=item.vendor_id,
                variant_id=item.variant.variant_id if item.variant else None,
                sku=item.variant.sku if item.variant else None,
                size=item.variant.size if item.variant else None,
                color=item.variant.color if item.variant else None,
            )
            for item in order.items
        ],
        items_price=amount(order.pricing.items_price),
        tax_price=amount(order.pricing.tax_price),
        shipping_price=amount(order.pricing.shipping_price),
        discount_amount=amount(order.pricing.discount_amount),
        total_price=amount(order.pricing.total_price),
        coupon_code=order.coupon_applied.code if order.coupon_applied else None,
        payment_method=order.payment_method,
        is_paid=order.is_paid,
        paid_at=timestamp(order.paid_at),
        is_delivered=order.is_delivered,
        delivered_at=timestamp(order.delivered_at),
        cancel_reason=order.cancel_reason,
        cancelled_at=timestamp(order.cancelled_at),
        created_at=timestamp(order.created_at),
    )


def product_to_dto(product: Product) -> ProductDTO:
    return ProductDTO(
        id=product.id,
        vendor_id=product.vendor_id,
        name=product.name,
        price=amount(product.price),
        compare_at_price=amount(product.compare_at_price),
        discount_percentage=product.discount_percentage,
        stock=product.stock,
        total_stock=product.total_stock,
        is_low_stock=product.is_low_stock,
        is_out_of_stock=product.is_out_of_stock,
        sales=product.sales,
        rating_average=product.ratings.average,
        rating_count=product.ratings.count,
        is_active=product.is_active,
        variants=[
            VariantDTO(
                id=v.id,
                name=v.name,
                price=amount(v.price),
                stock=v.stock,
                sku=v.sku,
                attributes=v.attributes,
            )
            for v in product.variants
        ],
    )


def review_to_dto(review: Review) -> ReviewDTO:
    return ReviewDTO(
        id=review.id,  # type: ignore[arg-type]
        product_id=review.product_id,
        user_id=review.user_id,
        rating=review.rating,
        comment=review.comment,
        is_verified=review.is_verified,
        created_at=timestamp(review.created_at),
    )


def coupon_to_dto(coupon: Coupon) -> CouponDTO:
    return CouponDTO(
        code=coupon.code,
        description=coupon.description,
        discount_type=coupon.discount_type.value,
        discount_value=str(coupon.discount_value),
        max_discount_amount=amount(coupon.max_discount_amount),
        min_purchase_amount=amount(coupon.min_purchase_amount),
        start_date=timestamp(coupon.start_date),
        end_date=timestamp(coupon.end_date),
        usage_limit=coupon.usage_limit,
        used_count=coupon.used_count,
        per_user_limit=coupon.per_user_limit,
        is_active=coupon.is_active,
    )
