"""Pydantic request schemas for the HTTP API.

Amounts arrive as JSON numbers or strings and are carried as Decimal;
the domain does the business validation, these only shape the payload.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field

# --- Orders -------------------------------------------------------------------


class ShippingAddressSchema(BaseModel):
    street: str
    city: str
    state: str
    zip_code: str = Field(..., alias="zipCode")
    country: str
    phone: str | None = None

    model_config = {"populate_by_name": True}


class OrderItemRequest(BaseModel):
    product_id: str = Field(..., alias="product")
    quantity: int
    variant_id: str | None = Field(None, alias="variant")

    model_config = {"populate_by_name": True}


class CreateOrderRequest(BaseModel):
    model_config = {
        "populate_by_name": True,
        "json_schema_extra": {
            "examples": [
                {
                    "order_items": [{"product": "P0001", "quantity": 2}],
                    "shipping_address": {
                        "street": "1 Main St",
                        "city": "Springfield",
                        "state": "IL",
                        "zipCode": "62701",
                        "country": "US",
                    },
                    "items_price": "50.00",
                    "tax_price": "5.00",
                    "shipping_price": "10.00",
                    "total_price": "65.00",
                    "coupon_code": "SAVE10",
                }
            ]
        },
    }

    order_items: list[OrderItemRequest] = Field(default_factory=list)
    shipping_address: ShippingAddressSchema
    payment_method: str = "stripe"
    items_price: Decimal
    tax_price: Decimal
    shipping_price: Decimal
    total_price: Decimal
    coupon_code: str | None = None
    require_coupon: bool = False


class UpdateOrderStatusRequest(BaseModel):
    status: str
    cancel_reason: str | None = None


# --- Coupons ------------------------------------------------------------------


class CreateCouponRequest(BaseModel):
    code: str
    description: str = ""
    discount_type: str
    discount_value: Decimal
    max_discount_amount: Decimal | None = None
    min_purchase_amount: Decimal = Decimal("0")
    start_date: datetime
    end_date: datetime
    usage_limit: int | None = None
    per_user_limit: int = 1


class UpdateCouponRequest(BaseModel):
    """Every field is optional; only the ones sent are changed."""

    description: str | None = None
    discount_value: Decimal | None = None
    max_discount_amount: Decimal | None = None
    min_purchase_amount: Decimal | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    usage_limit: int | None = None
    per_user_limit: int | None = None
    is_active: bool | None = None


class ValidateCouponRequest(BaseModel):
    code: str
    order_total: Decimal


# --- Products -----------------------------------------------------------------


class CreateProductRequest(BaseModel):
    name: str = Field(..., max_length=255)
    price: Decimal
    stock: int = 0
    compare_at_price: Decimal | None = None
    low_stock_threshold: int = 10
    vendor_id: str | None = None


class AddVariantRequest(BaseModel):
    name: str
    price: Decimal
    stock: int = 0
    sku: str | None = Field(None, max_length=50)
    size: str | None = None
    color: str | None = None
    material: str | None = None


class UpdateProductRequest(BaseModel):
    price: Decimal | None = None
    is_active: bool | None = None


class UpdateVariantRequest(BaseModel):
    name: str | None = None
    price: Decimal | None = None
    sku: str | None = Field(None, max_length=50)
    size: str | None = None
    color: str | None = None
    material: str | None = None
    is_active: bool | None = None


class SetStockRequest(BaseModel):
    quantity: int
    variant_id: str | None = None


# --- Reviews ------------------------------------------------------------------


class SubmitReviewRequest(BaseModel):
    product_id: str
    rating: int
    comment: str = ""


class EditReviewRequest(BaseModel):
    rating: int | None = None
    comment: str | None = None
