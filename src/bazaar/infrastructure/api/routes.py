"""FastAPI endpoints.

Every route builds its handler from the application container and
returns the handler's DTO; domain exceptions are translated to status
codes by the handlers registered in ``app``.
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, Header, Request

from bazaar.application.add_product import AddProductHandler
from bazaar.application.add_variant import AddVariantHandler
from bazaar.application.confirm_payment import ConfirmPaymentHandler
from bazaar.application.create_coupon import CreateCouponHandler
from bazaar.application.create_order import CreateOrderHandler
from bazaar.application.create_payment_intent import CreatePaymentIntentHandler
from bazaar.application.delete_coupon import DeleteCouponHandler
from bazaar.application.dto import OrderItemSpec, PricingSpec
from bazaar.application.edit_review import EditReviewHandler
from bazaar.application.list_orders import ListOrdersHandler
from bazaar.application.list_products import ListProductsHandler
from bazaar.application.list_reviews import ListReviewsHandler
from bazaar.application.payment_webhook import PaymentWebhookHandler
from bazaar.application.remove_review import RemoveReviewHandler
from bazaar.application.remove_variant import RemoveVariantHandler
from bazaar.application.set_stock import SetStockHandler
from bazaar.application.show_coupon import ShowCouponHandler
from bazaar.application.show_order import ShowOrderHandler
from bazaar.application.show_product import ShowProductHandler
from bazaar.application.submit_review import SubmitReviewHandler
from bazaar.application.update_coupon import UpdateCouponHandler
from bazaar.application.update_order_status import UpdateOrderStatusHandler
from bazaar.application.update_product import UpdateProductHandler
from bazaar.application.update_variant import UpdateVariantHandler
from bazaar.application.validate_coupon import ValidateCouponHandler
from bazaar.domain.model.value_objects import Actor, Address
from bazaar.infrastructure.api.dependencies import get_actor, get_container
from bazaar.infrastructure.api.schemas import (
    AddVariantRequest,
    CreateCouponRequest,
    CreateOrderRequest,
    CreateProductRequest,
    EditReviewRequest,
    SetStockRequest,
    SubmitReviewRequest,
    UpdateCouponRequest,
    UpdateOrderStatusRequest,
    UpdateProductRequest,
    UpdateVariantRequest,
    ValidateCouponRequest,
)
from bazaar.infrastructure.bootstrap import Container

order_router = APIRouter(prefix="/orders", tags=["orders"])
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])
product_router = APIRouter(prefix="/products", tags=["products"])
review_router = APIRouter(prefix="/reviews", tags=["reviews"])
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])
health_router = APIRouter(tags=["health"])


def _optional(value) -> str | None:
    return None if value is None else str(value)


# --- Order endpoints ----------------------------------------------------------


@order_router.post("", status_code=201)
def create_order(
    body: CreateOrderRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    handler = CreateOrderHandler(
        container.orders, container.products, container.coupons, container.side_effects
    )
    address = body.shipping_address
    return handler.handle(
        actor,
        item_specs=[
            OrderItemSpec(i.product_id, i.quantity, i.variant_id) for i in body.order_items
        ],
        shipping_address=Address(
            street=address.street,
            city=address.city,
            state=address.state,
            zip_code=address.zip_code,
            country=address.country,
            phone=address.phone,
        ),
        pricing=PricingSpec(
            items_price=str(body.items_price),
            tax_price=str(body.tax_price),
            shipping_price=str(body.shipping_price),
            total_price=str(body.total_price),
        ),
        coupon_code=body.coupon_code,
        require_coupon=body.require_coupon,
        payment_method=body.payment_method,
    )


@order_router.get("")
def list_orders(
    status: str | None = None,
    page: int = 1,
    limit: int = 10,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return ListOrdersHandler(container.orders).handle(actor, status=status, page=page, limit=limit)


@order_router.get("/{order_id}")
def show_order(
    order_id: int,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return ShowOrderHandler(container.orders).handle(actor, order_id)


@order_router.put("/{order_id}/status")
def update_order_status(
    order_id: int,
    body: UpdateOrderStatusRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    handler = UpdateOrderStatusHandler(container.orders, container.products, container.side_effects)
    return handler.handle(actor, order_id, body.status, body.cancel_reason)


@order_router.post("/{order_id}/pay")
def create_payment_intent(
    order_id: int,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return CreatePaymentIntentHandler(container.orders, container.gateway).handle(actor, order_id)


# --- Webhooks -----------------------------------------------------------------


@webhook_router.post("/payments")
async def payment_webhook(
    request: Request,
    stripe_signature: str = Header(""),
    container: Container = Depends(get_container),
):
    payload = await request.body()
    handler = PaymentWebhookHandler(
        container.gateway,
        ConfirmPaymentHandler(container.orders, container.side_effects),
    )
    outcome = handler.handle(payload, stripe_signature)
    return {"received": True, "outcome": outcome}


# --- Coupon endpoints ---------------------------------------------------------


@coupon_router.post("", status_code=201)
def create_coupon(
    body: CreateCouponRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return CreateCouponHandler(container.coupons).handle(
        actor,
        code=body.code,
        discount_type=body.discount_type,
        discount_value=str(body.discount_value),
        start_date=body.start_date,
        end_date=body.end_date,
        description=body.description,
        max_discount_amount=_optional(body.max_discount_amount),
        min_purchase_amount=str(body.min_purchase_amount),
        usage_limit=body.usage_limit,
        per_user_limit=body.per_user_limit,
    )


@coupon_router.post("/validate")
def validate_coupon(
    body: ValidateCouponRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return ValidateCouponHandler(container.coupons).handle(actor, body.code, str(body.order_total))


@coupon_router.get("")
def list_coupons(
    is_active: bool | None = None,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return ShowCouponHandler(container.coupons).list_all(actor, is_active=is_active)


@coupon_router.get("/active")
def list_active_coupons(container: Container = Depends(get_container)):
    return ShowCouponHandler(container.coupons).list_active()


@coupon_router.get("/{code}")
def show_coupon(
    code: str,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return ShowCouponHandler(container.coupons).handle(actor, code)


@coupon_router.put("/{code}")
def update_coupon(
    code: str,
    body: UpdateCouponRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return UpdateCouponHandler(container.coupons).handle(
        actor,
        code,
        description=body.description,
        discount_value=_optional(body.discount_value),
        max_discount_amount=_optional(body.max_discount_amount),
        min_purchase_amount=_optional(body.min_purchase_amount),
        start_date=body.start_date,
        end_date=body.end_date,
        usage_limit=body.usage_limit,
        per_user_limit=body.per_user_limit,
        is_active=body.is_active,
    )


@coupon_router.delete("/{code}")
def delete_coupon(
    code: str,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    DeleteCouponHandler(container.coupons).handle(actor, code)
    return {"message": "Coupon deleted"}


# --- Product endpoints --------------------------------------------------------


@product_router.post("", status_code=201)
def create_product(
    body: CreateProductRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return AddProductHandler(container.products, container.side_effects).handle(
        actor,
        name=body.name,
        price=str(body.price),
        stock=body.stock,
        compare_at_price=_optional(body.compare_at_price),
        low_stock_threshold=body.low_stock_threshold,
        vendor_id=body.vendor_id,
    )


@product_router.get("")
def list_products(
    vendor_id: str | None = None,
    page: int = 1,
    limit: int = 12,
    container: Container = Depends(get_container),
):
    key = f"products:list:{vendor_id or '*'}:{page}:{limit}"
    cached = container.cache.get(key)
    if cached is not None:
        return cached
    listing = asdict(
        ListProductsHandler(container.products).handle(vendor_id=vendor_id, page=page, limit=limit)
    )
    container.cache.set(key, listing)
    return listing


@product_router.get("/low-stock")
def low_stock_products(
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return ListProductsHandler(container.products).low_stock(actor)


@product_router.get("/{product_id}")
def show_product(product_id: str, container: Container = Depends(get_container)):
    key = f"products:{product_id}"
    cached = container.cache.get(key)
    if cached is not None:
        return cached
    product = asdict(ShowProductHandler(container.products).handle(product_id))
    container.cache.set(key, product)
    return product


@product_router.put("/{product_id}")
def update_product(
    product_id: str,
    body: UpdateProductRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return UpdateProductHandler(container.products, container.side_effects).handle(
        actor, product_id, new_price=_optional(body.price), is_active=body.is_active
    )


@product_router.delete("/{product_id}")
def deactivate_product(
    product_id: str,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    # Soft delete: orders and reviews still point at the product.
    UpdateProductHandler(container.products, container.side_effects).handle(
        actor, product_id, is_active=False
    )
    return {"message": "Product deactivated"}


@product_router.post("/{product_id}/variants", status_code=201)
def add_variant(
    product_id: str,
    body: AddVariantRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return AddVariantHandler(container.products, container.side_effects).handle(
        actor,
        product_id,
        name=body.name,
        price=str(body.price),
        stock=body.stock,
        sku=body.sku,
        size=body.size,
        color=body.color,
        material=body.material,
    )


@product_router.put("/{product_id}/variants/{variant_id}")
def update_variant(
    product_id: str,
    variant_id: str,
    body: UpdateVariantRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return UpdateVariantHandler(container.products, container.side_effects).handle(
        actor,
        product_id,
        variant_id,
        name=body.name,
        price=_optional(body.price),
        sku=body.sku,
        size=body.size,
        color=body.color,
        material=body.material,
        is_active=body.is_active,
    )


@product_router.delete("/{product_id}/variants/{variant_id}")
def remove_variant(
    product_id: str,
    variant_id: str,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    return RemoveVariantHandler(container.products, container.side_effects).handle(
        actor, product_id, variant_id
    )


@product_router.put("/{product_id}/stock")
def set_stock(
    product_id: str,
    body: SetStockRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    handler = SetStockHandler(container.products, container.side_effects)
    return handler.handle(actor, product_id, body.quantity, body.variant_id)


# --- Review endpoints ---------------------------------------------------------


@review_router.post("", status_code=201)
def submit_review(
    body: SubmitReviewRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    handler = SubmitReviewHandler(
        container.reviews, container.products, container.orders, container.side_effects
    )
    return handler.handle(actor, body.product_id, body.rating, body.comment)


@review_router.get("/product/{product_id}")
def list_product_reviews(
    product_id: str,
    rating: int | None = None,
    page: int = 1,
    limit: int = 10,
    container: Container = Depends(get_container),
):
    handler = ListReviewsHandler(container.reviews, container.products)
    return handler.handle(product_id, rating=rating, page=page, limit=limit)


@review_router.put("/{review_id}")
def edit_review(
    review_id: int,
    body: EditReviewRequest,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    handler = EditReviewHandler(container.reviews, container.products, container.side_effects)
    return handler.handle(actor, review_id, rating=body.rating, comment=body.comment)


@review_router.delete("/{review_id}")
def remove_review(
    review_id: int,
    actor: Actor = Depends(get_actor),
    container: Container = Depends(get_container),
):
    handler = RemoveReviewHandler(container.reviews, container.products, container.side_effects)
    handler.handle(actor, review_id)
    return {"message": "Review removed"}


# --- Health -------------------------------------------------------------------


@health_router.get("/health")
def health():
    return {"status": "ok"}
