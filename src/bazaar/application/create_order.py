"""Application service: Create Order use case.

Orchestrates coupon evaluation, stock reservation and order persistence
so that a failed request leaves stock, sales and coupon usage exactly as
it found them.
"""

from __future__ import annotations

from datetime import datetime, timezone

import structlog

from bazaar.application.dto import OrderDTO, OrderItemSpec, PricingSpec, order_to_dto
from bazaar.application.side_effects import ORDERS_CACHE, PRODUCTS_CACHE, SideEffects
from bazaar.domain.exceptions import ConflictError, CouponInvalidError, ValidationError
from bazaar.domain.model.coupon import Coupon
from bazaar.domain.model.order import (
    CouponSnapshot,
    Order,
    OrderItem,
    generate_order_number,
)
from bazaar.domain.model.value_objects import Actor, Address, Money
from bazaar.domain.repository.coupon_repository import CouponRepository
from bazaar.domain.repository.order_repository import OrderNumberTakenError, OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.service import coupon_evaluator
from bazaar.domain.service.stock_reservation_service import (
    LineRequest,
    StockReservationService,
)

logger = structlog.get_logger(__name__)

ORDER_NUMBER_ATTEMPTS = 5


class CreateOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        coupon_repo: CouponRepository,
        side_effects: SideEffects | None = None,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._coupon_repo = coupon_repo
        self._side_effects = side_effects or SideEffects()

    def handle(
        self,
        actor: Actor,
        item_specs: list[OrderItemSpec],
        shipping_address: Address,
        pricing: PricingSpec,
        coupon_code: str | None = None,
        require_coupon: bool = False,
        payment_method: str = "stripe",
    ) -> OrderDTO:
        """Place a new order.

        Steps:
        1. Validate the request and snapshot each line from the catalog.
        2. Evaluate the coupon (a rejected coupon only drops the discount,
           unless ``require_coupon``).
        3. Take stock for every line, all-or-nothing.
        4. Claim the coupon redemption and persist the pending order;
           undo both reservations if either step fails.
        5. Fire cache, notification and email side effects.
        """
        if not item_specs:
            raise ValidationError("No order items")

        base_pricing = pricing.to_pricing()
        svc = StockReservationService(self._product_repo)
        items = svc.resolve(
            [LineRequest(s.product_id, s.quantity, s.variant_id) for s in item_specs]
        )
        self._check_items_price(items, base_pricing.items_price)

        coupon, discount = self._evaluate_coupon(
            actor, coupon_code, base_pricing.items_price, require_coupon
        )

        svc.reserve(items)
        claimed = False
        try:
            snapshot = None
            if coupon is not None:
                claimed = self._coupon_repo.claim_usage(
                    coupon.code, actor.user_id, datetime.now(timezone.utc)
                )
                if claimed:
                    snapshot = CouponSnapshot(
                        code=coupon.code,
                        discount_type=coupon.discount_type,
                        discount_value=coupon.discount_value,
                    )
                elif require_coupon:
                    raise ConflictError(f"Coupon {coupon.code} was used up while placing the order")
                else:
                    logger.info("Coupon used up concurrently, placing order without it", code=coupon.code)

            final_pricing = base_pricing.with_discount(discount) if snapshot else base_pricing
            order = Order.create(
                user_id=actor.user_id,
                items=items,
                shipping_address=shipping_address,
                pricing=final_pricing,
                coupon_applied=snapshot,
                payment_method=payment_method,
            )
            self._persist(order)
        except Exception:
            svc.release(items)
            if claimed:
                self._coupon_repo.release_usage(coupon.code, actor.user_id)
            raise

        logger.info(
            "Order created",
            order_id=order.id,
            order_number=order.order_number,
            user_id=order.user_id,
            total=str(order.pricing.total_price.amount),
            coupon=snapshot.code if snapshot else None,
        )
        self._after_create(order)
        return order_to_dto(order)

    # --- Steps ----------------------------------------------------------------

    @staticmethod
    def _check_items_price(items: list[OrderItem], items_price: Money) -> None:
        computed = Money.zero()
        for item in items:
            computed = computed + item.line_total
        if computed.amount != items_price.amount:
            raise ValidationError(
                f"Items price {items_price} does not match the catalog total {computed}"
            )

    def _evaluate_coupon(
        self,
        actor: Actor,
        code: str | None,
        subtotal: Money,
        required: bool,
    ) -> tuple[Coupon | None, Money]:
        if not code or not code.strip():
            if required:
                raise CouponInvalidError("A coupon code is required")
            return None, Money.zero()

        coupon = self._coupon_repo.get_by_code(code)
        if coupon is None:
            reason = "Invalid coupon code"
        else:
            result = coupon_evaluator.validate(coupon, actor.user_id, subtotal)
            if result.valid:
                return coupon, coupon_evaluator.compute_discount(coupon, subtotal)
            reason = result.reason

        if required:
            raise CouponInvalidError(reason)
        logger.info("Coupon not applied", code=code, reason=reason, user_id=actor.user_id)
        return None, Money.zero()

    def _persist(self, order: Order) -> None:
        for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
            try:
                self._order_repo.save(order)
                return
            except OrderNumberTakenError:
                logger.debug("Order number collision", order_number=order.order_number, attempt=attempt)
                order.order_number = generate_order_number()
        raise ConflictError("Could not allocate a unique order number; please retry")

    def _after_create(self, order: Order) -> None:
        effects = self._side_effects
        effects.invalidate(PRODUCTS_CACHE, ORDERS_CACHE)
        effects.publish(
            "order_created",
            {
                "order_id": order.id,
                "order_number": order.order_number,
                "user_id": order.user_id,
                "vendor_ids": sorted(order.vendor_ids),
                "status": order.status.value,
            },
        )
        try:
            self._publish_inventory(order)
        except Exception:
            logger.exception("Inventory notification failed", order_id=order.id)
        effects.email(
            order.user_id,
            f"Order {order.order_number} received",
            f"We received your order {order.order_number} "
            f"for {order.pricing.total_price}. It is now {order.status.value}.",
        )

    def _publish_inventory(self, order: Order) -> None:
        for product_id in sorted({item.product_id for item in order.items}):
            product = self._product_repo.get_by_id(product_id)
            if product is None:
                continue
            self._side_effects.publish(
                "inventory_updated",
                {
                    "product_id": product.id,
                    "stock": product.total_stock,
                    "low_stock": product.is_low_stock,
                },
            )
            if product.is_low_stock:
                logger.warning(
                    "Product stock is low",
                    product_id=product.id,
                    stock=product.total_stock,
                    threshold=product.low_stock_threshold,
                )
