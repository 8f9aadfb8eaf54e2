"""JSON-file-backed implementation of OrderRepository."""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path

from bazaar.domain.exceptions import ConflictError, EntityNotFoundError
from bazaar.domain.model.coupon import DiscountType
from bazaar.domain.model.order import (
    CouponSnapshot,
    Order,
    OrderItem,
    OrderStatus,
    PaymentResult,
    Pricing,
    VariantRef,
)
from bazaar.domain.model.value_objects import Address, Quantity
from bazaar.domain.repository.order_repository import OrderNumberTakenError, OrderRepository
from bazaar.infrastructure.persistence.json_file import (
    JsonFileStore,
    money_from_raw,
    money_to_raw,
    time_from_raw,
    time_to_raw,
)


class JsonOrderRepository(OrderRepository):

    def __init__(self, file_path: Path) -> None:
        self._store = JsonFileStore(file_path)

    # --- OrderRepository interface --------------------------------------------

    def next_id(self) -> int:
        orders = self._store.load_raw()
        if not orders:
            return 1
        return max(o["id"] for o in orders) + 1

    def get_by_id(self, order_id: int) -> Order | None:
        for raw in self._store.load_raw():
            if raw["id"] == order_id:
                return self._to_domain(raw)
        return None

    def list_all(self) -> list[Order]:
        return [self._to_domain(raw) for raw in self._store.load_raw()]

    def save(self, order: Order) -> None:
        with self._store.lock:
            orders = self._store.load_raw()

            if order.id is None:
                if any(raw["order_number"] == order.order_number for raw in orders):
                    raise OrderNumberTakenError(f"Order number {order.order_number} is taken")
                order.id = self.next_id()
                order.version = 1
                orders.append(self._to_raw(order))
                self._store.persist_raw(orders)
                return

            for i, raw in enumerate(orders):
                if raw["id"] == order.id:
                    break
            else:
                raise EntityNotFoundError(f"Order #{order.id} not found")
            if raw["version"] != order.version:
                raise ConflictError(f"Order #{order.id} was modified concurrently; reload and retry")

            order.version += 1
            orders[i] = self._to_raw(order)
            self._store.persist_raw(orders)

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_raw(order: Order) -> dict:
        pricing = order.pricing
        address = order.shipping_address
        coupon = order.coupon_applied
        payment = order.payment_result
        return {
            "id": order.id,
            "order_number": order.order_number,
            "user_id": order.user_id,
            "status": order.status.value,
            "version": order.version,
            "created_at": time_to_raw(order.created_at),
            "items": [
                {
                    "product_id": item.product_id,
                    "name": item.name,
                    "quantity": item.quantity.value,
                    "unit_price": money_to_raw(item.unit_price),
                    "vendor_id": item.vendor_id,
                    "variant": None if item.variant is None else {
                        "variant_id": item.variant.variant_id,
                        "sku": item.variant.sku,
                        "size": item.variant.size,
                        "color": item.variant.color,
                    },
                }
                for item in order.items
            ],
            "shipping_address": {
                "street": address.street,
                "city": address.city,
                "state": address.state,
                "zip_code": address.zip_code,
                "country": address.country,
                "phone": address.phone,
            },
            "pricing": {
                "items_price": money_to_raw(pricing.items_price),
                "tax_price": money_to_raw(pricing.tax_price),
                "shipping_price": money_to_raw(pricing.shipping_price),
                "discount_amount": money_to_raw(pricing.discount_amount),
                "total_price": money_to_raw(pricing.total_price),
            },
            "payment_method": order.payment_method,
            "coupon_applied": None if coupon is None else {
                "code": coupon.code,
                "discount_type": coupon.discount_type.value,
                "discount_value": str(coupon.discount_value),
            },
            "is_paid": order.is_paid,
            "paid_at": time_to_raw(order.paid_at),
            "payment_result": None if payment is None else {
                "id": payment.id,
                "status": payment.status,
                "update_time": time_to_raw(payment.update_time),
            },
            "is_delivered": order.is_delivered,
            "delivered_at": time_to_raw(order.delivered_at),
            "cancel_reason": order.cancel_reason,
            "cancelled_at": time_to_raw(order.cancelled_at),
            "cancelled_by": order.cancelled_by,
            "refund_amount": money_to_raw(order.refund_amount),
            "refunded_at": time_to_raw(order.refunded_at),
            "refund_reason": order.refund_reason,
        }

    @staticmethod
    def _to_domain(raw: dict) -> Order:
        items = [
            OrderItem(
                product_id=i["product_id"],
                name=i["name"],
                quantity=Quantity(i["quantity"]),
                unit_price=money_from_raw(i["unit_price"]),
                vendor_id=i["vendor_id"],
                variant=VariantRef(**i["variant"]) if i.get("variant") else None,
            )
            for i in raw["items"]
        ]
        pricing = raw["pricing"]
        coupon = raw.get("coupon_applied")
        payment = raw.get("payment_result")
        return Order(
            id=raw["id"],
            order_number=raw["order_number"],
            user_id=raw["user_id"],
            items=items,
            shipping_address=Address(**raw["shipping_address"]),
            pricing=Pricing(
                items_price=money_from_raw(pricing["items_price"]),
                tax_price=money_from_raw(pricing["tax_price"]),
                shipping_price=money_from_raw(pricing["shipping_price"]),
                discount_amount=money_from_raw(pricing["discount_amount"]),
                total_price=money_from_raw(pricing["total_price"]),
            ),
            payment_method=raw.get("payment_method", "stripe"),
            coupon_applied=None if coupon is None else CouponSnapshot(
                code=coupon["code"],
                discount_type=DiscountType(coupon["discount_type"]),
                discount_value=Decimal(coupon["discount_value"]),
            ),
            status=OrderStatus(raw["status"]),
            is_paid=raw.get("is_paid", False),
            paid_at=time_from_raw(raw.get("paid_at")),
            payment_result=None if payment is None else PaymentResult(
                id=payment["id"],
                status=payment["status"],
                update_time=time_from_raw(payment["update_time"]),
            ),
            is_delivered=raw.get("is_delivered", False),
            delivered_at=time_from_raw(raw.get("delivered_at")),
            cancel_reason=raw.get("cancel_reason"),
            cancelled_at=time_from_raw(raw.get("cancelled_at")),
            cancelled_by=raw.get("cancelled_by"),
            refund_amount=money_from_raw(raw.get("refund_amount")),
            refunded_at=time_from_raw(raw.get("refunded_at")),
            refund_reason=raw.get("refund_reason"),
            created_at=time_from_raw(raw["created_at"]),
            version=raw.get("version", 1),
        )
