"""Composition root: wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.
"""

from __future__ import annotations

from dataclasses import dataclass

from bazaar.application.ports import PaymentGateway
from bazaar.application.side_effects import SideEffects
from bazaar.domain.repository.coupon_repository import CouponRepository
from bazaar.domain.repository.order_repository import OrderRepository
from bazaar.domain.repository.product_repository import ProductRepository
from bazaar.domain.repository.review_repository import ReviewRepository
from bazaar.infrastructure.adapters.fake_payment_gateway import FakePaymentGateway
from bazaar.infrastructure.adapters.log_channels import LoggingMailer, LoggingNotifier
from bazaar.infrastructure.adapters.ttl_cache import TtlCache
from bazaar.infrastructure.persistence.json_coupon_repository import JsonCouponRepository
from bazaar.infrastructure.persistence.json_order_repository import JsonOrderRepository
from bazaar.infrastructure.persistence.json_product_repository import JsonProductRepository
from bazaar.infrastructure.persistence.json_review_repository import JsonReviewRepository
from bazaar.infrastructure.settings import Settings


@dataclass
class Container:
    settings: Settings
    products: ProductRepository
    orders: OrderRepository
    coupons: CouponRepository
    reviews: ReviewRepository
    cache: TtlCache
    gateway: PaymentGateway
    side_effects: SideEffects


def build_container(settings: Settings | None = None) -> Container:
    settings = settings or Settings.from_env()
    data_dir = settings.data_dir
    cache = TtlCache(settings.cache_ttl)
    return Container(
        settings=settings,
        products=JsonProductRepository(data_dir / "products.json"),
        orders=JsonOrderRepository(data_dir / "orders.json"),
        coupons=JsonCouponRepository(data_dir / "coupons.json"),
        reviews=JsonReviewRepository(data_dir / "reviews.json"),
        cache=cache,
        gateway=FakePaymentGateway(settings.webhook_secret),
        side_effects=SideEffects(
            notifier=LoggingNotifier(),
            mailer=LoggingMailer(),
            cache=cache,
        ),
    )
