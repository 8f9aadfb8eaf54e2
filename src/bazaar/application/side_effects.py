"""Fire-and-forget side effects of order, catalog and review changes.

Cache invalidation, notifications and email never decide the outcome of
the operation that triggered them: every failure is logged here and
swallowed.
"""

from __future__ import annotations

import structlog

from bazaar.application.ports import (
    CacheInvalidator,
    Mailer,
    Notifier,
    NullCache,
    NullMailer,
    NullNotifier,
)

logger = structlog.get_logger(__name__)

PRODUCTS_CACHE = "products:*"
ORDERS_CACHE = "orders:*"


class SideEffects:

    def __init__(
        self,
        notifier: Notifier | None = None,
        mailer: Mailer | None = None,
        cache: CacheInvalidator | None = None,
    ) -> None:
        self.notifier = notifier or NullNotifier()
        self.mailer = mailer or NullMailer()
        self.cache = cache or NullCache()

    def invalidate(self, *patterns: str) -> None:
        for pattern in patterns:
            try:
                self.cache.invalidate(pattern)
            except Exception:
                logger.exception("Cache invalidation failed", pattern=pattern)

    def publish(self, event: str, payload: dict) -> None:
        try:
            self.notifier.publish(event, payload)
        except Exception:
            logger.exception("Notification failed", event_name=event)

    def email(self, recipient: str, subject: str, body: str) -> None:
        try:
            self.mailer.send(recipient, subject, body)
        except Exception:
            logger.exception("Email delivery failed", recipient=recipient, subject=subject)
