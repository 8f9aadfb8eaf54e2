"""Application service: Payment provider webhook.

Verifies the provider's signature and routes the event. Problems on our
side (unknown order, malformed metadata) are logged and acknowledged: the
provider retries on its own schedule, and an error response would only
make it retry an event we can never process.
"""

from __future__ import annotations

import json

import structlog

from bazaar.application.confirm_payment import ConfirmPaymentHandler
from bazaar.application.ports import PaymentGateway
from bazaar.domain.exceptions import EntityNotFoundError, ValidationError

logger = structlog.get_logger(__name__)

PAYMENT_SUCCEEDED = "payment_intent.succeeded"
PAYMENT_FAILED = "payment_intent.payment_failed"


class PaymentWebhookHandler:

    def __init__(
        self,
        gateway: PaymentGateway,
        confirm_payment: ConfirmPaymentHandler,
    ) -> None:
        self._gateway = gateway
        self._confirm_payment = confirm_payment

    def handle(self, payload: bytes, signature: str) -> str:
        """Process one webhook delivery and return a short outcome label."""
        if not self._gateway.verify_webhook_signature(payload, signature):
            logger.warning("Webhook signature verification failed")
            raise ValidationError("Webhook signature verification failed")

        try:
            event = json.loads(payload)
            event_type = event["type"]
            intent = event["data"]["object"]
        except (ValueError, KeyError, TypeError) as exc:
            raise ValidationError(f"Malformed webhook payload: {exc}") from exc

        if event_type == PAYMENT_SUCCEEDED:
            return self._on_succeeded(intent)
        if event_type == PAYMENT_FAILED:
            logger.warning("Payment failed", payment_intent=intent.get("id"))
            return "payment_failed"

        logger.info("Unhandled webhook event type", event_type=event_type)
        return "ignored"

    def _on_succeeded(self, intent: dict) -> str:
        reference = intent.get("id", "")
        raw_order_id = (intent.get("metadata") or {}).get("orderId")
        try:
            order_id = int(raw_order_id)
        except (TypeError, ValueError):
            logger.error("Payment intent without a usable order id", payment_intent=reference, order_id=raw_order_id)
            return "order_not_found"

        try:
            changed = self._confirm_payment.handle(order_id, reference, intent.get("status", "succeeded"))
        except EntityNotFoundError:
            logger.error("Payment succeeded for unknown order", payment_intent=reference, order_id=order_id)
            return "order_not_found"
        return "paid" if changed else "already_paid"
