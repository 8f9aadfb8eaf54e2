"""Local stand-in for the card payment provider.

Intents are minted locally and webhook payloads are signed with
HMAC-SHA256 over the raw body using the shared webhook secret, in the
``t=<timestamp>,v1=<hex digest>`` header form; the signed message is
``"<timestamp>.<body>"``.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import time

import structlog

from bazaar.application.ports import PaymentGateway, PaymentIntent

logger = structlog.get_logger(__name__)


class FakePaymentGateway(PaymentGateway):

    def __init__(self, webhook_secret: str) -> None:
        self._secret = webhook_secret.encode("utf-8")
        self.intents: dict[str, PaymentIntent] = {}

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        intent_id = f"pi_{secrets.token_hex(12)}"
        intent = PaymentIntent(
            id=intent_id,
            client_secret=f"{intent_id}_secret_{secrets.token_hex(8)}",
            amount=amount,
            currency=currency,
            status="requires_payment_method",
        )
        self.intents[intent_id] = intent
        logger.debug("Payment intent minted", payment_intent=intent_id, amount=amount, **metadata)
        return intent

    def sign(self, payload: bytes, timestamp: int | None = None) -> str:
        """Produce the signature header the provider would send."""
        timestamp = int(time.time()) if timestamp is None else timestamp
        return f"t={timestamp},v1={self._digest(timestamp, payload)}"

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        try:
            parts = dict(item.split("=", 1) for item in signature.split(","))
            timestamp = int(parts["t"])
            received = parts["v1"]
        except (ValueError, KeyError):
            return False
        return hmac.compare_digest(self._digest(timestamp, payload), received)

    def _digest(self, timestamp: int, payload: bytes) -> str:
        message = str(timestamp).encode("utf-8") + b"." + payload
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()
