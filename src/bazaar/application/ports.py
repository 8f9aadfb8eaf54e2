"""Ports for the collaborators that live outside the order engine.

Real-time fan-out, email, cache and the payment provider are reached
only through these interfaces. The null implementations let the engine
run where no delivery channel is configured.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


class Notifier(ABC):
    """Real-time event fan-out (websocket rooms, push, ...)."""

    @abstractmethod
    def publish(self, event: str, payload: dict) -> None:
        """Broadcast ``event`` with a JSON-serializable payload."""


class Mailer(ABC):

    @abstractmethod
    def send(self, recipient: str, subject: str, body: str) -> None:
        """Send a plain-text message; ``recipient`` is a user id."""


class CacheInvalidator(ABC):

    @abstractmethod
    def invalidate(self, pattern: str) -> int:
        """Drop every cached key matching the glob ``pattern``; return count."""


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str
    amount: int  # minor units (cents)
    currency: str
    status: str


class PaymentGateway(ABC):

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str],
    ) -> PaymentIntent:
        """Open a payment intent for ``amount`` cents."""

    @abstractmethod
    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        """Verify that a webhook payload is authentically from the provider."""


class NullNotifier(Notifier):
    def publish(self, event: str, payload: dict) -> None:
        return None


class NullMailer(Mailer):
    def send(self, recipient: str, subject: str, body: str) -> None:
        return None


class NullCache(CacheInvalidator):
    def invalidate(self, pattern: str) -> int:
        return 0
