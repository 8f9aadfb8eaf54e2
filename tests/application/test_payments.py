"""Integration tests for payment intents, confirmation and the webhook."""

import json

import pytest

from bazaar.application.confirm_payment import ConfirmPaymentHandler
from bazaar.application.create_order import CreateOrderHandler
from bazaar.application.create_payment_intent import CreatePaymentIntentHandler
from bazaar.application.dto import OrderItemSpec, PricingSpec
from bazaar.application.payment_webhook import PaymentWebhookHandler
from bazaar.application.side_effects import SideEffects
from bazaar.application.update_order_status import UpdateOrderStatusHandler
from bazaar.domain.exceptions import EntityNotFoundError, UnauthorizedError, ValidationError
from bazaar.domain.model.order import OrderStatus
from bazaar.domain.model.product import Product
from bazaar.domain.model.value_objects import Actor, Address, Money, Role
from tests.fakes import (
    FakeCouponRepository,
    FakeOrderRepository,
    FakeProductRepository,
    RecordingMailer,
    RecordingNotifier,
    StubPaymentGateway,
)

CUSTOMER = Actor("alice", Role.CUSTOMER)
ADDRESS = Address("1 Main St", "Springfield", "IL", "62701", "US")


def _setup():
    order_repo = FakeOrderRepository()
    product_repo = FakeProductRepository([
        Product(id="P1", vendor_id="v1", name="Mug", price=Money.of("10.00"), stock=10),
    ])
    notifier, mailer = RecordingNotifier(), RecordingMailer()
    effects = SideEffects(notifier, mailer)
    order = CreateOrderHandler(order_repo, product_repo, FakeCouponRepository(), effects).handle(
        CUSTOMER,
        [OrderItemSpec("P1", 2)],
        ADDRESS,
        PricingSpec("20.00", "1.60", "5.00", "26.60"),
    )
    notifier.events.clear()
    mailer.sent.clear()
    return order.id, order_repo, product_repo, effects, notifier, mailer


def _event(event_type: str, order_id="1", intent_id: str = "pi_123") -> bytes:
    return json.dumps({
        "type": event_type,
        "data": {"object": {"id": intent_id, "status": "succeeded", "metadata": {"orderId": order_id}}},
    }).encode()


class TestCreatePaymentIntent:

    def test_amount_in_cents(self):
        order_id, order_repo, _, _, _, _ = _setup()
        gateway = StubPaymentGateway()
        dto = CreatePaymentIntentHandler(order_repo, gateway).handle(CUSTOMER, order_id)

        assert dto.amount == 2660
        assert dto.currency == "usd"
        assert dto.client_secret.startswith(dto.payment_intent_id)
        assert gateway.created[0][2] == {"orderId": str(order_id), "userId": "alice"}

    def test_other_customer_cannot_pay(self):
        order_id, order_repo, *_ = _setup()
        with pytest.raises(UnauthorizedError):
            CreatePaymentIntentHandler(order_repo, StubPaymentGateway()).handle(
                Actor("mallory", Role.CUSTOMER), order_id
            )

    def test_vendor_cannot_pay(self):
        order_id, order_repo, *_ = _setup()
        with pytest.raises(UnauthorizedError, match="Only the customer or an admin"):
            CreatePaymentIntentHandler(order_repo, StubPaymentGateway()).handle(
                Actor("v1", Role.VENDOR), order_id
            )

    def test_already_paid(self):
        order_id, order_repo, _, effects, _, _ = _setup()
        ConfirmPaymentHandler(order_repo, effects).handle(order_id, "pi_1")
        with pytest.raises(ValidationError, match="already paid"):
            CreatePaymentIntentHandler(order_repo, StubPaymentGateway()).handle(CUSTOMER, order_id)

    def test_cancelled_order(self):
        order_id, order_repo, product_repo, effects, _, _ = _setup()
        UpdateOrderStatusHandler(order_repo, product_repo, effects).handle(
            Actor("root", Role.ADMIN), order_id, "cancelled", cancel_reason="Oops"
        )
        with pytest.raises(ValidationError, match="cancelled order"):
            CreatePaymentIntentHandler(order_repo, StubPaymentGateway()).handle(CUSTOMER, order_id)


class TestConfirmPayment:

    def test_marks_paid_and_processing(self):
        order_id, order_repo, _, effects, notifier, mailer = _setup()
        assert ConfirmPaymentHandler(order_repo, effects).handle(order_id, "pi_1") is True

        order = order_repo.get_by_id(order_id)
        assert order.is_paid
        assert order.status == OrderStatus.PROCESSING
        assert order.payment_result.id == "pi_1"
        assert notifier.names() == ["order_updated"]
        assert len(mailer.sent) == 1

    def test_duplicate_confirmation_is_idempotent(self):
        order_id, order_repo, _, effects, notifier, mailer = _setup()
        handler = ConfirmPaymentHandler(order_repo, effects)
        handler.handle(order_id, "pi_1")
        paid_at = order_repo.get_by_id(order_id).paid_at

        assert handler.handle(order_id, "pi_1") is False
        assert order_repo.get_by_id(order_id).paid_at == paid_at
        assert notifier.names() == ["order_updated"]
        assert len(mailer.sent) == 1

    def test_unknown_order(self):
        _, order_repo, _, effects, _, _ = _setup()
        with pytest.raises(EntityNotFoundError):
            ConfirmPaymentHandler(order_repo, effects).handle(42, "pi_1")


class TestPaymentWebhook:

    def _handler(self, order_repo, effects):
        return PaymentWebhookHandler(StubPaymentGateway(), ConfirmPaymentHandler(order_repo, effects))

    def test_bad_signature_rejected(self):
        order_id, order_repo, _, effects, _, _ = _setup()
        with pytest.raises(ValidationError, match="signature verification failed"):
            self._handler(order_repo, effects).handle(_event("payment_intent.succeeded"), "forged")
        assert not order_repo.get_by_id(order_id).is_paid

    def test_succeeded_marks_order_paid(self):
        order_id, order_repo, _, effects, _, _ = _setup()
        outcome = self._handler(order_repo, effects).handle(
            _event("payment_intent.succeeded", str(order_id)), "good-signature"
        )
        assert outcome == "paid"
        assert order_repo.get_by_id(order_id).payment_result.id == "pi_123"

    def test_redelivery_is_acknowledged_without_effect(self):
        order_id, order_repo, _, effects, notifier, _ = _setup()
        handler = self._handler(order_repo, effects)
        payload = _event("payment_intent.succeeded", str(order_id))
        handler.handle(payload, "good-signature")

        assert handler.handle(payload, "good-signature") == "already_paid"
        assert notifier.names() == ["order_updated"]

    def test_unknown_order_is_acknowledged(self):
        _, order_repo, _, effects, _, _ = _setup()
        outcome = self._handler(order_repo, effects).handle(
            _event("payment_intent.succeeded", "999"), "good-signature"
        )
        assert outcome == "order_not_found"

    def test_missing_order_id_is_acknowledged(self):
        _, order_repo, _, effects, _, _ = _setup()
        outcome = self._handler(order_repo, effects).handle(
            _event("payment_intent.succeeded", None), "good-signature"
        )
        assert outcome == "order_not_found"

    def test_payment_failed_event(self):
        order_id, order_repo, _, effects, _, _ = _setup()
        outcome = self._handler(order_repo, effects).handle(
            _event("payment_intent.payment_failed", str(order_id)), "good-signature"
        )
        assert outcome == "payment_failed"
        assert not order_repo.get_by_id(order_id).is_paid

    def test_other_events_ignored(self):
        _, order_repo, _, effects, _, _ = _setup()
        outcome = self._handler(order_repo, effects).handle(_event("charge.refunded"), "good-signature")
        assert outcome == "ignored"

    def test_malformed_payload(self):
        _, order_repo, _, effects, _, _ = _setup()
        with pytest.raises(ValidationError, match="Malformed webhook payload"):
            self._handler(order_repo, effects).handle(b"not json", "good-signature")
