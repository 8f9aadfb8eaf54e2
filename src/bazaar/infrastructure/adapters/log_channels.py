"""Notifier and mailer that write to the log instead of a delivery channel."""

from __future__ import annotations

import structlog

from bazaar.application.ports import Mailer, Notifier

logger = structlog.get_logger(__name__)


class LoggingNotifier(Notifier):

    def publish(self, event: str, payload: dict) -> None:
        logger.info("Event published", event_name=event, payload=payload)


class LoggingMailer(Mailer):

    def send(self, recipient: str, subject: str, body: str) -> None:
        logger.info("Email sent", recipient=recipient, subject=subject)
        logger.debug("Email body", recipient=recipient, body=body)
