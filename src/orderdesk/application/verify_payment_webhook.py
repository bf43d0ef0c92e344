"""Application service: Verify Payment Webhook use case."""

from __future__ import annotations

import logging

from orderdesk.domain.exceptions import ConfigurationError, InvalidSignatureError
from orderdesk.domain.repository.payment_gateway import WebhookEvent, WebhookVerifier

logger = logging.getLogger(__name__)


class VerifyPaymentWebhookHandler:

    def __init__(self, verifier: WebhookVerifier, webhook_secret: str | None) -> None:
        self._verifier = verifier
        self._webhook_secret = webhook_secret

    def handle(self, payload: bytes, signature_header: str) -> WebhookEvent:
        if not self._webhook_secret:
            raise ConfigurationError("Payment webhook secret not configured")

        try:
            event = self._verifier.verify_webhook_signature(
                payload, signature_header, self._webhook_secret
            )
        except InvalidSignatureError as exc:
            logger.warning(f"Rejected payment webhook: {exc}")
            raise

        logger.info(f"Payment webhook {event.id} verified ({event.type})")
        return event
