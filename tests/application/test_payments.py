"""Integration tests for the payment use cases."""

import pytest

from orderdesk.application.create_payment_intent import CreatePaymentIntentHandler
from orderdesk.application.show_payment_config import ShowPaymentConfigHandler
from orderdesk.application.verify_payment_webhook import VerifyPaymentWebhookHandler
from orderdesk.domain.exceptions import (
    ConfigurationError,
    InvalidSignatureError,
    ValidationError,
)
from tests.fakes import FakePaymentGateway


class TestCreatePaymentIntent:

    def test_accepts_100_cents(self):
        gateway = FakePaymentGateway()
        dto = CreatePaymentIntentHandler(gateway).handle(100)

        assert dto.client_secret
        assert dto.payment_intent_id
        assert gateway.intents[0].amount == 100  # never multiplied

    @pytest.mark.parametrize("amount", [0, -5, None, 10.5, "100", True])
    def test_invalid_amount_rejected_before_gateway(self, amount):
        gateway = FakePaymentGateway()
        with pytest.raises(ValidationError, match="Invalid amount"):
            CreatePaymentIntentHandler(gateway).handle(amount)
        assert gateway.calls == []

    def test_currency_normalised(self):
        gateway = FakePaymentGateway()
        CreatePaymentIntentHandler(gateway).handle(2500, currency=" EUR ")
        assert gateway.intents[0].currency == "eur"

    def test_bad_currency_rejected(self):
        gateway = FakePaymentGateway()
        with pytest.raises(ValidationError, match="currency"):
            CreatePaymentIntentHandler(gateway).handle(2500, currency="dollars")
        assert gateway.calls == []


class TestShowPaymentConfig:

    def test_returns_key(self):
        assert ShowPaymentConfigHandler("pk_test_123").handle() == "pk_test_123"

    def test_missing_key_is_configuration_error(self):
        with pytest.raises(ConfigurationError, match="publishable key"):
            ShowPaymentConfigHandler(None).handle()


class TestVerifyPaymentWebhook:

    def test_valid_signature(self):
        gateway = FakePaymentGateway()
        event = VerifyPaymentWebhookHandler(gateway, "whsec_x").handle(b"{}", "good-signature")
        assert event.type == "payment_intent.succeeded"

    def test_invalid_signature(self):
        gateway = FakePaymentGateway()
        with pytest.raises(InvalidSignatureError):
            VerifyPaymentWebhookHandler(gateway, "whsec_x").handle(b"{}", "forged")

    def test_missing_secret_is_configuration_error(self):
        gateway = FakePaymentGateway()
        with pytest.raises(ConfigurationError, match="webhook secret"):
            VerifyPaymentWebhookHandler(gateway, None).handle(b"{}", "good-signature")
        assert gateway.calls == []
