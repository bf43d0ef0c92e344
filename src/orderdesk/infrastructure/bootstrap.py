"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.  Missing credentials
surface here as ConfigurationError, before any collaborator is called.
"""

from __future__ import annotations

from orderdesk.infrastructure.config import Settings
from orderdesk.infrastructure.payments.stripe_gateway import (
    StripePaymentGateway,
    StripeWebhookVerifier,
)
from orderdesk.infrastructure.persistence.airtable_record_store import AirtableRecordStore
from orderdesk.infrastructure.persistence.record_store_order_repository import (
    RecordStoreOrderRepository,
)


def record_store(settings: Settings) -> AirtableRecordStore:
    token, base_id = settings.require_airtable()
    return AirtableRecordStore(
        token=token,
        base_id=base_id,
        api_url=settings.airtable_api_url,
        timeout=settings.request_timeout,
    )


def order_repository(settings: Settings) -> RecordStoreOrderRepository:
    return RecordStoreOrderRepository(record_store(settings), table=settings.sales_table)


def payment_gateway(settings: Settings) -> StripePaymentGateway:
    return StripePaymentGateway(
        secret_key=settings.require_stripe(),
        api_url=settings.stripe_api_url,
        timeout=settings.request_timeout,
    )


def webhook_verifier(settings: Settings) -> StripeWebhookVerifier:
    # Signature checks are local; the API key is not needed.
    return StripeWebhookVerifier()
