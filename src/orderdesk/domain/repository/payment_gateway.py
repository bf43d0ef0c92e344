"""Abstract payment gateway.

The gateway owns money movement; this system only creates intents,
checks whether a payment went through and verifies signed events.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

# Gateway payment states that count as money received (or authorized).
CONFIRMED_PAYMENT_STATES = frozenset({"succeeded", "requires_capture"})


@dataclass(frozen=True)
class PaymentIntent:
    id: str
    client_secret: str
    amount: int
    currency: str
    status: str | None = None


@dataclass(frozen=True)
class WebhookEvent:
    id: str
    type: str
    data: dict[str, Any] = field(default_factory=dict)


class WebhookVerifier(ABC):
    """Checks signed gateway events; needs only the webhook secret."""

    @abstractmethod
    def verify_webhook_signature(
        self,
        payload: bytes,
        signature_header: str,
        secret: str,
    ) -> WebhookEvent:
        """Verify a signed event payload and return the parsed event.

        Raises InvalidSignatureError when verification fails.
        """


class PaymentGateway(WebhookVerifier):

    @abstractmethod
    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str] | None = None,
    ) -> PaymentIntent:
        """Create a payment intent for ``amount`` minor currency units."""

    @abstractmethod
    def retrieve_payment_status(self, payment_id: str) -> str:
        """Return the gateway's status string for a payment reference.

        Raises EntityNotFoundError for unknown references.
        """
