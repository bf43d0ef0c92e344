"""Application service: Create Payment Intent use case.

The amount arrives in minor currency units (cents) and is passed to the
gateway untouched; no conversion, no rounding.
"""

from __future__ import annotations

import logging
import re

from orderdesk.application.dto import PaymentIntentDTO
from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.repository.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)

_CURRENCY = re.compile(r"^[a-z]{3}$")


class CreatePaymentIntentHandler:

    def __init__(self, payment_gateway: PaymentGateway) -> None:
        self._payment_gateway = payment_gateway

    def handle(
        self,
        amount: int,
        currency: str = "usd",
        metadata: dict[str, str] | None = None,
    ) -> PaymentIntentDTO:
        if amount is None or isinstance(amount, bool) or not isinstance(amount, int):
            raise ValidationError(
                "Invalid amount: must be a whole number of minor currency units"
            )
        if amount <= 0:
            raise ValidationError(f"Invalid amount: {amount} (must be positive)")

        currency = (currency or "").strip().lower()
        if not _CURRENCY.match(currency):
            raise ValidationError(f"Invalid currency code: {currency!r}")

        intent = self._payment_gateway.create_payment_intent(
            amount=amount,
            currency=currency,
            metadata={str(k): str(v) for k, v in (metadata or {}).items()},
        )
        logger.info(f"Payment intent {intent.id} created for {amount} {currency}")
        return PaymentIntentDTO(
            client_secret=intent.client_secret,
            payment_intent_id=intent.id,
        )
