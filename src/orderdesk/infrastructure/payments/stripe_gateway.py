"""Stripe REST implementation of PaymentGateway and WebhookVerifier.

Talks to the Stripe API directly over ``requests`` (form-encoded bodies,
secret key as the basic-auth user).  Webhook signatures follow Stripe's
``t=<timestamp>,v1=<hmac-sha256>`` header scheme.
"""

from __future__ import annotations

import hashlib
import hmac
import json
import logging
import time
from typing import Any
from urllib.parse import quote

import requests

from orderdesk.domain.exceptions import EntityNotFoundError, InvalidSignatureError, UpstreamError
from orderdesk.domain.repository.payment_gateway import (
    PaymentGateway,
    PaymentIntent,
    WebhookEvent,
    WebhookVerifier,
)

logger = logging.getLogger(__name__)

SERVICE = "payment gateway"
DEFAULT_SIGNATURE_TOLERANCE = 300  # seconds


def compute_signature(payload: bytes, timestamp: int, secret: str) -> str:
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


class StripeWebhookVerifier(WebhookVerifier):
    """Verifies ``Stripe-Signature`` headers locally; no API key involved."""

    def __init__(self, signature_tolerance: int = DEFAULT_SIGNATURE_TOLERANCE) -> None:
        self._signature_tolerance = signature_tolerance

    def verify_webhook_signature(
        self,
        payload: bytes,
        signature_header: str,
        secret: str,
    ) -> WebhookEvent:
        timestamp, signatures = self._parse_signature_header(signature_header)

        expected = compute_signature(payload, timestamp, secret)
        if not any(hmac.compare_digest(expected, candidate) for candidate in signatures):
            raise InvalidSignatureError("No signature matches the expected signature for payload")

        if abs(time.time() - timestamp) > self._signature_tolerance:
            raise InvalidSignatureError("Timestamp outside the tolerance zone")

        try:
            event = json.loads(payload.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise InvalidSignatureError("Webhook payload is not valid JSON") from exc
        if not isinstance(event, dict):
            raise InvalidSignatureError("Webhook payload is not a JSON object")

        data = event.get("data")
        return WebhookEvent(
            id=str(event.get("id", "")),
            type=str(event.get("type", "")),
            data=(data.get("object") if isinstance(data, dict) else None) or {},
        )

    @staticmethod
    def _parse_signature_header(header: str) -> tuple[int, list[str]]:
        timestamp: int | None = None
        signatures: list[str] = []
        for item in (header or "").split(","):
            key, _, value = item.strip().partition("=")
            if key == "t":
                try:
                    timestamp = int(value)
                except ValueError:
                    raise InvalidSignatureError("Malformed signature timestamp") from None
            elif key == "v1" and value:
                signatures.append(value)
        if timestamp is None or not signatures:
            raise InvalidSignatureError("Unable to extract timestamp and signatures from header")
        return timestamp, signatures


class StripePaymentGateway(PaymentGateway):

    def __init__(
        self,
        secret_key: str,
        api_url: str = "https://api.stripe.com/v1",
        timeout: float = 10.0,
        session: requests.Session | None = None,
        signature_tolerance: int = DEFAULT_SIGNATURE_TOLERANCE,
    ) -> None:
        self._api_url = api_url.rstrip("/")
        self._timeout = timeout
        self._webhooks = StripeWebhookVerifier(signature_tolerance)
        self._session = session or requests.Session()
        self._session.auth = (secret_key, "")

    # --- PaymentGateway interface ---------------------------------------------

    def create_payment_intent(
        self,
        amount: int,
        currency: str,
        metadata: dict[str, str] | None = None,
    ) -> PaymentIntent:
        form: dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "automatic_payment_methods[enabled]": "true",
        }
        for key, value in (metadata or {}).items():
            form[f"metadata[{key}]"] = value

        data = self._request("POST", "/payment_intents", data=form)
        return PaymentIntent(
            id=data["id"],
            client_secret=data["client_secret"],
            amount=data.get("amount", amount),
            currency=data.get("currency", currency),
            status=data.get("status"),
        )

    def retrieve_payment_status(self, payment_id: str) -> str:
        data = self._request("GET", f"/payment_intents/{quote(payment_id, safe='')}")
        return data.get("status") or "unknown"

    def verify_webhook_signature(
        self,
        payload: bytes,
        signature_header: str,
        secret: str,
    ) -> WebhookEvent:
        return self._webhooks.verify_webhook_signature(payload, signature_header, secret)

    # --- Helpers --------------------------------------------------------------

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self._api_url}{path}"
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error(f"Stripe {method} {path} failed: {exc}")
            raise UpstreamError("Payment gateway unreachable", service=SERVICE, detail=str(exc)) from exc

        if response.status_code == 404:
            raise EntityNotFoundError("Payment not found")
        if not response.ok:
            detail = self._error_detail(response)
            logger.error(f"Stripe {method} {path} returned {response.status_code}: {detail}")
            raise UpstreamError(
                f"Payment gateway error (HTTP {response.status_code})",
                service=SERVICE,
                detail=detail,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Payment gateway returned an unreadable response",
                service=SERVICE,
                detail=response.text[:500],
            ) from exc

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return str(error.get("message") or error.get("type") or response.text)
        return response.text
