"""CLI commands for the payment gateway."""

from __future__ import annotations

from typing import IO

import click

from orderdesk.application.create_payment_intent import CreatePaymentIntentHandler
from orderdesk.application.show_payment_config import ShowPaymentConfigHandler
from orderdesk.application.verify_payment_webhook import VerifyPaymentWebhookHandler
from orderdesk.domain.exceptions import DomainException
from orderdesk.infrastructure.bootstrap import payment_gateway, webhook_verifier
from orderdesk.infrastructure.cli.output import CliState, emit, fail, pass_state


def _parse_metadata(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse ('cart=42', 'source=web') into a dict."""
    metadata: dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(
                f"Invalid metadata '{pair}'. Expected 'key=value'.", param_hint="--metadata"
            )
        key, value = pair.split("=", 1)
        metadata[key.strip()] = value.strip()
    return metadata


@click.command("create-intent")
@click.option("--amount", required=True, type=int, help="Amount in minor units (cents).")
@click.option("--currency", default="usd", show_default=True, help="ISO currency code.")
@click.option("--metadata", multiple=True, help="Metadata as key=value (repeatable).")
@pass_state
def payment_create_intent(
    state: CliState,
    amount: int,
    currency: str,
    metadata: tuple[str, ...],
) -> None:
    """Create a payment intent for AMOUNT cents."""
    meta = _parse_metadata(metadata)
    try:
        handler = CreatePaymentIntentHandler(payment_gateway(state.settings))
        dto = handler.handle(amount, currency=currency, metadata=meta)
    except DomainException as exc:
        fail(state, exc)

    emit(
        state,
        {"clientSecret": dto.client_secret, "paymentIntentId": dto.payment_intent_id},
        [f"Payment intent {dto.payment_intent_id} created.", f"Client secret: {dto.client_secret}"],
    )


@click.command("config")
@pass_state
def payment_config(state: CliState) -> None:
    """Show the publishable key for client-side checkout."""
    try:
        key = ShowPaymentConfigHandler(state.settings.stripe_publishable_key).handle()
    except DomainException as exc:
        fail(state, exc)

    emit(state, {"publishableKey": key}, [key])


@click.command("verify-webhook")
@click.argument("payload", type=click.File("rb"))
@click.option("--signature", required=True, help="Value of the Stripe-Signature header.")
@pass_state
def payment_verify_webhook(state: CliState, payload: IO[bytes], signature: str) -> None:
    """Verify a signed webhook PAYLOAD file ('-' for stdin).

    Needs STRIPE_WEBHOOK_SECRET only; the API secret key is not used.
    """
    body = payload.read()
    try:
        handler = VerifyPaymentWebhookHandler(
            webhook_verifier(state.settings), state.settings.stripe_webhook_secret
        )
        event = handler.handle(body, signature)
    except DomainException as exc:
        fail(state, exc)

    emit(
        state,
        {"eventId": event.id, "eventType": event.type, "data": event.data},
        [f"Webhook {event.id} verified ({event.type})."],
    )
