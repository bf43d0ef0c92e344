"""Shared CLI plumbing: invocation state, success output, error reporting.

Every command reports either human-readable text or, with ``--json``, an
envelope of the form ``{"success": bool, ...}``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, NoReturn

import click

from orderdesk.domain.exceptions import (
    ConfigurationError,
    DomainException,
    EntityNotFoundError,
    ReconciliationError,
    UpstreamError,
    ValidationError,
)
from orderdesk.infrastructure.config import Settings


@dataclass
class CliState:
    settings: Settings
    as_json: bool = False
    debug: bool = False


pass_state = click.make_pass_decorator(CliState)

_ERROR_KINDS: list[tuple[type[DomainException], str]] = [
    (ConfigurationError, "configuration_error"),
    (ValidationError, "validation_error"),
    (EntityNotFoundError, "not_found"),
    (ReconciliationError, "reconciliation_required"),
    (UpstreamError, "upstream_failure"),
]


def error_kind(exc: DomainException) -> str:
    for cls, kind in _ERROR_KINDS:
        if isinstance(exc, cls):
            return kind
    return "error"


def emit(state: CliState, payload: dict[str, Any], lines: list[str]) -> None:
    if state.as_json:
        click.echo(json.dumps({"success": True, **payload}, indent=2, default=str))
        return
    for line in lines:
        click.echo(line)


def fail(state: CliState, exc: DomainException) -> NoReturn:
    message = str(exc)
    if state.debug and isinstance(exc, UpstreamError) and exc.detail:
        message = f"{message}: {exc.detail}"

    if state.as_json:
        envelope: dict[str, Any] = {"success": False, "error": message, "kind": error_kind(exc)}
        if isinstance(exc, ReconciliationError):
            envelope["orderId"] = exc.order_id
            envelope["paymentId"] = exc.payment_id
        click.echo(json.dumps(envelope, indent=2))
        raise click.exceptions.Exit(1)
    raise click.ClickException(message)
