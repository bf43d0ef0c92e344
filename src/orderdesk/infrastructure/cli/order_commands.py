"""CLI commands for the Order aggregate."""

from __future__ import annotations

import json
from dataclasses import asdict
from typing import IO

import click

from orderdesk.application.bulk_update_status import BulkUpdateStatusHandler
from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.dto import CreateOrderRequest
from orderdesk.application.list_workstation_orders import ListWorkstationOrdersHandler
from orderdesk.application.show_order_status import ShowOrderStatusHandler
from orderdesk.application.update_order_status import UpdateOrderStatusHandler
from orderdesk.domain.exceptions import DomainException, ValidationError
from orderdesk.infrastructure.bootstrap import order_repository, payment_gateway
from orderdesk.infrastructure.cli.output import CliState, emit, fail, pass_state


@click.command("create")
@click.argument("payload", type=click.File("r"))
@pass_state
def order_create(state: CliState, payload: IO[str]) -> None:
    """Record a paid order from a checkout JSON PAYLOAD ('-' for stdin)."""
    try:
        try:
            body = json.load(payload)
        except ValueError as exc:
            raise ValidationError(f"Order payload is not valid JSON: {exc}") from exc
        request = CreateOrderRequest.from_payload(body)

        settings = state.settings
        handler = CreateOrderHandler(
            order_repo=order_repository(settings),
            payment_gateway=payment_gateway(settings),
            order_id_prefix=settings.order_id_prefix,
        )
        result = handler.handle(request)
    except DomainException as exc:
        fail(state, exc)

    emit(
        state,
        {
            "orderId": result.order_id,
            "recordId": result.record_id,
            "status": result.status,
            "message": "Order processed successfully",
        },
        [
            f"Order {result.order_id} created  (status={result.status})",
            f"Record: {result.record_id}",
        ],
    )


@click.command("status")
@click.option("--record-id", required=True, help="Record store ID of the order.")
@pass_state
def order_status(state: CliState, record_id: str) -> None:
    """Show the current status of an order."""
    try:
        handler = ShowOrderStatusHandler(order_repo=order_repository(state.settings))
        dto = handler.handle(record_id)
    except DomainException as exc:
        fail(state, exc)

    emit(
        state,
        asdict(dto),
        [
            f"Order {dto.order_id}  (status={dto.status})",
            f"Customer: {dto.customer_name}",
            f"Total:    {dto.total}",
            f"Ordered:  {dto.order_date}",
            f"Updated:  {dto.status_updated or '-'}",
            f"Tracking: {dto.tracking_number or '-'}",
            f"Assigned: {dto.assigned_to or '-'}",
        ],
    )


@click.command("update-status")
@click.option("--record-id", required=True, help="Record store ID of the order.")
@click.option("--status", required=True, help="New status, e.g. 'Shipped'.")
@click.option("--tracking", "tracking_number", default=None, help="Shipment tracking number.")
@click.option("--assign", "assigned_to", default=None, help="Staff member to assign.")
@click.option("--notes", default=None, help="Status notes.")
@pass_state
def order_update_status(
    state: CliState,
    record_id: str,
    status: str,
    tracking_number: str | None,
    assigned_to: str | None,
    notes: str | None,
) -> None:
    """Move an order to a new status."""
    try:
        handler = UpdateOrderStatusHandler(order_repo=order_repository(state.settings))
        result = handler.handle(
            record_id,
            status,
            tracking_number=tracking_number,
            assigned_to=assigned_to,
            notes=notes,
        )
    except DomainException as exc:
        fail(state, exc)

    emit(
        state,
        {"message": f"Order status updated to {result.status}", **asdict(result)},
        [f"Order {result.record_id} status updated to {result.status}."],
    )


@click.command("bulk-status")
@click.option(
    "--record-id", "record_ids", multiple=True, required=True,
    help="Record store ID (repeat for each order).",
)
@click.option("--status", required=True, help="New status for every order.")
@click.option("--notes", default=None, help="Status notes applied to every order.")
@pass_state
def order_bulk_status(
    state: CliState,
    record_ids: tuple[str, ...],
    status: str,
    notes: str | None,
) -> None:
    """Move several orders to the same status in one batch."""
    try:
        handler = BulkUpdateStatusHandler(order_repo=order_repository(state.settings))
        result = handler.handle(list(record_ids), status, notes=notes)
    except DomainException as exc:
        fail(state, exc)

    emit(
        state,
        {
            "message": f"Updated {result.updated_count} orders to {result.status}",
            "updatedCount": result.updated_count,
        },
        [f"Updated {result.updated_count} orders to {result.status}."],
    )


@click.command("workstation")
@pass_state
def order_workstation(state: CliState) -> None:
    """List every order, newest first."""
    try:
        handler = ListWorkstationOrdersHandler(order_repo=order_repository(state.settings))
        orders = handler.handle()
    except DomainException as exc:
        fail(state, exc)

    lines = [f"{'Order':<26} {'Customer':<22} {'Status':<21} {'Total':>10}  Assigned", "-" * 92]
    for o in orders:
        lines.append(
            f"{o.order_id:<26} {o.customer_name[:22]:<22} {o.status:<21} {o.total:>10}  {o.assigned_to or '-'}"
        )
    if not orders:
        lines = ["No orders found."]

    emit(state, {"orders": [asdict(o) for o in orders]}, lines)
