"""CLI commands for back-office housekeeping (connectivity, staff)."""

from __future__ import annotations

from dataclasses import asdict

import click

from orderdesk.application.check_record_store import CheckRecordStoreHandler
from orderdesk.application.list_staff import ListStaffHandler
from orderdesk.domain.exceptions import DomainException
from orderdesk.infrastructure.bootstrap import record_store
from orderdesk.infrastructure.cli.output import CliState, emit, fail, pass_state


@click.command("check")
@pass_state
def store_check(state: CliState) -> None:
    """Probe the catalog and sales tables."""
    settings = state.settings
    try:
        handler = CheckRecordStoreHandler(
            record_store(settings),
            tables=[settings.products_table, settings.sales_table],
        )
        results = handler.handle()
    except DomainException as exc:
        fail(state, exc)

    lines = [f"{'Table':<20} {'Connected':<10} {'Records':>8}  Error", "-" * 52]
    for r in results:
        lines.append(
            f"{r.table:<20} {'yes' if r.connected else 'no':<10} {r.record_count:>8}  {r.error or ''}"
        )
    emit(state, {"connections": [asdict(r) for r in results]}, lines)


@click.command("list")
@pass_state
def staff_list(state: CliState) -> None:
    """List staff members orders can be assigned to."""
    members = ListStaffHandler(list(state.settings.staff)).handle()

    if not members:
        lines = ["No staff members configured (set ORDERDESK_STAFF)."]
    else:
        lines = [f"{'ID':<10} {'Name':<20} {'Role':<12} Email", "-" * 60]
        lines += [f"{m.id:<10} {m.name:<20} {m.role:<12} {m.email}" for m in members]
    emit(state, {"staff": [asdict(m) for m in members]}, lines)
