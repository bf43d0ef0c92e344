import logging

import click

from orderdesk.domain.exceptions import ConfigurationError
from orderdesk.infrastructure.cli.admin_commands import staff_list, store_check
from orderdesk.infrastructure.cli.order_commands import (
    order_bulk_status,
    order_create,
    order_status,
    order_update_status,
    order_workstation,
)
from orderdesk.infrastructure.cli.output import CliState
from orderdesk.infrastructure.cli.payment_commands import (
    payment_config,
    payment_create_intent,
    payment_verify_webhook,
)
from orderdesk.infrastructure.config import load_settings
from orderdesk.infrastructure.logging_config import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.option("--json", "as_json", is_flag=True, default=False, help="Emit JSON envelopes.")
@click.option("--debug", is_flag=True, default=False, help="Verbose logs and upstream error detail.")
@click.pass_context
def cli(ctx: click.Context, as_json: bool, debug: bool) -> None:
    """orderdesk — storefront order back office"""
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        raise click.ClickException(str(exc))
    configure_logging("DEBUG" if debug else settings.log_level)
    logger.debug(f"Services: {settings.describe()}")
    ctx.obj = CliState(settings=settings, as_json=as_json, debug=debug)


@cli.group()
def order() -> None:
    """Manage orders."""


@cli.group()
def payment() -> None:
    """Payment intents and webhooks."""


@cli.group()
def store() -> None:
    """Record store housekeeping."""


@cli.group()
def staff() -> None:
    """Staff directory."""


# Register subcommands
order.add_command(order_create)
order.add_command(order_status)
order.add_command(order_update_status)
order.add_command(order_bulk_status)
order.add_command(order_workstation)
payment.add_command(payment_create_intent)
payment.add_command(payment_config)
payment.add_command(payment_verify_webhook)
store.add_command(store_check)
staff.add_command(staff_list)
