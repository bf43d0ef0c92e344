"""Runtime settings, read from the environment (and a local ``.env``)."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from dotenv import load_dotenv

from orderdesk.domain.exceptions import ConfigurationError, ValidationError
from orderdesk.domain.model.staff import StaffMember

DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class Settings:
    airtable_token: str | None = None
    airtable_base_id: str | None = None
    airtable_api_url: str = "https://api.airtable.com/v0"
    stripe_secret_key: str | None = None
    stripe_publishable_key: str | None = None
    stripe_webhook_secret: str | None = None
    stripe_api_url: str = "https://api.stripe.com/v1"
    sales_table: str = "Sales"
    products_table: str = "Products"
    order_id_prefix: str = "NG"
    request_timeout: float = DEFAULT_TIMEOUT_SECONDS
    log_level: str = "INFO"
    staff: tuple[StaffMember, ...] = field(default_factory=tuple)

    # --- Credential checks ----------------------------------------------------

    def require_airtable(self) -> tuple[str, str]:
        if not self.airtable_token or not self.airtable_base_id:
            raise ConfigurationError(
                "Record store not configured: AIRTABLE_TOKEN and AIRTABLE_BASE_ID are required"
            )
        return self.airtable_token, self.airtable_base_id

    def require_stripe(self) -> str:
        if not self.stripe_secret_key:
            raise ConfigurationError(
                "Payment system not configured: STRIPE_SECRET_KEY is required"
            )
        return self.stripe_secret_key

    def describe(self) -> dict[str, str]:
        """Which services are configured, without revealing any secret."""
        return {
            "airtable_base": "configured" if self.airtable_base_id else "missing",
            "airtable_token": "configured" if self.airtable_token else "missing",
            "stripe_secret": "configured" if self.stripe_secret_key else "missing",
        }


def _parse_staff(raw: str | None) -> tuple[StaffMember, ...]:
    if not raw:
        return ()
    return tuple(StaffMember.parse(entry) for entry in raw.split(";") if entry.strip())


def _parse_timeout(raw: str | None) -> float:
    if not raw:
        return DEFAULT_TIMEOUT_SECONDS
    try:
        timeout = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid ORDERDESK_REQUEST_TIMEOUT: {raw!r}") from exc
    if timeout <= 0:
        raise ConfigurationError("ORDERDESK_REQUEST_TIMEOUT must be positive")
    return timeout


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from ``environ`` (default: the process environment).

    When reading the process environment a ``.env`` file in the working
    directory is loaded first; real environment variables win.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    def get(name: str) -> str | None:
        value = environ.get(name)
        return value.strip() if value and value.strip() else None

    try:
        staff = _parse_staff(get("ORDERDESK_STAFF"))
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid ORDERDESK_STAFF: {exc}") from exc

    return Settings(
        airtable_token=get("AIRTABLE_TOKEN"),
        airtable_base_id=get("AIRTABLE_BASE_ID"),
        airtable_api_url=(get("AIRTABLE_API_URL") or Settings.airtable_api_url).rstrip("/"),
        stripe_secret_key=get("STRIPE_SECRET_KEY"),
        stripe_publishable_key=get("STRIPE_PUBLISHABLE_KEY"),
        stripe_webhook_secret=get("STRIPE_WEBHOOK_SECRET"),
        stripe_api_url=(get("STRIPE_API_URL") or Settings.stripe_api_url).rstrip("/"),
        sales_table=get("ORDERDESK_SALES_TABLE") or Settings.sales_table,
        products_table=get("ORDERDESK_PRODUCTS_TABLE") or Settings.products_table,
        order_id_prefix=get("ORDERDESK_ORDER_PREFIX") or Settings.order_id_prefix,
        request_timeout=_parse_timeout(get("ORDERDESK_REQUEST_TIMEOUT")),
        log_level=(get("ORDERDESK_LOG_LEVEL") or Settings.log_level).upper(),
        staff=staff,
    )
