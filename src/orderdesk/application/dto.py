"""Data Transfer Objects — plain containers that cross layer boundaries.

DTOs carry data between the CLI and application layers without
exposing domain internals to the outside world.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from orderdesk.domain.exceptions import ValidationError

Amount = str | int | float | Decimal


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CustomerSpec:
    first_name: str
    last_name: str
    email: str
    phone: str | None = None


@dataclass(frozen=True)
class ShippingSpec:
    address: str
    city: str
    state: str
    zip_code: str
    country: str
    notes: str | None = None


@dataclass(frozen=True)
class OrderItemSpec:
    """Input: one line of the cart as the client priced it."""

    name: str
    quantity: int
    price: Amount
    size: str | None = None


@dataclass(frozen=True)
class OrderTotalsSpec:
    subtotal: Amount
    shipping: Amount
    tax: Amount
    service_fee: Amount
    total: Amount


@dataclass(frozen=True)
class PaymentSpec:
    payment_id: str
    method: str = "card"


@dataclass(frozen=True)
class CreateOrderRequest:
    customer: CustomerSpec
    shipping: ShippingSpec
    items: list[OrderItemSpec]
    totals: OrderTotalsSpec
    payment: PaymentSpec
    notes: str | None = None

    @staticmethod
    def from_payload(payload: dict[str, Any]) -> CreateOrderRequest:
        """Build a request from the storefront checkout body.

        Expected shape::

            {"customer": {"firstName", "lastName", "email", "phone"},
             "shipping": {"address", "city", "state", "zip", "country", "notes"},
             "order": {"items": [{"name", "quantity", "price", "size"}],
                       "subtotal", "shipping", "tax", "serviceFee", "total"},
             "payment": {"id", "method"},
             "notes": "..."}
        """
        if not isinstance(payload, dict):
            raise ValidationError("Order payload must be a JSON object")
        customer = payload.get("customer")
        shipping = payload.get("shipping")
        order = payload.get("order")
        payment = payload.get("payment")
        if not customer or not shipping or not order or not payment:
            raise ValidationError("Missing required order information")
        for section, value in (
            ("customer", customer),
            ("shipping", shipping),
            ("order", order),
            ("payment", payment),
        ):
            if not isinstance(value, dict):
                raise ValidationError(f"Order {section} section must be a JSON object")

        raw_items = order.get("items") or []
        if not isinstance(raw_items, list):
            raise ValidationError("Order items must be a list")

        items: list[OrderItemSpec] = []
        for item in raw_items:
            if not isinstance(item, dict):
                raise ValidationError("Malformed order item: expected an object")
            if "name" not in item or "quantity" not in item or "price" not in item:
                raise ValidationError("Malformed order item: name, quantity and price are required")
            items.append(
                OrderItemSpec(
                    name=_text(item, "name"),
                    quantity=item["quantity"],
                    price=item["price"],
                    size=_optional_text(item, "size") or None,
                )
            )

        return CreateOrderRequest(
            customer=CustomerSpec(
                first_name=_text(customer, "firstName"),
                last_name=_text(customer, "lastName"),
                email=_text(customer, "email"),
                phone=_optional_text(customer, "phone"),
            ),
            shipping=ShippingSpec(
                address=_text(shipping, "address"),
                city=_text(shipping, "city"),
                state=_text(shipping, "state"),
                zip_code=_text(shipping, "zip"),
                country=_text(shipping, "country"),
                notes=_optional_text(shipping, "notes"),
            ),
            items=items,
            totals=OrderTotalsSpec(
                subtotal=order.get("subtotal", 0),
                shipping=order.get("shipping", 0),
                tax=order.get("tax", 0),
                # Older storefront builds send null when no fee applies.
                service_fee=order.get("serviceFee") or 0,
                total=order.get("total", 0),
            ),
            payment=PaymentSpec(
                payment_id=_text(payment, "id"),
                method=_optional_text(payment, "method") or "card",
            ),
            notes=_optional_text(payload, "notes"),
        )


def _optional_text(section: dict[str, Any], key: str) -> str | None:
    """Read a scalar field as text; numbers are accepted (e.g. a numeric zip)."""
    value = section.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationError(f"Invalid value for '{key}': expected text")
    return str(value)


def _text(section: dict[str, Any], key: str) -> str:
    return _optional_text(section, key) or ""


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CreateOrderResult:
    order_id: str
    record_id: str
    status: str


@dataclass(frozen=True)
class StatusUpdateResult:
    record_id: str
    status: str
    updated_at: str
    assigned_to: str | None
    tracking_number: str | None
    status_notes: str | None


@dataclass(frozen=True)
class BulkUpdateResult:
    status: str
    updated_count: int


@dataclass(frozen=True)
class OrderStatusDTO:
    """Output: the minimal projection for a customer-facing status lookup."""

    record_id: str
    order_id: str
    status: str
    customer_name: str
    total: str  # formatted, e.g. "$38.00"
    order_date: str
    status_updated: str | None
    tracking_number: str | None
    assigned_to: str | None


@dataclass(frozen=True)
class WorkstationOrderDTO:
    """Output: the full projection shown on the staff workstation."""

    record_id: str
    order_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    order_items: str
    status: str
    total: str
    order_date: str
    status_updated: str
    tracking_number: str
    assigned_to: str
    status_notes: str
    delivery_notes: str
    order_notes: str


@dataclass(frozen=True)
class PaymentIntentDTO:
    client_secret: str
    payment_intent_id: str


@dataclass(frozen=True)
class TableConnectionDTO:
    table: str
    connected: bool
    record_count: int
    error: str | None = None
