"""Order aggregate — the core of the domain.

The Order is an aggregate root that owns its line items, amounts and
status.  Creation rules are enforced by ``Order.create()``; status
mutations go through ``StatusChange`` so a single change can be applied
to one order or to a whole batch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.value_objects import EmailAddress, Money, Quantity


class OrderStatus(Enum):
    PAID = "Paid"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"
    REFUNDED = "Refunded"
    ON_HOLD = "On Hold"
    AWAITING_INFORMATION = "Awaiting Information"

    @property
    def is_terminal(self) -> bool:
        """No further business action is expected (nothing is blocked, though)."""
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED, OrderStatus.REFUNDED)

    @staticmethod
    def parse(value: str, allowed: tuple[OrderStatus, ...] | None = None) -> OrderStatus:
        """Resolve a status label such as ``"On Hold"``.

        Matching is exact; ``allowed`` narrows the accepted set.
        """
        choices = allowed if allowed is not None else tuple(OrderStatus)
        for status in choices:
            if status.value == value:
                return status
        raise ValidationError(
            f"Invalid status {value!r}. Must be one of: "
            f"{', '.join(s.value for s in choices)}"
        )


INITIAL_STATUS = OrderStatus.PAID

# Bulk updates cannot revert to the initial state or ask for information.
BULK_STATUSES: tuple[OrderStatus, ...] = (
    OrderStatus.PROCESSING,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
    OrderStatus.REFUNDED,
    OrderStatus.ON_HOLD,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ---------------------------------------------------------------------------
# Value types owned by the aggregate
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Customer:
    name: str
    email: str
    phone: str | None = None

    @staticmethod
    def create(
        first_name: str,
        last_name: str,
        email: str,
        phone: str | None = None,
    ) -> Customer:
        if not first_name or not first_name.strip():
            raise ValidationError("Customer first name is required")
        if not last_name or not last_name.strip():
            raise ValidationError("Customer last name is required")
        if not email or not email.strip():
            raise ValidationError("Customer email is required")
        address = EmailAddress(email.strip())
        return Customer(
            name=f"{first_name.strip()} {last_name.strip()}",
            email=str(address),
            phone=_clean(phone),
        )


@dataclass(frozen=True)
class ShippingAddress:
    """Structured address as submitted; orders only keep the composed line."""

    address: str
    city: str
    state: str
    zip_code: str
    country: str

    def __post_init__(self) -> None:
        for label, value in (
            ("address", self.address),
            ("city", self.city),
            ("country", self.country),
        ):
            if not value or not value.strip():
                raise ValidationError(f"Shipping {label} is required")

    def compose(self) -> str:
        """Single display line, e.g. ``1 Main St, Boston, MA 02101, US``."""
        region = " ".join(p.strip() for p in (self.state, self.zip_code) if p and p.strip())
        parts = [self.address.strip(), self.city.strip()]
        if region:
            parts.append(region)
        parts.append(self.country.strip())
        return ", ".join(parts)


_ITEM_LINE = re.compile(
    r"^(?P<qty>\d+)x (?P<name>.+?)(?: \(Size: (?P<size>[^)]*)\))? - \$(?P<price>\d+(?:\.\d+)?)$"
)


@dataclass(frozen=True)
class OrderLineItem:
    """A purchased item, snapshotted at order time.

    Nothing here refers back to the live catalog; the name and price are
    what the customer paid for.
    """

    name: str
    quantity: Quantity
    unit_price: Money
    size: str | None = None

    @property
    def line_total(self) -> Money:
        return self.unit_price * self.quantity.value

    def describe(self) -> str:
        """One snapshot line, e.g. ``2x Scarf (Size: M) - $15.00``."""
        size = f" (Size: {self.size})" if self.size else ""
        return f"{self.quantity}x {self.name}{size} - {self.unit_price}"

    @staticmethod
    def parse(line: str) -> OrderLineItem:
        """Inverse of ``describe()``."""
        match = _ITEM_LINE.match(line.strip())
        if match is None:
            raise ValidationError(f"Unrecognised order item line: {line!r}")
        return OrderLineItem(
            name=match["name"],
            quantity=Quantity(int(match["qty"])),
            unit_price=Money.of(match["price"]),
            size=match["size"] or None,
        )


@dataclass(frozen=True)
class OrderAmounts:
    subtotal: Money
    shipping: Money
    tax: Money
    service_fee: Money
    total: Money

    @staticmethod
    def create(
        subtotal: Money,
        shipping: Money,
        tax: Money,
        service_fee: Money,
        total: Money,
    ) -> OrderAmounts:
        """Build amounts for a new order; total must equal the sum of the parts."""
        expected = subtotal + shipping + tax + service_fee
        if expected.amount != total.amount:
            raise ValidationError(
                f"Order total {total} does not match subtotal + shipping + tax "
                f"+ service fee ({expected})"
            )
        return OrderAmounts(subtotal, shipping, tax, service_fee, total)


@dataclass(frozen=True)
class PaymentReference:
    payment_id: str
    method: str = "card"


@dataclass(frozen=True)
class StatusChange:
    """One status mutation, applied to a single order or to a batch.

    ``tracking_number``, ``assigned_to`` and ``notes`` are only written
    when given; ``None`` means "leave the stored value alone".
    """

    status: OrderStatus
    updated_at: datetime
    tracking_number: str | None = None
    assigned_to: str | None = None
    notes: str | None = None

    @staticmethod
    def create(
        status: str,
        tracking_number: str | None = None,
        assigned_to: str | None = None,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> StatusChange:
        return StatusChange(
            status=OrderStatus.parse(status),
            updated_at=now or _utcnow(),
            tracking_number=_clean(tracking_number),
            assigned_to=_clean(assigned_to),
            notes=_clean(notes),
        )

    @staticmethod
    def for_bulk(
        status: str,
        notes: str | None = None,
        now: datetime | None = None,
    ) -> StatusChange:
        return StatusChange(
            status=OrderStatus.parse(status, allowed=BULK_STATUSES),
            updated_at=now or _utcnow(),
            notes=_clean(notes),
        )


# ---------------------------------------------------------------------------
# Aggregate root
# ---------------------------------------------------------------------------


@dataclass
class Order:
    """Aggregate root for customer orders.

    Use the ``Order.create()`` factory for new orders — it enforces all
    business rules.  The ``__init__`` is intentionally simple so the
    repository can reconstitute persisted orders without re-validating.
    """

    order_id: str
    customer: Customer
    shipping_address: str
    items: list[OrderLineItem]
    amounts: OrderAmounts
    payment: PaymentReference
    status: OrderStatus = INITIAL_STATUS
    created_at: datetime = field(default_factory=_utcnow)
    status_updated_at: datetime | None = None
    record_id: str | None = None
    assigned_to: str | None = None
    tracking_number: str | None = None
    status_notes: str | None = None
    delivery_notes: str | None = None
    order_notes: str | None = None

    # --- Factory (used for NEW orders only) -----------------------------------

    @staticmethod
    def create(
        order_id: str,
        customer: Customer,
        shipping: ShippingAddress,
        items: list[OrderLineItem],
        amounts: OrderAmounts,
        payment: PaymentReference,
        delivery_notes: str | None = None,
        order_notes: str | None = None,
        now: datetime | None = None,
    ) -> Order:
        """Create a new, paid order."""
        if not items:
            raise ValidationError("Order must contain at least one item")
        if not payment.payment_id or not payment.payment_id.strip():
            raise ValidationError("Payment reference is required")

        created_at = now or _utcnow()
        return Order(
            order_id=order_id,
            customer=customer,
            shipping_address=shipping.compose(),
            items=list(items),
            amounts=amounts,
            payment=payment,
            status=INITIAL_STATUS,
            created_at=created_at,
            status_updated_at=created_at,
            delivery_notes=_clean(delivery_notes),
            order_notes=_clean(order_notes),
        )

    # --- State transitions ----------------------------------------------------

    def apply(self, change: StatusChange) -> None:
        """Move to ``change.status``.

        Any status may follow any other; only membership in OrderStatus
        is checked (by StatusChange).
        """
        self.status = change.status
        self.status_updated_at = change.updated_at
        if change.tracking_number:
            self.tracking_number = change.tracking_number
        if change.assigned_to:
            self.assigned_to = change.assigned_to
        if change.notes:
            self.status_notes = change.notes

    # --- Computed properties --------------------------------------------------

    @property
    def total(self) -> Money:
        return self.amounts.total

    @property
    def items_summary(self) -> str:
        return "\n".join(item.describe() for item in self.items)


# ---------------------------------------------------------------------------
# Read-side projections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class OrderStatusRecord:
    """Status columns of one order as the store reported them after an update."""

    record_id: str
    status: OrderStatus
    status_updated_at: datetime
    assigned_to: str | None = None
    tracking_number: str | None = None
    status_notes: str | None = None


@dataclass(frozen=True)
class OrderListing:
    """One row of the staff workstation.

    Status and total are kept as stored text rather than parsed, so rows
    edited by hand (blank status, odd amounts) are still listed.
    """

    record_id: str
    order_id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    shipping_address: str
    order_items: str
    status: str
    total: str
    created_at: datetime
    status_updated_at: datetime | None = None
    tracking_number: str = ""
    assigned_to: str = ""
    status_notes: str = ""
    delivery_notes: str = ""
    order_notes: str = ""

    @staticmethod
    def from_order(order: Order) -> OrderListing:
        return OrderListing(
            record_id=order.record_id or "",
            order_id=order.order_id,
            customer_name=order.customer.name,
            customer_email=order.customer.email,
            customer_phone=order.customer.phone or "",
            shipping_address=order.shipping_address,
            order_items=order.items_summary,
            status=order.status.value,
            total=str(order.total),
            created_at=order.created_at,
            status_updated_at=order.status_updated_at,
            tracking_number=order.tracking_number or "",
            assigned_to=order.assigned_to or "",
            status_notes=order.status_notes or "",
            delivery_notes=order.delivery_notes or "",
            order_notes=order.order_notes or "",
        )
