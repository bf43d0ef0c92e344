"""RecordStore-backed implementation of OrderRepository.

Maps Order aggregates to rows of the sales table and back.  Column names
are the ones staff see in the spreadsheet, so they are spelled out here
rather than derived from attribute names.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from orderdesk.domain.exceptions import EntityNotFoundError, UpstreamError, ValidationError
from orderdesk.domain.model.order import (
    Customer,
    Order,
    OrderAmounts,
    OrderLineItem,
    OrderListing,
    OrderStatus,
    OrderStatusRecord,
    PaymentReference,
    StatusChange,
)
from orderdesk.domain.model.value_objects import Money
from orderdesk.domain.repository.order_repository import OrderRepository
from orderdesk.domain.repository.record_store import RecordStore, RecordUpdate, SortSpec

logger = logging.getLogger(__name__)

# --- Sales table columns ------------------------------------------------------
ORDER_ID = "Order ID"
CUSTOMER_NAME = "Customer Name"
CUSTOMER_EMAIL = "Customer Email"
CUSTOMER_PHONE = "Customer Phone"
SHIPPING_ADDRESS = "Shipping Address"
ORDER_ITEMS = "Order Items"
SUBTOTAL = "Subtotal"
SHIPPING = "Shipping"
TAX = "Tax"
SERVICE_FEE = "Service Fee"
TOTAL = "Total"
PAYMENT_METHOD = "Payment Method"
PAYMENT_ID = "Stripe Payment ID"
ORDER_STATUS = "Order Status"
ORDER_DATE = "Order Date"
STATUS_UPDATED = "Status Updated"
ASSIGNED_TO = "Assigned To"
TRACKING_NUMBER = "Tracking Number"
STATUS_NOTES = "Status Notes"
DELIVERY_NOTES = "Delivery Notes"
ORDER_NOTES = "Order Notes"

PHONE_NOT_PROVIDED = "Not provided"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def format_timestamp(value: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace(
        "+00:00", "Z"
    )


def parse_timestamp(value: Any) -> datetime | None:
    if not value or not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _text(value: Any) -> str:
    return "" if value is None else str(value).strip()


def _display_amount(value: Any) -> str:
    """``$38.00`` for readable amounts, otherwise the stored text as-is."""
    if value is None or value == "":
        return ""
    try:
        return str(Money.of(value))
    except ValidationError:
        return _text(value)


class RecordStoreOrderRepository(OrderRepository):

    def __init__(self, record_store: RecordStore, table: str = "Sales") -> None:
        self._store = record_store
        self._table = table
        self.max_batch_size = record_store.max_batch_size

    # --- OrderRepository interface --------------------------------------------

    def add(self, order: Order) -> str:
        record = self._store.create_record(self._table, self._to_fields(order))
        order.record_id = record.id
        return record.id

    def get_by_record_id(self, record_id: str) -> Order | None:
        record = self._store.get_record(self._table, record_id)
        if record is None:
            return None
        try:
            return self._to_domain(record.id, record.fields, record.created_time)
        except ValidationError as exc:
            raise UpstreamError(
                f"Stored order {record_id} is malformed", service="record store", detail=str(exc)
            ) from exc

    def list_newest_first(self) -> list[OrderListing]:
        records = self._store.list_records(
            self._table, sort=[SortSpec(field=ORDER_DATE, direction="desc")]
        )
        return [self._to_listing(r.id, r.fields, r.created_time) for r in records]

    def update_status(self, record_id: str, change: StatusChange) -> OrderStatusRecord:
        updated = self._store.update_records(
            self._table, [RecordUpdate(id=record_id, fields=self._change_fields(change))]
        )
        if not updated:
            raise EntityNotFoundError(f"Order {record_id} not found")
        # Only the status columns are read back; the rest of the row is not validated.
        fields = updated[0].fields
        return OrderStatusRecord(
            record_id=updated[0].id,
            status=change.status,
            status_updated_at=change.updated_at,
            assigned_to=_text(fields.get(ASSIGNED_TO)) or None,
            tracking_number=_text(fields.get(TRACKING_NUMBER)) or None,
            status_notes=_text(fields.get(STATUS_NOTES)) or None,
        )

    def bulk_update_status(self, record_ids: list[str], change: StatusChange) -> list[str]:
        fields = self._change_fields(change)
        updated = self._store.update_records(
            self._table, [RecordUpdate(id=record_id, fields=dict(fields)) for record_id in record_ids]
        )
        return [record.id for record in updated]

    # --- Serialization --------------------------------------------------------

    @staticmethod
    def _to_fields(order: Order) -> dict[str, Any]:
        return {
            ORDER_ID: order.order_id,
            CUSTOMER_NAME: order.customer.name,
            CUSTOMER_EMAIL: order.customer.email,
            CUSTOMER_PHONE: order.customer.phone or PHONE_NOT_PROVIDED,
            SHIPPING_ADDRESS: order.shipping_address,
            ORDER_ITEMS: order.items_summary,
            SUBTOTAL: float(order.amounts.subtotal),
            SHIPPING: float(order.amounts.shipping),
            TAX: float(order.amounts.tax),
            SERVICE_FEE: float(order.amounts.service_fee),
            TOTAL: float(order.amounts.total),
            PAYMENT_METHOD: order.payment.method,
            PAYMENT_ID: order.payment.payment_id,
            ORDER_STATUS: order.status.value,
            ORDER_DATE: format_timestamp(order.created_at),
            STATUS_UPDATED: format_timestamp(order.status_updated_at or order.created_at),
            DELIVERY_NOTES: order.delivery_notes or "",
            ORDER_NOTES: order.order_notes or "",
            ASSIGNED_TO: order.assigned_to or "",
            TRACKING_NUMBER: order.tracking_number or "",
        }

    @staticmethod
    def _change_fields(change: StatusChange) -> dict[str, Any]:
        fields: dict[str, Any] = {
            ORDER_STATUS: change.status.value,
            STATUS_UPDATED: format_timestamp(change.updated_at),
        }
        if change.tracking_number:
            fields[TRACKING_NUMBER] = change.tracking_number
        if change.assigned_to:
            fields[ASSIGNED_TO] = change.assigned_to
        if change.notes:
            fields[STATUS_NOTES] = change.notes
        return fields

    @staticmethod
    def _to_domain(record_id: str, raw: dict[str, Any], created_time: str | None) -> Order:
        items: list[OrderLineItem] = []
        for line in (raw.get(ORDER_ITEMS) or "").splitlines():
            if not line.strip():
                continue
            try:
                items.append(OrderLineItem.parse(line))
            except ValidationError:
                logger.warning(f"Order record {record_id}: unreadable item line {line!r}")

        phone = raw.get(CUSTOMER_PHONE) or None
        created_at = (
            parse_timestamp(raw.get(ORDER_DATE)) or parse_timestamp(created_time) or _EPOCH
        )

        return Order(
            record_id=record_id,
            order_id=raw.get(ORDER_ID) or "",
            customer=Customer(
                name=raw.get(CUSTOMER_NAME) or "",
                email=raw.get(CUSTOMER_EMAIL) or "",
                phone=None if phone == PHONE_NOT_PROVIDED else phone,
            ),
            shipping_address=raw.get(SHIPPING_ADDRESS) or "",
            items=items,
            amounts=OrderAmounts(
                subtotal=Money.of(raw.get(SUBTOTAL) or 0),
                shipping=Money.of(raw.get(SHIPPING) or 0),
                tax=Money.of(raw.get(TAX) or 0),
                service_fee=Money.of(raw.get(SERVICE_FEE) or 0),
                total=Money.of(raw.get(TOTAL) or 0),
            ),
            payment=PaymentReference(
                payment_id=raw.get(PAYMENT_ID) or "",
                method=raw.get(PAYMENT_METHOD) or "card",
            ),
            status=OrderStatus.parse(raw.get(ORDER_STATUS) or ""),
            created_at=created_at,
            status_updated_at=parse_timestamp(raw.get(STATUS_UPDATED)),
            assigned_to=raw.get(ASSIGNED_TO) or None,
            tracking_number=raw.get(TRACKING_NUMBER) or None,
            status_notes=raw.get(STATUS_NOTES) or None,
            delivery_notes=raw.get(DELIVERY_NOTES) or None,
            order_notes=raw.get(ORDER_NOTES) or None,
        )

    @staticmethod
    def _to_listing(record_id: str, raw: dict[str, Any], created_time: str | None) -> OrderListing:
        phone = _text(raw.get(CUSTOMER_PHONE))
        return OrderListing(
            record_id=record_id,
            order_id=_text(raw.get(ORDER_ID)),
            customer_name=_text(raw.get(CUSTOMER_NAME)),
            customer_email=_text(raw.get(CUSTOMER_EMAIL)),
            customer_phone="" if phone == PHONE_NOT_PROVIDED else phone,
            shipping_address=_text(raw.get(SHIPPING_ADDRESS)),
            order_items=_text(raw.get(ORDER_ITEMS)),
            status=_text(raw.get(ORDER_STATUS)),
            total=_display_amount(raw.get(TOTAL)),
            created_at=(
                parse_timestamp(raw.get(ORDER_DATE)) or parse_timestamp(created_time) or _EPOCH
            ),
            status_updated_at=parse_timestamp(raw.get(STATUS_UPDATED)),
            tracking_number=_text(raw.get(TRACKING_NUMBER)),
            assigned_to=_text(raw.get(ASSIGNED_TO)),
            status_notes=_text(raw.get(STATUS_NOTES)),
            delivery_notes=_text(raw.get(DELIVERY_NOTES)),
            order_notes=_text(raw.get(ORDER_NOTES)),
        )
