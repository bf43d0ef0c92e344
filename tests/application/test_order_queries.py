"""Integration tests for the order status lookup and workstation listing."""

from datetime import datetime, timedelta, timezone

import pytest

from orderdesk.application.list_workstation_orders import ListWorkstationOrdersHandler
from orderdesk.application.show_order_status import ShowOrderStatusHandler
from orderdesk.domain.exceptions import EntityNotFoundError
from orderdesk.domain.model.order import (
    Customer,
    Order,
    OrderAmounts,
    OrderLineItem,
    PaymentReference,
    ShippingAddress,
    StatusChange,
)
from orderdesk.domain.model.value_objects import Money, Quantity
from orderdesk.infrastructure.persistence.record_store_order_repository import (
    RecordStoreOrderRepository,
)
from tests.fakes import FakeOrderRepository, FakeRecordStore

T1 = datetime(2024, 5, 1, 9, 0, tzinfo=timezone.utc)
T2 = T1 + timedelta(hours=1)
T3 = T2 + timedelta(hours=1)


def _order(order_id: str, created_at: datetime, **kwargs) -> Order:
    return Order.create(
        order_id=order_id,
        customer=Customer.create("Ada", "Lovelace", "ada@example.com", phone=kwargs.get("phone")),
        shipping=ShippingAddress("1 Main St", "Boston", "MA", "02101", "US"),
        items=[OrderLineItem("Scarf", Quantity(2), Money.of("15"), size="M")],
        amounts=OrderAmounts.create(
            Money.of("30"), Money.of("5"), Money.of("2"), Money.of("1"), Money.of("38")
        ),
        payment=PaymentReference("pi_1"),
        delivery_notes=kwargs.get("delivery_notes"),
        now=created_at,
    )


class TestShowOrderStatus:

    def test_projection(self):
        repo = FakeOrderRepository()
        record_id = repo.seed(_order("NG1", T1))
        repo.update_status(record_id, StatusChange.create("Shipped", tracking_number="1Z1", now=T2))

        dto = ShowOrderStatusHandler(repo).handle(record_id)

        assert dto.record_id == record_id
        assert dto.order_id == "NG1"
        assert dto.status == "Shipped"
        assert dto.customer_name == "Ada Lovelace"
        assert dto.total == "$38.00"
        assert dto.order_date == T1.isoformat()
        assert dto.status_updated == T2.isoformat()
        assert dto.tracking_number == "1Z1"
        assert dto.assigned_to is None

    def test_unknown_record_is_not_found(self):
        with pytest.raises(EntityNotFoundError, match="not found"):
            ShowOrderStatusHandler(FakeOrderRepository()).handle("recMISSING")


class TestWorkstationListing:

    def test_newest_first(self):
        repo = FakeOrderRepository()
        for order_id, created in (("NG-T1", T1), ("NG-T3", T3), ("NG-T2", T2)):
            repo.seed(_order(order_id, created))

        orders = ListWorkstationOrdersHandler(repo).handle()

        assert [o.order_id for o in orders] == ["NG-T3", "NG-T2", "NG-T1"]

    def test_ties_keep_store_order(self):
        repo = FakeOrderRepository()
        for order_id in ("NG-A", "NG-B", "NG-C"):
            repo.seed(_order(order_id, T1))
        orders = ListWorkstationOrdersHandler(repo).handle()
        assert [o.order_id for o in orders] == ["NG-A", "NG-B", "NG-C"]

    def test_full_projection_with_blank_defaults(self):
        repo = FakeOrderRepository()
        record_id = repo.seed(_order("NG1", T1, delivery_notes="Ring twice"))

        (dto,) = ListWorkstationOrdersHandler(repo).handle()

        assert dto.record_id == record_id
        assert dto.customer_email == "ada@example.com"
        assert dto.customer_phone == ""
        assert dto.shipping_address == "1 Main St, Boston, MA 02101, US"
        assert dto.order_items == "2x Scarf (Size: M) - $15.00"
        assert dto.status == "Paid"
        assert dto.delivery_notes == "Ring twice"
        assert dto.tracking_number == ""
        assert dto.assigned_to == ""
        assert dto.status_notes == ""
        assert dto.order_notes == ""

    def test_empty_store(self):
        assert ListWorkstationOrdersHandler(FakeOrderRepository()).handle() == []

    def test_rows_with_blank_status_are_listed(self):
        store = FakeRecordStore()
        repo = RecordStoreOrderRepository(store)
        repo.add(_order("NG1", T1))
        store.create_record("Sales", {"Order ID": "NG2", "Order Status": "", "Order Date": "2024-05-01T11:00:00.000Z"})

        orders = ListWorkstationOrdersHandler(repo).handle()

        assert [(o.order_id, o.status) for o in orders] == [("NG2", ""), ("NG1", "Paid")]
        assert orders[0].total == ""
        assert orders[1].total == "$38.00"
