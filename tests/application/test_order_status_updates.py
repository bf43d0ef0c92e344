"""Integration tests for the single and bulk status update use cases."""

from datetime import datetime, timezone

import pytest

from orderdesk.application.bulk_update_status import BulkUpdateStatusHandler
from orderdesk.application.update_order_status import UpdateOrderStatusHandler
from orderdesk.domain.exceptions import EntityNotFoundError, UpstreamError, ValidationError
from orderdesk.domain.model.order import (
    Customer,
    Order,
    OrderAmounts,
    OrderLineItem,
    OrderStatus,
    PaymentReference,
    ShippingAddress,
)
from orderdesk.domain.model.value_objects import Money, Quantity
from orderdesk.infrastructure.persistence.record_store_order_repository import (
    RecordStoreOrderRepository,
)
from tests.fakes import FakeOrderRepository, FakeRecordStore


def _order(created_at: datetime | None = None) -> Order:
    return Order.create(
        order_id="NG1714564800000TESTTEST",
        customer=Customer.create("Ada", "Lovelace", "ada@example.com"),
        shipping=ShippingAddress("1 Main St", "Boston", "MA", "02101", "US"),
        items=[OrderLineItem("Scarf", Quantity(2), Money.of("15"))],
        amounts=OrderAmounts.create(
            Money.of("30"), Money.of("5"), Money.of("2"), Money.of("1"), Money.of("38")
        ),
        payment=PaymentReference("pi_1"),
        now=created_at or datetime(2024, 5, 1, tzinfo=timezone.utc),
    )


def _setup(count: int = 1, max_batch_size: int | None = None):
    repo = FakeOrderRepository(max_batch_size=max_batch_size)
    ids = [repo.seed(_order()) for _ in range(count)]
    return repo, ids


class TestUpdateOrderStatus:

    def test_moves_status_and_stamps_time(self):
        repo, (record_id,) = _setup()
        result = UpdateOrderStatusHandler(repo).handle(record_id, "Processing")

        saved = repo.get_by_record_id(record_id)
        assert result.status == "Processing"
        assert saved.status == OrderStatus.PROCESSING
        assert saved.status_updated_at > saved.created_at
        assert result.updated_at == saved.status_updated_at.isoformat()

    def test_tracking_number_keeps_assignee(self):
        repo, (record_id,) = _setup()
        handler = UpdateOrderStatusHandler(repo)
        handler.handle(record_id, "Processing", assigned_to="jane")
        result = handler.handle(record_id, "Shipped", tracking_number="1Z999")

        assert result.tracking_number == "1Z999"
        assert result.assigned_to == "jane"
        saved = repo.get_by_record_id(record_id)
        assert saved.assigned_to == "jane"

    def test_notes_recorded(self):
        repo, (record_id,) = _setup()
        result = UpdateOrderStatusHandler(repo).handle(
            record_id, "On Hold", notes="Waiting for address confirmation"
        )
        assert result.status_notes == "Waiting for address confirmation"

    def test_backwards_transition_allowed(self):
        repo, (record_id,) = _setup()
        handler = UpdateOrderStatusHandler(repo)
        handler.handle(record_id, "Delivered")
        assert handler.handle(record_id, "Paid").status == "Paid"

    def test_invalid_status_leaves_record_unchanged(self):
        repo, (record_id,) = _setup()
        before = repo.get_by_record_id(record_id)

        with pytest.raises(ValidationError, match="Invalid status"):
            UpdateOrderStatusHandler(repo).handle(record_id, "Lost in transit")

        after = repo.get_by_record_id(record_id)
        assert after.status == before.status == OrderStatus.PAID
        assert after.status_updated_at == before.status_updated_at
        assert "update" not in repo.calls

    def test_unknown_record_is_not_found(self):
        repo, _ = _setup()
        with pytest.raises(EntityNotFoundError, match="not found"):
            UpdateOrderStatusHandler(repo).handle("recMISSING", "Shipped")

    def test_blank_record_id_rejected(self):
        repo, _ = _setup()
        with pytest.raises(ValidationError, match="Record ID"):
            UpdateOrderStatusHandler(repo).handle("  ", "Shipped")

    def test_saved_update_reported_even_if_row_has_bad_amounts(self):
        store = FakeRecordStore()
        record = store.create_record("Sales", {"Order Status": "Paid", "Total": "n/a"})

        result = UpdateOrderStatusHandler(RecordStoreOrderRepository(store)).handle(record.id, "Shipped")

        assert result.status == "Shipped"
        assert store.tables["Sales"][record.id].fields["Order Status"] == "Shipped"


class TestBulkUpdateStatus:

    def test_two_orders_shipped_with_note(self):
        repo, ids = _setup(count=2)
        result = BulkUpdateStatusHandler(repo).handle(ids, "Shipped", notes="Batch 12 collected")

        assert result.updated_count == 2
        first, second = (repo.get_by_record_id(i) for i in ids)
        assert first.status == second.status == OrderStatus.SHIPPED
        assert first.status_notes == second.status_notes == "Batch 12 collected"
        assert first.status_updated_at == second.status_updated_at

    def test_empty_list_rejected(self):
        repo, _ = _setup()
        with pytest.raises(ValidationError, match="No record IDs"):
            BulkUpdateStatusHandler(repo).handle([], "Shipped")
        assert "bulk" not in repo.calls

    @pytest.mark.parametrize("status", ["Paid", "Awaiting Information", "Lost"])
    def test_status_outside_bulk_set_rejected(self, status):
        repo, ids = _setup()
        with pytest.raises(ValidationError, match="Invalid status"):
            BulkUpdateStatusHandler(repo).handle(ids, status)
        assert "bulk" not in repo.calls

    def test_duplicates_collapsed(self):
        repo, ids = _setup(count=2)
        result = BulkUpdateStatusHandler(repo).handle([ids[0], ids[1], ids[0]], "Processing")
        assert result.updated_count == 2

    def test_batch_limit_fails_fast(self):
        repo, ids = _setup(count=3, max_batch_size=2)
        with pytest.raises(ValidationError, match="limited to 2"):
            BulkUpdateStatusHandler(repo).handle(ids, "Processing")
        assert "bulk" not in repo.calls
        assert all(repo.get_by_record_id(i).status == OrderStatus.PAID for i in ids)

    def test_partial_batch_reported_as_failure(self):
        repo, ids = _setup(count=2)
        repo.drop_from_bulk = {ids[1]}
        with pytest.raises(UpstreamError, match="1 of 2"):
            BulkUpdateStatusHandler(repo).handle(ids, "Cancelled")

    def test_upstream_failure_propagates(self):
        repo, ids = _setup()
        with pytest.raises(UpstreamError):
            BulkUpdateStatusHandler(repo).handle([ids[0], "recMISSING"], "Refunded")

    def test_rows_with_bad_amounts_still_counted(self):
        store = FakeRecordStore()
        ids = [store.create_record("Sales", {"Order Status": "Paid", "Total": "n/a"}).id for _ in range(2)]

        result = BulkUpdateStatusHandler(RecordStoreOrderRepository(store)).handle(ids, "Shipped")

        assert result.updated_count == 2
