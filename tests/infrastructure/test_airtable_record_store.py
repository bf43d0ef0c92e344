"""Tests for the Airtable REST adapter (HTTP mocked with requests-mock)."""

import pytest
import requests

from orderdesk.application.create_order import CreateOrderHandler
from orderdesk.application.dto import CreateOrderRequest
from orderdesk.domain.exceptions import (
    EntityNotFoundError,
    ReconciliationError,
    UpstreamError,
    ValidationError,
)
from orderdesk.domain.repository.record_store import RecordUpdate, SortSpec
from orderdesk.infrastructure.persistence.airtable_record_store import AirtableRecordStore
from orderdesk.infrastructure.persistence.record_store_order_repository import (
    RecordStoreOrderRepository,
)
from tests.fakes import FakePaymentGateway

BASE = "https://api.airtable.com/v0/appTEST"


@pytest.fixture
def store() -> AirtableRecordStore:
    return AirtableRecordStore(token="patSECRET", base_id="appTEST", timeout=3)


class TestCreateRecord:

    def test_posts_fields_with_bearer_token(self, store, requests_mock):
        requests_mock.post(
            f"{BASE}/Sales",
            json={"records": [{"id": "rec1", "fields": {"Order ID": "NG1"}, "createdTime": "2024-05-01T00:00:00.000Z"}]},
        )

        record = store.create_record("Sales", {"Order ID": "NG1"})

        assert record.id == "rec1"
        assert record.created_time == "2024-05-01T00:00:00.000Z"
        request = requests_mock.last_request
        assert request.headers["Authorization"] == "Bearer patSECRET"
        assert request.json() == {"records": [{"fields": {"Order ID": "NG1"}}]}
        assert request.timeout == 3

    def test_error_message_kept_as_detail(self, store, requests_mock):
        requests_mock.post(
            f"{BASE}/Sales",
            status_code=422,
            json={"error": {"type": "UNKNOWN_FIELD_NAME", "message": 'Unknown field name: "Foo"'}},
        )

        with pytest.raises(UpstreamError) as info:
            store.create_record("Sales", {"Foo": 1})

        assert str(info.value) == "Record store error (HTTP 422)"
        assert "UNKNOWN_FIELD_NAME" in info.value.detail
        assert info.value.service == "record store"

    def test_connection_error(self, store, requests_mock):
        requests_mock.post(f"{BASE}/Sales", exc=requests.ConnectTimeout)
        with pytest.raises(UpstreamError, match="unreachable"):
            store.create_record("Sales", {})

    def test_missing_table_is_upstream_failure(self, store, requests_mock):
        requests_mock.post(
            f"{BASE}/Sales",
            status_code=404,
            json={"error": {"type": "TABLE_NOT_FOUND", "message": "Could not find table Sales"}},
        )
        with pytest.raises(UpstreamError) as info:
            store.create_record("Sales", {"Order ID": "NG1"})
        assert str(info.value) == "Record store error (HTTP 404)"
        assert "TABLE_NOT_FOUND" in info.value.detail


class TestGetRecord:

    def test_found(self, store, requests_mock):
        requests_mock.get(f"{BASE}/Sales/rec1", json={"id": "rec1", "fields": {"Order Status": "Paid"}})
        assert store.get_record("Sales", "rec1").fields == {"Order Status": "Paid"}

    def test_missing_returns_none(self, store, requests_mock):
        requests_mock.get(f"{BASE}/Sales/recX", status_code=404, json={"error": "NOT_FOUND"})
        assert store.get_record("Sales", "recX") is None


class TestListRecords:

    def test_sort_params_and_pagination(self, store, requests_mock):
        requests_mock.get(
            f"{BASE}/Sales",
            [
                {"json": {"records": [{"id": "rec3", "fields": {}}], "offset": "itrNEXT"}},
                {"json": {"records": [{"id": "rec2", "fields": {}}, {"id": "rec1", "fields": {}}]}},
            ],
        )

        records = store.list_records("Sales", sort=[SortSpec("Order Date", "desc")])

        assert [r.id for r in records] == ["rec3", "rec2", "rec1"]
        first, second = requests_mock.request_history
        assert first.qs["sort[0][field]"] == ["order date"]
        assert first.qs["sort[0][direction]"] == ["desc"]
        assert "offset" not in first.qs
        assert second.qs["offset"] == ["itrnext"]

    def test_max_records(self, store, requests_mock):
        requests_mock.get(f"{BASE}/Products", json={"records": []})
        assert store.list_records("Products", max_records=1) == []
        assert requests_mock.last_request.qs["maxrecords"] == ["1"]

    def test_missing_table_is_upstream_failure(self, store, requests_mock):
        requests_mock.get(f"{BASE}/Sales", status_code=404, json={"error": "NOT_FOUND"})
        with pytest.raises(UpstreamError, match="HTTP 404"):
            store.list_records("Sales")


class TestUpdateRecords:

    def test_patch_body(self, store, requests_mock):
        requests_mock.patch(
            f"{BASE}/Sales",
            json={"records": [{"id": "rec1", "fields": {"Order Status": "Shipped"}}]},
        )

        updated = store.update_records("Sales", [RecordUpdate("rec1", {"Order Status": "Shipped"})])

        assert [r.id for r in updated] == ["rec1"]
        assert requests_mock.last_request.json() == {
            "records": [{"id": "rec1", "fields": {"Order Status": "Shipped"}}]
        }

    def test_more_than_ten_rejected_without_request(self, store, requests_mock):
        updates = [RecordUpdate(f"rec{i}", {"Order Status": "Shipped"}) for i in range(11)]
        with pytest.raises(ValidationError, match="at most 10"):
            store.update_records("Sales", updates)
        assert not requests_mock.called

    def test_unknown_record_is_not_found(self, store, requests_mock):
        requests_mock.patch(f"{BASE}/Sales", status_code=404, json={"error": {"type": "NOT_FOUND"}})
        with pytest.raises(EntityNotFoundError):
            store.update_records("Sales", [RecordUpdate("recX", {})])

    def test_row_does_not_exist_is_not_found(self, store, requests_mock):
        requests_mock.patch(
            f"{BASE}/Sales",
            status_code=422,
            json={"error": {"type": "ROW_DOES_NOT_EXIST", "message": "Record ID recX does not exist"}},
        )
        with pytest.raises(EntityNotFoundError):
            store.update_records("Sales", [RecordUpdate("recX", {})])


class TestCreateOrderAgainstAirtable:

    def test_failed_save_after_payment_needs_reconciliation(self, store, requests_mock):
        requests_mock.post(f"{BASE}/Sales", status_code=404, json={"error": "NOT_FOUND"})
        handler = CreateOrderHandler(
            RecordStoreOrderRepository(store, table="Sales"),
            FakePaymentGateway({"pi_paid": "succeeded"}),
        )
        payload = {
            "customer": {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"},
            "shipping": {"address": "1 Main St", "city": "Boston", "country": "US"},
            "order": {
                "items": [{"name": "Scarf", "quantity": 2, "price": 15}],
                "subtotal": 30, "shipping": 5, "tax": 2, "serviceFee": 1, "total": 38,
            },
            "payment": {"id": "pi_paid"},
        }

        with pytest.raises(ReconciliationError) as info:
            handler.handle(CreateOrderRequest.from_payload(payload))

        assert info.value.payment_id == "pi_paid"
        assert requests_mock.call_count == 1
