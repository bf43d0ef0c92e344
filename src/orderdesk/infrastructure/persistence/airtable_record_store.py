"""Airtable REST implementation of RecordStore."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import requests

from orderdesk.domain.exceptions import EntityNotFoundError, UpstreamError, ValidationError
from orderdesk.domain.repository.record_store import Record, RecordStore, RecordUpdate, SortSpec

logger = logging.getLogger(__name__)

SERVICE = "record store"
AIRTABLE_BATCH_LIMIT = 10


class AirtableRecordStore(RecordStore):

    max_batch_size = AIRTABLE_BATCH_LIMIT

    def __init__(
        self,
        token: str,
        base_id: str,
        api_url: str = "https://api.airtable.com/v0",
        timeout: float = 10.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = f"{api_url.rstrip('/')}/{base_id}"
        self._timeout = timeout
        self._session = session or requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            }
        )

    # --- RecordStore interface ------------------------------------------------

    def create_record(self, table: str, fields: dict[str, Any]) -> Record:
        data = self._request("POST", self._table_url(table), json={"records": [{"fields": fields}]})
        records = data.get("records") or []
        if not records:
            raise UpstreamError("Record store returned no record on create", service=SERVICE)
        return self._to_record(records[0])

    def get_record(self, table: str, record_id: str) -> Record | None:
        try:
            data = self._request(
                "GET",
                f"{self._table_url(table)}/{quote(record_id, safe='')}",
                missing_is_not_found=True,
            )
        except EntityNotFoundError:
            return None
        return self._to_record(data)

    def list_records(
        self,
        table: str,
        sort: list[SortSpec] | None = None,
        filter_formula: str | None = None,
        max_records: int | None = None,
    ) -> list[Record]:
        params: dict[str, Any] = {}
        for i, spec in enumerate(sort or []):
            params[f"sort[{i}][field]"] = spec.field
            params[f"sort[{i}][direction]"] = spec.direction
        if filter_formula:
            params["filterByFormula"] = filter_formula
        if max_records is not None:
            params["maxRecords"] = max_records

        records: list[Record] = []
        while True:
            data = self._request("GET", self._table_url(table), params=params)
            records.extend(self._to_record(raw) for raw in data.get("records") or [])
            offset = data.get("offset")
            if not offset:
                return records
            params["offset"] = offset

    def update_records(self, table: str, updates: list[RecordUpdate]) -> list[Record]:
        if len(updates) > AIRTABLE_BATCH_LIMIT:
            raise ValidationError(
                f"Airtable accepts at most {AIRTABLE_BATCH_LIMIT} records per update, "
                f"got {len(updates)}"
            )
        body = {"records": [{"id": u.id, "fields": u.fields} for u in updates]}
        data = self._request(
            "PATCH", self._table_url(table), json=body, missing_is_not_found=True
        )
        return [self._to_record(raw) for raw in data.get("records") or []]

    # --- HTTP helpers ---------------------------------------------------------

    def _table_url(self, table: str) -> str:
        return f"{self._base_url}/{quote(table, safe='')}"

    def _request(
        self,
        method: str,
        url: str,
        missing_is_not_found: bool = False,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Send one request and decode the JSON body.

        With ``missing_is_not_found`` a 404 (or Airtable's ROW_DOES_NOT_EXIST)
        means the addressed record is absent.  Otherwise, e.g. when creating,
        a 404 points at a wrong base or table and is an upstream failure.
        """
        try:
            response = self._session.request(method, url, timeout=self._timeout, **kwargs)
        except requests.RequestException as exc:
            logger.error(f"Airtable {method} {url} failed: {exc}")
            raise UpstreamError("Record store unreachable", service=SERVICE, detail=str(exc)) from exc

        if missing_is_not_found and response.status_code == 404:
            raise EntityNotFoundError("Record not found")
        if not response.ok:
            detail = self._error_detail(response)
            logger.error(f"Airtable {method} {url} returned {response.status_code}: {detail}")
            if missing_is_not_found and response.status_code == 422 and "ROW_DOES_NOT_EXIST" in detail:
                raise EntityNotFoundError("Record not found")
            raise UpstreamError(
                f"Record store error (HTTP {response.status_code})",
                service=SERVICE,
                detail=detail,
            )

        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError(
                "Record store returned an unreadable response",
                service=SERVICE,
                detail=response.text[:500],
            ) from exc

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            return f"{error.get('type', '')}: {error.get('message', '')}".strip(": ")
        return str(error or response.text)

    @staticmethod
    def _to_record(raw: dict[str, Any]) -> Record:
        return Record(
            id=raw["id"],
            fields=raw.get("fields") or {},
            created_time=raw.get("createdTime"),
        )
