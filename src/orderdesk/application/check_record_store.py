"""Application service: Record store connectivity check.

Probes each table with a one-record read.  Failures are part of the
report rather than raised, so one broken table does not hide the other.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import TableConnectionDTO
from orderdesk.domain.exceptions import EntityNotFoundError, UpstreamError
from orderdesk.domain.repository.record_store import RecordStore

logger = logging.getLogger(__name__)


class CheckRecordStoreHandler:

    def __init__(self, record_store: RecordStore, tables: list[str]) -> None:
        self._record_store = record_store
        self._tables = tables

    def handle(self) -> list[TableConnectionDTO]:
        return [self._probe(table) for table in self._tables]

    def _probe(self, table: str) -> TableConnectionDTO:
        try:
            records = self._record_store.list_records(table, max_records=1)
        except (UpstreamError, EntityNotFoundError) as exc:
            logger.error(f"Record store table '{table}' unreachable: {exc}")
            return TableConnectionDTO(
                table=table, connected=False, record_count=0, error=str(exc)
            )
        return TableConnectionDTO(table=table, connected=True, record_count=len(records))
