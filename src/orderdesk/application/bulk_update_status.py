"""Application service: Bulk Update Status use case.

One status, one timestamp and one note for every record, submitted as a
single batch.  The store's batch limit is checked up front; the batch is
never split.  If the store reports fewer updates than requested the
whole operation is reported as failed.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import BulkUpdateResult
from orderdesk.domain.exceptions import UpstreamError, ValidationError
from orderdesk.domain.model.order import StatusChange
from orderdesk.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class BulkUpdateStatusHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        record_ids: list[str],
        status: str,
        notes: str | None = None,
    ) -> BulkUpdateResult:
        ids = self._normalise_ids(record_ids)
        change = StatusChange.for_bulk(status=status, notes=notes)

        limit = self._order_repo.max_batch_size
        if limit is not None and len(ids) > limit:
            raise ValidationError(
                f"Bulk update is limited to {limit} orders per request, got {len(ids)}"
            )

        updated = set(self._order_repo.bulk_update_status(ids, change)) & set(ids)

        if len(updated) != len(ids):
            raise UpstreamError(
                f"Bulk status update incomplete: {len(updated)} of {len(ids)} orders updated",
                service="record store",
            )

        logger.info(f"Bulk updated {len(updated)} orders to {change.status.value}")
        return BulkUpdateResult(status=change.status.value, updated_count=len(updated))

    @staticmethod
    def _normalise_ids(record_ids: list[str]) -> list[str]:
        """Strip blanks and collapse duplicates, keeping first-seen order."""
        if not record_ids:
            raise ValidationError("No record IDs provided")

        ids: list[str] = []
        for raw in record_ids:
            if not isinstance(raw, str) or not raw.strip():
                raise ValidationError(f"Invalid record ID: {raw!r}")
            record_id = raw.strip()
            if record_id not in ids:
                ids.append(record_id)
        return ids
