"""Application service: Update Order Status use case.

Any status in OrderStatus may follow any other.  Tracking number,
assignee and notes are written only when supplied.
"""

from __future__ import annotations

import logging

from orderdesk.application.dto import StatusUpdateResult
from orderdesk.domain.exceptions import ValidationError
from orderdesk.domain.model.order import StatusChange
from orderdesk.domain.repository.order_repository import OrderRepository

logger = logging.getLogger(__name__)


class UpdateOrderStatusHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(
        self,
        record_id: str,
        status: str,
        tracking_number: str | None = None,
        assigned_to: str | None = None,
        notes: str | None = None,
    ) -> StatusUpdateResult:
        if not record_id or not record_id.strip():
            raise ValidationError("Record ID is required")

        change = StatusChange.create(
            status=status,
            tracking_number=tracking_number,
            assigned_to=assigned_to,
            notes=notes,
        )
        saved = self._order_repo.update_status(record_id.strip(), change)

        logger.info(f"Order record {record_id} moved to {change.status.value}")
        return StatusUpdateResult(
            record_id=record_id.strip(),
            status=saved.status.value,
            updated_at=saved.status_updated_at.isoformat(),
            assigned_to=saved.assigned_to,
            tracking_number=saved.tracking_number,
            status_notes=saved.status_notes,
        )
