"""Application service: Workstation listing (query).

Every stored order with the full staff projection, newest first.  Rows
are shown as stored, including ones staff have edited by hand.
"""

from __future__ import annotations

from orderdesk.application.dto import WorkstationOrderDTO
from orderdesk.domain.model.order import OrderListing
from orderdesk.domain.repository.order_repository import OrderRepository


class ListWorkstationOrdersHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self) -> list[WorkstationOrderDTO]:
        rows = self._order_repo.list_newest_first()
        # sorted() is stable, so equal timestamps keep the store's order.
        rows = sorted(rows, key=lambda r: r.created_at, reverse=True)
        return [self._to_dto(row) for row in rows]

    @staticmethod
    def _to_dto(row: OrderListing) -> WorkstationOrderDTO:
        return WorkstationOrderDTO(
            record_id=row.record_id,
            order_id=row.order_id,
            customer_name=row.customer_name,
            customer_email=row.customer_email,
            customer_phone=row.customer_phone,
            shipping_address=row.shipping_address,
            order_items=row.order_items,
            status=row.status,
            total=row.total,
            order_date=row.created_at.isoformat(),
            status_updated=row.status_updated_at.isoformat() if row.status_updated_at else "",
            tracking_number=row.tracking_number,
            assigned_to=row.assigned_to,
            status_notes=row.status_notes,
            delivery_notes=row.delivery_notes,
            order_notes=row.order_notes,
        )
