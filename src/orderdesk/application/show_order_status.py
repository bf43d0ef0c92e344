"""Application service: Show Order Status use case (query)."""

from __future__ import annotations

from orderdesk.application.dto import OrderStatusDTO
from orderdesk.domain.exceptions import EntityNotFoundError, ValidationError
from orderdesk.domain.model.order import Order
from orderdesk.domain.repository.order_repository import OrderRepository


class ShowOrderStatusHandler:

    def __init__(self, order_repo: OrderRepository) -> None:
        self._order_repo = order_repo

    def handle(self, record_id: str) -> OrderStatusDTO:
        if not record_id or not record_id.strip():
            raise ValidationError("Record ID is required")

        order = self._order_repo.get_by_record_id(record_id.strip())
        if order is None:
            raise EntityNotFoundError(f"Order {record_id} not found")
        return self._to_dto(order)

    @staticmethod
    def _to_dto(order: Order) -> OrderStatusDTO:
        return OrderStatusDTO(
            record_id=order.record_id,  # type: ignore[arg-type]
            order_id=order.order_id,
            status=order.status.value,
            customer_name=order.customer.name,
            total=str(order.total),
            order_date=order.created_at.isoformat(),
            status_updated=(
                order.status_updated_at.isoformat() if order.status_updated_at else None
            ),
            tracking_number=order.tracking_number,
            assigned_to=order.assigned_to,
        )
