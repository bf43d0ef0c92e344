"""Abstract repository for the Order aggregate.

Defined in the domain layer so the domain never depends on
infrastructure.  The record-store-backed implementation lives in the
infrastructure layer; tests use an in-memory fake.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from orderdesk.domain.model.order import Order, OrderListing, OrderStatusRecord, StatusChange


class OrderRepository(ABC):

    #: Largest number of orders ``bulk_update_status`` accepts in one call,
    #: or None when the backing store has no limit.
    max_batch_size: int | None = None

    @abstractmethod
    def add(self, order: Order) -> str:
        """Persist a new order and return the store's record ID.

        Also sets ``order.record_id``.
        """

    @abstractmethod
    def get_by_record_id(self, record_id: str) -> Order | None:
        """Return an order by its record ID, or None if not found."""

    @abstractmethod
    def list_newest_first(self) -> list[OrderListing]:
        """Return a row for every stored order, newest ``created_at`` first.

        Rows that would not validate as an Order are still included.
        """

    @abstractmethod
    def update_status(self, record_id: str, change: StatusChange) -> OrderStatusRecord:
        """Apply a status change to one order and return its status columns.

        Raises EntityNotFoundError if the record does not exist.
        """

    @abstractmethod
    def bulk_update_status(self, record_ids: list[str], change: StatusChange) -> list[str]:
        """Apply the same status change to every order in one batch.

        Returns the record IDs the store reports as updated.
        """
