"""Abstract spreadsheet-style record store (tables of field dicts).

Order persistence and the connectivity check are written against this
interface; ``AirtableRecordStore`` is the production implementation.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class Record:
    id: str
    fields: dict[str, Any] = field(default_factory=dict)
    created_time: str | None = None


@dataclass(frozen=True)
class RecordUpdate:
    id: str
    fields: dict[str, Any]


@dataclass(frozen=True)
class SortSpec:
    field: str
    direction: str = "asc"  # "asc" | "desc"


class RecordStore(ABC):

    #: Maximum records per ``update_records`` call, None if unlimited.
    max_batch_size: int | None = None

    @abstractmethod
    def create_record(self, table: str, fields: dict[str, Any]) -> Record:
        """Create one record and return it with its assigned ID."""

    @abstractmethod
    def get_record(self, table: str, record_id: str) -> Record | None:
        """Return a record, or None if the ID does not exist."""

    @abstractmethod
    def list_records(
        self,
        table: str,
        sort: list[SortSpec] | None = None,
        filter_formula: str | None = None,
        max_records: int | None = None,
    ) -> list[Record]:
        """Return all matching records in store order."""

    @abstractmethod
    def update_records(self, table: str, updates: list[RecordUpdate]) -> list[Record]:
        """Patch the given fields on each record in a single batch.

        Raises EntityNotFoundError if a record does not exist.
        """
