"""Base abstraction for document stores.

A document store holds named collections of JSON documents keyed by
record id. Each call is atomic for the single record it touches; nothing
spans records.
"""

from abc import ABC, abstractmethod
from typing import Any


class DocumentStore(ABC):
    """Abstract base class for document stores."""

    @abstractmethod
    async def create_record(self, collection: str, record_id: str, doc: dict[str, Any]) -> None:
        """Write a record, overwriting any record with the same id."""
        ...

    @abstractmethod
    async def create_record_if_absent(
        self, collection: str, record_id: str, doc: dict[str, Any]
    ) -> bool:
        """Write a record only if the id is free.

        Returns:
            True if this call wrote the record, False if it already existed.
        """
        ...

    @abstractmethod
    async def get_record(self, collection: str, record_id: str) -> dict[str, Any] | None:
        """Read a record, or None if it does not exist."""
        ...

    @abstractmethod
    async def update_record(
        self, collection: str, record_id: str, partial: dict[str, Any]
    ) -> dict[str, Any]:
        """Merge top-level keys into an existing record.

        Returns:
            The merged record.

        Raises:
            RecordNotFoundError: If the record does not exist.
        """
        ...

    @abstractmethod
    async def delete_record(self, collection: str, record_id: str) -> None:
        """Delete a record. Deleting a missing record is not an error."""
        ...

    @abstractmethod
    async def list_records(self, collection: str) -> list[dict[str, Any]]:
        """List every record of a collection in insertion order.

        Each returned record is tagged with its ``id``.
        """
        ...

    @abstractmethod
    async def check_connection(self) -> bool:
        """Check store connectivity."""
        ...
