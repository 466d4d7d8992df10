from __future__ import annotations

from typing import Any, Literal, Protocol

from pydantic import BaseModel, Field

SortDirection = Literal["asc", "desc"]


class StoredDocument(BaseModel):
    """A document as returned by a store: the store-assigned id plus its fields."""

    id: str
    fields: dict[str, Any] = Field(default_factory=dict)


class KeyValueDocumentStore(Protocol):
    """
    A single JSON-like document persisted under a key.
    """

    def load(self) -> dict[str, Any]:
        """Load and return the full document (never None)."""
        ...

    def save(self, doc: dict[str, Any]) -> None:
        """Persist the full document atomically."""
        ...


class SlotStorage(Protocol):
    """
    Browser-local-storage shaped capability: string values under string keys.
    """

    def get_item(self, key: str) -> str | None: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class DocumentStore(Protocol):
    def create(self, collection: str, fields: dict[str, Any]) -> str: ...

    def list(self, collection: str, *, order_by: str, direction: SortDirection = "asc") -> list[StoredDocument]: ...

    def get(self, collection: str, doc_id: str) -> StoredDocument | None: ...

    def delete_by_id(self, collection: str, doc_id: str) -> None: ...


class AsyncDocumentStore(Protocol):
    """
    Collection-level operations of a hosted document database.

    create() returns the generated id; delete_by_id() fails for unknown ids.
    """

    async def create(self, collection: str, fields: dict[str, Any]) -> str: ...

    async def list(
        self, collection: str, *, order_by: str, direction: SortDirection = "asc"
    ) -> list[StoredDocument]: ...

    async def get(self, collection: str, doc_id: str) -> StoredDocument | None: ...

    async def delete_by_id(self, collection: str, doc_id: str) -> None: ...
