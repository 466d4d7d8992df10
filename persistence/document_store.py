from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

from errors import DocumentNotFoundError, StoreDeleteError, StoreReadError, StoreWriteError

from .disk_store import DiskJsonDocumentStore
from .interfaces import AsyncDocumentStore, DocumentStore, SortDirection, StoredDocument

logger = logging.getLogger(__name__)


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


# Placeholder field value: the store replaces it with its own clock at write time.
SERVER_TIMESTAMP: Any = _ServerTimestamp()


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _sort_key(value: Any) -> tuple[bool, str]:
    # Missing fields sort before any present value, as in "asc" order.
    if value is None:
        return (False, "")
    return (True, value if isinstance(value, str) else str(value))


class DiskDocumentStore(DocumentStore):
    """
    A document collection per JSON file:

      data/store/<collection>.json -> { "documents": { "<id>": { ...fields } } }

    Ids are generated here and are never part of the stored fields.
    """

    def __init__(
        self,
        path_for: Callable[[str], Path],
        *,
        clock: Callable[[], str] = utc_now_iso,
        id_factory: Callable[[], str] = lambda: uuid.uuid4().hex,
    ):
        self._path_for = path_for
        self._clock = clock
        self._id_factory = id_factory

    def _collection(self, collection: str) -> DiskJsonDocumentStore:
        return DiskJsonDocumentStore(self._path_for(collection))

    @staticmethod
    def _documents(doc: dict[str, Any]) -> dict[str, Any]:
        docs = doc.get("documents")
        return docs if isinstance(docs, dict) else {}

    def create(self, collection: str, fields: dict[str, Any]) -> str:
        now = self._clock()
        stamped = {k: (now if v is SERVER_TIMESTAMP else v) for k, v in fields.items()}
        store = self._collection(collection)
        try:
            with store.lock:
                doc = store.load()
                docs = self._documents(doc)
                doc_id = self._id_factory()
                while doc_id in docs:
                    doc_id = self._id_factory()
                docs[doc_id] = stamped
                doc["documents"] = docs
                store.save(doc)
        except (OSError, TypeError, ValueError) as e:
            raise StoreWriteError(f"Could not write to collection {collection!r}: {e}") from e
        return doc_id

    def list(self, collection: str, *, order_by: str, direction: SortDirection = "asc") -> list[StoredDocument]:
        if direction not in ("asc", "desc"):
            raise StoreReadError(f"Unsupported sort direction: {direction!r}")
        try:
            docs = self._documents(self._collection(collection).load())
        except OSError as e:
            raise StoreReadError(f"Could not read collection {collection!r}: {e}") from e

        items = [
            StoredDocument(id=str(doc_id), fields=fields)
            for doc_id, fields in docs.items()
            if isinstance(fields, dict)
        ]
        if direction == "desc":
            # Stable sort: reversing first puts the newest insert first among equal keys.
            items.reverse()
            return sorted(items, key=lambda d: _sort_key(d.fields.get(order_by)), reverse=True)
        return sorted(items, key=lambda d: _sort_key(d.fields.get(order_by)))

    def get(self, collection: str, doc_id: str) -> StoredDocument | None:
        try:
            docs = self._documents(self._collection(collection).load())
        except OSError as e:
            raise StoreReadError(f"Could not read collection {collection!r}: {e}") from e
        fields = docs.get(doc_id)
        if not isinstance(fields, dict):
            return None
        return StoredDocument(id=doc_id, fields=fields)

    def delete_by_id(self, collection: str, doc_id: str) -> None:
        store = self._collection(collection)
        try:
            with store.lock:
                doc = store.load()
                docs = self._documents(doc)
                if doc_id not in docs:
                    raise DocumentNotFoundError(collection, doc_id)
                docs.pop(doc_id)
                doc["documents"] = docs
                store.save(doc)
        except OSError as e:
            raise StoreDeleteError(f"Could not delete {doc_id!r} from {collection!r}: {e}") from e


class AsyncDiskDocumentStore(AsyncDocumentStore):
    """
    Async wrapper around the disk-backed document store.
    Uses asyncio.to_thread to avoid blocking the event loop on file I/O.
    """

    def __init__(self, store: DiskDocumentStore) -> None:
        self._store = store

    async def create(self, collection: str, fields: dict[str, Any]) -> str:
        return await asyncio.to_thread(self._store.create, collection, fields)

    async def list(
        self, collection: str, *, order_by: str, direction: SortDirection = "asc"
    ) -> list[StoredDocument]:
        return await asyncio.to_thread(self._store.list, collection, order_by=order_by, direction=direction)

    async def get(self, collection: str, doc_id: str) -> StoredDocument | None:
        return await asyncio.to_thread(self._store.get, collection, doc_id)

    async def delete_by_id(self, collection: str, doc_id: str) -> None:
        await asyncio.to_thread(self._store.delete_by_id, collection, doc_id)
