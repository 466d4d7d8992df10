from __future__ import annotations

from .document_store import SERVER_TIMESTAMP, AsyncDiskDocumentStore, DiskDocumentStore
from .interfaces import AsyncDocumentStore, DocumentStore, SlotStorage, StoredDocument
from .local_cache import DiskSlotStorage, LocalGraduateCache

__all__ = [
    "SERVER_TIMESTAMP",
    "AsyncDocumentStore",
    "AsyncDiskDocumentStore",
    "DocumentStore",
    "DiskDocumentStore",
    "SlotStorage",
    "DiskSlotStorage",
    "LocalGraduateCache",
    "StoredDocument",
]
