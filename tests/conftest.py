from __future__ import annotations

import importlib
from pathlib import Path
import sys
from typing import Any

import pytest


# Ensure the repository root (parent of ./tests) is importable during pytest collection.
# This avoids ModuleNotFoundError for imports like `import persistence...` under pytest import modes
# that don't automatically prepend the cwd/rootdir to sys.path.
REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))


from errors import DocumentNotFoundError, StoreWriteError  # noqa: E402
from persistence.interfaces import StoredDocument  # noqa: E402


@pytest.fixture
def sandbox_project(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """
    Point the data directory at a temp dir so tests never touch the real ./data.
    """
    monkeypatch.setenv("ALUMNI_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("DEBUG_LOG_REQUESTS", "false")
    return tmp_path


@pytest.fixture
def reload_endpoints(sandbox_project: Path) -> None:
    """
    Endpoints share singletons built at import time; rebuild them after sandboxing paths.
    """
    import endpoints.wiring as wiring

    importlib.reload(wiring)


class MemoryDocumentStore:
    """
    In-memory async document store that records every call.

    `fail_on_create` makes the n-th create() call (1-based) and every later one fail.
    """

    def __init__(self, *, fail_on_create: int | None = None) -> None:
        self.documents: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[str] = []
        self._next_id = 1
        self._tick = 0
        self._fail_on_create = fail_on_create
        self._creates = 0

    async def create(self, collection: str, fields: dict[str, Any]) -> str:
        self.calls.append("create")
        self._creates += 1
        if self._fail_on_create is not None and self._creates >= self._fail_on_create:
            raise StoreWriteError("quota exceeded")
        self._tick += 1
        stamp = f"2024-01-01T00:00:{self._tick:02d}+00:00"
        doc_id = f"doc{self._next_id:04d}"
        self._next_id += 1
        stored = {k: (stamp if k in ("createdAt", "updatedAt") else v) for k, v in fields.items()}
        self.documents.setdefault(collection, {})[doc_id] = stored
        return doc_id

    async def list(self, collection: str, *, order_by: str, direction: str = "asc") -> list[StoredDocument]:
        self.calls.append("list")
        docs = [StoredDocument(id=k, fields=v) for k, v in self.documents.get(collection, {}).items()]
        return sorted(docs, key=lambda d: str(d.fields.get(order_by) or ""), reverse=direction == "desc")

    async def get(self, collection: str, doc_id: str) -> StoredDocument | None:
        self.calls.append("get")
        fields = self.documents.get(collection, {}).get(doc_id)
        return StoredDocument(id=doc_id, fields=fields) if fields is not None else None

    async def delete_by_id(self, collection: str, doc_id: str) -> None:
        self.calls.append("delete")
        docs = self.documents.get(collection, {})
        if doc_id not in docs:
            raise DocumentNotFoundError(collection, doc_id)
        docs.pop(doc_id)


class MemorySlotStorage:
    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@pytest.fixture
def memory_store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def memory_slots() -> MemorySlotStorage:
    return MemorySlotStorage()


@pytest.fixture
def make_store():
    return MemoryDocumentStore
