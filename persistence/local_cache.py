from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Mapping, Sequence

from errors import CacheParseError, CacheWriteError

from .disk_store import DiskJsonDocumentStore
from .interfaces import SlotStorage

logger = logging.getLogger(__name__)

DEFAULT_CACHE_SLOT = "collegeGraduates"


class DiskSlotStorage(SlotStorage):
    """
    Local-storage style slots kept in one JSON file:

      { "<slot key>": "<string value>", ... }
    """

    def __init__(self, path: Path):
        self._store = DiskJsonDocumentStore(path)

    @property
    def path(self) -> Path:
        return self._store.path

    def get_item(self, key: str) -> str | None:
        value = self._store.load().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        with self._store.lock:
            data = self._store.load()
            data[key] = str(value)
            self._store.save(data)

    def remove_item(self, key: str) -> None:
        with self._store.lock:
            data = self._store.load()
            if data.pop(key, None) is not None:
                self._store.save(data)


def parse_cached_records(raw: str) -> list[dict[str, Any]]:
    """
    Parse the slot content as a JSON array of flat objects. No schema validation.
    """
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise CacheParseError(f"invalid JSON: {e}") from e
    if not isinstance(parsed, list):
        raise CacheParseError(f"expected a JSON array, got {type(parsed).__name__}")
    if not all(isinstance(item, dict) for item in parsed):
        raise CacheParseError("expected every array item to be an object")
    return parsed


class LocalGraduateCache:
    """
    The legacy cache slot that holds graduate records before they are migrated.

    Reading never fails: an absent, empty or malformed slot reads as an empty list.
    """

    def __init__(self, storage: SlotStorage, *, slot: str = DEFAULT_CACHE_SLOT):
        self._storage = storage
        self._slot = slot

    @property
    def slot(self) -> str:
        return self._slot

    def read(self) -> list[dict[str, Any]]:
        try:
            raw = self._storage.get_item(self._slot)
        except OSError as e:
            logger.warning("LOCAL CACHE: could not read slot %s: %r", self._slot, e)
            return []
        if raw is None or not raw.strip():
            logger.debug("LOCAL CACHE: slot %s is empty", self._slot)
            return []
        try:
            return parse_cached_records(raw)
        except CacheParseError as e:
            logger.warning("LOCAL CACHE: ignoring unreadable slot %s: %s", self._slot, e)
            return []

    def write(self, records: Sequence[Mapping[str, Any]]) -> None:
        payload = json.dumps([dict(r) for r in records], ensure_ascii=False)
        try:
            self._storage.set_item(self._slot, payload)
        except OSError as e:
            raise CacheWriteError(f"Could not write local cache slot {self._slot!r}: {e}") from e
        logger.info("LOCAL CACHE: saved %d records to slot %s", len(records), self._slot)

    def clear(self) -> None:
        try:
            self._storage.remove_item(self._slot)
        except OSError as e:
            raise CacheWriteError(f"Could not clear local cache slot {self._slot!r}: {e}") from e

    async def aread(self) -> list[dict[str, Any]]:
        return await asyncio.to_thread(self.read)

    async def awrite(self, records: Sequence[Mapping[str, Any]]) -> None:
        await asyncio.to_thread(self.write, records)
