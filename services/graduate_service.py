from __future__ import annotations

import logging
from typing import Any, Mapping

from pydantic import ValidationError

from errors import InvalidArgument, MigrationError, StoreDeleteError, StoreReadError, StoreWriteError
from persistence.document_store import SERVER_TIMESTAMP
from persistence.interfaces import AsyncDocumentStore
from persistence.local_cache import LocalGraduateCache

from .models import UNDER_REVIEW, GraduateRecord, MigrationResult

logger = logging.getLogger(__name__)

GRADUATES_COLLECTION = "graduates"

# Demonstration records written by create_initial_data(), same shape as the legacy cache.
INITIAL_DATA: tuple[dict[str, str], ...] = (
    {
        "code": "20231001",
        "name": "Ahmed Mohamed",
        "department": "Computer Science",
        "year": "2023",
        "grade": "Excellent",
        "status": "Approved",
        "feedback": "Outstanding student in programming",
    },
    {
        "code": "20231002",
        "name": "Sara Abdullah",
        "department": "Engineering",
        "year": "2023",
        "grade": "Very Good",
        "status": "Under Review",
        "feedback": "Excellent in projects",
    },
)


def build_graduate_fields(record: Mapping[str, Any], *, from_local_cache: bool) -> dict[str, Any]:
    """
    The full field set of a new graduate document. Values are copied verbatim;
    only `feedback` and `status` get defaults.
    """
    return {
        "code": record.get("code"),
        "name": record.get("name"),
        "department": record.get("department"),
        "year": record.get("year"),
        "grade": record.get("grade"),
        "feedback": record.get("feedback") or "",
        "status": record.get("status") or UNDER_REVIEW,
        "fromLocalCache": bool(from_local_cache),
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
    }


class GraduateService:
    """
    Graduate operations over a document store and the legacy local cache.

    Every call is a short sequence of awaited store/cache calls; store errors propagate unchanged.
    """

    def __init__(
        self,
        store: AsyncDocumentStore,
        cache: LocalGraduateCache,
        *,
        collection: str = GRADUATES_COLLECTION,
    ) -> None:
        self._store = store
        self._cache = cache
        self._collection = collection

    @property
    def collection(self) -> str:
        return self._collection

    @property
    def cache(self) -> LocalGraduateCache:
        return self._cache

    async def add(self, record: Mapping[str, Any], from_local_cache: bool = False) -> str:
        fields = build_graduate_fields(record, from_local_cache=from_local_cache)
        try:
            store_id = await self._store.create(self._collection, fields)
        except StoreWriteError as e:
            logger.error("GRADUATES ADD: code=%s failed: %s", fields["code"], e)
            raise
        logger.info("GRADUATES ADD: code=%s storeId=%s fromLocalCache=%s", fields["code"], store_id, from_local_cache)
        return store_id

    async def list(self) -> list[GraduateRecord]:
        try:
            docs = await self._store.list(self._collection, order_by="createdAt", direction="desc")
        except StoreReadError as e:
            logger.error("GRADUATES LIST: failed: %s", e)
            raise
        try:
            return [GraduateRecord.from_document(d) for d in docs]
        except ValidationError as e:
            logger.error("GRADUATES LIST: unreadable document: %s", e)
            raise StoreReadError(f"unreadable graduate document: {e}") from e

    async def get(self, store_id: str) -> GraduateRecord | None:
        if not isinstance(store_id, str) or not store_id.strip():
            raise InvalidArgument("Invalid ID")
        doc = await self._store.get(self._collection, store_id)
        return GraduateRecord.from_document(doc) if doc is not None else None

    async def delete(self, store_id: str | None) -> bool:
        if not isinstance(store_id, str) or not store_id.strip():
            raise InvalidArgument("Invalid ID")
        try:
            await self._store.delete_by_id(self._collection, store_id)
        except StoreDeleteError as e:
            logger.error("GRADUATES DELETE: storeId=%s failed: %s", store_id, e)
            raise
        logger.info("GRADUATES DELETE: storeId=%s", store_id)
        return True

    async def migrate(self) -> MigrationResult:
        """
        Copy every cached record into the store, one at a time and in cache order.

        No deduplication: migrating the same cache twice stores every record twice.
        A failed write stops the loop; records written before it stay in the store.
        """
        cached = await self._cache.aread()
        if not cached:
            logger.info("MIGRATE: no data in local cache slot %s", self._cache.slot)
            return MigrationResult(migratedCount=0, totalCount=0)

        total = len(cached)
        migrated = 0
        for record in cached:
            try:
                await self.add(record, True)
            except StoreWriteError as e:
                logger.error("MIGRATE: stopped after %d of %d records: %s", migrated, total, e)
                raise MigrationError(
                    f"{e} (migrated {migrated} of {total} records)",
                    migrated_count=migrated,
                    total_count=total,
                ) from e
            migrated += 1

        logger.info("MIGRATE: migrated %d records", migrated)
        return MigrationResult(migratedCount=migrated, totalCount=total)

    async def create_initial_data(self) -> None:
        records = [dict(r) for r in INITIAL_DATA]
        await self._cache.awrite(records)
        for record in records:
            await self.add(record, False)
        logger.info("INITIAL DATA: created %d records", len(records))
