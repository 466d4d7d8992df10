"""
Module-level singletons shared by the page, the JSON API and the MCP tools.

Tests reload this module after pointing the data directory somewhere else.
"""

from __future__ import annotations

from persistence import paths
from persistence.document_store import AsyncDiskDocumentStore, DiskDocumentStore
from persistence.local_cache import DiskSlotStorage, LocalGraduateCache
from services.graduate_service import GraduateService
from settings import Settings, get_settings

from endpoints.graduates_view import GraduatesView


def build_graduate_service(settings: Settings | None = None) -> GraduateService:
    settings = settings or get_settings()
    base = paths.data_dir()

    store = AsyncDiskDocumentStore(DiskDocumentStore(lambda collection: paths.collection_path(base, collection)))
    cache = LocalGraduateCache(DiskSlotStorage(paths.local_storage_path(base)), slot=settings.local_cache_slot)
    return GraduateService(store, cache, collection=settings.graduates_collection)


GRADUATE_SERVICE = build_graduate_service()
GRADUATES_VIEW = GraduatesView(GRADUATE_SERVICE)
