from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from endpoints import wiring
from errors import CacheWriteError, DocumentNotFoundError, InvalidArgument, MigrationError, StoreError
from services.graduate_service import INITIAL_DATA
from services.models import GraduateInput, summarize
from settings import get_settings

router = APIRouter(prefix="/api/graduates", tags=["graduates"])
logger = logging.getLogger(__name__)

SETTINGS = get_settings()
DEBUG_LOG_REQUESTS = SETTINGS.debug_log_requests


def _log_request(request: Request) -> None:
    if DEBUG_LOG_REQUESTS:
        logger.info("GRADUATES API: %s %s", request.method, request.url.path)


def _store_failure(e: StoreError) -> HTTPException:
    return HTTPException(status_code=502, detail=str(e))


@router.get("")
async def list_graduates(request: Request) -> dict[str, Any]:
    _log_request(request)
    try:
        graduates = await wiring.GRADUATE_SERVICE.list()
    except StoreError as e:
        raise _store_failure(e) from e
    return {
        "graduates": [g.model_dump(mode="json") for g in graduates],
        "summary": summarize(graduates),
    }


@router.post("")
async def add_graduate(request: Request, body: GraduateInput) -> dict[str, Any]:
    _log_request(request)
    try:
        store_id = await wiring.GRADUATE_SERVICE.add(body.model_dump())
    except StoreError as e:
        raise _store_failure(e) from e
    return {"storeId": store_id}


@router.delete("/{store_id}")
async def delete_graduate(request: Request, store_id: str) -> dict[str, Any]:
    _log_request(request)
    try:
        await wiring.GRADUATE_SERVICE.delete(store_id)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except StoreError as e:
        raise _store_failure(e) from e
    return {"deleted": True}


@router.post("/migrate")
async def migrate_from_local_cache(request: Request) -> dict[str, Any]:
    _log_request(request)
    try:
        result = await wiring.GRADUATE_SERVICE.migrate()
    except MigrationError as e:
        raise HTTPException(
            status_code=502,
            detail={
                "error": str(e),
                "migratedCount": e.migrated_count,
                "totalCount": e.total_count,
            },
        ) from e
    return result.model_dump()


@router.post("/initial-data")
async def create_initial_data(request: Request) -> dict[str, Any]:
    _log_request(request)
    try:
        await wiring.GRADUATE_SERVICE.create_initial_data()
    except CacheWriteError as e:
        raise HTTPException(status_code=500, detail=str(e)) from e
    except StoreError as e:
        raise _store_failure(e) from e
    return {"created": len(INITIAL_DATA)}
