from __future__ import annotations

import logging
from typing import Any, Literal

from typing_extensions import TypedDict

from mcp.server.fastmcp import FastMCP
from mcp.server.transport_security import TransportSecuritySettings

from endpoints import wiring
from errors import CacheWriteError, InvalidArgument, MigrationError, StoreError
from services.models import GraduateRecord, GraduatesSummary, summarize

logger = logging.getLogger(__name__)


class ToolTextContent(TypedDict):
    type: Literal["text"]
    text: str


class GraduatesToolResponse(TypedDict, total=False):
    content: list[ToolTextContent]
    structuredContent: dict[str, Any]


def _reply(
    message: str | None = None,
    *,
    graduates: list[GraduateRecord] | None = None,
    summary: GraduatesSummary | None = None,
    **extra: Any,
) -> GraduatesToolResponse:
    structured: dict[str, Any] = dict(extra)
    if graduates is not None:
        structured["graduates"] = [g.model_dump(mode="json") for g in graduates]
    if summary is not None:
        structured["summary"] = summary
    return {
        "content": ([{"type": "text", "text": message}] if message else []),
        "structuredContent": structured,
    }


mcp = FastMCP(
    "Alumni Records",
    stateless_http=True,
    json_response=True,
    # Reverse-proxy friendly: otherwise FastMCP rejects non-localhost Host headers on a localhost bind.
    transport_security=TransportSecuritySettings(enable_dns_rebinding_protection=False),
)


@mcp.tool()
async def list_graduates() -> GraduatesToolResponse:
    """
    Lists all graduates, newest first, with approval counts.
    """
    try:
        graduates = await wiring.GRADUATE_SERVICE.list()
    except StoreError as e:
        return _reply(f"Failed to load data: {e}")
    summary = summarize(graduates)
    return _reply(
        f'{summary["total"]} graduates: {summary["approved"]} approved, {summary["underReview"]} under review.',
        graduates=graduates,
        summary=summary,
    )


@mcp.tool()
async def delete_graduate(store_id: str) -> GraduatesToolResponse:
    """
    Deletes a graduate by its store id.
    """
    try:
        await wiring.GRADUATE_SERVICE.delete(store_id)
    except InvalidArgument:
        return _reply("Missing graduate id.")
    except StoreError as e:
        return _reply(f"Failed to delete {store_id}: {e}")
    return _reply(f"Deleted graduate {store_id}.", deleted=store_id)


@mcp.tool()
async def migrate_from_local_cache() -> GraduatesToolResponse:
    """
    Copies every record in the local cache slot into the document store (no deduplication).
    """
    try:
        result = await wiring.GRADUATE_SERVICE.migrate()
    except MigrationError as e:
        return _reply(
            f"Migration failed: {e}",
            migratedCount=e.migrated_count,
            totalCount=e.total_count,
        )
    if result.totalCount == 0:
        return _reply("No data found in the local cache to migrate.", **result.model_dump())
    return _reply(
        f"Migrated {result.migratedCount} of {result.totalCount} records.",
        **result.model_dump(),
    )


@mcp.tool()
async def create_initial_data() -> GraduatesToolResponse:
    """
    Writes the two demonstration graduates to the local cache slot and to the document store.
    """
    try:
        await wiring.GRADUATE_SERVICE.create_initial_data()
        graduates = await wiring.GRADUATE_SERVICE.list()
    except (CacheWriteError, StoreError) as e:
        logger.error("MCP INITIAL DATA: failed: %r", e)
        return _reply(f"Failed to create data: {e}")
    return _reply("Initial data created.", graduates=graduates, summary=summarize(graduates))
