from __future__ import annotations

import contextlib
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    from endpoints.mcp_endpoints import mcp

    async with mcp.session_manager.run():
        yield


def create_app() -> FastAPI:
    # Env must be loaded before the endpoint modules read settings at import time.
    load_dotenv("local.env")

    from endpoints.graduates_api import router as api_router
    from endpoints.graduates_page import router as page_router
    from endpoints.mcp_endpoints import mcp

    mcp.settings.streamable_http_path = "/"

    app = FastAPI(title="College Alumni Records", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/mcp")
    async def mcp_redirect_post():
        return RedirectResponse(url="/mcp/", status_code=307)

    @app.get("/mcp")
    async def mcp_redirect_get():
        return RedirectResponse(url="/mcp/", status_code=307)

    @app.get("/healthz")
    async def healthz():
        return {"ok": True}

    app.include_router(api_router)
    app.include_router(page_router)

    app.mount("/mcp", mcp.streamable_http_app())

    logger.info("APP: routes ready")
    return app


app = create_app()
