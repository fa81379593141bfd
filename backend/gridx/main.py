# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — FastAPI Application Entry Point
Creates the app, registers lifespan events, CORS, request-id logging
context, routers and global error handlers.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from gridx.api.middleware.error_handler import register_error_handlers
from gridx.api.routes import auth, post, split
from gridx.config import get_settings
from gridx.dependencies import (
    SessionDep,
    close_x_client,
    init_session_store,
    init_x_client,
)
from gridx.utils.logger import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)

log = get_logger(__name__)

VERSION = "1.0.0"
REQUEST_ID_HEADER = "X-Request-ID"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.
    Startup: configure logging, initialise SessionStore and the X client.
    Shutdown: close the outbound HTTP connection pool.
    """
    # ── Startup ──────────────────────────────────────────────────────────────
    configure_logging()
    settings = get_settings()

    log.info(
        "gridx_startup",
        version=VERSION,
        environment=settings.environment,
        session_store=settings.session_store_backend,
        upload_max_mb=settings.upload_max_mb,
    )

    init_session_store()
    init_x_client()

    if not settings.x_credentials_configured:
        log.warning(
            "x_credentials_missing",
            advice="Set X_CLIENT_ID and X_CLIENT_SECRET; X integration will not work.",
        )

    log.info("gridx_ready")
    yield

    # ── Shutdown ─────────────────────────────────────────────────────────────
    await close_x_client()
    log.info("gridx_shutdown")


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="GridX",
        summary="Split an image into a grid — download the pieces or post them to X.",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # ── CORS ─────────────────────────────────────────────────────────────────
    # Session cookie must cross origins, so credentials are allowed and the
    # origin is pinned to the configured frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    # ── Request Context ──────────────────────────────────────────────────────
    @app.middleware("http")
    async def bind_request_id(request: Request, call_next):
        request_id = bind_request_context(
            request.method,
            request.url.path,
            request.headers.get(REQUEST_ID_HEADER),
        )
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_request_context()

    # ── Error Handlers ───────────────────────────────────────────────────────
    register_error_handlers(app)

    # ── Routers ──────────────────────────────────────────────────────────────
    api = APIRouter(prefix="/api")
    api.include_router(split.router)
    api.include_router(post.router)
    api.include_router(auth.router)

    # ── Health Check ─────────────────────────────────────────────────────────
    @api.get("/health", tags=["health"], summary="Health check")
    async def health(session: SessionDep) -> dict:
        return {
            "status": "ok",
            "service": "gridx",
            "version": VERSION,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "session": "active" if session.session_id else "inactive",
            "session_store": settings.session_store_backend,
        }

    app.include_router(api)
    return app


# Module-level app instance for uvicorn
app = create_app()
