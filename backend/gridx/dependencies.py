# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — FastAPI Dependencies
Singleton providers for the SessionStore and the X API client, plus the
per-request SessionContext.

Singletons are created once during the lifespan startup in main.py and
stored here at module level. Route handlers access them via Depends().
Session state is never global: each handler receives the caller's
SessionContext explicitly and writes it back through the store.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Annotated, Optional

from fastapi import Depends, Request, Response

from gridx.api.middleware.error_handler import UpstreamAuthError
from gridx.config import get_settings
from gridx.core.session_store import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStore,
    new_session_id,
)
from gridx.models.session import SessionData
from gridx.modules.publishing.x_client import XApiClient, build_http_client
from gridx.utils.logger import get_logger

log = get_logger(__name__)

# ─── SessionStore Singleton ──────────────────────────────────────────────────

_session_store: SessionStore | None = None


def init_session_store() -> None:
    """
    Initialise the SessionStore singleton based on SESSION_STORE_BACKEND.
    Called once during application lifespan startup.
    """
    global _session_store
    settings = get_settings()

    if settings.session_store_backend == "redis":
        log.info("init_session_store", backend="redis", url=settings.redis_url)
        _session_store = RedisSessionStore(
            redis_url=settings.redis_url,
            ttl_seconds=settings.session_ttl_seconds,
        )
    else:
        log.info("init_session_store", backend="memory")
        _session_store = InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)


def get_session_store() -> SessionStore:
    """FastAPI dependency: inject the SessionStore singleton."""
    if _session_store is None:
        raise RuntimeError(
            "SessionStore has not been initialised. "
            "Ensure init_session_store() is called during app lifespan startup."
        )
    return _session_store


SessionStoreDep = Annotated[SessionStore, Depends(get_session_store)]


# ─── X API Client Singleton ──────────────────────────────────────────────────

_x_client: XApiClient | None = None


def init_x_client() -> None:
    global _x_client
    settings = get_settings()
    _x_client = XApiClient(build_http_client(settings), settings)
    log.info("init_x_client", timeout_s=settings.http_timeout_seconds)


async def close_x_client() -> None:
    global _x_client
    if _x_client is not None:
        await _x_client.aclose()
        _x_client = None


def get_x_client() -> XApiClient:
    """FastAPI dependency: inject the shared X API client."""
    if _x_client is None:
        raise RuntimeError(
            "X API client has not been initialised. "
            "Ensure init_x_client() is called during app lifespan startup."
        )
    return _x_client


XClientDep = Annotated[XApiClient, Depends(get_x_client)]


# ─── Session Context ─────────────────────────────────────────────────────────

@dataclass
class SessionContext:
    """
    The caller's session for one request.
    session_id is None until the session is first saved.
    """
    session_id: Optional[str]
    data: SessionData = field(default_factory=SessionData)

    def save(self, store: SessionStore, response: Response) -> None:
        """Persist the session, issuing a cookie if this is a new session."""
        settings = get_settings()
        if self.session_id is None:
            self.session_id = new_session_id()
        store.set(self.session_id, self.data)
        response.set_cookie(
            key=settings.session_cookie_name,
            value=self.session_id,
            max_age=settings.session_ttl_seconds,
            httponly=True,
            secure=settings.cookie_secure,
            samesite="lax",
        )


def get_session_context(request: Request, store: SessionStoreDep) -> SessionContext:
    """Load the caller's session from the cookie. Unknown ids start a fresh session."""
    settings = get_settings()
    session_id = request.cookies.get(settings.session_cookie_name)
    if not session_id:
        return SessionContext(session_id=None)
    data = store.get(session_id)
    if data is None:
        return SessionContext(session_id=None)
    return SessionContext(session_id=session_id, data=data)


SessionDep = Annotated[SessionContext, Depends(get_session_context)]


def require_access_token(session: SessionDep) -> str:
    """FastAPI dependency: the session's access token, or 401."""
    if not session.data.access_token:
        raise UpstreamAuthError("User not authenticated. Please login with X.")
    return session.data.access_token


AccessTokenDep = Annotated[str, Depends(require_access_token)]
