# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — /api/auth/*
OAuth2 Authorization Code + PKCE handshake with X, and the session
endpoints the frontend polls (current user, logout).
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

import httpx
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse, RedirectResponse
from pydantic import ValidationError

from gridx.api.middleware.error_handler import GridXError, UpstreamAuthError
from gridx.config import get_settings
from gridx.dependencies import SessionDep, SessionStoreDep, XClientDep
from gridx.models.publish import UserResponse
from gridx.modules.publishing.oauth import (
    build_authorize_url,
    code_challenge,
    generate_code_verifier,
    generate_state,
)
from gridx.utils.logger import get_logger

router = APIRouter(prefix="/auth", tags=["auth"])
log = get_logger(__name__)


def _frontend_redirect(error: Optional[str] = None) -> RedirectResponse:
    url = get_settings().frontend_url
    if error:
        url = f"{url}?{urlencode({'error': error})}"
    return RedirectResponse(url, status_code=status.HTTP_302_FOUND)


@router.get(
    "/login",
    summary="Start the X login flow",
    description="Redirects to the X authorize page with a PKCE S256 challenge.",
)
async def login(session: SessionDep, store: SessionStoreDep) -> RedirectResponse:
    settings = get_settings()
    verifier = generate_code_verifier()
    state = generate_state()

    session.data.code_verifier = verifier
    session.data.oauth_state = state

    response = RedirectResponse(
        build_authorize_url(settings, state=state, challenge=code_challenge(verifier)),
        status_code=status.HTTP_302_FOUND,
    )
    session.save(store, response)
    log.info("oauth_login_started")
    return response


@router.get(
    "/callback",
    summary="X OAuth callback",
    description=(
        "Exchanges the authorization code for tokens, stores them in the session "
        "and redirects back to the frontend. Failures redirect with ?error=..."
    ),
)
async def callback(
    session: SessionDep,
    store: SessionStoreDep,
    client: XClientDep,
    code: Optional[str] = None,
    error: Optional[str] = None,
    state: Optional[str] = None,
) -> RedirectResponse:
    if error:
        log.warning("oauth_provider_error", error=error)
        return _frontend_redirect(error=error)

    verifier = session.data.code_verifier
    if not code or not verifier or state != session.data.oauth_state:
        log.warning(
            "oauth_invalid_state",
            has_code=bool(code),
            has_verifier=bool(verifier),
        )
        return _frontend_redirect(error="invalid_state")

    try:
        tokens = await client.exchange_code(code, verifier)
        user = await client.fetch_user(tokens.access_token)
    except httpx.HTTPStatusError as exc:
        log.error(
            "oauth_exchange_failed",
            status=exc.response.status_code,
            body=exc.response.text,
        )
        return _frontend_redirect(error="auth_failed")
    except (httpx.HTTPError, ValidationError, ValueError) as exc:
        log.error("oauth_exchange_failed", error=str(exc), exc_type=type(exc).__name__)
        return _frontend_redirect(error="auth_failed")

    if not user:
        log.error("oauth_user_missing")
        return _frontend_redirect(error="auth_failed")

    session.data.apply_tokens(tokens)
    session.data.user = user

    # Rotate the session id once authenticated
    if session.session_id is not None:
        store.destroy(session.session_id)
        session.session_id = None

    response = _frontend_redirect()
    session.save(store, response)
    log.info("oauth_login_complete", user_id=user.get("id"))
    return response


@router.get(
    "/user",
    response_model=UserResponse,
    summary="Current user",
)
async def current_user(session: SessionDep) -> UserResponse:
    if not session.data.user:
        raise UpstreamAuthError("Not authenticated")
    return UserResponse(user=session.data.user)


@router.post("/logout", summary="Log out and clear the session")
async def logout(session: SessionDep, store: SessionStoreDep) -> JSONResponse:
    settings = get_settings()
    if session.session_id is not None:
        try:
            store.destroy(session.session_id)
        except Exception as exc:
            log.error("session_destroy_failed", error=str(exc))
            raise GridXError("Could not log out.", details=str(exc)) from exc

    response = JSONResponse({"message": "Logged out successfully"})
    response.delete_cookie(settings.session_cookie_name)
    log.info("logout_complete")
    return response
