# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Phase 5 — OAuth2 PKCE login and session endpoint tests.
The provider token and user endpoints are served by an httpx.MockTransport.
"""

import base64
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from conftest import FRONTEND_URL, session_id_from

TOKEN_PATH = "/2/oauth2/token"
USER_PATH = "/2/users/me"


TOKENS = {
    "access_token": "at",
    "token_type": "bearer",
    "refresh_token": "rt",
    "expires_in": 7200,
    "scope": "tweet.read tweet.write users.read offline.access",
}
USER = {"data": {"id": "42", "username": "gridfan"}}


def _ok(body) -> httpx.Response:
    if isinstance(body, str):
        return httpx.Response(200, text=body)
    return httpx.Response(200, json=body)


def _provider(
    token_status: int = 200,
    user_status: int = 200,
    seen: list | None = None,
    token_body=TOKENS,
    user_body=USER,
):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        if request.url.path == TOKEN_PATH:
            if token_status != 200:
                return httpx.Response(token_status, json={"error_description": "bad code"})
            return _ok(token_body)
        if request.url.path == USER_PATH:
            if user_status != 200:
                return httpx.Response(user_status, json={"title": "Unauthorized"})
            return _ok(user_body)
        return httpx.Response(404)

    return handler


# ─── PKCE Helpers ────────────────────────────────────────────────────────────

def test_code_challenge_matches_rfc7636_vector():
    from gridx.modules.publishing.oauth import code_challenge

    verifier = "dBjftJeZ4CVP-mJ92K3Bk3K1Ka3hjqsG5spCBs_pjM"
    assert code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"


def test_code_verifier_shape():
    from gridx.modules.publishing.oauth import generate_code_verifier

    v = generate_code_verifier()
    assert len(v) == 43
    assert "=" not in v and "+" not in v and "/" not in v
    assert generate_code_verifier() != v


def test_base64url_has_no_padding():
    from gridx.modules.publishing.oauth import base64url_encode

    assert base64url_encode(b"\xfb\xff") == "-_8"


def test_authorize_url_params():
    from gridx.config import get_settings
    from gridx.modules.publishing.oauth import build_authorize_url

    url = build_authorize_url(get_settings(), state="st", challenge="ch")
    parsed = urlparse(url)
    q = {k: v[0] for k, v in parse_qs(parsed.query).items()}

    assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == get_settings().x_authorize_url
    assert q["response_type"] == "code"
    assert q["client_id"] == "test-client"
    assert q["state"] == "st"
    assert q["code_challenge"] == "ch"
    assert q["code_challenge_method"] == "S256"
    assert q["redirect_uri"] == get_settings().callback_url
    assert q["scope"].split() == ["tweet.read", "tweet.write", "users.read", "offline.access"]


# ─── GET /api/auth/login ─────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_login_redirects_with_challenge(api_client):
    from gridx.dependencies import get_session_store
    from gridx.modules.publishing.oauth import code_challenge

    async with api_client() as c:
        resp = await c.get("/api/auth/login")
        sid = session_id_from(resp)
        stored = get_session_store().get(sid)

    assert resp.status_code == 302
    assert sid is not None
    assert stored.code_verifier is not None
    assert stored.access_token is None

    q = {k: v[0] for k, v in parse_qs(urlparse(resp.headers["location"]).query).items()}
    assert q["code_challenge"] == code_challenge(stored.code_verifier)
    assert q["state"] == stored.oauth_state

    cookie = resp.headers["set-cookie"].lower()
    assert "httponly" in cookie
    assert "samesite=lax" in cookie


# ─── GET /api/auth/callback ──────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_callback_success_stores_tokens_and_rotates_session(api_client, seed_session):
    from gridx.dependencies import get_session_store

    seen: list[httpx.Request] = []
    async with api_client(x_handler=_provider(seen=seen)) as c:
        old_sid, cookie = seed_session(code_verifier="verifier-123", oauth_state="st")
        resp = await c.get(
            "/api/auth/callback",
            params={"code": "the-code", "state": "st"},
            headers=cookie,
        )
        new_sid = session_id_from(resp)
        store = get_session_store()
        old, new = store.get(old_sid), store.get(new_sid)

    assert resp.status_code == 302
    assert resp.headers["location"] == FRONTEND_URL
    assert new_sid and new_sid != old_sid
    assert old is None
    assert new.access_token == "at"
    assert new.refresh_token == "rt"
    assert new.user == {"id": "42", "username": "gridfan"}
    assert new.code_verifier is None

    token_req = seen[0]
    assert token_req.url.path == TOKEN_PATH
    expected = base64.b64encode(b"test-client:test-secret").decode()
    assert token_req.headers["authorization"] == f"Basic {expected}"
    form = parse_qs(token_req.content.decode())
    assert form["grant_type"] == ["authorization_code"]
    assert form["code"] == ["the-code"]
    assert form["code_verifier"] == ["verifier-123"]

    assert seen[1].headers["authorization"] == "Bearer at"


@pytest.mark.asyncio
async def test_callback_provider_error_redirects(api_client, seed_session):
    seen: list[httpx.Request] = []
    async with api_client(x_handler=_provider(seen=seen)) as c:
        _, cookie = seed_session(code_verifier="v", oauth_state="st")
        resp = await c.get(
            "/api/auth/callback",
            params={"error": "access_denied", "state": "st"},
            headers=cookie,
        )

    assert resp.status_code == 302
    assert resp.headers["location"] == f"{FRONTEND_URL}?error=access_denied"
    assert seen == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "fields,params",
    [
        ({}, {"code": "c", "state": "st"}),
        ({"code_verifier": "v", "oauth_state": "st"}, {"state": "st"}),
        ({"code_verifier": "v", "oauth_state": "st"}, {"code": "c", "state": "other"}),
    ],
)
async def test_callback_invalid_state(api_client, seed_session, fields, params):
    seen: list[httpx.Request] = []
    async with api_client(x_handler=_provider(seen=seen)) as c:
        _, cookie = seed_session(**fields)
        resp = await c.get("/api/auth/callback", params=params, headers=cookie)

    assert resp.status_code == 302
    assert resp.headers["location"] == f"{FRONTEND_URL}?error=invalid_state"
    assert seen == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "provider_kwargs",
    [
        {"token_status": 400},
        {"user_status": 401},
        {"token_body": {"error": "weird"}},
        {"token_body": "<html>gateway</html>"},
        {"token_body": ["at"]},
        {"user_body": {"data": None}},
        {"user_body": "<html>gateway</html>"},
    ],
    ids=[
        "token-400",
        "user-401",
        "token-without-access-token",
        "token-html",
        "token-json-list",
        "user-data-null",
        "user-html",
    ],
)
async def test_callback_exchange_failure(api_client, seed_session, provider_kwargs):
    from gridx.dependencies import get_session_store

    handler = _provider(**provider_kwargs)
    async with api_client(x_handler=handler) as c:
        sid, cookie = seed_session(code_verifier="v", oauth_state="st")
        resp = await c.get(
            "/api/auth/callback",
            params={"code": "c", "state": "st"},
            headers=cookie,
        )
        stored = get_session_store().get(sid)

    assert resp.status_code == 302
    assert resp.headers["location"] == f"{FRONTEND_URL}?error=auth_failed"
    assert stored.access_token is None
    assert stored.user is None


# ─── GET /api/auth/user ──────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_user_authenticated(api_client, seed_session):
    async with api_client() as c:
        _, cookie = seed_session(access_token="at", user={"id": "42", "username": "gridfan"})
        resp = await c.get("/api/auth/user", headers=cookie)

    assert resp.status_code == 200
    assert resp.json() == {"user": {"id": "42", "username": "gridfan"}}


@pytest.mark.asyncio
async def test_user_not_authenticated(api_client):
    async with api_client() as c:
        resp = await c.get("/api/auth/user")

    assert resp.status_code == 401
    assert resp.json()["error"] == "Not authenticated"


# ─── POST /api/auth/logout ───────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_logout_clears_session(api_client, seed_session):
    from gridx.dependencies import get_session_store

    async with api_client() as c:
        sid, cookie = seed_session(access_token="at", user={"id": "42"})
        resp = await c.post("/api/auth/logout", headers=cookie)
        stored = get_session_store().get(sid)
        after = await c.get("/api/auth/user", headers=cookie)

    assert resp.status_code == 200
    assert resp.json() == {"message": "Logged out successfully"}
    assert stored is None
    assert 'gridx_sid=""' in resp.headers["set-cookie"]
    assert after.status_code == 401


@pytest.mark.asyncio
async def test_logout_without_session_is_ok(api_client):
    async with api_client() as c:
        resp = await c.post("/api/auth/logout")
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_logout_store_failure_is_500(api_client, seed_session, monkeypatch):
    from gridx.dependencies import get_session_store

    def boom(session_id):
        raise ConnectionError("store down")

    async with api_client() as c:
        _, cookie = seed_session(access_token="at")
        monkeypatch.setattr(get_session_store(), "destroy", boom)
        resp = await c.post("/api/auth/logout", headers=cookie)

    assert resp.status_code == 500
    assert resp.json()["error"] == "Could not log out."
