# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
Shared fixtures: deterministic settings, synthetic images, and an API
client that runs the full FastAPI lifespan with the X API mocked out.
"""

import re
from contextlib import asynccontextmanager
from typing import Callable, Optional

import cv2
import httpx
import numpy as np
import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient

FRONTEND_URL = "http://frontend.test"


# ─── Settings ────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def _test_env(monkeypatch):
    """Pin every setting the tests assert on, independent of the CI environment."""
    monkeypatch.setenv("ENVIRONMENT", "test")
    monkeypatch.setenv("SESSION_STORE_BACKEND", "memory")
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.setenv("FRONTEND_URL", FRONTEND_URL)
    monkeypatch.setenv("X_CLIENT_ID", "test-client")
    monkeypatch.setenv("X_CLIENT_SECRET", "test-secret")

    from gridx.config import get_settings
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# ─── Images ──────────────────────────────────────────────────────────────────

def make_bgr(h: int = 100, w: int = 100) -> np.ndarray:
    """Gradient image so every tile has distinct content."""
    img = np.zeros((h, w, 3), dtype=np.uint8)
    img[:, :, 0] = np.linspace(0, 255, w, dtype=np.uint8)[np.newaxis, :]
    img[:, :, 1] = np.linspace(0, 255, h, dtype=np.uint8)[:, np.newaxis]
    img[:, :, 2] = 128
    return img


def encode_png(img: np.ndarray) -> bytes:
    _, buf = cv2.imencode(".png", img)
    return buf.tobytes()


@pytest.fixture
def png_100() -> bytes:
    return encode_png(make_bgr(100, 100))


# ─── API Client ──────────────────────────────────────────────────────────────

XHandler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def api_client():
    """
    Factory for an AsyncClient bound to a fresh app with its lifespan
    running. Pass x_handler to route every provider call through an
    httpx.MockTransport instead of the network.
    """

    @asynccontextmanager
    async def _client(x_handler: Optional[XHandler] = None):
        from gridx import dependencies
        from gridx.config import get_settings
        from gridx.main import create_app
        from gridx.modules.publishing.x_client import XApiClient

        app = create_app()
        async with LifespanManager(app) as manager:
            if x_handler is not None:
                mock_http = httpx.AsyncClient(transport=httpx.MockTransport(x_handler))
                x_client = XApiClient(mock_http, get_settings())
                app.dependency_overrides[dependencies.get_x_client] = lambda: x_client
            transport = ASGITransport(app=manager.app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                yield client
            if x_handler is not None:
                await mock_http.aclose()

    return _client


@pytest.fixture
def seed_session():
    """
    Store a session directly in the running app's SessionStore and return
    the Cookie header that selects it. Call inside an api_client context.
    """

    def _seed(**fields) -> tuple[str, dict[str, str]]:
        from gridx.config import get_settings
        from gridx.core.session_store import new_session_id
        from gridx.dependencies import get_session_store
        from gridx.models.session import SessionData

        sid = new_session_id()
        get_session_store().set(sid, SessionData(**fields))
        cookie = f"{get_settings().session_cookie_name}={sid}"
        return sid, {"Cookie": cookie}

    return _seed


def session_id_from(resp: httpx.Response) -> Optional[str]:
    """Extract the session id from a Set-Cookie header, if one was issued."""
    for header in resp.headers.get_list("set-cookie"):
        m = re.match(r'gridx_sid="?([^";]*)"?', header)
        if m:
            return m.group(1)
    return None
