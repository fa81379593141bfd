# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — X (Twitter) API Client
Thin async wrapper over the four provider calls the service makes:
token exchange, user lookup, media upload (v1.1) and post creation (v2).

Every method raises httpx.HTTPStatusError on a non-2xx response,
httpx.TransportError on network failure and ValueError when a 2xx body
is not the JSON object expected; callers decide how to map them.
The underlying httpx.AsyncClient is injected so tests can swap in a
MockTransport.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

import httpx

from gridx.config import Settings
from gridx.models.publish import PostReference
from gridx.models.session import TokenSet
from gridx.utils.logger import get_logger

log = get_logger(__name__)


def build_http_client(settings: Settings) -> httpx.AsyncClient:
    """AsyncClient with every phase of an outbound call bounded by the configured timeout."""
    return httpx.AsyncClient(timeout=httpx.Timeout(settings.http_timeout_seconds))


def _json_object(response: httpx.Response) -> dict[str, Any]:
    """
    Decoded JSON object body of a 2xx response.
    Raises ValueError if the body is not JSON or not an object.
    """
    body = response.json()
    if not isinstance(body, dict):
        raise ValueError(
            f"Expected a JSON object from {response.request.url.path}, "
            f"got {type(body).__name__}"
        )
    return body


def provider_detail(response: httpx.Response) -> Optional[str]:
    """Best-effort human-readable error text from a provider error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if not isinstance(body, dict):
        return None
    if body.get("detail"):
        return str(body["detail"])
    errors = body.get("errors")
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        return errors[0].get("message") or errors[0].get("detail")
    return body.get("error_description") or body.get("title")


class XApiClient:
    """Provider API calls, authenticated per call with the session's bearer token."""

    def __init__(self, http: httpx.AsyncClient, settings: Settings) -> None:
        self._http = http
        self._settings = settings

    @staticmethod
    def _bearer(access_token: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {access_token}"}

    async def aclose(self) -> None:
        await self._http.aclose()

    # ─── OAuth ───────────────────────────────────────────────────────────────

    async def exchange_code(self, code: str, code_verifier: str) -> TokenSet:
        """Exchange an authorization code for tokens (confidential client, HTTP Basic)."""
        s = self._settings
        resp = await self._http.post(
            s.x_token_url,
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": s.callback_url,
                "code_verifier": code_verifier,
            },
            auth=(s.x_client_id, s.x_client_secret),
        )
        resp.raise_for_status()
        return TokenSet.model_validate(_json_object(resp))

    async def fetch_user(self, access_token: str) -> dict[str, Any]:
        resp = await self._http.get(self._settings.x_user_url, headers=self._bearer(access_token))
        resp.raise_for_status()
        data = _json_object(resp).get("data")
        return data if isinstance(data, dict) else {}

    # ─── Publishing ──────────────────────────────────────────────────────────

    async def upload_media(
        self,
        access_token: str,
        data: bytes,
        filename: str,
        content_type: str = "image/jpeg",
    ) -> Optional[str]:
        """
        Upload one image. Returns media_id_string, or None if the provider
        answered 2xx without one.
        """
        resp = await self._http.post(
            self._settings.x_media_upload_url,
            files={"media": (filename, data, content_type)},
            headers=self._bearer(access_token),
        )
        resp.raise_for_status()
        return _json_object(resp).get("media_id_string")

    async def create_post(
        self,
        access_token: str,
        text: str,
        media_ids: Sequence[str],
    ) -> PostReference:
        resp = await self._http.post(
            self._settings.x_post_url,
            json={"text": text, "media": {"media_ids": list(media_ids)}},
            headers=self._bearer(access_token),
        )
        resp.raise_for_status()
        data = _json_object(resp).get("data")
        if not isinstance(data, dict):
            data = {}
        return PostReference(
            post_id=data.get("id"),
            text=data.get("text", text),
            media_ids=list(media_ids),
        )
