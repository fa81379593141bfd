# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — OAuth2 PKCE Helpers (RFC 7636, S256)
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from urllib.parse import urlencode

from gridx.config import Settings


def base64url_encode(data: bytes) -> str:
    """Base64url without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def generate_code_verifier(n_bytes: int = 32) -> str:
    # 32 random bytes → 43 chars, the minimum verifier length
    return base64url_encode(secrets.token_bytes(n_bytes))


def code_challenge(verifier: str) -> str:
    return base64url_encode(hashlib.sha256(verifier.encode("ascii")).digest())


def generate_state() -> str:
    return secrets.token_urlsafe(16)


def build_authorize_url(settings: Settings, *, state: str, challenge: str) -> str:
    """Provider authorize URL for the Authorization Code + PKCE flow."""
    params = {
        "response_type": "code",
        "client_id": settings.x_client_id,
        "redirect_uri": settings.callback_url,
        "scope": settings.x_scopes,
        "state": state,
        "code_challenge": challenge,
        "code_challenge_method": "S256",
    }
    return f"{settings.x_authorize_url}?{urlencode(params)}"
