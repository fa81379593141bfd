# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Session State Models
What the session store keeps per browser session: the in-flight PKCE
handshake, and once it completes, the provider tokens and user profile.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel


class TokenSet(BaseModel):
    """Result of exchanging an authorization code at the provider token endpoint."""
    access_token: str
    token_type: str = "bearer"
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    scope: Optional[str] = None


class SessionData(BaseModel):
    """Full session record stored in SessionStore."""
    # PKCE handshake, cleared once the callback completes
    code_verifier: Optional[str] = None
    oauth_state: Optional[str] = None

    access_token: Optional[str] = None
    refresh_token: Optional[str] = None
    user: Optional[dict[str, Any]] = None

    @property
    def is_authenticated(self) -> bool:
        return self.access_token is not None

    def apply_tokens(self, tokens: TokenSet) -> None:
        self.access_token = tokens.access_token
        self.refresh_token = tokens.refresh_token
        self.code_verifier = None
        self.oauth_state = None
