# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Publishing Models + API Response Schemas
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, Field


class MediaReference(BaseModel):
    """Provider-issued identifier for one uploaded tile."""
    media_id: str
    row: int
    col: int


class PostReference(BaseModel):
    """The post created from the uploaded tiles."""
    post_id: Optional[str] = None
    text: str = ""
    media_ids: list[str] = Field(default_factory=list)


# ─── API Response Schemas ────────────────────────────────────────────────────

class PostResponse(BaseModel):
    """Response body for POST /api/post."""
    message: str = "Post published successfully!"
    post_id: Optional[str] = None


class UserResponse(BaseModel):
    """Response body for GET /api/auth/user."""
    user: dict[str, Any]


class MessageResponse(BaseModel):
    message: str
