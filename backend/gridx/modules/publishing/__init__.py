# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Publishing Module
Public API for the X OAuth handshake and the grid publisher.
"""

from gridx.modules.publishing.oauth import (
    build_authorize_url,
    code_challenge,
    generate_code_verifier,
    generate_state,
)
from gridx.modules.publishing.publisher import (
    MAX_CAPTION_LEN,
    MAX_POST_TILES,
    CaptionTooLongError,
    MediaUploadError,
    PostCreationError,
    PublishError,
    TooManyTilesError,
    publish_grid,
)
from gridx.modules.publishing.x_client import XApiClient, build_http_client

__all__ = [
    # OAuth
    "build_authorize_url",
    "code_challenge",
    "generate_code_verifier",
    "generate_state",
    # Publisher
    "publish_grid",
    "MAX_POST_TILES",
    "MAX_CAPTION_LEN",
    "TooManyTilesError",
    "CaptionTooLongError",
    "PublishError",
    "MediaUploadError",
    "PostCreationError",
    # Client
    "XApiClient",
    "build_http_client",
]
