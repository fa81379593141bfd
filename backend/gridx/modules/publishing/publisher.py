# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Social Media Publisher
Posts the tiles of a grid as one X post.

Pipeline:
    tiles → map(crop ∘ encode JPEG) → sequential upload → create post

Uploads run strictly one after another, each awaited to completion before
the next starts, so media ids come back in row-major order. The first
failed upload aborts the run before the post is created. Media already
uploaded is left for the provider to expire; nothing is retracted and
nothing is retried.
"""

from __future__ import annotations

import asyncio
from typing import Iterable, Optional, Sequence

import httpx
import numpy as np

from gridx.api.middleware.error_handler import InvalidInputError, UpstreamUnavailableError
from gridx.models.grid import TileFormat, TileImage, TileRect
from gridx.models.publish import MediaReference, PostReference
from gridx.modules.export.archive_exporter import archive_entry_name
from gridx.modules.publishing.x_client import XApiClient, provider_detail
from gridx.modules.slicing.tile_renderer import render_tiles
from gridx.utils.logger import get_logger

log = get_logger(__name__)

# Provider limits
MAX_POST_TILES = 4
MAX_CAPTION_LEN = 280


# ─── Errors ──────────────────────────────────────────────────────────────────

class TooManyTilesError(InvalidInputError):
    """More tiles than the provider accepts on one post."""

    code = "TOO_MANY_TILES"

    def __init__(self, tile_count: int, max_tiles: int = MAX_POST_TILES) -> None:
        super().__init__(
            f"X only allows up to {max_tiles} images per post. "
            "Please use a 2x2 grid or smaller.",
            details={"tile_count": tile_count, "max_tiles": max_tiles},
        )
        self.tile_count = tile_count


class CaptionTooLongError(InvalidInputError):
    code = "CAPTION_TOO_LONG"

    def __init__(self, length: int, max_len: int = MAX_CAPTION_LEN) -> None:
        super().__init__(
            f"Caption is {length} characters; the maximum is {max_len}.",
            details={"length": length, "max_length": max_len},
        )


class PublishError(UpstreamUnavailableError):
    """
    A provider call failed while publishing.
    provider_status is the provider's HTTP status, or None for transport failures.
    """

    def __init__(
        self,
        message: str,
        *,
        provider_status: Optional[int] = None,
        detail: Optional[str] = None,
    ) -> None:
        super().__init__(message, details=detail)
        self.provider_status = provider_status
        self.detail = detail


class MediaUploadError(PublishError):
    code = "MEDIA_UPLOAD_ERROR"

    def __init__(self, row: int, col: int, cause: Exception | None = None) -> None:
        status: Optional[int] = None
        detail: Optional[str] = str(cause) if cause else None
        if isinstance(cause, httpx.HTTPStatusError):
            status = cause.response.status_code
            detail = provider_detail(cause.response) or detail
        super().__init__(
            f"Failed to upload image piece {row + 1},{col + 1}",
            provider_status=status,
            detail=detail,
        )
        self.row = row
        self.col = col
        self.cause = cause


class PostCreationError(PublishError):
    code = "POST_CREATION_ERROR"

    def __init__(self, provider_status: Optional[int], detail: Optional[str] = None) -> None:
        super().__init__(
            "Failed to create post.",
            provider_status=provider_status,
            detail=detail,
        )


# ─── Pipeline Stages ─────────────────────────────────────────────────────────

def encode_for_post(
    image: np.ndarray,
    tiles: Sequence[TileRect],
    jpeg_quality: int = 90,
) -> list[TileImage]:
    """Crop and JPEG-encode every tile. Raises TileProcessingError on the first failure."""
    return list(render_tiles(image, tiles, TileFormat.JPEG, jpeg_quality=jpeg_quality))


async def upload_tiles(
    tiles: Iterable[TileImage],
    access_token: str,
    client: XApiClient,
) -> list[MediaReference]:
    """Upload tiles one at a time, in order. Raises MediaUploadError on the first failure."""
    refs: list[MediaReference] = []
    for tile in tiles:
        try:
            media_id = await client.upload_media(
                access_token,
                tile.data,
                filename=archive_entry_name(tile.row, tile.col, tile.format),
                content_type=tile.format.mime_type,
            )
        except (httpx.HTTPError, ValueError) as exc:
            log.error(
                "tile_upload_failed",
                row=tile.row,
                col=tile.col,
                error=str(exc),
                uploaded_so_far=len(refs),
            )
            raise MediaUploadError(tile.row, tile.col, exc) from exc

        if not media_id:
            log.error("tile_upload_missing_media_id", row=tile.row, col=tile.col)
            raise MediaUploadError(tile.row, tile.col)

        refs.append(MediaReference(media_id=media_id, row=tile.row, col=tile.col))
        log.info("tile_uploaded", row=tile.row, col=tile.col, media_id=media_id)
    return refs


async def create_post(
    caption: str,
    media: Sequence[MediaReference],
    access_token: str,
    client: XApiClient,
) -> PostReference:
    media_ids = [m.media_id for m in media]
    try:
        post = await client.create_post(access_token, caption, media_ids)
    except httpx.HTTPStatusError as exc:
        raise PostCreationError(
            exc.response.status_code, provider_detail(exc.response)
        ) from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise PostCreationError(None, str(exc)) from exc

    log.info("post_created", post_id=post.post_id, media_count=len(media_ids))
    return post


async def publish_grid(
    image: np.ndarray,
    tiles: Sequence[TileRect],
    access_token: str,
    caption: str,
    *,
    client: XApiClient,
    jpeg_quality: int = 90,
    max_tiles: int = MAX_POST_TILES,
) -> PostReference:
    """
    Publish the tiles of a grid as a single post.

    Args:
        image:        Decoded BGR source image.
        tiles:        TileRects from compute_tiles (row-major).
        access_token: Bearer token from the caller's session.
        caption:      Post text, at most MAX_CAPTION_LEN characters.
        client:       XApiClient to talk to the provider through.

    Returns:
        PostReference of the created post.

    Raises:
        TooManyTilesError:   len(tiles) > max_tiles. No network call is made.
        CaptionTooLongError: caption too long. No network call is made.
        TileProcessingError: a tile could not be encoded. No network call is made.
        MediaUploadError:    an upload failed; the post is not created.
        PostCreationError:   the post-creation call failed.
    """
    if len(tiles) > max_tiles:
        raise TooManyTilesError(len(tiles), max_tiles)
    if len(caption) > MAX_CAPTION_LEN:
        raise CaptionTooLongError(len(caption))

    encoded = await asyncio.to_thread(encode_for_post, image, tiles, jpeg_quality)
    log.info(
        "tiles_encoded",
        count=len(encoded),
        total_bytes=sum(t.size_bytes for t in encoded),
    )

    media = await upload_tiles(encoded, access_token, client)
    return await create_post(caption, media, access_token, client)
