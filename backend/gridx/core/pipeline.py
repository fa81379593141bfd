# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Pipeline Orchestrator
Wires validation, slicing and the two exporters for one request.

    split:  validate → decode → compute_tiles → export_archive → ZIP bytes
    post:   tile-count check → validate → decode → compute_tiles
            → publish_grid → PostReference

CPU-bound decode / crop / encode / deflate work runs in a worker thread
so the event loop stays free. Provider failures raised by the publisher
are mapped onto the API error taxonomy here.
"""

from __future__ import annotations

import asyncio
from typing import Optional

import numpy as np

from gridx.api.middleware.error_handler import (
    GridXError,
    UpstreamAuthError,
    UpstreamRateLimitError,
    UpstreamUnavailableError,
)
from gridx.config import get_settings
from gridx.models.grid import GridSpec, TileRect
from gridx.models.publish import PostReference
from gridx.modules.export.archive_exporter import export_archive
from gridx.modules.preprocessing.validator import validate_image_bytes
from gridx.modules.publishing.publisher import (
    MAX_POST_TILES,
    PublishError,
    TooManyTilesError,
    publish_grid,
)
from gridx.modules.publishing.x_client import XApiClient
from gridx.modules.slicing.grid_slicer import compute_tiles
from gridx.utils.image_utils import image_size
from gridx.utils.logger import get_logger

log = get_logger(__name__)


def _decode_and_slice(
    data: Optional[bytes],
    content_type: Optional[str],
    grid: GridSpec,
) -> tuple[np.ndarray, list[TileRect]]:
    img = validate_image_bytes(data, content_type)
    w, h = image_size(img)
    tiles = compute_tiles(w, h, grid.rows, grid.cols)
    log.info(
        "image_sliced",
        width=w,
        height=h,
        rows=grid.rows,
        cols=grid.cols,
        tile_w=tiles[0].width,
        tile_h=tiles[0].height,
    )
    return img, tiles


def split_to_archive(
    data: Optional[bytes],
    content_type: Optional[str],
    grid: GridSpec,
) -> bytes:
    """Synchronous split pipeline. Returns ZIP bytes."""
    settings = get_settings()
    img, tiles = _decode_and_slice(data, content_type, grid)
    return export_archive(img, tiles, compress_level=settings.zip_compress_level)


async def run_split(
    data: Optional[bytes],
    content_type: Optional[str],
    grid: GridSpec,
) -> bytes:
    log.info("stage_start", stage="split", rows=grid.rows, cols=grid.cols)
    archive = await asyncio.to_thread(split_to_archive, data, content_type, grid)
    log.info("stage_complete", stage="split", size_bytes=len(archive))
    return archive


def map_publish_error(exc: PublishError) -> GridXError:
    """
    Map a provider failure onto the API error taxonomy:
        401 → UpstreamAuthError (401)
        403 → UpstreamAuthError (403)
        429 → UpstreamRateLimitError
        other / transport → UpstreamUnavailableError
    """
    status = exc.provider_status
    details = {
        "provider_status": status,
        "provider_detail": exc.detail,
        "stage": exc.code,
    }
    if status == 401:
        return UpstreamAuthError(
            "Your X session has expired. Please log in again.",
            details=details,
        )
    if status == 403:
        return UpstreamAuthError(
            "Permission denied. Please ensure your X app has write permissions.",
            details=details,
            status_code=403,
        )
    if status == 429:
        return UpstreamRateLimitError(
            "Rate limit exceeded. Please try again later.",
            details=details,
        )
    return UpstreamUnavailableError(
        exc.detail or "Failed to post to X.",
        details=details,
    )


async def run_post(
    data: bytes,
    content_type: Optional[str],
    grid: GridSpec,
    caption: str,
    access_token: str,
    client: XApiClient,
) -> PostReference:
    """
    Post pipeline. The tile-count limit is checked before the upload is
    even decoded so an oversized grid never reaches the provider.
    """
    settings = get_settings()

    if grid.tile_count > MAX_POST_TILES:
        raise TooManyTilesError(grid.tile_count)

    log.info("stage_start", stage="post", rows=grid.rows, cols=grid.cols)
    img, tiles = await asyncio.to_thread(_decode_and_slice, data, content_type, grid)

    try:
        post = await publish_grid(
            img,
            tiles,
            access_token,
            caption,
            client=client,
            jpeg_quality=settings.jpeg_quality,
        )
    except PublishError as exc:
        log.error(
            "publish_failed",
            code=exc.code,
            provider_status=exc.provider_status,
            detail=exc.detail,
        )
        raise map_publish_error(exc) from exc

    log.info("stage_complete", stage="post", post_id=post.post_id)
    return post
