# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Tile Renderer
Crop ∘ encode for each TileRect. Shared by the archive exporter (PNG)
and the social publisher (JPEG).
"""

from __future__ import annotations

from typing import Iterable, Iterator

import cv2
import numpy as np

from gridx.api.middleware.error_handler import ProcessingError
from gridx.models.grid import TileFormat, TileImage, TileRect
from gridx.utils.image_utils import crop, encode_image
from gridx.utils.logger import get_logger

log = get_logger(__name__)


class TileProcessingError(ProcessingError):
    """Raised when a single tile cannot be cropped or encoded."""

    code = "TILE_PROCESSING_ERROR"

    def __init__(self, row: int, col: int, cause: Exception | None = None) -> None:
        super().__init__(
            f"Failed to process image piece at position {row + 1},{col + 1}",
            details=str(cause) if cause else None,
        )
        self.row = row
        self.col = col


def render_tile(
    image: np.ndarray,
    rect: TileRect,
    fmt: TileFormat,
    jpeg_quality: int = 90,
) -> TileImage:
    try:
        region = crop(image, rect.left, rect.top, rect.width, rect.height)
        data = encode_image(region, fmt, jpeg_quality=jpeg_quality)
    except (ValueError, RuntimeError, cv2.error) as exc:
        log.error("tile_render_failed", row=rect.row, col=rect.col, error=str(exc))
        raise TileProcessingError(rect.row, rect.col, exc) from exc
    return TileImage(row=rect.row, col=rect.col, format=fmt, data=data)


def render_tiles(
    image: np.ndarray,
    rects: Iterable[TileRect],
    fmt: TileFormat,
    jpeg_quality: int = 90,
) -> Iterator[TileImage]:
    """
    Lazily render each rect in the order given.
    The first failure raises TileProcessingError and stops iteration.
    """
    for rect in rects:
        yield render_tile(image, rect, fmt, jpeg_quality=jpeg_quality)
