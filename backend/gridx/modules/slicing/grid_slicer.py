# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Grid Slicer
Computes the pixel rectangle of every tile for an R×C cut of an image.

Tile size is floor(width / cols) × floor(height / rows). Offsets are
col * tile_w and row * tile_h. When the image does not divide evenly the
right and bottom remainder strips are dropped; remainder pixels are never
distributed across tiles.

Pure — no image data, no I/O.
"""

from __future__ import annotations

from gridx.api.middleware.error_handler import InvalidInputError, ResourceTooSmallError
from gridx.models.grid import MAX_GRID_DIM, MIN_TILE_PX, TileRect


class InvalidGridError(InvalidInputError):
    """Raised when rows or cols fall outside [1, MAX_GRID_DIM]."""

    code = "INVALID_GRID"

    def __init__(self, rows: int, cols: int) -> None:
        super().__init__(
            f"Invalid grid dimensions {rows}x{cols}. "
            f"Please use values between 1 and {MAX_GRID_DIM}.",
            details={"rows": rows, "cols": cols},
        )
        self.rows = rows
        self.cols = cols


class ImageTooSmallError(ResourceTooSmallError):
    """Raised when the resulting tiles would be smaller than MIN_TILE_PX."""

    code = "IMAGE_TOO_SMALL"

    def __init__(self, width: int, height: int, rows: int, cols: int) -> None:
        super().__init__(
            "Image too small for the requested grid size.",
            details={
                "image_size": [width, height],
                "grid": [rows, cols],
                "min_tile_px": MIN_TILE_PX,
            },
        )


def tile_size(width: int, height: int, rows: int, cols: int) -> tuple[int, int]:
    """Return (tile_w, tile_h), truncated toward zero."""
    return width // cols, height // rows


def compute_tiles(width: int, height: int, rows: int, cols: int) -> list[TileRect]:
    """
    Compute the tile rectangles for a rows × cols grid over a width × height image.

    Args:
        width, height: Source image dimensions in pixels.
        rows, cols:    Grid shape, each in [1, MAX_GRID_DIM].

    Returns:
        rows * cols TileRects in row-major order: row 0 left to right,
        then row 1, and so on.

    Raises:
        InvalidGridError:   rows or cols out of range.
        ImageTooSmallError: either tile dimension below MIN_TILE_PX.
    """
    if rows <= 0 or cols <= 0 or rows > MAX_GRID_DIM or cols > MAX_GRID_DIM:
        raise InvalidGridError(rows, cols)

    if width <= 0 or height <= 0:
        raise ImageTooSmallError(width, height, rows, cols)

    tile_w, tile_h = tile_size(width, height, rows, cols)
    if tile_w < MIN_TILE_PX or tile_h < MIN_TILE_PX:
        raise ImageTooSmallError(width, height, rows, cols)

    return [
        TileRect(
            row=r,
            col=c,
            left=c * tile_w,
            top=r * tile_h,
            width=tile_w,
            height=tile_h,
        )
        for r in range(rows)
        for c in range(cols)
    ]
