# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Grid and Tile Models
A GridSpec describes how the caller wants the image cut, a TileRect is one
cell of that cut in source pixel coordinates, and a TileImage is the
encoded bytes of one cropped cell.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Both grid dimensions are bounded to keep archives and uploads small
MAX_GRID_DIM = 10
# Minimum usable tile edge in pixels
MIN_TILE_PX = 10


class TileFormat(str, Enum):
    """Output codec for an encoded tile."""
    PNG = "png"     # lossless, archive export
    JPEG = "jpeg"   # lossy, post export

    @property
    def extension(self) -> str:
        return "jpg" if self is TileFormat.JPEG else "png"

    @property
    def mime_type(self) -> str:
        return f"image/{self.value}"

    @property
    def cv2_ext(self) -> str:
        return f".{self.extension}"


class GridSpec(BaseModel):
    """Caller-supplied grid shape."""
    model_config = ConfigDict(frozen=True)

    rows: int = Field(..., ge=1, le=MAX_GRID_DIM)
    cols: int = Field(..., ge=1, le=MAX_GRID_DIM)

    @property
    def tile_count(self) -> int:
        return self.rows * self.cols


class TileRect(BaseModel):
    """
    One grid cell in source pixel coordinates.
    row / col are 0-based; filenames shown to users are 1-based.
    """
    model_config = ConfigDict(frozen=True)

    row: int = Field(..., ge=0)
    col: int = Field(..., ge=0)
    left: int = Field(..., ge=0)
    top: int = Field(..., ge=0)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    @property
    def right(self) -> int:
        return self.left + self.width

    @property
    def bottom(self) -> int:
        return self.top + self.height

    @property
    def position_label(self) -> str:
        """Human-readable 1-based "row,col" used in error messages."""
        return f"{self.row + 1},{self.col + 1}"


class TileImage(BaseModel):
    """Encoded bytes of one cropped tile."""
    row: int
    col: int
    format: TileFormat
    data: bytes

    @property
    def size_bytes(self) -> int:
        return len(self.data)
