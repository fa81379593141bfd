# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Slicing Module
Public API for grid computation and per-tile rendering.
"""

from gridx.modules.slicing.grid_slicer import (
    ImageTooSmallError,
    InvalidGridError,
    compute_tiles,
    tile_size,
)
from gridx.modules.slicing.tile_renderer import (
    TileProcessingError,
    render_tile,
    render_tiles,
)

__all__ = [
    # Grid slicer
    "compute_tiles",
    "tile_size",
    "InvalidGridError",
    "ImageTooSmallError",
    # Tile renderer
    "render_tile",
    "render_tiles",
    "TileProcessingError",
]
