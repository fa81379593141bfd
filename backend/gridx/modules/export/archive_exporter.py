# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Archive Exporter
Packs every tile of a grid, losslessly encoded, into a single ZIP buffer.

Entries are named piece_{row:02d}_{col:02d}.png with 1-based row / col,
written in row-major order. Nothing touches the filesystem; the archive
is built in memory and only returned once every tile has succeeded.
"""

from __future__ import annotations

import io
import zipfile
from typing import Sequence

import numpy as np

from gridx.models.grid import TileFormat, TileRect
from gridx.modules.slicing.tile_renderer import render_tiles
from gridx.utils.logger import get_logger

log = get_logger(__name__)

ARCHIVE_FILENAME = "image-pieces.zip"


def archive_entry_name(row: int, col: int, fmt: TileFormat = TileFormat.PNG) -> str:
    """Entry name for the tile at 0-based (row, col)."""
    return f"piece_{row + 1:02d}_{col + 1:02d}.{fmt.extension}"


def export_archive(
    image: np.ndarray,
    tiles: Sequence[TileRect],
    *,
    compress_level: int = 9,
) -> bytes:
    """
    Crop each tile, encode it as PNG and deflate all of them into one ZIP.

    Args:
        image:          Decoded BGR source image.
        tiles:          TileRects from compute_tiles (row-major).
        compress_level: zlib level for ZIP_DEFLATED, 0–9.

    Returns:
        ZIP container bytes.

    Raises:
        TileProcessingError: If any tile fails. No partial archive is returned.
    """
    buf = io.BytesIO()
    with zipfile.ZipFile(
        buf,
        mode="w",
        compression=zipfile.ZIP_DEFLATED,
        compresslevel=compress_level,
    ) as zf:
        for tile in render_tiles(image, tiles, TileFormat.PNG):
            zf.writestr(archive_entry_name(tile.row, tile.col, tile.format), tile.data)

    data = buf.getvalue()
    log.info(
        "archive_built",
        pieces=len(tiles),
        size_bytes=len(data),
        compress_level=compress_level,
    )
    return data
