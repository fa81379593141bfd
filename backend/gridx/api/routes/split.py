# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — POST /api/split
Slices the uploaded image into a rows × cols grid and returns every
piece as a PNG inside a ZIP download.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, Response, UploadFile

from gridx.api.middleware.error_handler import ImageValidationError
from gridx.core.pipeline import run_split
from gridx.modules.export.archive_exporter import ARCHIVE_FILENAME
from gridx.modules.preprocessing.validator import parse_grid_spec, read_upload
from gridx.utils.logger import get_logger

router = APIRouter(tags=["split"])
log = get_logger(__name__)


@router.post(
    "/split",
    response_class=Response,
    summary="Split an image into a grid and download the pieces",
    description=(
        "Upload an image (≤10MB) with `rows` and `cols` between 1 and 10. "
        "Returns a ZIP of piece_RR_CC.png files, numbered from 1."
    ),
    responses={200: {"content": {"application/zip": {}}}},
)
async def split_image(
    image: Annotated[Optional[UploadFile], File()] = None,
    rows: Annotated[Optional[str], Form()] = None,
    cols: Annotated[Optional[str], Form()] = None,
) -> Response:
    if image is None:
        raise ImageValidationError("No file uploaded.")
    grid = parse_grid_spec(rows, cols)
    data = await read_upload(image)

    log.info(
        "split_request_received",
        rows=grid.rows,
        cols=grid.cols,
        filename=image.filename,
    )

    archive = await run_split(data, image.content_type, grid)

    log.info("split_complete", pieces=grid.tile_count, size_bytes=len(archive))
    return Response(
        content=archive,
        media_type="application/zip",
        headers={
            "Content-Disposition": f'attachment; filename="{ARCHIVE_FILENAME}"',
            "Cache-Control": "no-cache",
        },
    )
