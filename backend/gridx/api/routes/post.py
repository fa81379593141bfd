# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — POST /api/post
Slices the uploaded image and publishes up to 4 pieces as one X post,
using the access token held in the caller's session.
"""

from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, UploadFile

from gridx.api.middleware.error_handler import ImageValidationError
from gridx.core.pipeline import run_post
from gridx.dependencies import AccessTokenDep, XClientDep
from gridx.models.publish import PostResponse
from gridx.modules.preprocessing.validator import (
    normalize_caption,
    parse_grid_spec,
    read_upload,
)
from gridx.modules.publishing.publisher import MAX_POST_TILES
from gridx.utils.logger import get_logger

router = APIRouter(tags=["post"])
log = get_logger(__name__)

# Blank rows / cols default to the largest grid a post can carry
_POST_DEFAULT_DIM = 2


@router.post(
    "/post",
    response_model=PostResponse,
    summary="Publish grid pieces as an X post",
    description=(
        f"Requires an authenticated session. rows × cols must not exceed {MAX_POST_TILES}. "
        "Caption is limited to 280 characters."
    ),
)
@router.post("/post-tweet", response_model=PostResponse, include_in_schema=False)
async def post_grid(
    access_token: AccessTokenDep,
    client: XClientDep,
    image: Annotated[Optional[UploadFile], File()] = None,
    rows: Annotated[Optional[str], Form()] = None,
    cols: Annotated[Optional[str], Form()] = None,
    caption: Annotated[Optional[str], Form()] = None,
    tweetText: Annotated[Optional[str], Form()] = None,  # noqa: N803 legacy frontend field
) -> PostResponse:
    if image is None:
        raise ImageValidationError("No file uploaded.")

    grid = parse_grid_spec(rows, cols, default=_POST_DEFAULT_DIM)
    text = normalize_caption(caption if caption is not None else tweetText)
    data = await read_upload(image)

    log.info(
        "post_request_received",
        rows=grid.rows,
        cols=grid.cols,
        caption_len=len(text),
    )

    post = await run_post(data, image.content_type, grid, text, access_token, client)
    return PostResponse(post_id=post.post_id)
