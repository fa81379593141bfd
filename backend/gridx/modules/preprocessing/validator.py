# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Upload Validator
Validates the multipart form input of /split and /post before anything
is sliced: the image upload itself, the rows / cols fields and the caption.

Raises ImageValidationError / InvalidGridError (both InvalidInputError) so
the API error handler maps them cleanly to HTTP 400.
"""

from __future__ import annotations

from typing import Optional

import cv2
import numpy as np
from fastapi import UploadFile

from gridx.api.middleware.error_handler import ImageValidationError, InvalidInputError
from gridx.config import get_settings
from gridx.models.grid import MAX_GRID_DIM, GridSpec
from gridx.modules.slicing.grid_slicer import InvalidGridError
from gridx.utils.image_utils import bytes_to_bgr, image_size
from gridx.utils.logger import get_logger

log = get_logger(__name__)


async def read_upload(upload: UploadFile) -> bytes:
    """
    Read an upload, stopping one byte past the configured limit.
    validate_image_bytes rejects anything longer than the limit, so the
    rest of an oversized file is never pulled into memory.
    """
    limit = get_settings().upload_max_bytes
    return await upload.read(limit + 1)


def validate_image_bytes(
    data: Optional[bytes],
    content_type: Optional[str],
    label: str = "image",
) -> np.ndarray:
    """
    Validate an uploaded image and return it decoded as a BGR numpy array.

    Checks performed (in order):
      1. A file was uploaded at all
      2. MIME type is image/*
      3. File is non-empty and within the configured size limit
      4. OpenCV decodability

    Raises:
        ImageValidationError: On any validation failure.
    """
    settings = get_settings()

    if data is None:
        raise ImageValidationError("No file uploaded.")

    if not content_type or not content_type.startswith("image/"):
        raise ImageValidationError(
            "Only image files are allowed!",
            details={"content_type": content_type},
        )

    if not data:
        raise ImageValidationError(f"The {label} file is empty.")

    if len(data) > settings.upload_max_bytes:
        raise ImageValidationError(
            f"File too large. Maximum size is {settings.upload_max_mb}MB.",
            details={"size_bytes": len(data)},
        )

    try:
        img = bytes_to_bgr(data)
    except (ValueError, cv2.error) as exc:
        raise ImageValidationError(
            f"The {label} file could not be decoded. "
            "The file may be corrupted or truncated.",
        ) from exc

    w, h = image_size(img)
    if w <= 0 or h <= 0:
        raise ImageValidationError("Invalid image dimensions.")

    log.debug(
        "image_validated",
        label=label,
        content_type=content_type,
        width=w,
        height=h,
        size_bytes=len(data),
    )
    return img


def _parse_dim(raw: Optional[str], default: int, field: str) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw.strip(), 10)
    except ValueError as exc:
        raise InvalidInputError(
            f"Invalid grid dimensions. '{field}' must be a whole number "
            f"between 1 and {MAX_GRID_DIM}.",
            details={field: raw},
        ) from exc


def parse_grid_spec(
    rows: Optional[str],
    cols: Optional[str],
    default: Optional[int] = None,
) -> GridSpec:
    """
    Parse the rows / cols form fields. Blank or missing fields fall back to
    the configured default grid dimension.

    Raises:
        InvalidGridError:   Either dimension outside [1, MAX_GRID_DIM].
        InvalidInputError:  A field is not an integer.
    """
    if default is None:
        default = get_settings().default_grid_dim
    r = _parse_dim(rows, default, "rows")
    c = _parse_dim(cols, default, "cols")
    if not (1 <= r <= MAX_GRID_DIM and 1 <= c <= MAX_GRID_DIM):
        raise InvalidGridError(r, c)
    return GridSpec(rows=r, cols=c)


def normalize_caption(caption: Optional[str], default: Optional[str] = None) -> str:
    """Strip the caption; a blank caption becomes the configured default."""
    if caption is None or not caption.strip():
        return default if default is not None else get_settings().default_caption
    return caption.strip()
