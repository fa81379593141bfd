# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Image Decode / Crop / Encode Utilities
All internal processing uses BGR uint8 numpy arrays (OpenCV convention).
A decoded upload is treated as read-only: crops are copies.
"""

import cv2
import numpy as np

from gridx.models.grid import TileFormat


# ─── Decode ──────────────────────────────────────────────────────────────────

def bytes_to_bgr(data: bytes) -> np.ndarray:
    """Decode raw image bytes (from upload) to BGR numpy array."""
    arr = np.frombuffer(data, dtype=np.uint8)
    img = cv2.imdecode(arr, cv2.IMREAD_COLOR)
    if img is None:
        raise ValueError("Could not decode uploaded image bytes.")
    return img


def image_size(img: np.ndarray) -> tuple[int, int]:
    """Return (width, height) of a decoded image."""
    h, w = img.shape[:2]
    return w, h


# ─── Crop ────────────────────────────────────────────────────────────────────

def crop(img: np.ndarray, left: int, top: int, width: int, height: int) -> np.ndarray:
    """
    Crop an exact region from img.
    Raises ValueError if the region falls outside the image — unlike a
    clamped crop, a short tile here would mean a bad grid computation.
    """
    ih, iw = img.shape[:2]
    if left < 0 or top < 0 or left + width > iw or top + height > ih:
        raise ValueError(
            f"Crop region ({left},{top},{width}x{height}) outside image {iw}x{ih}."
        )
    return img[top:top + height, left:left + width].copy()


# ─── Encode ──────────────────────────────────────────────────────────────────

def encode_png(img: np.ndarray, compression: int = 3) -> bytes:
    """Encode a BGR numpy array to PNG bytes (lossless)."""
    success, buf = cv2.imencode(".png", img, [cv2.IMWRITE_PNG_COMPRESSION, compression])
    if not success:
        raise RuntimeError("Failed to encode image to PNG bytes.")
    return buf.tobytes()


def encode_jpeg(img: np.ndarray, quality: int = 90) -> bytes:
    """Encode a BGR numpy array to JPEG bytes (lossy)."""
    success, buf = cv2.imencode(".jpg", img, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not success:
        raise RuntimeError("Failed to encode image to JPEG bytes.")
    return buf.tobytes()


def encode_image(img: np.ndarray, fmt: TileFormat, jpeg_quality: int = 90) -> bytes:
    if fmt is TileFormat.JPEG:
        return encode_jpeg(img, quality=jpeg_quality)
    return encode_png(img)
