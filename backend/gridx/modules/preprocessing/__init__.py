# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Preprocessing Module
Public API for upload and form-field validation.
"""

from gridx.modules.preprocessing.validator import (
    normalize_caption,
    parse_grid_spec,
    read_upload,
    validate_image_bytes,
)

__all__ = [
    "read_upload",
    "validate_image_bytes",
    "parse_grid_spec",
    "normalize_caption",
]
