# Copyright (c) 2026 Harsh Dwivedi
# Licensed under the Harsh Non-Commercial Attribution License (HNCAL) v1.0
# Commercial use requires written permission. See LICENSE for details.

"""
GridX — Export Module
Public API for the archive export stage.
"""

from gridx.modules.export.archive_exporter import (
    ARCHIVE_FILENAME,
    archive_entry_name,
    export_archive,
)

__all__ = [
    "ARCHIVE_FILENAME",
    "archive_entry_name",
    "export_archive",
]
