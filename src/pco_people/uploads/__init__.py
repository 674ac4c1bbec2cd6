# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""File upload support for file-valued custom fields."""

from .transport import (
    DOWNLOAD_TIMEOUT,
    UPLOAD_TIMEOUT,
    UPLOAD_URL,
    HttpxFileTransport,
    filename_from_url,
    guess_content_type,
)

__all__ = [
    "DOWNLOAD_TIMEOUT",
    "UPLOAD_TIMEOUT",
    "UPLOAD_URL",
    "HttpxFileTransport",
    "filename_from_url",
    "guess_content_type",
]
