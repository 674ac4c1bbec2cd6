# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocol for moving file bytes to the Planning Center upload service."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class DownloadedFile:
    """
    File contents fetched from a source URL.

    Attributes:
        filename: Name sent with the multipart upload
        content: Raw bytes
        content_type: MIME type of the content
    """

    filename: str
    content: bytes = field(repr=False)
    content_type: str = "application/octet-stream"


@runtime_checkable
class FileTransport(Protocol):
    """
    Capability used by the file-field upload flow.

    The request pipeline does not depend on this protocol; only the upload
    flow does, so clients that never write file fields need no transport.
    """

    async def download(self, url: str) -> DownloadedFile:
        """Fetch the file at ``url``."""
        ...

    async def upload(self, file: DownloadedFile, headers: Mapping[str, str]) -> str:
        """
        Upload ``file`` and return the identifier assigned by the service.

        Args:
            file: The file to upload
            headers: Authorization headers built like API request headers
        """
        ...
