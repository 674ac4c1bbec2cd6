# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
httpx-backed FileTransport.

Downloads the source file, then multipart-POSTs it to the Planning Center
upload service, which answers with ``{"data": [{"id": "<uuid>", ...}]}``.
"""

from __future__ import annotations

import logging
import mimetypes
from collections.abc import Mapping
from urllib.parse import unquote, urlsplit

import httpx

from ..protocols.file_transport import DownloadedFile

logger = logging.getLogger(__name__)

UPLOAD_URL = "https://upload.planningcenteronline.com/v2/files"
DOWNLOAD_TIMEOUT = 30.0
UPLOAD_TIMEOUT = 60.0


def filename_from_url(url: str) -> str:
    """Last path segment of ``url``, or ``"file"`` when there is none."""
    path = urlsplit(url).path
    name = unquote(path.rsplit("/", 1)[-1]) if path else ""
    return name or "file"


def guess_content_type(filename: str) -> str:
    """MIME type for ``filename``, defaulting to application/octet-stream."""
    content_type, _ = mimetypes.guess_type(filename)
    return content_type or "application/octet-stream"


class HttpxFileTransport:
    """
    FileTransport implementation using an httpx.AsyncClient.

    Attributes:
        http_client: Client used for both the download and the upload
        upload_url: Upload service endpoint
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        upload_url: str = UPLOAD_URL,
        download_timeout: float = DOWNLOAD_TIMEOUT,
        upload_timeout: float = UPLOAD_TIMEOUT,
    ):
        self.http_client = http_client
        self.upload_url = upload_url
        self.download_timeout = download_timeout
        self.upload_timeout = upload_timeout

    async def download(self, url: str) -> DownloadedFile:
        response = await self.http_client.get(
            url, timeout=self.download_timeout, follow_redirects=True
        )
        response.raise_for_status()
        filename = filename_from_url(url)
        logger.debug(f"Downloaded {len(response.content)} bytes for {filename}")
        return DownloadedFile(
            filename=filename,
            content=response.content,
            content_type=guess_content_type(filename),
        )

    async def upload(self, file: DownloadedFile, headers: Mapping[str, str]) -> str:
        response = await self.http_client.post(
            self.upload_url,
            files={"file": (file.filename, file.content, file.content_type)},
            headers=dict(headers),
            timeout=self.upload_timeout,
        )
        response.raise_for_status()
        try:
            file_id = response.json()["data"][0]["id"]
        except (ValueError, KeyError, IndexError, TypeError):
            file_id = None
        if not file_id:
            raise ValueError("Failed to get file UUID from upload response")
        return str(file_id)


__all__ = [
    "DOWNLOAD_TIMEOUT",
    "UPLOAD_TIMEOUT",
    "UPLOAD_URL",
    "HttpxFileTransport",
    "filename_from_url",
    "guess_content_type",
]
