# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Protocols for injected capabilities."""

from .file_transport import DownloadedFile, FileTransport

__all__ = ["DownloadedFile", "FileTransport"]
