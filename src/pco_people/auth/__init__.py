# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Authentication: header construction and OAuth token refresh."""

from .headers import build_auth_header, build_request_headers
from .refresher import TokenRefresher

__all__ = ["TokenRefresher", "build_auth_header", "build_request_headers"]
