# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Authorization and default header construction."""

from __future__ import annotations

import base64

from ..config import ClientConfig


def build_auth_header(config: ClientConfig) -> str | None:
    """
    Return the Authorization header value for ``config``.

    A bearer access token takes precedence over HTTP Basic app credentials.
    """
    if config.access_token:
        return f"Bearer {config.access_token}"
    if config.app_id and config.app_secret:
        raw = f"{config.app_id}:{config.app_secret}".encode()
        return f"Basic {base64.b64encode(raw).decode('ascii')}"
    return None


def build_request_headers(config: ClientConfig) -> dict[str, str]:
    """
    Headers sent with every API request.

    Custom headers from the configuration are applied on top of the JSON
    defaults, but can never replace Authorization.
    """
    headers = {
        "Accept": "application/json",
        "Content-Type": "application/json",
    }
    for name, value in config.headers.items():
        if name.lower() != "authorization":
            headers[name] = value
    auth = build_auth_header(config)
    if auth:
        headers["Authorization"] = auth
    return headers


__all__ = ["build_auth_header", "build_request_headers"]
