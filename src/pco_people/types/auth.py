# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
OAuth token types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TokenResponse(BaseModel):
    """
    Payload returned by the OAuth token endpoint, validated with Pydantic.

    Attributes:
        access_token: The new access token
        token_type: Token type, normally "Bearer"
        expires_in: Lifetime of the access token in seconds
        refresh_token: A rotated refresh token, if the server issued one
        scope: Granted scopes, if reported
        raw: The full decoded response body
    """

    model_config = ConfigDict(frozen=True)

    access_token: str = Field(min_length=1, repr=False)
    token_type: str = "Bearer"
    expires_in: int | None = None
    refresh_token: str | None = Field(default=None, repr=False)
    scope: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TokenResponse:
        """
        Build from a decoded token response.

        Raises:
            KeyError: If ``access_token`` is missing
            pydantic.ValidationError: If a field has the wrong type
        """
        return cls(
            access_token=data["access_token"],
            token_type=data.get("token_type") or "Bearer",
            expires_in=data.get("expires_in"),
            refresh_token=data.get("refresh_token") or None,
            scope=data.get("scope"),
            raw=dict(data),
        )


@dataclass(frozen=True)
class RefreshFailureContext:
    """
    Details handed to the refresh-failure callback.

    Attributes:
        original_error: The exception that caused the refresh to fail
        refresh_token: The refresh token that was used
        attempt_count: Number of refresh attempts made for this failure
    """

    original_error: BaseException | None = None
    refresh_token: str | None = field(default=None, repr=False)
    attempt_count: int = 1


__all__ = ["RefreshFailureContext", "TokenResponse"]
