# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Client Configuration for the Planning Center People API

This module provides configuration classes for the client, including
credentials, rate limiting and retry settings. All durations are seconds.
"""

from __future__ import annotations

import os
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from .exceptions import PcoError
    from .types.auth import RefreshFailureContext, TokenResponse

DEFAULT_BASE_URL = "https://api.planningcenteronline.com/people/v2"
DEFAULT_TOKEN_URL = "https://api.planningcenteronline.com/oauth/token"
DEFAULT_TIMEOUT = 30.0

RetryCallback = Callable[["PcoError", int], Union[Awaitable[None], None]]
TokenRefreshCallback = Callable[["TokenResponse"], Union[Awaitable[None], None]]
TokenRefreshFailureCallback = Callable[
    [BaseException, "RefreshFailureContext"], Union[Awaitable[None], None]
]


@dataclass
class RateLimitPolicy:
    """
    Local request budget, used until the server reports its own.
    """

    max_requests: int = 100
    """Maximum requests per window."""

    per_seconds: float = 60.0
    """Length of the rolling window in seconds."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_requests < 1:
            raise ConfigurationError("max_requests must be at least 1")
        if self.per_seconds <= 0:
            raise ConfigurationError("per_seconds must be positive")


@dataclass
class RetryPolicy:
    """
    Retry behaviour for failed requests.

    The delay before retry ``n`` (0-based) is
    ``min(max_delay, base_delay * backoff_factor ** n + jitter)`` where
    jitter is up to 10% of the exponential term.
    """

    max_retries: int = 3
    """Retries after the first attempt (total attempts = max_retries + 1)."""

    base_delay: float = 1.0
    """Delay before the first retry in seconds."""

    max_delay: float = 30.0
    """Upper bound on any single delay in seconds."""

    backoff_factor: float = 2.0
    """Multiplier applied per attempt."""

    retryable_statuses: tuple[int, ...] | None = None
    """If set, only these HTTP statuses are retried (network errors still are)."""

    on_retry: RetryCallback | None = None
    """Called with (error, attempt) before each retry; failures are logged."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_retries < 0:
            raise ConfigurationError("max_retries must be non-negative")
        if self.base_delay < 0:
            raise ConfigurationError("base_delay must be non-negative")
        if self.max_delay < self.base_delay:
            raise ConfigurationError("max_delay must be >= base_delay")
        if self.backoff_factor < 1.0:
            raise ConfigurationError("backoff_factor must be at least 1.0")
        if self.retryable_statuses is not None:
            self.retryable_statuses = tuple(self.retryable_statuses)


@dataclass
class ClientConfig:
    """
    Credentials and settings shared by every call made through one client.

    Instances are mutable: a successful token refresh overwrites
    ``access_token`` (and ``refresh_token`` when the server rotates it).
    """

    # === Authentication ===

    access_token: str | None = field(default=None, repr=False)
    """OAuth access token or personal access token, sent as Bearer."""

    refresh_token: str | None = field(default=None, repr=False)
    """OAuth refresh token used to renew an expired access token."""

    app_id: str | None = None
    """Application id for HTTP Basic auth and token refresh client credentials."""

    app_secret: str | None = field(default=None, repr=False)
    """Application secret paired with app_id."""

    on_token_refresh: TokenRefreshCallback | None = None
    """Called with the new TokenResponse after a successful refresh."""

    on_token_refresh_failure: TokenRefreshFailureCallback | None = None
    """Called with (error, RefreshFailureContext) when a refresh fails."""

    # === Transport ===

    base_url: str = DEFAULT_BASE_URL
    """API root that relative endpoints are appended to."""

    token_url: str | None = None
    """OAuth token endpoint; derived from base_url when unset."""

    headers: dict[str, str] = field(default_factory=dict)
    """Extra headers sent with every request (never override Authorization)."""

    timeout: float | None = None
    """Per-request timeout in seconds; None disables the timeout."""

    # === Resilience ===

    rate_limit: RateLimitPolicy = field(default_factory=RateLimitPolicy)
    """Local rate limit budget."""

    retry: RetryPolicy = field(default_factory=RetryPolicy)
    """Retry policy for transient failures."""

    max_rate_limit_retries: int = 10
    """Upper bound on consecutive 429 replays within one attempt."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        can_refresh = bool(
            self.refresh_token
            and (self.on_token_refresh or self.on_token_refresh_failure)
        )
        if not (self.access_token or (self.app_id and self.app_secret) or can_refresh):
            raise ConfigurationError(
                "Provide access_token, both app_id and app_secret, or a "
                "refresh_token with a token refresh callback"
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
        if self.max_rate_limit_retries < 0:
            raise ConfigurationError("max_rate_limit_retries must be non-negative")
        self.base_url = self.base_url.rstrip("/")

    @property
    def resolved_token_url(self) -> str:
        """The OAuth token endpoint for this configuration."""
        if self.token_url:
            return self.token_url
        if self.base_url == DEFAULT_BASE_URL:
            return DEFAULT_TOKEN_URL
        return f"{self.base_url}/oauth/token"

    @classmethod
    def from_env(cls, prefix: str = "PCO_", **overrides: Any) -> ClientConfig:
        """
        Build a configuration from environment variables.

        Reads ``{prefix}ACCESS_TOKEN``, ``{prefix}REFRESH_TOKEN``,
        ``{prefix}APP_ID``, ``{prefix}APP_SECRET``, ``{prefix}BASE_URL`` and
        ``{prefix}TIMEOUT``. Keyword overrides take precedence.
        """
        values: dict[str, Any] = {}
        for name in ("access_token", "refresh_token", "app_id", "app_secret", "base_url"):
            value = os.environ.get(f"{prefix}{name.upper()}")
            if value:
                values[name] = value
        timeout = os.environ.get(f"{prefix}TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"{prefix}TIMEOUT must be a number, got {timeout!r}"
                ) from e
        values.update(overrides)
        return cls(**values)


__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "DEFAULT_TOKEN_URL",
    "ClientConfig",
    "RateLimitPolicy",
    "RetryCallback",
    "RetryPolicy",
    "TokenRefreshCallback",
    "TokenRefreshFailureCallback",
]
