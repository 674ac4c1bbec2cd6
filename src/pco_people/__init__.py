# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""PCO People - Async client for the Planning Center People API.

Every call runs through a resilience pipeline that keeps the client inside
the server's request budget and recovers from transient failures before
they reach the caller.

Key Features:
    - Rolling-window rate limiting that adapts to the server's rate headers
    - Retries with exponential backoff and jitter for transient failures
    - Automatic OAuth token refresh on 401 responses
    - Typed errors with category, severity and request context
    - JSON:API pagination helpers
    - Prometheus metrics

Quick Start:
    >>> from pco_people import ClientConfig, PcoClient
    >>>
    >>> config = ClientConfig(access_token="...", refresh_token="...")
    >>> async with PcoClient(config) as client:
    ...     people = await client.people.get_all(where={"status": "active"})

Main Exports:
    - PcoClient, ClientRegistry: Client facade and per-tenant registry
    - ClientConfig, RateLimitPolicy, RetryPolicy: Configuration
    - PcoError, ErrorCategory, ErrorSeverity: Typed errors
    - RateLimiter, RetryExecutor, TokenRefresher, RequestExecutor: Pipeline parts
    - MetricsCollector: Prometheus metrics

Version: 1.0.0
"""

__version__ = "1.0.0"

from .auth import TokenRefresher, build_auth_header, build_request_headers
from .client import PcoClient
from .config import (
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_URL,
    ClientConfig,
    RateLimitPolicy,
    RetryPolicy,
)
from .core import Paginator, RequestExecutor, build_query_params
from .exceptions import (
    ConfigurationError,
    PcoError,
    PcoPeopleError,
    TokenRefreshError,
)
from .limiter import RateLimiter
from .observability import MetricsCollector
from .protocols import DownloadedFile, FileTransport
from .registry import ClientRegistry
from .resilience import RetryExecutor, classify_error, with_error_boundary
from .resources import HouseholdsResource, PeopleResource
from .types import (
    ErrorCategory,
    ErrorSeverity,
    RateLimitInfo,
    RequestContext,
    TokenResponse,
)
from .uploads import HttpxFileTransport

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_TIMEOUT",
    "DEFAULT_TOKEN_URL",
    "ClientConfig",
    "ClientRegistry",
    "ConfigurationError",
    "DownloadedFile",
    "ErrorCategory",
    "ErrorSeverity",
    "FileTransport",
    "HouseholdsResource",
    "HttpxFileTransport",
    "MetricsCollector",
    "Paginator",
    "PcoClient",
    "PcoError",
    "PcoPeopleError",
    "PeopleResource",
    "RateLimitInfo",
    "RateLimitPolicy",
    "RateLimiter",
    "RequestContext",
    "RequestExecutor",
    "RetryExecutor",
    "RetryPolicy",
    "TokenRefreshError",
    "TokenRefresher",
    "TokenResponse",
    "__version__",
    "build_auth_header",
    "build_query_params",
    "build_request_headers",
    "classify_error",
    "with_error_boundary",
]
