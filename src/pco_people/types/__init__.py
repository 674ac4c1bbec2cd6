# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Value types shared across the client."""

from .auth import RefreshFailureContext, TokenResponse
from .context import ContextLike, RequestContext
from .errors import TRANSIENT_CATEGORIES, ErrorCategory, ErrorSeverity
from .rate_limit import (
    RATE_COUNT_HEADER,
    RATE_LIMIT_HEADER,
    RATE_LIMIT_HEADERS,
    RATE_PERIOD_HEADER,
    RETRY_AFTER_HEADER,
    RateLimitInfo,
)

__all__ = [
    "RATE_COUNT_HEADER",
    "RATE_LIMIT_HEADER",
    "RATE_LIMIT_HEADERS",
    "RATE_PERIOD_HEADER",
    "RETRY_AFTER_HEADER",
    "TRANSIENT_CATEGORIES",
    "ContextLike",
    "ErrorCategory",
    "ErrorSeverity",
    "RateLimitInfo",
    "RefreshFailureContext",
    "RequestContext",
    "TokenResponse",
]
