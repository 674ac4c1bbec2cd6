# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Rate limit types and header names.

The People API reports its request budget on every response through the
``X-PCO-API-Request-Rate-*`` headers and adds ``Retry-After`` to 429s.
"""

from dataclasses import dataclass

RATE_LIMIT_HEADER = "X-PCO-API-Request-Rate-Limit"
RATE_PERIOD_HEADER = "X-PCO-API-Request-Rate-Period"
RATE_COUNT_HEADER = "X-PCO-API-Request-Rate-Count"
RETRY_AFTER_HEADER = "Retry-After"

RATE_LIMIT_HEADERS = (
    RATE_LIMIT_HEADER,
    RATE_PERIOD_HEADER,
    RATE_COUNT_HEADER,
    RETRY_AFTER_HEADER,
)


@dataclass(frozen=True)
class RateLimitInfo:
    """
    Read-only snapshot of the limiter's budget.

    Attributes:
        limit: Maximum requests allowed per window
        remaining: Requests that may still be made in the current window
        reset_at: Unix timestamp at which capacity next frees up
        retry_after: Seconds the server asked callers to wait, if any
    """

    limit: int
    remaining: int
    reset_at: float
    retry_after: float | None = None


__all__ = [
    "RATE_COUNT_HEADER",
    "RATE_LIMIT_HEADER",
    "RATE_LIMIT_HEADERS",
    "RATE_PERIOD_HEADER",
    "RETRY_AFTER_HEADER",
    "RateLimitInfo",
]
