# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Rolling-window rate limiting shared by all calls on one client."""

from .rate_limiter import DEFAULT_MAX_REQUESTS, DEFAULT_WINDOW_SECONDS, RateLimiter

__all__ = ["DEFAULT_MAX_REQUESTS", "DEFAULT_WINDOW_SECONDS", "RateLimiter"]
