# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability for the People API client.

Classes:
    MetricsCollector: Prometheus counters, gauges and histograms for requests,
        retries, rate limiting and token refreshes.
"""

from .collector import MetricsCollector
from .constants import (
    LATENCY_BUCKETS,
    METRIC_PREFIX,
    RATE_LIMIT_REMAINING,
    RATE_LIMIT_WAIT_SECONDS,
    RATE_LIMIT_WAITS_TOTAL,
    RATE_LIMITED_RESPONSES_TOTAL,
    REQUEST_DURATION_SECONDS,
    REQUEST_FAILURES_TOTAL,
    REQUESTS_TOTAL,
    RETRIES_TOTAL,
    TOKEN_REFRESHES_TOTAL,
    WAIT_BUCKETS,
)

__all__ = [
    "LATENCY_BUCKETS",
    "METRIC_PREFIX",
    "RATE_LIMITED_RESPONSES_TOTAL",
    "RATE_LIMIT_REMAINING",
    "RATE_LIMIT_WAITS_TOTAL",
    "RATE_LIMIT_WAIT_SECONDS",
    "REQUESTS_TOTAL",
    "REQUEST_DURATION_SECONDS",
    "REQUEST_FAILURES_TOTAL",
    "RETRIES_TOTAL",
    "TOKEN_REFRESHES_TOTAL",
    "WAIT_BUCKETS",
    "MetricsCollector",
]
