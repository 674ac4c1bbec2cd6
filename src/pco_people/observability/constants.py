# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Metric names and histogram buckets for the People API client.

All names follow the Prometheus convention: ``<prefix>_<what>_<unit>``,
with counters ending in ``_total``.
"""

METRIC_PREFIX = "pco"

# === Request metrics ===
REQUESTS_TOTAL = f"{METRIC_PREFIX}_requests_total"
REQUEST_DURATION_SECONDS = f"{METRIC_PREFIX}_request_duration_seconds"
REQUEST_FAILURES_TOTAL = f"{METRIC_PREFIX}_request_failures_total"
RETRIES_TOTAL = f"{METRIC_PREFIX}_retries_total"

# === Rate limit metrics ===
RATE_LIMITED_RESPONSES_TOTAL = f"{METRIC_PREFIX}_rate_limited_responses_total"
RATE_LIMIT_WAITS_TOTAL = f"{METRIC_PREFIX}_rate_limit_waits_total"
RATE_LIMIT_WAIT_SECONDS = f"{METRIC_PREFIX}_rate_limit_wait_seconds"
RATE_LIMIT_REMAINING = f"{METRIC_PREFIX}_rate_limit_remaining"

# === Auth metrics ===
TOKEN_REFRESHES_TOTAL = f"{METRIC_PREFIX}_token_refreshes_total"

# Request latency in seconds
LATENCY_BUCKETS = [0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0]

# Rate limiter waits in seconds (windows are tens of seconds)
WAIT_BUCKETS = [0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 20.0, 30.0, 60.0]

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
]
