# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Prometheus metrics collector for the People API client.

Each collector owns its own CollectorRegistry, so any number of clients can
coexist in one process without duplicate-registration errors. Pass a shared
registry (e.g. ``prometheus_client.REGISTRY``) to expose metrics through an
existing exporter.

Usage:
    >>> collector = MetricsCollector()
    >>> collector.record_request("GET", 200, 0.12)
    >>> collector.get_sample("pco_requests_total", {"method": "GET", "status": "200"})
    1.0
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    start_http_server as _start_http_server,
)

from ..types.errors import ErrorCategory
from .constants import (
    LATENCY_BUCKETS,
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

logger = logging.getLogger(__name__)


class MetricsCollector:
    """
    Counters, gauges and histograms describing client behaviour.

    Metric names omit the ``_total`` suffix when handed to prometheus_client
    (which appends it itself); ``get_sample`` accepts the full exported name.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        """
        Initialize the collector.

        Args:
            registry: Registry to register metrics with; a private one by default
        """
        self.registry = registry if registry is not None else CollectorRegistry()
        self._server_running = False

        self.requests = Counter(
            _base_name(REQUESTS_TOTAL),
            "HTTP requests sent to the People API",
            ["method", "status"],
            registry=self.registry,
        )
        self.request_duration = Histogram(
            REQUEST_DURATION_SECONDS,
            "Duration of HTTP requests to the People API",
            ["method"],
            buckets=LATENCY_BUCKETS,
            registry=self.registry,
        )
        self.failures = Counter(
            _base_name(REQUEST_FAILURES_TOTAL),
            "Calls that failed after all recovery",
            ["category"],
            registry=self.registry,
        )
        self.retries = Counter(
            _base_name(RETRIES_TOTAL),
            "Retries scheduled by the retry executor",
            ["category"],
            registry=self.registry,
        )
        self.rate_limited = Counter(
            _base_name(RATE_LIMITED_RESPONSES_TOTAL),
            "429 responses received",
            registry=self.registry,
        )
        self.rate_limit_waits = Counter(
            _base_name(RATE_LIMIT_WAITS_TOTAL),
            "Times a call waited for rate limit capacity",
            registry=self.registry,
        )
        self.rate_limit_wait_seconds = Histogram(
            RATE_LIMIT_WAIT_SECONDS,
            "Time spent waiting for rate limit capacity",
            buckets=WAIT_BUCKETS,
            registry=self.registry,
        )
        self.rate_limit_remaining = Gauge(
            RATE_LIMIT_REMAINING,
            "Requests remaining in the current rate limit window",
            registry=self.registry,
        )
        self.token_refreshes = Counter(
            _base_name(TOKEN_REFRESHES_TOTAL),
            "OAuth token refresh attempts",
            ["outcome"],
            registry=self.registry,
        )

    # === Recording ===

    def record_request(self, method: str, status: int | None, duration: float) -> None:
        """Record one HTTP exchange; ``status`` is None when no response arrived."""
        label = str(status) if status is not None else "error"
        self.requests.labels(method=method, status=label).inc()
        self.request_duration.labels(method=method).observe(duration)

    def record_failure(self, category: ErrorCategory) -> None:
        self.failures.labels(category=category.value).inc()

    def record_retry(self, category: ErrorCategory) -> None:
        self.retries.labels(category=category.value).inc()

    def record_rate_limited(self) -> None:
        self.rate_limited.inc()

    def record_rate_limit_wait(self, seconds: float) -> None:
        if seconds <= 0:
            return
        self.rate_limit_waits.inc()
        self.rate_limit_wait_seconds.observe(seconds)

    def set_rate_limit_remaining(self, remaining: int) -> None:
        self.rate_limit_remaining.set(remaining)

    def record_token_refresh(self, success: bool) -> None:
        self.token_refreshes.labels(outcome="success" if success else "failure").inc()

    # === Reading / export ===

    def get_sample(
        self, name: str, labels: Mapping[str, str] | None = None
    ) -> float | None:
        """Return the current value of an exported sample, or None if absent."""
        return self.registry.get_sample_value(name, dict(labels or {}))

    def start_http_server(self, port: int = 9090, addr: str = "127.0.0.1") -> bool:
        """
        Expose this collector's registry for Prometheus scraping.

        Returns:
            True if the server was started, False if it was already running
        """
        if self._server_running:
            logger.debug("Metrics HTTP server already running")
            return False
        _start_http_server(port, addr=addr, registry=self.registry)
        self._server_running = True
        logger.info(f"Metrics HTTP server listening on {addr}:{port}")
        return True


def _base_name(name: str) -> str:
    return name[: -len("_total")] if name.endswith("_total") else name


__all__ = ["MetricsCollector"]
