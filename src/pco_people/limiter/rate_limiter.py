# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Rolling-window rate limiter for the People API.

Planning Center enforces a request budget per time period (historically
100 requests per 20 seconds, subject to change) and reports the current
budget on every response. This limiter enforces a local budget shared by
all callers on one client and adapts to the server's figures as they
arrive.

Concurrency model:
    All state changes happen between await points, so concurrent tasks on
    one event loop never observe a half-updated window. A caller released
    from ``wait_for_availability`` holds a reserved permit until it calls
    ``record_request``, which means two waiters can never both be granted
    the last slot.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from collections import deque
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from ..types.rate_limit import (
    RATE_COUNT_HEADER,
    RATE_LIMIT_HEADER,
    RATE_PERIOD_HEADER,
    RETRY_AFTER_HEADER,
    RateLimitInfo,
)

logger = logging.getLogger(__name__)

DEFAULT_MAX_REQUESTS = 100
DEFAULT_WINDOW_SECONDS = 60.0

_RATE_LIMIT_DETAIL = re.compile(
    r"Rate limit exceeded: (\d+) of (\d+) requests per (\d+) seconds"
)


def _parse_number(value: str | None) -> float | None:
    if value is None:
        return None
    try:
        return float(str(value).strip())
    except ValueError:
        return None


class RateLimiter:
    """
    Request budget enforced over a rolling window.

    Each recorded request is kept as a monotonic timestamp; a request may
    proceed only while fewer than ``limit`` timestamps (plus reserved
    permits) fall inside the trailing window. When the server reports its
    own count, the larger of the two counts applies until the server's
    period elapses.

    Attributes:
        limit: Maximum requests per window (replaced by the server's value)
        window: Window length in seconds (replaced by the server's period)

    Example:
        >>> limiter = RateLimiter(max_requests=100, window_seconds=20.0)
        >>> await limiter.wait_for_availability()
        >>> response = await send()
        >>> limiter.update_from_headers(response.headers)
        >>> limiter.record_request()
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the limiter.

        Args:
            max_requests: Requests allowed per window until the server says otherwise.
            window_seconds: Window length in seconds.
            clock: Monotonic clock, injectable for tests.
            sleep: Async sleep function, injectable for tests.
        """
        self.limit = max_requests or DEFAULT_MAX_REQUESTS
        self.window = window_seconds or DEFAULT_WINDOW_SECONDS
        self._clock = clock
        self._sleep = sleep

        self._timestamps: deque[float] = deque()
        self._reserved = 0

        # Server-reported view, valid until _server_reset_at
        self._server_count: int | None = None
        self._server_reset_at = 0.0
        self._server_count_fresh = False
        self._blocked_until = 0.0
        self._retry_after: float | None = None

    # === Window bookkeeping ===

    def _prune(self, now: float) -> None:
        cutoff = now - self.window
        while self._timestamps and self._timestamps[0] <= cutoff:
            self._timestamps.popleft()
        if self._server_count is not None and now >= self._server_reset_at:
            self._server_count = None
            self._server_count_fresh = False
        if self._blocked_until and now >= self._blocked_until:
            self._blocked_until = 0.0
            self._retry_after = None

    def _local_count(self) -> int:
        return len(self._timestamps) + self._reserved

    def _effective_count(self) -> int:
        local = self._local_count()
        if self._server_count is None:
            return local
        return max(local, self._server_count + self._reserved)

    def _time_until_available(self, now: float) -> float:
        """Seconds until one more request fits, 0.0 if it fits now."""
        self._prune(now)
        if self._blocked_until > now:
            return self._blocked_until - now
        if self._effective_count() < self.limit:
            return 0.0

        waits = []
        local = self._local_count()
        if local >= self.limit:
            # The oldest timestamps must leave the window; reserved permits
            # are not yet timestamped, so they hold their slot until recorded.
            excess = local - self.limit
            if excess < len(self._timestamps):
                waits.append(self._timestamps[excess] + self.window - now)
            else:
                waits.append(self.window)
        if self._server_count is not None:
            waits.append(self._server_reset_at - now)
        return max(max(waits), 0.0) if waits else 0.0

    # === Public API ===

    def can_make_request(self) -> bool:
        """Return True if a request could be granted right now."""
        return self._time_until_available(self._clock()) <= 0.0

    async def wait_for_availability(self) -> float:
        """
        Suspend until the window has capacity, then reserve one permit.

        Other tasks keep running while this one sleeps. The permit is
        consumed by the next ``record_request`` call.

        Returns:
            Total seconds spent waiting.
        """
        waited = 0.0
        while True:
            now = self._clock()
            delay = self._time_until_available(now)
            if delay <= 0.0:
                # Check and reservation happen without an intervening await
                self._reserved += 1
                return waited
            logger.debug(
                f"Rate limit reached ({self._effective_count()}/{self.limit}), "
                f"waiting {delay:.3f}s"
            )
            await self._sleep(delay)
            waited += delay

    def record_request(self) -> None:
        """
        Record one consumed unit of budget.

        Must be called exactly once per network attempt. Converts a reserved
        permit into a timestamp when one is held.
        """
        now = self._clock()
        self._prune(now)
        if self._reserved > 0:
            self._reserved -= 1
        self._timestamps.append(now)
        if self._server_count is not None:
            if self._server_count_fresh:
                # The server's count already includes this request
                self._server_count_fresh = False
            else:
                self._server_count += 1

    def release(self) -> None:
        """Return a reserved permit without recording a request."""
        if self._reserved > 0:
            self._reserved -= 1

    def update_from_headers(self, headers: Mapping[str, str]) -> None:
        """
        Adopt the server's view of the budget from response headers.

        Header names are matched case-insensitively. Missing or malformed
        values leave the corresponding local state untouched.

        Args:
            headers: Response headers (any mapping; httpx.Headers works).
        """
        lowered = {str(k).lower(): v for k, v in headers.items()}
        now = self._clock()

        limit = _parse_number(lowered.get(RATE_LIMIT_HEADER.lower()))
        if limit is not None and limit >= 1:
            self.limit = int(limit)

        period = _parse_number(lowered.get(RATE_PERIOD_HEADER.lower()))
        if period is not None and period > 0:
            self.window = period
            self._server_reset_at = now + period

        count = _parse_number(lowered.get(RATE_COUNT_HEADER.lower()))
        if count is not None and count >= 0:
            self._server_count = int(count)
            self._server_count_fresh = True
            if self._server_reset_at <= now:
                self._server_reset_at = now + self.window

        retry_after = _parse_number(lowered.get(RETRY_AFTER_HEADER.lower()))
        if retry_after is not None and retry_after >= 0:
            self._retry_after = retry_after
            self._blocked_until = now + retry_after
            # The server's count is stale once it tells us when to come back
            self._server_count = None
            self._server_count_fresh = False

        if limit is not None or count is not None or retry_after is not None:
            logger.debug(
                f"Rate limit headers: limit={self.limit} window={self.window}s "
                f"count={self._server_count} retry_after={retry_after}"
            )

    def mark_exhausted(self) -> None:
        """
        Treat the current window as full after a 429 response.

        Called after ``update_from_headers`` so the next
        ``wait_for_availability`` suspends even when the 429 carried no
        Retry-After or count header.
        """
        now = self._clock()
        self._prune(now)
        if self._blocked_until > now:
            return
        self._server_count = max(self._server_count or 0, self.limit)
        self._server_count_fresh = False
        if self._server_reset_at <= now:
            self._server_reset_at = now + self.window

    def get_time_until_reset(self) -> float:
        """Seconds until the next request could be granted."""
        return self._time_until_available(self._clock())

    def get_rate_limit_info(self) -> RateLimitInfo:
        """Return a read-only snapshot of the current budget."""
        now = self._clock()
        wait = self._time_until_available(now)
        if wait <= 0.0:
            if self._timestamps:
                wait = max(self._timestamps[0] + self.window - now, 0.0)
            elif self._server_count is not None:
                wait = max(self._server_reset_at - now, 0.0)
        return RateLimitInfo(
            limit=self.limit,
            remaining=max(0, self.limit - self._effective_count()),
            reset_at=time.time() + wait,
            retry_after=self._retry_after,
        )

    def get_debug_info(self) -> dict[str, Any]:
        """Return internal state for troubleshooting."""
        now = self._clock()
        return {
            "can_make_request": self.can_make_request(),
            "limit": self.limit,
            "window_seconds": self.window,
            "recorded_in_window": len(self._timestamps),
            "reserved": self._reserved,
            "server_count": self._server_count,
            "time_until_available": self._time_until_available(now),
            "blocked_for": max(self._blocked_until - now, 0.0),
        }

    @staticmethod
    def parse_rate_limit_detail(detail: str) -> dict[str, int] | None:
        """
        Parse a 429 error detail such as
        ``"Rate limit exceeded: 118 of 100 requests per 20 seconds"``.

        Returns:
            Dict with ``current``, ``limit`` and ``period`` keys, or None.
        """
        match = _RATE_LIMIT_DETAIL.search(detail or "")
        if not match:
            return None
        return {
            "current": int(match.group(1)),
            "limit": int(match.group(2)),
            "period": int(match.group(3)),
        }


__all__ = ["DEFAULT_MAX_REQUESTS", "DEFAULT_WINDOW_SECONDS", "RateLimiter"]
