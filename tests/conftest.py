"""
Shared fixtures for the pco_people test suite.

HTTP traffic is faked with httpx.MockTransport; time is faked with
FakeClock so rate limit and backoff waits complete instantly.
"""

import asyncio
from collections.abc import Callable

import httpx
import pytest

from pco_people.config import ClientConfig, RetryPolicy
from pco_people.core.executor import RequestExecutor
from pco_people.limiter.rate_limiter import RateLimiter
from pco_people.observability.collector import MetricsCollector

Handler = Callable[[httpx.Request], httpx.Response]


class FakeClock:
    """Monotonic clock whose sleep advances time instead of waiting."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds
        await asyncio.sleep(0)


@pytest.fixture
def fake_clock():
    """Create a fake clock starting at t=1000."""
    return FakeClock()


@pytest.fixture
def config():
    """Bearer-token configuration with instant retries."""
    return ClientConfig(
        access_token="token",
        retry=RetryPolicy(max_retries=3, base_delay=0.0, max_delay=0.0),
    )


@pytest.fixture
def metrics():
    """Create a metrics collector with a private registry."""
    return MetricsCollector()


@pytest.fixture
def make_executor(fake_clock):
    """
    Factory building a RequestExecutor over a MockTransport handler.

    The returned executor waits for rate limit capacity on the fake
    clock. Retries are instant under the zero-delay policy of ``config``.
    """
    def _make(
        handler: Handler,
        config: ClientConfig,
        metrics: MetricsCollector | None = None,
        max_requests: int = 100,
        window_seconds: float = 60.0,
    ) -> RequestExecutor:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        limiter = RateLimiter(
            max_requests,
            window_seconds,
            clock=fake_clock,
            sleep=fake_clock.sleep,
        )
        return RequestExecutor(
            config,
            http_client,
            limiter,
            metrics=metrics,
        )

    return _make
