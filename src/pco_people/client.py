# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Client facade for the Planning Center People API.

PcoClient wires one configuration to one rate limiter, one token refresher
and one request pipeline. Every resource caller obtained from a client
shares that budget and those credentials.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from types import TracebackType
from typing import Any

import httpx
from typing_extensions import Self

from .auth.refresher import TokenRefresher
from .config import ClientConfig
from .core.executor import JsonDocument, RequestExecutor
from .core.pagination import DEFAULT_MAX_PAGES, DEFAULT_PER_PAGE, Paginator
from .limiter.rate_limiter import RateLimiter
from .observability.collector import MetricsCollector
from .protocols.file_transport import FileTransport
from .resources.households import HouseholdsResource
from .resources.people import PeopleResource
from .types.context import ContextLike
from .types.rate_limit import RateLimitInfo
from .uploads.transport import HttpxFileTransport

logger = logging.getLogger(__name__)


class PcoClient:
    """
    Async client for the People API.

    Owns its httpx.AsyncClient unless one is injected, in which case the
    caller is responsible for closing it.

    Attributes:
        config: Mutable configuration; refreshed tokens are written here
        rate_limiter: Budget shared by every call made through this client
        executor: Request pipeline
        paginator: Pagination helpers over the executor
        metrics: Optional Prometheus collector
        people: People resource caller
        households: Households resource caller

    Example:
        >>> config = ClientConfig(access_token="...")
        >>> async with PcoClient(config) as client:
        ...     person = await client.people.get("123", include=["emails"])
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        metrics: MetricsCollector | None = None,
        file_transport: FileTransport | None = None,
    ):
        self.config = config
        self._owns_http_client = http_client is None
        self.http_client = http_client or httpx.AsyncClient(timeout=config.timeout)
        self.metrics = metrics

        self.rate_limiter = RateLimiter(
            max_requests=config.rate_limit.max_requests,
            window_seconds=config.rate_limit.per_seconds,
        )
        self.refresher = TokenRefresher(config, self.http_client, metrics)
        self.executor = RequestExecutor(
            config,
            self.http_client,
            self.rate_limiter,
            refresher=self.refresher,
            metrics=metrics,
        )
        self.paginator = Paginator(self.executor)
        self.file_transport = file_transport or HttpxFileTransport(self.http_client)

        self.people = PeopleResource(self.executor, self.paginator, self.file_transport)
        self.households = HouseholdsResource(self.executor, self.paginator)
        self._closed = False

    # === Raw verbs ===

    async def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        return await self.executor.get(endpoint, params, context)

    async def post(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        return await self.executor.post(endpoint, data, params, context)

    async def patch(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        return await self.executor.patch(endpoint, data, params, context)

    async def delete(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> None:
        await self.executor.delete(endpoint, params, context)

    # === Pagination ===

    async def get_all_pages(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> list[Any]:
        """Fetch every page of a list endpoint and concatenate the data."""
        return await self.paginator.get_all_pages(endpoint, params, context, max_pages)

    def iter_pages(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> AsyncIterator[list[Any]]:
        """Iterate over the ``data`` list of each page."""
        return self.paginator.iter_pages(endpoint, params, context, max_pages)

    async def get_page(
        self,
        endpoint: str,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        return await self.paginator.get_page(endpoint, page, per_page, params, context)

    # === Introspection ===

    def get_rate_limit_info(self) -> RateLimitInfo:
        """Snapshot of the client's current request budget."""
        return self.rate_limiter.get_rate_limit_info()

    @property
    def closed(self) -> bool:
        return self._closed

    # === Lifecycle ===

    async def aclose(self) -> None:
        """Close the underlying httpx client if this client created it."""
        if self._closed:
            return
        self._closed = True
        if self._owns_http_client:
            await self.http_client.aclose()
        logger.debug("PcoClient closed")

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()


__all__ = ["PcoClient"]
