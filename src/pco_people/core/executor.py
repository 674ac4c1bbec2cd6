# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Request execution pipeline for the People API.

RequestExecutor turns "make this API call" into a rate-limited,
authenticated, retried and classified HTTP exchange. Each logical call
runs through three layers:

1. Error boundary: every failure reaches the caller as a PcoError carrying
   the call's RequestContext.
2. RetryExecutor: the whole attempt is retried on transient failures
   (network, server, rate limit) per the configured RetryPolicy.
3. Recovery loop (one attempt): wait for rate limit capacity, send, account
   for the response, then
   - on 429: wait for capacity again and replay (bounded by
     ``max_rate_limit_retries``)
   - on 401 with refresh capability: refresh the token once and replay
   - on other non-2xx: raise a classified PcoError
   - on 2xx: return the decoded JSON body (None for DELETE)

The request timeout covers only the HTTP exchange, never the time spent
waiting for rate limit capacity.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Mapping
from typing import Any

import httpx

from ..auth.headers import build_request_headers
from ..auth.refresher import TokenRefresher
from ..config import ClientConfig
from ..exceptions import PcoError, TokenRefreshError
from ..limiter.rate_limiter import RateLimiter
from ..observability.collector import MetricsCollector
from ..resilience.boundary import with_error_boundary
from ..resilience.classifier import (
    error_from_response,
    network_error,
    timeout_error,
    unknown_error,
)
from ..resilience.retry import RetryExecutor
from ..types.context import ContextLike, RequestContext
from .query import encode_params

logger = logging.getLogger(__name__)

JsonDocument = dict[str, Any]

_BODY_METHODS = frozenset({"POST", "PATCH"})


def is_absolute_url(endpoint: str) -> bool:
    return endpoint.startswith(("http://", "https://"))


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}


class RequestExecutor:
    """
    Core request pipeline shared by every resource caller of one client.

    Attributes:
        config: Shared, mutable client configuration
        http_client: httpx client used for API calls
        rate_limiter: Request budget shared by all calls
        refresher: Token refresher used on 401 responses
        retry: Outer retry layer
        metrics: Optional metrics collector

    Example:
        >>> executor = RequestExecutor(config, http_client, RateLimiter())
        >>> person = await executor.get("/people/1", {"include": "emails"})
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.AsyncClient,
        rate_limiter: RateLimiter,
        *,
        refresher: TokenRefresher | None = None,
        retry: RetryExecutor | None = None,
        metrics: MetricsCollector | None = None,
    ):
        self.config = config
        self.http_client = http_client
        self.rate_limiter = rate_limiter
        self.metrics = metrics
        self.refresher = refresher or TokenRefresher(config, http_client, metrics)
        self.retry = retry or RetryExecutor(
            config.retry,
            on_retry_hook=self._on_retry if metrics is not None else None,
        )

    # === Public verbs ===

    async def get(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        """GET a resource or list; returns the decoded JSON:API document."""
        return await self.request("GET", endpoint, params=params, context=context)

    async def post(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        """POST ``data`` as ``{"data": {"attributes": data}}``."""
        return await self.request(
            "POST", endpoint, data=data, params=params, context=context
        )

    async def patch(
        self,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        """PATCH ``data`` as ``{"data": {"attributes": data}}``."""
        return await self.request(
            "PATCH", endpoint, data=data, params=params, context=context
        )

    async def delete(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> None:
        """DELETE a resource."""
        await self.request("DELETE", endpoint, params=params, context=context)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        data: Mapping[str, Any] | None = None,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        """
        Run one logical call through the boundary, retry and recovery layers.

        Raises:
            PcoError: If the call fails after all recovery
        """
        method = method.upper()
        ctx = RequestContext.coerce(context).merge(
            {"endpoint": endpoint, "method": method}
        )

        async def attempt() -> JsonDocument | None:
            return await self._send_with_recovery(method, endpoint, data, params, ctx)

        async def retried() -> JsonDocument | None:
            return await self.retry.execute(attempt, self.config.retry, ctx)

        try:
            return await with_error_boundary(retried, ctx)
        except PcoError as e:
            if self.metrics is not None:
                self.metrics.record_failure(e.category)
            raise

    # === Request construction ===

    def build_url(self, endpoint: str, params: Mapping[str, Any] | None = None) -> str:
        """
        Resolve ``endpoint`` against the base URL and append query parameters.

        Absolute endpoints (such as pagination ``next`` links) are used as-is.
        """
        if is_absolute_url(endpoint):
            url = endpoint
        else:
            path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
            url = f"{self.config.base_url}{path}"
        pairs = encode_params(params)
        if pairs:
            url = str(httpx.URL(url).copy_merge_params(pairs))
        return url

    def build_body(
        self, method: str, data: Mapping[str, Any] | None
    ) -> dict[str, Any] | None:
        if method in _BODY_METHODS and data is not None:
            return {"data": {"attributes": dict(data)}}
        return None

    # === Recovery loop ===

    async def _send_with_recovery(
        self,
        method: str,
        endpoint: str,
        data: Mapping[str, Any] | None,
        params: Mapping[str, Any] | None,
        ctx: RequestContext,
    ) -> JsonDocument | None:
        url = self.build_url(endpoint, params)
        body = self.build_body(method, data)
        rate_limit_replays = 0
        refreshed = False

        while True:
            waited = await self.rate_limiter.wait_for_availability()
            if self.metrics is not None:
                self.metrics.record_rate_limit_wait(waited)

            response = await self._send_once(method, url, body, ctx)
            status = response.status_code

            if status == 429:
                self.rate_limiter.mark_exhausted()
                if self.metrics is not None:
                    self.metrics.record_rate_limited()
                rate_limit_replays += 1
                if rate_limit_replays > self.config.max_rate_limit_retries:
                    raise error_from_response(response, _json_or_empty(response), ctx)
                logger.warning(
                    f"429 from {method} {endpoint}; waiting for capacity "
                    f"(replay {rate_limit_replays}/{self.config.max_rate_limit_retries})"
                )
                continue

            if status == 401 and not refreshed and self.refresher.has_refresh_capability():
                refreshed = True
                try:
                    await self.refresher.refresh()
                except TokenRefreshError as refresh_error:
                    raise error_from_response(
                        response,
                        _json_or_empty(response),
                        ctx,
                        cause=refresh_error,
                        note=refresh_error.message,
                    ) from refresh_error
                logger.debug(f"Replaying {method} {endpoint} with refreshed token")
                continue

            if not response.is_success:
                raise error_from_response(response, _json_or_empty(response), ctx)

            if method == "DELETE" or not response.content:
                return None
            try:
                return response.json()
            except ValueError as e:
                raise unknown_error(e, ctx) from e

    async def _send_once(
        self,
        method: str,
        url: str,
        body: dict[str, Any] | None,
        ctx: RequestContext,
    ) -> httpx.Response:
        """
        Send one HTTP request and account for it with the rate limiter.

        Accounting happens whatever the outcome, including cancellation,
        so every attempt consumes exactly one unit of budget.
        """
        operation = f"{method} {ctx.endpoint or url}"
        headers = build_request_headers(self.config)
        response: httpx.Response | None = None
        start = time.monotonic()
        try:
            response = await self.http_client.request(
                method,
                url,
                headers=headers,
                json=body,
                timeout=self._request_timeout(),
            )
            return response
        except asyncio.CancelledError:
            raise
        except httpx.TimeoutException as e:
            raise timeout_error(operation, self.config.timeout, ctx, cause=e) from e
        except PcoError:
            raise
        except Exception as e:
            raise network_error(e, operation, ctx) from e
        finally:
            if response is not None:
                self.rate_limiter.update_from_headers(response.headers)
            self.rate_limiter.record_request()
            if self.metrics is not None:
                self.metrics.record_request(
                    method,
                    response.status_code if response is not None else None,
                    time.monotonic() - start,
                )
                self.metrics.set_rate_limit_remaining(
                    self.rate_limiter.get_rate_limit_info().remaining
                )

    def _request_timeout(self) -> float | httpx._client.UseClientDefault:
        # Unset config timeout defers to the http client's own setting
        if self.config.timeout is None:
            return httpx.USE_CLIENT_DEFAULT
        return self.config.timeout

    def _on_retry(self, error: PcoError, attempt: int) -> None:
        if self.metrics is not None:
            self.metrics.record_retry(error.category)


__all__ = ["JsonDocument", "RequestExecutor", "is_absolute_url"]
