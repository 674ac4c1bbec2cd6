# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
OAuth token refresh.

TokenRefresher exchanges the configured refresh token for a new access
token and writes the result into the shared ClientConfig. It refreshes
once per call and never retries the original request itself; the request
executor replays the request after a successful refresh.
"""

from __future__ import annotations

import inspect
import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

from ..exceptions import TokenRefreshError
from ..types.auth import RefreshFailureContext, TokenResponse

if TYPE_CHECKING:
    from ..config import ClientConfig
    from ..observability.collector import MetricsCollector

logger = logging.getLogger(__name__)


class TokenRefresher:
    """
    Refreshes OAuth credentials for one client.

    Attributes:
        config: The shared, mutable client configuration
        http_client: Client used to call the token endpoint

    Example:
        >>> refresher = TokenRefresher(config, http_client)
        >>> if refresher.has_refresh_capability():
        ...     tokens = await refresher.refresh()
    """

    def __init__(
        self,
        config: ClientConfig,
        http_client: httpx.AsyncClient,
        metrics: MetricsCollector | None = None,
    ):
        self.config = config
        self.http_client = http_client
        self.metrics = metrics

    def has_refresh_capability(self) -> bool:
        """True if a refresh token and at least one refresh callback are configured."""
        return bool(
            self.config.refresh_token
            and (self.config.on_token_refresh or self.config.on_token_refresh_failure)
        )

    async def refresh(self) -> TokenResponse:
        """
        Exchange the refresh token for new credentials.

        On success the access token (and a rotated refresh token, if any) is
        written to the shared config and ``on_token_refresh`` is invoked. On
        failure ``on_token_refresh_failure`` is invoked and the error raised.
        Callback failures are logged and never replace the outcome.

        Returns:
            The decoded token response

        Raises:
            TokenRefreshError: If refresh is not configured or the exchange fails
        """
        if not self.has_refresh_capability():
            raise TokenRefreshError("No refresh token or callback configured")

        refresh_token = self.config.refresh_token
        try:
            tokens = await self._request_tokens(refresh_token or "")
        except TokenRefreshError as e:
            self._record(False)
            await self._notify_failure(e, refresh_token)
            raise
        except httpx.HTTPError as e:
            error = TokenRefreshError(f"Token refresh failed: {e}", cause=e)
            self._record(False)
            await self._notify_failure(error, refresh_token)
            raise error from e

        self._apply(tokens)
        self._record(True)
        logger.info("Access token refreshed")
        await self._notify_success(tokens)
        return tokens

    async def _request_tokens(self, refresh_token: str) -> TokenResponse:
        form = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
        }
        if self.config.app_id and self.config.app_secret:
            form["client_id"] = self.config.app_id
            form["client_secret"] = self.config.app_secret

        response = await self.http_client.post(
            self.config.resolved_token_url,
            data=form,
            headers={
                "Content-Type": "application/x-www-form-urlencoded",
                "Accept": "application/json",
            },
        )

        if not response.is_success:
            body = _json_or_empty(response)
            raise TokenRefreshError(
                f"Token refresh failed: {response.status_code} "
                f"{response.reason_phrase}. {json.dumps(body)}",
                status=response.status_code,
                status_text=response.reason_phrase,
                body=body,
            )

        try:
            return TokenResponse.from_dict(response.json())
        except (ValueError, KeyError, TypeError) as e:
            raise TokenRefreshError(
                f"Token refresh failed: malformed token response ({e})",
                status=response.status_code,
                status_text=response.reason_phrase,
                cause=e,
            ) from e

    def _apply(self, tokens: TokenResponse) -> None:
        self.config.access_token = tokens.access_token
        # Servers may rotate the refresh token or keep the current one
        if tokens.refresh_token:
            self.config.refresh_token = tokens.refresh_token

    def _record(self, success: bool) -> None:
        if self.metrics is not None:
            self.metrics.record_token_refresh(success)

    async def _notify_success(self, tokens: TokenResponse) -> None:
        callback = self.config.on_token_refresh
        if callback is None:
            return
        try:
            result = callback(tokens)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Token refresh callback failed: {e}")

    async def _notify_failure(
        self, error: TokenRefreshError, refresh_token: str | None
    ) -> None:
        logger.warning(f"Token refresh failed: {error.message}")
        callback = self.config.on_token_refresh_failure
        if callback is None:
            return
        context = RefreshFailureContext(
            original_error=error.cause or error,
            refresh_token=refresh_token,
            attempt_count=1,
        )
        try:
            result = callback(error, context)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.warning(f"Token refresh failure callback failed: {e}")


def _json_or_empty(response: httpx.Response) -> dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {"body": body}


__all__ = ["TokenRefresher"]
