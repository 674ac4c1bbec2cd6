"""
Unit tests for RequestExecutor.

Tests cover:
- URL, header and body construction
- Success, DELETE and empty responses
- Retry of transient failures (5xx, network, timeout)
- 429 handling through the rate limiter, with its replay bound
- 401 recovery through a single token refresh
- Typed errors carrying the request context
- Metrics recorded along the way
"""

import json
from unittest.mock import Mock

import httpx
import pytest

from pco_people.config import ClientConfig, RetryPolicy
from pco_people.core.executor import RequestExecutor
from pco_people.exceptions import PcoError, TokenRefreshError
from pco_people.limiter.rate_limiter import RateLimiter
from pco_people.types.errors import ErrorCategory

TOKEN_PATH = "/oauth/token"


def instant_retry(max_retries=3):
    return RetryPolicy(max_retries=max_retries, base_delay=0.0, max_delay=0.0)


class TestRequestConstruction:
    """Tests for URL, headers and body."""

    def test_build_url_relative(self, make_executor, config):
        """Test relative endpoints are appended to the base URL."""
        executor = make_executor(Mock(), config)
        assert executor.build_url("/people") == (
            "https://api.planningcenteronline.com/people/v2/people"
        )
        assert executor.build_url("people") == (
            "https://api.planningcenteronline.com/people/v2/people"
        )

    def test_build_url_absolute_and_params(self, make_executor, config):
        """Test absolute URLs are kept and parameters merged in."""
        executor = make_executor(Mock(), config)
        url = executor.build_url(
            "https://api.planningcenteronline.com/people/v2/people?offset=25",
            {"per_page": 25, "skip": None},
        )
        parsed = httpx.URL(url)
        assert parsed.params["offset"] == "25"
        assert parsed.params["per_page"] == "25"
        assert "skip" not in parsed.params

    def test_build_body(self, make_executor, config):
        """Test POST/PATCH wrap attributes; other methods send no body."""
        executor = make_executor(Mock(), config)
        assert executor.build_body("POST", {"first_name": "Ada"}) == {
            "data": {"attributes": {"first_name": "Ada"}}
        }
        assert executor.build_body("GET", {"first_name": "Ada"}) is None
        assert executor.build_body("PATCH", None) is None

    @pytest.mark.asyncio
    async def test_get_sends_query_and_headers(self, make_executor, config):
        """Test a GET carries query parameters and auth headers."""
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"data": {"id": "1"}})

        executor = make_executor(handler, config)
        result = await executor.get(
            "/people", {"where[status]": "active", "include": "emails"}
        )

        assert result == {"data": {"id": "1"}}
        request = seen[0]
        assert request.method == "GET"
        assert request.url.path == "/people/v2/people"
        assert request.url.params["where[status]"] == "active"
        assert request.url.params["include"] == "emails"
        assert request.headers["Authorization"] == "Bearer token"
        assert request.headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_post_sends_json_api_body(self, make_executor, config):
        """Test POST bodies are wrapped in data.attributes."""
        seen = []

        def handler(request):
            seen.append(json.loads(request.content))
            return httpx.Response(201, json={"data": {"id": "9"}})

        executor = make_executor(handler, config)
        result = await executor.post("/people", {"first_name": "Ada"})

        assert result == {"data": {"id": "9"}}
        assert seen == [{"data": {"attributes": {"first_name": "Ada"}}}]

    @pytest.mark.asyncio
    async def test_delete_returns_none(self, make_executor, config):
        """Test DELETE resolves to None."""

        def handler(request):
            assert request.method == "DELETE"
            return httpx.Response(204)

        executor = make_executor(handler, config)
        assert await executor.delete("/people/1") is None

    @pytest.mark.asyncio
    async def test_empty_body_returns_none(self, make_executor, config):
        """Test a 2xx without content resolves to None."""
        executor = make_executor(lambda request: httpx.Response(200), config)
        assert await executor.get("/people") is None

    @pytest.mark.asyncio
    async def test_invalid_json_is_unknown_error(self, make_executor, config):
        """Test an undecodable 2xx body raises an unknown error."""
        executor = make_executor(
            lambda request: httpx.Response(200, content=b"<html>"), config
        )
        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people")
        assert exc_info.value.category is ErrorCategory.UNKNOWN


class TestTransientFailures:
    """Tests for retried failures."""

    @pytest.mark.asyncio
    async def test_server_error_then_success(self, make_executor, config):
        """Test a 500 followed by 200 succeeds after two attempts."""
        responses = [
            httpx.Response(500, json={"errors": [{"title": "Internal"}]}),
            httpx.Response(200, json={"data": []}),
        ]
        calls = []

        def handler(request):
            calls.append(request)
            return responses[len(calls) - 1]

        on_retry = Mock()
        config.retry = RetryPolicy(
            max_retries=3, base_delay=0.0, max_delay=0.0, on_retry=on_retry
        )
        executor = make_executor(handler, config)

        assert await executor.get("/people") == {"data": []}
        assert len(calls) == 2
        on_retry.assert_called_once()
        assert on_retry.call_args.args[0].status == 500

    @pytest.mark.asyncio
    async def test_server_error_exhausts_retries(self, make_executor, config, metrics):
        """Test persistent 503s surface as a server error after n+1 attempts."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(503)

        config.retry = instant_retry(2)
        executor = make_executor(handler, config, metrics)

        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people")

        assert len(calls) == 3
        assert exc_info.value.category is ErrorCategory.SERVER
        assert exc_info.value.status == 503
        assert metrics.get_sample("pco_retries_total", {"category": "server"}) == 2.0
        assert metrics.get_sample(
            "pco_request_failures_total", {"category": "server"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_timeout(self, make_executor):
        """Test timeouts are retried and then surface as network timeouts."""
        calls = []

        def handler(request):
            calls.append(request)
            raise httpx.ReadTimeout("timed out", request=request)

        config = ClientConfig(access_token="t", timeout=5.0, retry=instant_retry(1))
        executor = make_executor(handler, config)

        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people")

        error = exc_info.value
        assert len(calls) == 2
        assert error.category is ErrorCategory.NETWORK
        assert error.is_timeout is True
        assert error.timeout == 5.0
        assert error.status is None
        assert error.message == "Request timed out after 5s: GET /people"

    @pytest.mark.asyncio
    async def test_unset_timeout_keeps_injected_client_timeout(self, config):
        """Test an unset config timeout leaves the http client's timeout in force."""
        seen = []

        def handler(request):
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, json={"data": []})

        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler), timeout=5.0
        )
        executor = RequestExecutor(config, http_client, RateLimiter(100, 60.0))

        await executor.get("/people")

        assert config.timeout is None
        assert seen == [{"connect": 5.0, "read": 5.0, "write": 5.0, "pool": 5.0}]

    @pytest.mark.asyncio
    async def test_config_timeout_overrides_client_timeout(self):
        """Test a configured timeout is applied per request."""
        seen = []

        def handler(request):
            seen.append(request.extensions["timeout"])
            return httpx.Response(200, json={"data": []})

        http_client = httpx.AsyncClient(
            transport=httpx.MockTransport(handler), timeout=5.0
        )
        config = ClientConfig(access_token="t", timeout=2.0)
        executor = RequestExecutor(config, http_client, RateLimiter(100, 60.0))

        await executor.get("/people")

        assert seen == [{"connect": 2.0, "read": 2.0, "write": 2.0, "pool": 2.0}]

    @pytest.mark.asyncio
    async def test_network_error(self, make_executor, config):
        """Test connection failures surface as network errors."""

        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        config.retry = instant_retry(0)
        executor = make_executor(handler, config)

        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people")

        assert exc_info.value.category is ErrorCategory.NETWORK
        assert exc_info.value.message == "Network error: connection refused"
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_failed_attempts_still_consume_budget(self, make_executor, config):
        """Test every network attempt is recorded by the rate limiter."""

        def handler(request):
            raise httpx.ConnectError("down", request=request)

        config.retry = instant_retry(2)
        executor = make_executor(handler, config, max_requests=10)

        with pytest.raises(PcoError):
            await executor.get("/people")

        assert executor.rate_limiter.get_rate_limit_info().remaining == 7
        assert executor.rate_limiter.get_debug_info()["reserved"] == 0


class TestRateLimiting:
    """Tests for 429 handling."""

    @pytest.mark.asyncio
    async def test_429_waits_retry_after_then_succeeds(
        self, make_executor, config, fake_clock, metrics
    ):
        """Test a 429 with Retry-After is replayed after the server's delay."""
        responses = [
            httpx.Response(429, headers={"Retry-After": "2"}),
            httpx.Response(200, json={"data": []}),
        ]
        calls = []

        def handler(request):
            calls.append(fake_clock())
            return responses[len(calls) - 1]

        executor = make_executor(handler, config, metrics)

        assert await executor.get("/people") == {"data": []}
        assert len(calls) == 2
        assert calls[1] - calls[0] == pytest.approx(2.0)
        assert metrics.get_sample("pco_rate_limited_responses_total") == 1.0
        assert metrics.get_sample("pco_retries_total", {"category": "rate_limit"}) is None

    @pytest.mark.asyncio
    async def test_429_without_headers_does_not_spin(
        self, make_executor, config, fake_clock
    ):
        """Test a bare 429 blocks for a full window before replaying."""
        responses = [httpx.Response(429), httpx.Response(200, json={"data": []})]
        calls = []

        def handler(request):
            calls.append(fake_clock())
            return responses[len(calls) - 1]

        executor = make_executor(handler, config, max_requests=100, window_seconds=20.0)

        await executor.get("/people")

        assert calls[1] - calls[0] == pytest.approx(20.0)

    @pytest.mark.asyncio
    async def test_429_replays_are_bounded(self, make_executor):
        """Test endless 429s surface as a rate limit error once the bound is hit."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(
                429,
                headers={"Retry-After": "1"},
                json={
                    "errors": [
                        {"detail": "Rate limit exceeded: 118 of 100 requests per 20 seconds"}
                    ]
                },
            )

        config = ClientConfig(
            access_token="t", max_rate_limit_retries=2, retry=instant_retry(0)
        )
        executor = make_executor(handler, config)

        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people")

        error = exc_info.value
        assert len(calls) == 3
        assert error.category is ErrorCategory.RATE_LIMIT
        assert error.status == 429
        assert error.retry_after == 1.0
        assert "Rate limit exceeded" in error.message

    @pytest.mark.asyncio
    async def test_server_headers_update_limiter(self, make_executor, config):
        """Test rate limit headers on responses feed the limiter."""

        def handler(request):
            return httpx.Response(
                200,
                json={"data": []},
                headers={
                    "X-PCO-API-Request-Rate-Limit": "100",
                    "X-PCO-API-Request-Rate-Period": "20",
                    "X-PCO-API-Request-Rate-Count": "40",
                },
            )

        executor = make_executor(handler, config)
        await executor.get("/people")

        info = executor.rate_limiter.get_rate_limit_info()
        assert info.limit == 100
        assert info.remaining == 60
        assert executor.rate_limiter.window == 20.0


class TestTokenRefresh:
    """Tests for 401 recovery."""

    @pytest.fixture
    def refresh_config(self):
        """Config able to refresh its token."""
        return ClientConfig(
            access_token="old",
            refresh_token="r1",
            on_token_refresh=Mock(),
            retry=instant_retry(3),
        )

    @pytest.mark.asyncio
    async def test_refresh_then_replay(self, make_executor, refresh_config):
        """Test a 401 triggers one refresh and the replay uses the new token."""
        api_auth = []
        token_calls = []

        def handler(request):
            if request.url.path == TOKEN_PATH:
                token_calls.append(request)
                return httpx.Response(
                    200, json={"access_token": "new", "refresh_token": "new2"}
                )
            api_auth.append(request.headers["Authorization"])
            if request.headers["Authorization"] == "Bearer new":
                return httpx.Response(200, json={"data": {"id": "1"}})
            return httpx.Response(401, json={"errors": [{"detail": "expired"}]})

        executor = make_executor(handler, refresh_config)

        assert await executor.get("/people/1") == {"data": {"id": "1"}}
        assert api_auth == ["Bearer old", "Bearer new"]
        assert len(token_calls) == 1
        assert refresh_config.access_token == "new"
        assert refresh_config.refresh_token == "new2"
        refresh_config.on_token_refresh.assert_called_once()

    @pytest.mark.asyncio
    async def test_refresh_only_config_obtains_token_on_first_401(self, make_executor):
        """Test a client with only a refresh token recovers through the 401 path."""
        config = ClientConfig(
            refresh_token="r0", on_token_refresh=Mock(), retry=instant_retry(0)
        )
        api_auth = []

        def handler(request):
            if request.url.path == TOKEN_PATH:
                return httpx.Response(200, json={"access_token": "fresh"})
            api_auth.append(request.headers.get("Authorization"))
            if request.headers.get("Authorization") == "Bearer fresh":
                return httpx.Response(200, json={"data": []})
            return httpx.Response(401)

        executor = make_executor(handler, config)

        assert await executor.get("/people") == {"data": []}
        assert api_auth == [None, "Bearer fresh"]
        assert config.access_token == "fresh"

    @pytest.mark.asyncio
    async def test_refresh_failure_surfaces_original_401(
        self, make_executor, refresh_config, metrics
    ):
        """Test a failed refresh raises the 401 error with the refresh failure attached."""
        token_body = {"error": "invalid_grant"}
        api_calls = []

        def handler(request):
            if request.url.path == TOKEN_PATH:
                return httpx.Response(400, json=token_body)
            api_calls.append(request)
            return httpx.Response(401, json={"errors": [{"detail": "expired"}]})

        executor = make_executor(handler, refresh_config, metrics)

        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people/1")

        error = exc_info.value
        assert len(api_calls) == 1
        assert error.category is ErrorCategory.AUTHENTICATION
        assert error.status == 401
        assert "Token refresh failed: 400 Bad Request" in error.message
        assert json.dumps(token_body) in error.message
        assert isinstance(error.__cause__, TokenRefreshError)
        assert refresh_config.access_token == "old"
        assert metrics.get_sample(
            "pco_token_refreshes_total", {"outcome": "failure"}
        ) == 1.0

    @pytest.mark.asyncio
    async def test_second_401_is_not_refreshed_again(self, make_executor, refresh_config):
        """Test a 401 after a successful refresh surfaces without another refresh."""
        api_calls = []
        token_calls = []

        def handler(request):
            if request.url.path == TOKEN_PATH:
                token_calls.append(request)
                return httpx.Response(200, json={"access_token": "new"})
            api_calls.append(request)
            return httpx.Response(401, json={"errors": [{"detail": "revoked"}]})

        executor = make_executor(handler, refresh_config)

        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people/1")

        assert exc_info.value.status == 401
        assert len(api_calls) == 2
        assert len(token_calls) == 1

    @pytest.mark.asyncio
    async def test_401_without_capability_surfaces_immediately(
        self, make_executor, config
    ):
        """Test a 401 is not retried when refresh is not configured."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(401)

        executor = make_executor(handler, config)

        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people")

        assert len(calls) == 1
        assert exc_info.value.category is ErrorCategory.AUTHENTICATION


class TestErrorContext:
    """Tests for errors surfaced to callers."""

    @pytest.mark.asyncio
    async def test_validation_error_carries_context(self, make_executor, config):
        """Test 422s surface immediately with all details and the call context."""
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(
                422,
                json={
                    "errors": [
                        {"detail": "first_name can't be blank"},
                        {"detail": "last_name can't be blank"},
                    ]
                },
            )

        executor = make_executor(handler, config)

        with pytest.raises(PcoError) as exc_info:
            await executor.post(
                "/people", {"first_name": ""}, context={"metadata": {"tenant": "a"}}
            )

        error = exc_info.value
        assert len(calls) == 1
        assert error.category is ErrorCategory.VALIDATION
        assert error.message == "first_name can't be blank; last_name can't be blank"
        assert error.context.endpoint == "/people"
        assert error.context.method == "POST"
        assert error.context.metadata["tenant"] == "a"

    @pytest.mark.asyncio
    async def test_forbidden(self, make_executor, config):
        """Test 403s surface as authorization errors."""
        executor = make_executor(lambda request: httpx.Response(403), config)
        with pytest.raises(PcoError) as exc_info:
            await executor.get("/people")
        assert exc_info.value.category is ErrorCategory.AUTHORIZATION
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_request_metrics(self, make_executor, config, metrics):
        """Test each HTTP exchange is counted by method and status."""
        executor = make_executor(
            lambda request: httpx.Response(200, json={"data": []}), config, metrics
        )
        await executor.get("/people")
        await executor.get("/people")
        assert metrics.get_sample(
            "pco_requests_total", {"method": "GET", "status": "200"}
        ) == 2.0
