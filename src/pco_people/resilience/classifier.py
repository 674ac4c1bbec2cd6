# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Error classification for People API calls.

Turns HTTP error responses, transport exceptions and timeouts into PcoError
instances carrying a category, severity and retryable flag. Classification
never raises: anything unrecognized becomes an ``unknown`` error.

Status rules, checked in priority order:

    ======  ==============  =========  ========
    status  category        retryable  severity
    ======  ==============  =========  ========
    429     rate_limit      yes        medium
    401     authentication  no         high
    403     authorization   no         high
    422     validation      no         medium
    404     validation      no         medium
    >= 500  server          yes        high
    other   unknown         no         medium
    ======  ==============  =========  ========
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import httpx

from ..config import DEFAULT_TIMEOUT
from ..exceptions import PcoError
from ..types.context import ContextLike, RequestContext
from ..types.errors import ErrorCategory, ErrorSeverity
from ..types.rate_limit import RATE_LIMIT_HEADERS, RETRY_AFTER_HEADER

logger = logging.getLogger(__name__)


def classify_status(status: int) -> tuple[ErrorCategory, ErrorSeverity, bool]:
    """
    Map an HTTP status code to (category, severity, retryable).

    Args:
        status: HTTP status code of a non-2xx response

    Returns:
        Tuple of category, severity and retryable flag
    """
    if status == 429:
        return ErrorCategory.RATE_LIMIT, ErrorSeverity.MEDIUM, True
    if status == 401:
        return ErrorCategory.AUTHENTICATION, ErrorSeverity.HIGH, False
    if status == 403:
        return ErrorCategory.AUTHORIZATION, ErrorSeverity.HIGH, False
    if status in (404, 422):
        return ErrorCategory.VALIDATION, ErrorSeverity.MEDIUM, False
    if status >= 500:
        return ErrorCategory.SERVER, ErrorSeverity.HIGH, True
    return ErrorCategory.UNKNOWN, ErrorSeverity.MEDIUM, False


def extract_api_errors(body: Any) -> list[Mapping[str, Any]]:
    """Return the JSON:API ``errors[]`` objects from a decoded body."""
    if not isinstance(body, Mapping):
        return []
    errors = body.get("errors")
    if not isinstance(errors, list):
        return []
    return [e for e in errors if isinstance(e, Mapping)]


def summarize_errors(
    errors: list[Mapping[str, Any]], status: int, fallback: str | None = None
) -> str:
    """
    Build a human-readable summary from JSON:API error objects.

    Validation errors (422) list the ``detail`` of every error object. Other
    statuses use ``detail`` or ``title`` per object, falling back to the
    reason phrase when the body carries no errors.
    """
    if status == 422:
        details = [str(e["detail"]) for e in errors if e.get("detail")]
        if details:
            return "; ".join(details)
    if errors:
        return "; ".join(
            str(e.get("detail") or e.get("title") or "Unknown error") for e in errors
        )
    return fallback or f"HTTP {status}"


def _rate_limit_headers(headers: Mapping[str, str]) -> dict[str, str]:
    lowered = {str(k).lower(): v for k, v in headers.items()}
    return {
        name: lowered[name.lower()]
        for name in RATE_LIMIT_HEADERS
        if name.lower() in lowered
    }


def _parse_retry_after(headers: Mapping[str, str]) -> float | None:
    value = headers.get(RETRY_AFTER_HEADER)
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def error_from_response(
    response: httpx.Response,
    body: Any = None,
    context: ContextLike = None,
    *,
    cause: BaseException | None = None,
    note: str | None = None,
) -> PcoError:
    """
    Build a typed error from a non-2xx response.

    Args:
        response: The HTTP response
        body: Decoded JSON body, if any
        context: Context of the failing call
        cause: Exception to chain (e.g. a failed token refresh)
        note: Extra text appended to the summary

    Returns:
        PcoError classified by status code
    """
    status = response.status_code
    category, severity, retryable = classify_status(status)
    errors = extract_api_errors(body)
    message = summarize_errors(errors, status, response.reason_phrase)
    if note:
        message = f"{message}; {note}"
    headers = _rate_limit_headers(response.headers)
    return PcoError(
        message,
        category=category,
        severity=severity,
        retryable=retryable,
        status=status,
        status_text=response.reason_phrase,
        errors=errors,
        context=RequestContext.coerce(context),
        rate_limit_headers=headers,
        retry_after=_parse_retry_after(headers) if status == 429 else None,
        cause=cause,
    )


def timeout_error(
    operation: str,
    timeout: float | None,
    context: ContextLike = None,
    cause: BaseException | None = None,
) -> PcoError:
    """Build a retryable network error for a request aborted by its timeout."""
    seconds = timeout if timeout is not None else DEFAULT_TIMEOUT
    ctx = RequestContext.coerce(context).merge(
        {"metadata": {"operation": operation, "timeout": seconds}}
    )
    return PcoError(
        f"Request timed out after {seconds:g}s: {operation}",
        category=ErrorCategory.NETWORK,
        severity=ErrorSeverity.MEDIUM,
        retryable=True,
        status_text="Request Timeout",
        context=ctx,
        cause=cause,
        is_timeout=True,
        timeout=seconds,
    )


def network_error(
    error: BaseException, operation: str, context: ContextLike = None
) -> PcoError:
    """Build a retryable network error for a request that got no response."""
    ctx = RequestContext.coerce(context).merge(
        {"metadata": {"operation": operation}}
    )
    return PcoError(
        f"Network error: {error}" if str(error) else f"Network error: {type(error).__name__}",
        category=ErrorCategory.NETWORK,
        severity=ErrorSeverity.MEDIUM,
        retryable=True,
        status_text="Network Error",
        context=ctx,
        cause=error,
    )


def unknown_error(
    error: BaseException,
    context: ContextLike = None,
    severity: ErrorSeverity = ErrorSeverity.HIGH,
) -> PcoError:
    """Wrap an unexpected exception as an ``unknown`` error."""
    return PcoError(
        str(error) or type(error).__name__,
        category=ErrorCategory.UNKNOWN,
        severity=severity,
        retryable=False,
        status_text="Unknown Error",
        context=RequestContext.coerce(context),
        cause=error,
    )


def classify_error(error: BaseException, context: ContextLike = None) -> PcoError:
    """
    Convert any failure into a PcoError.

    Existing PcoErrors are returned unchanged. Timeouts and transport
    failures become retryable network errors; HTTPStatusError is classified
    by its response; anything else is ``unknown``.

    This function never raises.
    """
    if isinstance(error, PcoError):
        return error
    try:
        if isinstance(error, (httpx.TimeoutException, asyncio.TimeoutError, TimeoutError)):
            return timeout_error(type(error).__name__, None, context, cause=error)
        if isinstance(error, httpx.HTTPStatusError):
            try:
                body = error.response.json()
            except ValueError:
                body = {}
            return error_from_response(error.response, body, context, cause=error)
        if isinstance(error, (httpx.TransportError, ConnectionError)):
            return network_error(error, type(error).__name__, context)
        return unknown_error(error, context)
    except Exception as e:  # pragma: no cover - last-resort guard
        logger.warning(f"Failed to classify {type(error).__name__}: {e}")
        return PcoError(
            str(error) or type(error).__name__,
            category=ErrorCategory.UNKNOWN,
            severity=ErrorSeverity.HIGH,
            cause=error,
        )


__all__ = [
    "classify_error",
    "classify_status",
    "error_from_response",
    "extract_api_errors",
    "network_error",
    "summarize_errors",
    "timeout_error",
    "unknown_error",
]
