# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the Planning Center People client.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from PcoPeopleError, making it easy to catch
every client-related exception with a single except clause.

Failures of API calls are always surfaced as PcoError, whose structured
fields (category, severity, retryable, status) allow programmatic handling.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from .types.context import RequestContext
from .types.errors import ErrorCategory, ErrorSeverity


class PcoPeopleError(Exception):
    """Common ancestor of everything pco_people raises on purpose.

    Both halves of the hierarchy derive from it: ConfigurationError, raised
    while a client is being built, and PcoError, raised by API calls and
    token refresh. A single ``except PcoPeopleError`` separates failures
    of Planning Center traffic from bugs in the calling code.

    Example:
        try:
            await client.people.get("123")
        except PcoPeopleError as e:
            logger.error(f"People API error: {e}")
    """

    pass


class ConfigurationError(PcoPeopleError):
    """Raised when client configuration is invalid.

    Common causes include:
    - No authentication method configured (no access token, no app id /
      app secret pair, and no refresh token with a refresh callback)
    - Non-positive rate limit, delay or timeout values
    - A backoff factor below 1
    """

    pass


class PcoError(PcoPeopleError):
    """Typed error describing a failed API call.

    Created once per failure and never mutated afterwards; use
    ``with_context`` to obtain a copy carrying additional context.

    Attributes:
        category: Failure category used for branching and retry decisions.
        severity: Severity level, independent of the category.
        retryable: Whether repeating the request may succeed.
        status: HTTP status code, None when no response was received.
        status_text: HTTP reason phrase, or a synthetic label for
            network failures.
        errors: Raw JSON:API ``errors[]`` objects from the response body.
        context: The RequestContext of the failing call.
        rate_limit_headers: Rate limit headers seen on the failing response.
        retry_after: Server-requested delay in seconds (429 responses).
        cause: The underlying exception, if any.
        is_timeout: True when the request was aborted by its timeout.
        timeout: The timeout in seconds that expired (timeouts only).

    Example:
        try:
            await client.people.create({"first_name": ""})
        except PcoError as e:
            if e.category is ErrorCategory.VALIDATION:
                show_form_errors(e.errors)
            elif e.retryable:
                schedule_retry()
    """

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        retryable: bool = False,
        status: int | None = None,
        status_text: str | None = None,
        errors: Sequence[Mapping[str, Any]] = (),
        context: RequestContext | None = None,
        rate_limit_headers: Mapping[str, str] | None = None,
        retry_after: float | None = None,
        cause: BaseException | None = None,
        is_timeout: bool = False,
        timeout: float | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.retryable = retryable
        self.status = status
        self.status_text = status_text
        self.errors: tuple[Mapping[str, Any], ...] = tuple(errors)
        self.context = context if context is not None else RequestContext()
        self.rate_limit_headers = dict(rate_limit_headers or {})
        self.retry_after = retry_after
        self.cause = cause
        self.is_timeout = is_timeout
        self.timeout = timeout
        if cause is not None:
            self.__cause__ = cause

    @property
    def summary(self) -> str:
        """One-line description: category, status and message."""
        status = f" {self.status}" if self.status is not None else ""
        return f"[{self.category.value}{status}] {self.message}"

    def should_retry(self) -> bool:
        return self.retryable

    def _copy_kwargs(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "severity": self.severity,
            "retryable": self.retryable,
            "status": self.status,
            "status_text": self.status_text,
            "errors": self.errors,
            "context": self.context,
            "rate_limit_headers": self.rate_limit_headers,
            "retry_after": self.retry_after,
            "cause": self.cause,
            "is_timeout": self.is_timeout,
            "timeout": self.timeout,
        }

    def with_context(self, context: RequestContext) -> PcoError:
        """Return a copy whose context is ``context`` overlaid by this error's own.

        Fields already set on the error win, since they were recorded
        closer to the failure.
        """
        kwargs = self._copy_kwargs()
        kwargs["context"] = context.merge(self.context)
        clone = type(self)._from_kwargs(self.message, kwargs, self)
        clone.__traceback__ = self.__traceback__
        return clone

    @classmethod
    def _from_kwargs(
        cls, message: str, kwargs: dict[str, Any], original: PcoError
    ) -> PcoError:
        return cls(message, **kwargs)

    def to_dict(self) -> dict[str, Any]:
        """Structured snapshot suitable for logging or JSON serialization."""
        return {
            "name": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "status": self.status,
            "status_text": self.status_text,
            "errors": [dict(e) for e in self.errors],
            "context": self.context.to_dict(),
            "rate_limit_headers": dict(self.rate_limit_headers),
            "retry_after": self.retry_after,
            "is_timeout": self.is_timeout,
        }

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, category={self.category.value}, "
            f"status={self.status}, retryable={self.retryable})"
        )


class TokenRefreshError(PcoError):
    """Raised when exchanging a refresh token for new credentials fails.

    Attributes:
        body: Parsed error body from the token endpoint ({} if unparseable
            or if no response was received).
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        status_text: str | None = None,
        body: Mapping[str, Any] | None = None,
        cause: BaseException | None = None,
        context: RequestContext | None = None,
        **kwargs: Any,
    ):
        kwargs.setdefault("category", ErrorCategory.AUTHENTICATION)
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        kwargs.setdefault("retryable", False)
        super().__init__(
            message,
            status=status,
            status_text=status_text,
            cause=cause,
            context=context,
            **kwargs,
        )
        self.body: dict[str, Any] = dict(body or {})

    @classmethod
    def _from_kwargs(
        cls, message: str, kwargs: dict[str, Any], original: PcoError
    ) -> PcoError:
        body = getattr(original, "body", None)
        return cls(message, body=body, **kwargs)


__all__ = [
    "ConfigurationError",
    "PcoError",
    "PcoPeopleError",
    "TokenRefreshError",
]
