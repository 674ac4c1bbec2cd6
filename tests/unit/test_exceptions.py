"""Unit tests for the exceptions module.

Tests all exception classes defined in pco_people.exceptions.
"""

import pytest

from pco_people.exceptions import (
    ConfigurationError,
    PcoError,
    PcoPeopleError,
    TokenRefreshError,
)
from pco_people.types.context import RequestContext
from pco_people.types.errors import TRANSIENT_CATEGORIES, ErrorCategory, ErrorSeverity


class TestHierarchy:
    """Tests for the exception hierarchy."""

    @pytest.mark.parametrize(
        "cls", [ConfigurationError, PcoError, TokenRefreshError]
    )
    def test_inherits_from_root(self, cls):
        """Test every library exception derives from PcoPeopleError."""
        assert issubclass(cls, PcoPeopleError)

    def test_token_refresh_error_is_pco_error(self):
        """Test TokenRefreshError is a PcoError."""
        assert issubclass(TokenRefreshError, PcoError)


class TestPcoError:
    """Tests for PcoError."""

    def test_defaults(self):
        """Test default field values."""
        error = PcoError("oops")
        assert error.message == "oops"
        assert str(error) == "oops"
        assert error.category is ErrorCategory.UNKNOWN
        assert error.severity is ErrorSeverity.MEDIUM
        assert error.retryable is False
        assert error.status is None
        assert error.errors == ()
        assert error.context == RequestContext(timestamp=error.context.timestamp)
        assert error.is_timeout is False

    def test_summary_and_should_retry(self):
        """Test the summary line and retry flag."""
        error = PcoError(
            "Internal Server Error",
            category=ErrorCategory.SERVER,
            retryable=True,
            status=500,
        )
        assert error.summary == "[server 500] Internal Server Error"
        assert error.should_retry() is True

    def test_to_dict(self):
        """Test the structured snapshot."""
        error = PcoError(
            "blank",
            category=ErrorCategory.VALIDATION,
            status=422,
            errors=[{"detail": "blank"}],
            context=RequestContext(endpoint="/people", method="POST"),
        )
        data = error.to_dict()
        assert data["name"] == "PcoError"
        assert data["category"] == "validation"
        assert data["severity"] == "medium"
        assert data["errors"] == [{"detail": "blank"}]
        assert data["context"]["endpoint"] == "/people"
        assert data["context"]["method"] == "POST"

    def test_with_context_returns_new_error(self):
        """Test with_context clones instead of mutating."""
        error = PcoError("x", context=RequestContext(endpoint="/a"))
        clone = error.with_context(RequestContext(method="GET", metadata={"k": "v"}))
        assert clone is not error
        assert clone.context.endpoint == "/a"
        assert clone.context.method == "GET"
        assert clone.context.metadata == {"k": "v"}
        assert error.context.method is None

    def test_cause_is_chained(self):
        """Test the cause becomes __cause__."""
        cause = OSError("down")
        assert PcoError("x", cause=cause).__cause__ is cause


class TestTokenRefreshError:
    """Tests for TokenRefreshError."""

    def test_defaults(self):
        """Test refresh failures are non-retryable authentication errors."""
        error = TokenRefreshError("Token refresh failed", status=400, body={"a": 1})
        assert error.category is ErrorCategory.AUTHENTICATION
        assert error.severity is ErrorSeverity.HIGH
        assert error.retryable is False
        assert error.status == 400
        assert error.body == {"a": 1}

    def test_with_context_keeps_type_and_body(self):
        """Test cloning preserves the subclass and body."""
        error = TokenRefreshError("failed", body={"error": "invalid_grant"})
        clone = error.with_context(RequestContext(endpoint="/people"))
        assert isinstance(clone, TokenRefreshError)
        assert clone.body == {"error": "invalid_grant"}


class TestErrorTypes:
    """Tests for the category and severity enums."""

    def test_transient_categories(self):
        """Test network, server and rate_limit are the transient categories."""
        assert TRANSIENT_CATEGORIES == {
            ErrorCategory.NETWORK,
            ErrorCategory.SERVER,
            ErrorCategory.RATE_LIMIT,
        }

    def test_category_values(self):
        """Test the wire values of the categories."""
        assert [c.value for c in ErrorCategory] == [
            "network",
            "authentication",
            "authorization",
            "validation",
            "rate_limit",
            "server",
            "external_api",
            "unknown",
        ]
