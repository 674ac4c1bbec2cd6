# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Error taxonomy for failed API calls.

Category and severity are independent: the category says what went wrong
(and drives retry decisions), the severity says how much it matters.
"""

from enum import Enum


class ErrorCategory(Enum):
    """
    What kind of failure occurred.

    Categories:
        * **NETWORK**: No response was received (connection failure or timeout)
        * **AUTHENTICATION**: Credentials were rejected (401)
        * **AUTHORIZATION**: Credentials lack permission (403)
        * **VALIDATION**: The request was rejected as invalid (404, 422)
        * **RATE_LIMIT**: The request budget was exhausted (429)
        * **SERVER**: The API failed internally (5xx)
        * **EXTERNAL_API**: An auxiliary service (e.g. file upload) failed
        * **UNKNOWN**: Anything not covered above
    """

    NETWORK = "network"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    SERVER = "server"
    EXTERNAL_API = "external_api"
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """How serious a failure is, independent of its category."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Categories that are retried locally before surfacing to the caller
TRANSIENT_CATEGORIES = frozenset(
    {ErrorCategory.NETWORK, ErrorCategory.SERVER, ErrorCategory.RATE_LIMIT}
)


__all__ = [
    "TRANSIENT_CATEGORIES",
    "ErrorCategory",
    "ErrorSeverity",
]
