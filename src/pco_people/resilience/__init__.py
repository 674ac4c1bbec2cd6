# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Error classification, retry with backoff, and the error boundary."""

from .boundary import with_error_boundary
from .classifier import (
    classify_error,
    classify_status,
    error_from_response,
    extract_api_errors,
    network_error,
    summarize_errors,
    timeout_error,
    unknown_error,
)
from .retry import BACKOFF_JITTER_FACTOR, RetryExecutor

__all__ = [
    "BACKOFF_JITTER_FACTOR",
    "RetryExecutor",
    "classify_error",
    "classify_status",
    "error_from_response",
    "extract_api_errors",
    "network_error",
    "summarize_errors",
    "timeout_error",
    "unknown_error",
    "with_error_boundary",
]
