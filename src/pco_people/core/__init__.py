# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Core request pipeline: execution, query building and pagination."""

from .executor import JsonDocument, RequestExecutor, is_absolute_url
from .pagination import DEFAULT_MAX_PAGES, DEFAULT_PER_PAGE, Paginator
from .query import QueryValue, build_query_params, encode_params

__all__ = [
    "DEFAULT_MAX_PAGES",
    "DEFAULT_PER_PAGE",
    "JsonDocument",
    "Paginator",
    "QueryValue",
    "RequestExecutor",
    "build_query_params",
    "encode_params",
    "is_absolute_url",
]
