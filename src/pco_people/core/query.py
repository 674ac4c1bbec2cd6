# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
JSON:API query parameter helpers.

The People API filters with ``where[<field>]=<value>``, sideloads related
resources with a comma-joined ``include``, and paginates with ``per_page``
and ``page``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

QueryValue = str | int | float | bool | None


def build_query_params(
    where: Mapping[str, Any] | None = None,
    include: Iterable[str] | None = None,
    per_page: int | None = None,
    page: int | None = None,
    order: str | None = None,
    **extra: QueryValue,
) -> dict[str, QueryValue]:
    """
    Flatten structured query options into API query parameters.

    Example:
        >>> build_query_params(where={"status": "active"}, include=["emails", "phone_numbers"])
        {'where[status]': 'active', 'include': 'emails,phone_numbers'}
    """
    params: dict[str, QueryValue] = {}
    for key, value in (where or {}).items():
        params[f"where[{key}]"] = value
    if include:
        params["include"] = ",".join(include)
    if per_page:
        params["per_page"] = per_page
    if page:
        params["page"] = page
    if order:
        params["order"] = order
    params.update(extra)
    return params


def encode_params(params: Mapping[str, Any] | None) -> list[tuple[str, str]]:
    """
    Convert parameter values to query-string pairs.

    None values are dropped and booleans are rendered as ``true``/``false``.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in (params or {}).items():
        if value is None:
            continue
        if isinstance(value, bool):
            pairs.append((key, "true" if value else "false"))
        else:
            pairs.append((key, str(value)))
    return pairs


__all__ = ["QueryValue", "build_query_params", "encode_params"]
