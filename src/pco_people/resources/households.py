# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Household endpoints."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..core.executor import JsonDocument
from ..core.query import build_query_params
from ..types.context import ContextLike
from .base import BaseResource


class HouseholdsResource(BaseResource):
    """Read access to ``/households``."""

    async def list(
        self,
        where: Mapping[str, Any] | None = None,
        include: Iterable[str] | None = None,
        per_page: int | None = None,
        page: int | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        endpoint = "/households"
        return await self.executor.get(
            endpoint,
            build_query_params(where=where, include=include, per_page=per_page, page=page),
            self._context(context, endpoint, "GET"),
        )

    async def get(
        self,
        household_id: str,
        include: Iterable[str] | None = None,
        context: ContextLike = None,
    ) -> JsonDocument | None:
        endpoint = f"/households/{household_id}"
        return await self.executor.get(
            endpoint,
            build_query_params(include=include),
            self._context(context, endpoint, "GET", household_id=household_id),
        )


__all__ = ["HouseholdsResource"]
