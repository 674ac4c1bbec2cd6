# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Pagination helpers for JSON:API list endpoints.

List responses carry ``links.next`` while more pages remain. That link is
absolute and already encodes the query, so follow-up requests use it as
the endpoint and send no parameters of their own.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from typing import Any

from ..types.context import ContextLike, RequestContext
from ..resilience.boundary import with_error_boundary
from .executor import RequestExecutor

logger = logging.getLogger(__name__)

DEFAULT_MAX_PAGES = 1000
DEFAULT_PER_PAGE = 100


def _next_link(document: Mapping[str, Any] | None) -> str | None:
    if not document:
        return None
    links = document.get("links")
    if not isinstance(links, Mapping):
        return None
    next_link = links.get("next")
    return next_link if isinstance(next_link, str) and next_link else None


def _page_data(document: Mapping[str, Any] | None) -> list[Any]:
    if not document:
        return []
    data = document.get("data")
    return list(data) if isinstance(data, list) else []


class Paginator:
    """
    Walks paginated list endpoints through a RequestExecutor.

    Example:
        >>> paginator = Paginator(executor)
        >>> people = await paginator.get_all_pages("/people", {"per_page": 100})
    """

    def __init__(self, executor: RequestExecutor):
        self.executor = executor

    async def iter_pages(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> AsyncIterator[list[Any]]:
        """
        Yield each page's ``data`` list, following ``links.next``.

        Stops when a page has no ``next`` link or ``max_pages`` pages have
        been fetched.
        """
        current: str | None = endpoint
        current_params: Mapping[str, Any] | None = params
        pages = 0
        while current is not None and pages < max_pages:
            document = await self.executor.get(current, current_params, context)
            pages += 1
            yield _page_data(document)
            current = _next_link(document)
            current_params = None
            if current is not None:
                logger.debug(f"Following next link after page {pages}: {current}")

    async def get_all_pages(
        self,
        endpoint: str,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
        max_pages: int = DEFAULT_MAX_PAGES,
    ) -> list[Any]:
        """
        Fetch every page and return the concatenated ``data`` arrays.

        Raises:
            PcoError: If any page request fails
        """
        ctx = RequestContext.coerce(context).merge({"endpoint": endpoint})

        async def collect() -> list[Any]:
            items: list[Any] = []
            async for page in self.iter_pages(endpoint, params, context, max_pages):
                items.extend(page)
            return items

        return await with_error_boundary(collect, ctx)

    async def get_page(
        self,
        endpoint: str,
        page: int = 1,
        per_page: int = DEFAULT_PER_PAGE,
        params: Mapping[str, Any] | None = None,
        context: ContextLike = None,
    ) -> dict[str, Any] | None:
        """Fetch a single page by number."""
        merged = {**(params or {}), "page": page, "per_page": per_page}
        return await self.executor.get(endpoint, merged, context)


__all__ = ["DEFAULT_MAX_PAGES", "DEFAULT_PER_PAGE", "Paginator"]
