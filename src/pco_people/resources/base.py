# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Shared plumbing for resource callers."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..types.context import ContextLike, RequestContext

if TYPE_CHECKING:
    from ..core.executor import RequestExecutor
    from ..core.pagination import Paginator
    from ..protocols.file_transport import FileTransport


class BaseResource:
    """
    Base class for one family of REST endpoints.

    Resource callers are thin: they build the endpoint path, query
    parameters and context, and hand the call to the RequestExecutor.
    """

    def __init__(
        self,
        executor: RequestExecutor,
        paginator: Paginator,
        file_transport: FileTransport | None = None,
    ):
        self.executor = executor
        self.paginator = paginator
        self.file_transport = file_transport

    @staticmethod
    def _context(
        context: ContextLike,
        endpoint: str,
        method: str,
        **metadata: Any,
    ) -> RequestContext:
        """Caller context extended with this call's endpoint, method and ids."""
        extra: Mapping[str, Any] = {k: v for k, v in metadata.items() if v is not None}
        return RequestContext.coerce(context).merge(
            {"endpoint": endpoint, "method": method, "metadata": dict(extra)}
        )


__all__ = ["BaseResource"]
