# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Keyed registry of PcoClient instances.

Applications serving several Planning Center organizations keep one
client per organization so that each has its own credentials and rate
limit budget. The registry is an ordinary object owned by the
application; there is no module-level instance.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable, KeysView

from .client import PcoClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], PcoClient]


class ClientRegistry:
    """
    Caches clients by an application-defined key such as a tenant id.

    Example:
        >>> registry = ClientRegistry()
        >>> client = registry.get("org-42", lambda: PcoClient(config_for("org-42")))
        >>> ...
        >>> await registry.aclose()
    """

    def __init__(self) -> None:
        self._clients: dict[Hashable, PcoClient] = {}

    def get(self, key: Hashable, factory: ClientFactory) -> PcoClient:
        """
        Return the client for ``key``, creating it with ``factory`` if absent.

        A cached client that has been closed is replaced.
        """
        client = self._clients.get(key)
        if client is None or client.closed:
            client = factory()
            self._clients[key] = client
            logger.debug(f"Created client for key {key!r}")
        return client

    def remove(self, key: Hashable) -> PcoClient | None:
        """Drop ``key`` from the registry and return its client, if any.

        The client is not closed; the caller decides its fate.
        """
        return self._clients.pop(key, None)

    def clear(self) -> None:
        """Forget every cached client without closing them."""
        self._clients.clear()

    def keys(self) -> KeysView[Hashable]:
        return self._clients.keys()

    async def aclose(self) -> None:
        """Close every cached client and empty the registry."""
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()

    def __contains__(self, key: object) -> bool:
        return key in self._clients

    def __len__(self) -> int:
        return len(self._clients)


__all__ = ["ClientFactory", "ClientRegistry"]
