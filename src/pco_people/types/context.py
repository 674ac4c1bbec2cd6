# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Request context carried through every layer for error attribution.

A RequestContext is created per logical call and never mutated; wrapping
layers extend it with ``merge``, which returns a new instance.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union


@dataclass(frozen=True)
class RequestContext:
    """
    Immutable description of the call being made.

    Attributes:
        endpoint: Target endpoint path or absolute URL
        method: HTTP method (upper-case)
        metadata: Free-form details such as the operation name or resource IDs
        timestamp: UTC time the context was created
    """

    endpoint: str | None = None
    method: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def coerce(cls, value: ContextLike) -> RequestContext:
        """Build a RequestContext from a context, a plain mapping, or None.

        Mapping keys other than ``endpoint``, ``method``, ``metadata`` and
        ``timestamp`` are folded into ``metadata`` so callers can pass
        ``{"person_id": "1"}`` directly.
        """
        if value is None:
            return cls()
        if isinstance(value, RequestContext):
            return value
        known = {"endpoint", "method", "metadata", "timestamp"}
        metadata = dict(value.get("metadata") or {})
        metadata.update({k: v for k, v in value.items() if k not in known})
        kwargs: dict[str, Any] = {
            "endpoint": value.get("endpoint"),
            "method": value.get("method"),
            "metadata": metadata,
        }
        if value.get("timestamp") is not None:
            kwargs["timestamp"] = value["timestamp"]
        return cls(**kwargs)

    def merge(self, other: ContextLike) -> RequestContext:
        """Return a new context with ``other``'s non-empty fields layered on top.

        Metadata dictionaries are merged key by key. The timestamp of
        ``self`` is kept, since it marks when the call started.
        """
        if other is None:
            return self
        overlay = RequestContext.coerce(other)
        metadata = {**self.metadata, **overlay.metadata}
        return RequestContext(
            endpoint=overlay.endpoint or self.endpoint,
            method=overlay.method or self.method,
            metadata=metadata,
            timestamp=self.timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "endpoint": self.endpoint,
            "method": self.method,
            "metadata": dict(self.metadata),
            "timestamp": self.timestamp.isoformat(),
        }


ContextLike = Union[RequestContext, Mapping[str, Any], None]


__all__ = ["ContextLike", "RequestContext"]
