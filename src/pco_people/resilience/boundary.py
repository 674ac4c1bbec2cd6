# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Top-level error boundary for public client calls.

Guarantees that callers only ever see PcoError, with the call's
RequestContext merged into whatever context the failure already carried.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from ..exceptions import PcoError
from ..types.context import ContextLike, RequestContext
from .classifier import unknown_error

T = TypeVar("T")


async def with_error_boundary(
    operation: Callable[[], Awaitable[T]], context: ContextLike = None
) -> T:
    """
    Await ``operation``, converting any failure into a PcoError.

    Args:
        operation: Zero-argument coroutine function
        context: Context merged under the error's own context

    Raises:
        PcoError: Always, on failure
    """
    ctx = RequestContext.coerce(context)
    try:
        return await operation()
    except asyncio.CancelledError:
        raise
    except PcoError as e:
        raise e.with_context(ctx) from (e.cause if e.cause is not None else e)
    except Exception as e:
        raise unknown_error(e, ctx) from e


__all__ = ["with_error_boundary"]
