# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Retry with exponential backoff and jitter.

RetryExecutor runs an async operation up to ``max_retries + 1`` times,
classifying each failure to decide whether another attempt is worthwhile.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from ..config import RetryPolicy
from ..exceptions import PcoError
from ..types.context import ContextLike
from ..types.errors import ErrorCategory
from .classifier import classify_error

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Jitter adds up to this fraction of the exponential delay
BACKOFF_JITTER_FACTOR = 0.1


class RetryExecutor:
    """
    Executes an operation, retrying retryable failures per a RetryPolicy.

    Non-retryable errors are raised immediately. When every attempt fails
    the last error is raised as a PcoError; errors are never swallowed.

    Attributes:
        policy: Default retry policy
        on_retry_hook: Internal observer called as (error, attempt) before
            each retry, in addition to the policy's ``on_retry`` callback

    Example:
        >>> executor = RetryExecutor(RetryPolicy(max_retries=2))
        >>> result = await executor.execute(lambda: fetch_page(1))
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rng: random.Random | None = None,
        on_retry_hook: Callable[[PcoError, int], None] | None = None,
    ):
        """
        Initialize the executor.

        Args:
            policy: Retry policy used when ``execute`` is given none.
            sleep: Async sleep function, injectable for tests.
            rng: Random source for jitter.
            on_retry_hook: Observer for metrics.
        """
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rng = rng or random.Random()
        self.on_retry_hook = on_retry_hook

    @staticmethod
    def exponential_delay(policy: RetryPolicy, attempt: int) -> float:
        """
        Pre-jitter delay before retry ``attempt`` (0-based), capped at max_delay.

        Non-decreasing in ``attempt`` for any valid policy.
        """
        delay = policy.base_delay * (policy.backoff_factor**attempt)
        return min(delay, policy.max_delay)

    def calculate_delay(
        self, policy: RetryPolicy, attempt: int, error: PcoError | None = None
    ) -> float:
        """
        Delay before retry ``attempt`` (0-based), including jitter.

        A rate-limit error carrying Retry-After uses that value instead.
        The result never exceeds ``policy.max_delay``.
        """
        if (
            error is not None
            and error.category is ErrorCategory.RATE_LIMIT
            and error.retry_after is not None
            and error.retry_after > 0
        ):
            return float(min(error.retry_after, policy.max_delay))

        exponential = policy.base_delay * (policy.backoff_factor**attempt)
        jitter = self._rng.uniform(0, exponential * BACKOFF_JITTER_FACTOR)
        delay = min(policy.max_delay, exponential + jitter)
        logger.debug(f"Calculated backoff for attempt {attempt}: {delay:.2f}s")
        return delay

    @staticmethod
    def is_retryable(policy: RetryPolicy, error: PcoError) -> bool:
        """Decide whether ``error`` may be retried under ``policy``."""
        if policy.retryable_statuses is not None and error.status is not None:
            return error.status in policy.retryable_statuses
        return error.retryable

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        policy: RetryPolicy | None = None,
        context: ContextLike = None,
    ) -> T:
        """
        Run ``operation`` with retries.

        Args:
            operation: Zero-argument coroutine function
            policy: Overrides the executor's default policy
            context: Context attached to errors that are not yet typed

        Returns:
            The operation's result

        Raises:
            PcoError: The first non-retryable error, or the last error once
                all attempts are exhausted
        """
        policy = policy or self.policy
        total_attempts = policy.max_retries + 1

        for attempt in range(total_attempts):
            try:
                return await operation()
            except asyncio.CancelledError:
                raise  # Always re-raise for graceful shutdown
            except Exception as e:
                error = classify_error(e, context)
                if attempt + 1 >= total_attempts or not self.is_retryable(policy, error):
                    if error is e:
                        raise
                    raise error from e

                delay = self.calculate_delay(policy, attempt, error)
                logger.warning(
                    f"Attempt {attempt + 1}/{total_attempts} failed "
                    f"({error.category.value}): {error.message}; retrying in {delay:.2f}s"
                )
                if delay > 0:
                    await self._sleep(delay)
                await self._notify(policy, error, attempt + 1)

        # Unreachable: the loop either returns or raises
        raise RuntimeError("retry loop exited without a result")

    async def _notify(self, policy: RetryPolicy, error: PcoError, attempt: int) -> None:
        if self.on_retry_hook is not None:
            try:
                self.on_retry_hook(error, attempt)
            except Exception as hook_error:
                logger.warning(f"Retry hook failed: {hook_error}")
        if policy.on_retry is None:
            return
        try:
            result = policy.on_retry(error, attempt)
            if inspect.isawaitable(result):
                await result
        except Exception as callback_error:
            logger.warning(f"on_retry callback failed: {callback_error}")


__all__ = ["BACKOFF_JITTER_FACTOR", "RetryExecutor"]
