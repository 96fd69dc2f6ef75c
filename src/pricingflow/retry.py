"""Retry helpers for the asynchronous save callback."""
from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, TypeVar

from .config import RetryPolicy

T = TypeVar("T")


async def execute_with_retry(
    action: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    description: str,
    logger,
    sleeper: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    """Await ``action()`` with retry/backoff semantics.

    Each attempt is bounded by ``policy.timeout_seconds`` when set; the last
    failure is re-raised once ``policy.retries`` is exhausted.
    """

    attempt = 0
    while True:
        try:
            if policy.timeout_seconds:
                return await asyncio.wait_for(action(), timeout=policy.timeout_seconds)
            return await action()
        except Exception as exc:
            attempt += 1
            if attempt > policy.retries:
                raise
            delay = max(0.0, policy.backoff_factor * (2 ** (attempt - 1)))
            if delay:
                logger.warning(
                    "Retrying %s in %.2fs (%d/%d attempts) after error: %s",
                    description,
                    delay,
                    attempt,
                    policy.retries,
                    exc,
                )
                await sleeper(delay)
            else:
                logger.warning(
                    "Retrying %s (%d/%d attempts) after error: %s",
                    description,
                    attempt,
                    policy.retries,
                    exc,
                )


__all__ = ["execute_with_retry"]
