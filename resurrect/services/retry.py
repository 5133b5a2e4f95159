"""Bounded exponential backoff for provider calls."""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from ..errors import ProviderTransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def call_with_retry(
    operation: Callable[..., Awaitable[T]],
    *args,
    attempts: int = 3,
    base_delay: float = 0.5,
) -> T:
    """Await ``operation(*args)``, retrying ProviderTransientError.

    Waits ``base_delay * 2**attempt`` between tries and re-raises the last
    error once ``attempts`` is exhausted. Other errors propagate immediately.
    """
    attempts = max(attempts, 1)
    name = getattr(operation, "__name__", "provider call")
    for attempt in range(attempts - 1):
        try:
            return await operation(*args)
        except ProviderTransientError as e:
            logger.warning(f"{name} failed (attempt {attempt + 1}/{attempts}): {e}")
            await asyncio.sleep(base_delay * 2 ** attempt)
    return await operation(*args)
