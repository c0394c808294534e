"""Bounded exponential-backoff retry shared by the ledger and bridge adapters."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from config.settings import settings
from src.dlmm_common.errors import RetryExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def with_retry(
    fn: Callable[[], Awaitable[T]],
    context: str,
    max_retries: int | None = None,
    initial_delay_ms: int | None = None,
    backoff_factor: float | None = None,
) -> T:
    """Run ``fn`` up to ``max_retries + 1`` times.

    The delay starts at ``initial_delay_ms`` and is multiplied by
    ``backoff_factor`` after every failed attempt. The last error is
    surfaced as a single RetryExhaustedError.
    """
    retries = settings.RETRY_MAX_RETRIES if max_retries is None else max_retries
    delay_ms = settings.RETRY_INITIAL_DELAY_MS if initial_delay_ms is None else initial_delay_ms
    factor = settings.RETRY_BACKOFF_FACTOR if backoff_factor is None else backoff_factor

    last_error: Exception | None = None
    for attempt in range(retries + 1):
        if attempt > 0:
            logger.debug("[%s] retry %d", context, attempt)
        try:
            return await fn()
        except Exception as exc:
            last_error = exc
            logger.warning(
                "[%s] failed (attempt %d/%d): %s", context, attempt + 1, retries + 1, exc
            )
            if attempt < retries:
                logger.debug("[%s] waiting %dms before retry", context, delay_ms)
                await asyncio.sleep(delay_ms / 1000)
                delay_ms = int(delay_ms * factor)

    raise RetryExhaustedError(context, retries + 1, str(last_error)) from last_error
