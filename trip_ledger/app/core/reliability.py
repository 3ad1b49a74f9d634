"""
Reliability utilities.

Bounded retry for idempotent store reads. Writes never go through here.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from trip_ledger.app.core.config import settings
from trip_ledger.app.core.exceptions import AdapterIOError

logger = logging.getLogger("trip_ledger.reliability")

T = TypeVar("T")


class ReadRetryPolicy:
    """
    Retry an idempotent read a fixed number of times on AdapterIOError.

    ``retries`` counts the extra attempts after the first call, so the
    default of 1 means at most two calls.
    """
    def __init__(self, retries: int = 1, backoff_seconds: float = 0.05):
        self.retries = max(retries, 0)
        self.backoff_seconds = backoff_seconds

    async def call(self, func: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await func()
            except AdapterIOError as exc:
                if attempt >= self.retries:
                    raise
                attempt += 1
                logger.warning(
                    "Retrying store read",
                    extra={"store": exc.store, "operation": exc.operation, "attempt": attempt}
                )
                await asyncio.sleep(self.backoff_seconds * attempt)


# Shared policy for adapter reads
read_retry_policy = ReadRetryPolicy(retries=settings.store_read_retries)
