"""Bounded, time-limited execution of outbound model-service calls.

One CallLimiter is created at startup and shared by every pipeline, so the
semaphore caps concurrent language-model and embedding requests process-wide.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from docsearch.domain.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CallLimiter:
    """Semaphore + timeout wrapper around async calls to the model provider."""

    def __init__(self, *, max_concurrency: int = 8, timeout_seconds: float = 60.0):
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._max_concurrency = max_concurrency
        self._timeout = timeout_seconds

    @property
    def max_concurrency(self) -> int:
        return self._max_concurrency

    @property
    def timeout_seconds(self) -> float:
        return self._timeout

    async def run(
        self,
        call: Callable[[], Awaitable[T]],
        *,
        service: str,
        operation: str,
    ) -> T:
        """Await ``call()`` once a slot is free, bounded by the configured timeout.

        The timeout covers the call itself, not the wait for a slot.

        Raises:
            ExternalServiceError: On timeout, or when the call fails with a
                non-domain exception (e.g. an httpx transport error).
        """
        async with self._semaphore:
            start = time.monotonic()
            try:
                return await asyncio.wait_for(call(), timeout=self._timeout)
            except asyncio.TimeoutError as e:
                elapsed = time.monotonic() - start
                logger.warning(
                    "%s %s timed out after %.1fs (limit %.1fs)",
                    service, operation, elapsed, self._timeout,
                )
                raise ExternalServiceError(
                    service, f"{operation} timed out after {self._timeout:.1f}s"
                ) from e
            except ExternalServiceError:
                raise
            except Exception as e:
                logger.warning("%s %s failed: %s", service, operation, e)
                raise ExternalServiceError(
                    service, f"{operation} failed: {type(e).__name__}: {e}"
                ) from e
