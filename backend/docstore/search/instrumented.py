"""Search index wrapper adding a hard timeout, metrics and structured logging.

No retries: a failed notification surfaces as SearchIndexError and the
caller rolls back the transaction it belongs to.
"""

import asyncio
import time
from collections.abc import Awaitable

from backend.docstore.errors import SearchIndexError
from backend.docstore.models.pages import Page
from backend.docstore.search.base import SearchIndex


# Metrics interface (implemented by PrometheusIndexMetrics)
class IndexMetrics:
    """Interface for search index metrics."""

    def record_latency(self, operation: str, outcome: str, latency_ms: float) -> None:
        """Record notification latency."""
        pass

    def inc_error(self, operation: str, reason: str) -> None:
        """Increment error counter."""
        pass


# Logging interface (implemented by StructuredIndexLogger)
class IndexLogger:
    """Interface for structured logging."""

    def log_call(
        self,
        operation: str,
        org_id: str,
        page_id: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one index notification."""
        pass


class InstrumentedSearchIndex:
    """SearchIndex decorator that times, bounds and reports every notification."""

    def __init__(
        self,
        inner: SearchIndex,
        timeout_ms: int = 2000,
        metrics: IndexMetrics | None = None,
        logger: IndexLogger | None = None,
    ) -> None:
        """Initialize wrapper.

        Args:
            inner: Index receiving the notifications
            timeout_ms: Hard timeout per notification
            metrics: Metrics recorder (optional, defaults to no-op)
            logger: Structured logger (optional, defaults to no-op)
        """
        self._inner = inner
        self._timeout = timeout_ms / 1000
        self._metrics = metrics or IndexMetrics()
        self._logger = logger or IndexLogger()

    async def add(self, org_id: str, page: Page) -> None:
        await self._call("add", org_id, page.ref_id, self._inner.add(org_id, page))

    async def update(self, org_id: str, page: Page) -> None:
        await self._call("update", org_id, page.ref_id, self._inner.update(org_id, page))

    async def update_sequence(
        self, org_id: str, document_id: str, page_id: str, sequence: float
    ) -> None:
        await self._call(
            "update_sequence",
            org_id,
            page_id,
            self._inner.update_sequence(org_id, document_id, page_id, sequence),
        )

    async def update_level(self, org_id: str, document_id: str, page_id: str, level: int) -> None:
        await self._call(
            "update_level",
            org_id,
            page_id,
            self._inner.update_level(org_id, document_id, page_id, level),
        )

    async def delete(self, org_id: str, document_id: str, page_id: str) -> None:
        await self._call(
            "delete", org_id, page_id, self._inner.delete(org_id, document_id, page_id)
        )

    async def _call(
        self, operation: str, org_id: str, page_id: str, notification: Awaitable[None]
    ) -> None:
        start_time = time.monotonic()

        try:
            await asyncio.wait_for(notification, timeout=self._timeout)
        except TimeoutError as e:
            self._report(operation, org_id, page_id, start_time, "timeout")
            raise SearchIndexError(operation, "timeout") from e
        except SearchIndexError as e:
            self._report(operation, org_id, page_id, start_time, e.reason)
            raise
        except Exception as e:
            self._report(operation, org_id, page_id, start_time, type(e).__name__)
            raise SearchIndexError(operation, type(e).__name__) from e

        elapsed_ms = (time.monotonic() - start_time) * 1000
        self._metrics.record_latency(operation, "success", elapsed_ms)
        self._logger.log_call(operation, org_id, page_id, "success", elapsed_ms)

    def _report(
        self, operation: str, org_id: str, page_id: str, start_time: float, reason: str
    ) -> None:
        elapsed_ms = (time.monotonic() - start_time) * 1000
        self._metrics.record_latency(operation, "error", elapsed_ms)
        self._metrics.inc_error(operation, reason)
        self._logger.log_call(operation, org_id, page_id, "error", elapsed_ms, error_reason=reason)
