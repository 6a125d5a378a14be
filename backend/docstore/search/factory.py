"""Build the configured search index."""

from sqlalchemy.ext.asyncio import AsyncSession

from backend.docstore.config import Settings
from backend.docstore.search.base import SearchIndex
from backend.docstore.search.http import HttpSearchIndex
from backend.docstore.search.instrumented import InstrumentedSearchIndex
from backend.docstore.search.sql import SqlSearchIndex
from backend.docstore.utils.logging import StructuredIndexLogger
from backend.docstore.utils.metrics import PrometheusIndexMetrics


def build_search_index(settings: Settings, session: AsyncSession) -> SearchIndex:
    """Create the index selected by ``settings.search_backend``.

    The SQL index writes through ``session`` and so shares the request
    transaction. Either backend is wrapped with timeout, metrics and
    structured logging.
    """
    inner: SearchIndex
    if settings.search_backend == "http":
        inner = HttpSearchIndex(settings.search_index_url, timeout_ms=settings.search_index_timeout_ms)
    else:
        inner = SqlSearchIndex(session)

    return InstrumentedSearchIndex(
        inner,
        timeout_ms=settings.search_index_timeout_ms,
        metrics=PrometheusIndexMetrics(),
        logger=StructuredIndexLogger(),
    )
