"""Tests for search index instrumentation."""

import asyncio

import pytest
from prometheus_client import REGISTRY

from backend.docstore.errors import SearchIndexError
from backend.docstore.models.pages import Page
from backend.docstore.search.instrumented import InstrumentedSearchIndex
from backend.docstore.search.memory import InMemorySearchIndex
from backend.docstore.utils.logging import StructuredIndexLogger
from backend.docstore.utils.metrics import PrometheusIndexMetrics


class RecordingLogger:
    def __init__(self) -> None:
        self.calls: list[tuple[str, str, str | None]] = []

    def log_call(
        self,
        operation: str,
        org_id: str,
        page_id: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        self.calls.append((operation, outcome, error_reason))


class SlowIndex(InMemorySearchIndex):
    async def update_level(self, org_id: str, document_id: str, page_id: str, level: int) -> None:
        await asyncio.sleep(1)


def _errors(operation: str, reason: str) -> float:
    value = REGISTRY.get_sample_value(
        "search_index_errors_total", {"operation": operation, "reason": reason}
    )
    return value or 0.0


def _latency_count(operation: str, outcome: str) -> float:
    value = REGISTRY.get_sample_value(
        "search_index_latency_ms_count", {"operation": operation, "outcome": outcome}
    )
    return value or 0.0


@pytest.mark.asyncio
async def test_success_records_latency_and_delegates() -> None:
    inner = InMemorySearchIndex()
    logger = RecordingLogger()
    index = InstrumentedSearchIndex(inner, metrics=PrometheusIndexMetrics(), logger=logger)
    before = _latency_count("add", "success")

    await index.add("org-a", Page(ref_id="p1", document_id="d1", title="T"))

    assert inner.operations() == ["add"]
    assert _latency_count("add", "success") == before + 1
    assert logger.calls == [("add", "success", None)]


@pytest.mark.asyncio
async def test_inner_failure_counts_error_and_propagates() -> None:
    inner = InMemorySearchIndex(fail_on="delete")
    logger = RecordingLogger()
    index = InstrumentedSearchIndex(inner, metrics=PrometheusIndexMetrics(), logger=logger)
    before = _errors("delete", "injected")

    with pytest.raises(SearchIndexError):
        await index.delete("org-a", "d1", "p1")

    assert _errors("delete", "injected") == before + 1
    assert logger.calls == [("delete", "error", "injected")]


@pytest.mark.asyncio
async def test_slow_index_times_out() -> None:
    index = InstrumentedSearchIndex(SlowIndex(), timeout_ms=20, metrics=PrometheusIndexMetrics())
    before = _errors("update_level", "timeout")

    with pytest.raises(SearchIndexError) as exc_info:
        await index.update_level("org-a", "d1", "p1", 2)

    assert exc_info.value.reason == "timeout"
    assert _errors("update_level", "timeout") == before + 1


@pytest.mark.asyncio
async def test_unexpected_exception_is_wrapped() -> None:
    class BrokenIndex(InMemorySearchIndex):
        async def update_sequence(
            self, org_id: str, document_id: str, page_id: str, sequence: float
        ) -> None:
            raise RuntimeError("boom")

    index = InstrumentedSearchIndex(BrokenIndex())

    with pytest.raises(SearchIndexError) as exc_info:
        await index.update_sequence("org-a", "d1", "p1", 1.0)

    assert exc_info.value.reason == "RuntimeError"
    assert isinstance(exc_info.value.__cause__, RuntimeError)


def test_structured_logger_emits_extra(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("INFO", logger="backend.docstore.utils.logging")

    StructuredIndexLogger().log_call("update", "org-a", "p1", "error", 12.5, error_reason="timeout")

    record = caplog.records[-1]
    assert record.levelname == "WARNING"
    assert record.structured == {
        "operation": "update",
        "org_id": "org-a",
        "page_id": "p1",
        "outcome": "error",
        "latency_ms": 12.5,
        "error_reason": "timeout",
    }
