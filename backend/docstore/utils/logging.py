"""Structured logging for search index sync."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredIndexLogger:
    """Structured logger for search index notifications."""

    def log_call(
        self,
        operation: str,
        org_id: str,
        page_id: str,
        outcome: str,
        latency_ms: float,
        error_reason: str | None = None,
    ) -> None:
        """Log one index notification with structured data."""
        log_data: dict[str, Any] = {
            "operation": operation,
            "org_id": org_id,
            "page_id": page_id,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }

        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"Search index {operation}: {page_id} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})
