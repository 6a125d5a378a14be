"""In-memory search index - records notifications for tests and local runs."""

from dataclasses import dataclass, field
from typing import Any

from backend.docstore.errors import SearchIndexError
from backend.docstore.models.pages import Page


@dataclass
class IndexCall:
    """One notification received by the index."""

    operation: str
    org_id: str
    page_id: str
    args: dict[str, Any] = field(default_factory=dict)


class InMemorySearchIndex:
    """SearchIndex keeping entries in a dict keyed by (org, page).

    ``calls`` records every notification in arrival order. Set ``fail_on``
    to an operation name to make that operation raise SearchIndexError.
    """

    def __init__(self, fail_on: str | None = None) -> None:
        self.entries: dict[tuple[str, str], dict[str, Any]] = {}
        self.calls: list[IndexCall] = []
        self.fail_on = fail_on

    async def add(self, org_id: str, page: Page) -> None:
        self._record("add", org_id, page.ref_id, title=page.title)
        self.entries[(org_id, page.ref_id)] = {
            "document_id": page.document_id,
            "title": page.title,
            "body": page.body,
            "level": page.level,
            "sequence": page.sequence,
        }

    async def update(self, org_id: str, page: Page) -> None:
        self._record("update", org_id, page.ref_id, title=page.title)
        self.entries[(org_id, page.ref_id)] = {
            "document_id": page.document_id,
            "title": page.title,
            "body": page.body,
            "level": page.level,
            "sequence": page.sequence,
        }

    async def update_sequence(
        self, org_id: str, document_id: str, page_id: str, sequence: float
    ) -> None:
        self._record("update_sequence", org_id, page_id, document_id=document_id, sequence=sequence)
        if (org_id, page_id) in self.entries:
            self.entries[(org_id, page_id)]["sequence"] = sequence

    async def update_level(self, org_id: str, document_id: str, page_id: str, level: int) -> None:
        self._record("update_level", org_id, page_id, document_id=document_id, level=level)
        if (org_id, page_id) in self.entries:
            self.entries[(org_id, page_id)]["level"] = level

    async def delete(self, org_id: str, document_id: str, page_id: str) -> None:
        self._record("delete", org_id, page_id, document_id=document_id)
        self.entries.pop((org_id, page_id), None)

    def operations(self) -> list[str]:
        """Names of received notifications, in order."""
        return [call.operation for call in self.calls]

    def _record(self, operation: str, org_id: str, page_id: str, **args: Any) -> None:
        if self.fail_on == operation:
            raise SearchIndexError(operation, "injected")
        self.calls.append(IndexCall(operation=operation, org_id=org_id, page_id=page_id, args=args))
