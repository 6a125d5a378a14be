"""Search index sync protocol."""

from typing import Protocol

from backend.docstore.models.pages import Page


class SearchIndex(Protocol):
    """Receives page change notifications, keyed by organization and page.

    Every operation must be safe to repeat: replaying a notification
    leaves the index in the same state.
    """

    async def add(self, org_id: str, page: Page) -> None:
        """Index a newly added page."""
        ...

    async def update(self, org_id: str, page: Page) -> None:
        """Re-index a page after its content changed."""
        ...

    async def update_sequence(
        self, org_id: str, document_id: str, page_id: str, sequence: float
    ) -> None:
        """Record a page's new ordering key."""
        ...

    async def update_level(self, org_id: str, document_id: str, page_id: str, level: int) -> None:
        """Record a page's new heading level."""
        ...

    async def delete(self, org_id: str, document_id: str, page_id: str) -> None:
        """Drop a page from the index."""
        ...
