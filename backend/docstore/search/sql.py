"""Search index kept in the ``search`` table of the relational store.

Writes go through the caller's session, so index entries commit or roll
back together with the page rows they describe.
"""

from datetime import UTC, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from backend.docstore.db.models import SearchEntry
from backend.docstore.models.pages import Page
from backend.docstore.models.search import SearchHit
from backend.docstore.utils.html import html_to_text


class SqlSearchIndex:
    """SearchIndex implementation backed by the ``search`` table."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, org_id: str, page: Page) -> None:
        """Index a newly added page, replacing any earlier entry for it."""
        await self._session.execute(
            delete(SearchEntry).where(SearchEntry.orgid == org_id, SearchEntry.pageid == page.ref_id)
        )
        now = datetime.now(UTC)
        self._session.add(
            SearchEntry(
                orgid=org_id,
                documentid=page.document_id,
                pageid=page.ref_id,
                pagetitle=page.title,
                body=html_to_text(page.body),
                level=page.level,
                sequence=page.sequence,
                created=now,
                revised=now,
            )
        )
        await self._session.flush()

    async def update(self, org_id: str, page: Page) -> None:
        """Re-index page content; indexes the page if it has no entry yet."""
        result = await self._session.execute(
            update(SearchEntry)
            .where(SearchEntry.orgid == org_id, SearchEntry.pageid == page.ref_id)
            .values(
                documentid=page.document_id,
                pagetitle=page.title,
                body=html_to_text(page.body),
                level=page.level,
                sequence=page.sequence,
                revised=datetime.now(UTC),
            )
        )
        if result.rowcount == 0:
            await self.add(org_id, page)

    async def update_sequence(
        self, org_id: str, document_id: str, page_id: str, sequence: float
    ) -> None:
        """Record a page's new ordering key."""
        await self._session.execute(
            update(SearchEntry)
            .where(
                SearchEntry.orgid == org_id,
                SearchEntry.documentid == document_id,
                SearchEntry.pageid == page_id,
            )
            .values(sequence=sequence, revised=datetime.now(UTC))
        )

    async def update_level(self, org_id: str, document_id: str, page_id: str, level: int) -> None:
        """Record a page's new heading level."""
        await self._session.execute(
            update(SearchEntry)
            .where(
                SearchEntry.orgid == org_id,
                SearchEntry.documentid == document_id,
                SearchEntry.pageid == page_id,
            )
            .values(level=level, revised=datetime.now(UTC))
        )

    async def delete(self, org_id: str, document_id: str, page_id: str) -> None:
        """Drop a page from the index."""
        await self._session.execute(
            delete(SearchEntry).where(
                SearchEntry.orgid == org_id,
                SearchEntry.documentid == document_id,
                SearchEntry.pageid == page_id,
            )
        )

    async def search(self, org_id: str, query: str, limit: int = 10) -> list[SearchHit]:
        """Search indexed pages by simple token matching.

        Scoring strategy:
        - Tokenize query on whitespace (lowercase)
        - Count query tokens found in the title (weight 2) and body (weight 1)
        - Drop entries scoring 0
        - Sort by score descending, then document and sequence for determinism

        Args:
            org_id: Organization ID for tenancy filtering
            query: Search query string
            limit: Maximum number of results to return

        Returns:
            List of SearchHit sorted by relevance
        """
        tokens = [token for token in query.lower().split() if token]
        if not tokens:
            return []

        result = await self._session.execute(select(SearchEntry).where(SearchEntry.orgid == org_id))

        hits: list[SearchHit] = []
        for entry in result.scalars().all():
            title = entry.pagetitle.lower()
            body = entry.body.lower()
            score = sum(2.0 for t in tokens if t in title) + sum(1.0 for t in tokens if t in body)
            if score > 0:
                hits.append(
                    SearchHit(
                        document_id=entry.documentid,
                        page_id=entry.pageid,
                        title=entry.pagetitle,
                        level=entry.level,
                        sequence=entry.sequence,
                        score=score,
                    )
                )

        hits.sort(key=lambda h: (-h.score, h.document_id, h.sequence))
        return hits[:limit]
