"""Content link persistence and link-graph maintenance."""

import logging
from datetime import UTC, datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Executable

from backend.docstore.db.context import RequestContext
from backend.docstore.db.models import Link, new_ref_id
from backend.docstore.errors import StoreError
from backend.docstore.links.extractor import get_content_links
from backend.docstore.models.links import LINK_TYPE_DOCUMENT, ContentLink

logger = logging.getLogger(__name__)


def _to_link(row: Link) -> ContentLink:
    return ContentLink(
        ref_id=row.refid,
        org_id=row.orgid,
        space_id=row.spaceid,
        user_id=row.userid,
        link_type=row.linktype,
        source_document_id=row.sourcedocumentid,
        source_page_id=row.sourcepageid,
        target_document_id=row.targetdocumentid,
        target_id=row.targetid,
        orphan=row.orphan,
        created=row.created,
        revised=row.revised,
    )


class SqlLinkRepository:
    """Content links for one organization, inside the request transaction."""

    def __init__(self, ctx: RequestContext) -> None:
        self._ctx = ctx
        self._session = ctx.session

    async def add_content_link(self, link: ContentLink) -> ContentLink:
        """Insert a content link owned by the current org and user."""
        now = datetime.now(UTC)
        stored = link.model_copy(
            update={
                "ref_id": link.ref_id or new_ref_id(),
                "org_id": self._ctx.org_id,
                "user_id": self._ctx.user_id,
                "created": now,
                "revised": now,
            }
        )

        try:
            self._session.add(
                Link(
                    refid=stored.ref_id,
                    orgid=stored.org_id,
                    spaceid=stored.space_id,
                    userid=stored.user_id,
                    linktype=stored.link_type,
                    sourcedocumentid=stored.source_document_id,
                    sourcepageid=stored.source_page_id,
                    targetdocumentid=stored.target_document_id,
                    targetid=stored.target_id,
                    orphan=stored.orphan,
                    created=stored.created,
                    revised=stored.revised,
                )
            )
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Unable to insert content link for page {link.source_page_id}", exc_info=True)
            raise StoreError(f"insert link for page {link.source_page_id}") from e

        return stored

    async def get_page_links(self, document_id: str, page_id: str) -> list[ContentLink]:
        """Return links whose source is the given page, in insertion order."""
        result = await self._session.execute(
            select(Link)
            .where(
                Link.orgid == self._ctx.org_id,
                Link.sourcedocumentid == document_id,
                Link.sourcepageid == page_id,
            )
            .order_by(Link.id)
        )
        return [_to_link(row) for row in result.scalars().all()]

    async def get_document_outbound_links(self, document_id: str) -> list[ContentLink]:
        """Return every link whose source page belongs to the document."""
        result = await self._session.execute(
            select(Link)
            .where(Link.orgid == self._ctx.org_id, Link.sourcedocumentid == document_id)
            .order_by(Link.id)
        )
        return [_to_link(row) for row in result.scalars().all()]

    async def delete_source_page_links(self, page_id: str) -> int:
        """Delete links originating from the page. Returns rows deleted."""
        return await self._execute_delete(
            delete(Link).where(Link.orgid == self._ctx.org_id, Link.sourcepageid == page_id),
            f"source links for page {page_id}",
        )

    async def delete_source_document_links(self, document_id: str) -> int:
        """Delete links originating from any page of the document. Returns rows deleted."""
        return await self._execute_delete(
            delete(Link).where(
                Link.orgid == self._ctx.org_id, Link.sourcedocumentid == document_id
            ),
            f"source links for document {document_id}",
        )

    async def mark_orphan_page_links(self, page_id: str) -> int:
        """Flag inbound links that target the page as orphaned."""
        return await self._execute_orphan(
            update(Link)
            .where(Link.orgid == self._ctx.org_id, Link.targetid == page_id)
            .values(orphan=True, revised=datetime.now(UTC)),
            f"page {page_id}",
        )

    async def mark_orphan_document_links(self, document_id: str) -> int:
        """Flag inbound document-level links that target the document as orphaned."""
        return await self._execute_orphan(
            update(Link)
            .where(
                Link.orgid == self._ctx.org_id,
                Link.linktype == LINK_TYPE_DOCUMENT,
                Link.targetdocumentid == document_id,
            )
            .values(orphan=True, revised=datetime.now(UTC)),
            f"document {document_id}",
        )

    async def recompute_page_links(
        self, document_id: str, page_id: str, body: str
    ) -> list[ContentLink]:
        """Replace the page's outgoing links with those found in ``body``.

        Orphan flags of previously stored links with the same
        (type, target document, target) identity are carried forward;
        everything else starts as not orphaned.

        Returns:
            The stored link set, in body order
        """
        previous_links = await self.get_page_links(document_id, page_id)
        previous = {link.identity(): link.orphan for link in previous_links}

        await self.delete_source_page_links(page_id)

        saved: list[ContentLink] = []
        for candidate in get_content_links(body):
            link = ContentLink(
                space_id=candidate.space_id,
                link_type=candidate.link_type,
                source_document_id=document_id,
                source_page_id=page_id,
                target_document_id=candidate.target_document_id,
                # Document-level links are not page-qualified
                target_id="" if candidate.link_type == LINK_TYPE_DOCUMENT else candidate.target_id,
            )
            link.orphan = previous.get(link.identity(), False)

            saved.append(await self.add_content_link(link))

        return saved

    async def _execute_delete(self, stmt: Executable, what: str) -> int:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Unable to delete {what}", exc_info=True)
            raise StoreError(f"delete {what}") from e
        return result.rowcount

    async def _execute_orphan(self, stmt: Executable, what: str) -> int:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Unable to mark orphan links to {what}", exc_info=True)
            raise StoreError(f"mark orphan links to {what}") from e
        return result.rowcount
