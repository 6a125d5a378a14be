"""Page persistence: lifecycle, page meta and the revision-tracked update.

All statements run inside the caller's transaction (``ctx.session``). Any
failure propagates; the caller rolls back so store, link graph and search
index never diverge.
"""

import logging
import math
from datetime import UTC, datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from backend.docstore.db.context import RequestContext
from backend.docstore.db.links import SqlLinkRepository
from backend.docstore.db.models import Page as PageDB
from backend.docstore.db.models import PageMeta as PageMetaDB
from backend.docstore.db.models import new_ref_id
from backend.docstore.db.revisions import SqlRevisionRepository
from backend.docstore.errors import InvalidPayloadError, RecordNotFoundError, StoreError
from backend.docstore.models.pages import Page, PageMeta, PageModel
from backend.docstore.search.base import SearchIndex

logger = logging.getLogger(__name__)

# Doubled on first use, so an empty document starts at 4096
SEQUENCE_SEED = 2048.0

# Every page column except body, for list views
_SUMMARY_COLUMNS = (
    PageDB.refid,
    PageDB.orgid,
    PageDB.documentid,
    PageDB.userid,
    PageDB.contenttype,
    PageDB.pagetype,
    PageDB.level,
    PageDB.sequence,
    PageDB.title,
    PageDB.revisions,
    PageDB.blockid,
    PageDB.created,
    PageDB.revised,
)


def _to_page(row, body: str = "") -> Page:
    return Page(
        ref_id=row.refid,
        org_id=row.orgid,
        document_id=row.documentid,
        user_id=row.userid,
        content_type=row.contenttype,
        page_type=row.pagetype,
        level=row.level,
        sequence=row.sequence,
        title=row.title,
        body=body,
        revisions=row.revisions,
        block_id=row.blockid,
        created=row.created,
        revised=row.revised,
    )


def _to_meta(row: PageMetaDB) -> PageMeta:
    return PageMeta(
        page_id=row.pageid,
        org_id=row.orgid,
        user_id=row.userid,
        document_id=row.documentid,
        raw_body=row.rawbody,
        config=row.config or "{}",
        external_source=row.externalsource,
        created=row.created,
        revised=row.revised,
    )


def _check_sequence(sequence: float) -> None:
    if not math.isfinite(sequence) or sequence < 0:
        raise InvalidPayloadError(f"sequence must be a finite non-negative number, got {sequence}")


def _check_level(level: int) -> None:
    if level < 1:
        raise InvalidPayloadError(f"level must be at least 1, got {level}")


class SqlPageRepository:
    """Pages of one organization, kept consistent with links, revisions and the search index."""

    def __init__(self, ctx: RequestContext, search: SearchIndex) -> None:
        self._ctx = ctx
        self._session = ctx.session
        self._search = search
        self._links = SqlLinkRepository(ctx)
        self._revisions = SqlRevisionRepository(ctx)

    async def get_next_page_sequence(self, document_id: str) -> float:
        """Return the sequence for a page appended to the document.

        Twice the current maximum, or 4096 when the document has no pages.
        A failed lookup is treated as an empty document. The read runs in a
        savepoint so its failure leaves the request transaction usable.
        """
        try:
            async with self._session.begin_nested():
                result = await self._session.execute(
                    select(func.max(PageDB.sequence)).where(
                        PageDB.orgid == self._ctx.org_id, PageDB.documentid == document_id
                    )
                )
                max_sequence = result.scalar_one_or_none()
        except SQLAlchemyError:
            logger.warning(
                f"Unable to read max sequence for document {document_id}, using default",
                exc_info=True,
            )
            max_sequence = None

        if not max_sequence:
            max_sequence = SEQUENCE_SEED

        return max_sequence * 2

    async def add_page(self, model: PageModel) -> PageModel:
        """Insert a page and its meta, then index the page.

        The page is stamped with the request's org and user. A sequence of
        0 means none was supplied and one is appended after the current last
        page.

        Returns:
            The stored page model
        """
        now = datetime.now(UTC)
        page = model.page.model_copy(
            update={
                "ref_id": model.page.ref_id or new_ref_id(),
                "org_id": self._ctx.org_id,
                "user_id": self._ctx.user_id,
                "created": now,
                "revised": now,
            }
        )
        _check_level(page.level)
        _check_sequence(page.sequence)

        if not page.sequence:
            page.sequence = await self.get_next_page_sequence(page.document_id)

        meta = model.meta.model_copy(
            update={
                "page_id": page.ref_id,
                "org_id": self._ctx.org_id,
                "user_id": self._ctx.user_id,
                "document_id": page.document_id,
                "created": now,
                "revised": now,
            }
        )

        try:
            self._session.add(
                PageDB(
                    refid=page.ref_id,
                    orgid=page.org_id,
                    documentid=page.document_id,
                    userid=page.user_id,
                    contenttype=page.content_type,
                    pagetype=page.page_type,
                    level=page.level,
                    title=page.title,
                    body=page.body,
                    revisions=page.revisions,
                    sequence=page.sequence,
                    blockid=page.block_id,
                    created=page.created,
                    revised=page.revised,
                )
            )
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Unable to execute insert for page {page.ref_id}", exc_info=True)
            raise StoreError(f"insert page {page.ref_id}") from e

        try:
            self._session.add(
                PageMetaDB(
                    pageid=meta.page_id,
                    orgid=meta.org_id,
                    userid=meta.user_id,
                    documentid=meta.document_id,
                    rawbody=meta.raw_body,
                    config=meta.config,
                    externalsource=meta.external_source,
                    created=meta.created,
                    revised=meta.revised,
                )
            )
            await self._session.flush()
        except SQLAlchemyError as e:
            logger.error(f"Unable to execute insert for page meta {page.ref_id}", exc_info=True)
            raise StoreError(f"insert page meta {page.ref_id}") from e

        await self._search.add(self._ctx.org_id, page)

        return PageModel(page=page, meta=meta)

    async def get_page(self, page_id: str) -> Page:
        """Return the page with body.

        Raises:
            RecordNotFoundError: If the page does not exist in this org.
        """
        result = await self._session.execute(
            select(PageDB).where(PageDB.orgid == self._ctx.org_id, PageDB.refid == page_id)
        )
        row = result.scalar_one_or_none()

        if row is None:
            raise RecordNotFoundError("page", page_id)

        return _to_page(row, body=row.body)

    async def get_pages(self, document_id: str) -> list[Page]:
        """Return every page of the document in presentation sequence."""
        result = await self._session.execute(
            select(PageDB)
            .where(PageDB.orgid == self._ctx.org_id, PageDB.documentid == document_id)
            .order_by(PageDB.sequence)
        )
        return [_to_page(row, body=row.body) for row in result.scalars().all()]

    async def get_pages_where_in(self, document_id: str, page_ids: list[str]) -> list[Page]:
        """Return the listed pages of the document in presentation sequence.

        Raises:
            InvalidPayloadError: If ``page_ids`` is empty.
        """
        if not page_ids:
            raise InvalidPayloadError("page_ids must not be empty")

        result = await self._session.execute(
            select(PageDB)
            .where(
                PageDB.orgid == self._ctx.org_id,
                PageDB.documentid == document_id,
                PageDB.refid.in_(page_ids),
            )
            .order_by(PageDB.sequence)
        )
        return [_to_page(row, body=row.body) for row in result.scalars().all()]

    async def get_pages_without_content(self, document_id: str) -> list[Page]:
        """Return the document's pages in presentation sequence, body left empty."""
        result = await self._session.execute(
            select(*_SUMMARY_COLUMNS)
            .where(PageDB.orgid == self._ctx.org_id, PageDB.documentid == document_id)
            .order_by(PageDB.sequence)
        )
        return [_to_page(row) for row in result.all()]

    async def update_page(
        self,
        page: Page,
        revision_id: str,
        editor_user_id: str,
        skip_revision: bool = False,
    ) -> Page:
        """Apply a content update to a page as one unit of work.

        Order of effects:
        1. Stamp ``revised``
        2. Snapshot the persisted page into a revision (unless skipped)
        3. Overwrite the page row
        4. Re-index the page
        5. Bump the revision counter (unless skipped)
        6. Recompute the page's outgoing content links

        Any failure propagates so the caller can roll back all of it.

        Args:
            page: Page carrying the new state; ``revisions`` is written as-is
                before the counter bump
            revision_id: Reference id for the new revision row
            editor_user_id: User recorded as the revision's editor
            skip_revision: Neither snapshot nor count this update

        Returns:
            The page as written

        Raises:
            RecordNotFoundError: If the page does not exist in this org.
            StoreError: If a statement fails.
            SearchIndexError: If the index rejects the update.
        """
        _check_level(page.level)
        _check_sequence(page.sequence)

        page = page.model_copy(update={"org_id": self._ctx.org_id, "revised": datetime.now(UTC)})

        if not skip_revision:
            await self._revisions.snapshot_page(page.ref_id, revision_id, editor_user_id)

        try:
            result = await self._session.execute(
                update(PageDB)
                .where(PageDB.orgid == self._ctx.org_id, PageDB.refid == page.ref_id)
                .values(
                    documentid=page.document_id,
                    level=page.level,
                    title=page.title,
                    body=page.body,
                    revisions=page.revisions,
                    sequence=page.sequence,
                    revised=page.revised,
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"Unable to execute update for page {page.ref_id}", exc_info=True)
            raise StoreError(f"update page {page.ref_id}") from e

        if result.rowcount == 0:
            raise RecordNotFoundError("page", page.ref_id)

        await self._search.update(self._ctx.org_id, page)

        if not skip_revision:
            try:
                await self._session.execute(
                    update(PageDB)
                    .where(PageDB.orgid == self._ctx.org_id, PageDB.refid == page.ref_id)
                    .values(revisions=PageDB.revisions + 1)
                )
            except SQLAlchemyError as e:
                logger.error(
                    f"Unable to execute revisions counter update for page {page.ref_id}",
                    exc_info=True,
                )
                raise StoreError(f"update revisions counter for page {page.ref_id}") from e
            page.revisions += 1

        await self._links.recompute_page_links(page.document_id, page.ref_id, page.body)

        return page

    async def update_page_meta(self, meta: PageMeta, update_user_id: bool) -> PageMeta:
        """Persist page meta, optionally re-attributing it to the current user."""
        changes: dict = {"org_id": self._ctx.org_id, "revised": datetime.now(UTC)}
        if update_user_id:
            changes["user_id"] = self._ctx.user_id
        meta = meta.model_copy(update=changes)

        try:
            result = await self._session.execute(
                update(PageMetaDB)
                .where(PageMetaDB.orgid == self._ctx.org_id, PageMetaDB.pageid == meta.page_id)
                .values(
                    userid=meta.user_id,
                    documentid=meta.document_id,
                    rawbody=meta.raw_body,
                    config=meta.config,
                    externalsource=meta.external_source,
                    revised=meta.revised,
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"Unable to execute update for page meta {meta.page_id}", exc_info=True)
            raise StoreError(f"update page meta {meta.page_id}") from e

        if result.rowcount == 0:
            raise RecordNotFoundError("page meta", meta.page_id)

        return meta

    async def get_page_meta(self, page_id: str) -> PageMeta:
        """Return the meta of a page; a missing config reads as ``{}``.

        Raises:
            RecordNotFoundError: If the page has no meta in this org.
        """
        result = await self._session.execute(
            select(PageMetaDB).where(
                PageMetaDB.orgid == self._ctx.org_id, PageMetaDB.pageid == page_id
            )
        )
        row = result.scalar_one_or_none()

        if row is None:
            raise RecordNotFoundError("page meta", page_id)

        return _to_meta(row)

    async def get_document_page_meta(
        self, document_id: str, external_source_only: bool = False
    ) -> list[PageMeta]:
        """Return meta for every page of the document."""
        stmt = select(PageMetaDB).where(
            PageMetaDB.orgid == self._ctx.org_id, PageMetaDB.documentid == document_id
        )
        if external_source_only:
            stmt = stmt.where(PageMetaDB.externalsource.is_(True))

        result = await self._session.execute(stmt.order_by(PageMetaDB.id))
        return [_to_meta(row) for row in result.scalars().all()]

    async def update_page_sequence(self, document_id: str, page_id: str, sequence: float) -> None:
        """Move a page within its document and tell the index."""
        _check_sequence(sequence)
        await self._update_page_field(page_id, sequence=sequence)
        await self._search.update_sequence(self._ctx.org_id, document_id, page_id, sequence)

    async def update_page_level(self, document_id: str, page_id: str, level: int) -> None:
        """Change a page's heading level and tell the index."""
        _check_level(level)
        await self._update_page_field(page_id, level=level)
        await self._search.update_level(self._ctx.org_id, document_id, page_id, level)

    async def delete_page(self, document_id: str, page_id: str) -> int:
        """Delete a page with everything hanging off it.

        Removes the page row, its meta and its index entry, drops the
        page's outgoing links, orphans links pointing at it and purges its
        revisions. Every step must succeed; the caller rolls back otherwise.

        Returns:
            Number of page rows deleted (0 when the page did not exist)
        """
        try:
            result = await self._session.execute(
                delete(PageDB).where(PageDB.orgid == self._ctx.org_id, PageDB.refid == page_id)
            )
        except SQLAlchemyError as e:
            logger.error(f"Unable to delete page {page_id}", exc_info=True)
            raise StoreError(f"delete page {page_id}") from e

        rows = result.rowcount
        if rows == 0:
            return 0

        try:
            await self._session.execute(
                delete(PageMetaDB).where(
                    PageMetaDB.orgid == self._ctx.org_id, PageMetaDB.pageid == page_id
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"Unable to delete page meta {page_id}", exc_info=True)
            raise StoreError(f"delete page meta {page_id}") from e

        await self._search.delete(self._ctx.org_id, document_id, page_id)
        await self._links.delete_source_page_links(page_id)
        orphaned = await self._links.mark_orphan_page_links(page_id)
        purged = await self._revisions.delete_page_revisions(page_id)

        logger.info(
            f"Deleted page {page_id}: {orphaned} inbound links orphaned, {purged} revisions purged"
        )
        return rows

    async def _update_page_field(self, page_id: str, **values) -> None:
        try:
            result = await self._session.execute(
                update(PageDB)
                .where(PageDB.orgid == self._ctx.org_id, PageDB.refid == page_id)
                .values(**values)
            )
        except SQLAlchemyError as e:
            logger.error(f"Unable to execute update for page {page_id}", exc_info=True)
            raise StoreError(f"update page {page_id}") from e

        if result.rowcount == 0:
            raise RecordNotFoundError("page", page_id)
