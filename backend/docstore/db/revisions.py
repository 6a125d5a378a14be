"""Revision history persistence: snapshot, list, fetch and purge."""

import logging
from datetime import UTC, datetime

from sqlalchemy import ColumnElement, delete, func, insert, literal, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql import Select

from backend.docstore.db.context import RequestContext
from backend.docstore.db.models import Page as PageDB
from backend.docstore.db.models import PageMeta as PageMetaDB
from backend.docstore.db.models import Revision as RevisionDB
from backend.docstore.db.models import User as UserDB
from backend.docstore.errors import RecordNotFoundError, StoreError
from backend.docstore.models.pages import PAGE_TYPE_SECTION, Revision, RevisionSummary

logger = logging.getLogger(__name__)


class SqlRevisionRepository:
    """Page revision history for one organization."""

    def __init__(self, ctx: RequestContext) -> None:
        self._ctx = ctx
        self._session = ctx.session

    async def snapshot_page(self, page_id: str, revision_id: str, editor_user_id: str) -> None:
        """Copy the page's persisted state and meta into a new revision row.

        Must run before the page row is overwritten: the snapshot holds the
        state being replaced. The original author becomes the revision owner
        and ``editor_user_id`` is recorded as the user.

        Raises:
            RecordNotFoundError: If the page or its meta does not exist in this org.
            StoreError: If the insert fails.
        """
        now = datetime.now(UTC)
        source = select(
            literal(revision_id),
            PageDB.orgid,
            PageDB.documentid,
            PageDB.userid,
            PageDB.refid,
            literal(editor_user_id),
            PageDB.contenttype,
            PageDB.pagetype,
            PageDB.title,
            PageDB.body,
            PageMetaDB.rawbody,
            PageMetaDB.config,
            literal(now),
            literal(now),
        ).where(
            PageDB.orgid == self._ctx.org_id,
            PageDB.refid == page_id,
            PageMetaDB.orgid == PageDB.orgid,
            PageMetaDB.pageid == PageDB.refid,
        )

        stmt = insert(RevisionDB.__table__).from_select(
            [
                "refid",
                "orgid",
                "documentid",
                "ownerid",
                "pageid",
                "userid",
                "contenttype",
                "pagetype",
                "title",
                "body",
                "rawbody",
                "config",
                "created",
                "revised",
            ],
            source,
        )

        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Unable to execute insert for page revision {page_id}", exc_info=True)
            raise StoreError(f"insert revision for page {page_id}") from e

        if result.rowcount == 0:
            raise RecordNotFoundError("page", page_id)

    async def get_page_revision(self, revision_id: str) -> Revision:
        """Return the full revision record, including body, raw body and config.

        Raises:
            RecordNotFoundError: If no such revision exists in this org.
        """
        result = await self._session.execute(
            select(RevisionDB).where(
                RevisionDB.orgid == self._ctx.org_id, RevisionDB.refid == revision_id
            )
        )
        row = result.scalar_one_or_none()

        if row is None:
            raise RecordNotFoundError("revision", revision_id)

        return Revision(
            ref_id=row.refid,
            org_id=row.orgid,
            document_id=row.documentid,
            owner_id=row.ownerid,
            page_id=row.pageid,
            user_id=row.userid,
            content_type=row.contenttype,
            page_type=row.pagetype,
            title=row.title,
            body=row.body,
            raw_body=row.rawbody or "",
            config=row.config or "{}",
            created=row.created,
            revised=row.revised,
        )

    async def get_document_revisions(self, document_id: str) -> list[RevisionSummary]:
        """List section revisions across a document, newest first.

        Each entry carries the current revision count of its page (0 once
        the page is gone).
        """
        stmt = (
            self._summary_query(func.coalesce(PageDB.revisions, 0).label("revisions"))
            .outerjoin(PageDB, RevisionDB.pageid == PageDB.refid)
            .where(RevisionDB.documentid == document_id)
        )
        return await self._list_summaries(stmt)

    async def get_page_revisions(self, page_id: str) -> list[RevisionSummary]:
        """List section revisions of one page, newest first."""
        stmt = self._summary_query(literal(0).label("revisions")).where(
            RevisionDB.pageid == page_id
        )
        return await self._list_summaries(stmt)

    async def delete_page_revisions(self, page_id: str) -> int:
        """Purge every revision of the page. Returns rows deleted."""
        try:
            result = await self._session.execute(
                delete(RevisionDB).where(
                    RevisionDB.orgid == self._ctx.org_id, RevisionDB.pageid == page_id
                )
            )
        except SQLAlchemyError as e:
            logger.error(f"Unable to delete revisions for page {page_id}", exc_info=True)
            raise StoreError(f"delete revisions for page {page_id}") from e

        return result.rowcount

    def _summary_query(self, revisions_column: ColumnElement[int]) -> Select:
        return (
            select(
                RevisionDB.refid,
                RevisionDB.orgid,
                RevisionDB.documentid,
                RevisionDB.ownerid,
                RevisionDB.pageid,
                RevisionDB.userid,
                RevisionDB.contenttype,
                RevisionDB.pagetype,
                RevisionDB.title,
                RevisionDB.created,
                RevisionDB.revised,
                func.coalesce(UserDB.email, "").label("email"),
                func.coalesce(UserDB.firstname, "").label("firstname"),
                func.coalesce(UserDB.lastname, "").label("lastname"),
                func.coalesce(UserDB.initials, "").label("initials"),
                revisions_column,
            )
            .select_from(RevisionDB)
            .outerjoin(UserDB, RevisionDB.userid == UserDB.refid)
            .where(
                RevisionDB.orgid == self._ctx.org_id,
                RevisionDB.pagetype == PAGE_TYPE_SECTION,
            )
            .order_by(RevisionDB.id.desc())
        )

    async def _list_summaries(self, stmt: Select) -> list[RevisionSummary]:
        try:
            result = await self._session.execute(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Unable to execute select revisions for org {self._ctx.org_id}", exc_info=True)
            raise StoreError("select revisions") from e

        return [
            RevisionSummary(
                ref_id=row.refid,
                org_id=row.orgid,
                document_id=row.documentid,
                owner_id=row.ownerid,
                page_id=row.pageid,
                user_id=row.userid,
                content_type=row.contenttype,
                page_type=row.pagetype,
                title=row.title,
                created=row.created,
                revised=row.revised,
                email=row.email,
                firstname=row.firstname,
                lastname=row.lastname,
                initials=row.initials,
                revisions=row.revisions,
            )
            for row in result.all()
        ]
