"""Tests for revision history reads."""

import pytest
from sqlalchemy import insert

from backend.docstore.db.models import Revision as RevisionDB
from backend.docstore.db.models import new_ref_id
from backend.docstore.db.pages import SqlPageRepository
from backend.docstore.db.revisions import SqlRevisionRepository
from backend.docstore.db.users import ensure_user
from backend.docstore.errors import RecordNotFoundError
from backend.docstore.models.pages import Page, PageModel

DOC = "doc-1"


async def _add(uow, index, title: str) -> Page:
    async with uow() as ctx:
        stored = await SqlPageRepository(ctx, index).add_page(
            PageModel(page=Page(document_id=DOC, title=title))
        )
    return stored.page


async def _edit(uow, index, page_id: str, title: str, editor: str) -> str:
    revision_id = new_ref_id()
    async with uow("org-a", editor) as ctx:
        repo = SqlPageRepository(ctx, index)
        current = await repo.get_page(page_id)
        current.title = title
        await repo.update_page(current, revision_id, editor)
    return revision_id


@pytest.mark.asyncio
async def test_page_revisions_newest_first_with_author(uow, index) -> None:
    async with uow() as ctx:
        editor = await ensure_user(ctx.session, "ada@example.com", "Ada", "Lovelace", "AL")

    page = await _add(uow, index, "v1")
    first = await _edit(uow, index, page.ref_id, "v2", editor.refid)
    second = await _edit(uow, index, page.ref_id, "v3", "unknown-user")

    async with uow() as ctx:
        revisions = await SqlRevisionRepository(ctx).get_page_revisions(page.ref_id)

    assert [r.ref_id for r in revisions] == [second, first]
    assert [r.title for r in revisions] == ["v2", "v1"]

    assert revisions[1].email == "ada@example.com"
    assert revisions[1].firstname == "Ada"
    assert revisions[1].initials == "AL"
    # Editors without a user row still list, with blank display fields
    assert revisions[0].email == ""
    assert revisions[0].lastname == ""


@pytest.mark.asyncio
async def test_document_revisions_carry_current_page_counter(uow, index) -> None:
    a = await _add(uow, index, "A")
    b = await _add(uow, index, "B")
    await _edit(uow, index, a.ref_id, "A2", "user-a")
    await _edit(uow, index, a.ref_id, "A3", "user-a")
    await _edit(uow, index, b.ref_id, "B2", "user-a")

    async with uow() as ctx:
        revisions = await SqlRevisionRepository(ctx).get_document_revisions(DOC)

    assert [(r.title, r.revisions) for r in revisions] == [("B", 1), ("A2", 2), ("A", 2)]

    async with uow() as ctx:
        await SqlPageRepository(ctx, index).delete_page(DOC, b.ref_id)
        after_delete = await SqlRevisionRepository(ctx).get_document_revisions(DOC)

    assert [r.title for r in after_delete] == ["A2", "A"]


@pytest.mark.asyncio
async def test_list_views_include_only_section_revisions(uow, index) -> None:
    page = await _add(uow, index, "Section")
    await _edit(uow, index, page.ref_id, "Section v2", "user-a")

    async with uow() as ctx:
        await ctx.session.execute(
            insert(RevisionDB).values(
                refid=new_ref_id(),
                orgid="org-a",
                documentid=DOC,
                ownerid="user-a",
                pageid=page.ref_id,
                userid="user-a",
                contenttype="wysiwyg",
                pagetype="tab",
                title="Tab snapshot",
                body="",
                created=page.created,
                revised=page.created,
            )
        )

    async with uow() as ctx:
        repo = SqlRevisionRepository(ctx)
        page_list = await repo.get_page_revisions(page.ref_id)
        doc_list = await repo.get_document_revisions(DOC)

    assert [r.title for r in page_list] == ["Section"]
    assert [r.title for r in doc_list] == ["Section"]


@pytest.mark.asyncio
async def test_get_page_revision_missing_raises(uow, index) -> None:
    async with uow() as ctx:
        with pytest.raises(RecordNotFoundError):
            await SqlRevisionRepository(ctx).get_page_revision("missing")


@pytest.mark.asyncio
async def test_revisions_are_isolated_by_org(uow, index) -> None:
    page = await _add(uow, index, "v1")
    revision_id = await _edit(uow, index, page.ref_id, "v2", "user-a")

    async with uow("org-b", "user-b") as ctx:
        repo = SqlRevisionRepository(ctx)
        assert await repo.get_page_revisions(page.ref_id) == []
        assert await repo.get_document_revisions(DOC) == []
        with pytest.raises(RecordNotFoundError):
            await repo.get_page_revision(revision_id)


@pytest.mark.asyncio
async def test_delete_page_revisions_returns_count(uow, index) -> None:
    page = await _add(uow, index, "v1")
    await _edit(uow, index, page.ref_id, "v2", "user-a")
    await _edit(uow, index, page.ref_id, "v3", "user-a")

    async with uow() as ctx:
        deleted = await SqlRevisionRepository(ctx).delete_page_revisions(page.ref_id)

    assert deleted == 2
