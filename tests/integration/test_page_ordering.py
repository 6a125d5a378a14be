"""Tests for page sequence and level updates."""

import pytest

from backend.docstore.db.pages import SqlPageRepository
from backend.docstore.errors import InvalidPayloadError, RecordNotFoundError
from backend.docstore.models.pages import Page, PageModel

DOC = "doc-1"


async def _add_two(uow, index) -> tuple[Page, Page]:
    async with uow() as ctx:
        repo = SqlPageRepository(ctx, index)
        first = await repo.add_page(PageModel(page=Page(document_id=DOC, title="First")))
        second = await repo.add_page(PageModel(page=Page(document_id=DOC, title="Second")))
    return first.page, second.page


@pytest.mark.asyncio
async def test_update_page_level_notifies_index(uow, index) -> None:
    """Level change is stored and sent to the index."""
    _, second = await _add_two(uow, index)
    assert second.sequence == 8192
    assert second.level == 1

    async with uow() as ctx:
        await SqlPageRepository(ctx, index).update_page_level(DOC, second.ref_id, 2)

    async with uow() as ctx:
        reread = await SqlPageRepository(ctx, index).get_page(second.ref_id)

    assert reread.level == 2
    call = index.calls[-1]
    assert call.operation == "update_level"
    assert call.page_id == second.ref_id
    assert call.args == {"document_id": DOC, "level": 2}


@pytest.mark.asyncio
async def test_update_page_sequence_reorders_and_notifies_index(uow, index) -> None:
    first, second = await _add_two(uow, index)

    async with uow() as ctx:
        await SqlPageRepository(ctx, index).update_page_sequence(DOC, second.ref_id, 2048)

    async with uow() as ctx:
        pages = await SqlPageRepository(ctx, index).get_pages(DOC)

    assert [p.ref_id for p in pages] == [second.ref_id, first.ref_id]
    assert index.calls[-1].operation == "update_sequence"
    assert index.calls[-1].args == {"document_id": DOC, "sequence": 2048}
    assert index.entries[("org-a", second.ref_id)]["sequence"] == 2048


@pytest.mark.asyncio
async def test_invalid_level_and_sequence_are_rejected(uow, index) -> None:
    first, _ = await _add_two(uow, index)

    async with uow() as ctx:
        repo = SqlPageRepository(ctx, index)
        with pytest.raises(InvalidPayloadError):
            await repo.update_page_level(DOC, first.ref_id, 0)
        with pytest.raises(InvalidPayloadError):
            await repo.update_page_sequence(DOC, first.ref_id, float("nan"))

    assert index.operations() == ["add", "add"]


@pytest.mark.asyncio
async def test_updating_missing_page_raises(uow, index) -> None:
    with pytest.raises(RecordNotFoundError):
        async with uow() as ctx:
            await SqlPageRepository(ctx, index).update_page_level(DOC, "missing", 3)

    assert index.operations() == []
