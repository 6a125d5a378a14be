"""Tests for dev seeding."""

import pytest

from backend.docstore.db.links import SqlLinkRepository
from backend.docstore.db.seed_dev import DEV_DOCUMENT_ID, DEV_ORG_ID, seed_dev_document


@pytest.mark.asyncio
async def test_seed_dev_document_is_idempotent(engine, uow) -> None:
    first = await seed_dev_document(engine)
    second = await seed_dev_document(engine)

    assert len(first) == 2
    assert first == second

    async with uow(DEV_ORG_ID, "reader") as ctx:
        links = await SqlLinkRepository(ctx).get_page_links(DEV_DOCUMENT_ID, first[1])

    assert len(links) == 1
    assert links[0].target_id == first[0]
    assert links[0].orphan is False
