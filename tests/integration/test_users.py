"""Tests for user get-or-create."""

import pytest
from sqlalchemy import func, select

from backend.docstore.db.models import User
from backend.docstore.db.users import ensure_user


@pytest.mark.asyncio
async def test_ensure_user_creates_once(uow) -> None:
    async with uow() as ctx:
        created = await ensure_user(ctx.session, "grace@example.com", "Grace", "Hopper", "GH")

    async with uow() as ctx:
        again = await ensure_user(ctx.session, "grace@example.com", "Someone", "Else", "SE")
        count = await ctx.session.execute(select(func.count()).select_from(User))

        assert count.scalar_one() == 1

    assert again.refid == created.refid
    # First writer wins
    assert again.firstname == "Grace"
    assert len(created.refid) == 32


@pytest.mark.asyncio
async def test_ensure_user_distinct_emails(uow) -> None:
    async with uow() as ctx:
        a = await ensure_user(ctx.session, "a@example.com")
        b = await ensure_user(ctx.session, "b@example.com")

    assert a.refid != b.refid
    assert a.firstname == ""
