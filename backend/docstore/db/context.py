"""Request scope for tenancy enforcement and transaction ownership."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from backend.docstore.db.engine import create_session_factory, get_async_engine
from backend.docstore.errors import NotAuthenticatedError


@dataclass(frozen=True)
class RequestContext:
    """Request context containing org and user identity and the active transaction.

    Passed explicitly to every repository; all reads and writes are scoped
    by ``org_id`` and run inside ``session``.
    """

    org_id: str
    user_id: str
    session: AsyncSession

    def __post_init__(self) -> None:
        if not self.org_id or not self.user_id:
            raise NotAuthenticatedError("request context requires org_id and user_id")


@asynccontextmanager
async def unit_of_work(
    org_id: str,
    user_id: str,
    engine: AsyncEngine | None = None,
) -> AsyncGenerator[RequestContext, None]:
    """Open one transaction for the duration of a request.

    Commits when the block exits normally and rolls back when it raises,
    so multi-statement operations apply entirely or not at all.

    Usage:
        async with unit_of_work(org_id, user_id, engine) as ctx:
            await SqlPageRepository(ctx, index).update_page(...)
    """
    session_factory = create_session_factory(engine or get_async_engine())

    async with session_factory() as session:
        async with session.begin():
            yield RequestContext(org_id=org_id, user_id=user_id, session=session)
