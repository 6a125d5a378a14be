"""Users referenced by revision history."""

import logging

from sqlalchemy import select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from backend.docstore.db.models import User, new_ref_id
from backend.docstore.errors import StoreError

logger = logging.getLogger(__name__)

_DIALECT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


async def ensure_user(
    session: AsyncSession,
    email: str,
    firstname: str = "",
    lastname: str = "",
    initials: str = "",
) -> User:
    """Get or create the user with this email.

    A single insert that does nothing on an email conflict, followed by a
    read, so concurrent callers never race to create duplicates. An
    existing user keeps its stored names.

    Returns:
        The stored user row
    """
    dialect = session.get_bind().dialect.name
    insert = _DIALECT_INSERTS.get(dialect)
    if insert is None:
        raise NotImplementedError(f"ensure_user does not support dialect {dialect}")

    stmt = (
        insert(User)
        .values(
            refid=new_ref_id(),
            email=email,
            firstname=firstname,
            lastname=lastname,
            initials=initials,
        )
        .on_conflict_do_nothing(index_elements=["email"])
    )

    try:
        await session.execute(stmt)
        result = await session.execute(select(User).where(User.email == email))
    except SQLAlchemyError as e:
        logger.error(f"Unable to upsert user {email}", exc_info=True)
        raise StoreError(f"upsert user {email}") from e

    return result.scalar_one()
