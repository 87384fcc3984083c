"""Helpers shared by the PostgreSQL repos."""

from __future__ import annotations

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateKeyError
from app.db.engine import Base


async def insert_row(session: AsyncSession, row: Base, conflict_message: str) -> None:
    """Insert ``row`` inside a SAVEPOINT.

    A unique-constraint violation rolls back only the savepoint, so the
    request's transaction stays usable (the caller may re-read the
    winning row).  The violation surfaces as DuplicateKeyError.
    """
    try:
        async with session.begin_nested():
            session.add(row)
            await session.flush()
    except IntegrityError:
        raise DuplicateKeyError(conflict_message) from None
