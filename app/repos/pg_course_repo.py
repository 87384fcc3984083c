"""PostgreSQL implementation of CourseRepo."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import CourseRow
from app.models.course import Course
from app.repos.pg_common import insert_row


class PgCourseRepo:
    """Satisfies the CourseRepo Protocol.

    Topic, enrollment and completion cleanup on delete is done by the
    ON DELETE CASCADE foreign keys in the same statement.
    """

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, course_id: UUID) -> Course | None:
        stmt = select(CourseRow).where(CourseRow.id == course_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_course(row)

    async def list_all(self) -> list[Course]:
        stmt = select(CourseRow).order_by(CourseRow.created_at)
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def list_by_owner(self, owner_id: UUID) -> list[Course]:
        stmt = (
            select(CourseRow)
            .where(CourseRow.owner_id == owner_id)
            .order_by(CourseRow.created_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_course(r) for r in rows]

    async def add(self, course: Course) -> None:
        row = CourseRow(
            id=course.id,
            title=course.title,
            description=course.description,
            image=course.image,
            owner_id=course.owner_id,
            created_at=course.created_at,
            updated_at=course.updated_at,
        )
        await insert_row(self._session, row, "course already exists")

    async def update(
        self, course_id: UUID, changes: Mapping[str, Any]
    ) -> Course | None:
        stmt = (
            update(CourseRow)
            .where(CourseRow.id == course_id)
            .values(**changes, updated_at=datetime.now(UTC))
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(course_id)

    async def delete(self, course_id: UUID) -> bool:
        result = await self._session.execute(
            delete(CourseRow).where(CourseRow.id == course_id)
        )
        return result.rowcount > 0


def _row_to_course(row: CourseRow) -> Course:
    return Course(
        id=row.id,
        title=row.title,
        description=row.description,
        image=row.image,
        owner_id=row.owner_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
