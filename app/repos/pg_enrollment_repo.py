"""PostgreSQL implementation of EnrollmentRepo."""

from __future__ import annotations

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import EnrollmentRow
from app.models.progress import Enrollment
from app.repos.pg_common import insert_row


class PgEnrollmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_for_update(self, enrollment_id: UUID) -> Enrollment | None:
        """Read the enrollment under FOR NO KEY UPDATE, held until commit.

        Concurrent recomputations of the same enrollment queue up here,
        and each one's later reads see the previous one's completions.
        A plain FOR UPDATE would conflict with the KEY SHARE lock that the
        topic_completions foreign key takes on insert, so two completions
        for different topics of one enrollment would deadlock.
        """
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.id == enrollment_id)
            .with_for_update(key_share=True)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def get_by_student_and_course(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        stmt = select(EnrollmentRow).where(
            EnrollmentRow.student_id == student_id,
            EnrollmentRow.course_id == course_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)

    async def list_by_student(self, student_id: UUID) -> list[Enrollment]:
        stmt = (
            select(EnrollmentRow)
            .where(EnrollmentRow.student_id == student_id)
            .order_by(EnrollmentRow.created_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_enrollment(r) for r in rows]

    async def add(self, enrollment: Enrollment) -> None:
        row = EnrollmentRow(
            id=enrollment.id,
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            progress_percentage=enrollment.progress_percentage,
            completed=enrollment.completed,
            created_at=enrollment.created_at,
            updated_at=enrollment.updated_at,
        )
        await insert_row(self._session, row, "enrollment already exists")

    async def update_progress(
        self, enrollment_id: UUID, progress_percentage: int, completed: bool
    ) -> Enrollment | None:
        stmt = (
            update(EnrollmentRow)
            .where(EnrollmentRow.id == enrollment_id)
            .values(
                progress_percentage=progress_percentage,
                completed=completed,
                updated_at=datetime.now(UTC),
            )
            .returning(EnrollmentRow)
            .execution_options(populate_existing=True)
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_enrollment(row)


def _row_to_enrollment(row: EnrollmentRow) -> Enrollment:
    return Enrollment(
        id=row.id,
        student_id=row.student_id,
        course_id=row.course_id,
        progress_percentage=row.progress_percentage,
        completed=row.completed,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
