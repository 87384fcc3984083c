"""PostgreSQL implementation of CompletionRepo."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import TopicCompletionRow
from app.models.progress import TopicCompletion
from app.repos.pg_common import insert_row


class PgCompletionRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_student_and_topic(
        self, student_id: UUID, topic_id: UUID
    ) -> TopicCompletion | None:
        stmt = select(TopicCompletionRow).where(
            TopicCompletionRow.student_id == student_id,
            TopicCompletionRow.topic_id == topic_id,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_completion(row)

    async def list_by_enrollment(self, enrollment_id: UUID) -> list[TopicCompletion]:
        stmt = (
            select(TopicCompletionRow)
            .where(TopicCompletionRow.enrollment_id == enrollment_id)
            .order_by(TopicCompletionRow.completed_at)
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_completion(r) for r in rows]

    async def count_by_enrollment(self, enrollment_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(TopicCompletionRow)
            .where(TopicCompletionRow.enrollment_id == enrollment_id)
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def add(self, completion: TopicCompletion) -> None:
        row = TopicCompletionRow(
            id=completion.id,
            student_id=completion.student_id,
            topic_id=completion.topic_id,
            enrollment_id=completion.enrollment_id,
            completed_at=completion.completed_at,
        )
        await insert_row(
            self._session, row, "topic already completed by this student"
        )


def _row_to_completion(row: TopicCompletionRow) -> TopicCompletion:
    return TopicCompletion(
        id=row.id,
        student_id=row.student_id,
        topic_id=row.topic_id,
        enrollment_id=row.enrollment_id,
        completed_at=row.completed_at,
    )
