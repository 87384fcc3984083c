"""PostgreSQL implementation of TopicRepo."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.tables import TopicRow
from app.models.course import Topic
from app.repos.pg_common import insert_row


class PgTopicRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, topic_id: UUID) -> Topic | None:
        stmt = select(TopicRow).where(TopicRow.id == topic_id)
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_topic(row)

    async def list_by_course(self, course_id: UUID) -> list[Topic]:
        stmt = (
            select(TopicRow)
            .where(TopicRow.course_id == course_id)
            .order_by(TopicRow.order.asc(), TopicRow.created_at.asc())
        )
        rows = (await self._session.execute(stmt)).scalars().all()
        return [_row_to_topic(r) for r in rows]

    async def count_by_course(self, course_id: UUID) -> int:
        stmt = (
            select(func.count())
            .select_from(TopicRow)
            .where(TopicRow.course_id == course_id)
        )
        return (await self._session.execute(stmt)).scalar_one()

    async def add(self, topic: Topic) -> None:
        row = TopicRow(
            id=topic.id,
            course_id=topic.course_id,
            title=topic.title,
            content=topic.content,
            description=topic.description,
            duration=topic.duration,
            image=topic.image,
            video=topic.video,
            order=topic.order,
            created_at=topic.created_at,
            updated_at=topic.updated_at,
        )
        await insert_row(self._session, row, "topic already exists")

    async def update(self, topic_id: UUID, changes: Mapping[str, Any]) -> Topic | None:
        stmt = (
            update(TopicRow)
            .where(TopicRow.id == topic_id)
            .values(**changes, updated_at=datetime.now(UTC))
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 0:
            return None
        return await self.get_by_id(topic_id)

    async def delete(self, topic_id: UUID) -> bool:
        result = await self._session.execute(
            delete(TopicRow).where(TopicRow.id == topic_id)
        )
        return result.rowcount > 0


def _row_to_topic(row: TopicRow) -> Topic:
    return Topic(
        id=row.id,
        course_id=row.course_id,
        title=row.title,
        content=row.content,
        description=row.description,
        duration=row.duration,
        order=row.order,
        image=row.image,
        video=row.video,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
