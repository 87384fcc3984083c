from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID

from app.models.course import Topic, topic_sort_key
from app.repos.completion_repo import InMemoryCompletionRepo


class TopicRepo(Protocol):
    async def get_by_id(self, topic_id: UUID) -> Topic | None: ...
    async def list_by_course(self, course_id: UUID) -> list[Topic]: ...
    async def count_by_course(self, course_id: UUID) -> int: ...
    async def add(self, topic: Topic) -> None: ...
    async def update(
        self, topic_id: UUID, changes: Mapping[str, Any]
    ) -> Topic | None: ...
    async def delete(self, topic_id: UUID) -> bool: ...


class InMemoryTopicRepo:
    def __init__(self, completions: InMemoryCompletionRepo) -> None:
        self._by_id: dict[UUID, Topic] = {}
        self._completions = completions

    async def get_by_id(self, topic_id: UUID) -> Topic | None:
        return self._by_id.get(topic_id)

    async def list_by_course(self, course_id: UUID) -> list[Topic]:
        # sorted() is stable, so same-instant creations keep insertion order.
        topics = [t for t in self._by_id.values() if t.course_id == course_id]
        return sorted(topics, key=topic_sort_key)

    async def count_by_course(self, course_id: UUID) -> int:
        return sum(1 for t in self._by_id.values() if t.course_id == course_id)

    async def add(self, topic: Topic) -> None:
        if topic.id in self._by_id:
            raise ValueError("topic already exists")
        self._by_id[topic.id] = topic

    async def update(self, topic_id: UUID, changes: Mapping[str, Any]) -> Topic | None:
        existing = self._by_id.get(topic_id)
        if existing is None:
            return None
        updated = replace(existing, **changes, updated_at=datetime.now(UTC))
        self._by_id[topic_id] = updated
        return updated

    async def delete(self, topic_id: UUID) -> bool:
        if self._by_id.pop(topic_id, None) is None:
            return False
        self._completions.delete_by_topic(topic_id)
        return True

    def delete_by_course(self, course_id: UUID) -> None:
        for topic_id in [t.id for t in self._by_id.values() if t.course_id == course_id]:
            del self._by_id[topic_id]
            self._completions.delete_by_topic(topic_id)

    def clear(self) -> None:
        self._by_id.clear()
