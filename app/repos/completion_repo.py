from __future__ import annotations

from typing import Protocol
from uuid import UUID

from app.core.errors import DuplicateKeyError
from app.models.progress import TopicCompletion


class CompletionRepo(Protocol):
    async def get_by_student_and_topic(
        self, student_id: UUID, topic_id: UUID
    ) -> TopicCompletion | None: ...
    async def list_by_enrollment(
        self, enrollment_id: UUID
    ) -> list[TopicCompletion]: ...
    async def count_by_enrollment(self, enrollment_id: UUID) -> int: ...
    async def add(self, completion: TopicCompletion) -> None: ...


class InMemoryCompletionRepo:
    """Completions keyed by (student_id, topic_id), the uniqueness key."""

    def __init__(self) -> None:
        self._store: dict[tuple[UUID, UUID], TopicCompletion] = {}

    async def get_by_student_and_topic(
        self, student_id: UUID, topic_id: UUID
    ) -> TopicCompletion | None:
        return self._store.get((student_id, topic_id))

    async def list_by_enrollment(self, enrollment_id: UUID) -> list[TopicCompletion]:
        found = [c for c in self._store.values() if c.enrollment_id == enrollment_id]
        return sorted(found, key=lambda c: c.completed_at)

    async def count_by_enrollment(self, enrollment_id: UUID) -> int:
        return sum(1 for c in self._store.values() if c.enrollment_id == enrollment_id)

    async def add(self, completion: TopicCompletion) -> None:
        key = (completion.student_id, completion.topic_id)
        if key in self._store:
            raise DuplicateKeyError("topic already completed by this student")
        self._store[key] = completion

    # --- cascade hooks, called by the owning repos ---

    def delete_by_topic(self, topic_id: UUID) -> None:
        for key in [k for k in self._store if k[1] == topic_id]:
            del self._store[key]

    def delete_by_enrollments(self, enrollment_ids: set[UUID]) -> None:
        for key in [
            k for k, c in self._store.items() if c.enrollment_id in enrollment_ids
        ]:
            del self._store[key]

    def clear(self) -> None:
        self._store.clear()
