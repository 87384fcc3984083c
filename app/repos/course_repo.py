from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any, Protocol
from uuid import UUID

from app.models.course import Course
from app.repos.enrollment_repo import InMemoryEnrollmentRepo
from app.repos.topic_repo import InMemoryTopicRepo


class CourseRepo(Protocol):
    async def get_by_id(self, course_id: UUID) -> Course | None: ...
    async def list_all(self) -> list[Course]: ...
    async def list_by_owner(self, owner_id: UUID) -> list[Course]: ...
    async def add(self, course: Course) -> None: ...
    async def update(
        self, course_id: UUID, changes: Mapping[str, Any]
    ) -> Course | None: ...
    async def delete(self, course_id: UUID) -> bool: ...


class InMemoryCourseRepo:
    """Courses own their topics and enrollments.

    ``delete`` removes the course together with every topic, enrollment
    and completion that hangs off it, in one call.
    """

    def __init__(
        self, topics: InMemoryTopicRepo, enrollments: InMemoryEnrollmentRepo
    ) -> None:
        self._by_id: dict[UUID, Course] = {}
        self._topics = topics
        self._enrollments = enrollments

    async def get_by_id(self, course_id: UUID) -> Course | None:
        return self._by_id.get(course_id)

    async def list_all(self) -> list[Course]:
        return sorted(self._by_id.values(), key=lambda c: c.created_at)

    async def list_by_owner(self, owner_id: UUID) -> list[Course]:
        return [c for c in await self.list_all() if c.owner_id == owner_id]

    async def add(self, course: Course) -> None:
        if course.id in self._by_id:
            raise ValueError("course already exists")
        self._by_id[course.id] = course

    async def update(
        self, course_id: UUID, changes: Mapping[str, Any]
    ) -> Course | None:
        existing = self._by_id.get(course_id)
        if existing is None:
            return None
        updated = replace(existing, **changes, updated_at=datetime.now(UTC))
        self._by_id[course_id] = updated
        return updated

    async def delete(self, course_id: UUID) -> bool:
        if self._by_id.pop(course_id, None) is None:
            return False
        self._topics.delete_by_course(course_id)
        self._enrollments.delete_by_course(course_id)
        return True

    def clear(self) -> None:
        self._by_id.clear()
