from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID

from app.core.errors import DuplicateKeyError
from app.models.progress import Enrollment
from app.repos.completion_repo import InMemoryCompletionRepo


class EnrollmentRepo(Protocol):
    async def get_for_update(self, enrollment_id: UUID) -> Enrollment | None: ...
    async def get_by_student_and_course(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None: ...
    async def list_by_student(self, student_id: UUID) -> list[Enrollment]: ...
    async def add(self, enrollment: Enrollment) -> None: ...
    async def update_progress(
        self, enrollment_id: UUID, progress_percentage: int, completed: bool
    ) -> Enrollment | None: ...


class InMemoryEnrollmentRepo:
    def __init__(self, completions: InMemoryCompletionRepo) -> None:
        self._by_id: dict[UUID, Enrollment] = {}
        self._by_pair: dict[tuple[UUID, UUID], UUID] = {}
        self._completions = completions

    async def get_for_update(self, enrollment_id: UUID) -> Enrollment | None:
        # Nothing here suspends, so a caller's read-modify-write on the
        # in-memory store cannot interleave with another coroutine.
        return self._by_id.get(enrollment_id)

    async def get_by_student_and_course(
        self, student_id: UUID, course_id: UUID
    ) -> Enrollment | None:
        enrollment_id = self._by_pair.get((student_id, course_id))
        if enrollment_id is None:
            return None
        return self._by_id.get(enrollment_id)

    async def list_by_student(self, student_id: UUID) -> list[Enrollment]:
        found = [e for e in self._by_id.values() if e.student_id == student_id]
        return sorted(found, key=lambda e: e.created_at)

    async def add(self, enrollment: Enrollment) -> None:
        key = (enrollment.student_id, enrollment.course_id)
        if key in self._by_pair:
            raise DuplicateKeyError("enrollment already exists")
        self._by_pair[key] = enrollment.id
        self._by_id[enrollment.id] = enrollment

    async def update_progress(
        self, enrollment_id: UUID, progress_percentage: int, completed: bool
    ) -> Enrollment | None:
        existing = self._by_id.get(enrollment_id)
        if existing is None:
            return None
        updated = replace(
            existing,
            progress_percentage=progress_percentage,
            completed=completed,
            updated_at=datetime.now(UTC),
        )
        self._by_id[enrollment_id] = updated
        return updated

    def delete_by_course(self, course_id: UUID) -> None:
        doomed = {e.id for e in self._by_id.values() if e.course_id == course_id}
        self._completions.delete_by_enrollments(doomed)
        for enrollment_id in doomed:
            e = self._by_id.pop(enrollment_id)
            self._by_pair.pop((e.student_id, e.course_id), None)

    def clear(self) -> None:
        self._by_id.clear()
        self._by_pair.clear()
