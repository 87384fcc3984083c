from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from app.models.course import Topic
from app.models.user import PublicProfile


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Enrollment:
    """A student's registration in a course.

    progress_percentage and completed are derived from the completion set
    by the progress engine; nothing else writes them.
    """

    id: UUID
    student_id: UUID
    course_id: UUID
    progress_percentage: int = 0
    completed: bool = False
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(*, student_id: UUID, course_id: UUID) -> Enrollment:
        now = _now()
        return Enrollment(
            id=uuid4(),
            student_id=student_id,
            course_id=course_id,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class TopicCompletion:
    """Permanent record that a student finished a topic."""

    id: UUID
    student_id: UUID
    topic_id: UUID
    enrollment_id: UUID
    completed_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(
        *, student_id: UUID, topic_id: UUID, enrollment_id: UUID
    ) -> TopicCompletion:
        return TopicCompletion(
            id=uuid4(),
            student_id=student_id,
            topic_id=topic_id,
            enrollment_id=enrollment_id,
        )


# --- Read models ---


@dataclass(frozen=True, slots=True)
class CourseSummary:
    id: UUID
    title: str
    description: str
    image: str | None
    owner: PublicProfile | None


@dataclass(frozen=True, slots=True)
class EnrollmentView:
    enrollment: Enrollment
    course: CourseSummary
    completions: tuple[TopicCompletion, ...] = ()


@dataclass(frozen=True, slots=True)
class TopicProgress:
    topic: Topic
    completed: bool
    completed_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class ProgressReport:
    enrollment: Enrollment
    total_topics: int
    completed_topics: int
    progress_percentage: int
    topics: tuple[TopicProgress, ...] = ()
