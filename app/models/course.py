from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID, uuid4

from app.models.user import PublicProfile


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True, slots=True)
class Course:
    id: UUID
    title: str
    description: str
    owner_id: UUID
    image: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(
        *,
        title: str,
        description: str,
        owner_id: UUID,
        image: str | None = None,
    ) -> Course:
        now = _now()
        return Course(
            id=uuid4(),
            title=title,
            description=description,
            owner_id=owner_id,
            image=image,
            created_at=now,
            updated_at=now,
        )


@dataclass(frozen=True, slots=True)
class Topic:
    id: UUID
    course_id: UUID
    title: str
    content: str
    description: str
    duration: int = 0  # minutes
    order: int = 0  # not unique; ties fall back to created_at
    image: str | None = None
    video: str | None = None
    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)

    @staticmethod
    def new(
        *,
        course_id: UUID,
        title: str,
        content: str,
        description: str,
        duration: int = 0,
        order: int = 0,
        image: str | None = None,
        video: str | None = None,
    ) -> Topic:
        if duration < 0:
            raise ValueError("duration must be >= 0")
        if order < 0:
            raise ValueError("order must be >= 0")
        now = _now()
        return Topic(
            id=uuid4(),
            course_id=course_id,
            title=title,
            content=content,
            description=description,
            duration=duration,
            order=order,
            image=image,
            video=video,
            created_at=now,
            updated_at=now,
        )


def topic_sort_key(topic: Topic) -> tuple[int, datetime]:
    """Catalog order: ascending ``order``, then ascending creation time."""
    return (topic.order, topic.created_at)


# Fields a caller may change through a patch.  Everything else (ids, owner,
# timestamps) is managed by the catalog itself.
COURSE_PATCHABLE = frozenset({"title", "description", "image"})
TOPIC_PATCHABLE = frozenset(
    {"title", "content", "description", "duration", "order", "image", "video"}
)
COURSE_NULLABLE = frozenset({"image"})
TOPIC_NULLABLE = frozenset({"image", "video"})


@dataclass(frozen=True, slots=True)
class CourseDetail:
    """A course as the catalog reads it: owner profile and ordered topics."""

    course: Course
    owner: PublicProfile | None  # None once the owner account is gone
    topics: tuple[Topic, ...]
