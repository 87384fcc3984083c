"""Course and topic catalog.

Reads are open to anyone.  Every mutation resolves the owning course
first and runs it through the ownership policy.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from app.core.errors import InvalidPatchError, NotFoundError
from app.models.course import (
    COURSE_NULLABLE,
    COURSE_PATCHABLE,
    TOPIC_NULLABLE,
    TOPIC_PATCHABLE,
    Course,
    CourseDetail,
    Topic,
)
from app.models.principal import Principal
from app.models.user import PublicProfile
from app.repos.course_repo import CourseRepo
from app.repos.topic_repo import TopicRepo
from app.repos.user_repo import UserRepo
from app.services.policy import ensure_can_modify

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class CourseDraft:
    title: str
    description: str
    image: str | None = None


@dataclass(frozen=True, slots=True)
class TopicDraft:
    title: str
    content: str
    description: str
    duration: int = 0
    order: int = 0
    image: str | None = None
    video: str | None = None


def _clean_patch(
    changes: Mapping[str, Any],
    allowed: frozenset[str],
    nullable: frozenset[str],
) -> dict[str, Any]:
    unknown = set(changes) - allowed
    if unknown:
        raise InvalidPatchError(f"Fields not patchable: {', '.join(sorted(unknown))}")
    for key, value in changes.items():
        if value is None and key not in nullable:
            raise InvalidPatchError(f"{key} cannot be null")
    for key in ("duration", "order"):
        value = changes.get(key)
        if value is not None and value < 0:
            raise InvalidPatchError(f"{key} must be >= 0")
    return dict(changes)


class CatalogService:
    def __init__(
        self, courses: CourseRepo, topics: TopicRepo, users: UserRepo
    ) -> None:
        self._courses = courses
        self._topics = topics
        self._users = users

    # --- courses ---

    async def get_course(self, course_id: UUID) -> Course:
        course = await self._courses.get_by_id(course_id)
        if course is None:
            logger.warning("Course not found id=%s", course_id)
            raise NotFoundError("Course not found")
        return course

    async def list_courses(self) -> list[Course]:
        return await self._courses.list_all()

    async def list_courses_by_owner(self, owner_id: UUID) -> list[Course]:
        return await self._courses.list_by_owner(owner_id)

    async def owner_profile(self, course: Course) -> PublicProfile | None:
        owner = await self._users.get_by_id(course.owner_id)
        return PublicProfile.of(owner) if owner is not None else None

    async def describe_course(self, course: Course) -> CourseDetail:
        """Attach the owner profile and the topics in catalog order."""
        return CourseDetail(
            course=course,
            owner=await self.owner_profile(course),
            topics=tuple(await self._topics.list_by_course(course.id)),
        )

    async def create_course(self, actor: Principal, draft: CourseDraft) -> Course:
        course = Course.new(
            title=draft.title,
            description=draft.description,
            image=draft.image,
            owner_id=actor.user_id,
        )
        await self._courses.add(course)
        logger.info(
            "Course created id=%s owner=%s",
            course.id,
            actor.user_id,
            extra={"course_id": str(course.id), "user_id": str(actor.user_id)},
        )
        return course

    async def update_course(
        self, course_id: UUID, changes: Mapping[str, Any], actor: Principal
    ) -> Course:
        course = await self.get_course(course_id)
        ensure_can_modify(actor, course.owner_id, resource="course", action="update")

        patch = _clean_patch(changes, COURSE_PATCHABLE, COURSE_NULLABLE)
        if not patch:
            return course
        updated = await self._courses.update(course_id, patch)
        if updated is None:
            raise NotFoundError("Course not found")
        logger.info(
            "Course updated id=%s fields=%s",
            course_id,
            sorted(patch),
            extra={"course_id": str(course_id), "user_id": str(actor.user_id)},
        )
        return updated

    async def delete_course(self, course_id: UUID, actor: Principal) -> None:
        course = await self.get_course(course_id)
        ensure_can_modify(actor, course.owner_id, resource="course", action="delete")

        if not await self._courses.delete(course_id):
            raise NotFoundError("Course not found")
        logger.info(
            "Course deleted id=%s (topics cascaded)",
            course_id,
            extra={"course_id": str(course_id), "user_id": str(actor.user_id)},
        )

    # --- topics ---

    async def list_topics(self, course_id: UUID) -> list[Topic]:
        """Topics of a course in catalog order (order, then creation time)."""
        await self.get_course(course_id)
        return await self._topics.list_by_course(course_id)

    async def get_topic(self, topic_id: UUID) -> Topic:
        topic = await self._topics.get_by_id(topic_id)
        if topic is None:
            logger.warning("Topic not found id=%s", topic_id)
            raise NotFoundError("Topic not found")
        return topic

    async def create_topic(
        self, course_id: UUID, draft: TopicDraft, actor: Principal
    ) -> Topic:
        course = await self.get_course(course_id)
        ensure_can_modify(actor, course.owner_id, resource="topic", action="create")

        topic = Topic.new(
            course_id=course_id,
            title=draft.title,
            content=draft.content,
            description=draft.description,
            duration=draft.duration,
            order=draft.order,
            image=draft.image,
            video=draft.video,
        )
        await self._topics.add(topic)
        logger.info(
            "Topic created id=%s course=%s order=%d",
            topic.id,
            course_id,
            topic.order,
            extra={"topic_id": str(topic.id), "course_id": str(course_id)},
        )
        return topic

    async def update_topic(
        self, topic_id: UUID, changes: Mapping[str, Any], actor: Principal
    ) -> Topic:
        topic = await self.get_topic(topic_id)
        course = await self.get_course(topic.course_id)
        ensure_can_modify(actor, course.owner_id, resource="topic", action="update")

        patch = _clean_patch(changes, TOPIC_PATCHABLE, TOPIC_NULLABLE)
        if not patch:
            return topic
        updated = await self._topics.update(topic_id, patch)
        if updated is None:
            raise NotFoundError("Topic not found")
        logger.info(
            "Topic updated id=%s fields=%s",
            topic_id,
            sorted(patch),
            extra={"topic_id": str(topic_id), "course_id": str(course.id)},
        )
        return updated

    async def delete_topic(self, topic_id: UUID, actor: Principal) -> None:
        topic = await self.get_topic(topic_id)
        course = await self.get_course(topic.course_id)
        ensure_can_modify(actor, course.owner_id, resource="topic", action="delete")

        if not await self._topics.delete(topic_id):
            raise NotFoundError("Topic not found")
        logger.info(
            "Topic deleted id=%s course=%s",
            topic_id,
            course.id,
            extra={"topic_id": str(topic_id), "course_id": str(course.id)},
        )
