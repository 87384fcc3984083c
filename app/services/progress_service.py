"""Topic completions and derived course progress.

Per (student, course) the progress moves NotEnrolled -> Enrolled(0%) ->
Enrolled(p%) -> Completed(100%).  Only topic completions move it; a
completion is permanent and there is no manual override of the
percentage.

Completing an already-completed topic returns the stored completion.
That is a success, unlike enrolling twice, which is a conflict.
"""

from __future__ import annotations

import logging
from uuid import UUID

from app.core.errors import DuplicateKeyError, NotFoundError
from app.core.metrics import COURSES_COMPLETED, TOPIC_COMPLETIONS
from app.models.principal import Principal
from app.models.progress import (
    Enrollment,
    ProgressReport,
    TopicCompletion,
    TopicProgress,
)
from app.repos.completion_repo import CompletionRepo
from app.repos.enrollment_repo import EnrollmentRepo
from app.repos.topic_repo import TopicRepo
from app.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


def compute_percentage(completed_count: int, total_topics: int) -> int:
    """Whole-number percentage, rounded half up.

    Integer arithmetic avoids float artefacts: 1 of 8 is exactly 12.5 and
    rounds to 13.  A course without topics is 0%, never 100%.  100% means
    every topic is done, so 199 of 200 reports 99, not a rounded-up 100.
    """
    if total_topics <= 0:
        return 0
    completed_count = max(0, min(completed_count, total_topics))
    percentage = (completed_count * 200 + total_topics) // (2 * total_topics)
    # Not plain half-up: only a finished course may report 100.
    if percentage == 100 and completed_count < total_topics:
        return 99
    return percentage


class ProgressService:
    def __init__(
        self,
        catalog: CatalogService,
        topics: TopicRepo,
        enrollments: EnrollmentRepo,
        completions: CompletionRepo,
    ) -> None:
        self._catalog = catalog
        self._topics = topics
        self._enrollments = enrollments
        self._completions = completions

    async def mark_topic_complete(
        self, topic_id: UUID, student: Principal
    ) -> TopicCompletion:
        topic = await self._catalog.get_topic(topic_id)

        enrollment = await self._enrollments.get_by_student_and_course(
            student.user_id, topic.course_id
        )
        if enrollment is None:
            logger.warning(
                "Completion rejected, not enrolled student=%s course=%s",
                student.user_id,
                topic.course_id,
            )
            raise NotFoundError(
                "You must be enrolled in the course to complete topics"
            )

        existing = await self._completions.get_by_student_and_topic(
            student.user_id, topic_id
        )
        if existing is not None:
            TOPIC_COMPLETIONS.labels(result="already_completed").inc()
            logger.debug(
                "Topic already completed student=%s topic=%s",
                student.user_id,
                topic_id,
            )
            return existing

        completion = TopicCompletion.new(
            student_id=student.user_id,
            topic_id=topic_id,
            enrollment_id=enrollment.id,
        )
        try:
            await self._completions.add(completion)
        except DuplicateKeyError:
            # A concurrent request stored it first; theirs is the record.
            winner = await self._completions.get_by_student_and_topic(
                student.user_id, topic_id
            )
            if winner is None:
                raise
            TOPIC_COMPLETIONS.labels(result="already_completed").inc()
            return winner

        TOPIC_COMPLETIONS.labels(result="created").inc()
        logger.info(
            "Topic completed student=%s topic=%s enrollment=%s",
            student.user_id,
            topic_id,
            enrollment.id,
            extra={
                "user_id": str(student.user_id),
                "topic_id": str(topic_id),
                "enrollment_id": str(enrollment.id),
            },
        )

        await self.recompute_progress(enrollment.id)
        return completion

    async def recompute_progress(self, enrollment_id: UUID) -> Enrollment:
        """Derive percentage and completed flag from the completion set.

        The enrollment is read under a row lock first, so concurrent
        recomputations for it run one after the other and the last one
        counts every completion.
        """
        enrollment = await self._enrollments.get_for_update(enrollment_id)
        if enrollment is None:
            raise NotFoundError("Course enrollment not found")

        completed_count = await self._completions.count_by_enrollment(enrollment_id)
        total_topics = await self._topics.count_by_course(enrollment.course_id)
        percentage = compute_percentage(completed_count, total_topics)
        completed = percentage == 100

        updated = await self._enrollments.update_progress(
            enrollment_id, percentage, completed
        )
        if updated is None:
            raise NotFoundError("Course enrollment not found")

        if completed and not enrollment.completed:
            COURSES_COMPLETED.inc()
        logger.info(
            "Progress recomputed enrollment=%s %d/%d -> %d%% completed=%s",
            enrollment_id,
            completed_count,
            total_topics,
            percentage,
            completed,
            extra={
                "enrollment_id": str(enrollment_id),
                "course_id": str(enrollment.course_id),
            },
        )
        return updated

    async def get_course_progress(
        self, course_id: UUID, student_id: UUID
    ) -> ProgressReport:
        """Overlay the student's completions on the ordered topic list."""
        enrollment = await self._enrollments.get_by_student_and_course(
            student_id, course_id
        )
        if enrollment is None:
            raise NotFoundError("Enrollment not found")

        completions = await self._completions.list_by_enrollment(enrollment.id)
        topics = await self._topics.list_by_course(course_id)

        completed_at = {c.topic_id: c.completed_at for c in completions}
        overlay = tuple(
            TopicProgress(
                topic=t,
                completed=t.id in completed_at,
                completed_at=completed_at.get(t.id),
            )
            for t in topics
        )

        return ProgressReport(
            enrollment=enrollment,
            total_topics=len(topics),
            completed_topics=len(completions),
            progress_percentage=enrollment.progress_percentage,
            topics=overlay,
        )
