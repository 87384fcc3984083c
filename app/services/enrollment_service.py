from __future__ import annotations

import logging
from uuid import UUID

from app.core.errors import AlreadyEnrolledError, DuplicateKeyError, NotFoundError
from app.core.metrics import ENROLLMENTS
from app.models.course import Course
from app.models.principal import Principal
from app.models.progress import CourseSummary, Enrollment, EnrollmentView
from app.repos.completion_repo import CompletionRepo
from app.repos.enrollment_repo import EnrollmentRepo
from app.services.catalog_service import CatalogService

logger = logging.getLogger(__name__)


class EnrollmentService:
    def __init__(
        self,
        catalog: CatalogService,
        enrollments: EnrollmentRepo,
        completions: CompletionRepo,
    ) -> None:
        self._catalog = catalog
        self._enrollments = enrollments
        self._completions = completions

    async def enroll(self, course_id: UUID, student: Principal) -> Enrollment:
        """Create the student's enrollment in a course.

        A second enrollment for the same (student, course) is a conflict,
        whether it is caught by the lookup or by the storage constraint.
        """
        try:
            await self._catalog.get_course(course_id)
        except NotFoundError:
            ENROLLMENTS.labels(result="course_not_found").inc()
            raise

        existing = await self._enrollments.get_by_student_and_course(
            student.user_id, course_id
        )
        if existing is not None:
            ENROLLMENTS.labels(result="already_enrolled").inc()
            logger.warning(
                "Duplicate enrollment rejected student=%s course=%s",
                student.user_id,
                course_id,
            )
            raise AlreadyEnrolledError()

        enrollment = Enrollment.new(student_id=student.user_id, course_id=course_id)
        try:
            await self._enrollments.add(enrollment)
        except DuplicateKeyError:
            # Lost the race against a concurrent enroll for the same pair.
            ENROLLMENTS.labels(result="already_enrolled").inc()
            logger.warning(
                "Duplicate enrollment rejected by constraint student=%s course=%s",
                student.user_id,
                course_id,
            )
            raise AlreadyEnrolledError() from None

        ENROLLMENTS.labels(result="created").inc()
        logger.info(
            "Student enrolled student=%s course=%s enrollment=%s",
            student.user_id,
            course_id,
            enrollment.id,
            extra={
                "user_id": str(student.user_id),
                "course_id": str(course_id),
                "enrollment_id": str(enrollment.id),
            },
        )
        return enrollment

    async def list_enrollments(self, student_id: UUID) -> list[EnrollmentView]:
        views: list[EnrollmentView] = []
        for enrollment in await self._enrollments.list_by_student(student_id):
            course = await self._catalog.get_course(enrollment.course_id)
            completions = await self._completions.list_by_enrollment(enrollment.id)
            views.append(
                EnrollmentView(
                    enrollment=enrollment,
                    course=await self._summarize(course),
                    completions=tuple(completions),
                )
            )
        return views

    async def _summarize(self, course: Course) -> CourseSummary:
        return CourseSummary(
            id=course.id,
            title=course.title,
            description=course.description,
            image=course.image,
            owner=await self._catalog.owner_profile(course),
        )
