"""Student enrollment and progress endpoints.

  POST /v1/progress/enroll/{course_id}        -> 201 enrollment (409 if enrolled)
  GET  /v1/progress/my-courses                -> enrollments with course summary
  GET  /v1/progress/course/{course_id}        -> progress report
  POST /v1/progress/complete-topic/{topic_id} -> completion (idempotent)
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from app.api.dependencies import (
    Student,
    get_enrollment_service,
    get_progress_service,
)
from app.api.courses import OwnerOut
from app.api.topics import TopicOut
from app.models.progress import (
    CourseSummary,
    Enrollment,
    EnrollmentView,
    ProgressReport,
    TopicCompletion,
)
from app.services.enrollment_service import EnrollmentService
from app.services.progress_service import ProgressService

router = APIRouter(prefix="/v1/progress", tags=["progress"])

Enrollments = Annotated[EnrollmentService, Depends(get_enrollment_service)]
Progress = Annotated[ProgressService, Depends(get_progress_service)]


class EnrollmentOut(BaseModel):
    id: UUID
    student_id: UUID
    course_id: UUID
    progress_percentage: int
    completed: bool
    created_at: datetime

    @staticmethod
    def of(e: Enrollment) -> EnrollmentOut:
        return EnrollmentOut(
            id=e.id,
            student_id=e.student_id,
            course_id=e.course_id,
            progress_percentage=e.progress_percentage,
            completed=e.completed,
            created_at=e.created_at,
        )


class CompletionOut(BaseModel):
    id: UUID
    student_id: UUID
    topic_id: UUID
    enrollment_id: UUID
    completed_at: datetime

    @staticmethod
    def of(c: TopicCompletion) -> CompletionOut:
        return CompletionOut(
            id=c.id,
            student_id=c.student_id,
            topic_id=c.topic_id,
            enrollment_id=c.enrollment_id,
            completed_at=c.completed_at,
        )


class CourseSummaryOut(BaseModel):
    id: UUID
    title: str
    description: str
    image: str | None
    owner: OwnerOut | None

    @staticmethod
    def of(s: CourseSummary) -> CourseSummaryOut:
        return CourseSummaryOut(
            id=s.id,
            title=s.title,
            description=s.description,
            image=s.image,
            owner=OwnerOut.of(s.owner) if s.owner is not None else None,
        )


class EnrollmentViewOut(EnrollmentOut):
    course: CourseSummaryOut
    completions: list[CompletionOut]

    @staticmethod
    def of_view(v: EnrollmentView) -> EnrollmentViewOut:
        return EnrollmentViewOut(
            **EnrollmentOut.of(v.enrollment).model_dump(),
            course=CourseSummaryOut.of(v.course),
            completions=[CompletionOut.of(c) for c in v.completions],
        )


class TopicProgressOut(TopicOut):
    completed: bool
    completed_at: datetime | None


class ProgressReportOut(BaseModel):
    enrollment: EnrollmentOut
    total_topics: int
    completed_topics: int
    progress_percentage: int
    topics: list[TopicProgressOut]

    @staticmethod
    def of(r: ProgressReport) -> ProgressReportOut:
        return ProgressReportOut(
            enrollment=EnrollmentOut.of(r.enrollment),
            total_topics=r.total_topics,
            completed_topics=r.completed_topics,
            progress_percentage=r.progress_percentage,
            topics=[
                TopicProgressOut(
                    **TopicOut.of(tp.topic).model_dump(),
                    completed=tp.completed,
                    completed_at=tp.completed_at,
                )
                for tp in r.topics
            ],
        )


@router.post(
    "/enroll/{course_id}",
    response_model=EnrollmentOut,
    status_code=status.HTTP_201_CREATED,
)
async def enroll_in_course(
    course_id: UUID, principal: Student, enrollments: Enrollments
) -> EnrollmentOut:
    return EnrollmentOut.of(await enrollments.enroll(course_id, principal))


@router.get("/my-courses", response_model=list[EnrollmentViewOut])
async def list_my_enrollments(
    principal: Student, enrollments: Enrollments
) -> list[EnrollmentViewOut]:
    views = await enrollments.list_enrollments(principal.user_id)
    return [EnrollmentViewOut.of_view(v) for v in views]


@router.get("/course/{course_id}", response_model=ProgressReportOut)
async def get_course_progress(
    course_id: UUID, principal: Student, progress: Progress
) -> ProgressReportOut:
    report = await progress.get_course_progress(course_id, principal.user_id)
    return ProgressReportOut.of(report)


@router.post("/complete-topic/{topic_id}", response_model=CompletionOut)
async def complete_topic(
    topic_id: UUID, principal: Student, progress: Progress
) -> CompletionOut:
    return CompletionOut.of(await progress.mark_topic_complete(topic_id, principal))
