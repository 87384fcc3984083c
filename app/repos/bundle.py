"""Repository bundles: one per unit of work.

The in-memory bundle is a process-wide singleton (dev/test).  The
PostgreSQL bundle is built per request around that request's session.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.repos.completion_repo import CompletionRepo, InMemoryCompletionRepo
from app.repos.course_repo import CourseRepo, InMemoryCourseRepo
from app.repos.enrollment_repo import EnrollmentRepo, InMemoryEnrollmentRepo
from app.repos.pg_completion_repo import PgCompletionRepo
from app.repos.pg_course_repo import PgCourseRepo
from app.repos.pg_enrollment_repo import PgEnrollmentRepo
from app.repos.pg_topic_repo import PgTopicRepo
from app.repos.pg_user_repo import PgUserRepo
from app.repos.topic_repo import InMemoryTopicRepo, TopicRepo
from app.repos.user_repo import InMemoryUserRepo, UserRepo


@dataclass(frozen=True)
class Repos:
    users: UserRepo
    courses: CourseRepo
    topics: TopicRepo
    enrollments: EnrollmentRepo
    completions: CompletionRepo


@dataclass(frozen=True)
class InMemoryRepos(Repos):
    users: InMemoryUserRepo
    courses: InMemoryCourseRepo
    topics: InMemoryTopicRepo
    enrollments: InMemoryEnrollmentRepo
    completions: InMemoryCompletionRepo

    def clear(self) -> None:
        self.users.clear()
        self.courses.clear()
        self.topics.clear()
        self.enrollments.clear()
        self.completions.clear()


def build_in_memory_repos() -> InMemoryRepos:
    completions = InMemoryCompletionRepo()
    enrollments = InMemoryEnrollmentRepo(completions)
    topics = InMemoryTopicRepo(completions)
    courses = InMemoryCourseRepo(topics, enrollments)
    return InMemoryRepos(
        users=InMemoryUserRepo(),
        courses=courses,
        topics=topics,
        enrollments=enrollments,
        completions=completions,
    )


def build_pg_repos(session: AsyncSession) -> Repos:
    return Repos(
        users=PgUserRepo(session),
        courses=PgCourseRepo(session),
        topics=PgTopicRepo(session),
        enrollments=PgEnrollmentRepo(session),
        completions=PgCompletionRepo(session),
    )
