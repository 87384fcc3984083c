"""Course catalog endpoints.

Listing and reading are public; reads carry the owner profile and the
topics in catalog order.  Creating needs a tutor or admin token;
updating and deleting additionally need ownership of the course (or the
admin role), enforced by the catalog service.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from app.api.dependencies import Author, get_catalog_service
from app.api.topics import TopicOut
from app.models.course import Course, CourseDetail
from app.models.user import PublicProfile
from app.services.catalog_service import CatalogService, CourseDraft

router = APIRouter(prefix="/v1/courses", tags=["courses"])

Catalog = Annotated[CatalogService, Depends(get_catalog_service)]


class CourseIn(BaseModel):
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    image: str | None = None


class CoursePatchIn(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    image: str | None = None


class CourseOut(BaseModel):
    id: UUID
    title: str
    description: str
    image: str | None
    owner_id: UUID
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def of(course: Course) -> CourseOut:
        return CourseOut(
            id=course.id,
            title=course.title,
            description=course.description,
            image=course.image,
            owner_id=course.owner_id,
            created_at=course.created_at,
            updated_at=course.updated_at,
        )


class OwnerOut(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    email: str

    @staticmethod
    def of(profile: PublicProfile) -> OwnerOut:
        return OwnerOut(
            id=profile.id,
            first_name=profile.first_name,
            last_name=profile.last_name,
            email=profile.email,
        )


class CourseDetailOut(CourseOut):
    owner: OwnerOut | None
    topics: list[TopicOut]

    @staticmethod
    def of(detail: CourseDetail) -> CourseDetailOut:
        return CourseDetailOut(
            **CourseOut.of(detail.course).model_dump(),
            owner=OwnerOut.of(detail.owner) if detail.owner is not None else None,
            topics=[TopicOut.of(t) for t in detail.topics],
        )


@router.get("", response_model=list[CourseDetailOut])
async def list_courses(catalog: Catalog) -> list[CourseDetailOut]:
    return [
        CourseDetailOut.of(await catalog.describe_course(c))
        for c in await catalog.list_courses()
    ]


# Declared before /{course_id} so the literal path wins.
@router.get("/my-courses", response_model=list[CourseDetailOut])
async def list_my_courses(
    principal: Author, catalog: Catalog
) -> list[CourseDetailOut]:
    courses = await catalog.list_courses_by_owner(principal.user_id)
    return [CourseDetailOut.of(await catalog.describe_course(c)) for c in courses]


@router.get("/{course_id}", response_model=CourseDetailOut)
async def get_course(course_id: UUID, catalog: Catalog) -> CourseDetailOut:
    course = await catalog.get_course(course_id)
    return CourseDetailOut.of(await catalog.describe_course(course))


@router.post("", response_model=CourseOut, status_code=status.HTTP_201_CREATED)
async def create_course(
    body: CourseIn, principal: Author, catalog: Catalog
) -> CourseOut:
    draft = CourseDraft(title=body.title, description=body.description, image=body.image)
    return CourseOut.of(await catalog.create_course(principal, draft))


@router.patch("/{course_id}", response_model=CourseOut)
async def update_course(
    course_id: UUID, body: CoursePatchIn, principal: Author, catalog: Catalog
) -> CourseOut:
    changes = body.model_dump(exclude_unset=True)
    return CourseOut.of(await catalog.update_course(course_id, changes, principal))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_course(course_id: UUID, principal: Author, catalog: Catalog) -> Response:
    await catalog.delete_course(course_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
