"""Topic endpoints, nested under their course."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from app.api.dependencies import Author, get_catalog_service
from app.core.errors import NotFoundError
from app.models.course import Topic
from app.services.catalog_service import CatalogService, TopicDraft

router = APIRouter(prefix="/v1/courses/{course_id}/topics", tags=["topics"])

Catalog = Annotated[CatalogService, Depends(get_catalog_service)]


class TopicIn(BaseModel):
    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    description: str = Field(min_length=1)
    duration: int = Field(default=0, ge=0)
    order: int = Field(default=0, ge=0)
    image: str | None = None
    video: str | None = None


class TopicPatchIn(BaseModel):
    title: str | None = Field(default=None, min_length=1)
    content: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    duration: int | None = Field(default=None, ge=0)
    order: int | None = Field(default=None, ge=0)
    image: str | None = None
    video: str | None = None


class TopicOut(BaseModel):
    id: UUID
    course_id: UUID
    title: str
    content: str
    description: str
    duration: int
    order: int
    image: str | None
    video: str | None
    created_at: datetime
    updated_at: datetime

    @staticmethod
    def of(topic: Topic) -> TopicOut:
        return TopicOut(
            id=topic.id,
            course_id=topic.course_id,
            title=topic.title,
            content=topic.content,
            description=topic.description,
            duration=topic.duration,
            order=topic.order,
            image=topic.image,
            video=topic.video,
            created_at=topic.created_at,
            updated_at=topic.updated_at,
        )


async def _topic_in_course(
    catalog: CatalogService, course_id: UUID, topic_id: UUID
) -> Topic:
    topic = await catalog.get_topic(topic_id)
    if topic.course_id != course_id:
        raise NotFoundError("Topic not found")
    return topic


@router.get("", response_model=list[TopicOut])
async def list_topics(course_id: UUID, catalog: Catalog) -> list[TopicOut]:
    return [TopicOut.of(t) for t in await catalog.list_topics(course_id)]


@router.get("/{topic_id}", response_model=TopicOut)
async def get_topic(course_id: UUID, topic_id: UUID, catalog: Catalog) -> TopicOut:
    return TopicOut.of(await _topic_in_course(catalog, course_id, topic_id))


@router.post("", response_model=TopicOut, status_code=status.HTTP_201_CREATED)
async def create_topic(
    course_id: UUID, body: TopicIn, principal: Author, catalog: Catalog
) -> TopicOut:
    draft = TopicDraft(**body.model_dump())
    return TopicOut.of(await catalog.create_topic(course_id, draft, principal))


@router.patch("/{topic_id}", response_model=TopicOut)
async def update_topic(
    course_id: UUID,
    topic_id: UUID,
    body: TopicPatchIn,
    principal: Author,
    catalog: Catalog,
) -> TopicOut:
    await _topic_in_course(catalog, course_id, topic_id)
    changes = body.model_dump(exclude_unset=True)
    return TopicOut.of(await catalog.update_topic(topic_id, changes, principal))


@router.delete("/{topic_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_topic(
    course_id: UUID, topic_id: UUID, principal: Author, catalog: Catalog
) -> Response:
    await _topic_in_course(catalog, course_id, topic_id)
    await catalog.delete_topic(topic_id, principal)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
