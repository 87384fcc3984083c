from __future__ import annotations

import asyncio
from uuid import uuid4

import pytest

from app.core.errors import AuthorizationError, InvalidPatchError, NotFoundError
from app.models.principal import Principal
from app.models.user import PublicProfile, Role, User
from app.repos.bundle import InMemoryRepos, build_in_memory_repos
from app.services.catalog_service import CatalogService, CourseDraft, TopicDraft

TUTOR_A = Principal(user_id=uuid4(), role=Role.TUTOR)
TUTOR_B = Principal(user_id=uuid4(), role=Role.TUTOR)
ADMIN = Principal(user_id=uuid4(), role=Role.ADMIN)


@pytest.fixture
def repos() -> InMemoryRepos:
    return build_in_memory_repos()


@pytest.fixture
def catalog(repos: InMemoryRepos) -> CatalogService:
    return CatalogService(repos.courses, repos.topics, repos.users)


def _course(catalog: CatalogService, owner: Principal = TUTOR_A):
    return asyncio.run(
        catalog.create_course(owner, CourseDraft(title="C1", description="First"))
    )


def _topic(catalog: CatalogService, course_id, title: str, order: int):
    draft = TopicDraft(title=title, content="...", description=title, order=order)
    return asyncio.run(catalog.create_topic(course_id, draft, TUTOR_A))


# ---- courses ----


def test_create_course_sets_owner_from_actor(catalog: CatalogService) -> None:
    course = _course(catalog)
    assert course.owner_id == TUTOR_A.user_id
    assert asyncio.run(catalog.get_course(course.id)) == course


def test_get_course_unknown_raises_not_found(catalog: CatalogService) -> None:
    with pytest.raises(NotFoundError, match="Course not found"):
        asyncio.run(catalog.get_course(uuid4()))


def test_list_courses_by_owner(catalog: CatalogService) -> None:
    mine = _course(catalog, TUTOR_A)
    _course(catalog, TUTOR_B)
    assert asyncio.run(catalog.list_courses_by_owner(TUTOR_A.user_id)) == [mine]
    assert len(asyncio.run(catalog.list_courses())) == 2


def test_describe_course_resolves_owner_and_topics(
    repos: InMemoryRepos, catalog: CatalogService
) -> None:
    owner = User.new(
        email="Tina@Example.com",
        password_hash="x",
        first_name="Tina",
        last_name="Tutor",
        role=Role.TUTOR,
    )
    asyncio.run(repos.users.add(owner))
    actor = Principal(user_id=owner.id, role=Role.TUTOR)
    course = _course(catalog, actor)
    draft = TopicDraft(title="T1", content="...", description="T1")
    topic = asyncio.run(catalog.create_topic(course.id, draft, actor))

    detail = asyncio.run(catalog.describe_course(course))

    assert detail.course == course
    assert detail.owner == PublicProfile(
        id=owner.id, first_name="Tina", last_name="Tutor", email="tina@example.com"
    )
    assert detail.topics == (topic,)


def test_describe_course_with_unknown_owner(catalog: CatalogService) -> None:
    course = _course(catalog)  # TUTOR_A has no user record
    detail = asyncio.run(catalog.describe_course(course))
    assert detail.owner is None
    assert detail.topics == ()


def test_update_course_changes_only_given_fields(catalog: CatalogService) -> None:
    course = _course(catalog)
    updated = asyncio.run(
        catalog.update_course(course.id, {"title": "Renamed"}, TUTOR_A)
    )
    assert updated.title == "Renamed"
    assert updated.description == course.description
    assert updated.owner_id == course.owner_id
    assert updated.updated_at >= course.updated_at


def test_update_course_by_non_owner_is_forbidden(catalog: CatalogService) -> None:
    course = _course(catalog)
    with pytest.raises(AuthorizationError):
        asyncio.run(catalog.update_course(course.id, {"title": "Mine now"}, TUTOR_B))
    assert asyncio.run(catalog.get_course(course.id)).title == "C1"


def test_admin_can_update_and_delete_any_course(catalog: CatalogService) -> None:
    course = _course(catalog)
    asyncio.run(catalog.update_course(course.id, {"title": "By admin"}, ADMIN))
    asyncio.run(catalog.delete_course(course.id, ADMIN))
    with pytest.raises(NotFoundError):
        asyncio.run(catalog.get_course(course.id))


@pytest.mark.parametrize(
    "changes",
    [
        {"owner_id": uuid4()},
        {"id": uuid4()},
        {"title": None},
    ],
)
def test_update_course_rejects_invalid_patch(
    catalog: CatalogService, changes: dict
) -> None:
    course = _course(catalog)
    with pytest.raises(InvalidPatchError):
        asyncio.run(catalog.update_course(course.id, changes, TUTOR_A))


def test_update_course_can_clear_image(catalog: CatalogService) -> None:
    course = asyncio.run(
        catalog.create_course(
            TUTOR_A, CourseDraft(title="C", description="D", image="cover.png")
        )
    )
    updated = asyncio.run(catalog.update_course(course.id, {"image": None}, TUTOR_A))
    assert updated.image is None


def test_delete_course_cascades_topics(
    catalog: CatalogService, repos: InMemoryRepos
) -> None:
    course = _course(catalog)
    topic = _topic(catalog, course.id, "T1", 1)

    asyncio.run(catalog.delete_course(course.id, TUTOR_A))

    assert asyncio.run(repos.topics.get_by_id(topic.id)) is None


# ---- topics ----


def test_list_topics_orders_by_order_then_creation(catalog: CatalogService) -> None:
    course = _course(catalog)
    second = _topic(catalog, course.id, "second", 2)
    first_a = _topic(catalog, course.id, "first-a", 1)
    first_b = _topic(catalog, course.id, "first-b", 1)

    ordered = asyncio.run(catalog.list_topics(course.id))
    assert [t.id for t in ordered] == [first_a.id, first_b.id, second.id]


def test_list_topics_unknown_course_raises_not_found(catalog: CatalogService) -> None:
    with pytest.raises(NotFoundError):
        asyncio.run(catalog.list_topics(uuid4()))


def test_create_topic_requires_course_ownership(catalog: CatalogService) -> None:
    course = _course(catalog)
    draft = TopicDraft(title="T", content="c", description="d")
    with pytest.raises(AuthorizationError):
        asyncio.run(catalog.create_topic(course.id, draft, TUTOR_B))


def test_topic_mutations_gated_by_parent_course_owner(
    catalog: CatalogService,
) -> None:
    course = _course(catalog)
    topic = _topic(catalog, course.id, "T1", 1)

    with pytest.raises(AuthorizationError):
        asyncio.run(catalog.update_topic(topic.id, {"title": "x"}, TUTOR_B))
    with pytest.raises(AuthorizationError):
        asyncio.run(catalog.delete_topic(topic.id, TUTOR_B))

    updated = asyncio.run(catalog.update_topic(topic.id, {"duration": 45}, ADMIN))
    assert updated.duration == 45
    asyncio.run(catalog.delete_topic(topic.id, ADMIN))
    with pytest.raises(NotFoundError, match="Topic not found"):
        asyncio.run(catalog.get_topic(topic.id))


def test_update_topic_rejects_negative_order(catalog: CatalogService) -> None:
    course = _course(catalog)
    topic = _topic(catalog, course.id, "T1", 1)
    with pytest.raises(InvalidPatchError):
        asyncio.run(catalog.update_topic(topic.id, {"order": -1}, TUTOR_A))
