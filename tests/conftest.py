from __future__ import annotations

import asyncio
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient

from app.api.dependencies import memory_repos
from app.main import app
from app.models.course import Course, Topic
from app.models.user import Role, User
from app.services import token_service


@pytest.fixture(autouse=True)
def reset_repos() -> None:
    """Every test starts from an empty in-memory store."""
    memory_repos.clear()


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def mint_token(user_id: UUID, role: Role = Role.STUDENT) -> str:
    """Create a valid ES256 JWT for testing."""
    return token_service.create_access_token(sub=str(user_id), role=role)


def auth(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {mint_token(user.id, user.role)}"}


# ---------------------------------------------------------------------------
# Seed helpers (write straight into the shared in-memory repos)
# ---------------------------------------------------------------------------


def create_test_user(
    role: Role = Role.STUDENT, first_name: str = "Test", last_name: str = "User"
) -> User:
    user = User.new(
        email=f"{first_name.lower()}-{uuid4().hex[:8]}@example.com",
        password_hash="not-a-real-hash",
        first_name=first_name,
        last_name=last_name,
        role=role,
    )
    asyncio.run(memory_repos.users.add(user))
    return user


def create_test_course(owner: User, title: str = "Intro to Python") -> Course:
    course = Course.new(title=title, description=f"{title} description", owner_id=owner.id)
    asyncio.run(memory_repos.courses.add(course))
    return course


def create_test_topic(course: Course, title: str = "Topic", order: int = 0) -> Topic:
    topic = Topic.new(
        course_id=course.id,
        title=title,
        content=f"{title} content",
        description=f"{title} description",
        duration=10,
        order=order,
    )
    asyncio.run(memory_repos.topics.add(topic))
    return topic


@pytest.fixture
def tutor() -> User:
    return create_test_user(Role.TUTOR, first_name="Tina")


@pytest.fixture
def other_tutor() -> User:
    return create_test_user(Role.TUTOR, first_name="Otto")


@pytest.fixture
def admin() -> User:
    return create_test_user(Role.ADMIN, first_name="Ada")


@pytest.fixture
def student() -> User:
    return create_test_user(Role.STUDENT, first_name="Sam")
