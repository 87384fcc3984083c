from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from uuid import UUID, uuid4


class Role(str, Enum):
    STUDENT = "student"
    TUTOR = "tutor"
    ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    email: str
    password_hash: str
    first_name: str
    last_name: str
    role: Role = Role.STUDENT  # immutable once created
    profile_image: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))

    @staticmethod
    def new(
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: Role = Role.STUDENT,
        profile_image: str | None = None,
    ) -> User:
        return User(
            id=uuid4(),
            email=email.strip().lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
            profile_image=profile_image,
        )


@dataclass(frozen=True, slots=True)
class PublicProfile:
    """The owner fields embedded in course reads and enrollment summaries."""

    id: UUID
    first_name: str
    last_name: str
    email: str

    @staticmethod
    def of(user: User) -> PublicProfile:
        return PublicProfile(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            email=user.email,
        )
