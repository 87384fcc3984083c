"""JSON auth endpoints (/auth/register, /auth/login) and the profile read.

Both auth endpoints return { access_token, token_type, user } so a client
can start calling the API straight away.
"""

from __future__ import annotations

import logging
import re
from typing import Literal
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, Field

from app.api.dependencies import CurrentUser, ReposDep
from app.core.errors import NotFoundError
from app.models.user import Role, User
from app.services import auth_service, token_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class RegisterIn(BaseModel):
    email: str
    password: str = Field(min_length=8)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    role: Literal["student", "tutor"] = "student"
    profile_image: str | None = None


class LoginIn(BaseModel):
    email: str
    password: str


class UserOut(BaseModel):
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    profile_image: str | None

    @staticmethod
    def of(user: User) -> UserOut:
        return UserOut(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role.value,
            profile_image=user.profile_image,
        )


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


def _issue(user: User) -> AuthResponse:
    token = token_service.create_access_token(sub=str(user.id), role=user.role)
    return AuthResponse(access_token=token, user=UserOut.of(user))


@router.post(
    "/auth/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
)
async def register(payload: RegisterIn, repos: ReposDep) -> AuthResponse:
    email = payload.email.strip().lower()
    if not _EMAIL_RE.match(email):
        raise HTTPException(
            status_code=422,
            detail="Invalid email address",
        )

    user = await auth_service.register_user(
        repos.users,
        email=email,
        password=payload.password,
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        role=Role(payload.role),
        profile_image=payload.profile_image,
    )
    return _issue(user)


@router.post("/auth/login", response_model=AuthResponse)
async def login(payload: LoginIn, repos: ReposDep) -> AuthResponse:
    user = await auth_service.authenticate_user(
        repos.users, payload.email, payload.password
    )
    if user is None:
        logger.warning("Login failed email=%s", payload.email.strip().lower())
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    logger.info("Login succeeded user_id=%s", user.id, extra={"user_id": str(user.id)})
    return _issue(user)


@router.get("/users/profile", response_model=UserOut)
async def get_profile(principal: CurrentUser, repos: ReposDep) -> UserOut:
    user = await repos.users.get_by_id(principal.user_id)
    if user is None:
        raise NotFoundError("User not found")
    return UserOut.of(user)
