from __future__ import annotations

import asyncio

import jwt
import pytest

from app.models.user import Role
from app.repos.user_repo import InMemoryUserRepo
from app.services import token_service
from app.services.auth_service import (
    EmailTakenError,
    authenticate_user,
    hash_password,
    register_user,
    verify_password,
)


def _register(repo: InMemoryUserRepo, email: str = "sam@example.com"):
    return asyncio.run(
        register_user(
            repo,
            email=email,
            password="correct-horse",
            first_name="Sam",
            last_name="Student",
        )
    )


def test_hash_and_verify_password() -> None:
    h = hash_password("pw-12345")
    assert h != "pw-12345"
    assert verify_password("pw-12345", h)
    assert not verify_password("wrong", h)
    assert not verify_password("pw-12345", "not-an-argon2-hash")


def test_register_then_authenticate() -> None:
    repo = InMemoryUserRepo()
    user = _register(repo)

    assert user.role is Role.STUDENT
    authed = asyncio.run(authenticate_user(repo, "sam@example.com", "correct-horse"))
    assert authed == user
    assert asyncio.run(authenticate_user(repo, "sam@example.com", "nope")) is None
    assert asyncio.run(authenticate_user(repo, "ghost@example.com", "x")) is None


def test_register_duplicate_email_is_conflict() -> None:
    repo = InMemoryUserRepo()
    _register(repo)
    with pytest.raises(EmailTakenError) as exc_info:
        _register(repo, email="SAM@example.com")
    assert exc_info.value.status_code == 409


def test_access_token_round_trip_carries_role() -> None:
    token = token_service.create_access_token(sub="abc", role=Role.TUTOR)
    claims = token_service.decode_access_token(token)
    assert claims["sub"] == "abc"
    assert claims["role"] == "tutor"
    assert claims["iss"] == token_service.ISSUER


def test_expired_access_token_rejected() -> None:
    token = token_service.create_access_token(sub="abc", role=Role.STUDENT, ttl_min=-1)
    with pytest.raises(jwt.ExpiredSignatureError):
        token_service.decode_access_token(token)
