from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from app.core.errors import ConflictError, DuplicateKeyError
from app.models.user import Role, User
from app.repos.user_repo import UserRepo

logger = logging.getLogger(__name__)

_ph = PasswordHasher()

# Admin accounts are never self-registered.
SELF_REGISTER_ROLES = frozenset({Role.STUDENT, Role.TUTOR})


class EmailTakenError(ConflictError):
    def __init__(self) -> None:
        super().__init__("A user with this email already exists")


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise ValueError("password must be non-empty")
    return _ph.hash(plain_password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    if not plain_password or not password_hash:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except (VerifyMismatchError, VerificationError, InvalidHash):
        return False


async def register_user(
    repo: UserRepo,
    *,
    email: str,
    password: str,
    first_name: str,
    last_name: str,
    role: Role = Role.STUDENT,
    profile_image: str | None = None,
) -> User:
    if await repo.get_by_email(email) is not None:
        logger.warning("Registration rejected, duplicate email=%s", email)
        raise EmailTakenError()

    user = User.new(
        email=email,
        password_hash=hash_password(password),
        first_name=first_name,
        last_name=last_name,
        role=role,
        profile_image=profile_image,
    )
    try:
        await repo.add(user)
    except DuplicateKeyError:
        # Race: another request registered the same email.
        raise EmailTakenError() from None

    logger.info(
        "User registered user_id=%s role=%s",
        user.id,
        user.role.value,
        extra={"user_id": str(user.id)},
    )
    return user


async def authenticate_user(repo: UserRepo, email: str, password: str) -> User | None:
    user = await repo.get_by_email(email)
    if user is None:
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
