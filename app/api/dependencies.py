from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from app.db.engine import async_session_factory, session_scope
from app.models.principal import Principal
from app.models.user import Role
from app.repos.bundle import Repos, build_in_memory_repos, build_pg_repos
from app.services import token_service
from app.services.catalog_service import CatalogService
from app.services.enrollment_service import EnrollmentService
from app.services.progress_service import ProgressService

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")

# Process-wide store used when DATABASE_URL is not configured.
memory_repos = build_in_memory_repos()


# ---------------------------------------------------------------------------
# Persistence wiring
# ---------------------------------------------------------------------------


async def get_repos() -> AsyncIterator[Repos]:
    """Yield the repos for one request.

    With a database, every repo shares one session and the request is a
    single transaction (commit on success, rollback on error).
    """
    if async_session_factory is None:
        yield memory_repos
        return
    async with session_scope() as session:
        yield build_pg_repos(session)


ReposDep = Annotated[Repos, Depends(get_repos)]


def get_catalog_service(repos: ReposDep) -> CatalogService:
    return CatalogService(repos.courses, repos.topics, repos.users)


def get_enrollment_service(repos: ReposDep) -> EnrollmentService:
    return EnrollmentService(
        CatalogService(repos.courses, repos.topics, repos.users),
        repos.enrollments,
        repos.completions,
    )


def get_progress_service(repos: ReposDep) -> ProgressService:
    return ProgressService(
        CatalogService(repos.courses, repos.topics, repos.users),
        repos.topics,
        repos.enrollments,
        repos.completions,
    )


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def require_user(
    raw_token: Annotated[str, Depends(oauth2_scheme)],
) -> Principal:
    """Extract and validate the JWT bearer token. Returns a Principal."""
    try:
        claims = token_service.decode_access_token(raw_token)
    except jwt.ExpiredSignatureError:
        logger.warning("Expired token rejected")
        raise _unauthorized("Token expired") from None
    except jwt.InvalidTokenError as e:
        logger.warning("Invalid token rejected: %s", e)
        raise _unauthorized("Invalid token") from None

    try:
        principal = Principal(user_id=UUID(claims["sub"]), role=Role(claims["role"]))
    except ValueError:
        logger.warning("Token with malformed sub/role rejected")
        raise _unauthorized("Invalid token") from None

    logger.debug(
        "Token validated for user=%s role=%s",
        principal.user_id,
        principal.role.value,
    )
    return principal


def require_role(*roles: Role):
    """Dependency factory: demand one of the given roles.

    Usage: Depends(require_role(Role.TUTOR, Role.ADMIN))
    """
    allowed = set(roles)

    def _guard(
        principal: Annotated[Principal, Depends(require_user)],
    ) -> Principal:
        if not principal.has_any_role(allowed):
            logger.warning(
                "Access denied: user=%s role=%s required_any=%s",
                principal.user_id,
                principal.role.value,
                sorted(r.value for r in allowed),
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return principal

    return _guard


CurrentUser = Annotated[Principal, Depends(require_user)]
Student = Annotated[Principal, Depends(require_role(Role.STUDENT))]
Author = Annotated[Principal, Depends(require_role(Role.TUTOR, Role.ADMIN))]
