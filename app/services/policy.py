"""Ownership-based authorization policy.

One rule covers every catalog mutation: the actor must own the resource,
or be an admin.  For topics the owner is the parent course's owner.
"""

from __future__ import annotations

import logging
from uuid import UUID

from app.core.errors import AuthorizationError
from app.core.metrics import AUTHORIZATION_DENIALS
from app.models.principal import Principal

logger = logging.getLogger(__name__)


def can_modify(actor: Principal, resource_owner_id: UUID) -> bool:
    return actor.user_id == resource_owner_id or actor.is_admin()


def ensure_can_modify(
    actor: Principal,
    resource_owner_id: UUID,
    *,
    resource: str,
    action: str,
) -> None:
    """Raise AuthorizationError unless ``can_modify`` allows the actor."""
    if can_modify(actor, resource_owner_id):
        return
    AUTHORIZATION_DENIALS.labels(resource=resource).inc()
    logger.warning(
        "Access denied: user=%s role=%s may not %s %s owned by %s",
        actor.user_id,
        actor.role.value,
        action,
        resource,
        resource_owner_id,
        extra={"user_id": str(actor.user_id)},
    )
    raise AuthorizationError(f"You can only {action} {resource}s you own")
