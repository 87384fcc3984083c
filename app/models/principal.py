from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from app.models.user import Role


@dataclass(frozen=True, slots=True)
class Principal:
    """Authenticated identity extracted from a validated JWT.

    The services only ever see this pair; they never authenticate.
    """

    user_id: UUID
    role: Role

    def has_any_role(self, roles: set[Role]) -> bool:
        return self.role in roles

    def is_admin(self) -> bool:
        return self.role is Role.ADMIN
