"""Create an admin account in the configured database.

Admins cannot self-register through /auth/register, so the first one is
seeded from the command line:

    DATABASE_URL=postgresql+asyncpg://... \
        python scripts/create_admin.py admin@example.com 'long-password' Ada Admin
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from app.core.config import SETTINGS
from app.core.logging import setup_logging
from app.db.engine import session_scope
from app.models.user import Role
from app.repos.pg_user_repo import PgUserRepo
from app.services.auth_service import register_user

logger = logging.getLogger("create_admin")


async def _create(args: argparse.Namespace) -> None:
    async with session_scope() as session:
        user = await register_user(
            PgUserRepo(session),
            email=args.email.strip().lower(),
            password=args.password,
            first_name=args.first_name,
            last_name=args.last_name,
            role=Role.ADMIN,
        )
    logger.info("Admin created id=%s email=%s", user.id, user.email)


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("email")
    parser.add_argument("password")
    parser.add_argument("first_name")
    parser.add_argument("last_name")
    args = parser.parse_args()

    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    if not SETTINGS.uses_database:
        parser.error("DATABASE_URL must be set; in-memory accounts die with the process")
    asyncio.run(_create(args))


if __name__ == "__main__":
    main()
