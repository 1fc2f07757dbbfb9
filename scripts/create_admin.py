#!/usr/bin/env python3
"""Bootstrap an administrator account.

Registration over HTTP only ever creates students, so the first admin is
created here:

    python scripts/create_admin.py admin
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from lms.core.auth import PasswordHasher, Role
from lms.core.config import get_settings
from lms.core.logging import setup_logging
from lms.domain.services import AuthService, UserExistsError
from lms.infrastructure.db import Base, build_engine, build_session_factory
from lms.infrastructure.repositories import UnitOfWork


async def create_admin(username: str, password: str) -> int:
    settings = get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)
    engine = build_engine(settings)
    session_factory = build_session_factory(engine)

    try:
        if settings.db_auto_create:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)

        async with session_factory() as session:
            hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
            service = AuthService(UnitOfWork(session), hasher)
            try:
                user = await service.register_user(
                    username=username, password=password, role=Role.ADMIN
                )
            except UserExistsError:
                print(f"User '{username}' already exists", file=sys.stderr)
                return 1
    finally:
        await engine.dispose()

    print(f"Created admin '{user.username}' (id={user.user_id})")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Create an LMS administrator account")
    parser.add_argument("username")
    parser.add_argument("--password", help="Prompted for when omitted")
    args = parser.parse_args()

    password = args.password or getpass.getpass("Password: ")
    sys.exit(asyncio.run(create_admin(args.username, password)))


if __name__ == "__main__":
    main()
