"""Authentication service with password hashing and user management."""

from __future__ import annotations

import structlog
from lms.core.auth import PasswordHasher, Role
from lms.core.errors import ConflictError, InvalidCredentialsError, InvalidInputError, NotFoundError
from lms.domain import User
from lms.infrastructure.repositories import UnitOfWork

logger = structlog.get_logger()


class UserExistsError(ConflictError):
    """Raised when attempting to register with an existing username."""


class AuthService:
    """Service for registration and credential verification."""

    def __init__(self, uow: UnitOfWork, hasher: PasswordHasher) -> None:
        self.uow = uow
        self.hasher = hasher

    async def register_user(
        self,
        *,
        username: str,
        password: str,
        role: Role = Role.STUDENT,
    ) -> User:
        """Create a new account. Only the bootstrap script creates admins."""
        username = username.strip()
        if not username or not password:
            raise InvalidInputError("Username and password are required")

        await logger.ainfo("register_attempt", username=username, role=role.value)

        try:
            user = await self.uow.users.add(
                username=username,
                password_hash=self.hasher.hash(password),
                role=role,
            )
            await self.uow.commit()
        except ConflictError as exc:
            await self.uow.rollback()
            await logger.awarning("register_duplicate_username", username=username)
            raise UserExistsError(f"Username '{username}' is already taken") from exc

        await logger.ainfo("register_success", user_id=user.user_id, username=username)
        return user

    async def authenticate(self, *, username: str, password: str) -> User:
        """Return the user for valid credentials.

        Unknown usernames and wrong passwords raise the same
        ``InvalidCredentialsError``; a dummy hash check keeps the timing of
        both paths comparable.
        """
        await logger.ainfo("login_attempt", username=username)

        found = await self.uow.users.get_credentials(username.strip())
        if found is None:
            self.hasher.dummy_verify()
            await logger.awarning("login_rejected", username=username)
            raise InvalidCredentialsError()

        user, password_hash = found
        if not self.hasher.verify(password, password_hash):
            await logger.awarning("login_rejected", username=username)
            raise InvalidCredentialsError()

        await logger.ainfo("login_success", user_id=user.user_id, role=user.role.value)
        return user

    async def get_user(self, user_id: int) -> User:
        user = await self.uow.users.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    async def list_users(self) -> list[User]:
        return await self.uow.users.list_all()
