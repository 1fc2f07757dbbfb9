from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from lms.core.auth import Role
from lms.domain import User
from lms.infrastructure.db.models import UserModel, UserRole

from .errors import storage_errors


def _to_user(model: UserModel) -> User:
    return User(
        user_id=model.id,
        username=model.username,
        role=Role(model.role.value),
        created_at=model.created_at,
    )


class UserRepository:
    """Credential store: identities, credential hashes and roles."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def add(self, *, username: str, password_hash: str, role: Role) -> User:
        model = UserModel(username=username, password_hash=password_hash, role=UserRole(role.value))
        with storage_errors("user_add"):
            self.session.add(model)
            await self.session.flush()
        return _to_user(model)

    async def get_credentials(self, username: str) -> tuple[User, str] | None:
        """Return the user together with its stored hash, or ``None``."""
        with storage_errors("user_get_credentials"):
            model = await self.session.scalar(
                select(UserModel).where(UserModel.username == username)
            )
        if model is None:
            return None
        return _to_user(model), model.password_hash

    async def get(self, user_id: int) -> User | None:
        with storage_errors("user_get"):
            model = await self.session.get(UserModel, user_id)
        return _to_user(model) if model is not None else None

    async def list_all(self) -> list[User]:
        with storage_errors("user_list"):
            models = (await self.session.scalars(select(UserModel).order_by(UserModel.id))).all()
        return [_to_user(model) for model in models]
