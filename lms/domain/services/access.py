from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import assert_never

import structlog
from lms.core.auth import Role, SessionClaims
from lms.core.errors import ForbiddenError, UnauthorizedError
from lms.domain import User
from lms.infrastructure.repositories import SessionStore

logger = structlog.get_logger()


class AccessLevel(str, enum.Enum):
    ANONYMOUS = "anonymous"
    STUDENT = "student"
    ADMIN = "admin"


@dataclass(frozen=True, slots=True)
class AccessState:
    """Authorization state of one request, derived from its session."""

    level: AccessLevel
    claims: SessionClaims | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.claims is not None


ANONYMOUS = AccessState(level=AccessLevel.ANONYMOUS)


def _level_for(role: Role) -> AccessLevel:
    if role is Role.ADMIN:
        return AccessLevel.ADMIN
    if role is Role.STUDENT:
        return AccessLevel.STUDENT
    assert_never(role)


class AccessGate:
    """Per-request authorization over the session store.

    Nothing is cached between requests: every ``resolve`` goes back to the
    store, so logout and expiry take effect on the very next request.
    """

    def __init__(self, store: SessionStore) -> None:
        self.store = store

    async def resolve(self, session_id: str | None) -> AccessState:
        if not session_id:
            return ANONYMOUS
        claims = await self.store.get(session_id)
        if claims is None:
            return ANONYMOUS
        return AccessState(level=_level_for(claims.role), claims=claims)

    def require_authentication(self, state: AccessState) -> SessionClaims:
        if state.claims is None:
            raise UnauthorizedError("Login required")
        return state.claims

    def require_admin(self, claims: SessionClaims) -> SessionClaims:
        if claims.role is Role.ADMIN:
            return claims
        if claims.role is Role.STUDENT:
            logger.warning("admin_access_denied", user_id=claims.user_id)
            raise ForbiddenError("Forbidden")
        assert_never(claims.role)

    async def login(self, user: User) -> str:
        """Open a session for an authenticated user and return its identifier."""
        return await self.store.create(SessionClaims(user_id=user.user_id, role=user.role))

    async def logout(self, session_id: str | None) -> None:
        if session_id:
            await self.store.destroy(session_id)
