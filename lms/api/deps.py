from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from lms.core.auth import SessionClaims
from lms.core.config import Settings
from lms.core.errors import ForbiddenError, UnauthorizedError
from lms.domain.services import (
    AccessGate,
    AccessState,
    AuthService,
    CompletionEngine,
    CourseService,
    EnrollmentService,
)
from lms.infrastructure.db.session import iter_session
from lms.infrastructure.repositories import UnitOfWork

LOGIN_PATH = "/login"


def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


async def get_db_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Provide an async SQLAlchemy session for API handlers."""
    async for session in iter_session(request.app.state.session_factory):
        yield session


def get_uow(session: AsyncSession = Depends(get_db_session)) -> UnitOfWork:  # noqa: B008
    return UnitOfWork(session)


def get_access_gate(request: Request) -> AccessGate:
    return AccessGate(request.app.state.session_store)


def get_session_id(request: Request) -> str | None:
    return request.cookies.get(request.app.state.settings.session_cookie_name)


async def get_access_state(
    session_id: str | None = Depends(get_session_id),  # noqa: B008
    gate: AccessGate = Depends(get_access_gate),  # noqa: B008
) -> AccessState:
    """Resolve the caller's session; anonymous callers are not rejected here."""
    return await gate.resolve(session_id)


async def require_authentication(
    state: AccessState = Depends(get_access_state),  # noqa: B008
    gate: AccessGate = Depends(get_access_gate),  # noqa: B008
) -> SessionClaims:
    """Return the session claims or redirect the caller to the login page."""
    try:
        return gate.require_authentication(state)
    except UnauthorizedError as exc:
        raise _redirect_to_login() from exc


async def require_admin(
    claims: SessionClaims = Depends(require_authentication),  # noqa: B008
    gate: AccessGate = Depends(get_access_gate),  # noqa: B008
) -> SessionClaims:
    """Dependency enforcing that the authenticated user is an administrator."""
    try:
        return gate.require_admin(claims)
    except ForbiddenError as exc:
        raise _forbidden() from exc


def get_auth_service(
    request: Request, uow: UnitOfWork = Depends(get_uow)  # noqa: B008
) -> AuthService:
    return AuthService(uow, request.app.state.password_hasher)


def get_course_service(uow: UnitOfWork = Depends(get_uow)) -> CourseService:  # noqa: B008
    return CourseService(uow)


def get_enrollment_service(uow: UnitOfWork = Depends(get_uow)) -> EnrollmentService:  # noqa: B008
    return EnrollmentService(uow)


def get_completion_engine(
    request: Request, uow: UnitOfWork = Depends(get_uow)  # noqa: B008
) -> CompletionEngine:
    settings: Settings = request.app.state.settings
    return CompletionEngine(
        uow,
        request.app.state.token_generator,
        token_attempts=settings.certificate_token_attempts,
    )


def set_session_cookie(response: Response, settings: Settings, session_id: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_lifetime_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )


def _redirect_to_login() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_303_SEE_OTHER,
        detail="Login required",
        headers={"Location": LOGIN_PATH},
    )


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
