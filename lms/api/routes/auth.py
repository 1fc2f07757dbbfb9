"""Authentication routes - register, login, logout, profile."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, HTTPException, Response, status
from fastapi.responses import RedirectResponse
from lms.api.deps import (
    LOGIN_PATH,
    clear_session_cookie,
    get_access_gate,
    get_auth_service,
    get_session_id,
    get_settings_dep,
    require_authentication,
    set_session_cookie,
)
from lms.api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    RegisterResponse,
    UserResponse,
)
from lms.core.auth import SessionClaims
from lms.core.config import Settings
from lms.core.errors import InvalidCredentialsError
from lms.domain.services import AccessGate, AuthService, UserExistsError

logger = structlog.get_logger()
router = APIRouter(tags=["authentication"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register new student",
)
async def register(
    payload: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> RegisterResponse:
    """Register a new student account. Administrators are provisioned out of band."""
    try:
        user = await service.register_user(username=payload.username, password=payload.password)
    except UserExistsError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Username is already taken",
        ) from exc

    return RegisterResponse(user=UserResponse.from_domain(user))


@router.get("/login", response_model=MessageResponse, summary="Login prompt")
async def login_page() -> MessageResponse:
    """Target of the redirect sent to unauthenticated callers."""
    return MessageResponse(message="Please log in")


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="User login",
    description="Verify credentials and open a server-side session (cookie).",
)
async def login(
    payload: LoginRequest,
    response: Response,
    previous_session: str | None = Depends(get_session_id),
    service: AuthService = Depends(get_auth_service),
    gate: AccessGate = Depends(get_access_gate),
    settings: Settings = Depends(get_settings_dep),
) -> LoginResponse:
    try:
        user = await service.authenticate(username=payload.username, password=payload.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=InvalidCredentialsError.public_message,
        ) from exc

    # A fresh identifier on every login; the old one must not stay usable.
    await gate.logout(previous_session)
    session_id = await gate.login(user)
    set_session_cookie(response, settings, session_id)

    return LoginResponse(user=UserResponse.from_domain(user))


@router.post("/logout", summary="Destroy the current session")
async def logout(
    session_id: str | None = Depends(get_session_id),
    gate: AccessGate = Depends(get_access_gate),
    settings: Settings = Depends(get_settings_dep),
) -> RedirectResponse:
    await gate.logout(session_id)
    redirect = RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)
    clear_session_cookie(redirect, settings)
    return redirect


@router.get("/me", response_model=UserResponse, summary="Get current user")
async def get_me(
    claims: SessionClaims = Depends(require_authentication),
    service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    user = await service.get_user(claims.user_id)
    return UserResponse.from_domain(user)
