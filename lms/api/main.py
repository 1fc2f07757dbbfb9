from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import timedelta
from uuid import uuid4

import redis.asyncio as aioredis
import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, RedirectResponse
from lms.api.deps import LOGIN_PATH
from lms.api.routes import register_routes
from lms.core.auth import PasswordHasher, TokenGenerator
from lms.core.config import Settings, get_settings
from lms.core.errors import (
    ConflictError,
    ForbiddenError,
    InvalidInputError,
    LMSError,
    NotFoundError,
    StorageError,
    UnauthorizedError,
)
from lms.core.logging import setup_logging
from lms.infrastructure.db import Base, build_engine, build_session_factory
from lms.infrastructure.repositories import DatabaseSessionStore, RedisSessionStore
from starlette.responses import Response
from structlog.contextvars import bind_contextvars, clear_contextvars

logger = structlog.get_logger()

_STATUS_BY_ERROR: list[tuple[type[LMSError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (InvalidInputError, status.HTTP_400_BAD_REQUEST),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
]


def create_app(settings: Settings | None = None) -> FastAPI:
    """Application factory for the LMS web service."""
    settings = settings or get_settings()
    setup_logging(settings.log_level, json_logs=settings.log_json)

    engine = build_engine(settings)
    session_factory = build_session_factory(engine)
    lifetime = timedelta(seconds=settings.session_lifetime_seconds)
    idle_timeout = timedelta(seconds=settings.session_idle_timeout_seconds)

    redis_client = None
    if settings.session_backend == "redis":
        redis_client = aioredis.from_url(settings.redis_url)
        session_store = RedisSessionStore(
            redis_client, lifetime=lifetime, idle_timeout=idle_timeout
        )
    else:
        session_store = DatabaseSessionStore(
            session_factory, lifetime=lifetime, idle_timeout=idle_timeout
        )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "service_startup",
            service=settings.app_name,
            environment=settings.environment,
            version=settings.version,
            session_backend=settings.session_backend,
        )
        if settings.db_auto_create:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        if isinstance(session_store, DatabaseSessionStore):
            try:
                await session_store.purge_expired()
            except StorageError:
                logger.warning("session_purge_skipped")
        yield
        if redis_client is not None:
            await redis_client.aclose()
        await engine.dispose()
        logger.info("service_shutdown", service=settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.session_store = session_store
    app.state.redis = redis_client
    app.state.password_hasher = PasswordHasher(rounds=settings.bcrypt_rounds)
    app.state.token_generator = TokenGenerator()

    register_routes(app)
    _register_exception_handlers(app)

    @app.middleware("http")
    async def correlation_id_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get("x-request-id", str(uuid4()))
        bind_contextvars(
            request_id=request_id,
            path=str(request.url.path),
            method=request.method,
        )
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            clear_contextvars()

    return app


def _register_exception_handlers(app: FastAPI) -> None:
    """Map the domain error taxonomy onto HTTP responses."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("request_rejected", errors=len(exc.errors()))
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": InvalidInputError.public_message, "errors": _errors(exc)},
        )

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> Response:
        return RedirectResponse(LOGIN_PATH, status_code=status.HTTP_303_SEE_OTHER)

    @app.exception_handler(LMSError)
    async def domain_error_handler(request: Request, exc: LMSError) -> JSONResponse:
        for error_type, status_code in _STATUS_BY_ERROR:
            if isinstance(exc, error_type):
                if error_type is ConflictError:
                    logger.warning("request_conflict", message=str(exc))
                    detail = error_type.public_message
                else:
                    detail = str(exc) or error_type.public_message
                return JSONResponse(status_code=status_code, content={"detail": detail})
        # Storage failures and anything unclassified: no internals in the body.
        logger.error("request_failed", error=exc.__class__.__name__, message=str(exc))
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": LMSError.public_message},
        )


def _errors(exc: RequestValidationError) -> list[dict]:
    return [
        {"loc": list(error.get("loc", ())), "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


app = create_app()
