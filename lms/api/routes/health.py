from __future__ import annotations

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Request
from redis.exceptions import RedisError
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from lms.core.config import Settings

router = APIRouter(tags=["Observability"])
logger = structlog.get_logger()


async def check_database(request: Request) -> dict:
    """Run a trivial query against the configured database."""
    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
            return {"status": "ok"}
    except SQLAlchemyError as exc:
        logger.error("health_database_failure", error=exc.__class__.__name__)
        return {"status": "error"}


async def check_redis(request: Request) -> dict:
    client = request.app.state.redis
    if client is None:
        return {"status": "disabled"}
    try:
        await client.ping()
        return {"status": "ok"}
    except RedisError as exc:
        logger.error("health_redis_failure", error=exc.__class__.__name__)
        return {"status": "error"}


@router.get("/health", summary="Service health probe")
async def health_check(request: Request) -> dict:
    """Return basic service and datastore status information."""
    settings: Settings = request.app.state.settings

    database_status = await check_database(request)
    redis_status = await check_redis(request)

    overall_status = "ok"
    if database_status["status"] != "ok" or redis_status["status"] == "error":
        overall_status = "degraded"

    payload = {
        "service": settings.app_name,
        "version": settings.version,
        "status": overall_status,
        "timestamp": datetime.now(UTC).isoformat(),
        "datastores": {
            "database": database_status,
            "redis": redis_status,
        },
    }
    logger.info("health_probe", **payload)
    return payload
