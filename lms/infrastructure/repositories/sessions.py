"""Server-side session stores.

A session maps an opaque identifier (the cookie value) to ``SessionClaims``.
Both backends enforce an absolute lifetime measured from creation and a
sliding idle timeout refreshed on every successful lookup. Expired or
destroyed identifiers are never resurrected: lookups return ``None``.
"""

from __future__ import annotations

import json
import secrets
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Protocol

import structlog
from redis.exceptions import RedisError
from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from lms.core.auth import SessionClaims
from lms.core.errors import StorageError
from lms.infrastructure.db.base import as_utc
from lms.infrastructure.db.models import SessionModel

from .errors import storage_errors

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = structlog.get_logger()

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


def new_session_id() -> str:
    return secrets.token_urlsafe(32)


@contextmanager
def _redis_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except RedisError as exc:
        logger.error("session_store_failure", operation=operation, error=exc.__class__.__name__)
        raise StorageError(f"Session store failure during {operation}") from exc


class SessionStore(Protocol):
    async def create(self, claims: SessionClaims) -> str: ...

    async def get(self, session_id: str) -> SessionClaims | None: ...

    async def destroy(self, session_id: str) -> None: ...


class DatabaseSessionStore:
    """Sessions persisted in the ``sessions`` table of the relational store."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        lifetime: timedelta,
        idle_timeout: timedelta,
        clock: Clock = _utcnow,
    ) -> None:
        self._session_factory = session_factory
        self.lifetime = lifetime
        self.idle_timeout = idle_timeout
        self._clock = clock

    async def create(self, claims: SessionClaims) -> str:
        now = self._clock()
        session_id = new_session_id()
        async with self._session_factory() as session:
            with storage_errors("session_create"):
                session.add(
                    SessionModel(
                        token=session_id,
                        data=claims.to_dict(),
                        created_at=now,
                        last_seen_at=now,
                        expires_at=now + self.lifetime,
                    )
                )
                await session.commit()
        logger.info("session_created", user_id=claims.user_id, role=claims.role.value)
        return session_id

    async def get(self, session_id: str) -> SessionClaims | None:
        now = self._clock()
        async with self._session_factory() as session:
            with storage_errors("session_get"):
                row = await session.get(SessionModel, session_id)
                if row is None:
                    return None

                expired = now >= as_utc(row.expires_at) or now >= (
                    as_utc(row.last_seen_at) + self.idle_timeout
                )
                if expired:
                    await session.delete(row)
                    await session.commit()
                    logger.info("session_expired")
                    return None

                row.last_seen_at = now
                claims = SessionClaims.from_dict(row.data)
                await session.commit()
        return claims

    async def destroy(self, session_id: str) -> None:
        async with self._session_factory() as session:
            with storage_errors("session_destroy"):
                await session.execute(delete(SessionModel).where(SessionModel.token == session_id))
                await session.commit()
        logger.info("session_destroyed")

    async def purge_expired(self) -> int:
        """Delete rows past their absolute expiry; returns the number removed."""
        now = self._clock()
        async with self._session_factory() as session:
            with storage_errors("session_purge"):
                result = await session.execute(
                    delete(SessionModel).where(SessionModel.expires_at <= now)
                )
                await session.commit()
        return int(result.rowcount or 0)


class RedisSessionStore:
    """Sessions kept in Redis; the key TTL tracks the idle window."""

    def __init__(
        self,
        client: Redis,
        *,
        lifetime: timedelta,
        idle_timeout: timedelta,
        key_prefix: str = "lms:session:",
        clock: Clock = _utcnow,
    ) -> None:
        self._client = client
        self.lifetime = lifetime
        self.idle_timeout = idle_timeout
        self._prefix = key_prefix
        self._clock = clock

    def _key(self, session_id: str) -> str:
        return f"{self._prefix}{session_id}"

    def _ttl(self, now: datetime, expires_at: datetime) -> int:
        remaining = min(self.idle_timeout, expires_at - now)
        return max(1, int(remaining.total_seconds()))

    async def create(self, claims: SessionClaims) -> str:
        now = self._clock()
        session_id = new_session_id()
        expires_at = now + self.lifetime
        payload = json.dumps({"claims": claims.to_dict(), "expires_at": expires_at.isoformat()})
        with _redis_errors("session_create"):
            await self._client.set(self._key(session_id), payload, ex=self._ttl(now, expires_at))
        logger.info("session_created", user_id=claims.user_id, role=claims.role.value)
        return session_id

    async def get(self, session_id: str) -> SessionClaims | None:
        now = self._clock()
        key = self._key(session_id)
        with _redis_errors("session_get"):
            raw = await self._client.get(key)
        if raw is None:
            return None

        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        payload = json.loads(raw)
        expires_at = datetime.fromisoformat(payload["expires_at"])
        if now >= expires_at:
            with _redis_errors("session_get"):
                await self._client.delete(key)
            logger.info("session_expired")
            return None

        with _redis_errors("session_touch"):
            await self._client.expire(key, self._ttl(now, expires_at))
        return SessionClaims.from_dict(payload["claims"])

    async def destroy(self, session_id: str) -> None:
        with _redis_errors("session_destroy"):
            await self._client.delete(self._key(session_id))
        logger.info("session_destroyed")
