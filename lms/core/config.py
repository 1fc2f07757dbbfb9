from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment."""

    app_name: str = Field(default="LMS", validation_alias="APP_NAME")
    environment: str = Field(default="local", validation_alias="APP_ENV")
    version: str = Field(default="0.1.0")
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_json: bool = Field(default=True, validation_alias="LOG_JSON")
    database_url: str = Field(
        default="sqlite+aiosqlite:///./lms.db",
        validation_alias="DATABASE_URL",
    )
    db_auto_create: bool = Field(default=False, validation_alias="DB_AUTO_CREATE")
    redis_url: str = Field(
        default="redis://localhost:6379/0",
        validation_alias="REDIS_URL",
    )

    # Sessions
    session_backend: Literal["database", "redis"] = Field(
        default="database", validation_alias="SESSION_BACKEND"
    )
    session_lifetime_seconds: int = Field(
        default=24 * 60 * 60, validation_alias="SESSION_LIFETIME_SECONDS"
    )
    session_idle_timeout_seconds: int = Field(
        default=20 * 60, validation_alias="SESSION_IDLE_TIMEOUT_SECONDS"
    )
    session_cookie_name: str = Field(default="lms_session", validation_alias="SESSION_COOKIE_NAME")
    session_cookie_secure: bool = Field(default=False, validation_alias="SESSION_COOKIE_SECURE")

    bcrypt_rounds: int = Field(default=12, ge=4, le=31, validation_alias="BCRYPT_ROUNDS")
    certificate_token_attempts: int = Field(
        default=3, ge=1, validation_alias="CERTIFICATE_TOKEN_ATTEMPTS"
    )

    @property
    def async_database_url(self) -> str:
        """Convert database URL to async format (postgresql+asyncpg://)."""
        url = self.database_url
        if url.startswith("postgresql://"):
            url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
        elif url.startswith("postgres://"):
            url = url.replace("postgres://", "postgresql+asyncpg://", 1)
        return url

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="allow", populate_by_name=True
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""
    return Settings()
