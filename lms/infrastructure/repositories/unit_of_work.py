from __future__ import annotations

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from lms.core.errors import StorageError

from .certificates import CertificateRepository
from .courses import CourseRepository
from .errors import storage_errors
from .progress import ProgressRepository
from .users import UserRepository

logger = structlog.get_logger()


class UnitOfWork:
    """Groups the repositories sharing one ``AsyncSession`` (one transaction)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.users = UserRepository(session)
        self.courses = CourseRepository(session)
        self.progress = ProgressRepository(session)
        self.certificates = CertificateRepository(session)

    async def commit(self) -> None:
        with storage_errors("commit"):
            await self.session.commit()

    async def rollback(self) -> None:
        try:
            await self.session.rollback()
        except SQLAlchemyError as exc:
            logger.error("storage_failure", operation="rollback", error=exc.__class__.__name__)
            raise StorageError("Storage failure during rollback") from exc
