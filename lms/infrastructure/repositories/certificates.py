from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from lms.domain import Certificate, CertificateDetails
from lms.infrastructure.db.models import CertificateModel, CourseModel, UserModel
from lms.infrastructure.db.base import as_utc

from .errors import storage_errors


def _to_certificate(model: CertificateModel) -> Certificate:
    return Certificate(
        certificate_id=model.id,
        user_id=model.user_id,
        course_id=model.course_id,
        token=model.token,
        issued_at=as_utc(model.issued_at),
    )


class CertificateRepository:
    """Certificate store keyed by unique token, one row per (user, course)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_for(self, user_id: int, course_id: int) -> Certificate | None:
        with storage_errors("certificate_get_for"):
            model = await self.session.scalar(
                select(CertificateModel).where(
                    CertificateModel.user_id == user_id,
                    CertificateModel.course_id == course_id,
                )
            )
        return _to_certificate(model) if model is not None else None

    async def add(self, *, user_id: int, course_id: int, token: str) -> Certificate:
        model = CertificateModel(user_id=user_id, course_id=course_id, token=token)
        with storage_errors("certificate_add"):
            self.session.add(model)
            await self.session.flush()
        return _to_certificate(model)

    async def get_details(self, token: str) -> CertificateDetails | None:
        stmt = (
            select(CertificateModel, UserModel.username, CourseModel.title)
            .join(UserModel, UserModel.id == CertificateModel.user_id)
            .join(CourseModel, CourseModel.id == CertificateModel.course_id)
            .where(CertificateModel.token == token)
        )
        with storage_errors("certificate_details"):
            row = (await self.session.execute(stmt)).first()
        if row is None:
            return None
        certificate, username, course_title = row
        return CertificateDetails(
            token=certificate.token,
            issued_at=as_utc(certificate.issued_at),
            user_id=certificate.user_id,
            course_id=certificate.course_id,
            student_name=username,
            course_title=course_title,
        )
