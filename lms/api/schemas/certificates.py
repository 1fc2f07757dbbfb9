from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field
from lms.domain import CertificateDetails, CertificateIssue


class CertificateResponse(BaseModel):
    id: int
    user_id: int
    course_id: int
    token: str
    issued_at: datetime
    created: bool = Field(..., description="False when the certificate already existed")

    @classmethod
    def from_issue(cls, issue: CertificateIssue) -> CertificateResponse:
        certificate = issue.certificate
        return cls(
            id=certificate.certificate_id,
            user_id=certificate.user_id,
            course_id=certificate.course_id,
            token=certificate.token,
            issued_at=certificate.issued_at,
            created=issue.created,
        )


class CertificateDetailResponse(BaseModel):
    """Public certificate view; the token in the URL is the only credential."""

    token: str
    issued_at: datetime
    student_name: str
    course_title: str

    @classmethod
    def from_domain(cls, details: CertificateDetails) -> CertificateDetailResponse:
        return cls(
            token=details.token,
            issued_at=details.issued_at,
            student_name=details.student_name,
            course_title=details.course_title,
        )
