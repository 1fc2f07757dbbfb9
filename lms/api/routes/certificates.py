from __future__ import annotations

from fastapi import APIRouter, Depends
from lms.api.deps import get_completion_engine
from lms.api.schemas.certificates import CertificateDetailResponse
from lms.domain.services import CompletionEngine

router = APIRouter(prefix="/certificates", tags=["Certificates"])


@router.get("/{token}", response_model=CertificateDetailResponse)
async def view_certificate(
    token: str,
    engine: CompletionEngine = Depends(get_completion_engine),
) -> CertificateDetailResponse:
    """Public certificate lookup; unknown tokens are a plain 404."""
    details = await engine.get_certificate_by_token(token)
    return CertificateDetailResponse.from_domain(details)
