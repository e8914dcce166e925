"""Subject screening API endpoints."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.dependencies import get_screening_service
from src.domains.screening.models import ScreeningResult, SubjectKind
from src.domains.screening.service import ScreeningService

router = APIRouter(prefix="/api/v1/screening", tags=["screening"])


class SubjectRequest(BaseModel):
    name: str | None = None
    address: str | None = None
    kind: SubjectKind | None = None


class ScreeningRequest(BaseModel):
    subject: SubjectRequest
    sources: list[str] | None = None


@router.post("", response_model=ScreeningResult)
async def screen_subject(
    request: ScreeningRequest,
    service: ScreeningService = Depends(get_screening_service),
) -> ScreeningResult:
    subject = request.subject
    if (subject.name is None) == (subject.address is None):
        raise ValueError("Provide exactly one of subject.name or subject.address")

    if subject.address is not None:
        return await service.screen(
            subject.address, subject.kind or SubjectKind.WALLET, request.sources
        )
    return await service.screen(subject.name, subject.kind, request.sources)
