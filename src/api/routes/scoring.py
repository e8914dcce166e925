"""Composite scoring API endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src.api.dependencies import get_scorer
from src.domains.scoring.models import RiskAssessment, RiskSignal
from src.domains.scoring.scorer import CompositeRiskScorer

router = APIRouter(prefix="/api/v1/scoring", tags=["scoring"])


class ScoreRequest(BaseModel):
    signals: list[RiskSignal] = Field(default_factory=list)


@router.post("/score", response_model=RiskAssessment)
async def score_signals(
    request: ScoreRequest,
    scorer: CompositeRiskScorer = Depends(get_scorer),
) -> RiskAssessment:
    return scorer.score(request.signals)
