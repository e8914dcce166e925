"""Transaction monitoring API endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.dependencies import get_transaction_monitor
from src.domains.monitoring.models import EntityProfile, RuleDescriptor, TransactionAnalysis
from src.domains.monitoring.service import TransactionMonitor

router = APIRouter(prefix="/api/v1", tags=["monitoring"])


class AnalyzeRequest(BaseModel):
    # Raw records; anything the normalizer cannot read is reported back, not rejected here
    transactions: list[Any]
    entity_profile: EntityProfile | None = None
    categories: list[str] | None = None


# Rules are CPU-bound, so these handlers are sync and run in the threadpool
@router.post("/transactions/analyze", response_model=TransactionAnalysis)
def analyze_transactions(
    request: AnalyzeRequest,
    monitor: TransactionMonitor = Depends(get_transaction_monitor),
) -> TransactionAnalysis:
    return monitor.analyze(request.transactions, request.entity_profile, request.categories)


@router.get("/rules", response_model=list[RuleDescriptor])
def list_rules(
    monitor: TransactionMonitor = Depends(get_transaction_monitor),
) -> list[RuleDescriptor]:
    return monitor.engine.catalog()
