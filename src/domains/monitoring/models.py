"""Pydantic models for the transaction monitoring domain."""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from src.domains.scoring.models import Alert, RiskAssessment


class Direction(StrEnum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"


class Transaction(BaseModel):
    """Canonical transaction. Built once by the normalizer, never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: datetime
    amount: float
    currency: str = "USD"
    direction: Direction
    transaction_type: str = "UNKNOWN"
    counterparty_name: str = ""
    counterparty_country: str = ""
    counterparty_account: str = ""
    channel: str = "UNKNOWN"
    merchant_category_code: str = ""
    description: str = ""
    reference: str = ""
    chain_address: str | None = None
    blockchain: str = ""
    # Position in the caller's batch; breaks timestamp ties
    sequence: int = 0

    @property
    def magnitude(self) -> float:
        return abs(self.amount)

    @property
    def day_key(self) -> str:
        return self.timestamp.date().isoformat()

    @property
    def is_credit(self) -> bool:
        return self.direction == Direction.CREDIT

    @property
    def is_debit(self) -> bool:
        return self.direction == Direction.DEBIT


class EntityProfile(BaseModel):
    """Aggregate statistics over a transaction set. Rebuilt, never patched."""

    model_config = ConfigDict(frozen=True)

    average_amount: float = 0.0
    median_amount: float = 0.0
    max_amount: float = 0.0
    total_volume: float = 0.0
    transaction_count: int = 0
    transactions_per_day: float = 0.0
    distinct_counterparties: int = 0
    distinct_countries: int = 0
    countries: list[str] = Field(default_factory=list)
    channels: list[str] = Field(default_factory=list)
    date_from: datetime | None = None
    date_to: datetime | None = None
    day_span: float = 1.0


class NormalizationFailure(BaseModel):
    index: int
    reason: str


class NormalizationResult(BaseModel):
    transactions: list[Transaction] = Field(default_factory=list)
    rejected: list[NormalizationFailure] = Field(default_factory=list)


class RuleFailure(BaseModel):
    rule_id: str
    category: str
    error: str


class RuleDescriptor(BaseModel):
    rule_id: str
    name: str
    category: str
    severity: str


class RuleEngineResult(BaseModel):
    alerts: list[Alert] = Field(default_factory=list)
    failed_rules: list[RuleFailure] = Field(default_factory=list)
    rules_evaluated: int = 0


class CategorySummary(BaseModel):
    count: int = 0
    max_score: float = 0.0
    rule_ids: list[str] = Field(default_factory=list)


class TransactionAnalysis(BaseModel):
    """Output of one transaction batch analysis."""

    transaction_count: int = 0
    entity_profile: EntityProfile
    alerts: list[Alert] = Field(default_factory=list)
    category_summary: dict[str, CategorySummary] = Field(default_factory=dict)
    assessment: RiskAssessment
    rejected_records: list[NormalizationFailure] = Field(default_factory=list)
    failed_rules: list[RuleFailure] = Field(default_factory=list)
