"""Pydantic models shared by every producer and consumer of risk signals."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class Severity(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class RiskCategory(StrEnum):
    """Known risk dimensions. Categories are data: any string is accepted."""

    # Transaction typologies
    STRUCTURING = "STRUCTURING"
    VELOCITY = "VELOCITY"
    GEOGRAPHIC = "GEOGRAPHIC"
    COUNTERPARTY = "COUNTERPARTY"
    BEHAVIORAL = "BEHAVIORAL"
    CRYPTO = "CRYPTO"
    TBML = "TBML"
    REAL_ESTATE = "REAL_ESTATE"
    GAMBLING = "GAMBLING"
    INTEGRATION = "INTEGRATION"
    MSB_HAWALA = "MSB_HAWALA"
    SECURITIES = "SECURITIES"
    HUMAN_TRAFFICKING = "HUMAN_TRAFFICKING"
    CASH_BUSINESS = "CASH_BUSINESS"
    SANCTIONS_EVASION = "SANCTIONS_EVASION"
    CORRUPTION = "CORRUPTION"
    NETWORK = "NETWORK"
    FRAUD = "FRAUD"
    # Screening sources
    SANCTIONS = "SANCTIONS"
    PEP = "PEP"
    ADVERSE_MEDIA = "ADVERSE_MEDIA"
    LITIGATION = "LITIGATION"
    REGULATORY = "REGULATORY"
    CORPORATE = "CORPORATE"
    BLOCKCHAIN = "BLOCKCHAIN"


class RiskLevel(StrEnum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class Priority(StrEnum):
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    P4 = "P4"


class RiskSignal(BaseModel):
    """Common shape of everything the composite scorer consumes."""

    model_config = ConfigDict(frozen=True)

    source: str
    category: str
    severity: Severity
    score: float = Field(ge=0)
    message: str = ""
    evidence_refs: list[str] = Field(default_factory=list)


class Finding(RiskSignal):
    """Signal produced by one source adapter call for a subject."""


class Alert(RiskSignal):
    """Signal produced by one detector rule invocation over a transaction set."""

    source: str = "transaction_monitoring"
    rule_id: str
    related_transaction_ids: list[str] = Field(default_factory=list)
    details: dict = Field(default_factory=dict)


class RiskAssessment(BaseModel):
    """Composite result of one screening run. No timestamps: a pure function of its inputs."""

    composite_score: int = Field(ge=0, le=100)
    level: RiskLevel
    priority: Priority
    sla: str
    sar_required: bool = False
    category_scores: dict[str, float] = Field(default_factory=dict)
    active_category_count: int = 0
    weighted_mean: float = 0.0
    severity_multiplier: float = 1.0
    correlation_bonus: int = 0
    recommended_actions: list[str] = Field(default_factory=list)
    signal_count: int = 0
