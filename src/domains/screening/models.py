"""Pydantic models for the subject screening domain."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from src.domains.scoring.models import Finding, RiskAssessment


class SubjectKind(StrEnum):
    INDIVIDUAL = "INDIVIDUAL"
    ENTITY = "ENTITY"
    WALLET = "WALLET"


class Subject(BaseModel):
    """The thing being screened. Exactly one of name / wallet_address is set."""

    model_config = ConfigDict(frozen=True)

    kind: SubjectKind
    name: str | None = None
    wallet_address: str | None = None
    chain: str | None = None

    @property
    def is_wallet(self) -> bool:
        return self.kind == SubjectKind.WALLET

    @property
    def query(self) -> str:
        return self.wallet_address if self.is_wallet else self.name


class SourceStatus(StrEnum):
    OK = "OK"
    TIMEOUT = "TIMEOUT"
    FAILED = "FAILED"
    SKIPPED = "SKIPPED"


class SourceResult(BaseModel):
    """Outcome of one source slot. ``finding`` is None unless status is OK."""

    name: str
    status: SourceStatus
    finding: Finding | None = None
    error: str | None = None
    duration_ms: float = 0.0

    @property
    def usable(self) -> bool:
        return self.status == SourceStatus.OK and self.finding is not None


class ScreeningResult(BaseModel):
    subject: Subject
    sources: dict[str, SourceResult] = Field(default_factory=dict)
    assessment: RiskAssessment
    sources_checked: list[str] = Field(default_factory=list)
    sources_failed: list[str] = Field(default_factory=list)
    sources_skipped: list[str] = Field(default_factory=list)
    duration_ms: float = 0.0
