"""Abstract base class for screening source adapters."""

from abc import ABC, abstractmethod

from src.domains.scoring.models import Finding, Severity

from ..models import Subject, SubjectKind

NAME_KINDS = frozenset({SubjectKind.INDIVIDUAL, SubjectKind.ENTITY})
WALLET_KINDS = frozenset({SubjectKind.WALLET})


class SourceAdapter(ABC):
    """One external source (sanctions list, PEP registry, chain analytics, ...).

    ``screen`` returns a single Finding. A Finding with score 0 means the
    source was checked and found nothing. Failures are raised, never turned
    into a clear result.
    """

    name: str
    category: str
    supported_kinds: frozenset[SubjectKind] = NAME_KINDS
    # None means the executor's default timeout
    timeout_ms: int | None = None

    def supports(self, subject: Subject) -> bool:
        return subject.kind in self.supported_kinds

    @abstractmethod
    async def screen(self, subject: Subject) -> Finding:
        ...

    def _clear(self, message: str = "No match") -> Finding:
        return Finding(
            source=self.name,
            category=self.category,
            severity=Severity.LOW,
            score=0.0,
            message=message,
        )

    def _finding(
        self,
        severity: Severity,
        score: float,
        message: str,
        evidence_refs: list[str] | None = None,
    ) -> Finding:
        return Finding(
            source=self.name,
            category=self.category,
            severity=severity,
            score=score,
            message=message,
            evidence_refs=evidence_refs or [],
        )
