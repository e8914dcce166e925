"""Abstract base class for transaction monitoring rules."""

import re
from abc import ABC, abstractmethod
from functools import lru_cache

from src.domains.scoring.models import Alert, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, RuleDescriptor, Transaction


@lru_cache(maxsize=64)
def keyword_pattern(keywords: tuple[str, ...]) -> re.Pattern[str]:
    """Case-insensitive whole-word alternation over a keyword tuple."""
    alternation = "|".join(re.escape(k) for k in keywords)
    return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)


def mentions(tx: Transaction, pattern: re.Pattern[str]) -> bool:
    """True when the counterparty name or description matches."""
    return bool(pattern.search(tx.counterparty_name) or pattern.search(tx.description))


class DetectionRule(ABC):
    """Base class for all detector rules.

    A rule is a pure function of (transactions, profile, config). Transactions
    arrive sorted by timestamp with ties in input order; rules must not
    mutate them or read the clock.
    """

    rule_id: str
    name: str
    category: str
    severity: Severity

    @abstractmethod
    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        """Return zero or more alerts for this transaction set."""
        ...

    def describe(self) -> RuleDescriptor:
        return RuleDescriptor(
            rule_id=self.rule_id,
            name=self.name,
            category=str(self.category),
            severity=self.severity.value,
        )

    def _alert(
        self,
        score: float,
        message: str,
        transactions: list[Transaction] | None = None,
        details: dict | None = None,
        limit: int = 10,
    ) -> Alert:
        """Convenience: build an alert carrying this rule's identity."""
        related = [t.id for t in (transactions or [])[:limit]]
        return Alert(
            rule_id=self.rule_id,
            category=str(self.category),
            severity=self.severity,
            score=score,
            message=message,
            related_transaction_ids=related,
            evidence_refs=related,
            details=details or {},
        )
