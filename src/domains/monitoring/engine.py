"""Detector rule engine.

Runs every registered rule (or a category-filtered subset) against the same
immutable transaction list and profile. A failing rule contributes no alerts
and is reported in ``failed_rules``; it never aborts the batch.
"""

from collections.abc import Iterable

import structlog

from src.domains.scoring.models import Alert

from .config import MonitoringConfig, default_config
from .models import (
    CategorySummary,
    EntityProfile,
    RuleDescriptor,
    RuleEngineResult,
    RuleFailure,
    Transaction,
)
from .rules import ALL_RULES, DetectionRule

logger = structlog.get_logger()


class RuleEngine:
    def __init__(
        self,
        rules: Iterable[DetectionRule] | None = None,
        config: MonitoringConfig | None = None,
    ) -> None:
        self._rules = list(ALL_RULES if rules is None else rules)
        self._config = config or default_config
        logger.info("rule_engine_initialized", rule_count=len(self._rules))

    @property
    def rules(self) -> list[DetectionRule]:
        return list(self._rules)

    def catalog(self) -> list[RuleDescriptor]:
        return [rule.describe() for rule in self._rules]

    def run(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        categories: Iterable[str] | None = None,
    ) -> RuleEngineResult:
        """Evaluate the active rules. Alerts come back sorted by score, highest first."""
        wanted = {c.upper() for c in categories} if categories is not None else None
        active = [r for r in self._rules if wanted is None or r.category in wanted]

        # Each rule gets its own list; the Transaction models themselves are frozen
        frozen_txs = tuple(transactions)
        alerts: list[Alert] = []
        failures: list[RuleFailure] = []

        for rule in active:
            try:
                # Materialize inside the guard so lazy rules fail here, not mid-batch
                emitted = list(rule.detect(list(frozen_txs), profile, self._config))
                stray = next((a for a in emitted if not isinstance(a, Alert)), None)
                if stray is not None:
                    raise TypeError(f"rule emitted {type(stray).__name__}, not Alert")
            except Exception as exc:
                logger.exception("rule_evaluation_error", rule_id=rule.rule_id)
                failures.append(
                    RuleFailure(
                        rule_id=rule.rule_id,
                        category=str(rule.category),
                        error=f"{type(exc).__name__}: {exc}",
                    )
                )
                continue
            alerts.extend(emitted)

        # sorted() is stable: ties keep registration then emission order
        alerts = sorted(alerts, key=lambda a: a.score, reverse=True)

        logger.info(
            "rules_evaluated",
            rules_evaluated=len(active),
            alert_count=len(alerts),
            failed_rules=len(failures),
        )
        return RuleEngineResult(alerts=alerts, failed_rules=failures, rules_evaluated=len(active))


def summarize_categories(alerts: list[Alert]) -> dict[str, CategorySummary]:
    """Per-category alert count, highest score and distinct rule ids."""
    summary: dict[str, CategorySummary] = {}
    for alert in alerts:
        entry = summary.setdefault(alert.category, CategorySummary())
        entry.count += 1
        entry.max_score = max(entry.max_score, alert.score)
        if alert.rule_id not in entry.rule_ids:
            entry.rule_ids.append(alert.rule_id)
    return summary
