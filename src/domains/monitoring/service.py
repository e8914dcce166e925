"""Transaction batch analysis: normalize, profile, detect, score."""

from collections.abc import Iterable, Mapping
from typing import Any

import structlog

from src.domains.scoring.scorer import CompositeRiskScorer

from .config import MonitoringConfig, default_config
from .engine import RuleEngine, summarize_categories
from .models import EntityProfile, TransactionAnalysis
from .normalizer import build_profile, normalize_transactions

logger = structlog.get_logger()


class TransactionMonitor:
    """Runs one transaction batch through the full monitoring pipeline."""

    def __init__(
        self,
        config: MonitoringConfig | None = None,
        engine: RuleEngine | None = None,
        scorer: CompositeRiskScorer | None = None,
    ) -> None:
        self._config = config or default_config
        self._engine = engine or RuleEngine(config=self._config)
        self._scorer = scorer or CompositeRiskScorer()

    @property
    def engine(self) -> RuleEngine:
        return self._engine

    def analyze(
        self,
        records: Iterable[Mapping[str, Any]],
        entity_profile: EntityProfile | None = None,
        categories: Iterable[str] | None = None,
    ) -> TransactionAnalysis:
        normalized = normalize_transactions(records, self._config.default_currency)
        transactions = normalized.transactions
        profile = entity_profile or build_profile(transactions)

        result = self._engine.run(transactions, profile, categories)
        assessment = self._scorer.score(result.alerts)

        logger.info(
            "transactions_analyzed",
            transaction_count=len(transactions),
            rejected=len(normalized.rejected),
            alert_count=len(result.alerts),
            failed_rules=len(result.failed_rules),
            composite_score=assessment.composite_score,
        )

        return TransactionAnalysis(
            transaction_count=len(transactions),
            entity_profile=profile,
            alerts=result.alerts,
            category_summary=summarize_categories(result.alerts),
            assessment=assessment,
            rejected_records=normalized.rejected,
            failed_rules=result.failed_rules,
        )
