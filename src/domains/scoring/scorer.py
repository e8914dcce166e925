"""Composite risk scoring over a heterogeneous bag of findings and alerts.

Scoring (0-100):
1. Group contributing signals by category, sum scores per category
2. Clamp each category to its configured cap
3. Weighted mean of capped category scores (per-category weights)
4. Severity multiplier from the count of CRITICAL / HIGH signals
5. Cross-category correlation bonus from the number of active categories
6. Final = min(100, round(mean * multiplier + bonus))
7. Level, priority, SLA, SAR flag and recommended actions from triage tiers

The pre-clamp value can exceed 100, so very different signal sets may both
saturate at 100. This is kept as-is; see DESIGN.md.
"""

import math
from collections import defaultdict
from collections.abc import Iterable

import structlog

from .config import ScoringConfig, TriageTier, default_config
from .models import Priority, RiskAssessment, RiskLevel, RiskSignal, Severity

logger = structlog.get_logger()


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class CompositeRiskScorer:
    """Stateless scorer: the same signal multiset always yields the same assessment."""

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self._config = config or default_config

    @property
    def config(self) -> ScoringConfig:
        return self._config

    def score(self, signals: Iterable[RiskSignal]) -> RiskAssessment:
        cfg = self._config
        # Zero-score signals mean "checked and clear" and contribute nothing.
        contributing = [s for s in signals if s.score > 0]

        category_scores = self._capped_category_scores(contributing)
        weighted_mean = self._weighted_mean(category_scores)
        severity_multiplier = self._severity_multiplier(contributing)
        active_categories = len(category_scores)
        correlation_bonus = self._correlation_bonus(active_categories)

        raw = weighted_mean * severity_multiplier + correlation_bonus
        composite = max(0, min(cfg.max_score, _round_half_up(raw)))

        tier = self._tier_for(composite)
        sar_required = (
            composite >= cfg.triage.sar_score_threshold
            or active_categories >= cfg.triage.sar_category_count
        )

        assessment = RiskAssessment(
            composite_score=composite,
            level=RiskLevel(tier.level),
            priority=Priority(tier.priority),
            sla=tier.sla,
            sar_required=sar_required,
            category_scores=category_scores,
            active_category_count=active_categories,
            weighted_mean=round(weighted_mean, 4),
            severity_multiplier=severity_multiplier,
            correlation_bonus=correlation_bonus,
            recommended_actions=self._recommended_actions(tier, category_scores),
            signal_count=len(contributing),
        )

        logger.info(
            "risk_assessed",
            composite_score=composite,
            level=assessment.level.value,
            priority=assessment.priority.value,
            categories=list(category_scores.keys()),
            severity_multiplier=severity_multiplier,
            correlation_bonus=correlation_bonus,
            sar_required=sar_required,
        )

        return assessment

    def _capped_category_scores(self, signals: list[RiskSignal]) -> dict[str, float]:
        by_category: dict[str, list[float]] = defaultdict(list)
        for signal in signals:
            by_category[signal.category].append(signal.score)

        # fsum is exactly rounded, so input order never changes the sums
        return {
            category: min(math.fsum(scores), self._config.cap_for(category))
            for category, scores in sorted(by_category.items())
        }

    def _weighted_mean(self, category_scores: dict[str, float]) -> float:
        if not category_scores:
            return 0.0
        weights = {c: self._config.weight_for(c) for c in category_scores}
        total_weight = math.fsum(weights.values())
        if total_weight <= 0:
            return 0.0
        weighted_sum = math.fsum(score * weights[c] for c, score in category_scores.items())
        return weighted_sum / total_weight

    def _severity_multiplier(self, signals: list[RiskSignal]) -> float:
        policy = self._config.severity
        critical = sum(1 for s in signals if s.severity == Severity.CRITICAL)
        high = sum(1 for s in signals if s.severity == Severity.HIGH)

        if critical >= policy.critical_many_count:
            return policy.critical_many_multiplier
        if critical >= 1:
            return policy.critical_any_multiplier
        if high >= policy.high_many_count:
            return policy.high_many_multiplier
        return 1.0

    def _correlation_bonus(self, active_categories: int) -> int:
        for min_categories, bonus in self._config.correlation.tiers:
            if active_categories >= min_categories:
                return bonus
        return 0

    def _tier_for(self, composite: int) -> TriageTier:
        for tier in self._config.triage.tiers:
            if composite >= tier.min_score:
                return tier
        return self._config.triage.tiers[-1]

    def _recommended_actions(
        self, tier: TriageTier, category_scores: dict[str, float]
    ) -> list[str]:
        actions = list(tier.actions)
        for category, action in self._config.triage.category_actions.items():
            if category in category_scores:
                actions.append(action)
        return list(dict.fromkeys(actions))
