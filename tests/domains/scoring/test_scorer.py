"""Tests for the composite risk scorer.

Covers the full aggregation pipeline: per-category caps, weighted mean,
severity multiplier, correlation bonus, saturation, triage tiers and
recommended actions.
"""

import random

import pytest

from src.domains.scoring.config import ScoringConfig
from src.domains.scoring.models import (
    Alert,
    Finding,
    Priority,
    RiskLevel,
    RiskSignal,
    Severity,
)
from src.domains.scoring.scorer import CompositeRiskScorer

SCORER = CompositeRiskScorer()


def _signal(category: str, score: float, severity: Severity = Severity.MEDIUM) -> RiskSignal:
    return Finding(source="test", category=category, severity=severity, score=score)


def _alert(category: str, score: float, severity: Severity = Severity.MEDIUM, **kwargs) -> Alert:
    defaults = {"rule_id": "TST-001", "category": category, "severity": severity, "score": score}
    defaults.update(kwargs)
    return Alert(**defaults)


class TestEmptyInput:
    def test_no_signals_is_low(self):
        result = SCORER.score([])
        assert result.composite_score == 0
        assert result.level == RiskLevel.LOW
        assert result.priority == Priority.P4
        assert result.sla == "5 business days"
        assert result.sar_required is False
        assert result.category_scores == {}
        assert result.recommended_actions == []

    def test_zero_score_findings_contribute_nothing(self):
        """A clear result from a source is not a risk category."""
        result = SCORER.score([_signal("SANCTIONS", 0.0, Severity.LOW)])
        assert result.composite_score == 0
        assert result.category_scores == {}
        assert result.signal_count == 0


class TestCategoryCaps:
    def test_single_signal_below_cap(self):
        result = SCORER.score([_alert("STRUCTURING", 35)])
        assert result.category_scores == {"STRUCTURING": 35}
        assert result.composite_score == 35
        assert result.level == RiskLevel.MEDIUM
        assert result.priority == Priority.P3
        assert result.sla == "72 hours"

    def test_sum_clamped_to_cap(self):
        alerts = [_alert("STRUCTURING", 35, Severity.HIGH) for _ in range(3)]
        result = SCORER.score(alerts)
        assert result.category_scores["STRUCTURING"] == 50
        assert result.composite_score == 50

    def test_unknown_category_uses_default_cap(self):
        result = SCORER.score([_signal("SOMETHING_NEW", 90)])
        assert result.category_scores["SOMETHING_NEW"] == 40

    def test_every_category_within_cap(self):
        config = ScoringConfig()
        signals = [_signal(c, 100) for c in config.category_caps]
        result = SCORER.score(signals)
        for category, score in result.category_scores.items():
            assert score <= config.cap_for(category)


class TestSeverityMultiplier:
    def test_one_critical(self):
        result = SCORER.score([_alert("VELOCITY", 45, Severity.CRITICAL)])
        assert result.severity_multiplier == 1.2
        # 45 * 1.2 = 54
        assert result.composite_score == 54

    def test_three_critical(self):
        alerts = [_alert("VELOCITY", 45, Severity.CRITICAL) for _ in range(3)]
        result = SCORER.score(alerts)
        assert result.severity_multiplier == 1.4
        # capped 45 * 1.4 = 63
        assert result.composite_score == 63
        assert result.level == RiskLevel.HIGH
        assert result.sar_required is True

    def test_five_high(self):
        alerts = [_alert("BEHAVIORAL", 10, Severity.HIGH) for _ in range(5)]
        result = SCORER.score(alerts)
        assert result.severity_multiplier == 1.15
        # capped 35 * 1.15 = 40.25
        assert result.composite_score == 40

    def test_four_high_no_multiplier(self):
        alerts = [_alert("BEHAVIORAL", 5, Severity.HIGH) for _ in range(4)]
        result = SCORER.score(alerts)
        assert result.severity_multiplier == 1.0
        assert result.composite_score == 20


class TestWeightsAndCorrelation:
    def test_weighted_mean_with_two_categories(self):
        result = SCORER.score(
            [
                _signal("SANCTIONS", 80, Severity.CRITICAL),
                _signal("PEP", 40, Severity.HIGH),
            ]
        )
        # (80*1.5 + 40*1.1) / 2.6 = 63.077; * 1.2 = 75.69; + 3 = 78.69
        assert result.correlation_bonus == 3
        assert result.composite_score == 79
        assert result.level == RiskLevel.HIGH
        assert result.priority == Priority.P2
        assert "OFAC_COMPLIANCE_REVIEW" in result.recommended_actions

    def test_correlation_bonus_tiers(self):
        categories = ["GEOGRAPHIC", "BEHAVIORAL", "VELOCITY", "TBML", "GAMBLING"]
        bonuses = [SCORER.score([_signal(c, 5) for c in categories[:n]]).correlation_bonus for n in range(1, 6)]
        assert bonuses == [0, 3, 8, 8, 15]

    def test_four_categories_require_sar(self):
        signals = [_signal(c, 5, Severity.LOW) for c in ("GEOGRAPHIC", "BEHAVIORAL", "VELOCITY", "TBML")]
        result = SCORER.score(signals)
        # mean 5 + bonus 8
        assert result.composite_score == 13
        assert result.level == RiskLevel.LOW
        assert result.sar_required is True


class TestSaturationAndRounding:
    def test_saturates_at_100(self):
        signals = [_signal("SANCTIONS", 80, Severity.CRITICAL) for _ in range(3)] + [
            _signal(c, 60, Severity.HIGH)
            for c in ("SANCTIONS_EVASION", "FRAUD", "CRYPTO", "NETWORK")
        ]
        result = SCORER.score(signals)
        assert result.composite_score == 100
        assert result.level == RiskLevel.CRITICAL
        assert result.priority == Priority.P1
        assert result.sla == "4 hours"

    def test_half_rounds_up(self):
        result = SCORER.score([_signal("OTHER", 12.5)])
        assert result.composite_score == 13

    @pytest.mark.parametrize(
        "score,level,priority",
        [
            (29, RiskLevel.LOW, Priority.P4),
            (30, RiskLevel.MEDIUM, Priority.P3),
            (59, RiskLevel.MEDIUM, Priority.P3),
            (60, RiskLevel.HIGH, Priority.P2),
            (79, RiskLevel.HIGH, Priority.P2),
            (80, RiskLevel.CRITICAL, Priority.P1),
        ],
    )
    def test_tier_boundaries(self, score, level, priority):
        result = SCORER.score([_signal("SANCTIONS", score)])
        assert result.composite_score == score
        assert result.level == level
        assert result.priority == priority


class TestPurity:
    def test_order_independent(self):
        signals = [
            _alert("STRUCTURING", 35, Severity.HIGH),
            _alert("VELOCITY", 45, Severity.CRITICAL),
            _signal("SANCTIONS", 40, Severity.HIGH),
            _alert("STRUCTURING", 20),
            _alert("CRYPTO", 0.1, Severity.LOW),
            _alert("GEOGRAPHIC", 25),
        ]
        expected = SCORER.score(signals)
        shuffled = list(signals)
        random.Random(7).shuffle(shuffled)
        assert SCORER.score(shuffled) == expected
        assert SCORER.score(list(reversed(signals))) == expected

    def test_same_input_same_output(self):
        signals = [_alert("FRAUD", 30, Severity.HIGH), _alert("NETWORK", 35, Severity.HIGH)]
        assert SCORER.score(signals) == SCORER.score(signals)

    def test_adding_alert_to_active_category_never_lowers_score(self):
        base = [_alert("STRUCTURING", 20), _alert("VELOCITY", 20)]
        before = SCORER.score(base).composite_score
        after = SCORER.score(base + [_alert("STRUCTURING", 10, Severity.CRITICAL)]).composite_score
        assert after >= before

    def test_adding_high_alert_in_new_category_never_lowers_score(self):
        base = [_alert("STRUCTURING", 20), _alert("VELOCITY", 20)]
        before = SCORER.score(base).composite_score
        after = SCORER.score(base + [_alert("FRAUD", 30, Severity.CRITICAL)]).composite_score
        assert after >= before


class TestRecommendedActions:
    def test_critical_actions(self):
        result = SCORER.score([_signal("SANCTIONS", 80, Severity.CRITICAL)])
        assert result.composite_score == 96
        assert result.recommended_actions == [
            "IMMEDIATE_ESCALATION",
            "SAR_FILING",
            "ACCOUNT_FREEZE_REVIEW",
            "OFAC_COMPLIANCE_REVIEW",
        ]

    def test_human_trafficking_referral(self):
        result = SCORER.score([_alert("HUMAN_TRAFFICKING", 10, Severity.LOW)])
        assert result.recommended_actions == ["LAW_ENFORCEMENT_REFERRAL"]

    def test_actions_deduplicated(self):
        result = SCORER.score(
            [
                _signal("SANCTIONS", 20),
                _alert("SANCTIONS_EVASION", 20),
            ]
        )
        assert result.recommended_actions.count("OFAC_COMPLIANCE_REVIEW") == 1


class TestScoringConfig:
    def test_injected_caps(self):
        config = ScoringConfig()
        config.category_caps["STRUCTURING"] = 10
        scorer = CompositeRiskScorer(config)
        result = scorer.score([_alert("STRUCTURING", 35)])
        assert result.category_scores["STRUCTURING"] == 10
        # The module default is untouched
        assert SCORER.score([_alert("STRUCTURING", 35)]).category_scores["STRUCTURING"] == 35

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SCORING_CATEGORY_CAPS", "STRUCTURING=20, velocity=15")
        monkeypatch.setenv("SCORING_DEFAULT_WEIGHT", "2.0")
        monkeypatch.setenv("SCORING_SAR_SCORE_THRESHOLD", "50")
        config = ScoringConfig.from_env()
        assert config.cap_for("STRUCTURING") == 20
        assert config.cap_for("VELOCITY") == 15
        assert config.weight_for("UNKNOWN") == 2.0
        assert config.triage.sar_score_threshold == 50

    def test_from_env_rejects_bad_mapping(self, monkeypatch):
        monkeypatch.setenv("SCORING_CATEGORY_CAPS", "STRUCTURING")
        with pytest.raises(ValueError):
            ScoringConfig.from_env()

    def test_negative_score_rejected(self):
        with pytest.raises(ValueError):
            _signal("FRAUD", -1)
