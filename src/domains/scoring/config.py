"""Composite scoring policy.

Caps, weights, multipliers, bonuses and triage tiers are all policy data.
An instance is handed to the scorer at construction, so tenants can run
different policies side by side.
"""

import os
from dataclasses import dataclass, field


def _parse_mapping(raw: str) -> dict[str, float]:
    """Parse ``"STRUCTURING=50,VELOCITY=45"`` into a dict."""
    mapping: dict[str, float] = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        key, _, value = item.partition("=")
        if not value:
            raise ValueError(f"Invalid mapping entry: {item!r}")
        mapping[key.strip().upper()] = float(value)
    return mapping


@dataclass
class SeverityMultiplierPolicy:
    critical_many_count: int = 3
    critical_many_multiplier: float = 1.4
    critical_any_multiplier: float = 1.2
    high_many_count: int = 5
    high_many_multiplier: float = 1.15


@dataclass
class CorrelationBonusPolicy:
    # (min active categories, bonus points), checked in order
    tiers: list[tuple[int, int]] = field(
        default_factory=lambda: [(5, 15), (3, 8), (2, 3)]
    )


@dataclass
class TriageTier:
    min_score: int
    level: str
    priority: str
    sla: str
    actions: tuple[str, ...] = ()


@dataclass
class TriagePolicy:
    # Highest tier first; the last tier must have min_score 0.
    tiers: list[TriageTier] = field(
        default_factory=lambda: [
            TriageTier(
                80,
                "CRITICAL",
                "P1",
                "4 hours",
                ("IMMEDIATE_ESCALATION", "SAR_FILING", "ACCOUNT_FREEZE_REVIEW"),
            ),
            TriageTier(
                60,
                "HIGH",
                "P2",
                "24 hours",
                ("SENIOR_REVIEW", "SAR_CONSIDERATION", "ENHANCED_MONITORING"),
            ),
            TriageTier(
                30,
                "MEDIUM",
                "P3",
                "72 hours",
                ("ANALYST_REVIEW", "ENHANCED_DUE_DILIGENCE"),
            ),
            TriageTier(0, "LOW", "P4", "5 business days"),
        ]
    )
    sar_score_threshold: int = 60
    sar_category_count: int = 4

    # Category -> action appended whenever that category contributes
    category_actions: dict[str, str] = field(
        default_factory=lambda: {
            "SANCTIONS": "OFAC_COMPLIANCE_REVIEW",
            "SANCTIONS_EVASION": "OFAC_COMPLIANCE_REVIEW",
            "HUMAN_TRAFFICKING": "LAW_ENFORCEMENT_REFERRAL",
        }
    )


@dataclass
class ScoringConfig:
    """Top-level composite scoring configuration."""

    category_caps: dict[str, float] = field(
        default_factory=lambda: {
            "STRUCTURING": 50,
            "VELOCITY": 45,
            "GEOGRAPHIC": 40,
            "COUNTERPARTY": 50,
            "BEHAVIORAL": 35,
            "CRYPTO": 55,
            "TBML": 50,
            "REAL_ESTATE": 45,
            "GAMBLING": 35,
            "INTEGRATION": 40,
            "MSB_HAWALA": 45,
            "SECURITIES": 40,
            "HUMAN_TRAFFICKING": 55,
            "CASH_BUSINESS": 35,
            "SANCTIONS_EVASION": 60,
            "CORRUPTION": 50,
            "NETWORK": 50,
            "FRAUD": 55,
            # Screening source categories
            "SANCTIONS": 80,
            "PEP": 50,
            "ADVERSE_MEDIA": 45,
            "LITIGATION": 40,
            "REGULATORY": 50,
            "CORPORATE": 30,
            "BLOCKCHAIN": 60,
        }
    )
    default_cap: float = 40.0

    category_weights: dict[str, float] = field(
        default_factory=lambda: {
            "SANCTIONS": 1.5,
            "SANCTIONS_EVASION": 1.5,
            "HUMAN_TRAFFICKING": 1.4,
            "CORRUPTION": 1.3,
            "FRAUD": 1.3,
            "CRYPTO": 1.2,
            "TBML": 1.2,
            "NETWORK": 1.2,
            "BLOCKCHAIN": 1.2,
            "STRUCTURING": 1.1,
            "COUNTERPARTY": 1.1,
            "PEP": 1.1,
        }
    )
    default_weight: float = 1.0

    severity: SeverityMultiplierPolicy = field(default_factory=SeverityMultiplierPolicy)
    correlation: CorrelationBonusPolicy = field(default_factory=CorrelationBonusPolicy)
    triage: TriagePolicy = field(default_factory=TriagePolicy)

    max_score: int = 100

    def cap_for(self, category: str) -> float:
        return self.category_caps.get(category, self.default_cap)

    def weight_for(self, category: str) -> float:
        return self.category_weights.get(category, self.default_weight)

    @classmethod
    def from_env(cls) -> "ScoringConfig":
        """Load config with env var overrides (SCORING_ prefix)."""
        config = cls()

        if v := os.getenv("SCORING_CATEGORY_CAPS"):
            config.category_caps.update(_parse_mapping(v))
        if v := os.getenv("SCORING_CATEGORY_WEIGHTS"):
            config.category_weights.update(_parse_mapping(v))
        if v := os.getenv("SCORING_DEFAULT_CAP"):
            config.default_cap = float(v)
        if v := os.getenv("SCORING_DEFAULT_WEIGHT"):
            config.default_weight = float(v)
        if v := os.getenv("SCORING_SAR_SCORE_THRESHOLD"):
            config.triage.sar_score_threshold = int(v)
        if v := os.getenv("SCORING_SAR_CATEGORY_COUNT"):
            config.triage.sar_category_count = int(v)

        return config


# Module-level default instance
default_config = ScoringConfig()
