"""Composite risk scoring domain."""

from .config import ScoringConfig
from .models import (
    Alert,
    Finding,
    Priority,
    RiskAssessment,
    RiskCategory,
    RiskLevel,
    RiskSignal,
    Severity,
)
from .scorer import CompositeRiskScorer

__all__ = [
    "Alert",
    "CompositeRiskScorer",
    "Finding",
    "Priority",
    "RiskAssessment",
    "RiskCategory",
    "RiskLevel",
    "RiskSignal",
    "ScoringConfig",
    "Severity",
]
