"""Structuring detection rules (31 USC § 5324)."""

from collections import defaultdict

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule


class JustBelowThresholdRule(DetectionRule):
    """k transactions sitting just under the reporting threshold in a rolling window."""

    rule_id = "STR-001"
    name = "Just-Below Threshold Structuring"
    category = RiskCategory.STRUCTURING
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.structuring
        floor = cfg.reporting_threshold * cfg.near_threshold_pct
        near = [t for t in transactions if floor <= t.magnitude < cfg.reporting_threshold]
        k = cfg.near_threshold_min_count
        if k <= 0 or len(near) < k:
            return []

        for i in range(len(near) - k + 1):
            window = near[i : i + k]
            span_days = (window[-1].timestamp - window[0].timestamp).total_seconds() / 86400
            if span_days <= cfg.near_threshold_window_days:
                amounts = [t.magnitude for t in window]
                return [
                    self._alert(
                        cfg.near_threshold_score,
                        f"{k} transactions just below the {cfg.reporting_threshold:,.0f} "
                        f"threshold within {span_days:.1f} days",
                        window,
                        {"amounts": amounts, "total_amount": sum(amounts), "span_days": span_days},
                    )
                ]
        return []


class RoundAmountRule(DetectionRule):
    rule_id = "STR-002"
    name = "Round-Amount Structuring"
    category = RiskCategory.STRUCTURING
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.structuring
        unit = cfg.round_amount_unit
        round_txs = [t for t in transactions if t.magnitude >= unit and t.magnitude % unit == 0]
        if not transactions or len(round_txs) < cfg.round_min_count:
            return []

        ratio = len(round_txs) / len(transactions)
        if ratio <= cfg.round_min_ratio:
            return []

        return [
            self._alert(
                cfg.round_score,
                f"{len(round_txs)} of {len(transactions)} transactions are round amounts "
                f"({ratio:.0%})",
                round_txs,
                {"round_count": len(round_txs), "ratio": ratio},
            )
        ]


class SplitDepositRule(DetectionRule):
    """Same-day deposits, each under the threshold, that together exceed it."""

    rule_id = "STR-003"
    name = "Split-Deposit Structuring"
    category = RiskCategory.STRUCTURING
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.structuring
        by_day: dict[str, list[Transaction]] = defaultdict(list)
        for t in transactions:
            if t.is_credit and t.transaction_type not in cfg.split_excluded_types:
                by_day[t.day_key].append(t)

        alerts = []
        for day, group in by_day.items():
            if len(group) < cfg.split_min_deposits:
                continue
            total = sum(t.magnitude for t in group)
            if total >= cfg.reporting_threshold and all(
                t.magnitude < cfg.reporting_threshold for t in group
            ):
                alerts.append(
                    self._alert(
                        cfg.split_score,
                        f"{len(group)} deposits on {day} totaling {total:,.2f}, "
                        f"each under {cfg.reporting_threshold:,.0f}",
                        group,
                        {"date": day, "count": len(group), "total": total},
                        limit=len(group),
                    )
                )
        return alerts


class IncrementalAmountRule(DetectionRule):
    rule_id = "STR-004"
    name = "Incremental Amount Structuring"
    category = RiskCategory.STRUCTURING
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.structuring
        cash = [t for t in transactions if t.transaction_type in cfg.cash_types]
        size = cfg.incremental_window
        if size < 2:
            return []

        for i in range(len(cash) - size + 1):
            window = cash[i : i + size]
            diffs = [b.magnitude - a.magnitude for a, b in zip(window, window[1:])]
            increasing = all(0 < d < cfg.incremental_max_step for d in diffs)
            decreasing = all(-cfg.incremental_max_step < d < 0 for d in diffs)
            if increasing or decreasing:
                pattern = "INCREASING" if increasing else "DECREASING"
                return [
                    self._alert(
                        cfg.incremental_score,
                        f"Incrementally {pattern.lower()} amounts across {size} cash transactions",
                        window,
                        {"amounts": [t.magnitude for t in window], "pattern": pattern},
                    )
                ]
        return []
