"""Behavioral anomaly rules."""

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule


class DormantReactivationRule(DetectionRule):
    rule_id = "BEH-001"
    name = "Dormant Account Reactivation"
    category = RiskCategory.BEHAVIORAL
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.behavioral
        for previous, current in zip(transactions, transactions[1:]):
            gap_days = (current.timestamp - previous.timestamp).total_seconds() / 86400
            if gap_days >= cfg.dormancy_days and current.magnitude > cfg.dormancy_min_amount:
                return [
                    self._alert(
                        cfg.dormancy_score,
                        f"Account dormant for {int(gap_days)} days then a "
                        f"{current.magnitude:,.0f} transaction",
                        [current],
                        {"dormant_days": int(gap_days), "reactivation_amount": current.magnitude},
                    )
                ]
        return []


class OffHoursRule(DetectionRule):
    rule_id = "BEH-002"
    name = "Unusual Transaction Time"
    category = RiskCategory.BEHAVIORAL
    severity = Severity.LOW

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.behavioral
        off_hours = [
            t
            for t in transactions
            if t.timestamp.hour >= cfg.off_hours_start or t.timestamp.hour < cfg.off_hours_end
        ]
        if not transactions or len(off_hours) < cfg.off_hours_min_count:
            return []

        ratio = len(off_hours) / len(transactions)
        if ratio <= cfg.off_hours_min_ratio:
            return []

        return [
            self._alert(
                cfg.off_hours_score,
                f"{len(off_hours)} transactions between {cfg.off_hours_start:02d}:00 and "
                f"{cfg.off_hours_end:02d}:00 UTC",
                off_hours,
                {"off_hours_count": len(off_hours), "ratio": ratio},
                limit=5,
            )
        ]


class ChannelSwitchingRule(DetectionRule):
    rule_id = "BEH-003"
    name = "Channel Switching"
    category = RiskCategory.BEHAVIORAL
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.behavioral
        if len(transactions) < cfg.channel_switch_min_transactions:
            return []

        switches = sum(
            1
            for a, b in zip(transactions, transactions[1:])
            if a.channel != b.channel and "UNKNOWN" not in (a.channel, b.channel)
        )
        if switches <= len(transactions) * cfg.channel_switch_min_ratio:
            return []

        return [
            self._alert(
                cfg.channel_switch_score,
                f"Frequent channel switching: {switches} changes across "
                f"{len(transactions)} transactions",
                details={"switches": switches, "transaction_count": len(transactions)},
            )
        ]


class AmountOutlierRule(DetectionRule):
    """Amounts above the Q3 + k*IQR fence."""

    rule_id = "BEH-004"
    name = "Amount Anomaly - Outlier Detection"
    category = RiskCategory.BEHAVIORAL
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.behavioral
        if len(transactions) < cfg.outlier_min_transactions:
            return []

        amounts = sorted(t.magnitude for t in transactions)
        q1 = amounts[int(len(amounts) * 0.25)]
        q3 = amounts[int(len(amounts) * 0.75)]
        fence = q3 + cfg.outlier_iqr_multiplier * (q3 - q1)

        outliers = [
            t
            for t in transactions
            if t.magnitude > fence and t.magnitude > cfg.outlier_min_amount
        ]
        if not outliers:
            return []

        return [
            self._alert(
                cfg.outlier_score,
                f"{len(outliers)} extreme outlier transaction(s) above {fence:,.0f}",
                outliers,
                {
                    "outlier_count": len(outliers),
                    "fence": fence,
                    "max_outlier": max(t.magnitude for t in outliers),
                },
                limit=5,
            )
        ]


class HighRiskMerchantCategoryRule(DetectionRule):
    rule_id = "BEH-005"
    name = "High-Risk MCC Activity"
    category = RiskCategory.BEHAVIORAL
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.behavioral
        risky = [t for t in transactions if t.merchant_category_code in cfg.high_risk_mccs]
        if len(risky) < cfg.high_risk_mcc_min_count:
            return []

        total = sum(t.magnitude for t in risky)
        return [
            self._alert(
                cfg.high_risk_mcc_score,
                f"{len(risky)} transactions with high-risk merchant category codes "
                f"totaling {total:,.0f}",
                risky,
                {
                    "mccs": list(dict.fromkeys(t.merchant_category_code for t in risky)),
                    "count": len(risky),
                    "total": total,
                },
                limit=5,
            )
        ]
