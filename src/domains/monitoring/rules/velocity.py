"""Velocity and volume rules (FinCEN Advisory FIN-2014-A007)."""

from collections import defaultdict

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule


class VolumeSpikeRule(DetectionRule):
    """One time bucket carries more than N times the mean volume of the other buckets."""

    rule_id = "VEL-001"
    name = "Unusual Transaction Volume Spike"
    category = RiskCategory.VELOCITY
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.velocity
        bucket_seconds = cfg.bucket_days * 86400
        buckets: dict[int, list[Transaction]] = defaultdict(list)
        for t in transactions:
            buckets[int(t.timestamp.timestamp() // bucket_seconds)].append(t)

        if len(buckets) < max(2, cfg.spike_min_buckets):
            return []

        volumes = {key: sum(t.magnitude for t in txs) for key, txs in buckets.items()}
        total = sum(volumes.values())
        others = len(volumes) - 1

        for key in sorted(volumes):
            volume = volumes[key]
            mean_others = (total - volume) / others
            if volume > mean_others * cfg.spike_multiplier and volume > cfg.spike_min_volume:
                multiple = volume / mean_others if mean_others else None
                return [
                    self._alert(
                        cfg.spike_score,
                        f"Bucket volume {volume:,.0f} against a mean of {mean_others:,.0f} "
                        f"across the other {others} buckets",
                        buckets[key],
                        {
                            "bucket_volume": volume,
                            "mean_other_volume": mean_others,
                            "multiple": multiple,
                            "bucket_days": cfg.bucket_days,
                        },
                    )
                ]
        return []


class RapidFireRule(DetectionRule):
    rule_id = "VEL-002"
    name = "Rapid-Fire Transactions"
    category = RiskCategory.VELOCITY
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.velocity
        k = cfg.rapid_fire_count
        if k < 2:
            return []

        for i in range(len(transactions) - k + 1):
            window = transactions[i : i + k]
            hours = (window[-1].timestamp - window[0].timestamp).total_seconds() / 3600
            if hours <= cfg.rapid_fire_window_hours:
                total = sum(t.magnitude for t in window)
                return [
                    self._alert(
                        cfg.rapid_fire_score,
                        f"{k} transactions within {hours:.1f} hours totaling {total:,.0f}",
                        window,
                        {"count": k, "hours": hours, "total": total},
                    )
                ]
        return []


class DailyCountRule(DetectionRule):
    rule_id = "VEL-003"
    name = "Excessive Daily Transaction Count"
    category = RiskCategory.VELOCITY
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.velocity
        by_day: dict[str, list[Transaction]] = defaultdict(list)
        for t in transactions:
            by_day[t.day_key].append(t)

        for day, group in by_day.items():
            if len(group) >= cfg.daily_count_max:
                return [
                    self._alert(
                        cfg.daily_count_score,
                        f"{len(group)} transactions on {day}",
                        group,
                        {"date": day, "count": len(group)},
                    )
                ]
        return []


class PassThroughRule(DetectionRule):
    """An inbound credit forwarded out almost in full within a bounded window."""

    rule_id = "VEL-004"
    name = "Pass-Through / Flow-Through Activity"
    category = RiskCategory.VELOCITY
    severity = Severity.CRITICAL

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.velocity
        for i, inbound in enumerate(transactions):
            if not inbound.is_credit or inbound.magnitude <= cfg.pass_through_min_amount:
                continue
            for outbound in transactions[i + 1 :]:
                hours = (outbound.timestamp - inbound.timestamp).total_seconds() / 3600
                if hours > cfg.pass_through_window_hours:
                    break
                if not outbound.is_debit:
                    continue
                ratio = outbound.magnitude / inbound.magnitude
                if cfg.pass_through_min_ratio <= ratio <= cfg.pass_through_max_ratio:
                    return [
                        self._alert(
                            cfg.pass_through_score,
                            f"{inbound.magnitude:,.0f} in, {outbound.magnitude:,.0f} out "
                            f"within {hours:.1f} hours",
                            [inbound, outbound],
                            {
                                "in_amount": inbound.magnitude,
                                "out_amount": outbound.magnitude,
                                "hours": hours,
                                "ratio": ratio,
                            },
                        )
                    ]
        return []
