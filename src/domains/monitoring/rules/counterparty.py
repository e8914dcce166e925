"""Counterparty risk rules."""

from collections import defaultdict

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule, keyword_pattern


class ShellCompanyRule(DetectionRule):
    """Generic corporate names domiciled in tax havens."""

    rule_id = "CTY-001"
    name = "Shell Company Indicators"
    category = RiskCategory.COUNTERPARTY
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.counterparty
        pattern = keyword_pattern(cfg.shell_name_keywords)
        hits = [
            t
            for t in transactions
            if t.counterparty_country in config.geographic.tax_havens
            and pattern.search(t.counterparty_name)
        ]
        if len(hits) < cfg.shell_min_count:
            return []

        names = list(dict.fromkeys(t.counterparty_name for t in hits))
        return [
            self._alert(
                cfg.shell_score,
                f"{len(names)} counterparty/ies in tax havens with generic names: "
                f"{', '.join(names[:3])}",
                hits,
                {"counterparties": names, "count": len(hits)},
            )
        ]


class ConcentrationRule(DetectionRule):
    rule_id = "CTY-002"
    name = "Concentration Risk - Single Counterparty"
    category = RiskCategory.COUNTERPARTY
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.counterparty
        volumes: dict[str, float] = defaultdict(float)
        for t in transactions:
            if t.counterparty_name:
                volumes[t.counterparty_name] += t.magnitude

        total = profile.total_volume or 1.0
        for counterparty, volume in volumes.items():
            ratio = volume / total
            if ratio > cfg.concentration_min_ratio and volume > cfg.concentration_min_volume:
                related = [t for t in transactions if t.counterparty_name == counterparty]
                return [
                    self._alert(
                        cfg.concentration_score,
                        f"{ratio:.0%} of volume ({volume:,.0f}) is with a single "
                        f"counterparty: {counterparty}",
                        related,
                        {"counterparty": counterparty, "volume": volume, "ratio": ratio},
                        limit=5,
                    )
                ]
        return []


class NewCounterpartyLargeAmountRule(DetectionRule):
    rule_id = "CTY-003"
    name = "New Counterparty with Large Transaction"
    category = RiskCategory.COUNTERPARTY
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.counterparty
        seen: set[str] = set()
        for t in transactions:
            if not t.counterparty_name:
                continue
            if t.counterparty_name not in seen and t.magnitude > cfg.new_counterparty_min_amount:
                return [
                    self._alert(
                        cfg.new_counterparty_score,
                        f'First transaction with "{t.counterparty_name}" is {t.magnitude:,.0f}',
                        [t],
                        {
                            "counterparty": t.counterparty_name,
                            "amount": t.magnitude,
                            "date": t.timestamp.isoformat(),
                        },
                    )
                ]
            seen.add(t.counterparty_name)
        return []


class CircularCounterpartyRule(DetectionRule):
    """Money sent to and received back from the same counterparty in similar totals."""

    rule_id = "CTY-004"
    name = "Circular Transaction Pattern"
    category = RiskCategory.COUNTERPARTY
    severity = Severity.CRITICAL

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.counterparty
        sent: dict[str, list[Transaction]] = defaultdict(list)
        received: dict[str, list[Transaction]] = defaultdict(list)
        for t in transactions:
            if not t.counterparty_name:
                continue
            (received if t.is_credit else sent)[t.counterparty_name].append(t)

        for counterparty in dict.fromkeys(t.counterparty_name for t in transactions):
            out, back = sent.get(counterparty, []), received.get(counterparty, [])
            if (
                len(out) < cfg.circular_min_each_direction
                or len(back) < cfg.circular_min_each_direction
            ):
                continue
            sent_total = sum(t.magnitude for t in out)
            received_total = sum(t.magnitude for t in back)
            if sent_total <= cfg.circular_min_sent:
                continue
            ratio = min(sent_total, received_total) / max(sent_total, received_total)
            if ratio > cfg.circular_min_ratio:
                return [
                    self._alert(
                        cfg.circular_score,
                        f'Circular flow with "{counterparty}": sent {sent_total:,.0f}, '
                        f"received {received_total:,.0f}",
                        out + back,
                        {
                            "counterparty": counterparty,
                            "sent_total": sent_total,
                            "received_total": received_total,
                            "ratio": ratio,
                        },
                    )
                ]
        return []
