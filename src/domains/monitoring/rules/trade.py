"""Trade-based money laundering rules.

Regulatory basis: FinCEN Advisory FIN-2010-A001.
"""

from collections import defaultdict

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule, keyword_pattern


class InvoiceVarianceRule(DetectionRule):
    """Trade invoices with one counterparty spread far apart in value."""

    rule_id = "TBML-001"
    name = "Over/Under Invoicing Indicators"
    category = RiskCategory.TBML
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.trade
        pattern = keyword_pattern(cfg.trade_keywords)
        trade = [t for t in transactions if pattern.search(t.description)]
        if len(trade) < 2:
            return []

        by_counterparty: dict[str, list[Transaction]] = defaultdict(list)
        for t in trade:
            if t.counterparty_name and t.magnitude > 0:
                by_counterparty[t.counterparty_name].append(t)

        for counterparty, group in by_counterparty.items():
            if len(group) < 2:
                continue
            low = min(t.magnitude for t in group)
            high = max(t.magnitude for t in group)
            ratio = high / low
            if ratio > cfg.invoice_max_ratio and high > cfg.invoice_min_amount:
                return [
                    self._alert(
                        cfg.invoice_score,
                        f'Trade invoices to "{counterparty}" vary {ratio:.1f}x '
                        f"({low:,.0f} to {high:,.0f})",
                        group,
                        {
                            "counterparty": counterparty,
                            "min_amount": low,
                            "max_amount": high,
                            "ratio": ratio,
                        },
                        limit=5,
                    )
                ]
        return []


class PhantomServicesRule(DetectionRule):
    """Large, vaguely described service payments into tax havens."""

    rule_id = "TBML-002"
    name = "Phantom Shipment / No-Goods Payment"
    category = RiskCategory.TBML
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.trade
        pattern = keyword_pattern(cfg.service_keywords)
        havens = config.geographic.tax_havens
        hits = [
            t
            for t in transactions
            if t.is_debit
            and t.magnitude > cfg.service_min_amount
            and t.counterparty_country in havens
            and pattern.search(t.description)
        ]
        if len(hits) < cfg.service_min_count:
            return []

        total = sum(t.magnitude for t in hits)
        return [
            self._alert(
                cfg.service_score,
                f'{len(hits)} vague "services/consulting" payments to tax havens '
                f"totaling {total:,.0f}",
                hits,
                {
                    "count": len(hits),
                    "total": total,
                    "countries": sorted({t.counterparty_country for t in hits}),
                },
                limit=5,
            )
        ]
