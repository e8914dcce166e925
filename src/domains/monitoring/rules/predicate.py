"""Predicate-offence indicators: trafficking proceeds and public-sector kickbacks."""

from datetime import timedelta

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule, keyword_pattern, mentions


class HumanTraffickingRule(DetectionRule):
    """Cash takings from high-risk service businesses, alone or alongside visa/document payments."""

    rule_id = "HT-001"
    name = "Human Trafficking / Exploitation Indicators"
    category = RiskCategory.HUMAN_TRAFFICKING
    severity = Severity.CRITICAL

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.predicate
        business = keyword_pattern(cfg.trafficking_keywords)
        hits = [t for t in transactions if mentions(t, business)]
        if len(hits) < cfg.trafficking_min_count:
            return []

        alerts = []
        cash_types = config.structuring.cash_types
        cash = [t for t in hits if t.is_credit and t.transaction_type in cash_types]
        if len(cash) >= cfg.trafficking_min_cash_deposits:
            total = sum(t.magnitude for t in cash)
            alerts.append(
                self._alert(
                    cfg.trafficking_cash_score,
                    f"{len(cash)} cash deposits from high-risk businesses totaling {total:,.0f}",
                    cash,
                    {
                        "businesses": list(dict.fromkeys(t.counterparty_name for t in hits)),
                        "cash_count": len(cash),
                        "total": total,
                    },
                )
            )

        by_name = keyword_pattern(cfg.document_counterparty_keywords)
        by_description = keyword_pattern(cfg.document_description_keywords)
        documents = [
            t
            for t in transactions
            if by_name.search(t.counterparty_name) or by_description.search(t.description)
        ]
        if len(documents) >= cfg.document_min_count:
            alerts.append(
                self._alert(
                    cfg.document_score,
                    "High-risk business activity combined with visa/document service payments",
                    [*hits, *documents],
                    {"business_count": len(hits), "document_service_count": len(documents)},
                )
            )
        return alerts


class PublicSectorKickbackRule(DetectionRule):
    """Government receipt followed shortly by consulting or fee payments out."""

    rule_id = "PEP-001"
    name = "Government / Public Sector Payment Pattern"
    category = RiskCategory.CORRUPTION
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.predicate
        government = keyword_pattern(cfg.government_keywords)
        fees = keyword_pattern(cfg.fee_keywords)
        window = timedelta(days=cfg.fee_window_days)

        for receipt in transactions:
            if not (
                receipt.is_credit
                and receipt.magnitude > cfg.government_min_amount
                and mentions(receipt, government)
            ):
                continue
            payouts = [
                t
                for t in transactions
                if t.is_debit
                and receipt.timestamp < t.timestamp < receipt.timestamp + window
                and fees.search(t.description)
                and t.magnitude > receipt.magnitude * cfg.fee_min_ratio
            ]
            if payouts:
                return [
                    self._alert(
                        cfg.kickback_score,
                        f"Government payment ({receipt.magnitude:,.0f}) followed by "
                        f"consulting/fee payments within {cfg.fee_window_days} days",
                        [receipt, *payouts],
                        {
                            "government_amount": receipt.magnitude,
                            "fee_payments": [
                                {"amount": t.magnitude, "counterparty": t.counterparty_name}
                                for t in payouts
                            ],
                        },
                    )
                ]
        return []
