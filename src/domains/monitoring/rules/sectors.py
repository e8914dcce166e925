"""Sector typologies: real estate, gambling, loan-back, MSB, securities, cash business."""

import statistics
from collections import defaultdict
from datetime import timedelta

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule, keyword_pattern, mentions


class RealEstatePurchaseRule(DetectionRule):
    """Property payments funded by prior small cash deposits, or routed through legal entities."""

    rule_id = "RE-001"
    name = "Real Estate / High-Value Purchase Pattern"
    category = RiskCategory.REAL_ESTATE
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.sector
        structuring = config.structuring
        pattern = keyword_pattern(cfg.real_estate_keywords)
        purchases = [
            t for t in transactions if t.magnitude > cfg.real_estate_min_amount and mentions(t, pattern)
        ]
        if not purchases:
            return []

        window = timedelta(days=cfg.cash_funding_window_days)
        cash_funded = []
        for purchase in purchases:
            prior_cash = [
                t
                for t in transactions
                if t.is_credit
                and t.transaction_type in structuring.cash_types
                and t.magnitude < structuring.reporting_threshold
                and purchase.timestamp - window <= t.timestamp < purchase.timestamp
            ]
            if len(prior_cash) >= cfg.cash_funding_min_deposits:
                cash_funded.append(purchase)

        alerts = []
        if cash_funded:
            alerts.append(
                self._alert(
                    cfg.cash_funded_score,
                    "Real estate payment(s) preceded by structured cash deposits",
                    cash_funded,
                    {"count": len(cash_funded)},
                    limit=len(cash_funded),
                )
            )

        entity = keyword_pattern(cfg.legal_entity_keywords)
        via_entities = [t for t in purchases if entity.search(t.counterparty_name)]
        if any(t.magnitude > cfg.legal_entity_min_amount for t in via_entities):
            alerts.append(
                self._alert(
                    cfg.legal_entity_score,
                    "High-value real estate transaction(s) involving LLC/trust entities",
                    via_entities,
                    {"entities": list(dict.fromkeys(t.counterparty_name for t in via_entities))},
                    limit=5,
                )
            )
        return alerts


class GamblingRule(DetectionRule):
    """Casino buy-in/cash-out with little loss, otherwise heavy gambling volume."""

    rule_id = "GAM-001"
    name = "Casino / Gambling Activity"
    category = RiskCategory.GAMBLING
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.sector
        pattern = keyword_pattern(cfg.gambling_keywords)
        hits = [
            t
            for t in transactions
            if mentions(t, pattern) or t.merchant_category_code == cfg.gambling_mcc
        ]
        if len(hits) < cfg.gambling_min_count:
            return []

        total = sum(t.magnitude for t in hits)
        paid_in = sum(t.magnitude for t in hits if t.is_debit)
        paid_out = sum(t.magnitude for t in hits if t.is_credit)

        if paid_in and paid_out:
            ratio = paid_out / paid_in
            if ratio > cfg.cash_out_min_ratio and total > cfg.cash_out_min_volume:
                return [
                    self._alert(
                        cfg.cash_out_score,
                        f"Casino buy-in/cash-out: {paid_in:,.0f} in, {paid_out:,.0f} out "
                        f"with minimal gambling loss",
                        hits,
                        {"debit_total": paid_in, "credit_total": paid_out, "ratio": ratio},
                    )
                ]

        if total <= cfg.gambling_min_volume:
            return []
        return [
            self._alert(
                cfg.gambling_score,
                f"{len(hits)} gambling transactions totaling {total:,.0f}",
                hits,
                {"count": len(hits), "total": total},
                limit=5,
            )
        ]


class LoanBackRule(DetectionRule):
    """Large deposit followed by a loan disbursement secured against it."""

    rule_id = "INT-001"
    name = "Loan-Back / Deposit-as-Collateral"
    category = RiskCategory.INTEGRATION
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.sector
        pattern = keyword_pattern(cfg.loan_keywords)
        loans = [t for t in transactions if pattern.search(t.description)]
        if len(loans) < cfg.loan_min_count:
            return []

        window = timedelta(days=cfg.loan_back_window_days)
        for deposit in transactions:
            if not deposit.is_credit or deposit.magnitude < cfg.loan_back_min_deposit:
                continue
            following = [
                t
                for t in loans
                if t.is_credit and deposit.timestamp < t.timestamp < deposit.timestamp + window
            ]
            if following:
                return [
                    self._alert(
                        cfg.loan_back_score,
                        f"Large deposit ({deposit.magnitude:,.0f}) followed by loan "
                        f"disbursement within {cfg.loan_back_window_days} days",
                        [deposit, *following],
                        {
                            "deposit_amount": deposit.magnitude,
                            "loan_amounts": [t.magnitude for t in following],
                        },
                    )
                ]
        return []


class InformalValueTransferRule(DetectionRule):
    """Remittance activity, escalated when it flows through high-risk corridors."""

    rule_id = "MSB-001"
    name = "Informal Value Transfer / Hawala Indicators"
    category = RiskCategory.MSB_HAWALA
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.sector
        pattern = keyword_pattern(cfg.msb_keywords)
        hits = [
            t
            for t in transactions
            if mentions(t, pattern) or t.merchant_category_code in cfg.msb_mccs
        ]
        if len(hits) < cfg.msb_min_count:
            return []

        corridor = [t for t in hits if t.counterparty_country in cfg.msb_corridor_countries]
        if len(corridor) >= cfg.msb_corridor_min_count:
            corridor_total = sum(t.magnitude for t in corridor)
            return [
                self._alert(
                    cfg.msb_corridor_score,
                    f"{len(corridor)} remittances to high-risk corridors totaling "
                    f"{corridor_total:,.0f}",
                    corridor,
                    {
                        "countries": list(dict.fromkeys(t.counterparty_country for t in corridor)),
                        "count": len(corridor),
                    },
                    limit=5,
                )
            ]

        total = sum(t.magnitude for t in hits)
        if total <= cfg.msb_min_volume:
            return []
        return [
            self._alert(
                cfg.msb_volume_score,
                f"{len(hits)} MSB/remittance transactions totaling {total:,.0f}",
                hits,
                {"count": len(hits), "total": total},
                limit=5,
            )
        ]


class SecuritiesPassThroughRule(DetectionRule):
    """Brokerage deposit withdrawn almost in full within days."""

    rule_id = "SEC-001"
    name = "Securities / Investment Abuse Pattern"
    category = RiskCategory.SECURITIES
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.sector
        pattern = keyword_pattern(cfg.securities_keywords)
        hits = [
            t
            for t in transactions
            if mentions(t, pattern) or t.merchant_category_code == cfg.securities_mcc
        ]
        if len(hits) < cfg.securities_min_count:
            return []

        window = timedelta(days=cfg.securities_window_days)
        withdrawals = [t for t in hits if t.is_debit]
        for deposit in hits:
            if not deposit.is_credit or deposit.magnitude <= cfg.securities_min_deposit:
                continue
            match = next(
                (
                    w
                    for w in withdrawals
                    if deposit.timestamp < w.timestamp < deposit.timestamp + window
                    and w.magnitude / deposit.magnitude >= cfg.securities_min_ratio
                ),
                None,
            )
            if match is not None:
                return [
                    self._alert(
                        cfg.securities_score,
                        f"Brokerage deposit {deposit.magnitude:,.0f} followed by "
                        f"{match.magnitude:,.0f} withdrawal within {cfg.securities_window_days} days",
                        [deposit, match],
                        {
                            "deposit_amount": deposit.magnitude,
                            "withdrawal_amount": match.magnitude,
                        },
                    )
                ]
        return []


class CashIntensiveBusinessRule(DetectionRule):
    """Cash out of proportion to card revenue, or daily cash takings too uniform to be real."""

    rule_id = "CIB-001"
    name = "Cash-Intensive Business Anomaly"
    category = RiskCategory.CASH_BUSINESS
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.sector
        cash_types = config.structuring.cash_types
        cash = [t for t in transactions if t.is_credit and t.transaction_type in cash_types]
        if len(cash) < cfg.cash_business_min_deposits:
            return []

        alerts = []
        cash_total = sum(t.magnitude for t in cash)
        card_total = sum(
            t.magnitude for t in transactions if t.is_credit and t.transaction_type in cfg.card_types
        )
        if card_total > 0 and cash_total / card_total > cfg.cash_to_card_max_ratio:
            ratio = cash_total / card_total
            alerts.append(
                self._alert(
                    cfg.cash_to_card_score,
                    f"Cash deposits ({cash_total:,.0f}) are {ratio:.1f}x card revenue "
                    f"({card_total:,.0f})",
                    cash,
                    {"cash_total": cash_total, "card_total": card_total, "ratio": ratio},
                    limit=5,
                )
            )

        daily: dict[str, float] = defaultdict(float)
        for t in cash:
            daily[t.day_key] += t.magnitude
        mean = statistics.fmean(daily.values())
        if len(daily) >= cfg.uniform_min_days and mean > cfg.uniform_min_daily:
            cv = statistics.pstdev(daily.values()) / mean
            if cv < cfg.uniform_max_cv:
                alerts.append(
                    self._alert(
                        cfg.uniform_score,
                        f"Suspiciously consistent daily cash deposits (avg {mean:,.0f}, "
                        f"CV={cv:.3f})",
                        cash,
                        {"avg_daily": mean, "coefficient_of_variation": cv, "days": len(daily)},
                        limit=5,
                    )
                )
        return alerts
