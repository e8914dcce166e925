"""Occupational fraud rules."""

import math
from collections import defaultdict
from datetime import timedelta

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule, keyword_pattern, mentions


class DuplicatePaymentRule(DetectionRule):
    """Same amount paid to the same counterparty twice within a window."""

    rule_id = "FRD-001"
    name = "Invoice Fraud - Duplicate Payments"
    category = RiskCategory.FRAUD
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.fraud
        groups: dict[tuple[str, float], list[Transaction]] = defaultdict(list)
        for t in transactions:
            if t.is_debit and t.counterparty_name and t.magnitude > cfg.duplicate_min_amount:
                groups[(t.counterparty_name, round(t.magnitude, 2))].append(t)

        alerts = []
        for (counterparty, amount), group in groups.items():
            for previous, current in zip(group, group[1:]):
                gap_days = (current.timestamp - previous.timestamp).total_seconds() / 86400
                if 0 < gap_days <= cfg.duplicate_window_days:
                    alerts.append(
                        self._alert(
                            cfg.duplicate_score,
                            f'Duplicate payment to "{counterparty}" for {amount:,.2f} '
                            f"within {gap_days:.1f} days",
                            [previous, current],
                            {
                                "counterparty": counterparty,
                                "amount": amount,
                                "days_between": gap_days,
                            },
                        )
                    )
                    break
        return alerts


class PersonalAccountTransferRule(DetectionRule):
    rule_id = "FRD-004"
    name = "Asset Misappropriation - Unauthorized Transfers"
    category = RiskCategory.FRAUD
    severity = Severity.CRITICAL

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.fraud
        pattern = keyword_pattern(cfg.personal_keywords)
        hits = [
            t
            for t in transactions
            if t.is_debit and t.magnitude > cfg.personal_min_amount and mentions(t, pattern)
        ]
        if not hits:
            return []

        total = sum(t.magnitude for t in hits)
        return [
            self._alert(
                cfg.personal_score,
                f"{len(hits)} outbound transfer(s) to personal/family accounts "
                f"totaling {total:,.0f}",
                hits,
                {"count": len(hits), "total": total},
                limit=5,
            )
        ]


class GhostPayrollRule(DetectionRule):
    """Identical payroll amounts to many recipients, or payroll recipients also paid as vendors."""

    rule_id = "FRD-002"
    name = "Payroll Fraud - Ghost Employees"
    category = RiskCategory.FRAUD
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.fraud
        pattern = keyword_pattern(cfg.payroll_keywords)
        payroll = [t for t in transactions if t.is_debit and mentions(t, pattern)]
        if len(payroll) < cfg.payroll_min_count:
            return []

        alerts = []
        by_amount: dict[float, list[Transaction]] = defaultdict(list)
        for t in payroll:
            by_amount[round(t.magnitude, 2)].append(t)
        for amount, group in by_amount.items():
            recipients = {t.counterparty_name or t.id for t in group}
            if len(recipients) >= cfg.ghost_min_recipients and amount > cfg.ghost_min_amount:
                alerts.append(
                    self._alert(
                        cfg.ghost_score,
                        f"{len(recipients)} identical payroll payments of {amount:,.2f}",
                        group,
                        {"amount": amount, "recipient_count": len(recipients)},
                    )
                )
                break

        payroll_ids = {t.id for t in payroll}
        payees = {t.counterparty_name for t in payroll if t.counterparty_name}
        vendor = [
            t
            for t in transactions
            if t.is_debit and t.id not in payroll_ids and t.counterparty_name in payees
        ]
        if vendor:
            alerts.append(
                self._alert(
                    cfg.payroll_vendor_score,
                    f'Payroll recipient "{vendor[0].counterparty_name}" also receives vendor payments',
                    vendor,
                    {"counterparty": vendor[0].counterparty_name},
                    limit=5,
                )
            )
        return alerts


class KickbackRule(DetectionRule):
    """Payment out, then a fraction of it back from a different party."""

    rule_id = "FRD-003"
    name = "Procurement Fraud - Bid Rigging Indicators"
    category = RiskCategory.FRAUD
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.fraud
        for payment in transactions:
            if not payment.is_debit or payment.magnitude <= cfg.kickback_min_payment:
                continue
            for receipt in transactions:
                if not receipt.is_credit or receipt.timestamp <= payment.timestamp:
                    continue
                gap_days = (receipt.timestamp - payment.timestamp).total_seconds() / 86400
                ratio = receipt.magnitude / payment.magnitude
                if (
                    gap_days < cfg.kickback_window_days
                    and cfg.kickback_min_ratio <= ratio <= cfg.kickback_max_ratio
                    and receipt.counterparty_name
                    and receipt.counterparty_name != payment.counterparty_name
                ):
                    return [
                        self._alert(
                            cfg.kickback_score,
                            f'Payment of {payment.magnitude:,.0f} to "{payment.counterparty_name}" '
                            f"followed by {receipt.magnitude:,.0f} ({ratio:.0%}) from "
                            f'"{receipt.counterparty_name}"',
                            [payment, receipt],
                            {
                                "payment_amount": payment.magnitude,
                                "kickback_amount": receipt.magnitude,
                                "ratio": ratio,
                            },
                        )
                    ]
        return []


class ClaimsFrequencyRule(DetectionRule):
    rule_id = "FRD-005"
    name = "Insurance / Claims Fraud Pattern"
    category = RiskCategory.FRAUD
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.fraud
        pattern = keyword_pattern(cfg.insurance_keywords)
        hits = [t for t in transactions if mentions(t, pattern)]
        if len(hits) < cfg.insurance_min_count:
            return []

        claims = [t for t in hits if t.is_credit and t.magnitude > cfg.claim_min_amount]
        if len(claims) < cfg.claim_min_count:
            return []
        span_days = (claims[-1].timestamp - claims[0].timestamp).total_seconds() / 86400
        if span_days > cfg.claim_window_days:
            return []

        total = sum(t.magnitude for t in claims)
        return [
            self._alert(
                cfg.claim_score,
                f"{len(claims)} insurance claims totaling {total:,.0f} within "
                f"{math.ceil(span_days)} days",
                claims,
                {"claim_count": len(claims), "total": total, "days": math.ceil(span_days)},
                limit=len(claims),
            )
        ]


class PeriodEndRevenueRule(DetectionRule):
    """Large credits booked in the last days of a quarter, especially when reversed soon after."""

    rule_id = "FRD-006"
    name = "Financial Statement Fraud Indicators"
    category = RiskCategory.FRAUD
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.fraud
        period_end = [
            t
            for t in transactions
            if t.is_credit
            and t.magnitude > cfg.period_end_min_amount
            and t.timestamp.month in cfg.period_end_months
            and t.timestamp.day >= cfg.period_end_first_day
        ]
        if len(period_end) < cfg.period_end_min_count:
            return []

        reversal_window = timedelta(days=cfg.reversal_window_days)
        reversed_credits = [
            credit
            for credit in period_end
            if any(
                t.is_debit
                and cfg.reversal_min_ratio * credit.magnitude
                <= t.magnitude
                <= cfg.reversal_max_ratio * credit.magnitude
                and credit.timestamp < t.timestamp <= credit.timestamp + reversal_window
                for t in transactions
            )
        ]

        if reversed_credits:
            return [
                self._alert(
                    cfg.reversal_score,
                    f"{len(reversed_credits)} large period-end credits reversed within "
                    f"{cfg.reversal_window_days} days",
                    reversed_credits,
                    {
                        "reversed_count": len(reversed_credits),
                        "period_end_credit_count": len(period_end),
                    },
                    limit=len(reversed_credits),
                )
            ]
        return [
            self._alert(
                cfg.period_end_score,
                f"{len(period_end)} large credits concentrated at quarter-end",
                period_end,
                {"count": len(period_end)},
                limit=5,
            )
        ]
