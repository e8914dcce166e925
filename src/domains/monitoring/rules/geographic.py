"""Geographic risk and sanctions-evasion rules (FATF Recommendation 19)."""

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule


def _countries(transactions: list[Transaction]) -> list[str]:
    return list(dict.fromkeys(t.counterparty_country for t in transactions))


class HighRiskJurisdictionRule(DetectionRule):
    rule_id = "GEO-001"
    name = "High-Risk Jurisdiction Transactions"
    category = RiskCategory.GEOGRAPHIC
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.geographic
        hits = [t for t in transactions if t.counterparty_country in cfg.high_risk_countries]
        if not hits:
            return []

        countries = _countries(hits)
        return [
            self._alert(
                cfg.high_risk_score,
                f"{len(hits)} transaction(s) involving high-risk jurisdictions: "
                f"{', '.join(countries)}",
                hits,
                {
                    "countries": countries,
                    "count": len(hits),
                    "total_amount": sum(t.magnitude for t in hits),
                },
            )
        ]


class TaxHavenRule(DetectionRule):
    rule_id = "GEO-002"
    name = "Tax Haven Transactions"
    category = RiskCategory.GEOGRAPHIC
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.geographic
        hits = [t for t in transactions if t.counterparty_country in cfg.tax_havens]
        if len(hits) < cfg.tax_haven_min_count:
            return []

        countries = _countries(hits)
        return [
            self._alert(
                cfg.tax_haven_score,
                f"{len(hits)} transaction(s) to/from tax havens: {', '.join(countries)}",
                hits,
                {
                    "countries": countries,
                    "count": len(hits),
                    "total_amount": sum(t.magnitude for t in hits),
                },
            )
        ]


class GeographicSpreadRule(DetectionRule):
    rule_id = "GEO-003"
    name = "Unusual Geographic Spread"
    category = RiskCategory.GEOGRAPHIC
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.geographic
        countries = sorted({t.counterparty_country for t in transactions if t.counterparty_country})
        if (
            len(countries) < cfg.spread_min_countries
            or len(transactions) >= cfg.spread_max_transactions
        ):
            return []

        return [
            self._alert(
                cfg.spread_score,
                f"Transactions span {len(countries)} countries across only "
                f"{len(transactions)} transactions",
                details={
                    "country_count": len(countries),
                    "transaction_count": len(transactions),
                    "countries": countries,
                },
            )
        ]


class IntermediaryCountryEvasionRule(DetectionRule):
    """Sanctioned jurisdictions alongside known transshipment hubs."""

    rule_id = "SAN-001"
    name = "Sanctions Evasion - Intermediary Country Pattern"
    category = RiskCategory.SANCTIONS_EVASION
    severity = Severity.CRITICAL

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.geographic
        intermediary = [
            t for t in transactions if t.counterparty_country in cfg.intermediary_countries
        ]
        sanctioned = [t for t in transactions if t.counterparty_country in cfg.sanctioned_countries]
        alerts = []

        if intermediary and sanctioned:
            sanctioned_countries = _countries(sanctioned)
            intermediary_countries = _countries(intermediary)
            alerts.append(
                self._alert(
                    cfg.evasion_score,
                    f"Transactions with sanctioned jurisdictions "
                    f"({', '.join(sanctioned_countries)}) and intermediary countries "
                    f"({', '.join(intermediary_countries)})",
                    sanctioned + intermediary,
                    {
                        "sanctioned_countries": sanctioned_countries,
                        "intermediaries": intermediary_countries,
                    },
                )
            )

        volume = sum(t.magnitude for t in intermediary)
        if len(intermediary) >= cfg.corridor_min_count and volume > cfg.corridor_min_volume:
            countries = _countries(intermediary)
            if any(c in cfg.evasion_corridor_countries for c in countries):
                alerts.append(
                    self._alert(
                        cfg.corridor_score,
                        f"High-volume transactions with evasion corridor countries: "
                        f"{', '.join(countries)}",
                        intermediary,
                        {"countries": countries, "total": volume},
                        limit=5,
                    )
                )
        return alerts
