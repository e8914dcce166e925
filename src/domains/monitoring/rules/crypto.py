"""Virtual asset rules."""

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule, keyword_pattern, mentions


class ExchangeRampRule(DetectionRule):
    rule_id = "CRY-001"
    name = "Crypto Exchange Fiat On/Off Ramp"
    category = RiskCategory.CRYPTO
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.crypto
        pattern = keyword_pattern(cfg.exchange_keywords)
        hits = [t for t in transactions if mentions(t, pattern)]
        if len(hits) < cfg.exchange_min_count:
            return []

        total = sum(t.magnitude for t in hits)
        return [
            self._alert(
                cfg.exchange_score,
                f"{len(hits)} transactions with crypto exchanges totaling {total:,.0f}",
                hits,
                {
                    "exchanges": list(dict.fromkeys(t.counterparty_name for t in hits)),
                    "count": len(hits),
                    "total": total,
                },
                limit=5,
            )
        ]


class MixerP2PRule(DetectionRule):
    """Mixing services (any contact) and peer-to-peer platforms (repeated contact)."""

    rule_id = "CRY-003"
    name = "Peer-to-Peer / Mixer Indicators"
    category = RiskCategory.CRYPTO
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.crypto
        mixer = keyword_pattern(cfg.mixer_keywords)
        p2p = keyword_pattern(cfg.p2p_keywords)
        mixer_hits = [t for t in transactions if mentions(t, mixer)]
        p2p_hits = [t for t in transactions if mentions(t, p2p)]
        alerts = []

        if mixer_hits:
            alerts.append(
                self._alert(
                    cfg.mixer_score,
                    f"{len(mixer_hits)} transaction(s) linked to mixing/tumbling services",
                    mixer_hits,
                    {"services": list(dict.fromkeys(t.counterparty_name for t in mixer_hits))},
                    limit=len(mixer_hits),
                )
            )
        if len(p2p_hits) >= cfg.p2p_min_count:
            alerts.append(
                self._alert(
                    cfg.p2p_score,
                    f"{len(p2p_hits)} transaction(s) with P2P crypto platforms",
                    p2p_hits,
                    {"platforms": list(dict.fromkeys(t.counterparty_name for t in p2p_hits))},
                    limit=5,
                )
            )
        return alerts


class PrivacyCoinRule(DetectionRule):
    rule_id = "CRY-004"
    name = "Privacy Coin Conversion"
    category = RiskCategory.CRYPTO
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.crypto
        pattern = keyword_pattern(cfg.privacy_coin_keywords)
        hits = [t for t in transactions if mentions(t, pattern)]
        if not hits:
            return []

        coins = []
        for t in hits:
            match = pattern.search(t.description) or pattern.search(t.counterparty_name)
            coins.append(match.group(0).lower())

        return [
            self._alert(
                cfg.privacy_coin_score,
                f"{len(hits)} transaction(s) involving privacy coins",
                hits,
                {"coins": list(dict.fromkeys(coins))},
                limit=len(hits),
            )
        ]


class PeelChainRule(DetectionRule):
    """Outbound transfers to mostly fresh addresses with steadily shrinking amounts."""

    rule_id = "CRY-005"
    name = "Peel Chain Pattern"
    category = RiskCategory.CRYPTO
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.crypto
        outbound = [t for t in transactions if t.is_debit and t.chain_address]
        if len(outbound) < max(2, cfg.peel_min_outbound):
            return []

        addresses = {t.chain_address for t in outbound}
        if len(addresses) < len(outbound) * cfg.peel_unique_address_ratio:
            return []

        decreasing = sum(1 for a, b in zip(outbound, outbound[1:]) if b.magnitude < a.magnitude)
        ratio = decreasing / (len(outbound) - 1)
        if ratio <= cfg.peel_decreasing_ratio:
            return []

        return [
            self._alert(
                cfg.peel_score,
                f"Peel chain: {len(outbound)} outbound transfers to {len(addresses)} "
                f"unique addresses with decreasing amounts",
                outbound,
                {
                    "transaction_count": len(outbound),
                    "unique_addresses": len(addresses),
                    "decreasing_ratio": ratio,
                },
            )
        ]


class RapidConversionRule(DetectionRule):
    """Exchange credit cashed straight back out by the next exchange debit."""

    rule_id = "CRY-002"
    name = "Rapid Crypto-Fiat Conversion"
    category = RiskCategory.CRYPTO
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.crypto
        pattern = keyword_pattern(cfg.exchange_keywords)
        hits = [t for t in transactions if mentions(t, pattern)]

        for inbound, outbound in zip(hits, hits[1:]):
            if not (inbound.is_credit and outbound.is_debit):
                continue
            gap_hours = (outbound.timestamp - inbound.timestamp).total_seconds() / 3600
            if gap_hours <= cfg.rapid_conversion_window_hours and (
                inbound.magnitude > cfg.rapid_conversion_min_amount
            ):
                return [
                    self._alert(
                        cfg.rapid_conversion_score,
                        f"Rapid crypto-fiat conversion: {inbound.magnitude:,.0f} in, "
                        f"{outbound.magnitude:,.0f} out within {gap_hours:.1f} hours",
                        [inbound, outbound],
                        {
                            "in_amount": inbound.magnitude,
                            "out_amount": outbound.magnitude,
                            "hours": gap_hours,
                        },
                    )
                ]
        return []


class DefiActivityRule(DetectionRule):
    """Flash-loan shaped in/out pairs, otherwise heavy DeFi/NFT volume."""

    rule_id = "CRY-006"
    name = "DeFi / NFT Suspicious Activity"
    category = RiskCategory.CRYPTO
    severity = Severity.MEDIUM

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.crypto
        pattern = keyword_pattern(cfg.defi_keywords)
        hits = [t for t in transactions if mentions(t, pattern)]
        if len(hits) < cfg.defi_min_count:
            return []

        for first, second in zip(hits, hits[1:]):
            gap_minutes = (second.timestamp - first.timestamp).total_seconds() / 60
            if (
                gap_minutes < cfg.flash_loan_window_minutes
                and first.direction != second.direction
                and first.magnitude > cfg.flash_loan_min_amount
            ):
                return [
                    self._alert(
                        cfg.flash_loan_score,
                        f"Possible flash loan or DeFi manipulation: {first.magnitude:,.0f} "
                        f"in/out within {gap_minutes:.0f} minutes",
                        [first, second],
                        {"amount": first.magnitude, "gap_minutes": gap_minutes},
                    )
                ]

        total = sum(t.magnitude for t in hits)
        if total <= cfg.defi_min_volume:
            return []
        return [
            self._alert(
                cfg.defi_volume_score,
                f"{len(hits)} DeFi/NFT transactions totaling {total:,.0f}",
                hits,
                {"count": len(hits), "total": total},
                limit=5,
            )
        ]
