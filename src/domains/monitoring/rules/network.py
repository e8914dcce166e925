"""Network and flow-topology rules."""

from collections import defaultdict
from dataclasses import dataclass

from src.domains.scoring.models import Alert, RiskCategory, Severity

from ..config import MonitoringConfig
from ..models import EntityProfile, Transaction
from .base import DetectionRule, keyword_pattern


@dataclass(frozen=True)
class _Flow:
    source: str
    target: str
    inbound: Transaction
    outbound: Transaction


class HighRiskNetworkRule(DetectionRule):
    """Several counterparties that each carry two or more independent risk flags."""

    rule_id = "NET-001"
    name = "High-Risk Network Connections"
    category = RiskCategory.NETWORK
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.network
        geo = config.geographic
        shell = keyword_pattern(config.counterparty.shell_name_keywords)

        flags: dict[str, set[str]] = defaultdict(set)
        volume: dict[str, float] = defaultdict(float)
        for t in transactions:
            name = t.counterparty_name
            if not name:
                continue
            volume[name] += t.magnitude
            node_flags = flags[name]
            if t.counterparty_country in geo.high_risk_countries:
                node_flags.add("HIGH_RISK_COUNTRY")
            if t.counterparty_country in geo.tax_havens:
                node_flags.add("TAX_HAVEN")
            if shell.search(name):
                node_flags.add("SHELL_INDICATOR")

        risky = [name for name, f in flags.items() if len(f) >= cfg.high_risk_min_flags]
        if len(risky) < cfg.high_risk_min_counterparties:
            return []

        risky_names = set(risky)
        related = [t for t in transactions if t.counterparty_name in risky_names]
        return [
            self._alert(
                cfg.high_risk_score,
                f"{len(risky)} counterparties with multiple risk flags",
                related,
                {
                    "counterparties": [
                        {"name": name, "flags": sorted(flags[name]), "volume": volume[name]}
                        for name in risky
                    ]
                },
            )
        ]


class FlowCycleRule(DetectionRule):
    """Funds received from one party and forwarded to another, closing a loop."""

    rule_id = "NET-002"
    name = "Circular Transaction Cycle Detection"
    category = RiskCategory.NETWORK
    severity = Severity.CRITICAL

    def _flows(self, transactions: list[Transaction], config: MonitoringConfig) -> list[_Flow]:
        cfg = config.network
        inbound = [t for t in transactions if t.is_credit and t.counterparty_name]
        outbound = [t for t in transactions if t.is_debit and t.counterparty_name]
        flows = []
        for inb in inbound:
            for out in outbound:
                hours = (out.timestamp - inb.timestamp).total_seconds() / 3600
                if not 0 < hours <= cfg.cycle_window_hours:
                    continue
                if (
                    inb.magnitude * cfg.cycle_min_ratio
                    <= out.magnitude
                    <= inb.magnitude * cfg.cycle_max_ratio
                ):
                    flows.append(_Flow(inb.counterparty_name, out.counterparty_name, inb, out))
                    break
        return flows

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.network
        flows = self._flows(transactions, config)
        alerts = []

        seen: set[frozenset[str]] = set()
        for f1 in flows:
            if f1.source == f1.target:
                continue
            for f2 in flows:
                if f2.source == f1.target and f2.target == f1.source:
                    pair = frozenset((f1.source, f1.target))
                    if pair in seen:
                        continue
                    seen.add(pair)
                    alerts.append(
                        self._alert(
                            cfg.direct_cycle_score,
                            f"Circular fund flow: {f1.source} <-> {f1.target}",
                            [f1.inbound, f1.outbound, f2.inbound, f2.outbound],
                            {"node1": f1.source, "node2": f1.target},
                        )
                    )
        if alerts or len(flows) < 3:
            return alerts

        adjacency: dict[str, list[_Flow]] = defaultdict(list)
        for f in flows:
            adjacency[f.source].append(f)

        for a, first_hops in list(adjacency.items()):
            for f1 in first_hops:
                for f2 in adjacency.get(f1.target, []):
                    if f2.target in (a, f1.target):
                        continue
                    for f3 in adjacency.get(f2.target, []):
                        if f3.target == a:
                            cycle = [a, f1.target, f2.target, a]
                            return [
                                self._alert(
                                    cfg.three_node_cycle_score,
                                    f"3-node circular flow: {' -> '.join(cycle)}",
                                    [
                                        f1.inbound, f1.outbound,
                                        f2.inbound, f2.outbound,
                                        f3.inbound, f3.outbound,
                                    ],
                                    {"cycle": cycle},
                                )
                            ]
        return []


class FunnelAccountRule(DetectionRule):
    """Funnel (many senders, few receivers) and its mirror, distribution."""

    rule_id = "NET-003"
    name = "Funnel Account Detection"
    category = RiskCategory.NETWORK
    severity = Severity.HIGH

    def detect(
        self,
        transactions: list[Transaction],
        profile: EntityProfile,
        config: MonitoringConfig,
    ) -> list[Alert]:
        cfg = config.network
        credits = [t for t in transactions if t.is_credit]
        debits = [t for t in transactions if t.is_debit]
        senders = {t.counterparty_name for t in credits if t.counterparty_name}
        receivers = {t.counterparty_name for t in debits if t.counterparty_name}
        alerts = []

        credit_total = sum(t.magnitude for t in credits)
        if (
            len(senders) >= cfg.funnel_min_senders
            and len(receivers) <= cfg.funnel_max_receivers
            and credit_total > cfg.funnel_min_volume
        ):
            alerts.append(
                self._alert(
                    cfg.funnel_score,
                    f"Funnel pattern: {len(senders)} inbound sources consolidated to "
                    f"{len(receivers)} outbound destination(s), {credit_total:,.0f} total",
                    credits,
                    {
                        "sender_count": len(senders),
                        "receiver_count": len(receivers),
                        "total_volume": credit_total,
                    },
                )
            )

        debit_total = sum(t.magnitude for t in debits)
        if (
            len(receivers) >= cfg.funnel_min_senders
            and len(senders) <= cfg.funnel_max_receivers
            and debit_total > cfg.funnel_min_volume
        ):
            alerts.append(
                self._alert(
                    cfg.distribution_score,
                    f"Distribution pattern: {len(senders)} source(s) disbursed to "
                    f"{len(receivers)} recipients, {debit_total:,.0f} total",
                    debits,
                    {
                        "sender_count": len(senders),
                        "receiver_count": len(receivers),
                        "total_volume": debit_total,
                    },
                )
            )
        return alerts
