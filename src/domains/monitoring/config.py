"""Transaction monitoring configuration.

Every threshold, window, risk set and per-alert score used by the detector
rules lives here. Rules never carry their own constants: the engine hands
its config to each rule on every call.

References:
- 31 CFR § 1010.311: Currency transaction reports ($10,000 threshold)
- 31 USC § 5324: Structuring transactions to evade reporting requirements
- FATF Recommendation 19: Higher-risk countries
- FinCEN Advisory FIN-2014-A007: Unusual volume and pass-through activity
- FinCEN Advisory FIN-2010-A001: Trade-based money laundering
"""

import os
from dataclasses import dataclass, field


@dataclass
class StructuringRuleConfig:
    """STR rules. Regulatory basis: 31 USC § 5324."""

    reporting_threshold: float = 10_000.0

    # STR-001: k transactions at 80-100% of the threshold inside a rolling window
    near_threshold_pct: float = 0.80
    near_threshold_min_count: int = 3
    near_threshold_window_days: int = 30
    near_threshold_score: float = 35.0

    # STR-002: share of round thousands
    round_amount_unit: float = 1_000.0
    round_min_count: int = 5
    round_min_ratio: float = 0.40
    round_score: float = 20.0

    # STR-003: same-day deposits, each under the threshold, summing over it
    split_min_deposits: int = 3
    split_excluded_types: tuple[str, ...] = ("TRANSFER",)
    split_score: float = 40.0

    # STR-004: steadily stepping cash amounts
    incremental_window: int = 4
    incremental_max_step: float = 500.0
    cash_types: tuple[str, ...] = ("CASH", "DEPOSIT")
    incremental_score: float = 25.0


@dataclass
class VelocityRuleConfig:
    """VEL rules. Regulatory basis: FinCEN Advisory FIN-2014-A007."""

    # VEL-001: bucket volume against the mean of the other buckets
    bucket_days: int = 7
    spike_min_buckets: int = 3
    spike_multiplier: float = 3.0
    spike_min_volume: float = 50_000.0
    spike_score: float = 30.0

    # VEL-002
    rapid_fire_count: int = 5
    rapid_fire_window_hours: float = 1.0
    rapid_fire_score: float = 30.0

    # VEL-003
    daily_count_max: int = 15
    daily_count_score: float = 20.0

    # VEL-004: credit followed by a near-equal debit
    pass_through_window_hours: float = 48.0
    pass_through_min_ratio: float = 0.90
    pass_through_max_ratio: float = 1.0
    pass_through_min_amount: float = 5_000.0
    pass_through_score: float = 45.0


@dataclass
class GeographicRuleConfig:
    """GEO and SAN rules. Regulatory basis: FATF Recommendation 19."""

    high_risk_countries: frozenset[str] = field(
        default_factory=lambda: frozenset({
            "AF", "BY", "MM", "CF", "CD", "CU", "GQ", "ER", "IR", "IQ", "LB", "LY",
            "ML", "NI", "KP", "SO", "SS", "SD", "SY", "VE", "YE", "ZW", "RU",
        })
    )
    tax_havens: frozenset[str] = field(
        default_factory=lambda: frozenset({
            "VG", "KY", "BM", "PA", "SC", "BS", "JE", "GG", "IM", "LI", "MC", "GI",
            "AI", "TC", "WS", "VU", "MH", "BZ", "AG", "DM", "KN", "LC", "VC", "CK",
            "NR", "NU", "SM",
        })
    )
    high_risk_score: float = 35.0

    tax_haven_min_count: int = 3
    tax_haven_score: float = 25.0

    spread_min_countries: int = 10
    spread_max_transactions: int = 100
    spread_score: float = 20.0

    # SAN-001: sanctioned jurisdictions seen alongside transshipment hubs
    sanctioned_countries: frozenset[str] = field(
        default_factory=lambda: frozenset({"RU", "IR", "KP", "SY", "CU", "BY", "VE"})
    )
    intermediary_countries: frozenset[str] = field(
        default_factory=lambda: frozenset({
            "AE", "TR", "GE", "AM", "KZ", "KG", "UZ", "TJ", "CN", "HK", "SG", "MY",
        })
    )
    evasion_corridor_countries: frozenset[str] = field(
        default_factory=lambda: frozenset({"AE", "TR", "GE", "AM"})
    )
    evasion_score: float = 50.0
    corridor_min_count: int = 3
    corridor_min_volume: float = 100_000.0
    corridor_score: float = 35.0


@dataclass
class CounterpartyRuleConfig:
    shell_name_keywords: tuple[str, ...] = (
        "holdings", "trading", "consulting", "services", "international",
        "global", "ventures", "capital", "group", "investment",
    )
    shell_min_count: int = 2
    shell_score: float = 30.0

    concentration_min_ratio: float = 0.60
    concentration_min_volume: float = 50_000.0
    concentration_score: float = 20.0

    new_counterparty_min_amount: float = 25_000.0
    new_counterparty_score: float = 20.0

    circular_min_each_direction: int = 2
    circular_min_ratio: float = 0.70
    circular_min_sent: float = 10_000.0
    circular_score: float = 45.0


@dataclass
class BehavioralRuleConfig:
    dormancy_days: int = 90
    dormancy_min_amount: float = 10_000.0
    dormancy_score: float = 30.0

    # Off-hours window in UTC: [start, 24) and [0, end)
    off_hours_start: int = 23
    off_hours_end: int = 5
    off_hours_min_count: int = 5
    off_hours_min_ratio: float = 0.30
    off_hours_score: float = 10.0

    channel_switch_min_ratio: float = 0.60
    channel_switch_min_transactions: int = 6
    channel_switch_score: float = 15.0

    outlier_min_transactions: int = 5
    outlier_iqr_multiplier: float = 3.0
    outlier_min_amount: float = 10_000.0
    outlier_score: float = 25.0

    high_risk_mccs: frozenset[str] = field(
        default_factory=lambda: frozenset({
            "6051", "6211", "6012", "7995", "5933", "5944", "5094", "7273", "4829",
            "6050", "6010", "6540", "7801", "7802", "7800",
        })
    )
    high_risk_mcc_min_count: int = 3
    high_risk_mcc_score: float = 20.0


@dataclass
class CryptoRuleConfig:
    exchange_keywords: tuple[str, ...] = (
        "coinbase", "binance", "kraken", "bitfinex", "bitstamp", "gemini", "ftx",
        "huobi", "okex", "kucoin", "bybit", "gate.io", "crypto.com", "bittrex",
        "poloniex",
    )
    exchange_min_count: int = 3
    exchange_score: float = 20.0

    mixer_keywords: tuple[str, ...] = (
        "tornado", "mixer", "tumbler", "wasabi", "samourai", "chipmixer",
        "blender", "helix", "bestmixer", "coinjoin",
    )
    mixer_score: float = 50.0
    p2p_keywords: tuple[str, ...] = (
        "localbitcoins", "paxful", "bisq", "hodlhodl", "peach", "robosats",
    )
    p2p_min_count: int = 3
    p2p_score: float = 20.0

    privacy_coin_keywords: tuple[str, ...] = (
        "monero", "xmr", "zcash", "zec", "dash", "grin", "beam", "pirate chain",
        "haven", "dero", "firo",
    )
    privacy_coin_score: float = 35.0

    peel_min_outbound: int = 4
    peel_unique_address_ratio: float = 0.80
    peel_decreasing_ratio: float = 0.70
    peel_score: float = 35.0

    # CRY-002: exchange credit cashed out by the next exchange debit
    rapid_conversion_window_hours: float = 24.0
    rapid_conversion_min_amount: float = 5_000.0
    rapid_conversion_score: float = 30.0

    # CRY-006
    defi_keywords: tuple[str, ...] = (
        "uniswap", "sushiswap", "pancakeswap", "aave", "compound", "curve",
        "balancer", "1inch", "dex", "swap", "bridge", "opensea", "rarible",
        "blur", "nft", "mint",
    )
    defi_min_count: int = 3
    flash_loan_window_minutes: float = 5.0
    flash_loan_min_amount: float = 50_000.0
    flash_loan_score: float = 30.0
    defi_min_volume: float = 50_000.0
    defi_volume_score: float = 20.0


@dataclass
class NetworkRuleConfig:
    high_risk_min_flags: int = 2
    high_risk_min_counterparties: int = 3
    high_risk_score: float = 35.0

    # NET-002: an inbound forwarded as an outbound within the window
    cycle_window_hours: float = 72.0
    cycle_min_ratio: float = 0.80
    cycle_max_ratio: float = 1.05
    direct_cycle_score: float = 45.0
    three_node_cycle_score: float = 50.0

    # NET-003
    funnel_min_senders: int = 5
    funnel_max_receivers: int = 2
    funnel_min_volume: float = 50_000.0
    funnel_score: float = 35.0
    distribution_score: float = 30.0


@dataclass
class FraudRuleConfig:
    duplicate_min_amount: float = 1_000.0
    duplicate_window_days: int = 30
    duplicate_score: float = 30.0

    personal_keywords: tuple[str, ...] = (
        "personal", "savings", "self", "own", "private", "family", "spouse",
        "wife", "husband",
    )
    personal_min_amount: float = 10_000.0
    personal_score: float = 40.0

    # FRD-002: identical payroll amounts fanned out to many recipients
    payroll_keywords: tuple[str, ...] = (
        "payroll", "salary", "wages", "compensation", "bonus", "commission", "stipend",
    )
    payroll_min_count: int = 3
    ghost_min_recipients: int = 5
    ghost_min_amount: float = 500.0
    ghost_score: float = 30.0
    payroll_vendor_score: float = 25.0

    # FRD-003: a payment followed by a partial receipt from a different party
    kickback_min_payment: float = 5_000.0
    kickback_window_days: int = 45
    kickback_min_ratio: float = 0.05
    kickback_max_ratio: float = 0.30
    kickback_score: float = 35.0

    # FRD-005
    insurance_keywords: tuple[str, ...] = (
        "insurance", "claim", "settlement", "indemnity", "premium",
        "underwriting", "adjuster", "loss",
    )
    insurance_min_count: int = 2
    claim_min_amount: float = 5_000.0
    claim_min_count: int = 3
    claim_window_days: int = 180
    claim_score: float = 30.0

    # FRD-006: large credits in the last days of a quarter
    period_end_months: frozenset[int] = field(default_factory=lambda: frozenset({3, 6, 9, 12}))
    period_end_first_day: int = 26
    period_end_min_amount: float = 25_000.0
    period_end_min_count: int = 2
    reversal_window_days: int = 15
    reversal_min_ratio: float = 0.80
    reversal_max_ratio: float = 1.05
    reversal_score: float = 45.0
    period_end_score: float = 20.0


@dataclass
class TradeRuleConfig:
    """TBML rules. Regulatory basis: FinCEN Advisory FIN-2010-A001."""

    trade_keywords: tuple[str, ...] = (
        "invoice", "trade", "import", "export", "shipment", "cargo", "freight",
        "goods", "merchandise",
    )
    invoice_max_ratio: float = 5.0
    invoice_min_amount: float = 10_000.0
    invoice_score: float = 35.0

    # TBML-002: vague service payments into tax havens
    service_keywords: tuple[str, ...] = (
        "consulting", "services", "advisory", "management fee", "commission",
        "licensing", "royalty", "royalties", "ip",
    )
    service_min_amount: float = 10_000.0
    service_min_count: int = 2
    service_score: float = 35.0


@dataclass
class SectorRuleConfig:
    """Sector typologies: real estate, gambling, loan-back, MSB, securities and cash business."""

    # RE-001
    real_estate_keywords: tuple[str, ...] = (
        "escrow", "title", "realty", "real estate", "property", "mortgage",
        "closing", "deed", "convey", "settlement",
    )
    real_estate_min_amount: float = 50_000.0
    cash_funding_window_days: int = 30
    cash_funding_min_deposits: int = 3
    cash_funded_score: float = 40.0
    legal_entity_keywords: tuple[str, ...] = (
        "llc", "ltd", "trust", "holdings", "corp", "inc", "foundation",
    )
    legal_entity_min_amount: float = 200_000.0
    legal_entity_score: float = 25.0

    # GAM-001
    gambling_keywords: tuple[str, ...] = (
        "casino", "wager", "bet365", "draftkings", "fanduel", "pokerstars",
        "gambling", "slot", "poker", "sportsbook", "betfair", "william hill",
        "mgm", "caesars", "wynn",
    )
    gambling_mcc: str = "7995"
    gambling_min_count: int = 3
    cash_out_min_ratio: float = 0.80
    cash_out_min_volume: float = 10_000.0
    cash_out_score: float = 30.0
    gambling_min_volume: float = 20_000.0
    gambling_score: float = 20.0

    # INT-001
    loan_keywords: tuple[str, ...] = (
        "loan", "mortgage", "credit", "collateral", "disbursement", "repayment",
        "principal", "interest",
    )
    loan_min_count: int = 2
    loan_back_min_deposit: float = 50_000.0
    loan_back_window_days: int = 60
    loan_back_score: float = 35.0

    # MSB-001
    msb_keywords: tuple[str, ...] = (
        "remit", "transfer", "money gram", "moneygram", "western union", "ria",
        "xoom", "worldremit", "remitly", "wise", "transferwise", "hawala",
        "hundi", "fei-ch'ien",
    )
    msb_mccs: frozenset[str] = field(
        default_factory=lambda: frozenset({"4829", "6051", "6050", "6540"})
    )
    msb_min_count: int = 3
    msb_corridor_countries: frozenset[str] = field(
        default_factory=lambda: frozenset({
            "PK", "AF", "SO", "YE", "SY", "IQ", "LB", "MM", "BD", "NP", "IN", "PH",
            "KE", "NG", "ET",
        })
    )
    msb_corridor_min_count: int = 2
    msb_corridor_score: float = 35.0
    msb_min_volume: float = 20_000.0
    msb_volume_score: float = 20.0

    # SEC-001
    securities_keywords: tuple[str, ...] = (
        "brokerage", "securities", "stock", "bond", "option", "futures", "etf",
        "mutual fund", "dividend", "margin", "settlement", "custody", "custodian",
    )
    securities_mcc: str = "6211"
    securities_min_count: int = 3
    securities_min_deposit: float = 25_000.0
    securities_window_days: int = 7
    securities_min_ratio: float = 0.85
    securities_score: float = 30.0

    # CIB-001
    card_types: tuple[str, ...] = ("CARD", "POS", "MERCHANT")
    cash_business_min_deposits: int = 5
    cash_to_card_max_ratio: float = 4.0
    cash_to_card_score: float = 25.0
    uniform_min_days: int = 10
    uniform_max_cv: float = 0.10
    uniform_min_daily: float = 1_000.0
    uniform_score: float = 30.0


@dataclass
class PredicateRuleConfig:
    """Predicate-offence indicators: trafficking proceeds and public-sector kickbacks."""

    # HT-001
    trafficking_keywords: tuple[str, ...] = (
        "massage", "spa", "nail salon", "escort", "staffing", "labor", "cleaning",
        "janitorial", "hospitality", "motel",
    )
    trafficking_min_count: int = 3
    trafficking_min_cash_deposits: int = 5
    trafficking_cash_score: float = 45.0
    document_counterparty_keywords: tuple[str, ...] = (
        "visa", "immigration", "passport", "document", "notary", "consulate",
    )
    document_description_keywords: tuple[str, ...] = (
        "visa", "immigration", "passport", "document",
    )
    document_min_count: int = 2
    document_score: float = 30.0

    # PEP-001
    government_keywords: tuple[str, ...] = (
        "government", "ministry", "municipal", "federal", "state", "public",
        "procurement", "tender", "contract", "grant", "subsidy", "budget",
    )
    government_min_amount: float = 25_000.0
    fee_keywords: tuple[str, ...] = (
        "consult", "consulting", "consultant", "consultancy", "advisory", "adviser",
        "advisor", "fee", "fees", "commission", "service", "services", "management",
    )
    fee_window_days: int = 14
    fee_min_ratio: float = 0.05
    kickback_score: float = 35.0


@dataclass
class MonitoringConfig:
    """Top-level transaction monitoring configuration."""

    default_currency: str = "USD"

    structuring: StructuringRuleConfig = field(default_factory=StructuringRuleConfig)
    velocity: VelocityRuleConfig = field(default_factory=VelocityRuleConfig)
    geographic: GeographicRuleConfig = field(default_factory=GeographicRuleConfig)
    counterparty: CounterpartyRuleConfig = field(default_factory=CounterpartyRuleConfig)
    behavioral: BehavioralRuleConfig = field(default_factory=BehavioralRuleConfig)
    crypto: CryptoRuleConfig = field(default_factory=CryptoRuleConfig)
    network: NetworkRuleConfig = field(default_factory=NetworkRuleConfig)
    fraud: FraudRuleConfig = field(default_factory=FraudRuleConfig)
    trade: TradeRuleConfig = field(default_factory=TradeRuleConfig)
    sector: SectorRuleConfig = field(default_factory=SectorRuleConfig)
    predicate: PredicateRuleConfig = field(default_factory=PredicateRuleConfig)

    @classmethod
    def from_env(cls) -> "MonitoringConfig":
        """Load config with env var overrides (MONITORING_ prefix)."""
        config = cls()

        if v := os.getenv("MONITORING_DEFAULT_CURRENCY"):
            config.default_currency = v.upper()

        # Structuring overrides
        if v := os.getenv("MONITORING_REPORTING_THRESHOLD"):
            config.structuring.reporting_threshold = float(v)
        if v := os.getenv("MONITORING_STRUCTURING_WINDOW_DAYS"):
            config.structuring.near_threshold_window_days = int(v)

        # Velocity overrides
        if v := os.getenv("MONITORING_SPIKE_MULTIPLIER"):
            config.velocity.spike_multiplier = float(v)
        if v := os.getenv("MONITORING_PASS_THROUGH_HOURS"):
            config.velocity.pass_through_window_hours = float(v)
        if v := os.getenv("MONITORING_PASS_THROUGH_RATIO"):
            config.velocity.pass_through_min_ratio = float(v)

        # Geographic overrides
        if v := os.getenv("MONITORING_HIGH_RISK_COUNTRIES"):
            config.geographic.high_risk_countries = frozenset(
                c.strip().upper() for c in v.split(",") if c.strip()
            )

        return config


# Module-level default instance
default_config = MonitoringConfig()
