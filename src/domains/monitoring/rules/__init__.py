"""Transaction monitoring rules package.

Exports ALL_RULES (list of all rule instances in registration order) and
individual rule classes for direct use.
"""

from .base import DetectionRule, keyword_pattern, mentions
from .behavioral import (
    AmountOutlierRule,
    ChannelSwitchingRule,
    DormantReactivationRule,
    HighRiskMerchantCategoryRule,
    OffHoursRule,
)
from .counterparty import (
    CircularCounterpartyRule,
    ConcentrationRule,
    NewCounterpartyLargeAmountRule,
    ShellCompanyRule,
)
from .crypto import (
    DefiActivityRule,
    ExchangeRampRule,
    MixerP2PRule,
    PeelChainRule,
    PrivacyCoinRule,
    RapidConversionRule,
)
from .fraud import (
    ClaimsFrequencyRule,
    DuplicatePaymentRule,
    GhostPayrollRule,
    KickbackRule,
    PeriodEndRevenueRule,
    PersonalAccountTransferRule,
)
from .geographic import (
    GeographicSpreadRule,
    HighRiskJurisdictionRule,
    IntermediaryCountryEvasionRule,
    TaxHavenRule,
)
from .network import FlowCycleRule, FunnelAccountRule, HighRiskNetworkRule
from .predicate import HumanTraffickingRule, PublicSectorKickbackRule
from .sectors import (
    CashIntensiveBusinessRule,
    GamblingRule,
    InformalValueTransferRule,
    LoanBackRule,
    RealEstatePurchaseRule,
    SecuritiesPassThroughRule,
)
from .structuring import (
    IncrementalAmountRule,
    JustBelowThresholdRule,
    RoundAmountRule,
    SplitDepositRule,
)
from .trade import InvoiceVarianceRule, PhantomServicesRule
from .velocity import DailyCountRule, PassThroughRule, RapidFireRule, VolumeSpikeRule

# All rule instances in evaluation order
ALL_RULES: list[DetectionRule] = [
    # Structuring
    JustBelowThresholdRule(),
    RoundAmountRule(),
    SplitDepositRule(),
    IncrementalAmountRule(),
    # Velocity
    VolumeSpikeRule(),
    RapidFireRule(),
    DailyCountRule(),
    PassThroughRule(),
    # Geographic
    HighRiskJurisdictionRule(),
    TaxHavenRule(),
    GeographicSpreadRule(),
    # Counterparty
    ShellCompanyRule(),
    ConcentrationRule(),
    NewCounterpartyLargeAmountRule(),
    CircularCounterpartyRule(),
    # Behavioral
    DormantReactivationRule(),
    OffHoursRule(),
    ChannelSwitchingRule(),
    AmountOutlierRule(),
    HighRiskMerchantCategoryRule(),
    # Crypto
    ExchangeRampRule(),
    RapidConversionRule(),
    MixerP2PRule(),
    PrivacyCoinRule(),
    PeelChainRule(),
    DefiActivityRule(),
    # Trade-based laundering
    InvoiceVarianceRule(),
    PhantomServicesRule(),
    # Sector typologies
    RealEstatePurchaseRule(),
    GamblingRule(),
    LoanBackRule(),
    InformalValueTransferRule(),
    SecuritiesPassThroughRule(),
    CashIntensiveBusinessRule(),
    # Predicate offences
    HumanTraffickingRule(),
    PublicSectorKickbackRule(),
    # Sanctions evasion
    IntermediaryCountryEvasionRule(),
    # Network
    HighRiskNetworkRule(),
    FlowCycleRule(),
    FunnelAccountRule(),
    # Fraud
    DuplicatePaymentRule(),
    GhostPayrollRule(),
    KickbackRule(),
    PersonalAccountTransferRule(),
    ClaimsFrequencyRule(),
    PeriodEndRevenueRule(),
]

__all__ = [
    "ALL_RULES",
    "DetectionRule",
    "keyword_pattern",
    "mentions",
    # Structuring
    "JustBelowThresholdRule",
    "RoundAmountRule",
    "SplitDepositRule",
    "IncrementalAmountRule",
    # Velocity
    "VolumeSpikeRule",
    "RapidFireRule",
    "DailyCountRule",
    "PassThroughRule",
    # Geographic
    "HighRiskJurisdictionRule",
    "TaxHavenRule",
    "GeographicSpreadRule",
    "IntermediaryCountryEvasionRule",
    # Counterparty
    "ShellCompanyRule",
    "ConcentrationRule",
    "NewCounterpartyLargeAmountRule",
    "CircularCounterpartyRule",
    # Behavioral
    "DormantReactivationRule",
    "OffHoursRule",
    "ChannelSwitchingRule",
    "AmountOutlierRule",
    "HighRiskMerchantCategoryRule",
    # Crypto
    "ExchangeRampRule",
    "RapidConversionRule",
    "MixerP2PRule",
    "PrivacyCoinRule",
    "PeelChainRule",
    "DefiActivityRule",
    # Trade-based laundering
    "InvoiceVarianceRule",
    "PhantomServicesRule",
    # Sector typologies
    "RealEstatePurchaseRule",
    "GamblingRule",
    "LoanBackRule",
    "InformalValueTransferRule",
    "SecuritiesPassThroughRule",
    "CashIntensiveBusinessRule",
    # Predicate offences
    "HumanTraffickingRule",
    "PublicSectorKickbackRule",
    # Network
    "HighRiskNetworkRule",
    "FlowCycleRule",
    "FunnelAccountRule",
    # Fraud
    "DuplicatePaymentRule",
    "GhostPayrollRule",
    "KickbackRule",
    "PersonalAccountTransferRule",
    "ClaimsFrequencyRule",
    "PeriodEndRevenueRule",
]
