"""Transaction monitoring domain."""

from .config import MonitoringConfig
from .engine import RuleEngine, summarize_categories
from .models import EntityProfile, Transaction, TransactionAnalysis
from .normalizer import build_profile, normalize_transactions
from .service import TransactionMonitor

__all__ = [
    "EntityProfile",
    "MonitoringConfig",
    "RuleEngine",
    "Transaction",
    "TransactionAnalysis",
    "TransactionMonitor",
    "build_profile",
    "normalize_transactions",
    "summarize_categories",
]
