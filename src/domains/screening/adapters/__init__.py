"""Screening source adapters."""

from .base import NAME_KINDS, WALLET_KINDS, SourceAdapter
from .http import HttpSourceAdapter, RiskApiAdapter
from .watchlist import WatchlistAdapter, WatchlistEntry, load_watchlist

__all__ = [
    "NAME_KINDS",
    "WALLET_KINDS",
    "HttpSourceAdapter",
    "RiskApiAdapter",
    "SourceAdapter",
    "WatchlistAdapter",
    "WatchlistEntry",
    "load_watchlist",
]
