"""FastAPI dependencies for the domain services.

Services are built once per process from settings and the domain config
trees. Tests swap them out with ``app.dependency_overrides``.
"""

from functools import lru_cache

import structlog

from src.config import settings
from src.domains.monitoring.config import MonitoringConfig
from src.domains.monitoring.service import TransactionMonitor
from src.domains.scoring.config import ScoringConfig
from src.domains.scoring.models import RiskCategory
from src.domains.scoring.scorer import CompositeRiskScorer
from src.domains.screening.adapters import (
    WALLET_KINDS,
    RiskApiAdapter,
    SourceAdapter,
    WatchlistAdapter,
    load_watchlist,
)
from src.domains.screening.config import ScreeningConfig
from src.domains.screening.service import ScreeningService

logger = structlog.get_logger()


def build_adapters(config: ScreeningConfig) -> list[SourceAdapter]:
    adapters: list[SourceAdapter] = []

    if settings.sanctions_watchlist_path:
        adapters.append(
            WatchlistAdapter(
                "sanctions",
                RiskCategory.SANCTIONS,
                load_watchlist(settings.sanctions_watchlist_path),
                policy=config.match,
            )
        )
    if settings.pep_watchlist_path:
        adapters.append(
            WatchlistAdapter(
                "pep",
                RiskCategory.PEP,
                load_watchlist(settings.pep_watchlist_path),
                policy=config.match,
            )
        )
    if settings.adverse_media_api_url:
        adapters.append(
            RiskApiAdapter("adverse_media", RiskCategory.ADVERSE_MEDIA, settings.adverse_media_api_url)
        )
    if settings.blockchain_api_url:
        adapters.append(
            RiskApiAdapter(
                "blockchain",
                RiskCategory.BLOCKCHAIN,
                settings.blockchain_api_url,
                supported_kinds=WALLET_KINDS,
            )
        )

    logger.info("screening_sources_configured", sources=[a.name for a in adapters])
    return adapters


@lru_cache
def get_scorer() -> CompositeRiskScorer:
    return CompositeRiskScorer(ScoringConfig.from_env())


@lru_cache
def get_screening_service() -> ScreeningService:
    config = ScreeningConfig.from_env()
    if settings.adapter_timeout_ms:
        config.default_timeout_ms = settings.adapter_timeout_ms
    if settings.default_sources:
        config.default_sources = tuple(
            s.strip() for s in settings.default_sources.split(",") if s.strip()
        )
    return ScreeningService(build_adapters(config), config=config, scorer=get_scorer())


@lru_cache
def get_transaction_monitor() -> TransactionMonitor:
    config = MonitoringConfig.from_env()
    if settings.default_currency:
        config.default_currency = settings.default_currency.upper()
    return TransactionMonitor(config=config, scorer=get_scorer())
