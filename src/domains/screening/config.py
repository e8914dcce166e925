"""Subject screening configuration."""

import os
from dataclasses import dataclass, field


@dataclass
class MatchPolicy:
    """Name-match confidence bands and the finding each band produces."""

    strong_confidence: float = 0.85
    strong_score: float = 80.0
    possible_confidence: float = 0.75
    possible_score: float = 40.0
    wallet_match_score: float = 80.0


@dataclass
class ScreeningConfig:
    """Top-level screening configuration."""

    default_timeout_ms: int = 25_000
    max_concurrency: int = 16
    # Source names to run when the caller does not pass an allow-list; empty means all
    default_sources: tuple[str, ...] = ()
    match: MatchPolicy = field(default_factory=MatchPolicy)

    @classmethod
    def from_env(cls) -> "ScreeningConfig":
        """Load config with env var overrides (SCREENING_ prefix)."""
        config = cls()

        if v := os.getenv("SCREENING_DEFAULT_TIMEOUT_MS"):
            config.default_timeout_ms = int(v)
        if v := os.getenv("SCREENING_MAX_CONCURRENCY"):
            config.max_concurrency = int(v)
        if v := os.getenv("SCREENING_DEFAULT_SOURCES"):
            config.default_sources = tuple(s.strip() for s in v.split(",") if s.strip())
        if v := os.getenv("SCREENING_STRONG_MATCH_CONFIDENCE"):
            config.match.strong_confidence = float(v)
        if v := os.getenv("SCREENING_POSSIBLE_MATCH_CONFIDENCE"):
            config.match.possible_confidence = float(v)

        return config


# Module-level default instance
default_config = ScreeningConfig()
