"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "risk-signal-engine"
    app_version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"

    host: str = "0.0.0.0"
    port: int = 8000

    # Override the SCREENING_ / MONITORING_ policy defaults when set
    adapter_timeout_ms: int | None = None
    default_currency: str | None = None
    default_sources: str = ""

    # Watchlist JSON files; a missing path means the source is not configured
    sanctions_watchlist_path: str | None = None
    pep_watchlist_path: str | None = None

    # JSON risk APIs (see RiskApiAdapter)
    blockchain_api_url: str | None = None
    adverse_media_api_url: str | None = None

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}


settings = Settings()
