"""
Application configuration.

Loads settings from environment variables and .env file.
All tunables live here so modules never read the environment directly.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment.

    Attributes:
        project_name: Display name for the API.
        version: Current API version string.
        debug: Enable debug mode. Must be False in production.
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR).
        rate_limit_default: Default rate limit for all endpoints.
        rate_limit_heavy: Rate limit for compute-heavy endpoints.
        max_request_size_bytes: Maximum allowed request body size.
        series_source: "synthetic" walks or "history" resampling for charts.
        synthetic_seed: Base seed for synthetic series and sample enrichment.
        synthetic_volatility: Per-step noise of synthetic series, in percent (below 100).
        default_indicator_period: Period used when a request omits one.
        indicator_period_min: Smallest period accepted from clients.
        indicator_period_max: Largest period accepted from clients.
        bollinger_multiplier: Default Bollinger band width multiplier.
        alert_webhook_urls: Webhooks receiving triggered alert events.
        webhook_timeout_seconds: HTTP timeout for webhook delivery.
        history_max_length: Observed prices kept per symbol by the quote pipeline.
        load_sample_data: Seed the demo portfolio, watchlist and alerts at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AURELIUS_",
        extra="ignore",
    )

    project_name: str = "Aurelius Analytics"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    rate_limit_default: str = "60/minute"
    rate_limit_heavy: str = "10/minute"
    max_request_size_bytes: int = 1_048_576  # 1 MB

    series_source: Literal["synthetic", "history"] = "synthetic"
    synthetic_seed: int = Field(default=42, ge=0)
    synthetic_volatility: float = Field(default=0.5, gt=0, lt=100)

    default_indicator_period: int = 14
    indicator_period_min: int = 5
    indicator_period_max: int = 50
    bollinger_multiplier: float = 2.0

    alert_webhook_urls: list[str] = Field(default_factory=list)
    webhook_timeout_seconds: float = 10.0
    history_max_length: int = 500
    load_sample_data: bool = True


settings = Settings()
