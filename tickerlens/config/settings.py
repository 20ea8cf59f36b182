"""
TICKERLENS - Central Configuration
Settings are resolved once at startup by load_settings().

Precedence (highest first): explicit keyword overrides, process environment
(TICKERLENS_ prefix), the .env file, then the defaults below.
"""
from pydantic_settings import BaseSettings
from pydantic import Field
from typing import Any


class StreamSettings(BaseSettings):
    """Live price buffer and feed cadence."""
    retention_seconds: int = 3600
    min_price_delta: float = 0.01
    feed_interval_seconds: float = 1.0
    default_symbol: str = "AAPL"
    stream_on_startup: bool = False

    class Config:
        env_prefix = "TICKERLENS_"
        env_file = ".env"
        extra = "ignore"


class DataSourceSettings(BaseSettings):
    """Market data API keys and endpoints."""
    finnhub_api_key: str = ""
    finnhub_base_url: str = "https://finnhub.io/api/v1"
    yahoo_base_url: str = "https://query1.finance.yahoo.com"
    request_timeout_seconds: float = 5.0

    class Config:
        env_prefix = "TICKERLENS_"
        env_file = ".env"
        extra = "ignore"


class AppSettings(BaseSettings):
    """Top-level application settings."""
    app_name: str = "TICKERLENS"
    version: str = "0.1.0"
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    stream: StreamSettings = Field(default_factory=StreamSettings)
    data: DataSourceSettings = Field(default_factory=DataSourceSettings)

    class Config:
        env_prefix = "TICKERLENS_"
        env_file = ".env"
        extra = "ignore"


def load_settings(**overrides: Any) -> AppSettings:
    """Resolve the application settings.

    Keyword overrides win over everything else. Nested groups accept either
    a settings instance or a plain dict of field overrides, e.g.
    ``load_settings(stream={"retention_seconds": 600})``.
    """
    for group, cls in (("stream", StreamSettings), ("data", DataSourceSettings)):
        value = overrides.get(group)
        if isinstance(value, dict):
            overrides[group] = cls(**value)
    return AppSettings(**overrides)
