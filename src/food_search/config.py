"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from food_search.domain.rate_limit import RateLimitConfig
from food_search.services.rate_limit import RATE_LIMITS

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")
_SEARCH_LIMIT = RATE_LIMITS["search"]


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    fdc_timeout_seconds: float = 15
    search_cache_ttl_seconds: int = 3600
    search_rate_limit_max_requests: int = _SEARCH_LIMIT.max_requests
    search_rate_limit_window_seconds: int = _SEARCH_LIMIT.window_seconds
    rate_limit_sweep_interval_seconds: float = 300
    catalog_search_limit: int = 25
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def search_rate_limit(self) -> RateLimitConfig:
        """Rate limit applied to FDC searches."""
        return RateLimitConfig(
            window_seconds=self.search_rate_limit_window_seconds,
            max_requests=self.search_rate_limit_max_requests,
        )


def resolve_fdc_api_key(raw: str | None) -> str | None:
    """Treat blank keys as unset."""
    if raw is None:
        return None
    cleaned = raw.strip()
    return cleaned or None
