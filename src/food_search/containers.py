"""Dependency container wiring for the application."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from food_search.adapters.fdc_client import HttpxFdcClient
from food_search.adapters.supabase_auth import CallerResolver, SupabaseCallerResolver
from food_search.adapters.supabase_food_repository import SupabaseFoodRepository
from food_search.config import Settings, resolve_fdc_api_key
from food_search.services.cache import InMemoryCache
from food_search.services.catalog import CatalogSearchService
from food_search.services.food_cache import FoodCacheService
from food_search.services.food_search import FoodSearchService
from food_search.services.rate_limit import RateLimiter

_logger = logging.getLogger(__name__)


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    caller_resolver: CallerResolver
    rate_limiter: RateLimiter
    food_search_service: FoodSearchService
    food_cache_service: FoodCacheService
    catalog_search_service: CatalogSearchService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    food_repository = SupabaseFoodRepository(supabase_client)

    api_key = resolve_fdc_api_key(resolved_settings.fdc_api_key)
    fdc_client = None
    if api_key is None:
        _logger.warning("FDC_API_KEY not configured - food search will fail")
    else:
        fdc_client = HttpxFdcClient.create(
            api_key=api_key,
            base_url=resolved_settings.fdc_base_url,
            timeout_seconds=resolved_settings.fdc_timeout_seconds,
        )
    food_search_service = FoodSearchService(
        fdc_client=fdc_client,
        cache=InMemoryCache(),
        search_ttl_seconds=resolved_settings.search_cache_ttl_seconds,
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        if fdc_client is not None:
            await fdc_client.close()

    return AppContainer(
        settings=resolved_settings,
        caller_resolver=SupabaseCallerResolver(supabase_client),
        rate_limiter=RateLimiter(),
        food_search_service=food_search_service,
        food_cache_service=FoodCacheService(food_repository),
        catalog_search_service=CatalogSearchService(
            food_repository, limit=resolved_settings.catalog_search_limit
        ),
        close_resources=close_resources,
    )
