"""Tests for container wiring."""

import asyncio

from food_search.adapters.fdc_client import HttpxFdcClient
from food_search.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.food_search_service.fdc_client, HttpxFdcClient)
    assert container.catalog_search_service.limit == settings.catalog_search_limit
    assert container.food_search_service.search_ttl_seconds == 3600
    asyncio.run(container.close_resources())


def test_build_container_without_fdc_key(settings) -> None:
    container = build_container(settings.model_copy(update={"fdc_api_key": "  "}))

    assert container.food_search_service.fdc_client is None
    asyncio.run(container.close_resources())
