"""FoodData Central search: validation, normalization and tiering."""

import logging
import re
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass

import httpx

from food_search.adapters.fdc_client import FdcClient
from food_search.domain.errors import (
    FoodStoreError,
    ProviderNotConfiguredError,
    QueryValidationError,
    UpstreamError,
)
from food_search.domain.foods import (
    ExternalFood,
    ExternalSearchPage,
    UserPrivateFoodRecord,
)
from food_search.services.cache import Cache, search_cache_key
from food_search.services.normalizer import normalize

MIN_QUERY_LENGTH = 2
MAX_QUERY_LENGTH = 100
MAX_PAGE_SIZE = 50
DEFAULT_PAGE_SIZE = "25"
DEFAULT_PAGE_NUMBER = "1"

# The two highest-trust FDC data types.
CURATED_DATA_TYPES = frozenset({"Foundation", "SR Legacy"})

# Leading whitespace, optional sign, ASCII digits; trailing text is ignored.
_LEADING_INT = re.compile(r"\s*([+-]?[0-9]+)")

PrivateFoodLookup = Callable[[str], Awaitable[Sequence[UserPrivateFoodRecord]]]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchParams:
    """Validated search parameters."""

    query: str
    page_size: int
    page_number: int
    data_type: str | None = None


def validate_search_params(
    query: str | None,
    page_size: str | int | None = DEFAULT_PAGE_SIZE,
    page_number: str | int | None = DEFAULT_PAGE_NUMBER,
    data_type: str | None = None,
) -> SearchParams:
    """Validate raw request parameters or raise QueryValidationError."""
    if not query or len(query) < MIN_QUERY_LENGTH:
        raise QueryValidationError(
            f"Query must be at least {MIN_QUERY_LENGTH} characters"
        )
    if len(query) > MAX_QUERY_LENGTH:
        raise QueryValidationError(
            f"Query too long (max {MAX_QUERY_LENGTH} characters)"
        )

    size = _parse_int(page_size if page_size is not None else DEFAULT_PAGE_SIZE)
    if size is None or size < 1 or size > MAX_PAGE_SIZE:
        raise QueryValidationError(f"Invalid pageSize (must be 1-{MAX_PAGE_SIZE})")

    number = _parse_int(page_number if page_number is not None else DEFAULT_PAGE_NUMBER)
    if number is None or number < 1:
        raise QueryValidationError("Invalid pageNumber")

    return SearchParams(
        query=query, page_size=size, page_number=number, data_type=data_type or None
    )


def to_external_food(raw: dict[str, object]) -> ExternalFood:
    """Normalize one raw FDC food into an ExternalFood."""
    fdc_id = int(raw["fdcId"])
    nutrients = raw.get("foodNutrients") or []
    return ExternalFood(
        id=f"usda_{fdc_id}",
        fdc_id=fdc_id,
        name=str(raw.get("description", "")),
        brand=raw.get("brandOwner") or raw.get("brandName") or None,
        serving_size=float(raw.get("servingSize") or 100),
        serving_unit=str(raw.get("servingSizeUnit") or "g"),
        nutrients=normalize(nutrients),
        data_type=raw.get("dataType"),
    )


def is_curated(food: ExternalFood) -> bool:
    """Return true when the food's data type is in the curated tier."""
    return food.data_type in CURATED_DATA_TYPES


def split_by_tier(
    foods: Sequence[ExternalFood],
    private_foods: Iterable[UserPrivateFoodRecord] = (),
) -> tuple[
    list[ExternalFood | UserPrivateFoodRecord],
    list[ExternalFood | UserPrivateFoodRecord],
]:
    """Split foods into best-match and more-results tiers.

    Private foods never qualify as best matches and lead the second tier.
    """
    best_match: list[ExternalFood | UserPrivateFoodRecord] = [
        food for food in foods if is_curated(food)
    ]
    more_results: list[ExternalFood | UserPrivateFoodRecord] = list(private_foods)
    more_results.extend(food for food in foods if not is_curated(food))
    return best_match, more_results


@dataclass
class FoodSearchService:
    """Searches FoodData Central with response caching."""

    fdc_client: FdcClient | None
    cache: Cache
    search_ttl_seconds: int = 3600
    debug: bool = False

    async def search(
        self,
        query: str | None,
        page_size: str | int | None = DEFAULT_PAGE_SIZE,
        page_number: str | int | None = DEFAULT_PAGE_NUMBER,
        data_type: str | None = None,
        private_lookup: PrivateFoodLookup | None = None,
    ) -> ExternalSearchPage:
        """Validate parameters, query FDC and return a tiered page.

        ``private_lookup`` supplies the caller's own foods for the query; they
        lead ``more_results``. It runs only after the FDC call succeeded.
        """
        if self.fdc_client is None:
            raise ProviderNotConfiguredError()
        params = validate_search_params(query, page_size, page_number, data_type)

        payload = await self._fetch(self.fdc_client, params)
        foods = [to_external_food(food) for food in payload.get("foods") or []]
        private_foods = await _private_matches(private_lookup, params.query)
        best_match, more_results = split_by_tier(foods, private_foods)
        if self.debug:
            _logger.info(
                "FDC search: query=%s results=%s best=%s",
                params.query,
                len(foods),
                len(best_match),
            )
        return ExternalSearchPage(
            foods=foods,
            best_match=best_match,
            more_results=more_results,
            total_hits=int(payload.get("totalHits") or 0),
            current_page=int(payload.get("currentPage") or params.page_number),
            total_pages=int(payload.get("totalPages") or 0),
        )

    async def _fetch(
        self, fdc_client: FdcClient, params: SearchParams
    ) -> dict[str, object]:
        """Return the raw FDC payload, from cache when available."""
        cache_key = search_cache_key(
            params.query, params.page_size, params.page_number, params.data_type
        )
        cached = self.cache.get(cache_key)
        if isinstance(cached, dict):
            return cached

        try:
            payload = await fdc_client.search_foods(
                params.query,
                page_size=params.page_size,
                page_number=params.page_number,
                data_type=params.data_type,
            )
        except httpx.HTTPStatusError as exc:
            _logger.error("FDC API error: status=%s", exc.response.status_code)
            raise UpstreamError(exc.response.status_code) from exc
        except httpx.TimeoutException as exc:
            _logger.error("FDC API timed out: query=%s", params.query)
            raise UpstreamError(502, "Food database request timed out") from exc
        except httpx.HTTPError as exc:
            _logger.error("FDC API request failed: %s", exc)
            raise UpstreamError(502) from exc

        self.cache.set(cache_key, payload, ttl_seconds=self.search_ttl_seconds)
        return payload


async def _private_matches(
    private_lookup: PrivateFoodLookup | None, query: str
) -> list[UserPrivateFoodRecord]:
    if private_lookup is None:
        return []
    try:
        return list(await private_lookup(query))
    except FoodStoreError as exc:
        _logger.warning("Private food lookup failed: %s", exc, extra={"query": query})
        return []


def _parse_int(raw: str | int) -> int | None:
    """Parse a leading ASCII integer the way query strings are read by clients."""
    if isinstance(raw, int):
        return raw
    match = _LEADING_INT.match(raw)
    if match is None:
        return None
    return int(match.group(1))
