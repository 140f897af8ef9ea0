"""FastAPI application factory."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from functools import partial
from uuid import UUID

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse

from food_search.api.auth import require_caller
from food_search.api.food_models import CachedFoodRequest, CachedFoodResponse
from food_search.app_logging import configure_logging
from food_search.containers import AppContainer
from food_search.domain.errors import FoodSearchError
from food_search.domain.foods import (
    NUTRIENT_FIELDS,
    CanonicalFoodRecord,
    ExternalFood,
    FoodDraft,
    NutrientVector,
    ServingOption,
    UserPrivateFoodRecord,
)
from food_search.services.food_search import (
    DEFAULT_PAGE_NUMBER,
    DEFAULT_PAGE_SIZE,
    MIN_QUERY_LENGTH,
)


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        sweeper = asyncio.create_task(
            state_container.rate_limiter.run_sweeper(
                state_container.settings.rate_limit_sweep_interval_seconds
            )
        )
        yield
        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/search-foods", response_model=None)
    async def search_foods(  # noqa: PLR0913
        request: Request,
        response: Response,
        caller_id: UUID = Depends(require_caller),
        query: str | None = None,
        page_size: str | None = Query(default=None, alias="pageSize"),
        page_number: str | None = Query(default=None, alias="pageNumber"),
        data_type: str | None = Query(default=None, alias="dataType"),
    ) -> dict[str, object] | JSONResponse:
        """Search FoodData Central for the authenticated caller."""
        state_container: AppContainer = request.app.state.container
        admission = state_container.rate_limiter.admit(
            f"search:{caller_id}", state_container.settings.search_rate_limit
        )
        if not admission.allowed:
            return JSONResponse(
                status_code=429,
                content={"error": "Too many requests. Please try again later."},
                headers={
                    "X-RateLimit-Remaining": "0",
                    "X-RateLimit-Reset": str(_epoch_ms(admission.reset_at)),
                },
            )

        try:
            page = await state_container.food_search_service.search(
                query,
                page_size=page_size or DEFAULT_PAGE_SIZE,
                page_number=page_number or DEFAULT_PAGE_NUMBER,
                data_type=data_type,
                private_lookup=partial(
                    state_container.catalog_search_service.search_private,
                    user_id=caller_id,
                ),
            )
        except FoodSearchError as exc:
            return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})
        except Exception:
            logger.exception("Search foods error", extra={"query": query})
            return JSONResponse(
                status_code=500, content={"error": "Internal server error"}
            )

        response.headers["X-RateLimit-Remaining"] = str(admission.remaining)
        return {
            "foods": [_external_food_payload(food) for food in page.foods],
            "bestMatch": [_result_payload(food) for food in page.best_match],
            "moreResults": [_result_payload(food) for food in page.more_results],
            "totalHits": page.total_hits,
            "currentPage": page.current_page,
            "totalPages": page.total_pages,
        }

    @app.post("/cached-foods")
    async def cache_food(
        body: CachedFoodRequest,
        request: Request,
        caller_id: UUID = Depends(require_caller),
    ) -> dict[str, object]:
        """Store a selected FDC food locally and return its id."""
        state_container: AppContainer = request.app.state.container
        food_id = await asyncio.to_thread(
            state_container.food_cache_service.get_or_create,
            _draft_from_request(body),
            body.fdc_id,
        )
        if food_id is None:
            logger.warning(
                "Food not cached", extra={"fdc_id": body.fdc_id, "caller": caller_id}
            )
        result = CachedFoodResponse(
            food_id=str(food_id) if food_id else None, cached=food_id is not None
        )
        return result.model_dump(by_alias=True)

    @app.get("/foods")
    async def search_catalog(
        request: Request,
        query: str = "",
        caller_id: UUID = Depends(require_caller),
    ) -> dict[str, object]:
        """Search the shared catalog and the caller's own foods."""
        state_container: AppContainer = request.app.state.container
        if len(query) < MIN_QUERY_LENGTH:
            return {"bestMatch": [], "moreResults": [], "totalCount": 0}
        results = await state_container.catalog_search_service.search(query, caller_id)
        return {
            "bestMatch": [_result_payload(food) for food in results.best_match],
            "moreResults": [_result_payload(food) for food in results.more_results],
            "totalCount": results.total_count,
        }

    return app


def _epoch_ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _draft_from_request(body: CachedFoodRequest) -> FoodDraft:
    """Build a food draft from a cache request body."""
    return FoodDraft(
        name=body.name,
        brand=body.brand,
        serving_size=body.serving_size,
        serving_unit=body.serving_unit,
        nutrients=NutrientVector(**{name: getattr(body, name) for name in NUTRIENT_FIELDS}),
    )


def _nutrient_payload(nutrients: NutrientVector) -> dict[str, float]:
    return {name: getattr(nutrients, name) for name in NUTRIENT_FIELDS}


def _serving_option_payload(option: ServingOption) -> dict[str, object]:
    return {
        "id": str(option.id),
        "label": option.label,
        "serving_size": option.serving_size,
        "serving_unit": option.serving_unit,
        "multiplier": option.multiplier,
        "is_default": option.is_default,
    }


def _external_food_payload(food: ExternalFood) -> dict[str, object]:
    """Serialize an FDC food the way clients expect it."""
    return {
        "id": food.id,
        "fdcId": food.fdc_id,
        "name": food.name,
        "brand": food.brand,
        "serving_size": food.serving_size,
        "serving_unit": food.serving_unit,
        **_nutrient_payload(food.nutrients),
        "is_verified": food.is_verified,
        "source": food.source.value,
        "dataType": food.data_type,
    }


def _result_payload(
    food: ExternalFood | CanonicalFoodRecord | UserPrivateFoodRecord,
) -> dict[str, object]:
    """Serialize any search result."""
    if isinstance(food, ExternalFood):
        return _external_food_payload(food)
    payload: dict[str, object] = {
        "id": str(food.id),
        "name": food.name,
        "brand": food.brand,
        "serving_size": food.serving_size,
        "serving_unit": food.serving_unit,
        **_nutrient_payload(food.nutrients),
        "serving_options": [
            _serving_option_payload(option) for option in food.serving_options
        ],
    }
    if isinstance(food, UserPrivateFoodRecord):
        payload["isUserFood"] = True
        return payload
    payload["is_verified"] = food.is_verified
    payload["source"] = food.source.value
    payload["usda_fdc_id"] = food.external_id
    return payload
