"""Supabase implementation for catalog and private foods."""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

import httpx
from supabase import Client, PostgrestAPIError

from food_search.domain.errors import DuplicateFoodError, FoodStoreError
from food_search.domain.foods import (
    NUTRIENT_FIELDS,
    CanonicalFoodRecord,
    FoodDraft,
    FoodSource,
    NutrientVector,
    ServingOption,
    UserPrivateFoodRecord,
    sort_serving_options,
)
from food_search.services.catalog import CatalogRepository
from food_search.services.food_cache import FoodCacheRepository

_UNIQUE_VIOLATION = "23505"
_WITH_SERVING_OPTIONS = "*, food_serving_options(*)"


@dataclass
class SupabaseFoodRepository(FoodCacheRepository, CatalogRepository):
    """Supabase-backed repository over foods, user_foods and serving options.

    Store and transport failures surface as FoodStoreError; a unique
    violation on insert surfaces as DuplicateFoodError.
    """

    client: Client

    def find_by_external_id(self, external_id: int) -> CanonicalFoodRecord | None:
        """Return the catalog food for an FDC id, if present."""
        response = _execute(
            self.client.table("foods")
            .select("*")
            .eq("usda_fdc_id", external_id)
            .limit(1)
        )
        if not response.data:
            return None
        return _parse_food(response.data[0])

    def create_external_food(
        self, draft: FoodDraft, external_id: int
    ) -> CanonicalFoodRecord:
        """Insert a verified catalog food tagged with the FDC id."""
        payload: dict[str, object] = {
            "name": draft.name,
            "brand": draft.brand,
            "serving_size": draft.serving_size,
            "serving_unit": draft.serving_unit,
            **_nutrient_columns(draft.nutrients),
            "is_verified": True,
            "usda_fdc_id": external_id,
        }
        response = _execute(self.client.table("foods").insert(payload))
        if not response.data:
            raise FoodStoreError("Failed to create food entry")
        return _parse_food(response.data[0])

    def search_foods(self, query: str, limit: int) -> list[CanonicalFoodRecord]:
        """Search catalog foods by name or brand, verified first then by name."""
        pattern = _pattern(query)
        response = _execute(
            self.client.table("foods")
            .select(_WITH_SERVING_OPTIONS)
            .or_(f"name.ilike.{pattern},brand.ilike.{pattern}")
            .order("is_verified", desc=True)
            .order("name")
            .limit(limit)
        )
        return [_parse_food(row) for row in response.data or []]

    def search_user_foods(
        self, user_id: UUID, query: str, limit: int
    ) -> list[UserPrivateFoodRecord]:
        """Search a user's private foods by name."""
        response = _execute(
            self.client.table("user_foods")
            .select(_WITH_SERVING_OPTIONS)
            .eq("user_id", str(user_id))
            .ilike("name", _pattern(query))
            .limit(limit)
        )
        return [_parse_user_food(row) for row in response.data or []]

    def list_serving_options(
        self, food_id: UUID | None = None, user_food_id: UUID | None = None
    ) -> list[ServingOption]:
        """Return serving options for a food, default first then by label."""
        query = (
            self.client.table("food_serving_options")
            .select("*")
            .order("is_default", desc=True)
            .order("label")
        )
        if food_id is not None:
            query = query.eq("food_id", str(food_id))
        elif user_food_id is not None:
            query = query.eq("user_food_id", str(user_food_id))
        response = _execute(query)
        return [_parse_serving_option(row) for row in response.data or []]


def _execute(request: Any) -> Any:
    """Run a query builder, mapping client failures to store errors."""
    try:
        return request.execute()
    except PostgrestAPIError as exc:
        if exc.code == _UNIQUE_VIOLATION:
            raise DuplicateFoodError(str(exc.message)) from exc
        raise FoodStoreError(str(exc.message)) from exc
    except httpx.HTTPError as exc:
        raise FoodStoreError(str(exc)) from exc

def _pattern(query: str) -> str:
    """Build an ilike pattern; commas and parentheses would split an or filter."""
    cleaned = query.translate(str.maketrans(",()", "   ")).strip()
    return f"%{cleaned}%"


def _nutrient_columns(nutrients: NutrientVector) -> dict[str, float]:
    return {name: getattr(nutrients, name) for name in NUTRIENT_FIELDS}


def _parse_nutrients(row: dict[str, object]) -> NutrientVector:
    return NutrientVector(
        **{name: float(row.get(name) or 0.0) for name in NUTRIENT_FIELDS}
    )


def _parse_optional_uuid(raw: object) -> UUID | None:
    return UUID(str(raw)) if raw else None


def _parse_serving_option(row: dict[str, object]) -> ServingOption:
    """Parse a food_serving_options row."""
    return ServingOption(
        id=UUID(str(row["id"])),
        label=str(row.get("label", "")),
        serving_size=float(row.get("serving_size") or 0.0),
        serving_unit=str(row.get("serving_unit") or "g"),
        multiplier=float(row.get("multiplier") or 1.0),
        is_default=bool(row.get("is_default", False)),
        food_id=_parse_optional_uuid(row.get("food_id")),
        user_food_id=_parse_optional_uuid(row.get("user_food_id")),
    )


def _parse_serving_options(row: dict[str, object]) -> tuple[ServingOption, ...]:
    raw_options = row.get("food_serving_options") or []
    options = [_parse_serving_option(option) for option in raw_options]
    return tuple(sort_serving_options(options))


def _parse_food(row: dict[str, object]) -> CanonicalFoodRecord:
    """Parse a foods row into a domain model."""
    external_id = row.get("usda_fdc_id")
    return CanonicalFoodRecord(
        id=UUID(str(row["id"])),
        name=str(row.get("name", "")),
        brand=row.get("brand"),
        serving_size=float(row.get("serving_size") or 0.0),
        serving_unit=str(row.get("serving_unit") or "g"),
        nutrients=_parse_nutrients(row),
        is_verified=bool(row.get("is_verified", False)),
        external_id=int(external_id) if external_id is not None else None,
        source=FoodSource.USDA if external_id is not None else FoodSource.INTERNAL,
        serving_options=_parse_serving_options(row),
    )


def _parse_user_food(row: dict[str, object]) -> UserPrivateFoodRecord:
    """Parse a user_foods row into a domain model."""
    return UserPrivateFoodRecord(
        id=UUID(str(row["id"])),
        user_id=UUID(str(row["user_id"])),
        name=str(row.get("name", "")),
        brand=row.get("brand"),
        serving_size=float(row.get("serving_size") or 0.0),
        serving_unit=str(row.get("serving_unit") or "g"),
        nutrients=_parse_nutrients(row),
        serving_options=_parse_serving_options(row),
    )
