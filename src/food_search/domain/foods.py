"""Food domain models shared by the search, cache and catalog services."""

from dataclasses import dataclass, field
from enum import StrEnum
from uuid import UUID


class FoodSource(StrEnum):
    """Where a food record originated."""

    INTERNAL = "internal"
    USDA = "usda"


@dataclass(frozen=True)
class NutrientVector:
    """Canonical nutrient values for one serving."""

    calories: float = 0.0
    protein_g: float = 0.0
    carbs_g: float = 0.0
    fat_g: float = 0.0
    fiber_g: float = 0.0
    sugar_g: float = 0.0
    sodium_mg: float = 0.0
    saturated_fat_g: float = 0.0
    cholesterol_mg: float = 0.0
    potassium_mg: float = 0.0


NUTRIENT_FIELDS: tuple[str, ...] = (
    "calories",
    "protein_g",
    "carbs_g",
    "fat_g",
    "fiber_g",
    "sugar_g",
    "sodium_mg",
    "saturated_fat_g",
    "cholesterol_mg",
    "potassium_mg",
)


@dataclass(frozen=True)
class ServingOption:
    """Named alternate serving size attached to a food."""

    id: UUID
    label: str
    serving_size: float
    serving_unit: str
    multiplier: float
    is_default: bool
    food_id: UUID | None = None
    user_food_id: UUID | None = None


def sort_serving_options(options: list[ServingOption]) -> list[ServingOption]:
    """Order serving options with the default first, then by label."""
    return sorted(options, key=lambda option: (not option.is_default, option.label))


@dataclass(frozen=True)
class FoodDraft:
    """Descriptive fields used to create a canonical food record."""

    name: str
    brand: str | None
    serving_size: float
    serving_unit: str
    nutrients: NutrientVector


@dataclass(frozen=True)
class ExternalFood:
    """A normalized FoodData Central search hit."""

    id: str
    fdc_id: int
    name: str
    brand: str | None
    serving_size: float
    serving_unit: str
    nutrients: NutrientVector
    data_type: str | None
    is_verified: bool = True
    source: FoodSource = FoodSource.USDA

    def to_draft(self) -> FoodDraft:
        """Return the fields needed to persist this food locally."""
        return FoodDraft(
            name=self.name,
            brand=self.brand,
            serving_size=self.serving_size,
            serving_unit=self.serving_unit,
            nutrients=self.nutrients,
        )


@dataclass(frozen=True)
class CanonicalFoodRecord:
    """Food stored in the shared catalog."""

    id: UUID
    name: str
    brand: str | None
    serving_size: float
    serving_unit: str
    nutrients: NutrientVector
    is_verified: bool
    external_id: int | None = None
    source: FoodSource = FoodSource.INTERNAL
    serving_options: tuple[ServingOption, ...] = ()


@dataclass(frozen=True)
class UserPrivateFoodRecord:
    """Food created by a single user, visible only to them."""

    id: UUID
    user_id: UUID
    name: str
    brand: str | None
    serving_size: float
    serving_unit: str
    nutrients: NutrientVector
    serving_options: tuple[ServingOption, ...] = ()


CatalogFood = CanonicalFoodRecord | UserPrivateFoodRecord


@dataclass(frozen=True)
class SearchResultSet:
    """Local search results split by confidence tier."""

    best_match: list[CatalogFood] = field(default_factory=list)
    more_results: list[CatalogFood] = field(default_factory=list)

    @property
    def total_count(self) -> int:
        return len(self.best_match) + len(self.more_results)


@dataclass(frozen=True)
class ExternalSearchPage:
    """One page of normalized FoodData Central results."""

    foods: list[ExternalFood]
    best_match: list[ExternalFood | UserPrivateFoodRecord]
    more_results: list[ExternalFood | UserPrivateFoodRecord]
    total_hits: int
    current_page: int
    total_pages: int
