"""Pydantic models for food API payloads."""

from pydantic import BaseModel, ConfigDict, Field


class CachedFoodRequest(BaseModel):
    """A food from a search response, selected for caching."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    fdc_id: int = Field(alias="fdcId")
    name: str = Field(min_length=1)
    brand: str | None = None
    serving_size: float = Field(default=100, gt=0)
    serving_unit: str = "g"
    calories: float = 0
    protein_g: float = 0
    carbs_g: float = 0
    fat_g: float = 0
    fiber_g: float = 0
    sugar_g: float = 0
    sodium_mg: float = 0
    saturated_fat_g: float = 0
    cholesterol_mg: float = 0
    potassium_mg: float = 0


class CachedFoodResponse(BaseModel):
    """Result of caching a food locally."""

    model_config = ConfigDict(populate_by_name=True)

    food_id: str | None = Field(serialization_alias="foodId")
    cached: bool
