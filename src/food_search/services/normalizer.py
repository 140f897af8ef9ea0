"""Map FoodData Central nutrients onto the canonical nutrient vector."""

from collections.abc import Iterable, Mapping

from food_search.domain.foods import NUTRIENT_FIELDS, NutrientVector

NUTRIENT_MAP: dict[int, str] = {
    1008: "calories",  # Energy (kcal)
    1003: "protein_g",
    1005: "carbs_g",  # Carbohydrate, by difference
    1004: "fat_g",  # Total lipid
    1079: "fiber_g",
    2000: "sugar_g",
    1093: "sodium_mg",
    1258: "saturated_fat_g",
    1253: "cholesterol_mg",
    1092: "potassium_mg",
}


def normalize(raw_nutrients: Iterable[Mapping[str, object]]) -> NutrientVector:
    """Build a nutrient vector from raw FDC nutrient entries.

    Search results carry ``nutrientId``/``value`` while food details nest the
    id under ``nutrient`` and use ``amount``; both are accepted. Unknown ids
    are skipped and a repeated id overwrites the earlier value.
    """
    values: dict[str, float] = dict.fromkeys(NUTRIENT_FIELDS, 0.0)
    for entry in raw_nutrients:
        field_name = NUTRIENT_MAP.get(_nutrient_id(entry))
        if field_name is None:
            continue
        values[field_name] = _amount(entry)
    return NutrientVector(**values)


def _nutrient_id(entry: Mapping[str, object]) -> int | None:
    nutrient_info = entry.get("nutrient")
    raw_id = entry.get("nutrientId")
    if raw_id is None and isinstance(nutrient_info, Mapping):
        raw_id = nutrient_info.get("id")
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        return None


def _amount(entry: Mapping[str, object]) -> float:
    raw = entry.get("value")
    if raw is None:
        raw = entry.get("amount")
    try:
        return float(raw) if raw is not None else 0.0
    except (TypeError, ValueError):
        return 0.0
