"""Tests for caching FDC foods locally."""

import logging
from dataclasses import dataclass

from food_search.domain.errors import DuplicateFoodError, FoodStoreError
from food_search.domain.foods import CanonicalFoodRecord, FoodDraft, NutrientVector
from food_search.services.food_cache import FoodCacheService
from tests.conftest import InMemoryFoodRepository


def _draft(calories: float = 165) -> FoodDraft:
    return FoodDraft(
        name="Chicken breast",
        brand=None,
        serving_size=100,
        serving_unit="g",
        nutrients=NutrientVector(calories=calories, protein_g=31),
    )


def test_get_or_create_inserts_verified_record() -> None:
    repository = InMemoryFoodRepository()
    service = FoodCacheService(repository)

    food_id = service.get_or_create(_draft(), 12345)

    stored = repository.foods[food_id]
    assert stored.is_verified
    assert stored.external_id == 12345
    assert stored.nutrients.protein_g == 31


def test_get_or_create_is_idempotent() -> None:
    repository = InMemoryFoodRepository()
    service = FoodCacheService(repository)

    first = service.get_or_create(_draft(calories=165), 12345)
    second = service.get_or_create(_draft(calories=999), 12345)

    assert first == second
    assert len(repository.foods) == 1
    assert repository.inserts == 1
    assert repository.foods[first].nutrients.calories == 165


def test_duplicate_insert_refetches_existing_row() -> None:
    @dataclass
    class RacingRepository(InMemoryFoodRepository):
        """Another writer stores the food right after our lookup."""

        raced: bool = False

        def find_by_external_id(self, external_id: int) -> CanonicalFoodRecord | None:
            found = super().find_by_external_id(external_id)
            if found is None and not self.raced:
                self.raced = True
                super().create_external_food(_draft(), external_id)
                return None
            return found

    repository = RacingRepository()
    service = FoodCacheService(repository)

    food_id = service.get_or_create(_draft(), 777)

    assert food_id is not None
    assert len(repository.foods) == 1
    assert repository.foods[food_id].external_id == 777


def test_store_failure_returns_none_and_logs(caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("food_search"), "propagate", True)
    repository = InMemoryFoodRepository(insert_error=FoodStoreError("connection reset"))
    service = FoodCacheService(repository)

    with caplog.at_level(logging.ERROR, logger="food_search.services.food_cache"):
        food_id = service.get_or_create(_draft(), 42)

    assert food_id is None
    assert repository.foods == {}
    record = caplog.records[0]
    assert record.fdc_id == 42
    assert record.food == "Chicken breast"


def test_duplicate_without_row_returns_none() -> None:
    repository = InMemoryFoodRepository(insert_error=DuplicateFoodError("dup"))
    service = FoodCacheService(repository)

    assert service.get_or_create(_draft(), 5) is None


def test_get_cached_and_is_cached() -> None:
    repository = InMemoryFoodRepository()
    service = FoodCacheService(repository)

    assert not service.is_cached(12345)
    food_id = service.get_or_create(_draft(), 12345)

    assert service.is_cached(12345)
    cached = service.get_cached(12345)
    assert cached is not None
    assert cached.id == food_id


def test_lookup_failure_returns_none_and_logs(caplog, monkeypatch) -> None:
    monkeypatch.setattr(logging.getLogger("food_search"), "propagate", True)
    repository = InMemoryFoodRepository(lookup_error=FoodStoreError("store unreachable"))
    service = FoodCacheService(repository)

    with caplog.at_level(logging.ERROR, logger="food_search.services.food_cache"):
        food_id = service.get_or_create(_draft(), 42)

    assert food_id is None
    assert repository.inserts == 0
    record = caplog.records[0]
    assert record.fdc_id == 42
    assert record.food == "Chicken breast"


def test_refetch_failure_after_duplicate_returns_none() -> None:
    @dataclass
    class FailingRefetchRepository(InMemoryFoodRepository):
        """The insert loses the race and the follow-up read fails."""

        lookups: int = 0

        def find_by_external_id(self, external_id: int) -> CanonicalFoodRecord | None:
            self.lookups += 1
            if self.lookups > 1:
                raise FoodStoreError("connection reset")
            return None

    repository = FailingRefetchRepository(insert_error=DuplicateFoodError("dup"))
    service = FoodCacheService(repository)

    assert service.get_or_create(_draft(), 9) is None
    assert repository.lookups == 2
