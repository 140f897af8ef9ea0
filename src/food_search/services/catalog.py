"""Search over the shared catalog and the caller's private foods."""

import asyncio
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from food_search.domain.foods import (
    CanonicalFoodRecord,
    CatalogFood,
    SearchResultSet,
    ServingOption,
    UserPrivateFoodRecord,
)


class CatalogRepository(Protocol):
    """Read interface over the local food store."""

    def search_foods(self, query: str, limit: int) -> list[CanonicalFoodRecord]:
        """Search catalog foods by name or brand, verified first then by name."""

    def search_user_foods(
        self, user_id: UUID, query: str, limit: int
    ) -> list[UserPrivateFoodRecord]:
        """Search a user's private foods by name."""

    def list_serving_options(
        self, food_id: UUID | None = None, user_food_id: UUID | None = None
    ) -> list[ServingOption]:
        """Return serving options for a food, default first then by label."""


def merge_catalog_results(
    shared: list[CanonicalFoodRecord], private: list[UserPrivateFoodRecord]
) -> SearchResultSet:
    """Verified catalog foods are best matches; everything else follows."""
    best_match: list[CatalogFood] = [food for food in shared if food.is_verified]
    more_results: list[CatalogFood] = [*private]
    more_results.extend(food for food in shared if not food.is_verified)
    return SearchResultSet(best_match=best_match, more_results=more_results)


@dataclass
class CatalogSearchService:
    """Runs the shared and private catalog queries concurrently."""

    repository: CatalogRepository
    limit: int = 25

    @property
    def private_limit(self) -> int:
        return max(1, self.limit // 3)

    async def search(self, query: str, user_id: UUID | None = None) -> SearchResultSet:
        """Search both partitions and merge them by verification tier."""
        shared, private = await asyncio.gather(
            asyncio.to_thread(self.repository.search_foods, query, self.limit),
            self.search_private(query, user_id),
        )
        return merge_catalog_results(shared, private)

    async def search_private(
        self, query: str, user_id: UUID | None
    ) -> list[UserPrivateFoodRecord]:
        """Search the caller's private foods; anonymous callers have none."""
        if user_id is None:
            return []
        return await asyncio.to_thread(
            self.repository.search_user_foods, user_id, query, self.private_limit
        )

    def serving_options(
        self, food_id: UUID | None = None, user_food_id: UUID | None = None
    ) -> list[ServingOption]:
        """Return the serving options for a catalog or private food."""
        if food_id is None and user_food_id is None:
            return []
        return self.repository.list_serving_options(
            food_id=food_id, user_food_id=user_food_id
        )
