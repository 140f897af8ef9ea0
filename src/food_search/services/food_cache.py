"""Persist FoodData Central foods into the shared catalog."""

import logging
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from food_search.domain.errors import DuplicateFoodError, FoodStoreError
from food_search.domain.foods import CanonicalFoodRecord, FoodDraft

_logger = logging.getLogger(__name__)


class FoodCacheRepository(Protocol):
    """Persistence interface for catalog foods keyed by FDC id."""

    def find_by_external_id(self, external_id: int) -> CanonicalFoodRecord | None:
        """Return the catalog food for an FDC id, if present.

        Raises FoodStoreError when the store cannot be read.
        """

    def create_external_food(
        self, draft: FoodDraft, external_id: int
    ) -> CanonicalFoodRecord:
        """Insert a verified catalog food tagged with the FDC id.

        Raises DuplicateFoodError when the FDC id is already stored and
        FoodStoreError for any other write failure.
        """


@dataclass
class FoodCacheService:
    """Insert-or-fetch of FDC foods so repeat lookups stay local."""

    repository: FoodCacheRepository

    def get_or_create(self, draft: FoodDraft, external_id: int) -> UUID | None:
        """Return the local id for an FDC food, creating it on first use.

        Returns None when the food could not be looked up or stored; the
        search result is still usable without a local reference.
        """
        try:
            return self._get_or_create(draft, external_id)
        except FoodStoreError as exc:
            _logger.error(
                "Error caching FDC food: %s",
                exc,
                extra={"fdc_id": external_id, "food": draft.name},
            )
            return None

    def _get_or_create(self, draft: FoodDraft, external_id: int) -> UUID | None:
        existing = self.repository.find_by_external_id(external_id)
        if existing:
            return existing.id

        try:
            created = self.repository.create_external_food(draft, external_id)
        except DuplicateFoodError:
            # Another request stored it between the lookup and the insert.
            winner = self.repository.find_by_external_id(external_id)
            if winner:
                return winner.id
            _logger.warning(
                "Duplicate FDC food but no stored row found",
                extra={"fdc_id": external_id, "food": draft.name},
            )
            return None
        return created.id

    def get_cached(self, external_id: int) -> CanonicalFoodRecord | None:
        """Return the cached catalog food for an FDC id."""
        return self.repository.find_by_external_id(external_id)

    def is_cached(self, external_id: int) -> bool:
        """Return true when an FDC food has already been cached."""
        return self.repository.find_by_external_id(external_id) is not None
