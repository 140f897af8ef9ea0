"""Error types raised by the food search engine."""


class FoodSearchError(Exception):
    """Base error for food search requests."""

    status_code = 500


class QueryValidationError(FoodSearchError):
    """Search parameters were rejected."""

    status_code = 400


class ProviderNotConfiguredError(FoodSearchError):
    """The FoodData Central API key is not configured."""

    status_code = 503

    def __init__(self, message: str = "Food search service not configured") -> None:
        super().__init__(message)


class UpstreamError(FoodSearchError):
    """FoodData Central returned a failure or did not answer in time."""

    def __init__(self, status_code: int = 502, message: str | None = None) -> None:
        super().__init__(message or "Failed to fetch from food database")
        self.status_code = status_code


class FoodStoreError(Exception):
    """The local food store could not complete a write."""


class DuplicateFoodError(FoodStoreError):
    """A food with the same external id already exists."""
