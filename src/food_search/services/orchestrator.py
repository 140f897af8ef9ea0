"""Debounced, cancellable search-as-you-type over the local catalog."""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from food_search.domain.foods import SearchResultSet

_logger = logging.getLogger(__name__)


class CatalogSearcher(Protocol):
    """Anything that can run one catalog lookup."""

    async def search(self, query: str, user_id: UUID | None = None) -> SearchResultSet:
        """Return merged catalog results for a query."""


@dataclass
class SearchOrchestrator:
    """Drives catalog lookups from query changes.

    Each keystroke restarts the debounce timer. When the timer fires, the
    previous lookup is cancelled and a new one starts with the next sequence
    number; its results are applied only if no newer lookup or clear has
    happened since. Must be used from a running event loop.
    """

    catalog: CatalogSearcher
    user_id: UUID | None = None
    debounce_seconds: float = 0.3
    min_query_length: int = 2
    results: SearchResultSet = field(default_factory=SearchResultSet, init=False)
    error: Exception | None = field(default=None, init=False)
    is_searching: bool = field(default=False, init=False)
    _sequence: int = field(default=0, init=False)
    _debounce_task: asyncio.Task[None] | None = field(default=None, init=False)
    _lookup_task: asyncio.Task[None] | None = field(default=None, init=False)
    _closed: bool = field(default=False, init=False)

    def on_query_change(self, text: str) -> None:
        """Handle a new query value."""
        if self._closed:
            return
        _cancel(self._debounce_task)
        if len(text) < self.min_query_length:
            self.clear_results()
            return
        self._debounce_task = asyncio.get_running_loop().create_task(
            self._debounce(text)
        )

    def get_results(self) -> SearchResultSet:
        """Return the results of the freshest completed lookup."""
        return self.results

    def clear_results(self) -> None:
        """Drop current results and discard any lookup still running."""
        self._sequence += 1
        _cancel(self._lookup_task)
        self.results = SearchResultSet()
        self.is_searching = False

    async def wait(self) -> None:
        """Wait until no debounce timer or lookup is pending."""
        while True:
            pending = [
                task
                for task in (self._debounce_task, self._lookup_task)
                if task is not None and not task.done()
            ]
            if not pending:
                return
            await asyncio.wait(pending)

    def close(self) -> None:
        """Cancel outstanding work; later query changes are ignored."""
        self._closed = True
        self._sequence += 1
        _cancel(self._debounce_task)
        _cancel(self._lookup_task)
        self.is_searching = False

    async def _debounce(self, text: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._start_lookup(text)

    def _start_lookup(self, text: str) -> None:
        _cancel(self._lookup_task)
        self._sequence += 1
        self.is_searching = True
        self.error = None
        self._lookup_task = asyncio.get_running_loop().create_task(
            self._lookup(text, self._sequence)
        )

    async def _lookup(self, text: str, sequence: int) -> None:
        try:
            results = await self.catalog.search(text, self.user_id)
        except Exception as exc:
            if self._is_current(sequence):
                self.error = exc
                self.is_searching = False
            _logger.exception("Catalog search failed", extra={"query": text})
            return
        if not self._is_current(sequence):
            return
        self.results = results
        self.is_searching = False

    def _is_current(self, sequence: int) -> bool:
        return not self._closed and sequence == self._sequence


def _cancel(task: asyncio.Task[None] | None) -> None:
    if task is not None and not task.done():
        task.cancel()
