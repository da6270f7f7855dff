"""Debounced, interactive search for type-ahead UIs."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from kbsearch.search.ranking import filter_by_tags, sort_results
from kbsearch.search.schemas import SearchOptions, SearchOutcome, SearchResult, SortBy
from kbsearch.search.service import SearchService

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


class SearchState(str, Enum):
    """Where the current query is in its lifecycle."""

    IDLE = "idle"
    DEBOUNCING = "debouncing"
    FETCHING = "fetching"
    SETTLED = "settled"
    FAILED = "failed"


@dataclass
class SearchSnapshot:
    """Consumer-visible state of a controller."""

    query: str = ""
    state: SearchState = SearchState.IDLE
    results: list[SearchResult] = field(default_factory=list)
    error: Optional[str] = None
    search_time_ms: Optional[float] = None

    @property
    def loading(self) -> bool:
        return self.state is SearchState.FETCHING


class SearchController:
    """Runs searches as the user types.

    Each keystroke cancels the pending debounce timer and starts a new one.
    Fetches already in flight are never cancelled; every search carries a
    token and only the response for the latest token is applied, so a slow
    response for an old query cannot overwrite newer results.
    """

    def __init__(
        self,
        service: SearchService,
        options: SearchOptions | dict[str, Any] | None = None,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        enabled: bool = True,
    ) -> None:
        self._service = service
        self._options = options
        self._debounce = debounce
        self._enabled = enabled
        self._snapshot = SearchSnapshot()
        self._token = 0
        self._debounce_task: asyncio.Task[None] | None = None
        self._fetches: set[asyncio.Task[Any]] = set()

    @property
    def service(self) -> SearchService:
        return self._service

    @property
    def debounce(self) -> float:
        """Seconds to wait after the last keystroke before searching."""
        return self._debounce

    @property
    def snapshot(self) -> SearchSnapshot:
        return self._snapshot

    @property
    def query(self) -> str:
        return self._snapshot.query

    @property
    def results(self) -> list[SearchResult]:
        return self._snapshot.results

    @property
    def state(self) -> SearchState:
        return self._snapshot.state

    def _next_token(self) -> int:
        self._token += 1
        return self._token

    def _cancel_debounce(self) -> None:
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = None

    def _too_short(self, query: str) -> bool:
        return not query or len(query.strip()) < self._service.min_query_length

    def set_query(self, query: str) -> None:
        """Record a keystroke and schedule a debounced search.

        Must be called from a running event loop.
        """
        self._cancel_debounce()
        token = self._next_token()
        self._snapshot.query = query

        if not self._enabled or self._too_short(query):
            self._snapshot.state = SearchState.IDLE
            self._snapshot.results = []
            self._snapshot.error = None
            return

        self._snapshot.state = SearchState.DEBOUNCING
        self._debounce_task = asyncio.get_running_loop().create_task(
            self._debounce_then_search(token, query)
        )

    async def _debounce_then_search(self, token: int, query: str) -> None:
        await asyncio.sleep(self._debounce)
        # Hand the fetch to its own task so a later keystroke, which cancels
        # the debounce task, leaves it running.
        fetch = asyncio.get_running_loop().create_task(self._run(token, query, None))
        self._fetches.add(fetch)
        fetch.add_done_callback(self._fetches.discard)

    async def _run(
        self, token: int, query: str, options: SearchOptions | dict[str, Any] | None
    ) -> list[SearchResult]:
        if token == self._token:
            self._snapshot.state = SearchState.FETCHING
            self._snapshot.error = None

        start = time.perf_counter()
        merged = self._merge_options(options)
        try:
            outcome = await self._service.search(query, merged)
        except Exception as e:
            # Keep the UI responsive whatever the service raises.
            logger.exception(f"Search for {query!r} raised")
            outcome = SearchOutcome.failure(str(e) or type(e).__name__)
        elapsed_ms = (time.perf_counter() - start) * 1000

        if token != self._token:
            logger.debug(f"Discarding stale results for {query!r}")
            return outcome.results

        self._snapshot.search_time_ms = elapsed_ms
        if outcome.ok:
            self._snapshot.results = outcome.results
            self._snapshot.state = SearchState.SETTLED
        else:
            self._snapshot.results = []
            self._snapshot.error = outcome.error
            self._snapshot.state = SearchState.FAILED
        return outcome.results

    def _merge_options(
        self, options: SearchOptions | dict[str, Any] | None
    ) -> SearchOptions | dict[str, Any] | None:
        if options is None:
            return self._options
        base = self._service.resolve_options(self._options)
        extra = (
            options.model_dump(exclude_unset=True)
            if isinstance(options, SearchOptions)
            else dict(options)
        )
        return base.merged(**extra)

    async def search(
        self, query: str, options: SearchOptions | dict[str, Any] | None = None
    ) -> list[SearchResult]:
        """Search immediately, bypassing the debounce timer.

        The query becomes the current query; per-call options are merged
        over the controller's options.
        """
        self._cancel_debounce()
        token = self._next_token()
        self._snapshot.query = query
        if self._too_short(query):
            self._snapshot.results = []
            self._snapshot.state = SearchState.IDLE
            return []
        return await self._run(token, query, options)

    async def wait_idle(self) -> None:
        """Wait for the pending debounce timer and every in-flight fetch."""
        while True:
            pending: list[asyncio.Task[Any]] = [t for t in self._fetches if not t.done()]
            if self._debounce_task is not None and not self._debounce_task.done():
                pending.append(self._debounce_task)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def close(self) -> None:
        """Cancel the pending debounce timer; in-flight fetches finish on their own."""
        self._cancel_debounce()

    def filter_by_tags(self, tags: list[str] | None) -> list[SearchResult]:
        """Current results narrowed to those carrying any of the tags."""
        return list(filter_by_tags(self._snapshot.results, tags))

    def sort(self, sort_by: SortBy | str) -> list[SearchResult]:
        """Current results in another order."""
        return sort_results(self._snapshot.results, sort_by)
