"""Search service: fetch, filter, score, sort, cache.

Candidates are read in full from the article and tutorial collections on
every uncached search and scored in process. There is no index; the cost of
a search grows linearly with the size of the collections.
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import datetime
from typing import Any, Callable, Optional

from kbsearch.constants.search import ARTICLES_COLLECTION, TUTORIALS_COLLECTION
from kbsearch.search.cache import SearchCache, make_cache_key
from kbsearch.search.pagination import decode_cursor, slice_page
from kbsearch.search.ranking import filter_by_tags, sort_results
from kbsearch.search.schemas import (
    ContentItem,
    SearchOptions,
    SearchOutcome,
    SearchPage,
    SearchResult,
)
from kbsearch.search.scoring import matches_exactly, score_item
from kbsearch.store.base import DocumentStore, EqualityFilter, StoreError, to_item

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 2
MIN_SCORE = 10
SUGGESTION_LIMIT = 5


class SearchService:
    """Relevance search over the article and tutorial collections.

    Args:
        store: Document store to read candidates from.
        cache: Result cache shared by every search this service runs.
        default_options: Options that per-call options are merged over.
        min_query_length: Shorter queries return nothing without a fetch.
        min_score: Results scoring at or below this are dropped.
        now: Clock for the recency bonus; defaults to wall-clock time.
    """

    def __init__(
        self,
        store: DocumentStore,
        cache: SearchCache | None = None,
        default_options: SearchOptions | None = None,
        min_query_length: int = MIN_QUERY_LENGTH,
        min_score: int = MIN_SCORE,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._store = store
        self._cache = cache if cache is not None else SearchCache()
        self._defaults = default_options or SearchOptions()
        self._min_query_length = min_query_length
        self._min_score = min_score
        self._now = now

    @property
    def cache(self) -> SearchCache:
        return self._cache

    @property
    def default_options(self) -> SearchOptions:
        return self._defaults

    @property
    def min_query_length(self) -> int:
        return self._min_query_length

    def resolve_options(self, options: SearchOptions | dict[str, Any] | None) -> SearchOptions:
        """Merge caller options over the service defaults.

        Only fields the caller actually set override the defaults.
        """
        if options is None:
            return self._defaults
        if isinstance(options, SearchOptions):
            overrides = options.model_dump(exclude_unset=True)
        else:
            overrides = SearchOptions.model_validate(options).model_dump(exclude_unset=True)
        return self._defaults.model_validate({**self._defaults.model_dump(), **overrides})

    def _is_too_short(self, query: str | None) -> bool:
        return not query or len(query.strip()) < self._min_query_length

    async def _fetch_items(self, options: SearchOptions) -> list[ContentItem]:
        equality_filter = (
            EqualityFilter("category", options.filter_category)
            if options.filter_category
            else None
        )
        articles, tutorials = await asyncio.gather(
            self._store.fetch_all(ARTICLES_COLLECTION, equality_filter),
            self._store.fetch_all(TUTORIALS_COLLECTION, equality_filter),
        )

        items: list[ContentItem] = []
        for collection, records in (
            (ARTICLES_COLLECTION, articles),
            (TUTORIALS_COLLECTION, tutorials),
        ):
            for record in records:
                item = to_item(record, collection)
                if item is not None:
                    items.append(item)
        return items

    def _score_items(
        self, items: list[ContentItem], query: str, options: SearchOptions
    ) -> list[SearchResult]:
        now = self._now() if self._now else None
        results: list[SearchResult] = []
        for item in items:
            if options.published_only and not item.is_published():
                continue
            if options.exact_match and not matches_exactly(item, query):
                continue
            score = score_item(item, query, options, now=now)
            if score > self._min_score:
                results.append(SearchResult(item=item, score=score, type=item.type))
        return results

    async def search(
        self, query: str, options: SearchOptions | dict[str, Any] | None = None
    ) -> SearchOutcome:
        """Search articles and tutorials.

        Queries shorter than the minimum length return an empty success
        without touching the store or the cache. Store failures come back as
        a failed outcome and are not cached.

        Args:
            query: Query text.
            options: Per-call options merged over the service defaults.

        Returns:
            SearchOutcome holding results sorted and truncated per the options.
        """
        if self._is_too_short(query):
            return SearchOutcome()

        query_text = query.strip().lower()
        merged = self.resolve_options(options)
        key = make_cache_key(query_text, merged)

        entry = self._cache.get(key)
        if entry is not None:
            logger.debug(f"Using cached search results for {query!r}")
            return SearchOutcome(results=list(entry.results), cached=True)

        start = time.perf_counter()
        try:
            items = await self._fetch_items(merged)
        except StoreError as e:
            logger.error(f"Search for {query!r} failed: {e}")
            return SearchOutcome.failure(str(e))

        results = self._score_items(items, query_text, merged)
        matched = len(results)
        results = list(filter_by_tags(results, merged.filter_tags))
        limited = sort_results(results, merged.sort_by)[: merged.limit]
        self._cache.put(key, limited)

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"Search: found {matched} result(s) for {query!r} "
            f"(showing {len(limited)}) in {elapsed_ms:.1f}ms"
        )
        return SearchOutcome(results=limited, elapsed_ms=elapsed_ms)

    async def suggest(self, query: str, limit: int = SUGGESTION_LIMIT) -> list[str]:
        """Suggest tags containing the query.

        Tags are collected across both collections in scan order, without
        duplicates. Suggestions are never cached. A store failure is logged
        and yields no suggestions.
        """
        if not query or len(query) < self._min_query_length:
            return []

        lowered = query.lower()
        try:
            articles, tutorials = await asyncio.gather(
                self._store.fetch_all(ARTICLES_COLLECTION),
                self._store.fetch_all(TUTORIALS_COLLECTION),
            )
        except StoreError as e:
            logger.error(f"Loading search suggestions for {query!r} failed: {e}")
            return []

        suggestions: dict[str, None] = {}
        for record in [*articles, *tutorials]:
            tags = record.get("tags")
            if not isinstance(tags, list):
                continue
            for tag in tags:
                if isinstance(tag, str) and lowered in tag.lower():
                    suggestions.setdefault(tag, None)
        return list(suggestions)[:limit]

    async def paginated_search(
        self,
        query: str,
        cursor: str | None = None,
        page_size: int = 10,
        options: SearchOptions | dict[str, Any] | None = None,
    ) -> SearchPage:
        """Return one page of a full search.

        The full result list is capped by `options.limit`, so pages past that
        ceiling are never reached.

        Raises:
            InvalidCursorError: If the cursor was not issued by this service.
        """
        offset = decode_cursor(cursor)
        if self._is_too_short(query):
            return SearchPage()

        outcome = await self.search(query, options)
        if not outcome.ok:
            return SearchPage(error=outcome.error)

        start, end, next_cursor = slice_page(len(outcome.results), offset, page_size)
        return SearchPage(results=outcome.results[start:end], next_cursor=next_cursor)

    def clear_cache(self) -> None:
        """Drop every cached search result."""
        removed = self._cache.clear()
        logger.info(f"Search cache cleared ({removed} entries)")
