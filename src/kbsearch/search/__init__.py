"""Relevance search core.

Scoring, ordering and caching are pure and synchronous; the service and
controller are async because they read from the document store.
"""

from kbsearch.search.cache import SearchCache
from kbsearch.search.ranking import filter_by_tags, sort_results, tag_facets
from kbsearch.search.schemas import (
    ContentBlock,
    ContentItem,
    ItemType,
    SearchOptions,
    SearchOutcome,
    SearchPage,
    SearchResult,
    SortBy,
)
from kbsearch.search.scoring import score_item

__all__ = [
    "ContentBlock",
    "ContentItem",
    "ItemType",
    "SearchCache",
    "SearchOptions",
    "SearchOutcome",
    "SearchPage",
    "SearchResult",
    "SortBy",
    "filter_by_tags",
    "score_item",
    "sort_results",
    "tag_facets",
]
