"""Ordering and filtering of scored search results."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import UTC, datetime

from kbsearch.search.schemas import SearchResult, SortBy

# Items with no readable timestamp sort as the oldest.
_OLDEST = datetime.min.replace(tzinfo=UTC)


def _date_key(result: SearchResult) -> datetime:
    return result.item.timestamp or _OLDEST


def _title_key(result: SearchResult) -> tuple[str, str]:
    # Case-insensitive first, then by the original spelling so "apple" and
    # "Apple" still have a fixed order.
    title = result.item.title
    return (title.casefold(), title)


def sort_results(results: Sequence[SearchResult], sort_by: SortBy | str) -> list[SearchResult]:
    """Return a new list of results in the requested order.

    - relevance: highest score first
    - date: most recently updated (or created) first
    - title: alphabetical, case-insensitive

    Sorting is stable, so ties keep their input order.
    """
    sort_by = SortBy(sort_by)
    if sort_by is SortBy.RELEVANCE:
        return sorted(results, key=lambda r: r.score, reverse=True)
    if sort_by is SortBy.DATE:
        return sorted(results, key=_date_key, reverse=True)
    return sorted(results, key=_title_key)


def filter_by_tags(
    results: Sequence[SearchResult], tags: Iterable[str] | None
) -> Sequence[SearchResult]:
    """Keep results whose item carries at least one of the given tags.

    Tag comparison is exact. With no tags the input is returned as is.
    """
    wanted = set(tags or ())
    if not wanted:
        return results
    return [result for result in results if wanted.intersection(result.item.tags)]


def tag_facets(results: Iterable[SearchResult]) -> list[str]:
    """Distinct tags across the results, in the order they first appear."""
    seen: dict[str, None] = {}
    for result in results:
        for tag in result.item.tags:
            seen.setdefault(tag, None)
    return list(seen)
