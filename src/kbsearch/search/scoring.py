"""Relevance scoring for a single content item against a query."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import Optional

from kbsearch.constants.search import (
    CATEGORY_PHRASE_SCORE,
    CATEGORY_TERM_SCORE,
    CONTENT_HIT_SCORE,
    CONTENT_PHRASE_HITS,
    CONTENT_SCORE_CAP,
    MIN_TERM_LENGTH,
    RECENCY_DECAY_DAYS,
    RECENCY_MAX_BONUS,
    RECENCY_WINDOW_DAYS,
    TAG_PHRASE_SCORE,
    TAG_TERM_SCORE,
    TITLE_CONTAINS_SCORE,
    TITLE_EXACT_SCORE,
    TITLE_PREFIX_SCORE,
    TITLE_TERM_SCORE,
)
from kbsearch.search.schemas import ContentItem, ItemType, SearchOptions

DEFAULT_OPTIONS = SearchOptions()


def query_terms(query: str) -> list[str]:
    """Split a lowercased query into the terms used for term-level matching."""
    return [term for term in query.lower().split() if len(term) >= MIN_TERM_LENGTH]


def _title_score(title: str, query: str, terms: list[str]) -> int:
    score = 0
    if title == query:
        score += TITLE_EXACT_SCORE
    elif title.startswith(query):
        score += TITLE_PREFIX_SCORE
    elif query in title:
        score += TITLE_CONTAINS_SCORE

    score += TITLE_TERM_SCORE * sum(1 for term in terms if term in title)
    return score


def _tag_score(tags: list[str], query: str, terms: list[str]) -> int:
    lowered = [tag.lower() for tag in tags]
    score = TAG_PHRASE_SCORE * sum(1 for tag in lowered if query in tag)
    for term in terms:
        score += TAG_TERM_SCORE * sum(1 for tag in lowered if term in tag)
    return score


def _category_score(category: str, query: str, terms: list[str]) -> int:
    score = CATEGORY_PHRASE_SCORE if query in category else 0
    score += CATEGORY_TERM_SCORE * sum(1 for term in terms if term in category)
    return score


def _content_score(texts: list[str], query: str, terms: list[str]) -> int:
    hits = 0
    for text in texts:
        lowered = text.lower()
        if query in lowered:
            hits += CONTENT_PHRASE_HITS
        for term in terms:
            # Terms are matched as patterns; one that does not compile is
            # counted literally.
            try:
                hits += len(re.findall(term, lowered, flags=re.IGNORECASE))
            except re.error:
                hits += lowered.count(term)
    return min(hits * CONTENT_HIT_SCORE, CONTENT_SCORE_CAP)


def recency_bonus(updated_at: Optional[datetime], now: Optional[datetime] = None) -> int:
    """Bonus for recently updated content.

    Worth RECENCY_MAX_BONUS on the day of the update, one point less every
    RECENCY_DECAY_DAYS, and nothing once the item is RECENCY_WINDOW_DAYS old.
    """
    if updated_at is None:
        return 0
    now = now or datetime.now(UTC)
    age_days = (now - updated_at).total_seconds() // 86_400
    if age_days >= RECENCY_WINDOW_DAYS:
        return 0
    # Future timestamps floor to a negative age and would exceed the maximum.
    return max(0, min(RECENCY_MAX_BONUS, RECENCY_MAX_BONUS - int(age_days // RECENCY_DECAY_DAYS)))


def score_item(
    item: ContentItem,
    query: str,
    options: SearchOptions = DEFAULT_OPTIONS,
    now: Optional[datetime] = None,
) -> int:
    """Score how well an item matches a query.

    Signals accumulate additively: title, tags, category, content blocks
    and a recency bonus. A signal is skipped when its include_* option is
    off or the item has nothing to match against.

    Args:
        item: Item to score.
        query: Raw query text; matching is case-insensitive.
        options: Which signals contribute.
        now: Reference time for the recency bonus (defaults to current time).

    Returns:
        Non-negative relevance score.
    """
    lowered = query.lower()
    terms = query_terms(lowered)
    score = 0

    if options.include_title and item.title:
        score += _title_score(item.title.lower(), lowered, terms)

    if options.include_tags and item.tags:
        score += _tag_score(item.tags, lowered, terms)

    if options.include_category and item.category:
        score += _category_score(item.category.lower(), lowered, terms)

    if options.include_content and item.blocks:
        score += _content_score([block.content for block in item.blocks], lowered, terms)

    score += recency_bonus(item.updated_at, now)
    return score


def matches_exactly(item: ContentItem, query: str) -> bool:
    """Whether the full query appears in the title, a tag or a content block.

    Tutorials are also matched on their description.
    """
    lowered = query.lower()
    if lowered in item.title.lower():
        return True
    if item.type is ItemType.TUTORIAL and item.description and lowered in item.description.lower():
        return True
    if any(lowered in tag.lower() for tag in item.tags):
        return True
    return any(lowered in block.content.lower() for block in item.blocks)
