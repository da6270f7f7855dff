"""Relevance scoring weights and search defaults.

Scores accumulate additively across independent signals: title, tags,
category, content blocks and recency. Each signal is skipped entirely when
the matching include_* option is off.
"""

# =============================================================================
# Title
# =============================================================================
# Only the strongest of exact / prefix / substring applies. Term hits stack
# on top of it.

TITLE_EXACT_SCORE = 100
TITLE_PREFIX_SCORE = 75
TITLE_CONTAINS_SCORE = 50
TITLE_TERM_SCORE = 20

# =============================================================================
# Tags and Category
# =============================================================================
# Tag scores are per matching tag; a query term that hits three tags adds
# three times TAG_TERM_SCORE.

TAG_PHRASE_SCORE = 30
TAG_TERM_SCORE = 10
CATEGORY_PHRASE_SCORE = 25
CATEGORY_TERM_SCORE = 8

# =============================================================================
# Content Blocks
# =============================================================================
# A phrase hit in a block adds CONTENT_PHRASE_HITS to the running counter;
# every occurrence of a term adds one. The counter is multiplied by
# CONTENT_HIT_SCORE and capped.

CONTENT_PHRASE_HITS = 2
CONTENT_HIT_SCORE = 5
CONTENT_SCORE_CAP = 40

# =============================================================================
# Recency
# =============================================================================
# Items updated within RECENCY_WINDOW_DAYS get up to RECENCY_MAX_BONUS,
# losing one point every RECENCY_DECAY_DAYS.

RECENCY_WINDOW_DAYS = 30
RECENCY_MAX_BONUS = 10
RECENCY_DECAY_DAYS = 3

# =============================================================================
# Query Handling
# =============================================================================
# Terms shorter than this are ignored for term-level matching but
# still count as part of the full phrase.

MIN_TERM_LENGTH = 3

# =============================================================================
# Collections
# =============================================================================

ARTICLES_COLLECTION = "articles"
TUTORIALS_COLLECTION = "tutorials"
SEARCHABLE_COLLECTIONS = (ARTICLES_COLLECTION, TUTORIALS_COLLECTION)
