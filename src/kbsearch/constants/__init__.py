"""Configuration constants.

Re-exports all constants for convenient importing:
    from kbsearch.constants import TITLE_EXACT_SCORE, CONTENT_SCORE_CAP
"""

from kbsearch.constants.search import *  # noqa: F403
