"""Shared pytest fixtures for all tests."""

import pytest

from kbsearch.search.cache import SearchCache
from kbsearch.search.service import SearchService
from kbsearch.store.memory import InMemoryDocumentStore

from factories import NOW, FakeClock, make_article, make_tutorial


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    """Store holding the two-item SEO example plus unrelated content."""
    return InMemoryDocumentStore(
        {
            "articles": [
                make_article(
                    "a1",
                    "WordPress SEO Guide",
                    tags=["seo", "wordpress"],
                    category="seo",
                ),
                make_article("a2", "Shopify Themes", tags=["shopify"], category="shopify"),
            ],
            "tutorials": [
                make_tutorial("t1", "Intro to SEO", tags=["seo"], category="general"),
            ],
        }
    )


@pytest.fixture
def service(store, clock):
    """Search service over the sample store with a fake cache clock."""
    return SearchService(store, cache=SearchCache(ttl=300, clock=clock), now=lambda: NOW)
