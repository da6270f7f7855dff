"""Search service tests: filtering, scoring floor, caching, suggestions, pages."""

import pytest

from kbsearch.search.cache import SearchCache
from kbsearch.search.pagination import InvalidCursorError
from kbsearch.search.schemas import ItemType, SearchOptions, SortBy
from kbsearch.search.service import SearchService
from kbsearch.store.memory import InMemoryDocumentStore

from factories import NOW, FakeClock, make_article, make_tutorial


def ids(results) -> list[str]:
    return [r.item.id for r in results]


def service_for(store: InMemoryDocumentStore, **kwargs) -> SearchService:
    kwargs.setdefault("cache", SearchCache(ttl=300, clock=FakeClock()))
    return SearchService(store, now=lambda: NOW, **kwargs)


class TestSearch:
    """Tests for SearchService.search."""

    async def test_ranks_article_above_tutorial(self, service):
        outcome = await service.search("seo", {"sort_by": "relevance"})

        assert outcome.ok
        assert ids(outcome.results) == ["a1", "t1"]
        assert [r.type for r in outcome.results] == [ItemType.ARTICLE, ItemType.TUTORIAL]
        # Title contains (50) + term (20) + tag (30) + tag term (10), plus the
        # article's category match (25 + 8)
        assert [r.score for r in outcome.results] == [143, 110]

    async def test_short_query_skips_store(self, service, store):
        outcome = await service.search("a")

        assert outcome.ok
        assert outcome.results == []
        assert store.total_fetches == 0
        assert len(service.cache) == 0

    async def test_blank_query_skips_store(self, service, store):
        outcome = await service.search("   ")

        assert outcome.results == []
        assert store.total_fetches == 0

    async def test_drops_results_at_or_below_floor(self):
        store = InMemoryDocumentStore(
            {
                "articles": [
                    # Only the recency bonus (10) applies
                    make_article("fresh", "Unrelated", updatedAt=NOW.isoformat()),
                    make_article("match", "SEO basics"),
                ]
            }
        )

        outcome = await service_for(store).search("seo")

        assert ids(outcome.results) == ["match"]

    async def test_unpublished_items_are_hidden(self):
        store = InMemoryDocumentStore(
            {
                "articles": [make_article("hidden", "SEO notes", published=False)],
                "tutorials": [
                    make_tutorial("draft", "SEO draft", status="draft"),
                    make_tutorial("vip", "SEO for members", status="draft", vipOnly=True),
                ],
            }
        )
        service = service_for(store)

        visible = await service.search("seo")
        everything = await service.search("seo", {"published_only": False})

        assert ids(visible.results) == ["vip"]
        assert set(ids(everything.results)) == {"hidden", "draft", "vip"}

    async def test_exact_match_requires_full_phrase(self, service):
        loose = await service.search("seo guide")
        exact = await service.search("seo guide", {"exact_match": True})

        assert ids(loose.results) == ["a1", "t1"]
        assert ids(exact.results) == ["a1"]

    async def test_category_filter(self, service):
        outcome = await service.search("seo", {"filter_category": "general"})

        assert ids(outcome.results) == ["t1"]

    async def test_tag_filter(self, service):
        outcome = await service.search("seo", {"filter_tags": ["wordpress"]})

        assert ids(outcome.results) == ["a1"]

    async def test_limit_truncates_after_sorting(self, service):
        outcome = await service.search("seo", {"limit": 1, "sort_by": SortBy.TITLE})

        assert ids(outcome.results) == ["t1"]

    async def test_sort_by_date(self):
        store = InMemoryDocumentStore(
            {
                "articles": [
                    make_article("older", "SEO one", updatedAt="2024-01-01T00:00:00Z"),
                    make_article("newer", "SEO two", updatedAt="2024-05-01T00:00:00Z"),
                ]
            }
        )

        outcome = await service_for(store).search("seo", {"sort_by": "date"})

        assert ids(outcome.results) == ["newer", "older"]

    async def test_malformed_records_are_tolerated(self):
        store = InMemoryDocumentStore(
            {
                "articles": [
                    {"id": "odd", "title": None, "tags": None, "blocks": "oops", "category": 5},
                    make_article("ok", "SEO basics"),
                ]
            }
        )

        outcome = await service_for(store).search("seo")

        assert outcome.ok
        assert ids(outcome.results) == ["ok"]

    async def test_service_defaults_fill_unset_options(self, store):
        service = service_for(store, default_options=SearchOptions(limit=1))

        outcome = await service.search("seo", {"sort_by": "title"})

        assert ids(outcome.results) == ["t1"]


class TestSearchCaching:
    """Cache behaviour seen through the service."""

    async def test_repeat_search_hits_cache(self, service, store):
        first = await service.search("seo")
        second = await service.search("SEO ")

        assert ids(second.results) == ids(first.results)
        assert second.cached
        assert store.total_fetches == 2  # one read per collection

    async def test_different_options_miss_cache(self, service, store):
        await service.search("seo")
        await service.search("seo", {"limit": 5})

        assert store.total_fetches == 4

    async def test_expired_entry_refetches(self, service, store, clock):
        await service.search("seo")
        clock.advance(301)

        outcome = await service.search("seo")

        assert not outcome.cached
        assert store.total_fetches == 4

    async def test_clear_cache_refetches(self, service, store):
        await service.search("seo")
        service.clear_cache()

        await service.search("seo")

        assert store.total_fetches == 4

    async def test_cached_results_are_served_verbatim(self, service, store):
        await service.search("seo")
        store.put_item("articles", make_article("late", "SEO latecomer"))

        outcome = await service.search("seo")

        assert "late" not in ids(outcome.results)


class TestSearchFailures:
    """Store failures are reported, not raised."""

    async def test_store_failure_is_distinguishable(self, service, store):
        store.fail_with = "backend unavailable"

        outcome = await service.search("seo")

        assert not outcome.ok
        assert outcome.results == []
        assert outcome.error == "backend unavailable"

    async def test_failures_are_not_cached(self, service, store):
        store.fail_with = "backend unavailable"
        await service.search("seo")
        store.fail_with = None

        outcome = await service.search("seo")

        assert outcome.ok
        assert ids(outcome.results) == ["a1", "t1"]

    async def test_no_matches_is_ok(self, service):
        outcome = await service.search("kubernetes")

        assert outcome.ok
        assert outcome.results == []


class TestSuggest:
    """Tests for SearchService.suggest."""

    async def test_distinct_matching_tags(self, service):
        assert await service.suggest("se") == ["seo"]
        assert await service.suggest("WO") == ["wordpress"]

    async def test_short_query_skips_store(self, service, store):
        assert await service.suggest("s") == []
        assert store.total_fetches == 0

    async def test_limit_and_scan_order(self):
        store = InMemoryDocumentStore(
            {
                "articles": [make_article("a", "A", tags=["forms-1", "forms-2", "forms-3"])],
                "tutorials": [make_tutorial("t", "T", tags=["forms-2", "forms-4", "forms-5"])],
            }
        )

        suggestions = await service_for(store).suggest("forms", limit=4)

        assert suggestions == ["forms-1", "forms-2", "forms-3", "forms-4"]

    async def test_suggestions_are_not_cached(self, service, store):
        await service.suggest("seo")
        await service.suggest("seo")

        assert store.total_fetches == 4

    async def test_store_failure_yields_nothing(self, service, store):
        store.fail_with = "backend unavailable"

        assert await service.suggest("seo") == []


class TestPaginatedSearch:
    """Tests for SearchService.paginated_search."""

    @pytest.fixture
    def big_service(self):
        articles = [make_article(f"p{i:02d}", f"SEO post {i:02d}") for i in range(30)]
        return service_for(InMemoryDocumentStore({"articles": articles}))

    async def test_pages_partition_limited_results(self, big_service):
        full = await big_service.search("seo", {"limit": 25})

        pages = []
        cursor = None
        while True:
            page = await big_service.paginated_search("seo", cursor, 10, {"limit": 25})
            pages.append(ids(page.results))
            cursor = page.next_cursor
            if cursor is None:
                break

        assert [len(p) for p in pages] == [10, 10, 5]
        assert [i for p in pages for i in p] == ids(full.results)

    async def test_short_query_is_empty(self, big_service):
        page = await big_service.paginated_search("s", None, 10)

        assert page.results == []
        assert page.next_cursor is None

    async def test_rejects_bad_cursor(self, big_service):
        with pytest.raises(InvalidCursorError):
            await big_service.paginated_search("seo", "not-a-cursor", 10)

    async def test_store_failure_is_reported(self, store):
        store.fail_with = "backend unavailable"

        page = await service_for(store).paginated_search("seo", None, 10)

        assert not page.ok
        assert page.error == "backend unavailable"
        assert page.next_cursor is None
