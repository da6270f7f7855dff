"""FastAPI dependency injection functions."""

import logging
from functools import lru_cache
from typing import Any

from kbsearch.config import Config, load_settings
from kbsearch.db.connection import Database
from kbsearch.db.migrations import run_migrations
from kbsearch.search.cache import SearchCache
from kbsearch.search.controller import SearchController
from kbsearch.search.schemas import SearchOptions
from kbsearch.search.service import SearchService
from kbsearch.store.base import DocumentStore
from kbsearch.store.memory import InMemoryDocumentStore
from kbsearch.store.sqlite import SqliteDocumentStore

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Config:
    """Get cached application settings."""
    return load_settings()


# Process-wide instances, created on first use
_db_instance: Database | None = None
_store_instance: DocumentStore | None = None
_service_instance: SearchService | None = None


def get_db() -> Database:
    """Get the content database with migrations applied."""
    global _db_instance

    if _db_instance is None:
        settings = get_settings()
        _db_instance = Database(settings.db_path)
        run_migrations(_db_instance)
    return _db_instance


def get_store() -> DocumentStore:
    """Get the document store for the configured backend."""
    global _store_instance

    if _store_instance is None:
        settings = get_settings()
        if settings.store.backend == "memory":
            _store_instance = InMemoryDocumentStore()
        else:
            _store_instance = SqliteDocumentStore(get_db())
        logger.info(f"Using {settings.store.backend} document store")
    return _store_instance


def get_search_service() -> SearchService:
    """Get the shared search service.

    One service (and so one result cache) serves every request.
    """
    global _service_instance

    if _service_instance is None:
        settings = get_settings()
        _service_instance = SearchService(
            store=get_store(),
            cache=SearchCache(ttl=settings.cache_ttl),
            default_options=SearchOptions(limit=settings.search.default_limit),
            min_query_length=settings.search.min_query_length,
            min_score=settings.search.min_score,
        )
    return _service_instance


def new_search_controller(
    options: SearchOptions | dict[str, Any] | None = None,
) -> SearchController:
    """Create a type-ahead controller over the shared search service.

    Controllers hold one user's query state, so each caller gets its own;
    the debounce delay comes from `[search].debounce_ms`.
    """
    settings = get_settings()
    return SearchController(
        get_search_service(), options=options, debounce=settings.debounce_seconds
    )


def _reset_instances() -> None:
    """Reset shared instances (for testing only)."""
    global _db_instance, _store_instance, _service_instance
    if _db_instance is not None:
        _db_instance.close()
    _db_instance = None
    _store_instance = None
    _service_instance = None
