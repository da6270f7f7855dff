"""In-memory cache of search results with time-based expiry."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from kbsearch.search.schemas import SearchOptions, SearchResult

DEFAULT_TTL_SECONDS = 300.0


def make_cache_key(query: str, options: SearchOptions) -> str:
    """Cache key for a query and its fully merged options."""
    return f"{query.strip().lower()}|{options.canonical()}"


@dataclass
class CacheEntry:
    """Results cached for one key."""

    timestamp: float
    results: list[SearchResult] = field(default_factory=list)


class SearchCache:
    """Process-wide store of search results keyed by query and options.

    Entries expire `ttl` seconds after they were written and are never
    returned once expired. Writes overwrite whatever was stored for the key.
    The clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        # Guards the dict when the API runs sync work in worker threads
        self._lock = threading.Lock()

    @property
    def ttl(self) -> float:
        return self._ttl

    def get(self, key: str) -> CacheEntry | None:
        """Return the live entry for key, dropping it if it has expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() - entry.timestamp >= self._ttl:
                del self._entries[key]
                return None
            return entry

    def put(self, key: str, results: list[SearchResult]) -> CacheEntry:
        """Store results under key, replacing any previous entry."""
        entry = CacheEntry(timestamp=self._clock(), results=list(results))
        with self._lock:
            self._entries[key] = entry
        return entry

    def clear(self) -> int:
        """Remove every entry.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            removed = len(self._entries)
            self._entries.clear()
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
