"""Dict-backed document store."""

from __future__ import annotations

import copy
from collections import Counter
from typing import Any

from kbsearch.constants.search import SEARCHABLE_COLLECTIONS
from kbsearch.store.base import EqualityFilter, StoreError, record_id


class InMemoryDocumentStore:
    """Document store holding records in process memory.

    Serves the `memory` backend and tests. `fetch_counts` records how many
    times each collection was read; `fail_with` makes every read fail.
    """

    def __init__(self, collections: dict[str, list[dict[str, Any]]] | None = None) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {
            name: {} for name in SEARCHABLE_COLLECTIONS
        }
        self.fetch_counts: Counter[str] = Counter()
        self.fail_with: str | None = None
        for name, records in (collections or {}).items():
            for record in records:
                self.put_item(name, record)

    def put_item(self, collection: str, record: dict[str, Any]) -> None:
        """Insert or replace a record; the record must carry an id."""
        if collection not in self._collections:
            raise StoreError(f"Unknown collection: {collection}")
        item_id = record_id(record)
        self._collections[collection][item_id] = copy.deepcopy(record)

    def put_items(self, collection: str, records: list[dict[str, Any]]) -> int:
        """Insert or replace records; nothing is written if any record is invalid."""
        if collection not in self._collections:
            raise StoreError(f"Unknown collection: {collection}")
        staged = {record_id(record): copy.deepcopy(record) for record in records}
        self._collections[collection].update(staged)
        return len(records)

    def delete_item(self, collection: str, item_id: str) -> bool:
        return self._collections.get(collection, {}).pop(item_id, None) is not None

    async def fetch_all(
        self, collection: str, equality_filter: EqualityFilter | None = None
    ) -> list[dict[str, Any]]:
        self.fetch_counts[collection] += 1
        if self.fail_with is not None:
            raise StoreError(self.fail_with)
        if collection not in self._collections:
            raise StoreError(f"Unknown collection: {collection}")

        records = self._collections[collection].values()
        if equality_filter is not None:
            records = [r for r in records if r.get(equality_filter.field) == equality_filter.value]
        return [copy.deepcopy(r) for r in records]

    @property
    def total_fetches(self) -> int:
        return sum(self.fetch_counts.values())
