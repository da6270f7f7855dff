"""SQLite-backed document store."""

from __future__ import annotations

import json
import logging
import sqlite3
from typing import Any

from kbsearch.db.connection import Database
from kbsearch.store.base import COLLECTION_TYPES, EqualityFilter, StoreError, record_id

logger = logging.getLogger(__name__)


class SqliteDocumentStore:
    """Document store keeping each record as a JSON row.

    Category filters are answered by the indexed category column; any other
    equality filter is applied after decoding.
    """

    def __init__(self, db: Database) -> None:
        self._db = db

    def _row(self, collection: str, record: dict[str, Any]) -> tuple[Any, ...]:
        if collection not in COLLECTION_TYPES:
            raise StoreError(f"Unknown collection: {collection}")
        category = record.get("category")
        return (
            collection,
            record_id(record),
            category if isinstance(category, str) else None,
            json.dumps(record, default=str),
        )

    def put_item(self, collection: str, record: dict[str, Any]) -> None:
        """Insert or replace a record; the record must carry an id."""
        self.put_items(collection, [record])

    def put_items(self, collection: str, records: list[dict[str, Any]]) -> int:
        """Insert or replace records in one transaction.

        Either every record is written or none is.

        Returns:
            Number of records written.
        """
        rows = [self._row(collection, record) for record in records]
        try:
            with self._db.transaction() as db:
                db.executemany(
                    """
                    INSERT OR REPLACE INTO documents (collection, id, category, data)
                    VALUES (?, ?, ?, ?)
                    """,
                    rows,
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to store {len(rows)} record(s) in {collection}: {e}") from e
        return len(rows)

    def delete_item(self, collection: str, item_id: str) -> bool:
        try:
            with self._db.transaction() as db:
                cursor = db.execute(
                    "DELETE FROM documents WHERE collection = ? AND id = ?", (collection, item_id)
                )
        except sqlite3.Error as e:
            raise StoreError(f"Failed to delete {collection}/{item_id}: {e}") from e
        return cursor.rowcount > 0

    async def fetch_all(
        self, collection: str, equality_filter: EqualityFilter | None = None
    ) -> list[dict[str, Any]]:
        if collection not in COLLECTION_TYPES:
            raise StoreError(f"Unknown collection: {collection}")

        sql = "SELECT id, data FROM documents WHERE collection = ?"
        params: list[Any] = [collection]
        if equality_filter is not None and equality_filter.field == "category":
            sql += " AND category = ?"
            params.append(equality_filter.value)
        sql += " ORDER BY rowid"

        try:
            rows = self._db.execute(sql, tuple(params)).fetchall()
        except sqlite3.Error as e:
            raise StoreError(f"Failed to read {collection}: {e}") from e

        records = []
        for row in rows:
            try:
                record = json.loads(row["data"])
            except json.JSONDecodeError:
                logger.warning(f"Skipping corrupt record {collection}/{row['id']}")
                continue
            record.setdefault("id", row["id"])
            records.append(record)

        if equality_filter is not None and equality_filter.field != "category":
            records = [r for r in records if r.get(equality_filter.field) == equality_filter.value]
        return records

    def count(self) -> int:
        row = self._db.execute("SELECT COUNT(*) FROM documents").fetchone()
        return row[0] if row else 0
