"""Load content items from a YAML or JSON seed file into a store."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Protocol

import yaml

from kbsearch.constants.search import (
    ARTICLES_COLLECTION,
    SEARCHABLE_COLLECTIONS,
    TUTORIALS_COLLECTION,
)
from kbsearch.search.schemas import ItemType
from kbsearch.store.base import StoreError, infer_item_type

logger = logging.getLogger(__name__)


class WritableStore(Protocol):
    def put_items(self, collection: str, records: list[dict[str, Any]]) -> int: ...


def _collection_for(record: dict[str, Any]) -> str:
    if infer_item_type(record) is ItemType.TUTORIAL:
        return TUTORIALS_COLLECTION
    return ARTICLES_COLLECTION


def _records(path: Path, data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    records = data.get(key) or []
    if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
        raise StoreError(f"Seed file {path}: `{key}` must be a list of mappings")
    return records


def load_seed_file(path: Path, store: WritableStore) -> int:
    """Write every record in a seed file into the store.

    The file holds either a mapping with `articles` and `tutorials` lists,
    or a single `items` list of records whose collection is inferred from
    their shape. JSON files are read the same way since JSON is valid YAML.
    Each collection is written as one batch.

    Returns:
        Number of records written.

    Raises:
        StoreError: If the file cannot be read, has the wrong shape, or holds
            a record without a usable id.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        raise StoreError(f"Cannot read seed file {path}: {e}") from e

    if not isinstance(data, dict):
        raise StoreError(f"Seed file {path} must contain a mapping")

    batches: dict[str, list[dict[str, Any]]] = {
        collection: list(_records(path, data, collection)) for collection in SEARCHABLE_COLLECTIONS
    }
    for record in _records(path, data, "items"):
        batches[_collection_for(record)].append(record)

    written = sum(
        store.put_items(collection, records) for collection, records in batches.items() if records
    )

    logger.info(f"Loaded {written} record(s) from {path}")
    return written
