"""Document store interface consumed by the search core."""

from __future__ import annotations

import logging
from typing import Any, NamedTuple, Protocol

from pydantic import ValidationError

from kbsearch.constants.search import ARTICLES_COLLECTION, TUTORIALS_COLLECTION
from kbsearch.search.schemas import ContentItem, ItemType

logger = logging.getLogger(__name__)

COLLECTION_TYPES: dict[str, ItemType] = {
    ARTICLES_COLLECTION: ItemType.ARTICLE,
    TUTORIALS_COLLECTION: ItemType.TUTORIAL,
}


class StoreError(Exception):
    """Raised when the document store cannot serve a read."""

    pass


class EqualityFilter(NamedTuple):
    """A single field == value predicate pushed down to the store."""

    field: str
    value: Any


class DocumentStore(Protocol):
    """Read access to the article and tutorial collections."""

    async def fetch_all(
        self, collection: str, equality_filter: EqualityFilter | None = None
    ) -> list[dict[str, Any]]:
        """Return every raw record in a collection, optionally filtered.

        Raises:
            StoreError: If the read fails.
        """
        ...


def record_id(record: dict[str, Any]) -> str:
    """The id a record is stored under.

    Raises:
        StoreError: If the record has no usable id.
    """
    item_id = record.get("id")
    if isinstance(item_id, bool) or not isinstance(item_id, (str, int)) or item_id == "":
        raise StoreError(f"Record has no usable id: {item_id!r}")
    return str(item_id)


def infer_item_type(raw: dict[str, Any]) -> ItemType:
    """Guess the type of a legacy record that was stored without one.

    Only used when importing records whose collection is unknown. Records
    with a block list are tutorials, everything else is an article.
    """
    declared = raw.get("type")
    if declared in (ItemType.ARTICLE.value, ItemType.TUTORIAL.value):
        return ItemType(declared)
    if isinstance(raw.get("blocks"), list):
        return ItemType.TUTORIAL
    return ItemType.ARTICLE


def to_item(raw: dict[str, Any], collection: str) -> ContentItem | None:
    """Build a ContentItem from a raw record read from a collection.

    The collection fixes the item's type. Records that cannot be read at all
    (no id) are skipped with a warning.
    """
    item_type = COLLECTION_TYPES.get(collection)
    if item_type is None:
        raise StoreError(f"Unknown collection: {collection}")
    try:
        return ContentItem.model_validate({**raw, "type": item_type})
    except ValidationError as e:
        logger.warning(f"Skipping unreadable record in {collection}: {e.error_count()} error(s)")
        return None
