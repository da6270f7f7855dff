"""Schemas for content items, search options and search results."""

from __future__ import annotations

import json
from datetime import UTC, date, datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ItemType(str, Enum):
    """Kind of content item, fixed by the collection it is stored in."""

    ARTICLE = "article"
    TUTORIAL = "tutorial"


class SortBy(str, Enum):
    """Result ordering."""

    RELEVANCE = "relevance"
    DATE = "date"
    TITLE = "title"


# Epoch seconds stay below this until the year 5138
EPOCH_MILLIS_THRESHOLD = 1e11


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Coerce a stored timestamp into an aware UTC datetime.

    Accepts datetimes, dates (read as midnight UTC), ISO-8601 strings
    (including a trailing "Z"), epoch numbers, and Firestore-style
    {"seconds", "nanoseconds"} maps. Epoch numbers above
    EPOCH_MILLIS_THRESHOLD are milliseconds, as JavaScript writes them;
    smaller ones are seconds. Anything that cannot be read is treated as
    absent.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=UTC)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=UTC)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) > EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, UTC)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, dict) and "seconds" in value:
        try:
            seconds = float(value["seconds"]) + float(value.get("nanoseconds", 0)) / 1e9
            return datetime.fromtimestamp(seconds, UTC)
        except (TypeError, OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=UTC)
    return None


class ContentBlock(BaseModel):
    """One block of an item's body."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    type: str = Field("text", description="Block kind: heading, text, code, image, ...")
    content: str = Field("", description="Text content of the block")

    @field_validator("content", mode="before")
    @classmethod
    def _text_only(cls, value: Any) -> str:
        # Media blocks may carry structured payloads; only text is searchable.
        return value if isinstance(value, str) else ""

    @field_validator("type", mode="before")
    @classmethod
    def _default_type(cls, value: Any) -> str:
        return value if isinstance(value, str) and value else "text"


class ContentItem(BaseModel):
    """An article or tutorial as read from the document store.

    Raw records use camelCase keys; both spellings are accepted.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    type: ItemType
    title: str = ""
    category: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    blocks: list[ContentBlock] = Field(default_factory=list)
    description: Optional[str] = None
    status: Optional[str] = None
    published: Optional[bool] = None
    vip_only: Optional[bool] = Field(None, alias="vipOnly")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    updated_at: Optional[datetime] = Field(None, alias="updatedAt")

    @field_validator("id", mode="before")
    @classmethod
    def _id_text(cls, value: Any) -> Any:
        # Seed files and JSON rows may carry numeric ids
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("title", mode="before")
    @classmethod
    def _title_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @field_validator("category", "description", "status", mode="before")
    @classmethod
    def _optional_text(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None

    @field_validator("tags", mode="before")
    @classmethod
    def _tag_list(cls, value: Any) -> list[str]:
        if not isinstance(value, (list, tuple)):
            return []
        return [tag for tag in value if isinstance(tag, str)]

    @field_validator("blocks", mode="before")
    @classmethod
    def _block_list(cls, value: Any) -> list[Any]:
        if not isinstance(value, (list, tuple)):
            return []
        return [block for block in value if isinstance(block, (dict, ContentBlock))]

    @field_validator("published", "vip_only", mode="before")
    @classmethod
    def _strict_flag(cls, value: Any) -> Optional[bool]:
        return value if isinstance(value, bool) else None

    @field_validator("created_at", "updated_at", mode="before")
    @classmethod
    def _timestamp(cls, value: Any) -> Optional[datetime]:
        return parse_timestamp(value)

    @property
    def timestamp(self) -> Optional[datetime]:
        """Last update time, falling back to creation time."""
        return self.updated_at or self.created_at

    def is_published(self) -> bool:
        """Whether the item is visible to readers.

        An explicit "published" status, a true published flag, or VIP-only
        content all count as published. Otherwise the item is published
        unless it is explicitly a draft or explicitly unpublished.
        """
        if self.status == "published":
            return True
        if self.published is True:
            return True
        if self.vip_only is True:
            return True
        return self.status != "draft" and self.published is not False


class SearchOptions(BaseModel):
    """Options controlling which fields score and how results are shaped."""

    model_config = ConfigDict(frozen=True)

    include_content: bool = True
    include_title: bool = True
    include_tags: bool = True
    include_category: bool = True
    sort_by: SortBy = SortBy.RELEVANCE
    limit: int = Field(20, ge=1)
    filter_category: Optional[str] = None
    filter_tags: Optional[list[str]] = None
    published_only: bool = True
    exact_match: bool = False

    def merged(self, **overrides: Any) -> SearchOptions:
        """Return a copy with the given fields replaced (None values are ignored)."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        return self.model_validate({**self.model_dump(), **updates})

    def canonical(self) -> str:
        """Stable serialization used in cache keys.

        Tag filters are sets, so their order does not change the key.
        """
        data = self.model_dump(mode="json")
        if data["filter_tags"] is not None:
            data["filter_tags"] = sorted(data["filter_tags"])
        return json.dumps(data, sort_keys=True, separators=(",", ":"))


class SearchResult(BaseModel):
    """A scored content item."""

    item: ContentItem
    score: int = Field(..., ge=0)
    type: ItemType


class SearchOutcome(BaseModel):
    """Result of a search: either results or the reason the search failed.

    A failed search and a search with no matches both have empty results;
    `ok` tells them apart.
    """

    results: list[SearchResult] = Field(default_factory=list)
    error: Optional[str] = None
    cached: bool = False
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, reason: str) -> SearchOutcome:
        return cls(error=reason)


class SearchPage(BaseModel):
    """One page of a paginated search."""

    results: list[SearchResult] = Field(default_factory=list)
    next_cursor: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None
