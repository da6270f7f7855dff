"""Builders for raw content records and a controllable clock."""

from datetime import UTC, datetime

# Fixed reference time so recency bonuses are deterministic
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


def make_article(item_id: str, title: str, **fields) -> dict:
    """Raw article record as the CMS stores it."""
    record = {
        "id": item_id,
        "title": title,
        "category": "general",
        "tags": [],
        "published": True,
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    }
    record.update(fields)
    return record


def make_tutorial(item_id: str, title: str, **fields) -> dict:
    """Raw tutorial record as the CMS stores it."""
    record = {
        "id": item_id,
        "title": title,
        "description": "",
        "category": "general",
        "tags": [],
        "blocks": [],
        "status": "published",
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-01-01T00:00:00Z",
    }
    record.update(fields)
    return record
