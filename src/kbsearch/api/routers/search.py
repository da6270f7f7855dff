"""Search endpoints."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from kbsearch.api.deps import get_search_service, get_settings
from kbsearch.config import Config
from kbsearch.search.pagination import InvalidCursorError
from kbsearch.search.ranking import tag_facets
from kbsearch.search.schemas import ItemType, SearchResult, SortBy
from kbsearch.search.service import SearchService
from kbsearch.search.snippets import create_snippet, item_text

router = APIRouter(prefix="/api/search", tags=["search"])


class SearchHit(BaseModel):
    """Individual search result."""

    id: str
    title: str
    type: ItemType
    score: int
    category: str | None = None
    tags: list[str] = Field(default_factory=list)
    snippet: str = ""
    updated_at: datetime | None = None


class SearchResponse(BaseModel):
    """Search response with results."""

    query: str
    status: str = Field("ok", description="ok, or error when the store could not be read")
    error: str | None = None
    results: list[SearchHit]
    total: int = Field(..., description="Number of results returned, after `limit`")
    tags: list[str] = Field(default_factory=list, description="Tags present in the results")
    elapsed_ms: float = 0.0


class SearchPageResponse(BaseModel):
    """One page of search results."""

    query: str
    status: str = "ok"
    error: str | None = None
    results: list[SearchHit]
    next_cursor: str | None = None


class SuggestionResponse(BaseModel):
    """Tag suggestions for a partial query."""

    query: str
    suggestions: list[str]


class SearchFilters:
    """Query parameters shared by the search endpoints."""

    def __init__(
        self,
        sort_by: SortBy = Query(SortBy.RELEVANCE, description="relevance, date or title"),
        category: str | None = Query(None, description="Only items in this category"),
        tags: list[str] | None = Query(None, description="Only items with any of these tags"),
        exact: bool = Query(False, description="Require the full query to appear verbatim"),
        published_only: bool = Query(True),
        include_title: bool = Query(True),
        include_tags: bool = Query(True),
        include_category: bool = Query(True),
        include_content: bool = Query(True),
    ) -> None:
        self.options: dict[str, Any] = {
            "sort_by": sort_by,
            "exact_match": exact,
            "published_only": published_only,
            "include_title": include_title,
            "include_tags": include_tags,
            "include_category": include_category,
            "include_content": include_content,
        }
        if category:
            self.options["filter_category"] = category
        tag_list = _split_tags(tags)
        if tag_list:
            self.options["filter_tags"] = tag_list


def _split_tags(tags: list[str] | None) -> list[str]:
    # Accept both ?tags=a&tags=b and ?tags=a,b
    split: list[str] = []
    for value in tags or []:
        split.extend(part.strip() for part in value.split(",") if part.strip())
    return split


def _to_hit(result: SearchResult, query: str, snippet_length: int) -> SearchHit:
    item = result.item
    return SearchHit(
        id=item.id,
        title=item.title,
        type=result.type,
        score=result.score,
        category=item.category,
        tags=item.tags,
        snippet=create_snippet(item_text(item), query, snippet_length),
        updated_at=item.timestamp,
    )


@router.get("", response_model=SearchResponse)
async def search(
    q: str = Query(..., min_length=1, description="Search query"),
    limit: int | None = Query(None, ge=1, le=1000),
    filters: SearchFilters = Depends(),
    service: SearchService = Depends(get_search_service),
    settings: Config = Depends(get_settings),
) -> SearchResponse:
    """Search articles and tutorials by relevance.

    A store failure is reported with status "error" rather than as an
    empty result list.
    """
    options = dict(filters.options)
    if limit is not None:
        options["limit"] = limit

    outcome = await service.search(q, options)
    snippet_length = settings.search.snippet_max_length
    hits = [_to_hit(result, q, snippet_length) for result in outcome.results]

    return SearchResponse(
        query=q,
        status="ok" if outcome.ok else "error",
        error=outcome.error,
        results=hits,
        total=len(hits),
        tags=tag_facets(outcome.results),
        elapsed_ms=round(outcome.elapsed_ms, 2),
    )


@router.get("/suggestions", response_model=SuggestionResponse)
async def suggestions(
    q: str = Query(..., min_length=1, description="Partial query"),
    limit: int | None = Query(None, ge=1, le=50),
    service: SearchService = Depends(get_search_service),
    settings: Config = Depends(get_settings),
) -> SuggestionResponse:
    """Suggest tags containing the query."""
    suggested = await service.suggest(q, limit or settings.search.suggestion_limit)
    return SuggestionResponse(query=q, suggestions=suggested)


@router.get("/page", response_model=SearchPageResponse)
async def search_page(
    q: str = Query(..., min_length=1, description="Search query"),
    cursor: str | None = Query(None, description="Cursor returned by the previous page"),
    page_size: int | None = Query(None, ge=1, le=100),
    limit: int | None = Query(None, ge=1, le=1000, description="Ceiling on total results"),
    filters: SearchFilters = Depends(),
    service: SearchService = Depends(get_search_service),
    settings: Config = Depends(get_settings),
) -> SearchPageResponse:
    """Page through search results with an opaque cursor."""
    options = dict(filters.options)
    options["limit"] = limit or settings.search.pagination_limit

    try:
        page = await service.paginated_search(
            q, cursor, page_size or settings.search.page_size, options
        )
    except InvalidCursorError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e

    snippet_length = settings.search.snippet_max_length
    return SearchPageResponse(
        query=q,
        status="ok" if page.ok else "error",
        error=page.error,
        results=[_to_hit(result, q, snippet_length) for result in page.results],
        next_cursor=page.next_cursor,
    )


@router.delete("/cache", status_code=status.HTTP_204_NO_CONTENT)
async def clear_cache(service: SearchService = Depends(get_search_service)) -> None:
    """Drop every cached search result."""
    service.clear_cache()
