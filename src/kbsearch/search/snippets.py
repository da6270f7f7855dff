"""Result snippets: a short excerpt of an item around the query."""

from kbsearch.search.schemas import ContentItem

DEFAULT_SNIPPET_LENGTH = 200
_LEAD = 50


def item_text(item: ContentItem) -> str:
    """Plain text of an item: its description followed by its block contents."""
    parts = [item.description or ""] + [block.content for block in item.blocks]
    return " ".join(part.strip() for part in parts if part and part.strip())


def create_snippet(content: str, query: str, max_length: int = DEFAULT_SNIPPET_LENGTH) -> str:
    """Create a snippet around the first occurrence of the query."""
    pos = content.lower().find(query.lower()) if query else -1

    if pos == -1:
        # Query not found, return start of content
        return content[:max_length] + ("..." if len(content) > max_length else "")

    start = max(0, pos - _LEAD)
    end = min(len(content), start + max_length)

    snippet = content[start:end]
    if start > 0:
        snippet = "..." + snippet
    if end < len(content):
        snippet = snippet + "..."

    return snippet
