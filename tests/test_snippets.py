"""Tests for result snippets."""

from kbsearch.search.schemas import ContentItem, ItemType
from kbsearch.search.snippets import create_snippet, item_text


def test_item_text_joins_description_and_blocks():
    item = ContentItem(
        id="t1",
        type=ItemType.TUTORIAL,
        description="  Learn SEO. ",
        blocks=[{"content": "Step one"}, {"content": ""}, {"content": "Step two"}],
    )

    assert item_text(item) == "Learn SEO. Step one Step two"


def test_snippet_starts_before_match():
    content = "x" * 100 + " the SEO part " + "y" * 300

    snippet = create_snippet(content, "seo", max_length=80)

    assert snippet.startswith("...")
    assert snippet.endswith("...")
    assert "SEO" in snippet


def test_snippet_without_match_uses_start():
    assert create_snippet("short text", "missing") == "short text"
    assert create_snippet("a" * 300, "missing", max_length=10) == "a" * 10 + "..."


def test_snippet_match_near_start_has_no_leading_ellipsis():
    assert create_snippet("SEO basics for beginners", "basics") == "SEO basics for beginners"
