"""Document store collaborators for the search core."""

from kbsearch.store.base import DocumentStore, EqualityFilter, StoreError, to_item
from kbsearch.store.memory import InMemoryDocumentStore
from kbsearch.store.sqlite import SqliteDocumentStore

__all__ = [
    "DocumentStore",
    "EqualityFilter",
    "InMemoryDocumentStore",
    "SqliteDocumentStore",
    "StoreError",
    "to_item",
]
