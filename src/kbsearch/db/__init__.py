"""Database layer for the content store."""

from kbsearch.db.connection import Database
from kbsearch.db.migrations import run_migrations

__all__ = ["Database", "run_migrations"]
