"""Database migrations and schema management for the content store."""

import sqlite3

from kbsearch.db.connection import Database

# Schema version for tracking migrations
SCHEMA_VERSION = 1

SCHEMA_SQL = """
-- Schema version tracking
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

-- Articles and tutorials, one JSON record per row
-- category is copied out of the record so filters can run in SQL
CREATE TABLE IF NOT EXISTS documents (
    collection TEXT NOT NULL,  -- 'articles' or 'tutorials'
    id TEXT NOT NULL,
    category TEXT,
    data TEXT NOT NULL,  -- JSON record as written by the CMS
    stored_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (collection, id)
);

CREATE INDEX IF NOT EXISTS idx_documents_category ON documents(collection, category);
"""


def run_migrations(db: Database) -> None:
    """Run database migrations to set up or upgrade schema.

    Args:
        db: Database connection to run migrations on.
    """
    try:
        result = db.execute(
            "SELECT version FROM schema_version ORDER BY version DESC LIMIT 1"
        ).fetchone()
        current_version = result[0] if result else 0
    except sqlite3.OperationalError:
        # Table doesn't exist yet
        current_version = 0

    if current_version < SCHEMA_VERSION:
        db.executescript(SCHEMA_SQL)
        db.execute("INSERT OR REPLACE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
        db.commit()
