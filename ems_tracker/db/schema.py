"""
SQLite schema DDL.

The store keeps browser-local-storage semantics: one row per storage key,
whose ``payload`` is the JSON text of that collection. There are no
per-entity tables; the four collection documents are rewritten together
after every change.

All statements use ``IF NOT EXISTS`` so ``apply_schema()`` is **idempotent**.
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

_DDL_STORAGE_DOCUMENTS = """
CREATE TABLE IF NOT EXISTS storage_documents (
    storage_key     TEXT    NOT NULL PRIMARY KEY,
    payload         TEXT    NOT NULL,
    updated_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_ALL_DDL = [
    _DDL_STORAGE_DOCUMENTS,
]

ALL_TABLE_NAMES = [
    "storage_documents",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Apply all DDL statements to ``conn``.

    Idempotent — safe to call on an already-initialized database.

    Args:
        conn: An open ``sqlite3.Connection``.
    """
    logger.debug("Applying schema to database...")

    for ddl in _ALL_DDL:
        for statement in _split_ddl(ddl):
            conn.execute(statement)

    conn.commit()
    logger.debug("Schema applied: %d table(s) created/verified.", len(ALL_TABLE_NAMES))


def _split_ddl(ddl: str) -> list[str]:
    """Split a multi-statement DDL block on semicolons."""
    return [s.strip() for s in ddl.split(";") if s.strip()]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Return the sorted list of table names present in the database."""
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;"
    ).fetchall()
    return [row["name"] for row in rows]
