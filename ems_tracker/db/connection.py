"""
Opening the tracker's SQLite storage.

``get_connection()`` is the only place a connection is created. Every CLI
command opens one, loads a ``DomainStore`` over it, performs a single action,
and closes it again, so connections are short-lived and never shared.

The ``storage_documents`` table is created on open (``ensure_schema``), which
lets any command run against a fresh path without ``init-db`` first.

Usage::

    with get_connection(config.storage.db_path) as conn:
        store = DomainStore(StorageDocumentRepository(conn))
        store.load()
"""

from __future__ import annotations

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Generator

from ems_tracker.db.schema import apply_schema

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


@contextmanager
def get_connection(
    db_path: str,
    wal_mode: bool = True,
    busy_timeout_ms: int = 5000,
    ensure_schema: bool = True,
) -> Generator[sqlite3.Connection, None, None]:
    """Yield an open connection to the document store at ``db_path``.

    Args:
        db_path: Database file; parent directories are created. ``":memory:"``
            gives a throwaway database.
        wal_mode: Use the WAL journal so a CLI read does not block on a
            concurrent write. Ignored for in-memory databases.
        busy_timeout_ms: How long a write waits for another writer's lock.
        ensure_schema: Create the ``storage_documents`` table if missing.

    Yields:
        A connection with ``sqlite3.Row`` rows. Pending work is committed when
        the block exits normally and rolled back if it raises.
    """
    in_memory = db_path == MEMORY_PATH
    if not in_memory:
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path, timeout=busy_timeout_ms / 1000)
    conn.row_factory = sqlite3.Row
    logger.debug("Opened storage %s", db_path)

    try:
        conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)};")
        if wal_mode and not in_memory:
            conn.execute("PRAGMA journal_mode = WAL;")
        if ensure_schema:
            apply_schema(conn)

        yield conn
        conn.commit()

    except Exception:
        conn.rollback()
        raise

    finally:
        conn.close()
