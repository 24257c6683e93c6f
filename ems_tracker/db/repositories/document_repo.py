"""
Repository for storage documents — the local-storage key/value table.

Payloads are opaque JSON text here; ``ems_tracker.store.codec`` owns the
mapping between documents and models. Parameters are logged without
payloads (rider photos are embedded images and can be large).
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from ems_tracker.db.repositories.base import BaseRepository

logger = logging.getLogger(__name__)


class StorageDocumentRepository(BaseRepository):
    """Read/write access to the ``storage_documents`` table."""

    def get(self, storage_key: str) -> Optional[str]:
        """Return the payload stored under ``storage_key``, or ``None``."""
        row = self.fetchone(
            "SELECT payload FROM storage_documents WHERE storage_key = ?;",
            (storage_key,),
        )
        return None if row is None else row["payload"]

    def get_many(self, storage_keys: Iterable[str]) -> dict[str, Optional[str]]:
        """Return ``{key: payload or None}`` for every key in ``storage_keys``."""
        return {key: self.get(key) for key in storage_keys}

    def put_many(self, documents: dict[str, str]) -> None:
        """Upsert every ``{key: payload}`` pair and commit as one transaction.

        Args:
            documents: Storage key → JSON payload text.
        """
        with self.conn:
            self.executemany(
                """
                INSERT INTO storage_documents (storage_key, payload)
                VALUES (?, ?)
                ON CONFLICT(storage_key) DO UPDATE SET
                    payload    = excluded.payload,
                    updated_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now');
                """,
                list(documents.items()),
            )
        logger.debug("Persisted %d storage document(s).", len(documents))

    def keys(self) -> list[str]:
        """Return every stored key, sorted."""
        rows = self.fetchall(
            "SELECT storage_key FROM storage_documents ORDER BY storage_key;"
        )
        return [row["storage_key"] for row in rows]

    def count(self) -> int:
        row = self.fetchone("SELECT COUNT(*) AS n FROM storage_documents;")
        return int(row["n"]) if row else 0
