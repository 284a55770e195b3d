"""Key-value repository - the persistent medium behind every cache layer."""

from datetime import datetime

import duckdb
from loguru import logger

from app.repositories.base import BaseRepository
from linkie_client.errors import StorageFailure


class KeyValueRepository(BaseRepository):
    """String values under string keys, stored in the cache_entry table."""

    def get(self, key: str) -> str | None:
        row = self.fetchone("SELECT value FROM cache_entry WHERE key = ?", [key])
        return row[0] if row else None

    def set(self, key: str, value: str) -> None:
        """Insert or overwrite; medium errors surface as StorageFailure."""
        try:
            self.execute(
                """
                INSERT OR REPLACE INTO cache_entry (key, value, updated_at)
                VALUES (?, ?, ?)
                """,
                [key, value, datetime.now()],
            )
        except duckdb.Error as e:
            logger.error("Storage write failed for {}: {}", key, e)
            raise StorageFailure(f"Failed to write {key}: {e}") from e

    def remove(self, key: str) -> None:
        try:
            self.execute("DELETE FROM cache_entry WHERE key = ?", [key])
        except duckdb.Error as e:
            raise StorageFailure(f"Failed to remove {key}: {e}") from e

    def list_keys(self, prefix: str | None = None) -> list[str]:
        """All keys, or only those starting with `prefix`."""
        if prefix is None:
            rows = self.fetchall("SELECT key FROM cache_entry ORDER BY key")
        else:
            rows = self.fetchall("SELECT key FROM cache_entry WHERE starts_with(key, ?) ORDER BY key", [prefix])
        return [r[0] for r in rows]
