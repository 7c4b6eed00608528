"""SQLite key-value backend.

Provides persistent storage using a SQLite database file.
Uses aiosqlite for async access.
"""

import logging
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite

from .base import KeyValueStore

logger = logging.getLogger(__name__)


class SQLiteKeyValueStore(KeyValueStore):
    """SQLite-backed key-value store.

    Every write is committed before the call returns, so a value survives
    the process exiting right after ``set`` or ``delete``.
    """

    def __init__(self, path: str | Path = "./mkai_history.db"):
        self._db_path = Path(path)
        self._connection: aiosqlite.Connection | None = None

    async def connect(self) -> None:
        """Open the database file and create the schema."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._connection = await aiosqlite.connect(self._db_path)
        await self._connection.execute("""
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
        """)
        await self._connection.commit()
        logger.debug("Opened key-value store at %s", self._db_path)

    async def disconnect(self) -> None:
        """Close database connection."""
        if self._connection:
            await self._connection.close()
            self._connection = None

    def _require_connection(self) -> aiosqlite.Connection:
        if self._connection is None:
            raise RuntimeError("SQLiteKeyValueStore is not connected; call connect() first")
        return self._connection

    async def get(self, key: str) -> str | None:
        conn = self._require_connection()
        async with conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        return row[0] if row else None

    async def set(self, key: str, value: str) -> None:
        conn = self._require_connection()
        now = datetime.now(timezone.utc).isoformat()
        await conn.execute("""
            INSERT INTO kv_store (key, value, updated_at)
            VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
        """, (key, value, now))
        await conn.commit()

    async def delete(self, key: str) -> None:
        conn = self._require_connection()
        await conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        await conn.commit()

    @property
    def backend_type(self) -> str:
        return "sqlite"

    @property
    def db_path(self) -> Path:
        return self._db_path
