"""Async SQLite database for small pieces of gobbler run state."""

from pathlib import Path
from typing import Optional

import aiosqlite

from .logging_config import get_logger

logger = get_logger(__name__)


class Database:
    """Async SQLite key/value state store."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._conn: Optional[aiosqlite.Connection] = None

    async def connect(self) -> None:
        """Connect to database and create tables if they don't exist."""
        if self._conn is not None:
            return
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = await aiosqlite.connect(self.db_path)
        self._conn.row_factory = aiosqlite.Row
        await self._execute_script(SCHEMA_SQL)
        logger.debug("database_connected", path=self.db_path)

    async def close(self) -> None:
        """Close database connection."""
        if self._conn:
            await self._conn.close()
            self._conn = None
            logger.debug("database_closed")

    async def __aenter__(self) -> "Database":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _execute_script(self, script: str) -> None:
        """Execute a SQL script with multiple statements."""
        if not self._conn:
            raise RuntimeError("Database not connected")
        await self._conn.executescript(script)
        await self._conn.commit()

    async def _execute(
        self, query: str, params: tuple = ()
    ) -> aiosqlite.Cursor:
        """Execute a single query."""
        if not self._conn:
            raise RuntimeError("Database not connected")
        return await self._conn.execute(query, params)

    async def get_state(self, key: str) -> Optional[int]:
        """Get an integer state value, or None if it was never set."""
        cursor = await self._execute("SELECT value FROM state WHERE key = ?", (key,))
        row = await cursor.fetchone()
        return row["value"] if row else None

    async def set_state(self, key: str, value: int) -> None:
        await self._execute(
            """INSERT INTO state (key, value, updated_at)
               VALUES (?, ?, CURRENT_TIMESTAMP)
               ON CONFLICT(key) DO UPDATE SET
                   value = excluded.value,
                   updated_at = excluded.updated_at""",
            (key, value),
        )
        await self._conn.commit()
        logger.debug("state_set", key=key, value=value)


SCHEMA_SQL = """
-- Integer state values such as the last successful run
CREATE TABLE IF NOT EXISTS state (
    key TEXT PRIMARY KEY,
    value INTEGER NOT NULL,
    updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
);
"""
