"""
Site Content Store - SQLite Database

Uses aiosqlite for async operations within FastAPI and plain sqlite3 for the
one-off schema setup at startup.

There is a single table, ``content``, holding one row per content key.  Rows
are only ever upserted; nothing in the application deletes them.
"""

import sqlite3
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import aiosqlite
from loguru import logger

from sitecontent.config import DB_PATH

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------
SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS content (
    key TEXT PRIMARY KEY NOT NULL,
    value TEXT NOT NULL DEFAULT '',
    updated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP
);
"""

UPSERT_SQL = """
INSERT INTO content (key, value, updated_at)
VALUES (?, ?, CURRENT_TIMESTAMP)
ON CONFLICT(key) DO UPDATE
SET value = excluded.value,
    updated_at = CURRENT_TIMESTAMP
"""


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------
def init_db() -> None:
    """Initialize the SQLite database and create the content table."""
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    try:
        with sqlite3.connect(str(DB_PATH)) as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()
        logger.success(f"✅ Database initialized at {DB_PATH}")
    except Exception as e:
        logger.critical(f"❌ Failed to initialize database: {e}")
        raise


# ---------------------------------------------------------------------------
# Async context manager (for use in FastAPI routes)
# ---------------------------------------------------------------------------
@asynccontextmanager
async def get_async_connection():
    """Async context manager for an aiosqlite connection with row factory."""
    db = await aiosqlite.connect(str(DB_PATH))
    db.row_factory = aiosqlite.Row
    try:
        yield db
    finally:
        await db.close()


def row_to_dict(row) -> Dict[str, Any]:
    """Convert a database row to a plain dictionary."""
    if row is None:
        return {}
    return dict(row)


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------
async def get_all_content() -> Dict[str, str]:
    """Return every stored content value keyed by its content key."""
    async with get_async_connection() as db:
        cursor = await db.execute("SELECT key, value FROM content ORDER BY key")
        rows = await cursor.fetchall()
    return {row["key"]: row["value"] for row in rows}


async def get_content_item(key: str) -> Optional[Dict[str, Any]]:
    """Fetch a single content row (key, value, updated_at) or None."""
    async with get_async_connection() as db:
        cursor = await db.execute(
            "SELECT key, value, updated_at FROM content WHERE key = ?", (key,)
        )
        row = await cursor.fetchone()
        return row_to_dict(row) if row else None


async def count_content() -> int:
    """Return the number of stored content keys."""
    async with get_async_connection() as db:
        cursor = await db.execute("SELECT COUNT(*) as cnt FROM content")
        row = await cursor.fetchone()
        return row["cnt"] if row else 0


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------
async def upsert_content(key: str, value: str) -> None:
    """
    Insert or update the content row for *key*.

    The ``updated_at`` timestamp is refreshed on every write, whether the
    row was created or overwritten.
    """
    async with get_async_connection() as db:
        await db.execute(UPSERT_SQL, (key, value))
        await db.commit()
    logger.info("💾 Content saved: {}", key)


async def upsert_content_bulk(entries: Dict[str, str]) -> int:
    """
    Upsert every ``key -> value`` pair in *entries* in a single transaction.

    Either all entries are written or, if any statement fails, none are.
    Returns the number of entries written.
    """
    if not entries:
        return 0

    async with get_async_connection() as db:
        try:
            await db.executemany(UPSERT_SQL, list(entries.items()))
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    logger.info("💾 Bulk content saved ({} key{})", len(entries), "s" if len(entries) != 1 else "")
    return len(entries)
