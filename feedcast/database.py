"""Database connection management and schema initialisation.

Provides:
- ``init_db(conn)``: Enable PRAGMAs and create the ``submissions`` table.
- ``connect(database_url)``: Open an initialised aiosqlite connection.
"""

from __future__ import annotations

import aiosqlite

# ---------------------------------------------------------------------------
# Schema SQL
# ---------------------------------------------------------------------------

SCHEMA_SQL = """\
CREATE TABLE IF NOT EXISTS submissions (
    id              TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    email           TEXT NOT NULL,
    message         TEXT NOT NULL,
    timestamp       TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_submissions_timestamp ON submissions(timestamp);
"""


async def init_db(conn: aiosqlite.Connection) -> None:
    """Apply PRAGMAs and create the schema. Idempotent."""
    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.executescript(SCHEMA_SQL)
    await conn.commit()


def database_path(database_url: str) -> str:
    """Strip the ``sqlite:///`` prefix from *database_url*."""
    return database_url.replace("sqlite:///", "")


async def connect(database_url: str) -> aiosqlite.Connection:
    """Open a connection for *database_url* with ``Row`` results and the schema in place."""
    conn = await aiosqlite.connect(database_path(database_url))
    conn.row_factory = aiosqlite.Row
    await init_db(conn)
    return conn
