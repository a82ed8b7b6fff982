"""Submission storage: validation, insert, listing and expiry.

Provides:
- ``validate_submission(name, email, message)``: raises ``ValueError``.
- ``create_submission(db, name, email, message)``: stores and returns the row.
- ``list_submissions(db, ttl_days)``: non-expired rows, newest first.
- ``purge_expired(db, ttl_days)``: deletes rows older than the TTL.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import aiosqlite

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_NAME_LENGTH = 2
MIN_MESSAGE_LENGTH = 10


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(moment: datetime) -> str:
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_submission(name: str, email: str, message: str) -> None:
    """Check already-trimmed form fields, raising ``ValueError`` with a user-facing reason."""
    if len(name) < MIN_NAME_LENGTH:
        raise ValueError("Name is required and must be at least 2 characters")
    if not EMAIL_RE.match(email):
        raise ValueError("Valid email is required")
    if len(message) < MIN_MESSAGE_LENGTH:
        raise ValueError("Message is required and must be at least 10 characters")


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


async def create_submission(
    db: aiosqlite.Connection,
    *,
    name: str,
    email: str,
    message: str,
) -> dict:
    """Insert a submission with a fresh id and UTC timestamp; return it as a dict."""
    submission = {
        "id": str(uuid4()),
        "name": name,
        "email": email,
        "message": message,
        "timestamp": _isoformat(_utcnow()),
    }
    await db.execute(
        "INSERT INTO submissions (id, name, email, message, timestamp) VALUES (?, ?, ?, ?, ?)",
        (
            submission["id"],
            submission["name"],
            submission["email"],
            submission["message"],
            submission["timestamp"],
        ),
    )
    await db.commit()
    return submission


async def list_submissions(db: aiosqlite.Connection, *, ttl_days: int) -> list[dict]:
    cutoff = _isoformat(_utcnow() - timedelta(days=ttl_days))
    cursor = await db.execute(
        "SELECT id, name, email, message, timestamp FROM submissions "
        "WHERE timestamp >= ? ORDER BY timestamp DESC",
        (cutoff,),
    )
    rows = await cursor.fetchall()
    return [
        {
            "id": row[0],
            "name": row[1],
            "email": row[2],
            "message": row[3],
            "timestamp": row[4],
        }
        for row in rows
    ]


async def purge_expired(db: aiosqlite.Connection, *, ttl_days: int) -> int:
    """Delete submissions older than *ttl_days*; return how many were removed."""
    cutoff = _isoformat(_utcnow() - timedelta(days=ttl_days))
    cursor = await db.execute("DELETE FROM submissions WHERE timestamp < ?", (cutoff,))
    await db.commit()
    removed = cursor.rowcount
    if removed:
        logger.info("Purged %d expired submissions", removed)
    return removed
