"""Tests for submission validation and storage."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from feedcast.services import submission_service
from tests.factories import make_submission


async def _insert(db, submission: dict) -> None:
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


def _days_ago(days: int) -> str:
    moment = datetime.now(timezone.utc) - timedelta(days=days)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class TestValidate:
    def test_valid_fields_pass(self):
        submission_service.validate_submission("Al", "al@example.com", "0123456789")

    @pytest.mark.parametrize(
        ("name", "email", "message", "reason"),
        [
            ("A", "a@example.com", "long enough message", "Name"),
            ("", "a@example.com", "long enough message", "Name"),
            ("Alice", "not-an-email", "long enough message", "email"),
            ("Alice", "a b@example.com", "long enough message", "email"),
            ("Alice", "a@example", "long enough message", "email"),
            ("Alice", "a@example.com", "too short", "Message"),
        ],
    )
    def test_invalid_fields_raise(self, name, email, message, reason):
        with pytest.raises(ValueError, match=reason):
            submission_service.validate_submission(name, email, message)


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_stores_and_returns_submission(self, fresh_db):
        created = await submission_service.create_submission(
            fresh_db, name="Alice", email="alice@example.com", message="Hello there, world"
        )
        assert set(created) == {"id", "name", "email", "message", "timestamp"}
        assert created["timestamp"].endswith("Z")

        cursor = await fresh_db.execute("SELECT name FROM submissions WHERE id = ?", (created["id"],))
        row = await cursor.fetchone()
        assert row[0] == "Alice"

    @pytest.mark.asyncio
    async def test_ids_are_unique(self, fresh_db):
        ids = set()
        for _ in range(5):
            created = await submission_service.create_submission(
                fresh_db, name="Bob", email="bob@example.com", message="Another message here"
            )
            ids.add(created["id"])
        assert len(ids) == 5


class TestListAndPurge:
    @pytest.mark.asyncio
    async def test_list_is_newest_first(self, fresh_db):
        older = make_submission(timestamp=_days_ago(2))
        newer = make_submission(timestamp=_days_ago(1))
        await _insert(fresh_db, older)
        await _insert(fresh_db, newer)

        listed = await submission_service.list_submissions(fresh_db, ttl_days=30)
        assert [s["id"] for s in listed] == [newer["id"], older["id"]]

    @pytest.mark.asyncio
    async def test_list_skips_expired(self, fresh_db):
        await _insert(fresh_db, make_submission(timestamp=_days_ago(40)))
        fresh = make_submission()
        await _insert(fresh_db, fresh)

        listed = await submission_service.list_submissions(fresh_db, ttl_days=30)
        assert [s["id"] for s in listed] == [fresh["id"]]

    @pytest.mark.asyncio
    async def test_purge_removes_only_expired(self, fresh_db):
        await _insert(fresh_db, make_submission(timestamp=_days_ago(31)))
        await _insert(fresh_db, make_submission(timestamp=_days_ago(45)))
        await _insert(fresh_db, make_submission())

        assert await submission_service.purge_expired(fresh_db, ttl_days=30) == 2
        cursor = await fresh_db.execute("SELECT COUNT(*) FROM submissions")
        assert (await cursor.fetchone())[0] == 1

    @pytest.mark.asyncio
    async def test_purge_on_empty_table(self, fresh_db):
        assert await submission_service.purge_expired(fresh_db, ttl_days=30) == 0
