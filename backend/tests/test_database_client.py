"""
Behavior Tracker Backend: DatabaseClient Tests
==============================================

What:  Row CRUD, query composition and error translation against a real
       (SQLite) database built from the table models.

What we test:
    ✅ insert/select/select_one/count/update round trips
    ✅ RowQuery matching, case-insensitive search, ranges, ordering, paging
    ✅ Unique and foreign-key violations become ConflictError
    ✅ Driver failures and unknown tables become DatabaseError
"""

import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from tracker.config import Settings
from tracker.database import DatabaseClient, RowQuery, create_engine_from_settings, get_db_client
from tracker.exceptions import ConflictError, DatabaseError


class TestInsertAndSelect:
    @pytest.mark.asyncio
    async def test_insert_returns_stored_rows(self, db_client):
        rows = await db_client.insert("organizations", [{"name": "Oak"}, {"name": "Pine"}])
        assert [row["name"] for row in rows] == ["Oak", "Pine"]
        assert uuid.UUID(rows[0]["id"]).version == 4
        assert rows[0]["created_at"] is not None

    @pytest.mark.asyncio
    async def test_insert_nothing_is_a_no_op(self, db_client):
        assert await db_client.insert("organizations", []) == []

    @pytest.mark.asyncio
    async def test_select_one_by_match(self, db_client, organization):
        row = await db_client.select_one("organizations", id=organization["id"])
        assert row["name"] == "Maple Elementary"
        assert await db_client.select_one("organizations", id=str(uuid.uuid4())) is None

    @pytest.mark.asyncio
    async def test_search_is_case_insensitive_across_columns(self, db_client, organization):
        await db_client.insert(
            "students",
            [
                {"first_name": "Ada", "last_name": "Byron", "organization_id": organization["id"]},
                {"first_name": "Alan", "last_name": "Turing", "organization_id": organization["id"]},
                {"first_name": "Grace", "last_name": "Adams", "organization_id": organization["id"]},
            ],
        )
        query = RowQuery(search="AD", search_columns=("first_name", "last_name"), order_by="first_name")
        rows = await db_client.select("students", query)
        assert [row["first_name"] for row in rows] == ["Ada", "Grace"]
        assert await db_client.count("students", query) == 2

    @pytest.mark.asyncio
    async def test_order_limit_offset(self, db_client):
        await db_client.insert("organizations", [{"name": name} for name in ("C", "A", "B", "D")])
        page = await db_client.select(
            "organizations", RowQuery(order_by="name", descending=True, limit=2, offset=1)
        )
        assert [row["name"] for row in page] == ["C", "B"]
        assert await db_client.count("organizations") == 4

    @pytest.mark.asyncio
    async def test_range_is_inclusive(self, db_client):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        await db_client.insert(
            "organizations",
            [{"name": f"Org{day}", "created_at": base + timedelta(days=day)} for day in range(5)],
        )
        query = RowQuery(
            range_column="created_at",
            lower=base + timedelta(days=1),
            upper=base + timedelta(days=3),
            order_by="created_at",
        )
        rows = await db_client.select("organizations", query)
        assert [row["name"] for row in rows] == ["Org1", "Org2", "Org3"]


class TestUpdate:
    @pytest.mark.asyncio
    async def test_update_returns_changed_rows(self, db_client, organization):
        rows = await db_client.update("organizations", {"name": "Birch"}, id=organization["id"])
        assert len(rows) == 1
        assert rows[0]["name"] == "Birch"
        assert rows[0]["id"] == organization["id"]

    @pytest.mark.asyncio
    async def test_update_of_missing_row_returns_empty(self, db_client):
        assert await db_client.update("organizations", {"name": "X"}, id=str(uuid.uuid4())) == []


class TestConstraintErrors:
    @pytest.mark.asyncio
    async def test_unique_violation_is_conflict(self, db_client):
        await db_client.insert("behavior_categories", [{"name": "Hitting"}])
        with pytest.raises(ConflictError):
            await db_client.insert("behavior_categories", [{"name": "Hitting"}])

    @pytest.mark.asyncio
    async def test_missing_foreign_key_is_conflict(self, db_client):
        with pytest.raises(ConflictError):
            await db_client.insert(
                "students",
                [{"first_name": "A", "last_name": "B", "organization_id": str(uuid.uuid4())}],
            )

    @pytest.mark.asyncio
    async def test_failed_batch_is_rolled_back(self, db_client, organization):
        rows = [
            {"first_name": "Ok", "last_name": "Row", "organization_id": organization["id"]},
            {"first_name": "Bad", "last_name": "Row", "organization_id": str(uuid.uuid4())},
        ]
        with pytest.raises(ConflictError):
            await db_client.insert("students", rows)
        assert await db_client.count("students") == 0


class TestClientErrors:
    @pytest.mark.asyncio
    async def test_unknown_table(self, db_client):
        with pytest.raises(DatabaseError, match="Unknown table"):
            await db_client.select("notes")

    @pytest.mark.asyncio
    async def test_ping_succeeds(self, db_client):
        await db_client.ping()

    @pytest.mark.asyncio
    async def test_ping_failure_is_database_error(self, tmp_path):
        missing_dir = tmp_path / "does-not-exist" / "tracker.db"
        client = DatabaseClient(
            create_engine_from_settings(Settings(database_url=f"sqlite+aiosqlite:///{missing_dir}"))
        )
        try:
            with pytest.raises(DatabaseError) as exc_info:
                await client.ping()
            assert exc_info.value.context["operation"] == "ping"
            assert exc_info.value.context["detail"]
        finally:
            await client.dispose()

    def test_dependency_requires_initialised_client(self):
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace()))
        with pytest.raises(DatabaseError, match="not initialised"):
            get_db_client(request)

    @pytest.mark.asyncio
    async def test_dependency_returns_client(self, db_client):
        request = SimpleNamespace(app=SimpleNamespace(state=SimpleNamespace(db=db_client)))
        assert get_db_client(request) is db_client
