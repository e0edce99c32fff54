"""Tests for the users stores.

The in-memory store is exercised directly. The Supabase store runs against
a fake client that records the PostgREST calls it receives.
"""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from jobnest.exceptions import StoreConflictException, StoreUnavailableException
from jobnest.modules.identity.repository import InMemoryUsersRepository, SupabaseUsersRepository

ROW = {
    "id": "7d1c0b2e-0000-4000-8000-000000000001",
    "external_id": None,
    "google_id": "g-1",
    "name": "Ada",
    "email": "ada@example.com",
    "password": None,
    "picture": None,
    "role": "student",
    "company_id": None,
    "created_at": "2026-10-01T12:00:00+00:00",
    "updated_at": "2026-10-01T12:00:00+00:00",
}


class _FakeQuery:
    def __init__(self, table, op, payload=None):
        self.table = table
        self.op = op
        self.payload = payload
        self.filters = []
        self.order_by = None
        self.limit_n = None

    def eq(self, column, value):
        self.filters.append(("eq", column, value))
        return self

    def is_(self, column, value):
        self.filters.append(("is", column, value))
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def execute(self):
        self.table.executed.append(self)
        if self.table.error is not None:
            raise self.table.error
        return SimpleNamespace(data=self.table.rows, count=None)


class _FakeTable:
    def __init__(self, rows=None, error=None):
        self.rows = rows if rows is not None else []
        self.error = error
        self.executed = []

    def select(self, columns="*"):
        return _FakeQuery(self, "select")

    def insert(self, payload):
        return _FakeQuery(self, "insert", payload)

    def update(self, payload):
        return _FakeQuery(self, "update", payload)


class _FakeSupabase:
    def __init__(self, table: _FakeTable):
        self.users = table

    def table(self, name: str):
        assert name == "users"
        return self.users


def _repo(table: _FakeTable) -> SupabaseUsersRepository:
    return SupabaseUsersRepository(client=_FakeSupabase(table), table_name="users")


class TestSupabaseUsersRepository:
    @pytest.mark.asyncio
    async def test_find_by_google_id(self):
        table = _FakeTable(rows=[ROW])

        user = await _repo(table).find_by_google_id("g-1")

        assert user.id == ROW["id"]
        assert user.google_id == "g-1"
        query = table.executed[0]
        assert query.op == "select"
        assert query.filters == [("eq", "google_id", "g-1")]
        assert query.limit_n == 1

    @pytest.mark.asyncio
    async def test_find_by_name_role_takes_oldest(self):
        table = _FakeTable(rows=[ROW])

        await _repo(table).find_by_name_role("Ada", "student")

        query = table.executed[0]
        assert query.filters == [("eq", "name", "Ada"), ("eq", "role", "student")]
        assert query.order_by == ("created_at", False)

    @pytest.mark.asyncio
    async def test_miss_returns_none(self):
        assert await _repo(_FakeTable(rows=[])).find_by_external_id("sb-1") is None

    @pytest.mark.asyncio
    async def test_unique_violation_is_store_conflict(self):
        error = APIError(
            {
                "message": 'duplicate key value violates unique constraint "users_google_id_key"',
                "code": "23505",
                "details": "Key (google_id)=(g-1) already exists.",
                "hint": None,
            }
        )

        with pytest.raises(StoreConflictException) as exc_info:
            await _repo(_FakeTable(error=error)).create({"google_id": "g-1", "name": "Ada", "role": "student"})
        assert exc_info.value.key == "google_id"

    @pytest.mark.asyncio
    async def test_other_errors_are_store_unavailable(self):
        error = APIError({"message": "permission denied", "code": "42501", "details": None, "hint": None})

        with pytest.raises(StoreUnavailableException) as exc_info:
            await _repo(_FakeTable(error=error)).find_by_email("ada@example.com")
        assert exc_info.value.status_code == 500
        assert "permission" not in exc_info.value.message

    @pytest.mark.asyncio
    async def test_set_if_absent_is_conditional_on_null(self):
        table = _FakeTable(rows=[ROW])

        written = await _repo(table).set_if_absent(ROW["id"], "picture", "https://img/1")

        assert written is True
        query = table.executed[0]
        assert query.op == "update"
        assert query.payload["picture"] == "https://img/1"
        assert ("is", "picture", "null") in query.filters
        assert ("eq", "id", ROW["id"]) in query.filters

    @pytest.mark.asyncio
    async def test_set_if_absent_rejects_mutable_fields(self):
        with pytest.raises(ValueError):
            await _repo(_FakeTable()).set_if_absent(ROW["id"], "email", "x@example.com")


class TestInMemoryUsersRepository:
    @pytest.mark.asyncio
    async def test_duplicate_google_id_conflicts(self, repository):
        await repository.create({"name": "Ada", "role": "student", "google_id": "g-1"})

        with pytest.raises(StoreConflictException) as exc_info:
            await repository.create({"name": "Someone", "role": "employer", "google_id": "g-1"})
        assert exc_info.value.key == "google_id"

    @pytest.mark.asyncio
    async def test_duplicate_external_id_conflicts(self, repository):
        await repository.create({"name": "Bo", "role": "student", "external_id": "sb-1"})

        with pytest.raises(StoreConflictException):
            await repository.create({"name": "Bo", "role": "student", "external_id": "sb-1"})

    @pytest.mark.asyncio
    async def test_name_role_is_unique_only_among_plain_records(self, repository):
        await repository.create({"name": "Ada", "role": "student"})
        await repository.create({"name": "Ada", "role": "student", "google_id": "g-1"})
        await repository.create({"name": "Ada", "role": "student", "external_id": "sb-1"})

        with pytest.raises(StoreConflictException) as exc_info:
            await repository.create({"name": "Ada", "role": "student"})
        assert exc_info.value.key == "name,role"
        assert len(repository.list_users()) == 3

    @pytest.mark.asyncio
    async def test_find_returns_oldest_match(self, repository):
        first = await repository.create({"name": "Ada", "role": "student", "email": "ada@example.com"})
        await repository.create({"name": "Ada", "role": "student", "google_id": "g-1", "email": "ada@example.com"})

        assert (await repository.find_by_name_role("Ada", "student")).id == first.id
        assert (await repository.find_by_email("ada@example.com")).id == first.id

    @pytest.mark.asyncio
    async def test_set_if_absent_writes_once(self, repository):
        user = await repository.create({"name": "Ada", "role": "student"})

        assert await repository.set_if_absent(user.id, "picture", "https://img/1") is True
        assert await repository.set_if_absent(user.id, "picture", "https://img/2") is False
        assert (await repository.get_by_id(user.id)).picture == "https://img/1"

    @pytest.mark.asyncio
    async def test_backfilled_google_id_must_be_unique(self, repository):
        await repository.create({"name": "Ada", "role": "student", "google_id": "g-1"})
        other = await repository.create({"name": "Eve", "role": "student"})

        with pytest.raises(StoreConflictException):
            await repository.set_if_absent(other.id, "google_id", "g-1")

    @pytest.mark.asyncio
    async def test_update_patches_and_bumps_updated_at(self, repository):
        user = await repository.create({"name": "Ada", "role": "student"})

        updated = await repository.update(user.id, {"email": "ada@example.com"})

        assert updated.email == "ada@example.com"
        assert updated.name == "Ada"
        assert updated.updated_at >= user.updated_at

    @pytest.mark.asyncio
    async def test_update_unknown_id_returns_none(self, repository):
        assert await repository.update("missing", {"name": "x"}) is None

    @pytest.mark.asyncio
    async def test_returned_records_are_copies(self, repository):
        user = await repository.create({"name": "Ada", "role": "student"})
        user.name = "Mutated"

        assert (await repository.get_by_id(user.id)).name == "Ada"
