"""
JobNest Identity - Repository.

Persistence for canonical user records.

Expected Supabase schema:

    users(
        id uuid primary key default gen_random_uuid(),
        external_id text, google_id text,
        name text not null, email text, password text, picture text,
        role text not null check (role in ('student', 'employer')),
        company_id text,
        created_at timestamptz default now(), updated_at timestamptz default now()
    )
    create unique index on users (google_id) where google_id is not null;
    create unique index on users (external_id) where external_id is not null;
    create unique index on users (name, role)
        where google_id is null and external_id is null;
    create index on users (email);

The unique indexes are what make ``create`` a compare-and-create: a second
insert for an identity key that is already taken fails with
StoreConflictException instead of producing a duplicate. The (name, role)
index only covers records with no provider id, so a Google or Supabase user
never collides with a plain-login user who happens to share the name.
``InMemoryUsersRepository`` enforces the same three rules.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from supabase import Client

from jobnest.config import get_settings
from jobnest.core.repository import BaseRepository
from jobnest.exceptions import StoreConflictException
from jobnest.modules.identity.schemas import User

# Fields the resolver may only fill while they are still empty.
WRITE_ONCE_FIELDS = frozenset({"google_id", "external_id", "picture"})


class UsersRepository(ABC):
    """Store operations the identity resolver relies on."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None: ...

    @abstractmethod
    async def find_by_name_role(self, name: str, role: str) -> User | None:
        """Oldest record with this (name, role), whatever its provider ids."""

    @abstractmethod
    async def find_by_google_id(self, google_id: str) -> User | None: ...

    @abstractmethod
    async def find_by_email(self, email: str) -> User | None: ...

    @abstractmethod
    async def find_by_external_id(self, external_id: str) -> User | None: ...

    @abstractmethod
    async def create(self, data: dict[str, Any]) -> User:
        """Insert a record unless its identity key is taken (StoreConflictException)."""

    @abstractmethod
    async def update(self, user_id: str, data: dict[str, Any]) -> User | None: ...

    @abstractmethod
    async def set_if_absent(self, user_id: str, field: str, value: Any) -> bool:
        """Set ``field`` only if it is currently null. Returns True if written."""


def _check_write_once(field: str) -> None:
    if field not in WRITE_ONCE_FIELDS:
        raise ValueError(f"{field} is not a write-once field")


# =============================================================================
# Supabase
# =============================================================================


class SupabaseUsersRepository(BaseRepository[User], UsersRepository):
    """Users table in Supabase (Postgres via PostgREST)."""

    def __init__(self, client: Client | None = None, table_name: str | None = None):
        super().__init__(client)
        self._table_name = table_name or get_settings().supabase.users_table

    @property
    def table_name(self) -> str:
        return self._table_name

    def _to_model(self, row: dict[str, Any]) -> User:
        return User.model_validate(row)

    async def find_by_name_role(self, name: str, role: str) -> User | None:
        query = self.table.select("*").eq("name", name).eq("role", role).order("created_at")
        return await self._first(query, "find_by_name_role")

    async def find_by_google_id(self, google_id: str) -> User | None:
        return await self._first(self.table.select("*").eq("google_id", google_id), "find_by_google_id")

    async def find_by_email(self, email: str) -> User | None:
        query = self.table.select("*").eq("email", email).order("created_at")
        return await self._first(query, "find_by_email")

    async def find_by_external_id(self, external_id: str) -> User | None:
        return await self._first(self.table.select("*").eq("external_id", external_id), "find_by_external_id")

    async def update(self, user_id: str, data: dict[str, Any]) -> User | None:
        patch = dict(data)
        patch["updated_at"] = datetime.now(timezone.utc).isoformat()
        return await super().update(user_id, patch)

    async def set_if_absent(self, user_id: str, field: str, value: Any) -> bool:
        _check_write_once(field)
        query = (
            self.table.update({field: value, "updated_at": datetime.now(timezone.utc).isoformat()})
            .eq("id", str(user_id))
            .is_(field, "null")
        )
        response = await self._execute(query, "set_if_absent")
        return bool(response.data)


# =============================================================================
# In-memory
# =============================================================================


def conflicting_key(existing: User, candidate: User) -> str | None:
    """Name the identity key ``candidate`` would duplicate, if any."""
    if candidate.google_id and existing.google_id == candidate.google_id:
        return "google_id"
    if candidate.external_id and existing.external_id == candidate.external_id:
        return "external_id"
    if (
        not candidate.google_id
        and not candidate.external_id
        and not existing.google_id
        and not existing.external_id
        and existing.name == candidate.name
        and existing.role == candidate.role
    ):
        return "name,role"
    return None


class InMemoryUsersRepository(UsersRepository):
    """
    Process-local users store.

    Each operation runs under one lock with no await inside, so a create
    sees every record committed before it. Records keep insertion order,
    which makes "first match" mean "oldest".
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._users: dict[str, User] = {}

    def _find(self, **fields: Any) -> User | None:
        with self._lock:
            for user in self._users.values():
                if all(getattr(user, k) == v for k, v in fields.items()):
                    return user.model_copy()
        return None

    async def get_by_id(self, user_id: str) -> User | None:
        with self._lock:
            user = self._users.get(str(user_id))
            return user.model_copy() if user else None

    async def find_by_name_role(self, name: str, role: str) -> User | None:
        return self._find(name=name, role=role)

    async def find_by_google_id(self, google_id: str) -> User | None:
        return self._find(google_id=google_id)

    async def find_by_email(self, email: str) -> User | None:
        return self._find(email=email)

    async def find_by_external_id(self, external_id: str) -> User | None:
        return self._find(external_id=external_id)

    def _store(self, candidate: User) -> None:
        """Write ``candidate`` unless another record holds one of its keys. Must hold lock."""
        for existing in self._users.values():
            if existing.id == candidate.id:
                continue
            key = conflicting_key(existing, candidate)
            if key:
                raise StoreConflictException(key=key)
        self._users[candidate.id] = candidate

    async def create(self, data: dict[str, Any]) -> User:
        now = datetime.now(timezone.utc)
        candidate = User.model_validate({**data, "id": str(uuid4()), "created_at": now, "updated_at": now})

        with self._lock:
            self._store(candidate)
            return candidate.model_copy()

    async def update(self, user_id: str, data: dict[str, Any]) -> User | None:
        with self._lock:
            user = self._users.get(str(user_id))
            if user is None:
                return None
            updated = user.model_copy(update={**data, "updated_at": datetime.now(timezone.utc)})
            self._store(updated)
            return updated.model_copy()

    async def set_if_absent(self, user_id: str, field: str, value: Any) -> bool:
        _check_write_once(field)
        with self._lock:
            user = self._users.get(str(user_id))
            if user is None or getattr(user, field) is not None:
                return False
            self._store(user.model_copy(update={field: value, "updated_at": datetime.now(timezone.utc)}))
            return True

    def list_users(self) -> list[User]:
        with self._lock:
            return [u.model_copy() for u in self._users.values()]
