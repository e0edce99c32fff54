"""
JobNest Core - Base Repository.

Abstract base class for Supabase-backed repositories.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

import httpx
from fastapi.concurrency import run_in_threadpool
from postgrest.exceptions import APIError
from supabase import Client

from jobnest.core.supabase_client import get_supabase_client
from jobnest.exceptions import StoreConflictException, StoreUnavailableException

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Postgres unique_violation
UNIQUE_VIOLATION = "23505"


class BaseRepository(ABC, Generic[T]):
    """
    Abstract base repository for database operations.

    Rows come back as dicts; subclasses turn them into models via ``_to_model``.
    supabase-py is synchronous, so every query runs in the threadpool.
    """

    def __init__(self, client: Client | None = None):
        """Initialize repository with optional Supabase client."""
        self._client = client or get_supabase_client()

    @property
    @abstractmethod
    def table_name(self) -> str:
        """Return the table name for this repository."""
        ...

    @abstractmethod
    def _to_model(self, row: dict[str, Any]) -> T:
        ...

    @property
    def table(self):
        """Get the Supabase table reference."""
        return self._client.table(self.table_name)

    async def _execute(self, query, operation: str):
        """Run a query builder, translating PostgREST/transport errors."""
        try:
            return await run_in_threadpool(query.execute)
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise StoreConflictException(key=self._conflict_key(e), value=None) from e
            logger.error("%s.%s failed: code=%s message=%s", self.table_name, operation, e.code, e.message)
            raise StoreUnavailableException(operation) from e
        except httpx.HTTPError as e:
            logger.error("%s.%s transport error: %s", self.table_name, operation, e)
            raise StoreUnavailableException(operation) from e

    @staticmethod
    def _conflict_key(error: APIError) -> str:
        # Postgres reports e.g. 'Key (google_id)=(123) already exists.'
        details = error.details or ""
        if isinstance(details, str) and details.startswith("Key ("):
            return details[len("Key (") : details.find(")")]
        return "unknown"

    async def _first(self, query, operation: str) -> T | None:
        response = await self._execute(query.limit(1), operation)
        rows = response.data or []
        return self._to_model(rows[0]) if rows else None

    async def get_by_id(self, id: str) -> T | None:
        """
        Get a single record by ID.

        Args:
            id: The record id

        Returns:
            The record if found, None otherwise
        """
        return await self._first(self.table.select("*").eq("id", str(id)), "get_by_id")

    async def create(self, data: dict[str, Any]) -> T:
        """
        Create a new record.

        Raises:
            StoreConflictException: a unique index rejected the row
        """
        response = await self._execute(self.table.insert(data), "create")
        return self._to_model(response.data[0])

    async def update(self, id: str, data: dict[str, Any]) -> T | None:
        """
        Patch an existing record.

        Returns:
            The updated record, or None if no row has this id
        """
        response = await self._execute(self.table.update(data).eq("id", str(id)), "update")
        rows = response.data or []
        return self._to_model(rows[0]) if rows else None
