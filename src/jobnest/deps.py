"""
JobNest - Dependency Injection.

FastAPI dependencies for settings, stores, verifiers and services.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends
from google.auth.transport import requests as google_requests

from jobnest.auth import get_session_issuer
from jobnest.auth.google import GoogleVerifier
from jobnest.auth.session import SessionIssuer
from jobnest.auth.supabase import SupabaseVerifier
from jobnest.config import Settings, get_settings
from jobnest.modules.identity.repository import (
    InMemoryUsersRepository,
    SupabaseUsersRepository,
    UsersRepository,
)
from jobnest.modules.identity.resolver import IdentityResolver
from jobnest.modules.identity.service import AuthService


# =============================================================================
# Identity Store
# =============================================================================


@lru_cache
def get_memory_users_repository() -> InMemoryUsersRepository:
    """Process-wide in-memory store (IDENTITY_STORE=memory)."""
    return InMemoryUsersRepository()


def get_users_repository(settings: Annotated[Settings, Depends(get_settings)]) -> UsersRepository:
    """Users store selected by IDENTITY_STORE."""
    if settings.identity_store == "memory":
        return get_memory_users_repository()
    return SupabaseUsersRepository(table_name=settings.supabase.users_table)


# =============================================================================
# Verifiers
# =============================================================================


@lru_cache
def get_google_transport_request() -> google_requests.Request:
    """Process-wide transport for Google cert fetches (one pooled requests.Session)."""
    return google_requests.Request()


def get_google_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> GoogleVerifier:
    return GoogleVerifier(settings.google, request=get_google_transport_request())


def get_supabase_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> SupabaseVerifier:
    return SupabaseVerifier(settings.supabase)


# =============================================================================
# Services
# =============================================================================


def get_auth_service(
    settings: Annotated[Settings, Depends(get_settings)],
    repository: Annotated[UsersRepository, Depends(get_users_repository)],
    issuer: Annotated[SessionIssuer, Depends(get_session_issuer)],
    google_verifier: Annotated[GoogleVerifier, Depends(get_google_verifier)],
    supabase_verifier: Annotated[SupabaseVerifier, Depends(get_supabase_verifier)],
) -> AuthService:
    """Get auth service instance."""
    return AuthService(
        repository=repository,
        issuer=issuer,
        google_verifier=google_verifier,
        supabase_verifier=supabase_verifier,
        resolver=IdentityResolver(repository, max_attempts=settings.identity_max_resolve_attempts),
    )
