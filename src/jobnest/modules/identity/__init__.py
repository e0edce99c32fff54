"""JobNest Identity Module - Canonical users, login paths and sessions."""

from jobnest.modules.identity.repository import (
    InMemoryUsersRepository,
    SupabaseUsersRepository,
    UsersRepository,
)
from jobnest.modules.identity.resolver import IdentityResolver
from jobnest.modules.identity.service import AuthService

__all__ = [
    "AuthService",
    "IdentityResolver",
    "InMemoryUsersRepository",
    "SupabaseUsersRepository",
    "UsersRepository",
]
