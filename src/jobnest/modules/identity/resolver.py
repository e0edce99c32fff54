"""
JobNest Identity - Resolver.

Maps an identity claim from any entry path onto exactly one canonical user.

Each path contributes a rule (how to look the user up, what a new record
looks like, which fields a repeat login may change); ``IdentityResolver``
runs every rule through the same find-or-create loop.

Create is compare-and-create: the store refuses a record whose identity key
already exists. When two first-time logins race, the loser gets
StoreConflictException, looks the user up again and continues as a repeat
login, so both end on the same record.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from jobnest.auth.claims import GoogleClaim, IdentityClaim, PlainClaim, SupabaseClaim, normalize_role
from jobnest.exceptions import StoreConflictException, StoreUnavailableException
from jobnest.modules.identity.repository import UsersRepository
from jobnest.modules.identity.schemas import User
from jobnest.observability import MetricsStore, get_metrics_store

logger = logging.getLogger(__name__)

# (write-once fields, overwrite fields)
Changes = tuple[dict[str, Any], dict[str, Any]]


class ResolutionRule(ABC):
    """Per-path lookup/create/merge behaviour."""

    kind: str

    @abstractmethod
    async def lookup(self, repository: UsersRepository, claim: Any) -> User | None: ...

    @abstractmethod
    def new_record(self, claim: Any) -> dict[str, Any]: ...

    def changes(self, user: User, claim: Any) -> Changes:
        return {}, {}


class PlainRule(ResolutionRule):
    """Keyed on (name, role). A repeat login returns the record untouched."""

    kind = "plain"

    async def lookup(self, repository: UsersRepository, claim: PlainClaim) -> User | None:
        return await repository.find_by_name_role(claim.name, claim.role)

    def new_record(self, claim: PlainClaim) -> dict[str, Any]:
        return {"name": claim.name, "role": claim.role, "email": claim.email}


class GoogleRule(ResolutionRule):
    """Keyed on google_id, falling back to email. Google owns name and email."""

    kind = "google"

    async def lookup(self, repository: UsersRepository, claim: GoogleClaim) -> User | None:
        user = await repository.find_by_google_id(claim.provider_key)
        if user is None and claim.email:
            user = await repository.find_by_email(claim.email)
        return user

    def new_record(self, claim: GoogleClaim) -> dict[str, Any]:
        role = "employer" if normalize_role(claim.role_hint) == "employer" else "student"
        return {
            "google_id": claim.provider_key,
            "name": claim.name,
            "email": claim.email,
            "picture": claim.picture,
            "role": role,
        }

    def changes(self, user: User, claim: GoogleClaim) -> Changes:
        # google_id goes first: once set, the record leaves the plain (name, role) key space.
        write_once = {"google_id": claim.provider_key, "picture": claim.picture}

        overwrite: dict[str, Any] = {}
        if user.name != claim.name:
            overwrite["name"] = claim.name
        if claim.email and user.email != claim.email:
            overwrite["email"] = claim.email
        return write_once, overwrite


class SupabaseRule(ResolutionRule):
    """Keyed on external_id only; never merged with other users by email."""

    kind = "supabase"

    async def lookup(self, repository: UsersRepository, claim: SupabaseClaim) -> User | None:
        return await repository.find_by_external_id(claim.provider_key)

    def new_record(self, claim: SupabaseClaim) -> dict[str, Any]:
        return {
            "external_id": claim.provider_key,
            "name": claim.name,
            "email": claim.email,
            "role": normalize_role(claim.role_hint) or "student",
        }

    def changes(self, user: User, claim: SupabaseClaim) -> Changes:
        overwrite: dict[str, Any] = {}
        if user.email != claim.email:
            overwrite["email"] = claim.email
        if user.name != claim.name:
            overwrite["name"] = claim.name
        return {}, overwrite


RULES: dict[str, ResolutionRule] = {rule.kind: rule for rule in (PlainRule(), GoogleRule(), SupabaseRule())}


class IdentityResolver:
    """Find-or-create canonical users. The only writer of user records."""

    def __init__(
        self,
        repository: UsersRepository,
        max_attempts: int = 3,
        metrics: MetricsStore | None = None,
    ):
        self.repository = repository
        self.max_attempts = max(1, max_attempts)
        self.metrics = metrics or get_metrics_store()

    async def resolve(self, claim: IdentityClaim) -> User:
        """
        Return the canonical user for ``claim``, creating it on first login.

        Raises:
            StoreUnavailableException: store failure, or the identity stayed
                contended for every attempt
        """
        rule = RULES[claim.kind]

        for attempt in range(1, self.max_attempts + 1):
            try:
                user = await rule.lookup(self.repository, claim)
                if user is None:
                    user = await self.repository.create(rule.new_record(claim))
                    logger.info(
                        "Created user id=%s path=%s trust=%s",
                        user.id,
                        claim.kind,
                        claim.trust_tier.value,
                    )
                    return user
                return await self._apply(user, rule.changes(user, claim))
            except StoreConflictException as e:
                self.metrics.record_store_conflict(claim.kind)
                logger.info(
                    "Identity key %s contended on %s path (attempt %d/%d), reconciling",
                    e.key,
                    claim.kind,
                    attempt,
                    self.max_attempts,
                )

        logger.error("Identity still contended after %d attempts on %s path", self.max_attempts, claim.kind)
        raise StoreUnavailableException("resolve")

    async def _apply(self, user: User, changes: Changes) -> User:
        write_once, overwrite = changes

        touched = False
        for field, value in write_once.items():
            if value is not None and getattr(user, field) is None:
                await self.repository.set_if_absent(user.id, field, value)
                touched = True

        if overwrite:
            updated = await self.repository.update(user.id, overwrite)
        elif touched:
            updated = await self.repository.get_by_id(user.id)
        else:
            return user

        if updated is None:
            logger.error("User id=%s disappeared during update", user.id)
            raise StoreUnavailableException("update")
        return updated
