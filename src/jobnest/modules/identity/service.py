"""
JobNest Identity - Service.

The three authentication entry paths and the session check. Each path turns
its input into an identity claim, resolves it to the canonical user and
issues a session token.
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator

from jobnest.auth.claims import IdentityClaim, PlainClaim, normalize_role
from jobnest.auth.google import GoogleVerifier
from jobnest.auth.session import SessionIssuer
from jobnest.auth.supabase import SupabaseVerifier
from jobnest.exceptions import (
    InvalidCredentialException,
    JobNestException,
    MissingFieldException,
    NotFoundException,
    StoreUnavailableException,
    UpstreamUnavailableException,
    ValidationException,
)
from jobnest.modules.identity.repository import UsersRepository
from jobnest.modules.identity.resolver import IdentityResolver
from jobnest.modules.identity.schemas import AuthResponse, PublicUserView
from jobnest.observability import MetricsStore, get_metrics_store

logger = logging.getLogger(__name__)


def _clean(value: str | None) -> str | None:
    if not isinstance(value, str):
        return None
    return value.strip() or None


class AuthService:
    """Service for authentication and session operations."""

    def __init__(
        self,
        repository: UsersRepository,
        issuer: SessionIssuer,
        google_verifier: GoogleVerifier,
        supabase_verifier: SupabaseVerifier,
        resolver: IdentityResolver | None = None,
        metrics: MetricsStore | None = None,
    ):
        self.repository = repository
        self.issuer = issuer
        self.google_verifier = google_verifier
        self.supabase_verifier = supabase_verifier
        self.metrics = metrics or get_metrics_store()
        self.resolver = resolver or IdentityResolver(repository, metrics=self.metrics)

    @asynccontextmanager
    async def _attempt(self, path: str, request_id: str) -> AsyncIterator[None]:
        """Time one authentication attempt, log its outcome and record metrics."""
        tag = f"AUTH_{path.upper()}"
        started = time.perf_counter()

        def elapsed_ms() -> float:
            return (time.perf_counter() - started) * 1000

        try:
            yield
        except UpstreamUnavailableException as e:
            logger.warning("[%s] %s -> upstream_unavailable provider=%s reason=%s", request_id, tag, e.provider, e.reason)
            self.metrics.record_auth_attempt(path, elapsed_ms(), success=False, error_code=e.code)
            raise
        except InvalidCredentialException as e:
            logger.info("[%s] %s -> invalid_credential provider=%s reason=%s", request_id, tag, e.provider, e.reason)
            self.metrics.record_auth_attempt(path, elapsed_ms(), success=False, error_code=e.code)
            raise
        except StoreUnavailableException as e:
            logger.error("[%s] %s -> store_unavailable operation=%s", request_id, tag, e.operation)
            self.metrics.record_auth_attempt(path, elapsed_ms(), success=False, error_code=e.code)
            raise
        except JobNestException as e:
            logger.info("[%s] %s -> fail %s", request_id, tag, e.code)
            self.metrics.record_auth_attempt(path, elapsed_ms(), success=False, error_code=e.code)
            raise
        except Exception:
            self.metrics.record_auth_attempt(path, elapsed_ms(), success=False, error_code="INTERNAL_ERROR")
            raise
        else:
            logger.info("[%s] %s -> ok (%.1fms)", request_id, tag, elapsed_ms())
            self.metrics.record_auth_attempt(path, elapsed_ms(), success=True)

    async def _complete(self, claim: IdentityClaim) -> AuthResponse:
        user = await self.resolver.resolve(claim)
        token = self.issuer.issue(user)
        return AuthResponse(
            user=PublicUserView.from_user(user),
            token=token,
            trust_tier=claim.trust_tier,
        )

    # -------------------------------------------------------------------------
    # Entry paths
    # -------------------------------------------------------------------------

    async def authenticate_plain(
        self,
        name: str | None,
        role: str | None,
        email: str | None = None,
        *,
        request_id: str = "-",
    ) -> AuthResponse:
        """Log in by asserting a (name, role) pair.

        No secret is checked: whoever presents an existing pair becomes that
        user. The response is tagged with TrustTier.ASSERTED.
        """
        async with self._attempt("plain", request_id):
            name, role_label = _clean(name), _clean(role)
            missing = [field for field, value in (("name", name), ("role", role_label)) if not value]
            if missing:
                raise MissingFieldException(*missing)

            normalized = normalize_role(role_label)
            if normalized is None:
                raise ValidationException(f"Unsupported role: {role_label}", code="INVALID_ROLE")

            claim = PlainClaim(name=name, role=normalized, email=_clean(email))
            response = await self._complete(claim)
        return response

    async def authenticate_google(
        self,
        id_token: str | None,
        role_hint: str | None = None,
        *,
        request_id: str = "-",
    ) -> AuthResponse:
        """Log in with a Google ID token. ``role_hint`` only matters on first login."""
        async with self._attempt("google", request_id):
            raw_token = _clean(id_token)
            if not raw_token:
                raise MissingFieldException("idToken")

            claim = await self.google_verifier.verify(raw_token)
            if not claim.email_verified and not claim.email:
                raise ValidationException("Email verification required", code="EMAIL_VERIFICATION_REQUIRED")

            response = await self._complete(claim.model_copy(update={"role_hint": role_hint}))
        return response

    async def authenticate_supabase(self, bearer_token: str | None, *, request_id: str = "-") -> AuthResponse:
        """Log in with a Supabase access token, trusting Supabase Auth's answer."""
        async with self._attempt("supabase", request_id):
            token = _clean(bearer_token)
            if not token:
                raise MissingFieldException("Authorization")

            claim = await self.supabase_verifier.verify(token)
            response = await self._complete(claim)
        return response

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def get_session(self, token: str) -> PublicUserView:
        """Verify a session token and return the user as currently stored."""
        claims = self.issuer.read(token)
        user = await self.repository.get_by_id(claims.id)
        if user is None:
            raise NotFoundException("user", claims.id)
        return PublicUserView.from_user(user)
