"""
JobNest Auth - Supabase token verification.

Supabase access tokens are not checked locally. The token is sent to the
project's Auth "current user" endpoint and whatever user Supabase returns
is trusted as-is.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from jobnest.auth.claims import SupabaseClaim
from jobnest.config import SupabaseSettings
from jobnest.exceptions import InvalidCredentialException, UpstreamUnavailableException

logger = logging.getLogger(__name__)

PROVIDER = "Supabase"


def _auth_user_url(base: str) -> str:
    return f"{(base or '').strip().rstrip('/')}/auth/v1/user"


def claim_from_user(user_info: dict[str, Any]) -> SupabaseClaim:
    """Build a claim from the Auth API user object ({id, email, user_metadata})."""
    user_id = user_info.get("id")
    if not isinstance(user_id, str) or not user_id:
        raise UpstreamUnavailableException(PROVIDER, "user payload without id")

    email = user_info.get("email") if isinstance(user_info.get("email"), str) else None
    email = email or None

    meta = user_info.get("user_metadata")
    if not isinstance(meta, dict):
        meta = {}

    name = None
    for value in (meta.get("full_name"), meta.get("name"), email):
        if isinstance(value, str) and value.strip():
            name = value.strip()
            break

    role_hint = meta.get("role") if isinstance(meta.get("role"), str) else None

    return SupabaseClaim(
        provider_key=user_id,
        email=email,
        name=name or "User",
        role_hint=role_hint,
    )


class SupabaseVerifier:
    """Resolve a Supabase bearer token to the user it belongs to."""

    def __init__(self, settings: SupabaseSettings, transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = settings.url
        self.anon_key = settings.anon_key
        self.timeout_seconds = settings.timeout_seconds
        self._transport = transport

    async def _get_user(self, token: str) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}"}
        if self.anon_key:
            headers["apikey"] = self.anon_key

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout_seconds),
            transport=self._transport,
        ) as client:
            return await client.get(_auth_user_url(self.base_url), headers=headers)

    async def verify(self, token: str) -> SupabaseClaim:
        """Ask Supabase Auth who owns ``token``.

        Raises:
            InvalidCredentialException: Supabase rejected the token (4xx)
            UpstreamUnavailableException: unreachable, 5xx, unusable body, or not configured
        """
        if not (self.base_url or "").strip():
            logger.error("SUPABASE_URL is not configured")
            raise UpstreamUnavailableException(PROVIDER, "url not configured")

        try:
            response = await self._get_user(token)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("Supabase Auth unreachable: %s", e)
            raise UpstreamUnavailableException(PROVIDER, str(e))

        if response.status_code >= 500:
            logger.warning("Supabase Auth error status=%s", response.status_code)
            raise UpstreamUnavailableException(PROVIDER, f"status {response.status_code}")

        if not response.is_success:
            logger.info("Supabase token rejected status=%s body=%s", response.status_code, response.text[:200])
            raise InvalidCredentialException(PROVIDER, f"status {response.status_code}")

        try:
            data = response.json()
        except ValueError:
            raise UpstreamUnavailableException(PROVIDER, "non-JSON user payload")

        if not isinstance(data, dict):
            raise UpstreamUnavailableException(PROVIDER, "unexpected user payload")

        return claim_from_user(data)
