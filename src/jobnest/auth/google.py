"""JobNest Auth - Google ID token verification.

Checks the token signature against Google's published certificates, plus
expiry, issuer and audience (the configured OAuth client id), then maps the
payload into a GoogleClaim.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi.concurrency import run_in_threadpool
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from jobnest.auth.claims import GoogleClaim
from jobnest.config import GoogleSettings
from jobnest.exceptions import InvalidCredentialException, UpstreamUnavailableException

logger = logging.getLogger(__name__)

PROVIDER = "Google"


def display_name_from_payload(payload: dict[str, Any]) -> str:
    """name -> given_name -> local part of email -> "User"."""
    for key in ("name", "given_name"):
        value = payload.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()

    email = payload.get("email")
    if isinstance(email, str) and email:
        local_part = email.split("@", 1)[0]
        if local_part:
            return local_part

    return "User"


def claim_from_payload(payload: dict[str, Any]) -> GoogleClaim:
    sub = payload.get("sub")
    if not isinstance(sub, str) or not sub:
        raise InvalidCredentialException(PROVIDER, "missing sub")

    email = payload.get("email") if isinstance(payload.get("email"), str) else None
    picture = payload.get("picture") if isinstance(payload.get("picture"), str) else None

    return GoogleClaim(
        provider_key=sub,
        name=display_name_from_payload(payload),
        email=email or None,
        picture=picture or None,
        email_verified=payload.get("email_verified") is True,
    )


class GoogleVerifier:
    """Verify Google Sign-In ID tokens."""

    def __init__(self, settings: GoogleSettings, request: google_requests.Request | None = None):
        self.client_id = settings.client_id
        self.clock_skew_seconds = settings.clock_skew_seconds
        self._request = request or google_requests.Request()

    def _verify_blocking(self, raw_token: str) -> dict[str, Any]:
        return id_token.verify_oauth2_token(
            raw_token,
            self._request,
            audience=self.client_id,
            clock_skew_in_seconds=self.clock_skew_seconds,
        )

    async def verify(self, raw_token: str) -> GoogleClaim:
        """Verify an ID token and return the normalized claim.

        Raises:
            InvalidCredentialException: malformed, expired, wrong issuer or audience
            UpstreamUnavailableException: certificates unreachable or client id unset
        """
        if not self.client_id:
            logger.error("GOOGLE_CLIENT_ID is not configured")
            raise UpstreamUnavailableException(PROVIDER, "client id not configured")

        try:
            payload = await run_in_threadpool(self._verify_blocking, raw_token)
        # TransportError subclasses GoogleAuthError; keep it first.
        except google_exceptions.TransportError as e:
            logger.warning("Google certificate fetch failed: %s", e)
            raise UpstreamUnavailableException(PROVIDER, str(e))
        except (ValueError, google_exceptions.GoogleAuthError) as e:
            logger.info("Google ID token rejected: %s", e)
            raise InvalidCredentialException(PROVIDER, str(e))

        if not isinstance(payload, dict):
            raise InvalidCredentialException(PROVIDER, "empty payload")

        return claim_from_payload(payload)
