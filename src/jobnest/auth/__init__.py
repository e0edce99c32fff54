"""JobNest Auth Module.

Identity claims from the three login paths (Google, Supabase, plain
name/role) and the HS256 session tokens issued once a claim has been
resolved to a canonical user.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from jobnest.auth.claims import GoogleClaim, IdentityClaim, PlainClaim, SupabaseClaim, TrustTier, normalize_role
from jobnest.auth.schemas import SessionClaims, TokenPayload
from jobnest.auth.session import SessionIssuer
from jobnest.config import Settings, get_settings
from jobnest.exceptions import UnauthorizedException

security = HTTPBearer(auto_error=False)


def get_session_issuer(settings: Annotated[Settings, Depends(get_settings)]) -> SessionIssuer:
    return SessionIssuer(settings)


def get_bearer_token(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> str:
    """Raw bearer token from the Authorization header."""
    if not credentials:
        raise UnauthorizedException("Missing authentication token")
    return credentials.credentials


async def get_current_session(
    token: Annotated[str, Depends(get_bearer_token)],
    issuer: Annotated[SessionIssuer, Depends(get_session_issuer)],
) -> TokenPayload:
    """Verified session token payload. Does not touch the users store."""
    return issuer.read(token)


__all__ = [
    "get_bearer_token",
    "get_current_session",
    "get_session_issuer",
    "security",
    "GoogleClaim",
    "IdentityClaim",
    "PlainClaim",
    "SessionClaims",
    "SessionIssuer",
    "SupabaseClaim",
    "TokenPayload",
    "TrustTier",
    "normalize_role",
]
