"""JobNest Auth - Session tokens.

Session tokens are HS256 JWTs (python-jose) issued after an identity has
been resolved. The identity part of the payload is always
``{id, name, role, email}``; ``iat``/``exp``/``typ``/``iss`` are signer
metadata.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt
from pydantic import ValidationError

from jobnest.auth.schemas import SessionClaims, TokenPayload
from jobnest.config import Settings
from jobnest.exceptions import UnauthorizedException

if TYPE_CHECKING:
    from jobnest.modules.identity.schemas import User

TOKEN_TYPE = "session"


class SessionIssuer:
    """Sign and verify session tokens."""

    def __init__(self, settings: Settings):
        self._secret = settings.auth_jwt_secret
        self._algorithm = settings.auth_jwt_algorithm
        self._ttl_s = int(settings.auth_session_ttl_seconds)
        self._issuer = settings.auth_token_issuer

    # -------------------------------------------------------------------------
    # Signing primitive
    # -------------------------------------------------------------------------

    def sign(self, claims: dict[str, Any], now: datetime | None = None) -> str:
        if now is None:
            now = datetime.now(timezone.utc)

        payload = dict(claims)
        payload.update(
            {
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(seconds=self._ttl_s)).timestamp()),
                "typ": TOKEN_TYPE,
                "iss": self._issuer,
            }
        )
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        token = (token or "").strip()
        if not token or any(ch.isspace() for ch in token):
            raise UnauthorizedException("Invalid authentication token")

        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                issuer=self._issuer,
            )
        except JWTError as e:
            raise UnauthorizedException(f"Invalid token: {e}")

        if payload.get("typ") != TOKEN_TYPE:
            raise UnauthorizedException("Invalid token type")

        return payload

    # -------------------------------------------------------------------------
    # Session contract
    # -------------------------------------------------------------------------

    @staticmethod
    def claims_for(user: User) -> SessionClaims:
        return SessionClaims(id=user.id, name=user.name, role=user.role, email=user.email)

    def issue(self, user: User, now: datetime | None = None) -> str:
        """Issue a session token for a canonical user."""
        return self.sign(self.claims_for(user).model_dump(), now=now)

    def read(self, token: str) -> TokenPayload:
        """Verify a session token and return its payload."""
        payload = self.verify(token)
        try:
            return TokenPayload.model_validate(payload)
        except ValidationError:
            raise UnauthorizedException("Malformed token payload")
