"""
JobNest Auth - Schemas.

Pydantic models for session tokens.
"""

from pydantic import BaseModel, Field

from jobnest.auth.claims import Role


class SessionClaims(BaseModel):
    """Identity carried by a session token."""

    id: str = Field(..., description="Canonical user id")
    name: str
    role: Role
    email: str | None = None


class TokenPayload(SessionClaims):
    """Full decoded session token."""

    iat: int
    exp: int
    typ: str
    iss: str
