"""
JobNest Identity - Schemas.

Canonical user record plus request/response models for the auth endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from jobnest.auth.claims import Role, TrustTier


# =============================================================================
# Canonical User
# =============================================================================


class User(BaseModel):
    """Canonical identity record as stored."""

    model_config = ConfigDict(extra="ignore")

    id: str
    external_id: str | None = None
    google_id: str | None = None
    name: str
    email: str | None = None
    password: str | None = None
    picture: str | None = None
    role: Role
    company_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PublicUserView(BaseModel):
    """User as returned to callers. Never carries the password."""

    id: str
    name: str
    email: str | None = None
    role: Role
    company_id: str | None = Field(default=None, serialization_alias="companyId")
    picture: str | None = None

    @classmethod
    def from_user(cls, user: User) -> "PublicUserView":
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            role=user.role,
            company_id=user.company_id,
            picture=user.picture,
        )


# =============================================================================
# Request Schemas
# =============================================================================


class PlainLoginRequest(BaseModel):
    """Name/role login. Presence is checked by the service, not here."""

    name: str | None = None
    role: str | None = Field(default=None, description="student | employer (recruiter accepted)")
    email: str | None = None


class GoogleLoginRequest(BaseModel):
    """Google Sign-In credential from the client widget."""

    model_config = ConfigDict(populate_by_name=True)

    id_token: str | None = Field(default=None, alias="idToken")
    role: str | None = Field(default=None, description="Role for first-time sign-in; defaults to student")


# =============================================================================
# Response Schemas
# =============================================================================


class AuthResponse(BaseModel):
    """Successful authentication."""

    user: PublicUserView
    token: str
    trust_tier: TrustTier


class LogoutResponse(BaseModel):
    message: str
