"""
JobNest Auth - Identity Claims.

Normalized identity facts produced by each entry path. A claim is a tagged
variant discriminated on ``kind``; the identity resolver dispatches on it.

Trust differs per path and is kept explicit on every claim:
- google: ID token signature and audience checked locally (VERIFIED)
- supabase: accepted because Supabase Auth vouched for the bearer token (DELEGATED)
- plain: caller-asserted name/role, no proof at all (ASSERTED)
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["student", "employer"]

# Labels accepted from clients and what they mean in the store.
_ROLE_ALIASES: dict[str, Role] = {
    "student": "student",
    "employer": "employer",
    "recruiter": "employer",
}


class TrustTier(str, Enum):
    """How much the identity behind a claim was actually proven."""

    VERIFIED = "verified"
    DELEGATED = "delegated"
    ASSERTED = "asserted"


def normalize_role(value: str | None) -> Role | None:
    """Map a client role label to a stored role, or None if unrecognized."""
    if not isinstance(value, str):
        return None
    return _ROLE_ALIASES.get(value.strip().lower())


class _Claim(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    email: str | None = None


class GoogleClaim(_Claim):
    """Claim extracted from a verified Google ID token."""

    kind: Literal["google"] = "google"
    provider_key: str = Field(..., description="Google 'sub'")
    picture: str | None = None
    email_verified: bool = False
    role_hint: str | None = Field(default=None, description="Role requested by the caller, used on first login only")

    @property
    def trust_tier(self) -> TrustTier:
        return TrustTier.VERIFIED


class SupabaseClaim(_Claim):
    """Claim built from the Supabase Auth 'current user' response."""

    kind: Literal["supabase"] = "supabase"
    provider_key: str = Field(..., description="Supabase user id")
    role_hint: str | None = Field(default=None, description="user_metadata.role")

    @property
    def trust_tier(self) -> TrustTier:
        return TrustTier.DELEGATED


class PlainClaim(_Claim):
    """Name/role pair asserted by the caller. Anyone may present any pair."""

    kind: Literal["plain"] = "plain"
    role: Role

    @property
    def trust_tier(self) -> TrustTier:
        return TrustTier.ASSERTED


IdentityClaim = Annotated[
    Union[GoogleClaim, SupabaseClaim, PlainClaim],
    Field(discriminator="kind"),
]
