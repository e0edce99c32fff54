"""
JobNest Identity - Router.

Login, session and logout endpoints. Errors are rendered by the app-level
handler as { "error": { "code", "message", ... } }.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.security import HTTPAuthorizationCredentials

from jobnest.auth import TokenPayload, get_bearer_token, get_current_session, security
from jobnest.deps import get_auth_service
from jobnest.modules.identity.schemas import (
    AuthResponse,
    GoogleLoginRequest,
    LogoutResponse,
    PlainLoginRequest,
    PublicUserView,
)
from jobnest.modules.identity.service import AuthService
from jobnest.schemas import ErrorResponse

router = APIRouter(
    prefix="/api/auth",
    tags=["auth"],
    responses={
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "unknown")


@router.post("/login", response_model=AuthResponse)
async def login(
    payload: PlainLoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Log in as (name, role). No credential is checked."""
    return await service.authenticate_plain(
        payload.name,
        payload.role,
        payload.email,
        request_id=_request_id(request),
    )


@router.post("/google", response_model=AuthResponse)
async def google_login(
    payload: GoogleLoginRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Log in with a Google ID token."""
    return await service.authenticate_google(
        payload.id_token,
        payload.role,
        request_id=_request_id(request),
    )


@router.post("/supabase", response_model=AuthResponse)
async def supabase_login(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    service: AuthService = Depends(get_auth_service),
):
    """Log in with a Supabase access token (Authorization: Bearer)."""
    return await service.authenticate_supabase(
        credentials.credentials if credentials else None,
        request_id=_request_id(request),
    )


@router.get("/session", response_model=PublicUserView, responses={404: {"model": ErrorResponse}})
async def get_session(
    token: Annotated[str, Depends(get_bearer_token)],
    service: AuthService = Depends(get_auth_service),
):
    """Return the user behind a session token."""
    return await service.get_session(token)


@router.post("/logout", response_model=LogoutResponse)
async def logout(session: Annotated[TokenPayload, Depends(get_current_session)]):
    """Sessions are stateless; the client discards its token."""
    return LogoutResponse(message="Logged out successfully")
