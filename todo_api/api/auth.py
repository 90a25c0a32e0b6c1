"""Authentication API endpoints."""

from typing import Any, Optional
from uuid import UUID

import structlog
from fastapi import APIRouter, Body, Depends, Response, status

from todo_api.api.dependencies import get_auth_service, get_current_user, get_current_user_id
from todo_api.errors import NotFoundError, UnauthorizedError
from todo_api.models.auth import (
    AuthResponse,
    LoginRequest,
    LogoutAllResponse,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    TokenPair,
    UserResponse,
)
from todo_api.models.user import User
from todo_api.services.auth_service import AuthService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    request: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Create an account. Log in separately to obtain tokens.

    Raises:
        400: Missing fields, invalid email, or weak password
        409: Email already registered
    """
    return await auth_service.register(request)


@router.post("/login")
async def login(
    request: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Login with email and password.

    Raises:
        401: Invalid credentials or deactivated account
    """
    return await auth_service.login(request)


@router.post("/refresh")
async def refresh(
    request: RefreshRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenPair:
    """Exchange a refresh token for a new access/refresh pair.

    The presented refresh token is consumed and cannot be used again.

    Raises:
        401: Refresh token invalid, expired, revoked or already used
    """
    return await auth_service.refresh(request.refresh_token)


@router.post("/logout")
async def logout(
    request: Optional[LogoutRequest] = Body(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> Response:
    """Revoke a refresh token. Always succeeds, even for unknown tokens or no body."""
    await auth_service.logout(request.refresh_token if request else None)
    return Response(status_code=status.HTTP_200_OK)


@router.post("/logout-all")
async def logout_all(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> LogoutAllResponse:
    """Revoke every session of the authenticated user."""
    count = await auth_service.logout_all(current_user.id)
    return LogoutAllResponse(revoked_sessions=count)


@router.get("/profile")
async def get_profile(
    user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Get the authenticated user's profile.

    Raises:
        401: Token invalid, or its user no longer exists
    """
    try:
        return await auth_service.get_user_profile(user_id)
    except NotFoundError:
        raise UnauthorizedError("User not found", error_code="INVALID_TOKEN")


@router.patch("/profile")
async def update_profile(
    updates: dict[str, Any] = Body(...),
    user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    """Update firstName, lastName, password and/or isActive.

    Raises:
        400: Immutable or unknown field, invalid value, or weak password
        401: Token invalid, or its user no longer exists
    """
    try:
        return await auth_service.update_user_profile(user_id, updates)
    except NotFoundError:
        raise UnauthorizedError("User not found", error_code="INVALID_TOKEN")
