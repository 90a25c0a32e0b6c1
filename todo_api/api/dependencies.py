"""FastAPI dependencies for authentication and authorization."""

from typing import Optional
from uuid import UUID

from fastapi import Depends, Header, Request

from todo_api.container import Container
from todo_api.errors import UnauthorizedError
from todo_api.models.user import User
from todo_api.services.auth_service import AuthService
from todo_api.services.ownership_guard import OwnershipGuard
from todo_api.stores.base import ListStore


def get_container(request: Request) -> Container:
    return request.app.state.container


def get_auth_service(container: Container = Depends(get_container)) -> AuthService:
    return container.auth_service


def get_ownership_guard(container: Container = Depends(get_container)) -> OwnershipGuard:
    return container.ownership_guard


def get_list_store(container: Container = Depends(get_container)) -> ListStore:
    return container.lists


def parse_bearer(authorization: Optional[str]) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Raises:
        UnauthorizedError: TOKEN_MISSING if there is no header,
            TOKEN_MALFORMED if it is not a single Bearer credential
    """
    if authorization is None or not authorization.strip():
        raise UnauthorizedError("Authorization header missing", error_code="TOKEN_MISSING")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedError(
            "Authorization header must be 'Bearer <token>'",
            error_code="TOKEN_MALFORMED",
        )
    return parts[1]


async def get_current_user_id(
    authorization: Optional[str] = Header(default=None),
    guard: OwnershipGuard = Depends(get_ownership_guard),
) -> UUID:
    """Verified subject of the bearer access token; no store lookup."""
    return guard.authorize(parse_bearer(authorization))


async def get_current_user(
    user_id: UUID = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Bearer token subject resolved to an existing, active user.

    Raises:
        UnauthorizedError: Token problems, or the user is gone/deactivated
    """
    return await auth_service.verify_user(user_id)
