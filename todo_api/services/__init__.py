"""Services package exports."""

from todo_api.services.auth_service import AuthService
from todo_api.services.logging_service import configure_logging, get_logger
from todo_api.services.ownership_guard import OwnershipGuard
from todo_api.services.password_service import PasswordService, PasswordStrength
from todo_api.services.token_service import (
    InvalidTokenError,
    TokenError,
    TokenExpiredError,
    TokenKind,
    TokenService,
)

__all__ = [
    "AuthService",
    "InvalidTokenError",
    "OwnershipGuard",
    "PasswordService",
    "PasswordStrength",
    "TokenError",
    "TokenExpiredError",
    "TokenKind",
    "TokenService",
    "configure_logging",
    "get_logger",
]
