"""Models package exports."""

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
from todo_api.models.todo_list import CreateListRequest, TodoList
from todo_api.models.user import Session, User

__all__ = [
    "AuthResponse",
    "CreateListRequest",
    "LoginRequest",
    "LogoutAllResponse",
    "LogoutRequest",
    "RefreshRequest",
    "RegisterRequest",
    "Session",
    "TodoList",
    "TokenPair",
    "User",
    "UserResponse",
]
