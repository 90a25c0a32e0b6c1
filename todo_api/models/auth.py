"""Auth request and response models.

Wire format is camelCase (firstName, accessToken, ...); snake_case field
names are accepted on input as well.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from todo_api.models.user import User


class CamelModel(BaseModel):
    """Base model serializing field names as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class RegisterRequest(CamelModel):
    """New account details.

    Every field is optional at the schema level so the auth service can
    report all missing fields together.
    """

    email: Optional[str] = None
    password: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class LoginRequest(CamelModel):
    """Login credentials."""

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class RefreshRequest(CamelModel):
    """Refresh token to exchange for a new token pair."""

    refresh_token: str = Field(..., min_length=1)


class LogoutRequest(CamelModel):
    """Refresh token to revoke. A missing token is accepted as a no-op."""

    refresh_token: Optional[str] = None


class UserResponse(CamelModel):
    """Public user representation; never includes the password."""

    id: UUID
    email: str
    first_name: str
    last_name: str
    is_active: bool
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            is_active=user.is_active,
            created_at=user.created_at,
            updated_at=user.updated_at,
            last_login_at=user.last_login_at,
        )


class TokenPair(CamelModel):
    """Freshly issued access and refresh tokens.

    Attributes:
        access_token: Short-lived JWT for API access
        refresh_token: Long-lived, revocable token for obtaining new pairs
        token_type: Always "Bearer"
        expires_in: Access token lifetime in seconds
    """

    access_token: str
    refresh_token: str
    token_type: str = "Bearer"
    expires_in: int = Field(ge=1, description="Access token lifetime in seconds")


class AuthResponse(TokenPair):
    """Successful login: token pair plus the authenticated user."""

    user: UserResponse


class LogoutAllResponse(CamelModel):
    """Result of signing out of every session."""

    revoked_sessions: int
