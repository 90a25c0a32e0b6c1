"""User and session domain models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field


class User(BaseModel):
    """A registered account as held by the account store.

    Carries the password hash, so it is never returned to clients
    directly; see UserResponse for the public projection.
    """

    id: UUID
    email: str
    password_hash: str = Field(repr=False)
    first_name: str
    last_name: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime
    last_login_at: Optional[datetime] = None


class Session(BaseModel):
    """A persisted refresh token, stored by hash only."""

    id: UUID
    user_id: UUID
    token_hash: str = Field(repr=False)
    expires_at: datetime
    revoked_at: Optional[datetime] = None
    created_at: datetime

    def is_live(self, now: datetime) -> bool:
        """True while the session is neither revoked nor expired."""
        return self.revoked_at is None and self.expires_at > now
