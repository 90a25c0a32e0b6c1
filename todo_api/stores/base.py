"""Store contracts consumed by the auth core and resource routes."""

import hashlib
from datetime import datetime
from typing import Optional, Protocol
from uuid import UUID

from todo_api.models.todo_list import TodoList
from todo_api.models.user import Session, User

USER_UPDATABLE_FIELDS = frozenset({"first_name", "last_name", "password_hash", "is_active"})


def hash_token(raw_token: str) -> str:
    """SHA-256 hex digest under which a refresh token is stored."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def normalize_email(email: str) -> str:
    """Canonical form used for storage and case-insensitive lookups."""
    return email.strip().lower()


class AccountStore(Protocol):
    """Persistence for User records.

    Implementations enforce case-insensitive email uniqueness themselves,
    independent of any check the service performs first.
    """

    async def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User: ...

    async def find_by_email(self, email: str) -> Optional[User]: ...

    async def find_by_id(self, user_id: UUID) -> Optional[User]: ...

    async def update(self, user_id: UUID, **changes) -> Optional[User]: ...

    async def update_last_login(self, user_id: UUID) -> Optional[User]: ...

    async def delete(self, user_id: UUID) -> bool: ...


class SessionStore(Protocol):
    """Persistence for refresh token records.

    Expired and revoked records are indistinguishable from missing ones
    on lookup.
    """

    async def create(
        self, user_id: UUID, refresh_token: str, expires_at: datetime
    ) -> Session: ...

    async def find_by_token(self, refresh_token: str) -> Optional[Session]: ...

    async def revoke(self, refresh_token: str) -> bool:
        """Revoke a token; idempotent.

        Returns True only for the call that moved a non-revoked record to
        revoked, which makes it usable as an atomic consume.
        """
        ...

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every live session of a user and return how many."""
        ...

    async def sweep_expired(self) -> int: ...

    async def count_active(self) -> int: ...


class ResourceOwnerResolver(Protocol):
    """Anything that can tell which user owns one of its resources."""

    async def get_owner_id(self, resource_id: UUID) -> Optional[UUID]: ...


class ListStore(ResourceOwnerResolver, Protocol):
    """Persistence for to-do lists."""

    async def create(
        self, user_id: UUID, name: str, description: Optional[str] = None
    ) -> TodoList: ...

    async def find_by_id(self, list_id: UUID) -> Optional[TodoList]: ...

    async def list_by_user(self, user_id: UUID) -> list[TodoList]: ...

    async def delete(self, list_id: UUID) -> bool: ...
