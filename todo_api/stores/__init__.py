"""Pluggable persistence for accounts, sessions and to-do lists."""

from todo_api.stores.base import (
    AccountStore,
    ListStore,
    ResourceOwnerResolver,
    SessionStore,
    hash_token,
    normalize_email,
)
from todo_api.stores.errors import DuplicateEmailError, DuplicateTokenError, StoreError
from todo_api.stores.memory import (
    InMemoryAccountStore,
    InMemoryListStore,
    InMemorySessionStore,
)
from todo_api.stores.postgres import (
    PostgresAccountStore,
    PostgresListStore,
    PostgresSessionStore,
)

__all__ = [
    "AccountStore",
    "DuplicateEmailError",
    "DuplicateTokenError",
    "InMemoryAccountStore",
    "InMemoryListStore",
    "InMemorySessionStore",
    "ListStore",
    "PostgresAccountStore",
    "PostgresListStore",
    "PostgresSessionStore",
    "ResourceOwnerResolver",
    "SessionStore",
    "StoreError",
    "hash_token",
    "normalize_email",
]
