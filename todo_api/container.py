"""Dependency container wiring settings, stores and services together."""

from dataclasses import dataclass
from typing import Optional

import asyncpg
import structlog

from todo_api.config import Settings
from todo_api.database import close_pool, create_pool, health_check, run_migrations
from todo_api.services.auth_service import AuthService
from todo_api.services.ownership_guard import OwnershipGuard
from todo_api.services.password_service import PasswordService
from todo_api.services.token_service import TokenService
from todo_api.stores.base import AccountStore, ListStore, SessionStore
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

logger = structlog.get_logger(__name__)


@dataclass
class Container:
    """Shared application resources, created once per app lifespan.

    Usage:
        container = await build_container(settings)
        auth = container.auth_service
        ...
        await container.close()
    """

    settings: Settings
    accounts: AccountStore
    sessions: SessionStore
    lists: ListStore
    auth_service: AuthService
    ownership_guard: OwnershipGuard
    pool: Optional[asyncpg.Pool] = None

    async def storage_healthy(self) -> bool:
        if self.pool is None:
            return True
        return await health_check(self.pool)

    async def close(self) -> None:
        if self.pool is not None:
            await close_pool(self.pool)
            self.pool = None


def _assemble(
    settings: Settings,
    accounts: AccountStore,
    sessions: SessionStore,
    lists: ListStore,
    pool: Optional[asyncpg.Pool] = None,
) -> Container:
    tokens = TokenService(settings)
    passwords = PasswordService(rounds=settings.bcrypt_rounds)
    return Container(
        settings=settings,
        accounts=accounts,
        sessions=sessions,
        lists=lists,
        auth_service=AuthService(accounts, sessions, passwords, tokens),
        ownership_guard=OwnershipGuard(tokens),
        pool=pool,
    )


def build_memory_container(settings: Settings) -> Container:
    """Container backed by fresh, empty in-memory stores."""
    return _assemble(
        settings,
        InMemoryAccountStore(),
        InMemorySessionStore(),
        InMemoryListStore(),
    )


async def build_container(settings: Settings) -> Container:
    """Build the container for the configured storage backend.

    For postgres this creates the pool and applies migrations.
    """
    if settings.db_connection == "memory":
        logger.info("storage_backend_selected", backend="memory")
        return build_memory_container(settings)

    pool = await create_pool(settings)
    try:
        await run_migrations(pool)
    except Exception:
        await close_pool(pool)
        raise

    logger.info("storage_backend_selected", backend="postgres")
    return _assemble(
        settings,
        PostgresAccountStore(pool),
        PostgresSessionStore(pool),
        PostgresListStore(pool),
        pool=pool,
    )
