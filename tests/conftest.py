"""Pytest configuration and fixtures."""

import asyncio
import os
from typing import Generator

import pytest

# Set test environment variables before importing the app
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DB_CONNECTION", "memory")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SESSION_SWEEP_INTERVAL_SECONDS", "0")
os.environ.setdefault("JWT_ACCESS_TOKEN_SECRET", "test-access-secret-for-unit-tests")
os.environ.setdefault("JWT_REFRESH_TOKEN_SECRET", "test-refresh-secret-for-unit-tests")

from todo_api.config import Settings  # noqa: E402
from todo_api.services.auth_service import AuthService  # noqa: E402
from todo_api.services.ownership_guard import OwnershipGuard  # noqa: E402
from todo_api.services.password_service import PasswordService  # noqa: E402
from todo_api.services.token_service import TokenService  # noqa: E402
from todo_api.stores.memory import (  # noqa: E402
    InMemoryAccountStore,
    InMemoryListStore,
    InMemorySessionStore,
)

ACCESS_SECRET = "test-access-secret-for-unit-tests"
REFRESH_SECRET = "test-refresh-secret-for-unit-tests"
STRONG_PASSWORD = "Secure123!"


@pytest.fixture
def settings() -> Settings:
    """Deterministic settings: memory backend, fast bcrypt, no sweeper."""
    return Settings(
        _env_file=None,
        environment="test",
        db_connection="memory",
        bcrypt_rounds=4,
        session_sweep_interval_seconds=0,
        jwt_access_token_secret=ACCESS_SECRET,
        jwt_refresh_token_secret=REFRESH_SECRET,
    )


@pytest.fixture
def password_service() -> PasswordService:
    return PasswordService(rounds=4)


@pytest.fixture
def token_service(settings) -> TokenService:
    return TokenService(settings)


@pytest.fixture
def account_store() -> InMemoryAccountStore:
    return InMemoryAccountStore()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def list_store() -> InMemoryListStore:
    return InMemoryListStore()


@pytest.fixture
def auth_service(account_store, session_store, password_service, token_service) -> AuthService:
    return AuthService(account_store, session_store, password_service, token_service)


class InterleavingSessionStore(InMemorySessionStore):
    """Session store whose lookups yield to the event loop before returning.

    Concurrent refreshes all get past the lookup before any of them
    reaches revoke, so only the atomic consume can pick a single winner.
    """

    async def find_by_token(self, refresh_token):
        session = await super().find_by_token(refresh_token)
        await asyncio.sleep(0)
        return session


@pytest.fixture
def interleaving_session_store() -> InterleavingSessionStore:
    return InterleavingSessionStore()


@pytest.fixture
def interleaving_auth_service(
    account_store, interleaving_session_store, password_service, token_service
) -> AuthService:
    return AuthService(
        account_store, interleaving_session_store, password_service, token_service
    )


@pytest.fixture
def ownership_guard(token_service) -> OwnershipGuard:
    return OwnershipGuard(token_service)


@pytest.fixture
def client(settings) -> Generator:
    """TestClient over a fresh app using in-memory stores."""
    from fastapi.testclient import TestClient

    from todo_api.main import create_app

    with TestClient(create_app(settings)) as tc:
        yield tc
