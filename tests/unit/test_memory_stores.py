"""Unit tests for the in-memory account, session and list stores."""

import asyncio
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from todo_api.stores.base import hash_token
from todo_api.stores.errors import DuplicateEmailError, DuplicateTokenError


def _future(**kwargs):
    return datetime.now(timezone.utc) + timedelta(**kwargs)


async def _create_user(store, email="alice@example.com"):
    return await store.create(
        email=email,
        password_hash="$2b$04$hash",
        first_name="Alice",
        last_name="Smith",
    )


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

class TestInMemoryAccountStore:
    """Tests for InMemoryAccountStore."""

    async def test_create_sets_defaults(self, account_store):
        user = await _create_user(account_store)
        assert user.is_active is True
        assert user.last_login_at is None
        assert user.created_at == user.updated_at

    async def test_email_is_normalized(self, account_store):
        user = await _create_user(account_store, email="  Alice@Example.COM ")
        assert user.email == "alice@example.com"

    async def test_find_by_email_case_insensitive(self, account_store):
        created = await _create_user(account_store)
        found = await account_store.find_by_email("ALICE@example.com")
        assert found is not None
        assert found.id == created.id

    async def test_find_missing_returns_none(self, account_store):
        assert await account_store.find_by_email("nobody@example.com") is None
        assert await account_store.find_by_id(uuid4()) is None

    async def test_duplicate_email_rejected(self, account_store):
        await _create_user(account_store)
        with pytest.raises(DuplicateEmailError):
            await _create_user(account_store, email="ALICE@EXAMPLE.COM")

    async def test_returned_records_are_copies(self, account_store):
        user = await _create_user(account_store)
        user.first_name = "Mallory"
        stored = await account_store.find_by_id(user.id)
        assert stored.first_name == "Alice"

    async def test_update_changes_fields_and_timestamp(self, account_store):
        user = await _create_user(account_store)
        updated = await account_store.update(user.id, first_name="Alicia", is_active=False)
        assert updated.first_name == "Alicia"
        assert updated.is_active is False
        assert updated.updated_at >= user.updated_at
        assert updated.email == user.email

    async def test_update_rejects_identity_fields(self, account_store):
        user = await _create_user(account_store)
        with pytest.raises(ValueError):
            await account_store.update(user.id, email="mallory@example.com")

    async def test_update_missing_user(self, account_store):
        assert await account_store.update(uuid4(), first_name="X") is None

    async def test_update_last_login(self, account_store):
        user = await _create_user(account_store)
        updated = await account_store.update_last_login(user.id)
        assert updated.last_login_at is not None

    async def test_delete(self, account_store):
        user = await _create_user(account_store)
        assert await account_store.delete(user.id) is True
        assert await account_store.delete(user.id) is False
        assert await account_store.find_by_id(user.id) is None


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------

class TestInMemorySessionStore:
    """Tests for InMemorySessionStore."""

    async def test_stores_token_hash_not_token(self, session_store):
        session = await session_store.create(uuid4(), "raw-token", _future(days=7))
        assert session.token_hash == hash_token("raw-token")
        assert "raw-token" not in session.token_hash

    async def test_find_by_token(self, session_store):
        user_id = uuid4()
        await session_store.create(user_id, "raw-token", _future(days=7))
        found = await session_store.find_by_token("raw-token")
        assert found is not None
        assert found.user_id == user_id

    async def test_duplicate_token_rejected(self, session_store):
        await session_store.create(uuid4(), "raw-token", _future(days=7))
        with pytest.raises(DuplicateTokenError):
            await session_store.create(uuid4(), "raw-token", _future(days=7))

    async def test_expired_session_not_found(self, session_store):
        await session_store.create(uuid4(), "old-token", _future(seconds=-1))
        assert await session_store.find_by_token("old-token") is None

    async def test_revoke_succeeds_exactly_once(self, session_store):
        await session_store.create(uuid4(), "raw-token", _future(days=7))
        assert await session_store.revoke("raw-token") is True
        assert await session_store.revoke("raw-token") is False
        assert await session_store.find_by_token("raw-token") is None

    async def test_revoke_unknown_token(self, session_store):
        assert await session_store.revoke("never-issued") is False

    async def test_concurrent_revoke_single_winner(self, session_store):
        await session_store.create(uuid4(), "raw-token", _future(days=7))
        results = await asyncio.gather(
            *(session_store.revoke("raw-token") for _ in range(10))
        )
        assert results.count(True) == 1

    async def test_revoke_all_for_user(self, session_store):
        alice, bob = uuid4(), uuid4()
        await session_store.create(alice, "a1", _future(days=7))
        await session_store.create(alice, "a2", _future(days=7))
        await session_store.create(bob, "b1", _future(days=7))
        await session_store.revoke("a2")

        assert await session_store.revoke_all_for_user(alice) == 1
        assert await session_store.find_by_token("a1") is None
        assert await session_store.find_by_token("b1") is not None

    async def test_revoke_all_counts_only_live_sessions(self, session_store):
        user_id = uuid4()
        await session_store.create(user_id, "live", _future(days=7))
        await session_store.create(user_id, "expired", _future(seconds=-1))

        assert await session_store.revoke_all_for_user(user_id) == 1
        assert await session_store.revoke_all_for_user(user_id) == 0

    async def test_sweep_expired_removes_only_expired(self, session_store):
        await session_store.create(uuid4(), "expired", _future(seconds=-5))
        await session_store.create(uuid4(), "live", _future(days=7))

        assert await session_store.sweep_expired() == 1
        assert await session_store.sweep_expired() == 0
        assert await session_store.find_by_token("live") is not None

    async def test_count_active(self, session_store):
        user_id = uuid4()
        await session_store.create(user_id, "t1", _future(days=7))
        await session_store.create(user_id, "t2", _future(days=7))
        await session_store.create(user_id, "t3", _future(seconds=-1))
        await session_store.revoke("t2")
        assert await session_store.count_active() == 1


# ---------------------------------------------------------------------------
# Lists
# ---------------------------------------------------------------------------

class TestInMemoryListStore:
    """Tests for InMemoryListStore."""

    async def test_create_and_find(self, list_store):
        user_id = uuid4()
        created = await list_store.create(user_id, "Groceries", "Weekly shop")
        found = await list_store.find_by_id(created.id)
        assert found.name == "Groceries"
        assert found.description == "Weekly shop"
        assert found.user_id == user_id

    async def test_get_owner_id(self, list_store):
        user_id = uuid4()
        created = await list_store.create(user_id, "Chores")
        assert await list_store.get_owner_id(created.id) == user_id
        assert await list_store.get_owner_id(uuid4()) is None

    async def test_list_by_user_only_returns_own_lists(self, list_store):
        alice, bob = uuid4(), uuid4()
        await list_store.create(alice, "First")
        await list_store.create(bob, "Bob's")
        await list_store.create(alice, "Second")

        names = [l.name for l in await list_store.list_by_user(alice)]
        assert names == ["First", "Second"]

    async def test_delete(self, list_store):
        created = await list_store.create(uuid4(), "Temp")
        assert await list_store.delete(created.id) is True
        assert await list_store.delete(created.id) is False
        assert await list_store.find_by_id(created.id) is None
