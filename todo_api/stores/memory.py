"""In-memory store implementations.

Used for tests and single-process development (DB_CONNECTION=memory).
Each store guards its dict with an RLock so every operation is atomic
even when the app runs handlers on several threads, and hands out
copies so callers can never mutate stored state.
"""

import threading
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from todo_api.models.todo_list import TodoList
from todo_api.models.user import Session, User
from todo_api.stores.base import USER_UPDATABLE_FIELDS, hash_token, normalize_email
from todo_api.stores.errors import DuplicateEmailError, DuplicateTokenError


def _now() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryAccountStore:
    """Dict-backed account store keyed by user id."""

    def __init__(self):
        self._users: dict[UUID, User] = {}
        self._lock = threading.RLock()

    def _find_by_email_locked(self, email: str) -> Optional[User]:
        wanted = normalize_email(email)
        for user in self._users.values():
            if user.email == wanted:
                return user
        return None

    async def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        now = _now()
        with self._lock:
            if self._find_by_email_locked(email) is not None:
                raise DuplicateEmailError(normalize_email(email))

            user = User(
                id=uuid4(),
                email=normalize_email(email),
                password_hash=password_hash,
                first_name=first_name,
                last_name=last_name,
                is_active=True,
                created_at=now,
                updated_at=now,
                last_login_at=None,
            )
            self._users[user.id] = user
            return user.model_copy()

    async def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            user = self._find_by_email_locked(email)
            return user.model_copy() if user else None

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy() if user else None

    async def update(self, user_id: UUID, **changes) -> Optional[User]:
        unknown = set(changes) - USER_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported user fields: {sorted(unknown)}")

        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = user.model_copy(update={**changes, "updated_at": _now()})
            self._users[user_id] = updated
            return updated.model_copy()

    async def update_last_login(self, user_id: UUID) -> Optional[User]:
        now = _now()
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return None
            updated = user.model_copy(update={"last_login_at": now, "updated_at": now})
            self._users[user_id] = updated
            return updated.model_copy()

    async def delete(self, user_id: UUID) -> bool:
        with self._lock:
            return self._users.pop(user_id, None) is not None


class InMemorySessionStore:
    """Dict-backed session store keyed by refresh token hash."""

    def __init__(self):
        self._sessions: dict[str, Session] = {}
        self._lock = threading.RLock()

    async def create(
        self, user_id: UUID, refresh_token: str, expires_at: datetime
    ) -> Session:
        token_hash = hash_token(refresh_token)
        with self._lock:
            if token_hash in self._sessions:
                raise DuplicateTokenError("refresh token already stored")
            session = Session(
                id=uuid4(),
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
                revoked_at=None,
                created_at=_now(),
            )
            self._sessions[token_hash] = session
            return session.model_copy()

    async def find_by_token(self, refresh_token: str) -> Optional[Session]:
        with self._lock:
            session = self._sessions.get(hash_token(refresh_token))
            if session is None or not session.is_live(_now()):
                return None
            return session.model_copy()

    async def revoke(self, refresh_token: str) -> bool:
        token_hash = hash_token(refresh_token)
        with self._lock:
            session = self._sessions.get(token_hash)
            if session is None or session.revoked_at is not None:
                return False
            self._sessions[token_hash] = session.model_copy(update={"revoked_at": _now()})
            return True

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        now = _now()
        revoked = 0
        with self._lock:
            for token_hash, session in self._sessions.items():
                if session.user_id == user_id and session.is_live(now):
                    self._sessions[token_hash] = session.model_copy(update={"revoked_at": now})
                    revoked += 1
        return revoked

    async def sweep_expired(self) -> int:
        now = _now()
        with self._lock:
            expired = [h for h, s in self._sessions.items() if s.expires_at <= now]
            for token_hash in expired:
                del self._sessions[token_hash]
        return len(expired)

    async def count_active(self) -> int:
        now = _now()
        with self._lock:
            return sum(1 for s in self._sessions.values() if s.is_live(now))


class InMemoryListStore:
    """Dict-backed to-do list store."""

    def __init__(self):
        self._lists: dict[UUID, TodoList] = {}
        self._lock = threading.RLock()

    async def create(
        self, user_id: UUID, name: str, description: Optional[str] = None
    ) -> TodoList:
        now = _now()
        todo_list = TodoList(
            id=uuid4(),
            user_id=user_id,
            name=name,
            description=description,
            created_at=now,
            updated_at=now,
        )
        with self._lock:
            self._lists[todo_list.id] = todo_list
        return todo_list.model_copy()

    async def find_by_id(self, list_id: UUID) -> Optional[TodoList]:
        with self._lock:
            todo_list = self._lists.get(list_id)
            return todo_list.model_copy() if todo_list else None

    async def get_owner_id(self, resource_id: UUID) -> Optional[UUID]:
        with self._lock:
            todo_list = self._lists.get(resource_id)
            return todo_list.user_id if todo_list else None

    async def list_by_user(self, user_id: UUID) -> list[TodoList]:
        with self._lock:
            owned = [l for l in self._lists.values() if l.user_id == user_id]
        return [l.model_copy() for l in sorted(owned, key=lambda l: l.created_at)]

    async def delete(self, list_id: UUID) -> bool:
        with self._lock:
            return self._lists.pop(list_id, None) is not None
