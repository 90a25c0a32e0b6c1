"""PostgreSQL store implementations backed by an asyncpg pool."""

from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

import asyncpg
import structlog

from todo_api.models.todo_list import TodoList
from todo_api.models.user import Session, User
from todo_api.stores.base import USER_UPDATABLE_FIELDS, hash_token, normalize_email
from todo_api.stores.errors import DuplicateEmailError, DuplicateTokenError

logger = structlog.get_logger(__name__)

USER_COLUMNS = (
    "id, email, password_hash, first_name, last_name, is_active, "
    "created_at, updated_at, last_login_at"
)
SESSION_COLUMNS = "id, user_id, token_hash, expires_at, revoked_at, created_at"
LIST_COLUMNS = "id, user_id, name, description, created_at, updated_at"


def _affected_rows(status: str) -> int:
    """Row count from an asyncpg command status such as 'UPDATE 3'."""
    try:
        return int(status.split()[-1])
    except (AttributeError, IndexError, ValueError):
        return 0


def _row_to_user(row) -> User:
    return User(
        id=row["id"],
        email=row["email"],
        password_hash=row["password_hash"],
        first_name=row["first_name"],
        last_name=row["last_name"],
        is_active=row["is_active"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        last_login_at=row["last_login_at"],
    )


def _row_to_session(row) -> Session:
    return Session(
        id=row["id"],
        user_id=row["user_id"],
        token_hash=row["token_hash"],
        expires_at=row["expires_at"],
        revoked_at=row["revoked_at"],
        created_at=row["created_at"],
    )


def _row_to_list(row) -> TodoList:
    return TodoList(
        id=row["id"],
        user_id=row["user_id"],
        name=row["name"],
        description=row["description"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PostgresAccountStore:
    """Account store over the ``users`` table.

    Email uniqueness is enforced by a unique index on LOWER(email).
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> User:
        user_id = uuid4()
        now = datetime.now(timezone.utc)

        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO users (id, email, password_hash, first_name, last_name,
                                       is_active, created_at, updated_at, last_login_at)
                    VALUES ($1, $2, $3, $4, $5, TRUE, $6, $7, NULL)
                    RETURNING {USER_COLUMNS}
                    """,
                    user_id,
                    normalize_email(email),
                    password_hash,
                    first_name,
                    last_name,
                    now,
                    now,
                )
        except asyncpg.UniqueViolationError:
            raise DuplicateEmailError(normalize_email(email))

        logger.info("user_row_created", user_id=str(user_id))
        return _row_to_user(row)

    async def find_by_email(self, email: str) -> Optional[User]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {USER_COLUMNS}
                FROM users
                WHERE LOWER(email) = LOWER($1)
                """,
                email.strip(),
            )
        return _row_to_user(row) if row else None

    async def find_by_id(self, user_id: UUID) -> Optional[User]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {USER_COLUMNS} FROM users WHERE id = $1",
                user_id,
            )
        return _row_to_user(row) if row else None

    async def update(self, user_id: UUID, **changes) -> Optional[User]:
        """Update the given columns and stamp updated_at.

        Only first_name, last_name, password_hash and is_active can be
        changed here; identity columns are immutable.
        """
        unknown = set(changes) - USER_UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unsupported user fields: {sorted(unknown)}")

        if not changes:
            return await self.find_by_id(user_id)

        # Build SET clause from a fixed column whitelist
        set_clauses = []
        params = []
        for column, value in changes.items():
            params.append(value)
            set_clauses.append(f"{column} = ${len(params)}")

        params.append(datetime.now(timezone.utc))
        set_clauses.append(f"updated_at = ${len(params)}")

        params.append(user_id)
        query = f"""
            UPDATE users
            SET {', '.join(set_clauses)}
            WHERE id = ${len(params)}
            RETURNING {USER_COLUMNS}
        """

        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *params)

        if row is None:
            return None

        logger.info("user_row_updated", user_id=str(user_id), fields=sorted(changes))
        return _row_to_user(row)

    async def update_last_login(self, user_id: UUID) -> Optional[User]:
        now = datetime.now(timezone.utc)
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                UPDATE users
                SET last_login_at = $1, updated_at = $1
                WHERE id = $2
                RETURNING {USER_COLUMNS}
                """,
                now,
                user_id,
            )
        return _row_to_user(row) if row else None

    async def delete(self, user_id: UUID) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute("DELETE FROM users WHERE id = $1", user_id)

        deleted = _affected_rows(result) == 1
        if deleted:
            logger.info("user_row_deleted", user_id=str(user_id))
        return deleted


class PostgresSessionStore:
    """Session store over the ``sessions`` table.

    Revocation sets revoked_at; rows leave the table only when swept
    after expiry.
    """

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def create(
        self, user_id: UUID, refresh_token: str, expires_at: datetime
    ) -> Session:
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(
                    f"""
                    INSERT INTO sessions (id, user_id, token_hash, expires_at, created_at)
                    VALUES ($1, $2, $3, $4, $5)
                    RETURNING {SESSION_COLUMNS}
                    """,
                    uuid4(),
                    user_id,
                    hash_token(refresh_token),
                    expires_at,
                    datetime.now(timezone.utc),
                )
        except asyncpg.UniqueViolationError:
            raise DuplicateTokenError("refresh token already stored")

        return _row_to_session(row)

    async def find_by_token(self, refresh_token: str) -> Optional[Session]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                SELECT {SESSION_COLUMNS}
                FROM sessions
                WHERE token_hash = $1 AND revoked_at IS NULL AND expires_at > $2
                """,
                hash_token(refresh_token),
                datetime.now(timezone.utc),
            )
        return _row_to_session(row) if row else None

    async def revoke(self, refresh_token: str) -> bool:
        # Row lock + WHERE re-check means only one concurrent caller sees UPDATE 1
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE sessions
                SET revoked_at = $1
                WHERE token_hash = $2 AND revoked_at IS NULL
                """,
                datetime.now(timezone.utc),
                hash_token(refresh_token),
            )
        return _affected_rows(result) == 1

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                """
                UPDATE sessions
                SET revoked_at = $1
                WHERE user_id = $2 AND revoked_at IS NULL AND expires_at > $1
                """,
                datetime.now(timezone.utc),
                user_id,
            )
        return _affected_rows(result)

    async def sweep_expired(self) -> int:
        async with self.pool.acquire() as conn:
            result = await conn.execute(
                "DELETE FROM sessions WHERE expires_at <= $1",
                datetime.now(timezone.utc),
            )
        return _affected_rows(result)

    async def count_active(self) -> int:
        async with self.pool.acquire() as conn:
            count = await conn.fetchval(
                """
                SELECT COUNT(*) FROM sessions
                WHERE revoked_at IS NULL AND expires_at > $1
                """,
                datetime.now(timezone.utc),
            )
        return count or 0


class PostgresListStore:
    """To-do list store over the ``todo_lists`` table."""

    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def create(
        self, user_id: UUID, name: str, description: Optional[str] = None
    ) -> TodoList:
        now = datetime.now(timezone.utc)
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"""
                INSERT INTO todo_lists (id, user_id, name, description, created_at, updated_at)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING {LIST_COLUMNS}
                """,
                uuid4(),
                user_id,
                name,
                description,
                now,
                now,
            )
        return _row_to_list(row)

    async def find_by_id(self, list_id: UUID) -> Optional[TodoList]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                f"SELECT {LIST_COLUMNS} FROM todo_lists WHERE id = $1",
                list_id,
            )
        return _row_to_list(row) if row else None

    async def get_owner_id(self, resource_id: UUID) -> Optional[UUID]:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT user_id FROM todo_lists WHERE id = $1",
                resource_id,
            )

    async def list_by_user(self, user_id: UUID) -> list[TodoList]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                f"""
                SELECT {LIST_COLUMNS}
                FROM todo_lists
                WHERE user_id = $1
                ORDER BY created_at ASC
                """,
                user_id,
            )
        return [_row_to_list(row) for row in rows]

    async def delete(self, list_id: UUID) -> bool:
        async with self.pool.acquire() as conn:
            result = await conn.execute("DELETE FROM todo_lists WHERE id = $1", list_id)
        return _affected_rows(result) == 1
