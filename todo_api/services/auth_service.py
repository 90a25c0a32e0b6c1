"""Authentication service: accounts, login sessions and token rotation."""

from typing import Any, Mapping, Optional
from uuid import UUID

import structlog

from todo_api.errors import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from todo_api.models.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    TokenPair,
    UserResponse,
)
from todo_api.models.user import User
from todo_api.services.password_service import PasswordService
from todo_api.services.token_service import (
    InvalidTokenError,
    TokenExpiredError,
    TokenKind,
    TokenService,
)
from todo_api.services.validators import (
    validate_profile_updates,
    validate_registration,
)
from todo_api.stores.base import AccountStore, SessionStore, normalize_email
from todo_api.stores.errors import DuplicateEmailError

logger = structlog.get_logger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_REFRESH_TOKEN = "Invalid or revoked refresh token"


class AuthService:
    """Registration, login, refresh rotation, logout and profile management.

    The only writer of User and Session records. Session lifecycle per
    login: anonymous -> authenticated -> rotated (any number of times)
    -> revoked.
    """

    def __init__(
        self,
        accounts: AccountStore,
        sessions: SessionStore,
        passwords: PasswordService,
        tokens: TokenService,
    ):
        self.accounts = accounts
        self.sessions = sessions
        self.passwords = passwords
        self.tokens = tokens
        self._dummy_hash: Optional[str] = None

    def _check_password_policy(self, password: str) -> None:
        strength = self.passwords.check_strength(password)
        if not strength.is_valid:
            raise ValidationError(
                "Password does not meet strength requirements",
                reasons=strength.reasons,
            )

    async def register(self, data: RegisterRequest) -> UserResponse:
        """Create a new, active account. No tokens are issued.

        Raises:
            ValidationError: Missing fields, bad email, or weak password
            ConflictError: Email already registered (checked before the
                password policy)
        """
        registration = validate_registration(data)

        if await self.accounts.find_by_email(registration.email) is not None:
            logger.info("registration_rejected_duplicate_email")
            raise ConflictError("User with this email already exists")

        self._check_password_policy(registration.password)

        password_hash = await self.passwords.hash_password_async(registration.password)
        try:
            user = await self.accounts.create(
                email=registration.email,
                password_hash=password_hash,
                first_name=registration.first_name,
                last_name=registration.last_name,
            )
        except DuplicateEmailError:
            # Lost a race with a concurrent registration for the same address
            raise ConflictError("User with this email already exists")

        logger.info("user_registered", user_id=str(user.id))
        return UserResponse.from_user(user)

    async def login(self, data: LoginRequest) -> AuthResponse:
        """Verify credentials and open a new session.

        Unknown email and wrong password produce the identical error.

        Raises:
            UnauthorizedError: Invalid credentials or deactivated account
        """
        user = await self.accounts.find_by_email(normalize_email(data.email))

        if user is None:
            # Spend the same bcrypt time as a real check
            await self.passwords.verify_password_async(
                data.password, await self._get_dummy_hash()
            )
            logger.info("login_failed", reason="unknown_email")
            raise UnauthorizedError(INVALID_CREDENTIALS, error_code="INVALID_CREDENTIALS")

        if not user.is_active:
            logger.info("login_failed", reason="deactivated", user_id=str(user.id))
            raise UnauthorizedError("Account is deactivated", error_code="ACCOUNT_DEACTIVATED")

        if not await self.passwords.verify_password_async(data.password, user.password_hash):
            logger.info("login_failed", reason="bad_password", user_id=str(user.id))
            raise UnauthorizedError(INVALID_CREDENTIALS, error_code="INVALID_CREDENTIALS")

        pair = await self._open_session(user.id)
        user = await self.accounts.update_last_login(user.id) or user

        logger.info("user_logged_in", user_id=str(user.id))
        return AuthResponse(user=UserResponse.from_user(user), **pair.model_dump())

    async def refresh(self, refresh_token: str) -> TokenPair:
        """Exchange a refresh token for a new pair, consuming the old one.

        The old token is revoked before the new one is issued; when two
        requests present the same token concurrently only the one whose
        revoke succeeds proceeds.

        Raises:
            UnauthorizedError: Bad signature, expired, unknown, revoked or
                already-consumed token, or the user is gone/deactivated
        """
        try:
            user_id = self.tokens.verify(refresh_token, TokenKind.REFRESH)
        except TokenExpiredError:
            await self.sessions.revoke(refresh_token)
            raise UnauthorizedError("Refresh token expired", error_code="TOKEN_EXPIRED")
        except InvalidTokenError:
            raise UnauthorizedError("Invalid refresh token", error_code="INVALID_TOKEN")

        session = await self.sessions.find_by_token(refresh_token)
        if session is None or session.user_id != user_id:
            logger.warning("refresh_rejected_unknown_session", user_id=str(user_id))
            raise UnauthorizedError(INVALID_REFRESH_TOKEN, error_code="INVALID_REFRESH_TOKEN")

        if not await self.sessions.revoke(refresh_token):
            logger.warning("refresh_token_reuse_detected", user_id=str(user_id))
            raise UnauthorizedError(INVALID_REFRESH_TOKEN, error_code="INVALID_REFRESH_TOKEN")

        user = await self.accounts.find_by_id(user_id)
        if user is None or not user.is_active:
            logger.warning("refresh_rejected_inactive_user", user_id=str(user_id))
            raise UnauthorizedError("User not found or inactive", error_code="INVALID_REFRESH_TOKEN")

        pair = await self._open_session(user_id)
        logger.info("session_rotated", user_id=str(user_id))
        return pair

    async def logout(self, refresh_token: Optional[str]) -> None:
        """Revoke a refresh token. Unknown or already revoked tokens are a no-op."""
        if not refresh_token:
            return

        revoked = await self.sessions.revoke(refresh_token)
        logger.info("session_revoked", revoked=revoked)

    async def logout_all(self, user_id: UUID) -> int:
        """Revoke every live session of a user.

        Returns:
            Number of sessions revoked
        """
        count = await self.sessions.revoke_all_for_user(user_id)
        logger.info("all_sessions_revoked", user_id=str(user_id), count=count)
        return count

    async def get_user_profile(self, user_id: UUID) -> UserResponse:
        """Raises NotFoundError if the user does not exist."""
        user = await self.accounts.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserResponse.from_user(user)

    async def update_user_profile(
        self, user_id: UUID, updates: Mapping[str, Any]
    ) -> UserResponse:
        """Apply a partial profile update.

        Names are trimmed, a new password is policy-checked and hashed, and
        deactivating the account revokes all of its sessions.

        Raises:
            ValidationError: Immutable/unknown field, bad value, weak password
            NotFoundError: User does not exist
        """
        changes = validate_profile_updates(updates)

        user = await self.accounts.find_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")

        fields: dict[str, Any] = {}
        if changes.first_name is not None:
            fields["first_name"] = changes.first_name
        if changes.last_name is not None:
            fields["last_name"] = changes.last_name
        if changes.password is not None:
            self._check_password_policy(changes.password)
            fields["password_hash"] = await self.passwords.hash_password_async(changes.password)
        if changes.is_active is not None:
            fields["is_active"] = changes.is_active

        if fields:
            updated = await self.accounts.update(user_id, **fields)
            if updated is None:
                raise NotFoundError("User not found")
            user = updated
            logger.info(
                "user_profile_updated",
                user_id=str(user_id),
                fields_updated=sorted(fields),
            )

        if changes.is_active is False:
            await self.logout_all(user_id)

        return UserResponse.from_user(user)

    async def verify_user(self, user_id: UUID) -> User:
        """Resolve an authenticated subject to an existing, active user.

        Raises:
            UnauthorizedError: The user was deleted or deactivated
        """
        user = await self.accounts.find_by_id(user_id)
        if user is None:
            raise UnauthorizedError("User not found", error_code="INVALID_TOKEN")
        if not user.is_active:
            raise UnauthorizedError("User account is deactivated", error_code="ACCOUNT_DEACTIVATED")
        return user

    async def sweep_expired_sessions(self) -> int:
        """Delete expired session records. Safe to run at any time."""
        removed = await self.sessions.sweep_expired()
        if removed:
            logger.info("sessions_swept", removed=removed)
        return removed

    async def _open_session(self, user_id: UUID) -> TokenPair:
        access = self.tokens.issue_access(user_id)
        refresh = self.tokens.issue_refresh(user_id)
        await self.sessions.create(user_id, refresh.token, refresh.expires_at)
        return TokenPair(
            access_token=access.token,
            refresh_token=refresh.token,
            expires_in=int(self.tokens.access_token_ttl.total_seconds()),
        )

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await self.passwords.hash_password_async(
                "timing-equalizer-not-a-password"
            )
        return self._dummy_hash
