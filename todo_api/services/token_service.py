"""JWT issuance and verification for access and refresh tokens."""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from uuid import UUID

import jwt
import structlog

from todo_api.config import Settings

logger = structlog.get_logger(__name__)

JWT_ALGORITHM = "HS256"
REQUIRED_CLAIMS = ["sub", "type", "iat", "exp", "iss", "aud", "jti"]


class TokenKind(str, Enum):
    ACCESS = "access"
    REFRESH = "refresh"


class TokenError(Exception):
    """Base class for token verification failures."""


class InvalidTokenError(TokenError):
    """Malformed token, bad signature, bad claims or wrong token kind."""


class TokenExpiredError(TokenError):
    """Signature is valid but the token is past its expiry."""


@dataclass(frozen=True)
class IssuedToken:
    token: str
    expires_at: datetime


class TokenService:
    """Signs and verifies self-contained JWTs.

    Access and refresh tokens are signed with separate keys, so a token of
    one kind never verifies as the other even before the ``type`` claim is
    compared.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self._secrets = {
            TokenKind.ACCESS: settings.jwt_access_token_secret,
            TokenKind.REFRESH: settings.jwt_refresh_token_secret,
        }
        self._ttls = {
            TokenKind.ACCESS: settings.access_token_ttl,
            TokenKind.REFRESH: settings.refresh_token_ttl,
        }

    @property
    def access_token_ttl(self) -> timedelta:
        return self._ttls[TokenKind.ACCESS]

    @property
    def refresh_token_ttl(self) -> timedelta:
        return self._ttls[TokenKind.REFRESH]

    def issue_access(self, subject_id: UUID | str) -> IssuedToken:
        """Create a signed short-lived access token for a user."""
        return self._issue(subject_id, TokenKind.ACCESS)

    def issue_refresh(self, subject_id: UUID | str) -> IssuedToken:
        """Create a signed long-lived refresh token for a user."""
        return self._issue(subject_id, TokenKind.REFRESH)

    def _issue(self, subject_id: UUID | str, kind: TokenKind) -> IssuedToken:
        now = datetime.now(timezone.utc)
        expires_at = now + self._ttls[kind]
        payload = {
            "sub": str(subject_id),
            "type": kind.value,
            "iat": now,
            "exp": expires_at,
            "iss": self.settings.jwt_issuer,
            "aud": self.settings.jwt_audience,
            "jti": secrets.token_hex(16),
        }
        token = jwt.encode(payload, self._secrets[kind], algorithm=JWT_ALGORITHM)
        logger.debug(
            "token_issued",
            user_id=str(subject_id),
            kind=kind.value,
            expires_at=expires_at.isoformat(),
        )
        # Truncate to whole seconds to match the encoded exp claim
        return IssuedToken(token=token, expires_at=expires_at.replace(microsecond=0))

    def verify(self, token: str, expected_kind: TokenKind) -> UUID:
        """Verify a token and return its subject user id.

        Args:
            token: Encoded JWT string
            expected_kind: Kind the caller requires

        Returns:
            The user id from the ``sub`` claim

        Raises:
            TokenExpiredError: If the signature is valid but the token expired
            InvalidTokenError: For any other verification failure, including
                a token of the wrong kind
        """
        try:
            payload = jwt.decode(
                token,
                self._secrets[expected_kind],
                algorithms=[JWT_ALGORITHM],
                audience=self.settings.jwt_audience,
                issuer=self.settings.jwt_issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpiredError(f"{expected_kind.value} token has expired")
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError(f"Invalid {expected_kind.value} token: {e}")

        if payload.get("type") != expected_kind.value:
            raise InvalidTokenError(
                f"Expected a {expected_kind.value} token, got {payload.get('type')!r}"
            )

        try:
            return UUID(payload["sub"])
        except (TypeError, ValueError):
            raise InvalidTokenError("Token subject is not a valid user id")
