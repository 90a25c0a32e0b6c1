"""Password hashing and strength policy."""

import asyncio
import string
from dataclasses import dataclass, field

import bcrypt
import structlog

logger = structlog.get_logger(__name__)

MIN_PASSWORD_LENGTH = 8
# bcrypt ignores (or, in recent releases, rejects) input beyond 72 bytes
MAX_PASSWORD_BYTES = 72
SPECIAL_CHARACTERS = frozenset(string.punctuation)


@dataclass(frozen=True)
class PasswordStrength:
    """Outcome of a password policy check.

    Attributes:
        is_valid: True when no rule is violated
        reasons: One message per violated rule, in policy order
    """

    is_valid: bool
    reasons: list[str] = field(default_factory=list)


class PasswordService:
    """bcrypt hashing, constant-time verification and the password policy."""

    def __init__(self, rounds: int = 12):
        self.rounds = rounds

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt with a fresh salt.

        Args:
            password: Plain-text password to hash

        Returns:
            Bcrypt hash string
        """
        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(password.encode("utf-8"), salt)
        return hashed.decode("utf-8")

    def verify_password(self, password: str, password_hash: str) -> bool:
        """Verify a password against a bcrypt hash.

        Never raises on mismatch or on an unusable hash; both return False.

        Args:
            password: Plain-text password to check
            password_hash: Bcrypt hash to verify against

        Returns:
            True if the password matches, False otherwise
        """
        try:
            return bcrypt.checkpw(
                password.encode("utf-8"),
                password_hash.encode("utf-8"),
            )
        except ValueError:
            logger.warning("password_verify_rejected_input")
            return False

    async def hash_password_async(self, password: str) -> str:
        """hash_password, run in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.hash_password, password)

    async def verify_password_async(self, password: str, password_hash: str) -> bool:
        """verify_password, run in the default executor."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None, self.verify_password, password, password_hash
        )

    def check_strength(self, password: str) -> PasswordStrength:
        """Check a password against every policy rule.

        All violated rules are reported, not only the first one.
        """
        reasons = []

        if len(password) < MIN_PASSWORD_LENGTH:
            reasons.append(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            reasons.append(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")
        if not any(c.isascii() and c.isupper() for c in password):
            reasons.append("Password must contain at least one uppercase letter")
        if not any(c.isascii() and c.islower() for c in password):
            reasons.append("Password must contain at least one lowercase letter")
        if not any(c in string.digits for c in password):
            reasons.append("Password must contain at least one number")
        if not any(c in SPECIAL_CHARACTERS for c in password):
            reasons.append("Password must contain at least one special character")

        return PasswordStrength(is_valid=not reasons, reasons=reasons)
