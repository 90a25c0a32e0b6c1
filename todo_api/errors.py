"""Typed errors raised by the auth core and mapped to HTTP responses.

Messages on these errors are shown to API clients and must never contain
credentials, hashes, raw tokens or driver-level details.
"""

from typing import Optional


class ServiceError(Exception):
    """Base class for service-layer errors.

    Each subclass defines the HTTP status it maps to and a stable
    machine-readable error code. ``reasons`` carries every individual
    rule violation when one error reports several (e.g. password policy).
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    default_message: str = "An unexpected error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        error_code: Optional[str] = None,
        reasons: Optional[list[str]] = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if error_code is not None:
            self.error_code = error_code
        self.reasons = list(reasons or [])


class ValidationError(ServiceError):
    """Malformed, missing or out-of-policy input (400)."""

    status_code = 400
    error_code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class UnauthorizedError(ServiceError):
    """Missing, invalid or expired credential (401)."""

    status_code = 401
    error_code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class ForbiddenError(ServiceError):
    """Authenticated, but not entitled to the resource (403)."""

    status_code = 403
    error_code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFoundError(ServiceError):
    """Referenced entity does not exist (404)."""

    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(ServiceError):
    """Uniqueness violation (409)."""

    status_code = 409
    error_code = "CONFLICT"
    default_message = "Resource conflict"
