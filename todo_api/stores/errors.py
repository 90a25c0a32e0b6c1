"""Storage-layer errors.

Raised by store implementations; the service layer translates them into
typed service errors.
"""


class StoreError(Exception):
    """Base class for storage failures the service layer may handle."""


class DuplicateEmailError(StoreError):
    """An account with the same (case-insensitive) email already exists."""


class DuplicateTokenError(StoreError):
    """A session for the same refresh token value already exists."""
