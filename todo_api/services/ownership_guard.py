"""Bearer token authorization and resource ownership checks."""

from typing import Optional
from uuid import UUID

import structlog

from todo_api.errors import ForbiddenError, NotFoundError, UnauthorizedError
from todo_api.services.token_service import (
    InvalidTokenError,
    TokenExpiredError,
    TokenKind,
    TokenService,
)
from todo_api.stores.base import ResourceOwnerResolver

logger = structlog.get_logger(__name__)


class OwnershipGuard:
    """Ties a bearer access token to the resources its user may touch.

    An unusable token means "who are you?" and raises UnauthorizedError;
    a valid token for the wrong owner raises ForbiddenError.
    """

    def __init__(self, tokens: TokenService):
        self.tokens = tokens

    def authorize(self, token: Optional[str]) -> UUID:
        """Verify an access token and return its subject user id.

        Raises:
            UnauthorizedError: Token missing, expired, or otherwise invalid
        """
        if not token:
            raise UnauthorizedError("Access token missing", error_code="TOKEN_MISSING")

        try:
            return self.tokens.verify(token, TokenKind.ACCESS)
        except TokenExpiredError:
            raise UnauthorizedError("Access token expired", error_code="TOKEN_EXPIRED")
        except InvalidTokenError:
            raise UnauthorizedError("Invalid access token", error_code="INVALID_TOKEN")

    def check_ownership(self, subject_id: UUID, resource_owner_id: UUID) -> None:
        """Raises ForbiddenError unless the subject owns the resource."""
        if subject_id != resource_owner_id:
            logger.warning(
                "ownership_check_failed",
                user_id=str(subject_id),
                owner_id=str(resource_owner_id),
            )
            raise ForbiddenError("You do not have access to this resource")

    async def ensure_owner(
        self,
        subject_id: UUID,
        resolver: ResourceOwnerResolver,
        resource_id: UUID,
        resource_name: str = "Resource",
    ) -> None:
        """Look up a resource's owner via its collaborator and compare.

        Raises:
            NotFoundError: The resource does not exist
            ForbiddenError: It belongs to another user
        """
        owner_id = await resolver.get_owner_id(resource_id)
        if owner_id is None:
            raise NotFoundError(f"{resource_name} not found")
        self.check_ownership(subject_id, owner_id)
