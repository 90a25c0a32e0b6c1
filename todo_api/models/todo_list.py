"""To-do list models."""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from todo_api.models.auth import CamelModel


class TodoList(CamelModel):
    """A to-do list owned by exactly one user."""

    id: UUID
    user_id: UUID
    name: str
    description: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class CreateListRequest(CamelModel):
    """Request to create a to-do list for the authenticated user."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
