"""To-do list endpoints, scoped to the authenticated owner."""

from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Response, status

from todo_api.api.dependencies import get_current_user, get_list_store, get_ownership_guard
from todo_api.errors import NotFoundError
from todo_api.models.todo_list import CreateListRequest, TodoList
from todo_api.models.user import User
from todo_api.services.ownership_guard import OwnershipGuard
from todo_api.stores.base import ListStore

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/lists", tags=["Lists"])


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_list(
    request: CreateListRequest,
    current_user: User = Depends(get_current_user),
    lists: ListStore = Depends(get_list_store),
) -> TodoList:
    todo_list = await lists.create(
        current_user.id, request.name.strip(), request.description
    )
    logger.info("list_created", user_id=str(current_user.id), list_id=str(todo_list.id))
    return todo_list


@router.get("")
async def get_lists(
    current_user: User = Depends(get_current_user),
    lists: ListStore = Depends(get_list_store),
) -> list[TodoList]:
    return await lists.list_by_user(current_user.id)


@router.get("/{list_id}")
async def get_list(
    list_id: UUID,
    current_user: User = Depends(get_current_user),
    lists: ListStore = Depends(get_list_store),
    guard: OwnershipGuard = Depends(get_ownership_guard),
) -> TodoList:
    """Raises 404 if the list does not exist, 403 if it is someone else's."""
    await guard.ensure_owner(current_user.id, lists, list_id, "List")
    todo_list = await lists.find_by_id(list_id)
    if todo_list is None:
        raise NotFoundError("List not found")
    return todo_list


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_list(
    list_id: UUID,
    current_user: User = Depends(get_current_user),
    lists: ListStore = Depends(get_list_store),
    guard: OwnershipGuard = Depends(get_ownership_guard),
) -> Response:
    await guard.ensure_owner(current_user.id, lists, list_id, "List")
    await lists.delete(list_id)
    logger.info("list_deleted", user_id=str(current_user.id), list_id=str(list_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
