from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from .. import handlers
from ..errors import TodoNotFoundError
from ..models import Priority
from ..repositories import Repository, get_repository
from ..schemas import (
    CreateTodoInput,
    DeleteResult,
    DeleteTodoInput,
    FilterTodosInput,
    Todo,
    TodoPatch,
    TodoStats,
    UpdateTodoInput,
)

router = APIRouter(
    prefix="/api/v1/todos",
    tags=["todos"],
)


def _get_repo(repo: Repository = Depends(get_repository)) -> Repository:
    """
    Dependency wrapper for repository to keep signatures clean.
    """
    return repo


# PUBLIC_INTERFACE
@router.post(
    "/",
    response_model=Todo,
    status_code=status.HTTP_201_CREATED,
    summary="Create Todo",
    description="Create a new Todo item and return the created resource.",
    responses={
        201: {"description": "Todo created successfully"},
        422: {"description": "Validation error"},
    },
)
def create_todo(payload: CreateTodoInput, repo: Repository = Depends(_get_repo)) -> Todo:
    """
    Create a new Todo.
    """
    return handlers.create_todo(payload, repo)


# PUBLIC_INTERFACE
@router.get(
    "/",
    response_model=List[Todo],
    summary="List Todos",
    description="List all todos, most recently created first.",
)
def list_todos(repo: Repository = Depends(_get_repo)) -> List[Todo]:
    """
    List all todos.
    """
    return handlers.get_todos(repo)


# PUBLIC_INTERFACE
@router.get(
    "/filter",
    response_model=List[Todo],
    summary="Filter Todos",
    description=(
        "List todos matching every supplied filter, in the same order as List Todos.\n\n"
        "Query parameters:\n"
        "- completed: filter by completion status\n"
        "- priority: filter by priority (Low, Medium, High)\n\n"
        "Omitted parameters impose no constraint."
    ),
    responses={
        200: {"description": "Matching todos"},
        422: {"description": "Invalid query parameters"},
    },
)
def filter_todos(
    completed: Optional[bool] = Query(None, description="Filter by completion status"),
    priority: Optional[Priority] = Query(None, description="Filter by priority"),
    repo: Repository = Depends(_get_repo),
) -> List[Todo]:
    """
    Filter todos by completion status and/or priority.
    """
    return handlers.filter_todos(FilterTodosInput(completed=completed, priority=priority), repo)


# PUBLIC_INTERFACE
@router.get(
    "/stats",
    response_model=TodoStats,
    summary="Todo Stats",
    description="Counts of all, completed, pending and open high-priority todos.",
)
def todo_stats(repo: Repository = Depends(_get_repo)) -> TodoStats:
    """
    Summary counts over all todos.
    """
    return handlers.get_todo_stats(repo)


# PUBLIC_INTERFACE
@router.get(
    "/{todo_id}",
    response_model=Todo,
    summary="Get Todo",
    description="Get a single Todo item by ID.",
    responses={
        200: {"description": "Todo found"},
        404: {"description": "Todo not found"},
    },
)
def get_todo(todo_id: int, repo: Repository = Depends(_get_repo)) -> Todo:
    """
    Retrieve a single Todo item by its ID.
    """
    item = handlers.get_todo_by_id(todo_id, repo)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Todo not found")
    return item


# PUBLIC_INTERFACE
@router.patch(
    "/{todo_id}",
    response_model=Todo,
    summary="Update Todo",
    description=(
        "Partially update fields of a Todo item. Fields left out of the body are unchanged; "
        "nullable fields sent as null are cleared. updated_at is always refreshed."
    ),
    responses={
        200: {"description": "Todo updated"},
        404: {"description": "Todo not found"},
    },
)
def patch_todo(todo_id: int, payload: TodoPatch, repo: Repository = Depends(_get_repo)) -> Todo:
    """
    Partial update of a Todo item.
    """
    # Only keys the client sent are forwarded so that absent and null stay distinct
    update = UpdateTodoInput.model_validate({**payload.changes(), "id": todo_id})
    try:
        return handlers.update_todo(update, repo)
    except TodoNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


# PUBLIC_INTERFACE
@router.delete(
    "/{todo_id}",
    response_model=DeleteResult,
    summary="Delete Todo",
    description=(
        "Delete a Todo item by ID. Both outcomes answer 200: success is false when "
        "there was no such todo."
    ),
    responses={
        200: {"description": "Delete outcome"},
    },
)
def delete_todo(todo_id: int, repo: Repository = Depends(_get_repo)) -> DeleteResult:
    """
    Delete a Todo and report whether it existed.
    """
    return handlers.delete_todo(DeleteTodoInput(id=todo_id), repo)
