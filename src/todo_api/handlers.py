"""
Todo handlers.

Each handler validates its input, performs one store interaction and returns
normalized ``Todo`` objects. Inputs may be given as the schema model or as a
plain mapping; for updates, key presence in the mapping decides whether a
field is left alone or cleared.

Store errors are logged and re-raised unchanged.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional, Union

from .errors import TodoNotFoundError
from .models import Priority, TodoEntity
from .repositories import Repository, TodoQuery
from .schemas import (
    CreateTodoInput,
    DeleteResult,
    DeleteTodoInput,
    FilterTodosInput,
    Todo,
    TodoStats,
    UpdateTodoInput,
)

logger = logging.getLogger(__name__)


@contextmanager
def _store_call(action: str) -> Iterator[None]:
    try:
        yield
    except Exception:
        logger.exception("%s failed", action)
        raise


def _to_todo(entity: TodoEntity) -> Todo:
    return Todo.model_validate(entity)


def _list(repo: Repository, query: TodoQuery, action: str) -> List[Todo]:
    with _store_call(action):
        rows = repo.list(query)
    return [_to_todo(row) for row in rows]


# PUBLIC_INTERFACE
def create_todo(data: Union[CreateTodoInput, Mapping[str, Any]], repo: Repository) -> Todo:
    """Create a new, not yet completed todo and return it."""
    payload = CreateTodoInput.model_validate(data)
    with _store_call("Todo creation"):
        entity = repo.create(
            title=payload.title,
            description=payload.description,
            due_date=payload.due_date,
            priority=payload.priority,
        )
    todo = _to_todo(entity)
    logger.info("Created todo %s", todo.id)
    return todo


# PUBLIC_INTERFACE
def get_todos(repo: Repository) -> List[Todo]:
    """Return every todo, newest first (created_at desc, then id desc)."""
    todos = _list(repo, TodoQuery(), "Fetching todos")
    logger.debug("Fetched %d todos", len(todos))
    return todos


# PUBLIC_INTERFACE
def get_todo_by_id(todo_id: int, repo: Repository) -> Optional[Todo]:
    """Return the todo with ``todo_id``, or None when there is no such row."""
    with _store_call(f"Fetching todo {todo_id}"):
        entity = repo.get(todo_id)
    if entity is None:
        logger.debug("Todo %s not found", todo_id)
        return None
    return _to_todo(entity)


# PUBLIC_INTERFACE
def filter_todos(
    data: Union[FilterTodosInput, Mapping[str, Any], None], repo: Repository
) -> List[Todo]:
    """
    Return todos matching all supplied constraints, in the same order as get_todos.
    With no constraints this is get_todos.
    """
    payload = FilterTodosInput.model_validate(data or {})
    query = TodoQuery(completed=payload.completed, priority=payload.priority)
    todos = _list(repo, query, "Filtering todos")
    logger.debug("Filter %s matched %d todos", query, len(todos))
    return todos


# PUBLIC_INTERFACE
def update_todo(data: Union[UpdateTodoInput, Mapping[str, Any]], repo: Repository) -> Todo:
    """
    Apply the supplied fields to an existing todo and refresh its updated_at.

    Raises:
        TodoNotFoundError: no todo has the given id; nothing is written.
    """
    payload = UpdateTodoInput.model_validate(data)
    changes = payload.changes()
    with _store_call(f"Updating todo {payload.id}"):
        entity = repo.update(payload.id, changes)
    if entity is None:
        logger.info("Update of missing todo %s rejected", payload.id)
        raise TodoNotFoundError(payload.id)
    logger.info("Updated todo %s (fields: %s)", payload.id, ", ".join(sorted(changes)) or "none")
    return _to_todo(entity)


# PUBLIC_INTERFACE
def delete_todo(data: Union[DeleteTodoInput, Mapping[str, Any]], repo: Repository) -> DeleteResult:
    """Delete a todo. A missing id is reported in the result, not raised."""
    payload = DeleteTodoInput.model_validate(data)
    with _store_call(f"Deleting todo {payload.id}"):
        deleted = repo.delete(payload.id)
    if not deleted:
        logger.info("Delete of missing todo %s", payload.id)
        return DeleteResult(success=False, message=f"Todo with ID {payload.id} not found")
    logger.info("Deleted todo %s", payload.id)
    return DeleteResult(success=True, message=f"Todo with ID {payload.id} deleted successfully")


# PUBLIC_INTERFACE
def get_todo_stats(repo: Repository) -> TodoStats:
    """Summarize all todos: totals, completion and open high-priority count."""
    todos = _list(repo, TodoQuery(), "Computing todo stats")
    completed = sum(1 for t in todos if t.completed)
    return TodoStats(
        total=len(todos),
        completed=completed,
        pending=len(todos) - completed,
        high_priority=sum(1 for t in todos if t.priority == Priority.HIGH and not t.completed),
    )
